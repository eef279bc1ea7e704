"""Pydantic schemas for credit purchases."""

from pydantic import BaseModel, Field


class CreditCheckoutRequest(BaseModel):
    credits: int = Field(..., gt=0, description="Credit package size from the catalog")


class CreditCheckoutResponse(BaseModel):
    session_id: str
    url: str | None


class FulfillCreditsRequest(BaseModel):
    session_id: str = Field(..., min_length=1)


class FulfillCreditsResponse(BaseModel):
    credits_added: int
    balance: int
