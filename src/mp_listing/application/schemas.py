"""Pydantic schemas for mp_listing API."""

from typing import Literal

from pydantic import BaseModel, Field

from src.mp_common.cents import cents_to_display
from src.mp_common.datetime_utils import isoformat_or_none
from src.mp_common.enums import PaymentStructure, PostType, Tier
from src.mp_listing.domain.models import Application, Post

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreatePostRequest(BaseModel):
    post_type: PostType = PostType.GIG
    title: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., min_length=1)
    tier: Tier = Tier.SLOTS
    pay_cents: int = Field(..., ge=0)
    promoter_name: str = Field(..., min_length=1, max_length=120)
    nsfw: bool = False
    boost_level: str = "None"
    payment_structure: PaymentStructure = PaymentStructure.FULL_UPFRONT
    venue: str | None = None
    address: str | None = None
    full_address: str | None = None
    date: str | None = None
    description: str | None = None


class ApplyRequest(BaseModel):
    post_id: int = Field(..., gt=0)


class RespondRequest(BaseModel):
    status: Literal["accepted", "rejected"]
    poster_response: str | None = Field(None, max_length=2000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PostOut(BaseModel):
    id: int
    user_id: str
    post_type: str
    title: str
    category: str
    tier: str
    pay_cents: int
    pay_display: str
    promoter_name: str
    nsfw: bool
    boost_level: str
    boost_expires_at: str | None
    verified: bool
    payment_structure: str
    venue: str | None
    address: str | None
    full_address: str | None
    date: str | None
    description: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, p: Post, show_full_address: bool = False) -> "PostOut":
        return cls(
            id=p.id,
            user_id=p.user_id,
            post_type=p.post_type,
            title=p.title,
            category=p.category,
            tier=p.tier,
            pay_cents=p.pay,
            pay_display=cents_to_display(p.pay),
            promoter_name=p.promoter_name,
            nsfw=p.nsfw,
            boost_level=p.boost_level,
            boost_expires_at=isoformat_or_none(p.boost_expires_at),
            verified=p.verified,
            payment_structure=p.payment_structure,
            venue=p.venue,
            address=p.address,
            full_address=p.full_address if show_full_address else None,
            date=p.date,
            description=p.description,
            created_at=isoformat_or_none(p.created_at),
        )


class ApplicationOut(BaseModel):
    id: int
    post_id: int
    applicant_id: str
    status: str
    poster_response: str | None
    created_at: str | None
    responded_at: str | None

    @classmethod
    def from_domain(cls, a: Application) -> "ApplicationOut":
        return cls(
            id=a.id,
            post_id=a.post_id,
            applicant_id=a.applicant_id,
            status=a.status,
            poster_response=a.poster_response,
            created_at=isoformat_or_none(a.created_at),
            responded_at=isoformat_or_none(a.responded_at),
        )
