"""Pydantic schemas for mp_escrow API."""

from pydantic import BaseModel, Field

from src.mp_booking.application.schemas import BookingOut
from src.mp_escrow.domain.models import EscrowConfirmation, EscrowReservation


class EscrowActionRequest(BaseModel):
    booking_id: int = Field(..., gt=0)


class ConfirmReservationRequest(BaseModel):
    booking_id: int = Field(..., gt=0)
    session_id: str | None = None


class EscrowReserveResponse(BaseModel):
    checkout_url: str | None
    booking: BookingOut

    @classmethod
    def from_domain(cls, r: EscrowReservation) -> "EscrowReserveResponse":
        return cls(checkout_url=r.checkout_url, booking=BookingOut.from_domain(r.booking))


class EscrowConfirmResponse(BaseModel):
    ready: bool
    escrow_status: str
    message: str
    booking: BookingOut

    @classmethod
    def from_domain(cls, c: EscrowConfirmation) -> "EscrowConfirmResponse":
        return cls(
            ready=c.ready,
            escrow_status=c.booking.escrow_status,
            message=c.message,
            booking=BookingOut.from_domain(c.booking),
        )
