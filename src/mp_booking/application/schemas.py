"""Pydantic schemas for mp_booking API."""

from pydantic import BaseModel, Field

from src.mp_booking.domain.models import Booking
from src.mp_common.cents import cents_to_display
from src.mp_common.datetime_utils import isoformat_or_none
from src.mp_common.enums import Installment, PaymentStructure, Tier

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateBookingRequest(BaseModel):
    tier: Tier
    base_pay_cents: int = Field(..., ge=0, description="Talent's base pay in cents")
    boost: str = "None"
    payment_structure: PaymentStructure = PaymentStructure.FULL_UPFRONT
    post_id: int | None = None
    worker_slug: str | None = Field(None, max_length=128)


class InstallmentRequest(BaseModel):
    installment: Installment | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingOut(BaseModel):
    id: int
    buyer_uid: str
    post_id: int | None
    worker_slug: str | None
    tier: str
    base_pay_cents: int
    platform_fee_cents: int
    boost: str
    boost_fee_cents: int
    total_amount_cents: int
    total_amount_display: str
    status: str
    payment_structure: str
    deposit_amount_cents: int | None
    final_amount_cents: int | None
    deposit_status: str | None
    final_status: str | None
    payment_method: str
    escrow_status: str
    escrow_authorized_at: str | None
    escrow_captured_at: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, b: Booking) -> "BookingOut":
        return cls(
            id=b.id,
            buyer_uid=b.buyer_uid,
            post_id=b.post_id,
            worker_slug=b.worker_slug,
            tier=b.tier,
            base_pay_cents=b.base_pay,
            platform_fee_cents=b.platform_fee,
            boost=b.boost,
            boost_fee_cents=b.boost_fee,
            total_amount_cents=b.total_amount,
            total_amount_display=cents_to_display(b.total_amount),
            status=b.status,
            payment_structure=b.payment_structure,
            deposit_amount_cents=b.deposit_amount,
            final_amount_cents=b.final_amount,
            deposit_status=b.deposit_status,
            final_status=b.final_status,
            payment_method=b.payment_method,
            escrow_status=b.escrow_status,
            escrow_authorized_at=isoformat_or_none(b.escrow_authorized_at),
            escrow_captured_at=isoformat_or_none(b.escrow_captured_at),
            created_at=isoformat_or_none(b.created_at),
            updated_at=isoformat_or_none(b.updated_at),
        )


class PaymentInfoOut(BaseModel):
    cash_app_handle: str | None
