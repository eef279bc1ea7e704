"""Domain models for mp_booking — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.mp_common.enums import (
    TERMINAL_BOOKING_STATUSES,
    BookingStatus,
    EscrowStatus,
    PaymentMethod,
    PaymentStructure,
)


@dataclass
class Booking:
    id: int
    buyer_uid: str
    tier: str
    base_pay: int                    # cents
    platform_fee: int                # cents, tier fee
    boost: str
    boost_fee: int                   # cents
    total_amount: int                # cents
    status: str                      # BookingStatus value
    payment_structure: str           # PaymentStructure value
    post_id: int | None = None
    worker_slug: str | None = None
    deposit_amount: int | None = None
    final_amount: int | None = None
    deposit_status: str | None = None
    final_status: str | None = None
    payment_method: str = PaymentMethod.EXTERNAL.value
    escrow_status: str = EscrowStatus.NONE.value
    provider_session_id: str | None = None
    provider_payment_intent_id: str | None = None
    deposit_session_id: str | None = None
    final_session_id: str | None = None
    escrow_authorized_at: datetime | None = None
    escrow_captured_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_split(self) -> bool:
        return self.payment_structure == PaymentStructure.SPLIT_50_50

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BOOKING_STATUSES


@dataclass(frozen=True)
class NewBooking:
    """Values for a booking row about to be inserted."""

    buyer_uid: str
    tier: str
    base_pay: int
    platform_fee: int
    boost: str
    boost_fee: int
    total_amount: int
    payment_structure: str
    post_id: int | None = None
    worker_slug: str | None = None
    deposit_amount: int | None = None
    final_amount: int | None = None
    deposit_status: str | None = None
    final_status: str | None = None
