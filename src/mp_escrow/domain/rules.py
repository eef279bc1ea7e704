"""Escrow preconditions — checked against the locked booking row."""

from src.mp_booking.domain.models import Booking
from src.mp_common.enums import BookingStatus, EscrowStatus
from src.mp_booking.domain.state_machine import ensure_not_terminal
from src.mp_common.errors import InvalidStateTransitionError


def check_reserve(booking: Booking) -> None:
    if booking.status != BookingStatus.PENDING_PAYMENT:
        raise InvalidStateTransitionError(
            f"Booking {booking.id} is not awaiting payment (status {booking.status})"
        )
    if booking.escrow_status == EscrowStatus.AUTHORIZED:
        raise InvalidStateTransitionError("Payment already reserved in escrow")


def check_confirm(booking: Booking) -> None:
    if booking.escrow_status != EscrowStatus.NONE:
        raise InvalidStateTransitionError(
            f"Escrow for booking {booking.id} is {booking.escrow_status}; nothing to confirm"
        )
    if booking.status != BookingStatus.PENDING_PAYMENT:
        raise InvalidStateTransitionError(
            f"Booking {booking.id} is not awaiting payment (status {booking.status})"
        )


def check_held(booking: Booking, action: str) -> str:
    """Release and cancel both need an authorized hold; returns its intent id."""
    ensure_not_terminal(booking, f"{action} escrow")
    if booking.escrow_status != EscrowStatus.AUTHORIZED:
        raise InvalidStateTransitionError(f"No authorized escrow to {action}")
    if not booking.provider_payment_intent_id:
        raise InvalidStateTransitionError("No payment intent found")
    return booking.provider_payment_intent_id
