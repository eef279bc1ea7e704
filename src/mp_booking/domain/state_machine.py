"""Booking status derivation and transition guards — pure functions.

Split bookings never have their status written directly by an installment
action. The installment column is written first, then derive_status() runs on
the row as it reads after that write:

    deposit   final      -> status
    paid      paid          confirmed
    paid      pending       deposit_paid
    submitted *             payment_submitted
    *         submitted     payment_submitted
    otherwise               unchanged (None)
"""

from src.mp_booking.domain.models import Booking
from src.mp_common.enums import BookingStatus, EscrowStatus, Installment, InstallmentStatus
from src.mp_common.errors import InvalidStateTransitionError

_PAID = InstallmentStatus.PAID.value
_PENDING = InstallmentStatus.PENDING.value
_SUBMITTED = InstallmentStatus.SUBMITTED.value


def derive_status(deposit_status: str | None, final_status: str | None) -> BookingStatus | None:
    if deposit_status == _PAID and final_status == _PAID:
        return BookingStatus.CONFIRMED
    if deposit_status == _PAID and final_status == _PENDING:
        return BookingStatus.DEPOSIT_PAID
    if _SUBMITTED in (deposit_status, final_status):
        return BookingStatus.PAYMENT_SUBMITTED
    return None


def ensure_not_terminal(booking: Booking, action: str) -> None:
    if booking.is_terminal:
        raise InvalidStateTransitionError(
            f"Cannot {action}: booking {booking.id} is already {booking.status}"
        )


def ensure_no_escrow_hold(booking: Booking, action: str) -> None:
    """An authorized hold settles only through the escrow release or cancel."""
    if booking.escrow_status == EscrowStatus.AUTHORIZED:
        raise InvalidStateTransitionError(
            f"Cannot {action}: funds for booking {booking.id} are held in escrow"
        )


def check_installment_write(booking: Booking, which: str, status: str) -> None:
    """Reject installment writes the lifecycle does not allow.

    - bookings with an escrow hold settle through the escrow
    - only split bookings have installments
    - the final installment cannot move before the deposit is paid
    - a paid installment is never rewritten
    """
    ensure_not_terminal(booking, f"update the {which} installment")
    ensure_no_escrow_hold(booking, f"update the {which} installment")
    if not booking.is_split:
        raise InvalidStateTransitionError(
            f"Booking {booking.id} is {booking.payment_structure}; it has no installments"
        )
    if which not in (Installment.DEPOSIT.value, Installment.FINAL.value):
        raise InvalidStateTransitionError(f"Unknown installment: {which}")
    if status not in (_SUBMITTED, _PAID):
        raise InvalidStateTransitionError(f"Installments can only be submitted or paid, not {status}")

    current = booking.deposit_status if which == Installment.DEPOSIT else booking.final_status
    if current == _PAID:
        raise InvalidStateTransitionError(f"The {which} installment is already paid")
    if which == Installment.FINAL and booking.deposit_status != _PAID:
        raise InvalidStateTransitionError(
            "Deposit must be confirmed before paying the final installment"
        )


def check_cancel(booking: Booking) -> None:
    ensure_not_terminal(booking, "cancel")
    if booking.escrow_status == EscrowStatus.AUTHORIZED:
        raise InvalidStateTransitionError(
            "Funds are held in escrow; cancel the escrow to cancel this booking"
        )
