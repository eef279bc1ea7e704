"""Escrow action results."""

from dataclasses import dataclass

from src.mp_booking.domain.models import Booking


@dataclass(frozen=True)
class EscrowReservation:
    booking: Booking
    checkout_url: str | None


@dataclass(frozen=True)
class EscrowConfirmation:
    booking: Booking
    ready: bool
    message: str
