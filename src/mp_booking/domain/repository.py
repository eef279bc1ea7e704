"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_booking.domain.models import Booking, NewBooking


class BookingRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, booking: NewBooking) -> Booking: ...

    async def get(self, db: AsyncSession, booking_id: int) -> Booking | None: ...

    async def get_for_update(self, db: AsyncSession, booking_id: int) -> Booking | None: ...

    async def update_installment(
        self,
        db: AsyncSession,
        booking_id: int,
        which: str,
        status: str,
        session_id: str | None = None,
    ) -> Booking: ...

    async def update_status(self, db: AsyncSession, booking_id: int, status: str) -> Booking: ...

    async def update_provider_info(
        self,
        db: AsyncSession,
        booking_id: int,
        session_id: str | None = None,
        payment_intent_id: str | None = None,
        payment_method: str | None = None,
    ) -> Booking: ...

    async def update_escrow(self, db: AsyncSession, booking_id: int, escrow_status: str) -> Booking: ...

    async def list_by_buyer(self, db: AsyncSession, buyer_uid: str) -> list[Booking]: ...

    async def list_all(self, db: AsyncSession, limit: int, offset: int) -> list[Booking]: ...
