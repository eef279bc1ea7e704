"""EscrowController — manual-capture holds layered on a booking.

    escrow_status:  none --reserve+confirm--> authorized --release--> captured
                                                   \\--cancel---> cancelled

Each action locks the booking row, checks the caller (buyer or admin) and the
escrow preconditions, calls the payment provider, and only then writes. A
provider failure raises ExternalProviderError before any write, so the
caller's transaction rolls back with the booking unchanged.

The buyer may release funds on their own, same as an admin.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mp_booking.application.service import BookingApplicationService
from src.mp_booking.domain.models import Booking
from src.mp_common.enums import BookingStatus, EscrowStatus, PaymentMethod
from src.mp_common.errors import ForbiddenError, ValidationFailedError
from src.mp_escrow.domain import rules
from src.mp_escrow.domain.models import EscrowConfirmation, EscrowReservation
from src.mp_gateway.auth.identity import Identity
from src.mp_gateway.auth.policy import can_act_on_booking
from src.mp_payments.domain.provider import PaymentProviderProtocol
from src.mp_payments.infrastructure.stripe_provider import get_payment_provider

logger = logging.getLogger(__name__)


class EscrowController:
    def __init__(
        self,
        bookings: BookingApplicationService | None = None,
        provider: PaymentProviderProtocol | None = None,
        app_url: str | None = None,
    ) -> None:
        self._bookings = bookings or BookingApplicationService()
        self._provider = provider
        self._app_url = (app_url or settings.APP_URL).rstrip("/")

    @property
    def provider(self) -> PaymentProviderProtocol:
        return self._provider or get_payment_provider()

    async def _lock_for(self, db: AsyncSession, actor: Identity, booking_id: int) -> Booking:
        booking = await self._bookings.lock(db, booking_id)
        if not can_act_on_booking(self._bookings.policy, actor, booking.buyer_uid):
            raise ForbiddenError("Only the buyer or an admin can manage this escrow")
        return booking

    async def reserve(self, db: AsyncSession, actor: Identity, booking_id: int) -> EscrowReservation:
        booking = await self._lock_for(db, actor, booking_id)
        rules.check_reserve(booking)

        slug = booking.worker_slug or ""
        session = await self.provider.create_checkout_session(
            amount_cents=booking.total_amount,
            product_name=f"Escrow Reservation - Booking #{booking.id}",
            description="Funds held until gig completion",
            capture_method="manual",
            metadata={
                "bookingId": str(booking.id),
                "buyerUid": booking.buyer_uid,
                "workerSlug": slug,
                "type": "escrow",
            },
            success_url=(
                f"{self._app_url}/profiles/{slug}?escrow=success"
                f"&bookingId={booking.id}&session_id={{CHECKOUT_SESSION_ID}}"
            ),
            cancel_url=f"{self._app_url}/profiles/{slug}?escrow=cancelled",
        )
        updated = await self._bookings.repo.update_provider_info(
            db, booking.id, session_id=session.id, payment_method=PaymentMethod.ESCROW.value
        )
        logger.info("escrow reserve booking=%d session=%s amount=%d",
                    booking.id, session.id, booking.total_amount)
        return EscrowReservation(booking=updated, checkout_url=session.url)

    async def confirm_reservation(
        self,
        db: AsyncSession,
        actor: Identity,
        booking_id: int,
        session_id: str | None = None,
    ) -> EscrowConfirmation:
        booking = await self._lock_for(db, actor, booking_id)
        if booking.escrow_status == EscrowStatus.AUTHORIZED:
            return EscrowConfirmation(booking=booking, ready=True, message="Escrow already confirmed")
        rules.check_confirm(booking)

        checkout_id = session_id or booking.provider_session_id
        if not checkout_id:
            raise ValidationFailedError("session_id", "No checkout session found")

        session = await self.provider.retrieve_session(checkout_id)
        owner = session.metadata.get("bookingId")
        if owner is not None and owner != str(booking.id):
            raise ValidationFailedError("session_id", "Checkout session belongs to another booking")
        if not session.is_paid or not session.payment_intent_id:
            return EscrowConfirmation(
                booking=booking,
                ready=False,
                message=f"Checkout session status: {session.payment_status}",
            )

        intent = await self.provider.retrieve_payment_intent(session.payment_intent_id)
        if not intent.is_ready_to_capture:
            return EscrowConfirmation(
                booking=booking, ready=False, message=f"Payment intent status: {intent.status}"
            )

        await self._bookings.repo.update_provider_info(
            db, booking.id, session_id=checkout_id, payment_intent_id=intent.id
        )
        await self._bookings.repo.update_escrow(db, booking.id, EscrowStatus.AUTHORIZED.value)
        updated = await self._bookings.set_booking_status(
            db, booking.id, BookingStatus.PAYMENT_SUBMITTED.value
        )
        logger.info("escrow authorized booking=%d intent=%s", booking.id, intent.id)
        return EscrowConfirmation(booking=updated, ready=True, message="Payment reserved in escrow")

    async def release(self, db: AsyncSession, actor: Identity, booking_id: int) -> Booking:
        booking = await self._lock_for(db, actor, booking_id)
        intent_id = rules.check_held(booking, "release")

        await self.provider.capture_payment_intent(intent_id)

        await self._bookings.repo.update_escrow(db, booking.id, EscrowStatus.CAPTURED.value)
        updated = await self._bookings.set_booking_status(db, booking.id, BookingStatus.CONFIRMED.value)
        logger.info("escrow captured booking=%d intent=%s by=%s", booking.id, intent_id, actor.user_id)
        return updated

    async def cancel_escrow(self, db: AsyncSession, actor: Identity, booking_id: int) -> Booking:
        booking = await self._lock_for(db, actor, booking_id)
        intent_id = rules.check_held(booking, "cancel")

        await self.provider.cancel_payment_intent(intent_id)

        await self._bookings.repo.update_escrow(db, booking.id, EscrowStatus.CANCELLED.value)
        updated = await self._bookings.set_booking_status(db, booking.id, BookingStatus.CANCELLED.value)
        logger.info("escrow cancelled booking=%d intent=%s by=%s", booking.id, intent_id, actor.user_id)
        return updated
