"""BookingApplicationService — booking lifecycle.

Every transition locks the booking row (SELECT ... FOR UPDATE), validates
against the locked row, writes, and for split bookings re-derives the parent
status from the row returned by the write. Callers own the transaction.

record_installment() and set_booking_status() are the primitives other
modules (escrow) use; the buyer/admin actions are built on top of them.
"""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_booking.application.schemas import CreateBookingRequest
from src.mp_booking.domain import state_machine
from src.mp_booking.domain.models import Booking, NewBooking
from src.mp_booking.domain.repository import BookingRepositoryProtocol
from src.mp_booking.infrastructure.persistence import BookingRepository
from src.mp_common.catalog import Catalog, get_catalog
from src.mp_common.cents import split_half_ceil
from src.mp_common.enums import (
    BookingStatus,
    CreditAction,
    Installment,
    InstallmentStatus,
    PaymentStructure,
)
from src.mp_common.errors import (
    AdminRequiredError,
    BookingNotFoundError,
    ForbiddenError,
    InvalidStateTransitionError,
    ValidationFailedError,
)
from src.mp_gateway.auth.identity import Identity
from src.mp_gateway.auth.policy import AuthorizationPolicy, EmailAllowListPolicy, can_act_on_booking
from src.mp_gateway.user.service import get_payout_handle, get_user_plan
from src.mp_ledger.application.service import LedgerApplicationService
from src.mp_pricing.domain import calculator

logger = logging.getLogger(__name__)

PlanLookup = Callable[[AsyncSession, str], Awaitable[str]]
HandleLookup = Callable[[AsyncSession, str], Awaitable[str | None]]


class BookingApplicationService:
    def __init__(
        self,
        repo: BookingRepositoryProtocol | None = None,
        ledger: LedgerApplicationService | None = None,
        policy: AuthorizationPolicy | None = None,
        catalog: Catalog | None = None,
        plan_lookup: PlanLookup | None = None,
        handle_lookup: HandleLookup | None = None,
    ) -> None:
        self._catalog = catalog or get_catalog()
        self._repo: BookingRepositoryProtocol = repo or BookingRepository()
        self._ledger = ledger or LedgerApplicationService(catalog=self._catalog)
        self._policy: AuthorizationPolicy = policy or EmailAllowListPolicy.from_catalog(self._catalog)
        self._plan_lookup: PlanLookup = plan_lookup or get_user_plan
        self._handle_lookup: HandleLookup = handle_lookup or get_payout_handle

    @property
    def repo(self) -> BookingRepositoryProtocol:
        return self._repo

    @property
    def policy(self) -> AuthorizationPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    async def lock(self, db: AsyncSession, booking_id: int) -> Booking:
        booking = await self._repo.get_for_update(db, booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    async def _write_installment(
        self,
        db: AsyncSession,
        booking: Booking,
        which: str,
        status: str,
        session_id: str | None = None,
    ) -> Booking:
        state_machine.check_installment_write(booking, which, status)
        updated = await self._repo.update_installment(db, booking.id, which, status, session_id)
        derived = state_machine.derive_status(updated.deposit_status, updated.final_status)
        if derived is not None and derived != updated.status:
            updated = await self._repo.update_status(db, booking.id, derived.value)
        logger.info(
            "booking %d installment %s=%s deposit=%s final=%s status=%s",
            booking.id, which, status, updated.deposit_status, updated.final_status, updated.status,
        )
        return updated

    async def record_installment(
        self,
        db: AsyncSession,
        booking_id: int,
        which: str,
        status: str,
        session_id: str | None = None,
    ) -> Booking:
        booking = await self.lock(db, booking_id)
        return await self._write_installment(db, booking, which, status, session_id)

    async def set_booking_status(self, db: AsyncSession, booking_id: int, status: str) -> Booking:
        booking = await self.lock(db, booking_id)
        state_machine.ensure_not_terminal(booking, f"move to {status}")
        updated = await self._repo.update_status(db, booking_id, status)
        logger.info("booking %d status %s -> %s", booking_id, booking.status, updated.status)
        return updated

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def create_booking(
        self, db: AsyncSession, buyer_uid: str, req: CreateBookingRequest
    ) -> Booking:
        pricing = self._catalog.pricing
        if req.boost not in pricing.boosts:
            raise ValidationFailedError("boost", f"Unknown boost level: {req.boost}")

        plan = await self._plan_lookup(db, buyer_uid)
        cost = calculator.apply_cost(pricing)
        if not calculator.can_afford(0, cost, plan):
            await self._ledger.debit_for_listing(
                db, buyer_uid, cost, "Booking request created", action=CreditAction.BOOKING.value
            )

        money = calculator.money_total(req.base_pay_cents, req.tier.value, req.boost, pricing)
        is_split = req.payment_structure == PaymentStructure.SPLIT_50_50
        deposit_amount = final_amount = None
        if is_split:
            deposit_amount, final_amount = split_half_ceil(money.total_amount)
        pending = InstallmentStatus.PENDING.value if is_split else None

        booking = await self._repo.create(
            db,
            NewBooking(
                buyer_uid=buyer_uid,
                post_id=req.post_id,
                worker_slug=req.worker_slug,
                tier=req.tier.value,
                base_pay=money.base_pay,
                platform_fee=money.tier_fee,
                boost=req.boost,
                boost_fee=money.boost_fee,
                total_amount=money.total_amount,
                payment_structure=req.payment_structure.value,
                deposit_amount=deposit_amount,
                final_amount=final_amount,
                deposit_status=pending,
                final_status=pending,
            ),
        )
        logger.info(
            "booking %d created buyer=%s total=%d structure=%s",
            booking.id, buyer_uid, booking.total_amount, booking.payment_structure,
        )
        return booking

    async def get_booking(self, db: AsyncSession, actor: Identity, booking_id: int) -> Booking:
        booking = await self._repo.get(db, booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        if not can_act_on_booking(self._policy, actor, booking.buyer_uid):
            raise ForbiddenError("Not authorized")
        return booking

    async def get_payment_info(
        self, db: AsyncSession, actor: Identity, booking_id: int
    ) -> str | None:
        """Payee's Cash App handle for an external payment; buyer or admin only."""
        booking = await self.get_booking(db, actor, booking_id)
        if not booking.worker_slug:
            return None
        return await self._handle_lookup(db, booking.worker_slug)

    async def mark_paid(
        self,
        db: AsyncSession,
        actor: Identity,
        booking_id: int,
        installment: str | None = None,
    ) -> Booking:
        """Buyer reports a payment. Split bookings must name the installment."""
        booking = await self.lock(db, booking_id)
        if booking.buyer_uid != actor.user_id:
            raise ForbiddenError("Not your booking")

        if booking.is_split:
            if installment is None:
                raise ValidationFailedError(
                    "installment", "Must specify installment: 'deposit' or 'final'"
                )
            return await self._write_installment(
                db, booking, installment, InstallmentStatus.SUBMITTED.value
            )

        state_machine.ensure_not_terminal(booking, "mark as paid")
        state_machine.ensure_no_escrow_hold(booking, "mark as paid")
        if booking.status not in (BookingStatus.PENDING_PAYMENT, BookingStatus.PAYMENT_SUBMITTED):
            raise InvalidStateTransitionError(
                f"Cannot mark booking {booking_id} as paid from {booking.status}"
            )
        updated = await self._repo.update_status(db, booking_id, BookingStatus.PAYMENT_SUBMITTED.value)
        logger.info("booking %d marked paid by buyer", booking_id)
        return updated

    async def confirm(
        self,
        db: AsyncSession,
        actor: Identity,
        booking_id: int,
        installment: str | None = None,
    ) -> Booking:
        """Admin confirms receipt. On a split booking with no installment named,
        both installments are marked paid in one unit, which derives confirmed."""
        if not self._policy.is_admin(actor):
            raise AdminRequiredError()
        booking = await self.lock(db, booking_id)

        if booking.is_split:
            paid = InstallmentStatus.PAID.value
            if installment is not None:
                return await self._write_installment(db, booking, installment, paid)
            state_machine.ensure_not_terminal(booking, "confirm")
            state_machine.ensure_no_escrow_hold(booking, "confirm")
            if booking.deposit_status != paid:
                booking = await self._write_installment(db, booking, Installment.DEPOSIT.value, paid)
            return await self._write_installment(db, booking, Installment.FINAL.value, paid)

        state_machine.ensure_not_terminal(booking, "confirm")
        state_machine.ensure_no_escrow_hold(booking, "confirm")
        updated = await self._repo.update_status(db, booking_id, BookingStatus.CONFIRMED.value)
        logger.info("booking %d confirmed by admin %s", booking_id, actor.user_id)
        return updated

    async def cancel(self, db: AsyncSession, actor: Identity, booking_id: int) -> Booking:
        booking = await self.lock(db, booking_id)
        if not can_act_on_booking(self._policy, actor, booking.buyer_uid):
            raise ForbiddenError("Not authorized")
        state_machine.check_cancel(booking)
        updated = await self._repo.update_status(db, booking_id, BookingStatus.CANCELLED.value)
        logger.info("booking %d cancelled by %s", booking_id, actor.user_id)
        return updated

    async def list_my_bookings(self, db: AsyncSession, buyer_uid: str) -> list[Booking]:
        return await self._repo.list_by_buyer(db, buyer_uid)

    async def list_all_bookings(
        self, db: AsyncSession, actor: Identity, limit: int = 100, offset: int = 0
    ) -> list[Booking]:
        if not self._policy.is_admin(actor):
            raise AdminRequiredError()
        return await self._repo.list_all(db, limit, offset)
