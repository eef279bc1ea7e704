"""Unit tests for BookingApplicationService with in-memory repositories."""

from unittest.mock import AsyncMock

import pytest

from src.mp_booking.application.schemas import CreateBookingRequest
from src.mp_booking.application.service import BookingApplicationService
from src.mp_common.errors import (
    AdminRequiredError,
    ForbiddenError,
    InsufficientCreditsError,
    InvalidStateTransitionError,
    ValidationFailedError,
)
from src.mp_gateway.auth.identity import Identity
from src.mp_ledger.application.service import LedgerApplicationService

ADMIN = Identity(user_id="admin-1", email="admin@example.com")
BUYER = Identity(user_id="buyer-1", email="buyer@example.com")
STRANGER = Identity(user_id="stranger", email="stranger@example.com")


def _service(booking_repo, ledger_repo, catalog, plan: str = "free") -> BookingApplicationService:  # type: ignore[no-untyped-def]
    return BookingApplicationService(
        repo=booking_repo,
        ledger=LedgerApplicationService(repo=ledger_repo, catalog=catalog),
        catalog=catalog,
        plan_lookup=AsyncMock(return_value=plan),
    )


@pytest.fixture
def svc(booking_repo, ledger_repo, catalog) -> BookingApplicationService:  # type: ignore[no-untyped-def]
    return _service(booking_repo, ledger_repo, catalog)


class TestCreateBooking:
    async def test_full_upfront_totals(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        req = CreateBookingRequest(tier="Projects", base_pay_cents=10000, worker_slug="dj-nova")
        booking = await svc.create_booking(db, BUYER.user_id, req)
        assert booking.status == "pending_payment"
        assert booking.platform_fee == 200
        assert booking.total_amount == 10200
        assert booking.deposit_amount is None
        assert ledger_repo.balances[BUYER.user_id] == 3 - 1
        assert ledger_repo.logs[-1].action == "booking"

    @pytest.mark.parametrize(
        ("base_pay", "deposit", "final"),
        [(10000 - 25, 5000, 5000), (10001 - 25, 5001, 5000)],
    )
    async def test_split_amounts(self, svc, db, base_pay, deposit, final) -> None:  # type: ignore[no-untyped-def]
        req = CreateBookingRequest(tier="Slots", base_pay_cents=base_pay, payment_structure="split_50_50")
        booking = await svc.create_booking(db, BUYER.user_id, req)
        assert booking.total_amount == deposit + final
        assert (booking.deposit_amount, booking.final_amount) == (deposit, final)
        assert booking.deposit_status == booking.final_status == "pending"

    async def test_unknown_boost_rejected_before_debit(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        req = CreateBookingRequest(tier="Slots", base_pay_cents=100, boost="Forever Boost")
        with pytest.raises(ValidationFailedError):
            await svc.create_booking(db, BUYER.user_id, req)
        assert ledger_repo.logs == []

    async def test_no_credits_no_booking(self, svc, booking_repo, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        await ledger_repo.initialize(db, BUYER.user_id, 0)
        req = CreateBookingRequest(tier="Slots", base_pay_cents=100)
        with pytest.raises(InsufficientCreditsError):
            await svc.create_booking(db, BUYER.user_id, req)
        assert booking_repo.rows == {}

    async def test_elite_not_charged(self, booking_repo, ledger_repo, catalog, db) -> None:  # type: ignore[no-untyped-def]
        svc = _service(booking_repo, ledger_repo, catalog, plan="elite")
        req = CreateBookingRequest(tier="Slots", base_pay_cents=100)
        await svc.create_booking(db, BUYER.user_id, req)
        assert ledger_repo.logs == []


class TestSplitLifecycle:
    async def _split(self, svc, db):  # type: ignore[no-untyped-def]
        req = CreateBookingRequest(tier="Slots", base_pay_cents=9975, payment_structure="split_50_50")
        return await svc.create_booking(db, BUYER.user_id, req)

    async def test_deposit_then_final(self, svc, booking_repo, db) -> None:  # type: ignore[no-untyped-def]
        booking = await self._split(svc, db)
        after_deposit = await svc.confirm(db, ADMIN, booking.id, "deposit")
        assert after_deposit.status == "deposit_paid"
        after_final = await svc.confirm(db, ADMIN, booking.id, "final")
        assert after_final.status == "confirmed"
        assert booking_repo.status_writes == [(booking.id, "deposit_paid"), (booking.id, "confirmed")]

    async def test_confirm_both_at_once(self, svc, booking_repo, db) -> None:  # type: ignore[no-untyped-def]
        booking = await self._split(svc, db)
        confirmed = await svc.confirm(db, ADMIN, booking.id)
        assert confirmed.status == "confirmed"
        assert confirmed.deposit_status == confirmed.final_status == "paid"

    async def test_final_before_deposit_rejected(self, svc, booking_repo, db) -> None:  # type: ignore[no-untyped-def]
        booking = await self._split(svc, db)
        with pytest.raises(InvalidStateTransitionError):
            await svc.mark_paid(db, BUYER, booking.id, "final")
        with pytest.raises(InvalidStateTransitionError):
            await svc.confirm(db, ADMIN, booking.id, "final")
        assert booking_repo.rows[booking.id].final_status == "pending"

    async def test_buyer_submits_deposit(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        booking = await self._split(svc, db)
        updated = await svc.mark_paid(db, BUYER, booking.id, "deposit")
        assert updated.deposit_status == "submitted"
        assert updated.status == "payment_submitted"

    async def test_split_mark_paid_needs_installment(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        booking = await self._split(svc, db)
        with pytest.raises(ValidationFailedError):
            await svc.mark_paid(db, BUYER, booking.id)

    async def test_confirmed_split_cannot_confirm_again(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        booking = await self._split(svc, db)
        await svc.confirm(db, ADMIN, booking.id)
        with pytest.raises(InvalidStateTransitionError):
            await svc.confirm(db, ADMIN, booking.id)


class TestFullUpfrontLifecycle:
    async def test_mark_paid_then_confirm(self, svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        assert (await svc.mark_paid(db, BUYER, 1)).status == "payment_submitted"
        assert (await svc.confirm(db, ADMIN, 1)).status == "confirmed"

    async def test_only_buyer_marks_paid(self, svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        with pytest.raises(ForbiddenError):
            await svc.mark_paid(db, ADMIN, 1)

    async def test_only_admin_confirms(self, svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        with pytest.raises(AdminRequiredError):
            await svc.confirm(db, BUYER, 1)
        assert booking_repo.status_writes == []

    async def test_cancelled_is_terminal(self, svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking(status="cancelled"))
        with pytest.raises(InvalidStateTransitionError):
            await svc.mark_paid(db, BUYER, 1)
        with pytest.raises(InvalidStateTransitionError):
            await svc.confirm(db, ADMIN, 1)


class TestCancelAndAccess:
    async def test_buyer_cancels(self, svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        assert (await svc.cancel(db, BUYER, 1)).status == "cancelled"

    async def test_stranger_cannot_cancel(self, svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        with pytest.raises(ForbiddenError):
            await svc.cancel(db, STRANGER, 1)

    async def test_stranger_cannot_read(self, svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        with pytest.raises(ForbiddenError):
            await svc.get_booking(db, STRANGER, 1)
        assert (await svc.get_booking(db, ADMIN, 1)).id == 1

    async def test_list_all_admin_only(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(AdminRequiredError):
            await svc.list_all_bookings(db, BUYER)


class TestPaymentInfo:
    @pytest.fixture
    def handles(self) -> AsyncMock:
        return AsyncMock(side_effect=lambda db, slug: {"dj-nova": "$djnova"}.get(slug))

    @pytest.fixture
    def info_svc(self, booking_repo, ledger_repo, catalog, handles) -> BookingApplicationService:  # type: ignore[no-untyped-def]
        return BookingApplicationService(
            repo=booking_repo,
            ledger=LedgerApplicationService(repo=ledger_repo, catalog=catalog),
            catalog=catalog,
            plan_lookup=AsyncMock(return_value="free"),
            handle_lookup=handles,
        )

    async def test_buyer_sees_payee_handle(self, info_svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        assert await info_svc.get_payment_info(db, BUYER, 1) == "$djnova"

    async def test_admin_sees_payee_handle(self, info_svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        assert await info_svc.get_payment_info(db, ADMIN, 1) == "$djnova"

    async def test_stranger_rejected(self, info_svc, booking_repo, make_booking, handles, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        with pytest.raises(ForbiddenError):
            await info_svc.get_payment_info(db, STRANGER, 1)
        handles.assert_not_awaited()

    async def test_no_worker_no_handle(self, info_svc, booking_repo, make_booking, handles, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking(worker_slug=None))
        assert await info_svc.get_payment_info(db, BUYER, 1) is None
        handles.assert_not_awaited()

    async def test_unknown_worker_no_handle(self, info_svc, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking(worker_slug="ghost"))
        assert await info_svc.get_payment_info(db, BUYER, 1) is None
