"""Unit tests for EscrowController with a scripted payment provider."""

from unittest.mock import AsyncMock

import pytest

from src.mp_booking.application.service import BookingApplicationService
from src.mp_common.errors import (
    ExternalProviderError,
    ForbiddenError,
    InvalidStateTransitionError,
    ValidationFailedError,
)
from src.mp_escrow.application.service import EscrowController
from src.mp_gateway.auth.identity import Identity

ADMIN = Identity(user_id="admin-1", email="admin@example.com")
BUYER = Identity(user_id="buyer-1", email="buyer@example.com")
STRANGER = Identity(user_id="stranger", email="stranger@example.com")


@pytest.fixture
def bookings(booking_repo, catalog) -> BookingApplicationService:  # type: ignore[no-untyped-def]
    return BookingApplicationService(
        repo=booking_repo, ledger=AsyncMock(), catalog=catalog, plan_lookup=AsyncMock(return_value="free")
    )


@pytest.fixture
def controller(bookings, provider) -> EscrowController:  # type: ignore[no-untyped-def]
    return EscrowController(bookings=bookings, provider=provider, app_url="https://app.example/")


class TestReserve:
    async def test_creates_manual_capture_checkout(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        booking_repo.add(make_booking())
        reservation = await controller.reserve(db, BUYER, 1)

        name, kwargs = provider.calls[0]
        assert name == "create_checkout_session"
        assert kwargs["capture_method"] == "manual"
        assert kwargs["amount_cents"] == 10200
        assert kwargs["metadata"]["bookingId"] == "1"
        assert kwargs["cancel_url"].startswith("https://app.example/profiles/dj-nova")
        assert reservation.checkout_url == "https://checkout.example/pay"
        assert reservation.booking.payment_method == "escrow"
        assert reservation.booking.provider_session_id == "cs_test_1"
        assert reservation.booking.escrow_status == "none"

    async def test_wrong_status_rejected(self, controller, booking_repo, provider, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking(status="payment_submitted"))
        with pytest.raises(InvalidStateTransitionError):
            await controller.reserve(db, BUYER, 1)
        assert provider.calls == []

    async def test_stranger_rejected(self, controller, booking_repo, provider, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        with pytest.raises(ForbiddenError):
            await controller.reserve(db, STRANGER, 1)
        assert provider.calls == []

    async def test_provider_failure_writes_nothing(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        booking_repo.add(make_booking())
        provider.fail_with = ExternalProviderError("boom")
        with pytest.raises(ExternalProviderError):
            await controller.reserve(db, BUYER, 1)
        stored = booking_repo.rows[1]
        assert stored.payment_method == "external"
        assert stored.provider_session_id is None


class TestConfirmReservation:
    async def _reserved(self, controller, booking_repo, make_booking, db):  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        await controller.reserve(db, BUYER, 1)

    async def test_unpaid_session_not_ready(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, make_booking, db
    ) -> None:
        await self._reserved(controller, booking_repo, make_booking, db)
        result = await controller.confirm_reservation(db, BUYER, 1)
        assert result.ready is False
        assert booking_repo.rows[1].escrow_status == "none"

    async def test_paid_session_authorizes(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        await self._reserved(controller, booking_repo, make_booking, db)
        provider.complete_checkout("cs_test_1")
        result = await controller.confirm_reservation(db, BUYER, 1)
        assert result.ready is True
        assert result.booking.escrow_status == "authorized"
        assert result.booking.status == "payment_submitted"
        assert result.booking.provider_payment_intent_id == "pi_for_cs_test_1"
        assert result.booking.escrow_authorized_at is not None

    async def test_second_confirm_is_noop(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        await self._reserved(controller, booking_repo, make_booking, db)
        provider.complete_checkout("cs_test_1")
        await controller.confirm_reservation(db, BUYER, 1)
        again = await controller.confirm_reservation(db, BUYER, 1)
        assert again.ready is True
        assert again.message == "Escrow already confirmed"

    async def test_intent_not_capturable(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        await self._reserved(controller, booking_repo, make_booking, db)
        provider.complete_checkout("cs_test_1", intent_status="requires_payment_method")
        result = await controller.confirm_reservation(db, BUYER, 1)
        assert result.ready is False
        assert "requires_payment_method" in result.message

    async def test_session_for_other_booking_rejected(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        booking_repo.add(make_booking(id=2))
        await controller.reserve(db, BUYER, 2)
        booking_repo.add(make_booking(id=1))
        provider.complete_checkout("cs_test_1")
        with pytest.raises(ValidationFailedError):
            await controller.confirm_reservation(db, BUYER, 1, session_id="cs_test_1")

    async def test_no_session_rejected(self, controller, booking_repo, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking())
        with pytest.raises(ValidationFailedError):
            await controller.confirm_reservation(db, BUYER, 1)


class TestReleaseAndCancel:
    def _held(self, booking_repo, make_booking) -> None:  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking(
            status="payment_submitted",
            payment_method="escrow",
            escrow_status="authorized",
            provider_payment_intent_id="pi_1",
        ))

    async def test_release_without_hold_rejected(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        booking_repo.add(make_booking())
        with pytest.raises(InvalidStateTransitionError):
            await controller.release(db, BUYER, 1)
        assert provider.calls == []

    async def test_release_captures_then_confirms(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        self._held(booking_repo, make_booking)
        released = await controller.release(db, BUYER, 1)
        assert provider.calls == [("capture_payment_intent", "pi_1")]
        assert released.escrow_status == "captured"
        assert released.status == "confirmed"
        assert released.escrow_captured_at is not None

    async def test_capture_failure_leaves_booking(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db
    ) -> None:
        self._held(booking_repo, make_booking)
        provider.fail_with = ExternalProviderError("card declined")
        with pytest.raises(ExternalProviderError):
            await controller.release(db, ADMIN, 1)
        assert booking_repo.rows[1].escrow_status == "authorized"
        assert booking_repo.status_writes == []

    async def test_cancel_escrow(self, controller, booking_repo, provider, make_booking, db) -> None:  # type: ignore[no-untyped-def]
        self._held(booking_repo, make_booking)
        cancelled = await controller.cancel_escrow(db, ADMIN, 1)
        assert provider.calls == [("cancel_payment_intent", "pi_1")]
        assert cancelled.escrow_status == "cancelled"
        assert cancelled.status == "cancelled"

    async def test_release_after_release_rejected(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, make_booking, db
    ) -> None:
        self._held(booking_repo, make_booking)
        await controller.release(db, BUYER, 1)
        with pytest.raises(InvalidStateTransitionError):
            await controller.release(db, BUYER, 1)


class TestHeldFundsSettleThroughEscrow:
    async def _authorized(self, controller, booking_repo, provider, make_booking, db, **overrides):  # type: ignore[no-untyped-def]
        booking_repo.add(make_booking(**overrides))
        await controller.reserve(db, BUYER, 1)
        provider.complete_checkout("cs_test_1")
        await controller.confirm_reservation(db, BUYER, 1)

    async def test_admin_confirm_rejected_while_held(  # type: ignore[no-untyped-def]
        self, controller, bookings, booking_repo, provider, make_booking, db
    ) -> None:
        await self._authorized(controller, booking_repo, provider, make_booking, db)
        with pytest.raises(InvalidStateTransitionError, match="held in escrow"):
            await bookings.confirm(db, ADMIN, 1)
        assert booking_repo.rows[1].status == "payment_submitted"

        released = await controller.release(db, BUYER, 1)
        assert released.status == "confirmed"
        assert released.escrow_status == "captured"

    async def test_installment_confirm_rejected_while_held(  # type: ignore[no-untyped-def]
        self, controller, bookings, booking_repo, provider, make_booking, db
    ) -> None:
        await self._authorized(
            controller, booking_repo, provider, make_booking, db,
            payment_structure="split_50_50", deposit_amount=5100, final_amount=5100,
            deposit_status="pending", final_status="pending",
        )
        with pytest.raises(InvalidStateTransitionError):
            await bookings.confirm(db, ADMIN, 1, installment="deposit")
        with pytest.raises(InvalidStateTransitionError):
            await bookings.confirm(db, ADMIN, 1)
        with pytest.raises(InvalidStateTransitionError):
            await bookings.mark_paid(db, BUYER, 1, installment="deposit")
        assert booking_repo.rows[1].deposit_status == "pending"

    async def test_buyer_mark_paid_rejected_while_held(  # type: ignore[no-untyped-def]
        self, controller, bookings, booking_repo, provider, make_booking, db
    ) -> None:
        await self._authorized(controller, booking_repo, provider, make_booking, db)
        with pytest.raises(InvalidStateTransitionError):
            await bookings.mark_paid(db, BUYER, 1)

    @pytest.mark.parametrize("status", ["confirmed", "cancelled"])
    async def test_terminal_booking_never_reaches_provider(  # type: ignore[no-untyped-def]
        self, controller, booking_repo, provider, make_booking, db, status
    ) -> None:
        booking_repo.add(make_booking(
            status=status,
            payment_method="escrow",
            escrow_status="authorized",
            provider_payment_intent_id="pi_1",
        ))
        with pytest.raises(InvalidStateTransitionError):
            await controller.release(db, BUYER, 1)
        with pytest.raises(InvalidStateTransitionError):
            await controller.cancel_escrow(db, ADMIN, 1)
        assert provider.calls == []
        assert booking_repo.rows[1].escrow_status == "authorized"
