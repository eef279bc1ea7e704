"""In-memory repositories and a scripted payment provider for unit tests.

The fakes honour the same contracts as the SQL repositories: debits are
all-or-nothing against the current balance, every balance change appends a
log row, and a booking read returns a fresh copy of the stored row.
"""

import asyncio
import dataclasses
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from src.mp_booking.domain.models import Booking, NewBooking
from src.mp_common.catalog import Catalog, build_catalog
from src.mp_common.enums import CreditAction, EscrowStatus
from src.mp_common.errors import (
    BookingNotFoundError,
    DuplicateFulfillmentError,
    ExternalProviderError,
    InsufficientCreditsError,
)
from src.mp_ledger.domain.models import Credit, CreditLogEntry
from src.mp_payments.domain.models import CheckoutSession, PaymentIntent

BUYER_UID = "buyer-1"


class InMemoryLedgerRepository:
    def __init__(self) -> None:
        self.balances: dict[str, int] = {}
        self.logs: list[CreditLogEntry] = []
        self._lock = asyncio.Lock()

    def _append(
        self, user_id: str, action: str, amount: int, description: str,
        reference_id: str | None = None,
    ) -> CreditLogEntry:
        if reference_id is not None and any(
            e.action == action and e.reference_id == reference_id for e in self.logs
        ):
            raise DuplicateFulfillmentError(reference_id)
        entry = CreditLogEntry(
            id=len(self.logs) + 1,
            user_id=user_id,
            action=action,
            amount=amount,
            description=description,
            reference_id=reference_id,
            created_at=datetime.now(UTC),
        )
        self.logs.append(entry)
        return entry

    def log_sum(self, user_id: str) -> int:
        return sum(e.amount for e in self.logs if e.user_id == user_id)

    async def get_credit(self, db, user_id):  # type: ignore[no-untyped-def]
        if user_id not in self.balances:
            return None
        return Credit(user_id=user_id, balance=self.balances[user_id])

    async def initialize(self, db, user_id, starting_balance):  # type: ignore[no-untyped-def]
        async with self._lock:
            if user_id not in self.balances:
                self.balances[user_id] = starting_balance
                self._append(user_id, CreditAction.INIT.value, starting_balance,
                             f"Initial credits ({starting_balance})")
            return Credit(user_id=user_id, balance=self.balances[user_id])

    async def debit(self, db, user_id, amount, action, description):  # type: ignore[no-untyped-def]
        # yield first so concurrent callers interleave before the check
        await asyncio.sleep(0)
        async with self._lock:
            balance = self.balances.get(user_id, 0)
            if balance < amount:
                raise InsufficientCreditsError(amount, balance)
            self.balances[user_id] = balance - amount
            entry = self._append(user_id, action, -amount, description)
            return Credit(user_id=user_id, balance=self.balances[user_id]), entry

    async def credit(self, db, user_id, amount, action, description, reference_id=None):  # type: ignore[no-untyped-def]
        async with self._lock:
            if user_id not in self.balances:
                action = CreditAction.INIT.value
                description = f"Initial credits ({description})"
            self.balances[user_id] = self.balances.get(user_id, 0) + amount
            entry = self._append(user_id, action, amount, description, reference_id)
            return Credit(user_id=user_id, balance=self.balances[user_id]), entry

    async def list_log_entries(self, db, user_id, cursor_id, limit):  # type: ignore[no-untyped-def]
        rows = sorted(
            (e for e in self.logs
             if e.user_id == user_id and (cursor_id is None or e.id < cursor_id)),
            key=lambda e: e.id,
            reverse=True,
        )
        return rows[:limit]

    async def has_reference(self, db, action, reference_id):  # type: ignore[no-untyped-def]
        return any(e.action == action and e.reference_id == reference_id for e in self.logs)


class InMemoryBookingRepository:
    def __init__(self) -> None:
        self.rows: dict[int, Booking] = {}
        self.status_writes: list[tuple[int, str]] = []

    def add(self, booking: Booking) -> Booking:
        self.rows[booking.id] = booking
        return dataclasses.replace(booking)

    def _require(self, booking_id: int) -> Booking:
        if booking_id not in self.rows:
            raise BookingNotFoundError(booking_id)
        return self.rows[booking_id]

    def _write(self, booking_id: int, **changes: object) -> Booking:
        row = dataclasses.replace(self._require(booking_id), **changes)
        self.rows[booking_id] = row
        return dataclasses.replace(row)

    async def create(self, db, new: NewBooking):  # type: ignore[no-untyped-def]
        booking = Booking(id=len(self.rows) + 1, status="pending_payment", **dataclasses.asdict(new))
        return self.add(booking)

    async def get(self, db, booking_id):  # type: ignore[no-untyped-def]
        row = self.rows.get(booking_id)
        return dataclasses.replace(row) if row else None

    async def get_for_update(self, db, booking_id):  # type: ignore[no-untyped-def]
        return await self.get(db, booking_id)

    async def update_installment(self, db, booking_id, which, status, session_id=None):  # type: ignore[no-untyped-def]
        changes: dict[str, object] = {f"{which}_status": status}
        if session_id is not None:
            changes[f"{which}_session_id"] = session_id
        return self._write(booking_id, **changes)

    async def update_status(self, db, booking_id, status):  # type: ignore[no-untyped-def]
        self.status_writes.append((booking_id, status))
        return self._write(booking_id, status=status)

    async def update_provider_info(  # type: ignore[no-untyped-def]
        self, db, booking_id, session_id=None, payment_intent_id=None, payment_method=None
    ):
        row = self._require(booking_id)
        return self._write(
            booking_id,
            provider_session_id=session_id or row.provider_session_id,
            provider_payment_intent_id=payment_intent_id or row.provider_payment_intent_id,
            payment_method=payment_method or row.payment_method,
        )

    async def update_escrow(self, db, booking_id, escrow_status):  # type: ignore[no-untyped-def]
        changes: dict[str, object] = {"escrow_status": escrow_status}
        now = datetime.now(UTC)
        if escrow_status == EscrowStatus.AUTHORIZED:
            changes["escrow_authorized_at"] = now
        elif escrow_status == EscrowStatus.CAPTURED:
            changes["escrow_captured_at"] = now
        return self._write(booking_id, **changes)

    async def list_by_buyer(self, db, buyer_uid):  # type: ignore[no-untyped-def]
        return [dataclasses.replace(b) for b in self.rows.values() if b.buyer_uid == buyer_uid]

    async def list_all(self, db, limit, offset):  # type: ignore[no-untyped-def]
        return [dataclasses.replace(b) for b in list(self.rows.values())[offset:offset + limit]]


class ScriptedProvider:
    """Payment provider double. Set `fail_with` to make every call raise."""

    def __init__(self) -> None:
        self.sessions: dict[str, CheckoutSession] = {}
        self.intents: dict[str, PaymentIntent] = {}
        self.calls: list[tuple[str, object]] = []
        self.fail_with: ExternalProviderError | None = None

    def _record(self, name: str, arg: object) -> None:
        self.calls.append((name, arg))
        if self.fail_with is not None:
            raise self.fail_with

    async def create_checkout_session(self, **kwargs):  # type: ignore[no-untyped-def]
        self._record("create_checkout_session", kwargs)
        session = CheckoutSession(
            id=f"cs_test_{len(self.sessions) + 1}",
            url="https://checkout.example/pay",
            metadata=dict(kwargs["metadata"]),
        )
        self.sessions[session.id] = session
        return session

    async def retrieve_session(self, session_id):  # type: ignore[no-untyped-def]
        self._record("retrieve_session", session_id)
        return self.sessions[session_id]

    async def retrieve_payment_intent(self, intent_id):  # type: ignore[no-untyped-def]
        self._record("retrieve_payment_intent", intent_id)
        return self.intents[intent_id]

    async def capture_payment_intent(self, intent_id):  # type: ignore[no-untyped-def]
        self._record("capture_payment_intent", intent_id)
        self.intents[intent_id] = PaymentIntent(id=intent_id, status="succeeded")
        return self.intents[intent_id]

    async def cancel_payment_intent(self, intent_id):  # type: ignore[no-untyped-def]
        self._record("cancel_payment_intent", intent_id)
        self.intents[intent_id] = PaymentIntent(id=intent_id, status="canceled")
        return self.intents[intent_id]

    def complete_checkout(self, session_id: str, intent_status: str = "requires_capture") -> None:
        """Simulate the buyer finishing a hosted checkout."""
        intent_id = f"pi_for_{session_id}"
        self.sessions[session_id] = dataclasses.replace(
            self.sessions[session_id], payment_status="paid", payment_intent_id=intent_id
        )
        self.intents[intent_id] = PaymentIntent(id=intent_id, status=intent_status)


def _make_booking(**overrides: object) -> Booking:
    values: dict[str, object] = {
        "id": 1,
        "buyer_uid": BUYER_UID,
        "tier": "Projects",
        "base_pay": 10000,
        "platform_fee": 200,
        "boost": "None",
        "boost_fee": 0,
        "total_amount": 10200,
        "status": "pending_payment",
        "payment_structure": "full_upfront",
        "worker_slug": "dj-nova",
    }
    values.update(overrides)
    return Booking(**values)  # type: ignore[arg-type]


@pytest.fixture
def make_booking():  # type: ignore[no-untyped-def]
    """Factory for a stored-row Booking; keyword overrides replace defaults."""
    return _make_booking


@pytest.fixture
def catalog() -> Catalog:
    return build_catalog(admin_emails=("admin@example.com",), initial_credits=3)


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()


@pytest.fixture
def ledger_repo() -> InMemoryLedgerRepository:
    return InMemoryLedgerRepository()


@pytest.fixture
def booking_repo() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()
