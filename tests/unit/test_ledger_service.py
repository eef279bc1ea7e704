"""Unit tests for LedgerApplicationService against an in-memory repository."""

import asyncio

import pytest

from src.mp_common.enums import CreditAction
from src.mp_common.errors import (
    DuplicateFulfillmentError,
    InsufficientCreditsError,
    ValidationFailedError,
)
from src.mp_ledger.application.schemas import cursor_decode, cursor_encode
from src.mp_ledger.application.service import LedgerApplicationService


@pytest.fixture
def svc(ledger_repo, catalog) -> LedgerApplicationService:  # type: ignore[no-untyped-def]
    return LedgerApplicationService(repo=ledger_repo, catalog=catalog)


class TestInitialize:
    async def test_logs_init_entry(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        credit = await svc.initialize(db, "u1", 5)
        assert credit.balance == 5
        assert [(e.action, e.amount) for e in ledger_repo.logs] == [("init", 5)]

    async def test_idempotent(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        await svc.initialize(db, "u1", 5)
        again = await svc.initialize(db, "u1", 50)
        assert again.balance == 5
        assert len(ledger_repo.logs) == 1

    async def test_negative_rejected(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(ValidationFailedError):
            await svc.initialize(db, "u1", -1)

    async def test_ensure_credits_grants_initial(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        assert await svc.get_balance(db, "u1") is None
        credit = await svc.ensure_credits(db, "u1")
        assert credit.balance == 3


class TestDebit:
    async def test_insufficient_leaves_balance(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        await svc.initialize(db, "u1", 5)
        with pytest.raises(InsufficientCreditsError) as exc_info:
            await svc.debit(db, "u1", 10, CreditAction.CREATE_POST.value, "post")
        assert exc_info.value.required == 10
        assert exc_info.value.available == 5
        assert await svc.get_balance(db, "u1") == 5
        assert len(ledger_repo.logs) == 1

    async def test_exact_balance_allowed(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        await svc.initialize(db, "u1", 4)
        credit = await svc.debit(db, "u1", 4, CreditAction.APPLY.value, "apply")
        assert credit.balance == 0

    @pytest.mark.parametrize("amount", [0, -3])
    async def test_non_positive_amount_rejected(self, svc, db, amount: int) -> None:  # type: ignore[no-untyped-def]
        await svc.initialize(db, "u1", 4)
        with pytest.raises(ValidationFailedError):
            await svc.debit(db, "u1", amount, CreditAction.APPLY.value, "apply")

    async def test_concurrent_debits_one_wins(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        await svc.initialize(db, "u1", 10)
        results = await asyncio.gather(
            svc.debit(db, "u1", 6, CreditAction.CREATE_POST.value, "a"),
            svc.debit(db, "u1", 6, CreditAction.CREATE_POST.value, "b"),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, InsufficientCreditsError)]
        assert len(failures) == 1
        assert await svc.get_balance(db, "u1") == 4
        assert ledger_repo.log_sum("u1") == 4

    async def test_zero_cost_listing_charges_nothing(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        credit = await svc.debit_for_listing(db, "u1", 0, "free post")
        assert credit.balance == 3
        assert [e.action for e in ledger_repo.logs] == ["init"]

    async def test_listing_debit_initializes_first(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        credit = await svc.debit_for_listing(
            db, "new-user", 2, "event", action=CreditAction.CREATE_EVENT.value
        )
        assert credit.balance == 1
        assert [(e.action, e.amount) for e in ledger_repo.logs] == [("init", 3), ("create_event", -2)]


class TestCredit:
    async def test_first_credit_logs_once_as_init(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        credit = await svc.credit(db, "u1", 15, CreditAction.PURCHASE.value, "Purchased 15")
        assert credit.balance == 15
        assert [(e.action, e.amount) for e in ledger_repo.logs] == [("init", 15)]

    async def test_purchase_logged_as_purchase(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        credit = await svc.credit_for_purchase(db, "u1", 15, "Purchased 15", reference_id="cs_1")
        assert credit.balance == 3 + 15
        assert [(e.action, e.amount) for e in ledger_repo.logs] == [("init", 3), ("purchase", 15)]

    async def test_purchase_fulfilled_once(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        await svc.credit_for_purchase(db, "u1", 5, "Purchased 5", reference_id="cs_1")
        with pytest.raises(DuplicateFulfillmentError):
            await svc.credit_for_purchase(db, "u1", 5, "Purchased 5", reference_id="cs_1")
        assert await svc.get_balance(db, "u1") == 3 + 5


class TestLogInvariant:
    async def test_sum_of_log_equals_balance(self, svc, ledger_repo, db) -> None:  # type: ignore[no-untyped-def]
        await svc.credit(db, "u1", 7, CreditAction.PURCHASE.value, "grant")
        await svc.debit(db, "u1", 2, CreditAction.CREATE_POST.value, "post")
        await svc.credit_for_purchase(db, "u1", 15, "buy", reference_id="cs_9")
        with pytest.raises(InsufficientCreditsError):
            await svc.debit(db, "u1", 100, CreditAction.CREATE_POST.value, "too much")
        await svc.debit(db, "u1", 1, CreditAction.APPLY.value, "apply")
        assert ledger_repo.log_sum("u1") == await svc.get_balance(db, "u1") == 19


class TestListLog:
    async def test_pagination(self, svc, db) -> None:  # type: ignore[no-untyped-def]
        await svc.initialize(db, "u1", 10)
        for i in range(4):
            await svc.debit(db, "u1", 1, CreditAction.APPLY.value, f"apply {i}")

        first = await svc.list_log(db, "u1", limit=3)
        assert [i.description for i in first.items] == ["apply 3", "apply 2", "apply 1"]
        assert first.has_more is True

        second = await svc.list_log(db, "u1", cursor=first.next_cursor, limit=3)
        assert [i.action for i in second.items] == ["apply", "init"]
        assert second.has_more is False
        assert second.next_cursor is None

    def test_cursor_roundtrip_and_garbage(self) -> None:
        assert cursor_decode(cursor_encode(42)) == 42
        assert cursor_decode("not-a-cursor") is None
        assert cursor_decode(None) is None
