"""Concurrent debits against a live database, one session per caller."""

import asyncio
import uuid

import pytest
from sqlalchemy import text

from src.mp_common.database import async_session_factory, session_scope
from src.mp_common.enums import CreditAction
from src.mp_common.errors import InsufficientCreditsError
from src.mp_ledger.application.service import LedgerApplicationService

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]

_LOG_SUM_SQL = text("SELECT COALESCE(SUM(amount), 0) FROM credit_logs WHERE user_id = :user_id")


async def _debit_in_own_session(ledger: LedgerApplicationService, user_id: str, amount: int) -> int:
    async with session_scope() as session:
        credit = await ledger.debit(
            session, user_id, amount, CreditAction.CREATE_POST.value, "Concurrent debit"
        )
    return credit.balance


async def test_two_concurrent_debits_only_one_succeeds() -> None:
    ledger = LedgerApplicationService()
    user_id = f"it-race-{uuid.uuid4().hex[:8]}"
    async with session_scope() as session:
        await ledger.initialize(session, user_id, 10)

    results = await asyncio.gather(
        _debit_in_own_session(ledger, user_id, 6),
        _debit_in_own_session(ledger, user_id, 6),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, InsufficientCreditsError)]
    successes = [r for r in results if isinstance(r, int)]
    assert len(failures) == 1
    assert successes == [4]
    assert failures[0].available == 4

    async with async_session_factory() as session:
        assert await ledger.get_balance(session, user_id) == 4
        log_sum = (await session.execute(_LOG_SUM_SQL, {"user_id": user_id})).scalar_one()
    assert log_sum == 4
