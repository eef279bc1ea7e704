"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

Every balance mutation is one atomic PostgreSQL statement:
  debit       UPDATE ... WHERE balance >= :amount RETURNING   (0 rows = insufficient)
  credit      INSERT ... ON CONFLICT DO UPDATE ... RETURNING  (upsert)
  initialize  INSERT ... ON CONFLICT DO NOTHING RETURNING     (0 rows = already exists)
Each mutation is followed by exactly one credit_logs insert in the same
transaction, so sum(credit_logs.amount) tracks balance.

Transaction ownership: The CALLER (application service or router) is responsible for
starting and committing the transaction via `async with db.begin()`.
"""

import logging

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.enums import CreditAction
from src.mp_common.errors import (
    DuplicateFulfillmentError,
    InsufficientCreditsError,
    InternalError,
)
from src.mp_ledger.domain.models import Credit, CreditLogEntry

logger = logging.getLogger(__name__)

_GET_CREDIT_SQL = text("""
    SELECT user_id, balance, updated_at
    FROM credits
    WHERE user_id = :user_id
""")

_INITIALIZE_SQL = text("""
    INSERT INTO credits (user_id, balance)
    VALUES (:user_id, :balance)
    ON CONFLICT (user_id) DO NOTHING
    RETURNING user_id, balance, updated_at
""")

_DEBIT_SQL = text("""
    UPDATE credits
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE user_id = :user_id AND balance >= :amount
    RETURNING user_id, balance, updated_at
""")

# xmax = 0 only on a freshly inserted tuple; an updated tuple carries the
# updating transaction's id.
_CREDIT_SQL = text("""
    INSERT INTO credits (user_id, balance)
    VALUES (:user_id, :amount)
    ON CONFLICT (user_id) DO UPDATE
        SET balance = credits.balance + EXCLUDED.balance,
            updated_at = NOW()
    RETURNING user_id, balance, updated_at, (xmax = 0) AS inserted
""")

_INSERT_LOG_SQL = text("""
    INSERT INTO credit_logs (user_id, action, amount, description, reference_id)
    VALUES (:user_id, :action, :amount, :description, :reference_id)
    RETURNING id, user_id, action, amount, description, reference_id, created_at
""")

_LIST_LOG_SQL = text("""
    SELECT id, user_id, action, amount, description, reference_id, created_at
    FROM credit_logs
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")

_HAS_REFERENCE_SQL = text("""
    SELECT 1 FROM credit_logs
    WHERE action = :action AND reference_id = :reference_id
    LIMIT 1
""")


def _row_to_credit(row: object) -> Credit:
    return Credit(
        user_id=row.user_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_log(row: object) -> CreditLogEntry:
    return CreditLogEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        action=row.action,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository — all balance changes atomic at the SQL level."""

    async def _append_log(
        self,
        db: AsyncSession,
        user_id: str,
        action: str,
        amount: int,
        description: str,
        reference_id: str | None = None,
    ) -> CreditLogEntry:
        params = {
            "user_id": user_id,
            "action": action,
            "amount": amount,
            "description": description,
            "reference_id": reference_id,
        }
        try:
            result = await db.execute(_INSERT_LOG_SQL, params)
        except IntegrityError as exc:
            # uq_credit_logs_action_reference: a concurrent fulfilment won
            if reference_id is None:
                raise
            raise DuplicateFulfillmentError(reference_id) from exc
        row = result.fetchone()
        if row is None:
            raise InternalError("Credit log insert returned no rows — this should never happen")
        return _row_to_log(row)

    async def get_credit(self, db: AsyncSession, user_id: str) -> Credit | None:
        result = await db.execute(_GET_CREDIT_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_credit(row) if row else None

    async def initialize(
        self, db: AsyncSession, user_id: str, starting_balance: int
    ) -> Credit:
        result = await db.execute(
            _INITIALIZE_SQL, {"user_id": user_id, "balance": starting_balance}
        )
        row = result.fetchone()
        if row is None:
            existing = await self.get_credit(db, user_id)
            if existing is None:
                raise InternalError(f"Credit row vanished for user {user_id}")
            return existing
        credit = _row_to_credit(row)
        await self._append_log(
            db, user_id, CreditAction.INIT.value, starting_balance, "Initial credits"
        )
        logger.info("credits initialized user=%s balance=%d", user_id, starting_balance)
        return credit

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        action: str,
        description: str,
    ) -> tuple[Credit, CreditLogEntry]:
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            existing = await self.get_credit(db, user_id)
            available = existing.balance if existing else 0
            raise InsufficientCreditsError(amount, available)
        credit = _row_to_credit(row)
        entry = await self._append_log(db, user_id, action, -amount, description)
        return credit, entry

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        action: str,
        description: str,
        reference_id: str | None = None,
    ) -> tuple[Credit, CreditLogEntry]:
        result = await db.execute(_CREDIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise InternalError("Credit upsert returned no rows — this should never happen")
        credit = _row_to_credit(row)
        if row.inserted:  # type: ignore[attr-defined]
            # First-ever grant opens the balance: logged once, as init.
            action = CreditAction.INIT.value
            description = f"Initial credits ({description})"
        entry = await self._append_log(
            db, user_id, action, amount, description, reference_id
        )
        return credit, entry

    async def list_log_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
    ) -> list[CreditLogEntry]:
        result = await db.execute(
            _LIST_LOG_SQL,
            {"user_id": user_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_log(row) for row in result.fetchall()]

    async def has_reference(self, db: AsyncSession, action: str, reference_id: str) -> bool:
        result = await db.execute(
            _HAS_REFERENCE_SQL, {"action": action, "reference_id": reference_id}
        )
        return result.fetchone() is not None
