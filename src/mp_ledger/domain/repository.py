"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_ledger.domain.models import Credit, CreditLogEntry


class LedgerRepositoryProtocol(Protocol):
    async def get_credit(self, db: AsyncSession, user_id: str) -> Credit | None: ...

    async def initialize(
        self, db: AsyncSession, user_id: str, starting_balance: int
    ) -> Credit: ...

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        action: str,
        description: str,
    ) -> tuple[Credit, CreditLogEntry]: ...

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        action: str,
        description: str,
        reference_id: str | None = None,
    ) -> tuple[Credit, CreditLogEntry]: ...

    async def list_log_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
    ) -> list[CreditLogEntry]: ...

    async def has_reference(self, db: AsyncSession, action: str, reference_id: str) -> bool: ...
