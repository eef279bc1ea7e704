"""LedgerApplicationService — the only writer of credit balances.

No method here opens or commits a transaction: callers wrap the whole unit
(debit + entity creation) in `async with db.begin()` so that a failure after
the debit rolls the debit back too.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.catalog import Catalog, get_catalog
from src.mp_common.enums import CreditAction
from src.mp_common.errors import DuplicateFulfillmentError, ValidationFailedError
from src.mp_ledger.application.schemas import (
    CreditLogItem,
    CreditLogResponse,
    cursor_decode,
    cursor_encode,
)
from src.mp_ledger.domain.models import Credit
from src.mp_ledger.domain.repository import LedgerRepositoryProtocol
from src.mp_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise ValidationFailedError("amount", f"amount must be positive, got {amount}")


class LedgerApplicationService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        catalog: Catalog | None = None,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._catalog = catalog or get_catalog()

    async def get_balance(self, db: AsyncSession, user_id: str) -> int | None:
        """Current balance, or None when the user has never been initialized."""
        credit = await self._repo.get_credit(db, user_id)
        return credit.balance if credit else None

    async def initialize(
        self, db: AsyncSession, user_id: str, starting_balance: int
    ) -> Credit:
        if starting_balance < 0:
            raise ValidationFailedError("starting_balance", "starting balance cannot be negative")
        return await self._repo.initialize(db, user_id, starting_balance)

    async def ensure_credits(self, db: AsyncSession, user_id: str) -> Credit:
        """Return the user's credit row, granting the initial credits on first use."""
        credit = await self._repo.get_credit(db, user_id)
        if credit is not None:
            return credit
        return await self._repo.initialize(db, user_id, self._catalog.initial_credits)

    async def debit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        action: str,
        description: str,
    ) -> Credit:
        _require_positive(amount)
        credit, entry = await self._repo.debit(db, user_id, amount, action, description)
        logger.info(
            "credits debited user=%s amount=%d action=%s balance=%d log_id=%d",
            user_id, amount, action, credit.balance, entry.id,
        )
        return credit

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        action: str,
        description: str,
        reference_id: str | None = None,
    ) -> Credit:
        _require_positive(amount)
        credit, entry = await self._repo.credit(
            db, user_id, amount, action, description, reference_id
        )
        logger.info(
            "credits granted user=%s amount=%d action=%s balance=%d log_id=%d",
            user_id, amount, entry.action, credit.balance, entry.id,
        )
        return credit

    async def list_log(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None = None,
        limit: int = 50,
    ) -> CreditLogResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_log_entries(db, user_id, cursor_id, limit + 1)
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return CreditLogResponse(
            items=[CreditLogItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def debit_for_listing(
        self,
        db: AsyncSession,
        user_id: str,
        cost: int,
        label: str,
        action: str = CreditAction.CREATE_POST.value,
    ) -> Credit:
        """Charge a listing/application/booking cost. A zero cost charges nothing."""
        credit = await self.ensure_credits(db, user_id)
        if cost <= 0:
            return credit
        return await self.debit(db, user_id, cost, action, label)

    async def credit_for_purchase(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        label: str,
        reference_id: str | None = None,
    ) -> Credit:
        """Grant purchased credits; a reference_id can only be fulfilled once.

        The user is initialized first, so the purchase is always logged under
        its own action and never folded into the opening balance.
        """
        _require_positive(amount)
        if reference_id is not None and await self._repo.has_reference(
            db, CreditAction.PURCHASE.value, reference_id
        ):
            raise DuplicateFulfillmentError(reference_id)
        await self.ensure_credits(db, user_id)
        return await self.credit(
            db, user_id, amount, CreditAction.PURCHASE.value, label, reference_id
        )
