"""Pydantic schemas and cursor utilities for mp_ledger API."""

import base64
import binascii
import json

from pydantic import BaseModel

from src.mp_common.datetime_utils import isoformat_or_none
from src.mp_ledger.domain.models import Credit, CreditLogEntry

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class CreditBalanceResponse(BaseModel):
    user_id: str
    balance: int
    updated_at: str | None

    @classmethod
    def from_domain(cls, credit: Credit) -> "CreditBalanceResponse":
        return cls(
            user_id=credit.user_id,
            balance=credit.balance,
            updated_at=isoformat_or_none(credit.updated_at),
        )


class CreditLogItem(BaseModel):
    id: int
    action: str
    amount: int
    description: str | None
    reference_id: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, entry: CreditLogEntry) -> "CreditLogItem":
        return cls(
            id=entry.id,
            action=entry.action,
            amount=entry.amount,
            description=entry.description,
            reference_id=entry.reference_id,
            created_at=isoformat_or_none(entry.created_at),
        )


class CreditLogResponse(BaseModel):
    items: list[CreditLogItem]
    next_cursor: str | None
    has_more: bool
