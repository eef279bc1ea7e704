"""Domain models for mp_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Credit:
    user_id: str
    balance: int                     # credits, never negative
    updated_at: datetime | None = None


@dataclass
class CreditLogEntry:
    id: int                          # BIGSERIAL
    user_id: str
    action: str                      # CreditAction value
    amount: int                      # signed, positive=grant negative=spend
    description: str | None = None
    reference_id: str | None = None
    created_at: datetime | None = None
