"""Domain models for mp_pricing — pure dataclasses."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MoneyBreakdown:
    base_pay: int       # cents
    tier_fee: int       # cents
    boost_fee: int      # cents
    total_amount: int   # cents


@dataclass(frozen=True)
class ListingCost:
    credit_cost: int
    money: MoneyBreakdown
