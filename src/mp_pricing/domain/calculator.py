"""Listing cost calculator — pure functions over immutable PricingTables.

Credit costs (what a listing costs to post) and money fees (what a booking
charges on top of base pay) are separate tables and never mix.
"""

from datetime import datetime, timedelta

from src.mp_common.catalog import DEFAULT_PRICING, PlanDetails, PricingTables
from src.mp_common.datetime_utils import ensure_utc
from src.mp_common.enums import Plan
from src.mp_pricing.domain.models import ListingCost, MoneyBreakdown

_DEFAULT_POST_COST = 1


def post_cost(tier: str, tables: PricingTables = DEFAULT_PRICING) -> int:
    """Credit cost of a gig post; unknown tiers cost the minimum."""
    return tables.post_credit_costs.get(tier, _DEFAULT_POST_COST)


def event_cost(is_nsfw_event: bool, tables: PricingTables = DEFAULT_PRICING) -> int:
    return tables.nsfw_event_credit_cost if is_nsfw_event else tables.event_credit_cost


def boost_cost(boost_level: str | None, tables: PricingTables = DEFAULT_PRICING) -> int:
    option = tables.boosts.get(boost_level or "None")
    return option.credit_cost if option else 0


def apply_cost(tables: PricingTables = DEFAULT_PRICING) -> int:
    return tables.apply_credit_cost


def verification_cost(tables: PricingTables = DEFAULT_PRICING) -> int:
    return tables.verification_credit_cost


def total_credit_cost(
    is_event: bool,
    is_nsfw_event: bool,
    tier: str,
    boost_level: str | None,
    tables: PricingTables = DEFAULT_PRICING,
) -> int:
    base = event_cost(is_nsfw_event, tables) if is_event else post_cost(tier, tables)
    return base + boost_cost(boost_level, tables)


def can_afford(balance: int, cost: int, plan: str) -> bool:
    """Elite plans always afford; everyone else needs the balance."""
    if plan == Plan.ELITE:
        return True
    return balance >= cost


def money_total(
    base_pay: int, tier: str, boost_level: str | None, tables: PricingTables = DEFAULT_PRICING
) -> MoneyBreakdown:
    """Booking money in cents: base pay + tier platform fee + boost fee."""
    tier_fee = tables.tier_fees_cents.get(tier, 0)
    option = tables.boosts.get(boost_level or "None")
    boost_fee = option.fee_cents if option else 0
    return MoneyBreakdown(
        base_pay=base_pay,
        tier_fee=tier_fee,
        boost_fee=boost_fee,
        total_amount=base_pay + tier_fee + boost_fee,
    )


def boost_expiry(
    boost_level: str | None, now: datetime, tables: PricingTables = DEFAULT_PRICING
) -> datetime | None:
    """now + boost hours, or None for boosts with no duration."""
    option = tables.boosts.get(boost_level or "None")
    if option is None or option.hours == 0:
        return None
    return now + timedelta(hours=option.hours)


def is_boost_active(boost_expires_at: datetime | None, now: datetime) -> bool:
    return boost_expires_at is not None and ensure_utc(boost_expires_at) > ensure_utc(now)


def plan_details(plan: str, tables: PricingTables = DEFAULT_PRICING) -> PlanDetails:
    """Unknown plans fall back to free."""
    return tables.plans.get(plan) or tables.plans[Plan.FREE.value]


def can_use_boosts(plan: str, tables: PricingTables = DEFAULT_PRICING) -> bool:
    return plan_details(plan, tables).boosts_enabled


def has_unlimited_posts(plan: str, tables: PricingTables = DEFAULT_PRICING) -> bool:
    return plan_details(plan, tables).unlimited_posts


def listing_cost(
    *,
    is_event: bool,
    is_nsfw_event: bool,
    tier: str,
    boost_level: str | None,
    base_pay: int,
    tables: PricingTables = DEFAULT_PRICING,
) -> ListingCost:
    return ListingCost(
        credit_cost=total_credit_cost(is_event, is_nsfw_event, tier, boost_level, tables),
        money=money_total(base_pay, tier, boost_level, tables),
    )
