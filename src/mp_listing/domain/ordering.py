"""Feed ordering for the default ("Newest") sort.

1. posts with an active boost first, latest-expiring boost first
2. verified posters first
3. tier rank, Chances highest
4. newest first

"Pay" sort is simply pay descending.
"""

from src.mp_common.enums import Tier

TIER_RANK: dict[str, int] = {
    Tier.CHANCES.value: 1,
    Tier.PROJECTS.value: 2,
    Tier.TASKS.value: 3,
    Tier.MISSIONS.value: 4,
    Tier.SLOTS.value: 5,
}

UNRANKED_TIER = len(TIER_RANK) + 1

SORT_PAY = "Pay"
SORT_NEWEST = "Newest"


def tier_rank_case(column: str = "tier") -> str:
    """SQL CASE expression ranking tiers as in TIER_RANK."""
    whens = " ".join(f"WHEN {column} = '{tier}' THEN {rank}" for tier, rank in TIER_RANK.items())
    return f"CASE {whens} ELSE {UNRANKED_TIER} END"


def order_by_clause(sort_by: str) -> str:
    if sort_by == SORT_PAY:
        return "pay DESC, id DESC"
    return (
        "CASE WHEN boost_expires_at > NOW() THEN 0 ELSE 1 END ASC, "
        "CASE WHEN boost_expires_at > NOW() THEN boost_expires_at END DESC NULLS LAST, "
        "CASE WHEN verified THEN 0 ELSE 1 END ASC, "
        f"{tier_rank_case()} ASC, "
        "created_at DESC, id DESC"
    )
