"""Integer arithmetic utilities for money amounts.

All money amounts are int cents. No float, no Decimal.
Credits are plain ints and never pass through these helpers.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def split_half_ceil(total: int) -> tuple[int, int]:
    """Split total into (first, second) with first taking the ceiling half.

    10000 -> (5000, 5000), 10001 -> (5001, 5000).
    """
    first = (total + 1) // 2
    return first, total - first
