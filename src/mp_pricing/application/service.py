"""Quote façade over the pure calculator, for request handlers."""

from datetime import datetime

from src.mp_common.catalog import Catalog, get_catalog
from src.mp_common.cents import cents_to_display
from src.mp_common.datetime_utils import isoformat_or_none, utc_now
from src.mp_pricing.application.schemas import (
    ListingCostRequest,
    ListingCostResponse,
    MoneyFeesOut,
)
from src.mp_pricing.domain import calculator


def compute_listing_cost(
    req: ListingCostRequest,
    catalog: Catalog | None = None,
    now: datetime | None = None,
) -> ListingCostResponse:
    tables = (catalog or get_catalog()).pricing
    cost = calculator.listing_cost(
        is_event=req.is_event,
        is_nsfw_event=req.is_nsfw_event,
        tier=req.tier,
        boost_level=req.boost_level,
        base_pay=req.base_pay_cents,
        tables=tables,
    )
    expires = calculator.boost_expiry(req.boost_level, now or utc_now(), tables)
    return ListingCostResponse(
        credit_cost=cost.credit_cost,
        money=MoneyFeesOut(
            base_pay_cents=cost.money.base_pay,
            tier_fee_cents=cost.money.tier_fee,
            boost_fee_cents=cost.money.boost_fee,
            total_amount_cents=cost.money.total_amount,
            total_amount_display=cents_to_display(cost.money.total_amount),
        ),
        boost_expires_at=isoformat_or_none(expires),
    )
