"""Pydantic schemas for mp_pricing API."""

from pydantic import BaseModel, Field

from src.mp_common.catalog import Catalog
from src.mp_common.cents import cents_to_display
from src.mp_common.enums import Tier


class ListingCostRequest(BaseModel):
    is_event: bool = False
    is_nsfw_event: bool = False
    tier: str = Tier.SLOTS.value
    boost_level: str = "None"
    base_pay_cents: int = Field(0, ge=0)


class MoneyFeesOut(BaseModel):
    base_pay_cents: int
    tier_fee_cents: int
    boost_fee_cents: int
    total_amount_cents: int
    total_amount_display: str


class ListingCostResponse(BaseModel):
    credit_cost: int
    money: MoneyFeesOut
    boost_expires_at: str | None


class BoostOut(BaseModel):
    level: str
    fee_cents: int
    hours: int
    credit_cost: int


class PlanOut(BaseModel):
    plan: str
    name: str
    monthly_credits: int
    boosts_enabled: bool
    unlimited_posts: bool


class CreditPackageOut(BaseModel):
    name: str
    credits: int
    price_cents: int
    price_display: str


class PricingCatalogResponse(BaseModel):
    post_credit_costs: dict[str, int]
    event_credit_cost: int
    nsfw_event_credit_cost: int
    apply_credit_cost: int
    verification_credit_cost: int
    tier_fees_cents: dict[str, int]
    boosts: list[BoostOut]
    plans: list[PlanOut]
    credit_packages: list[CreditPackageOut]

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> "PricingCatalogResponse":
        pricing = catalog.pricing
        return cls(
            post_credit_costs=dict(pricing.post_credit_costs),
            event_credit_cost=pricing.event_credit_cost,
            nsfw_event_credit_cost=pricing.nsfw_event_credit_cost,
            apply_credit_cost=pricing.apply_credit_cost,
            verification_credit_cost=pricing.verification_credit_cost,
            tier_fees_cents=dict(pricing.tier_fees_cents),
            boosts=[
                BoostOut(level=level, fee_cents=b.fee_cents, hours=b.hours, credit_cost=b.credit_cost)
                for level, b in pricing.boosts.items()
            ],
            plans=[
                PlanOut(
                    plan=key,
                    name=p.name,
                    monthly_credits=p.monthly_credits,
                    boosts_enabled=p.boosts_enabled,
                    unlimited_posts=p.unlimited_posts,
                )
                for key, p in pricing.plans.items()
            ],
            credit_packages=[
                CreditPackageOut(
                    name=pkg.name,
                    credits=pkg.credits,
                    price_cents=pkg.price_cents,
                    price_display=cents_to_display(pkg.price_cents),
                )
                for pkg in catalog.credit_packages
            ],
        )
