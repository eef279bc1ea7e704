"""Immutable marketplace catalog: categories, price tables, plans, admin list.

Built once per process by get_catalog() and handed to the components that
need it (eligibility gate, cost calculator, authorization policy). Nothing in
here is mutable after construction: mappings are MappingProxyType views and
sequences are tuples.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType

from config.settings import settings

NSFW_CATEGORY = "Adult/NSFW"
ADULT_CLUB_EVENT = "Adult Club Event"

CATEGORIES: tuple[str, ...] = (
    "Music", "Dance", "Comedy", "Modeling", "Acting",
    "Hair & Beauty", "Barber", "Nails", "Errands & Tasks",
    "Companionship", "Tutoring", "Photography", "Videography", "DJ/Audio",
    "Bartending", "Catering", "Waitstaff & Servers",
    "Event Setup & Takedown", "Promoters & Marketing",
    "Tailoring & Alterations", "Custom Sneakers & Shoes",
    "Fitness & Training", "Chefs & Culinary",
    "Entertainment Managers", "Consultants",
    "Warehouse & Logistics", "Cleaning & Janitorial",
    "Sales & Retail", "Studio & Engineering",
    "General Labor", "Skilled Trades",
    "Other",
    NSFW_CATEGORY,
)

EVENT_CATEGORIES: tuple[str, ...] = (
    "Club Party", "Festival", "Concert", "Job Fair",
    "Open Mic", "Art Show", "Pop-Up Shop", "Community Meetup",
    "Sports Event", "Block Party", "Networking Event", "Showcase",
    "Other Event",
    ADULT_CLUB_EVENT,
)


@dataclass(frozen=True)
class LicensedCategory:
    label: str
    required_docs: str
    examples: str


@dataclass(frozen=True)
class BoostOption:
    fee_cents: int
    hours: int
    credit_cost: int


@dataclass(frozen=True)
class PlanDetails:
    name: str
    monthly_credits: int
    boosts_enabled: bool
    unlimited_posts: bool
    verification_included: bool


@dataclass(frozen=True)
class CreditPackage:
    name: str
    credits: int
    price_cents: int


@dataclass(frozen=True)
class PricingTables:
    """Two independent pricing dimensions.

    Credits are spent to list/apply/boost; money fees (cents) are charged on
    bookings. The tables never reference each other.
    """

    post_credit_costs: Mapping[str, int]
    event_credit_cost: int
    nsfw_event_credit_cost: int
    apply_credit_cost: int
    verification_credit_cost: int
    tier_fees_cents: Mapping[str, int]
    boosts: Mapping[str, BoostOption]
    plans: Mapping[str, PlanDetails]


@dataclass(frozen=True)
class Catalog:
    categories: tuple[str, ...]
    event_categories: tuple[str, ...]
    licensed_categories: Mapping[str, LicensedCategory]
    pricing: PricingTables
    credit_packages: tuple[CreditPackage, ...]
    admin_emails: frozenset[str] = field(default_factory=frozenset)
    initial_credits: int = 3
    nsfw_category: str = NSFW_CATEGORY
    adult_club_event: str = ADULT_CLUB_EVENT


_LICENSED_CATEGORIES = {
    "Warehouse & Logistics": LicensedCategory(
        label="Warehouse & Logistics",
        required_docs="Forklift certification, OSHA card, or warehouse safety training certificate",
        examples="Forklift license, pallet jack certification, OSHA 10/30 card",
    ),
    "Skilled Trades": LicensedCategory(
        label="Skilled Trades",
        required_docs="Trade license, contractor license, or relevant certification",
        examples="Electrician license, plumbing license, general contractor license, HVAC certification",
    ),
    "Studio & Engineering": LicensedCategory(
        label="Studio & Engineering",
        required_docs="Audio engineering certification or professional credentials",
        examples="Pro Tools certification, audio engineering degree, studio apprenticeship completion",
    ),
    "Fitness & Training": LicensedCategory(
        label="Fitness & Training",
        required_docs="Personal trainer certification, CPR/AED certification, or coaching credential",
        examples="NASM, ACE, ISSA certification, CPR/First Aid card",
    ),
    "Chefs & Culinary": LicensedCategory(
        label="Chefs & Culinary",
        required_docs="Food handler's permit, ServSafe certification, or culinary arts credential",
        examples="ServSafe Food Handler card, state food handler's permit, culinary degree or certificate",
    ),
}

DEFAULT_PRICING = PricingTables(
    post_credit_costs=MappingProxyType(
        {"Slots": 1, "Missions": 2, "Tasks": 3, "Projects": 4, "Chances": 5}
    ),
    event_credit_cost=1,
    nsfw_event_credit_cost=3,
    apply_credit_cost=1,
    verification_credit_cost=10,
    tier_fees_cents=MappingProxyType(
        {"Slots": 25, "Missions": 50, "Tasks": 100, "Projects": 200, "Chances": 250}
    ),
    boosts=MappingProxyType({
        "None": BoostOption(fee_cents=0, hours=0, credit_cost=0),
        "24h Boost": BoostOption(fee_cents=300, hours=24, credit_cost=2),
        "72h Boost": BoostOption(fee_cents=700, hours=72, credit_cost=4),
        "7 Day Featured": BoostOption(fee_cents=1500, hours=168, credit_cost=8),
    }),
    plans=MappingProxyType({
        "free": PlanDetails("Free", 3, boosts_enabled=False, unlimited_posts=False,
                            verification_included=False),
        "pro": PlanDetails("Pro", 30, boosts_enabled=True, unlimited_posts=False,
                           verification_included=True),
        "elite": PlanDetails("Elite", 999, boosts_enabled=True, unlimited_posts=True,
                             verification_included=True),
    }),
)

DEFAULT_CREDIT_PACKAGES: tuple[CreditPackage, ...] = (
    CreditPackage("5 Credits", credits=5, price_cents=499),
    CreditPackage("15 Credits", credits=15, price_cents=1299),
    CreditPackage("50 Credits", credits=50, price_cents=3999),
)


def build_catalog(
    admin_emails: tuple[str, ...] = (),
    initial_credits: int = 3,
) -> Catalog:
    return Catalog(
        categories=CATEGORIES,
        event_categories=EVENT_CATEGORIES,
        licensed_categories=MappingProxyType(dict(_LICENSED_CATEGORIES)),
        pricing=DEFAULT_PRICING,
        credit_packages=DEFAULT_CREDIT_PACKAGES,
        admin_emails=frozenset(e.strip().lower() for e in admin_emails),
        initial_credits=initial_credits,
    )


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Process-wide catalog, built from settings on first use."""
    return build_catalog(settings.ADMIN_EMAILS, settings.INITIAL_CREDITS)
