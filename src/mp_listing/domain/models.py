"""Domain models for mp_listing — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.mp_common.enums import ApplicationStatus, PaymentStructure, PostType


@dataclass
class Post:
    id: int
    user_id: str
    post_type: str                   # PostType value
    title: str
    category: str
    tier: str
    pay: int                         # cents
    promoter_name: str
    nsfw: bool = False
    boost_level: str = "None"
    boost_expires_at: datetime | None = None
    verified: bool = False
    payment_structure: str = PaymentStructure.FULL_UPFRONT.value
    venue: str | None = None
    address: str | None = None
    full_address: str | None = None  # only shown to the owner and accepted applicants
    date: str | None = None
    description: str | None = None
    created_at: datetime | None = None

    @property
    def is_event(self) -> bool:
        return self.post_type == PostType.EVENT


@dataclass(frozen=True)
class NewPost:
    user_id: str
    post_type: str
    title: str
    category: str
    tier: str
    pay: int
    promoter_name: str
    nsfw: bool
    boost_level: str
    boost_expires_at: datetime | None
    payment_structure: str
    venue: str | None = None
    address: str | None = None
    full_address: str | None = None
    date: str | None = None
    description: str | None = None


@dataclass
class Application:
    id: int
    post_id: int
    applicant_id: str
    status: str = ApplicationStatus.PENDING.value
    poster_response: str | None = None
    created_at: datetime | None = None
    responded_at: datetime | None = None


@dataclass(frozen=True)
class PostFilters:
    search: str | None = None
    category: str | None = None      # "All" or None means every category
    post_type: str | None = None     # "all" or None means gigs and events
    sort_by: str = "Newest"          # "Newest" | "Pay"
    include_nsfw: bool = False       # already resolved against the viewer's eligibility
    limit: int = 100
    offset: int = 0
