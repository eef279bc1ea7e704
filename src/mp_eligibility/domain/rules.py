"""Eligibility rules — pure functions over verification records.

Nothing here touches the database. Callers load the records and pass the
catalog explicitly.
"""

from collections.abc import Iterable

from src.mp_common.catalog import Catalog
from src.mp_common.enums import VerificationStatus
from src.mp_eligibility.domain.models import (
    Allowed,
    Denied,
    PostDecision,
    ProfessionalVerification,
    VerificationRequest,
)


def is_age_verified(requests: Iterable[VerificationRequest]) -> bool:
    """At least one approved request with the age box ticked."""
    return any(
        r.status == VerificationStatus.APPROVED and r.age_confirmed for r in requests
    )


def can_view_nsfw(requests: Iterable[VerificationRequest]) -> bool:
    return is_age_verified(requests)


def is_category_licensed(
    records: Iterable[ProfessionalVerification], category: str, catalog: Catalog
) -> bool:
    """Approved professional verification for exactly this licensed category."""
    if category not in catalog.licensed_categories:
        return False
    return any(
        r.category == category and r.status == VerificationStatus.APPROVED for r in records
    )


def can_post_in_category(
    records: Iterable[ProfessionalVerification],
    category: str,
    is_event: bool,
    catalog: Catalog,
) -> PostDecision:
    if is_event or category not in catalog.licensed_categories:
        return Allowed()
    if is_category_licensed(records, category, catalog):
        return Allowed()
    return Denied(
        reason=f"Professional verification required to post in {category}",
        category=category,
    )


def requires_age_gate(category: str, nsfw_flag: bool, catalog: Catalog) -> bool:
    return (
        nsfw_flag
        or category == catalog.nsfw_category
        or category == catalog.adult_club_event
    )


def normalize_nsfw(category: str, is_event: bool, nsfw_flag: bool, catalog: Catalog) -> bool:
    """Stored nsfw flag for a new post.

    An Adult Club Event is always nsfw regardless of the submitted flag; the
    NSFW gig category is too.
    """
    if is_event and category == catalog.adult_club_event:
        return True
    return requires_age_gate(category, nsfw_flag, catalog)
