"""Authorization policy — who counts as an admin.

Call sites depend on the AuthorizationPolicy protocol only, so the e-mail
allow-list can be replaced by a role-based check without touching them.
"""

from typing import Protocol

from src.mp_common.catalog import Catalog
from src.mp_gateway.auth.identity import Identity


class AuthorizationPolicy(Protocol):
    def is_admin(self, identity: Identity) -> bool: ...


class EmailAllowListPolicy:
    def __init__(self, admin_emails: frozenset[str]) -> None:
        self._admin_emails = admin_emails

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> "EmailAllowListPolicy":
        return cls(catalog.admin_emails)

    def is_admin(self, identity: Identity) -> bool:
        return bool(identity.email) and identity.email.strip().lower() in self._admin_emails  # type: ignore[union-attr]


def can_act_on_booking(policy: AuthorizationPolicy, identity: Identity, buyer_uid: str) -> bool:
    """Booking owner (buyer) or admin."""
    return identity.user_id == buyer_uid or policy.is_admin(identity)
