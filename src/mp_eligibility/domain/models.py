"""Domain models for mp_eligibility — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class VerificationRequest:
    id: int
    user_id: str
    id_image_path: str
    status: str                      # VerificationStatus value
    age_confirmed: bool
    selfie_image_path: str | None = None
    admin_notes: str | None = None
    created_at: datetime | None = None
    reviewed_at: datetime | None = None


@dataclass
class ProfessionalVerification:
    id: int
    user_id: str
    category: str
    license_type: str
    document_path: str
    status: str                      # VerificationStatus value
    license_number: str | None = None
    issuing_authority: str | None = None
    expiration_date: str | None = None
    business_name: str | None = None
    admin_notes: str | None = None
    created_at: datetime | None = None
    reviewed_at: datetime | None = None


@dataclass(frozen=True)
class Allowed:
    allowed: bool = True


@dataclass(frozen=True)
class Denied:
    reason: str
    category: str
    allowed: bool = False


PostDecision = Allowed | Denied
