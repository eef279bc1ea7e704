"""Pydantic schemas for mp_eligibility API."""

from pydantic import BaseModel, Field

from src.mp_eligibility.domain.models import ProfessionalVerification, VerificationRequest

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SubmitVerificationRequest(BaseModel):
    id_image_path: str = Field(..., min_length=1)
    selfie_image_path: str | None = None


class SubmitProfessionalVerificationRequest(BaseModel):
    category: str = Field(..., min_length=1)
    license_type: str = Field(..., min_length=1)
    document_path: str = Field(..., min_length=1)
    license_number: str | None = None
    issuing_authority: str | None = None
    expiration_date: str | None = None
    business_name: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class VerificationRequestOut(BaseModel):
    id: int
    status: str
    age_confirmed: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, v: VerificationRequest) -> "VerificationRequestOut":
        return cls(
            id=v.id,
            status=v.status,
            age_confirmed=v.age_confirmed,
            created_at=v.created_at.isoformat() if v.created_at else None,
        )


class ProfessionalVerificationOut(BaseModel):
    id: int
    category: str
    license_type: str
    status: str
    created_at: str | None

    @classmethod
    def from_domain(cls, v: ProfessionalVerification) -> "ProfessionalVerificationOut":
        return cls(
            id=v.id,
            category=v.category,
            license_type=v.license_type,
            status=v.status,
            created_at=v.created_at.isoformat() if v.created_at else None,
        )


class LicensedCategoryOut(BaseModel):
    label: str
    required_docs: str
    examples: str


class CategoryCheckResponse(BaseModel):
    required: bool
    approved: bool
    pending: bool = False
    category_info: LicensedCategoryOut | None = None


class EligibilityResponse(BaseModel):
    age_verified: bool
    can_view_nsfw: bool
    licensed_categories: list[str]
