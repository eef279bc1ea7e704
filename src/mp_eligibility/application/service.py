"""EligibilityGate — loads verification records and applies the pure rules.

Read-only against the verification store except for the two submit
operations, which create pending requests for admins to review elsewhere.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.catalog import Catalog, get_catalog
from src.mp_common.enums import VerificationStatus
from src.mp_common.errors import (
    AgeVerificationRequiredError,
    ValidationFailedError,
    VerificationRequiredError,
)
from src.mp_eligibility.application.schemas import (
    CategoryCheckResponse,
    EligibilityResponse,
    LicensedCategoryOut,
    ProfessionalVerificationOut,
    SubmitProfessionalVerificationRequest,
    SubmitVerificationRequest,
    VerificationRequestOut,
)
from src.mp_eligibility.domain import rules
from src.mp_eligibility.domain.models import Denied, PostDecision
from src.mp_eligibility.domain.repository import VerificationRepositoryProtocol
from src.mp_eligibility.infrastructure.persistence import VerificationRepository


class EligibilityGate:
    def __init__(
        self,
        repo: VerificationRepositoryProtocol | None = None,
        catalog: Catalog | None = None,
    ) -> None:
        self._repo: VerificationRepositoryProtocol = repo or VerificationRepository()
        self._catalog = catalog or get_catalog()

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    async def is_age_verified(self, db: AsyncSession, user_id: str) -> bool:
        requests = await self._repo.list_verification_requests(db, user_id)
        return rules.is_age_verified(requests)

    async def can_view_nsfw(self, db: AsyncSession, user_id: str | None) -> bool:
        if user_id is None:
            return False
        requests = await self._repo.list_verification_requests(db, user_id)
        return rules.can_view_nsfw(requests)

    async def is_category_licensed(self, db: AsyncSession, user_id: str, category: str) -> bool:
        if category not in self._catalog.licensed_categories:
            return False
        records = await self._repo.list_professional_verifications(db, user_id)
        return rules.is_category_licensed(records, category, self._catalog)

    async def can_post_in_category(
        self, db: AsyncSession, user_id: str, category: str, is_event: bool
    ) -> PostDecision:
        if is_event or category not in self._catalog.licensed_categories:
            return rules.can_post_in_category([], category, is_event, self._catalog)
        records = await self._repo.list_professional_verifications(db, user_id)
        return rules.can_post_in_category(records, category, is_event, self._catalog)

    def requires_age_gate(self, category: str, nsfw_flag: bool) -> bool:
        return rules.requires_age_gate(category, nsfw_flag, self._catalog)

    def normalize_nsfw(self, category: str, is_event: bool, nsfw_flag: bool) -> bool:
        return rules.normalize_nsfw(category, is_event, nsfw_flag, self._catalog)

    async def require_age_verified(self, db: AsyncSession, user_id: str) -> None:
        if not await self.is_age_verified(db, user_id):
            raise AgeVerificationRequiredError()

    async def require_can_post(
        self, db: AsyncSession, user_id: str, category: str, is_event: bool
    ) -> None:
        decision = await self.can_post_in_category(db, user_id, category, is_event)
        if isinstance(decision, Denied):
            raise VerificationRequiredError(decision.category)

    # ------------------------------------------------------------------
    # API-facing helpers
    # ------------------------------------------------------------------

    async def summary(self, db: AsyncSession, user_id: str) -> EligibilityResponse:
        requests = await self._repo.list_verification_requests(db, user_id)
        records = await self._repo.list_professional_verifications(db, user_id)
        licensed = sorted(
            c for c in self._catalog.licensed_categories
            if rules.is_category_licensed(records, c, self._catalog)
        )
        return EligibilityResponse(
            age_verified=rules.is_age_verified(requests),
            can_view_nsfw=rules.can_view_nsfw(requests),
            licensed_categories=licensed,
        )

    async def check_category(
        self, db: AsyncSession, user_id: str, category: str
    ) -> CategoryCheckResponse:
        info = self._catalog.licensed_categories.get(category)
        if info is None:
            return CategoryCheckResponse(required=False, approved=False)
        records = await self._repo.list_professional_verifications(db, user_id)
        pending = any(
            r.category == category and r.status == VerificationStatus.PENDING for r in records
        )
        return CategoryCheckResponse(
            required=True,
            approved=rules.is_category_licensed(records, category, self._catalog),
            pending=pending,
            category_info=LicensedCategoryOut(
                label=info.label, required_docs=info.required_docs, examples=info.examples
            ),
        )

    async def list_verification_requests(
        self, db: AsyncSession, user_id: str
    ) -> list[VerificationRequestOut]:
        requests = await self._repo.list_verification_requests(db, user_id)
        return [VerificationRequestOut.from_domain(r) for r in requests]

    async def submit_verification_request(
        self, db: AsyncSession, user_id: str, req: SubmitVerificationRequest
    ) -> VerificationRequestOut:
        created = await self._repo.create_verification_request(
            db, user_id, req.id_image_path, req.selfie_image_path
        )
        return VerificationRequestOut.from_domain(created)

    async def list_professional_verifications(
        self, db: AsyncSession, user_id: str
    ) -> list[ProfessionalVerificationOut]:
        records = await self._repo.list_professional_verifications(db, user_id)
        return [ProfessionalVerificationOut.from_domain(r) for r in records]

    async def submit_professional_verification(
        self, db: AsyncSession, user_id: str, req: SubmitProfessionalVerificationRequest
    ) -> ProfessionalVerificationOut:
        if req.category not in self._catalog.licensed_categories:
            raise ValidationFailedError(
                "category", "This category does not require professional verification"
            )
        created = await self._repo.create_professional_verification(
            db,
            user_id,
            category=req.category,
            license_type=req.license_type,
            document_path=req.document_path,
            license_number=req.license_number,
            issuing_authority=req.issuing_authority,
            expiration_date=req.expiration_date,
            business_name=req.business_name,
        )
        return ProfessionalVerificationOut.from_domain(created)
