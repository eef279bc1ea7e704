"""Verification Store protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_eligibility.domain.models import ProfessionalVerification, VerificationRequest


class VerificationRepositoryProtocol(Protocol):
    async def list_verification_requests(
        self, db: AsyncSession, user_id: str
    ) -> list[VerificationRequest]: ...

    async def create_verification_request(
        self,
        db: AsyncSession,
        user_id: str,
        id_image_path: str,
        selfie_image_path: str | None,
    ) -> VerificationRequest: ...

    async def list_professional_verifications(
        self, db: AsyncSession, user_id: str
    ) -> list[ProfessionalVerification]: ...

    async def create_professional_verification(
        self,
        db: AsyncSession,
        user_id: str,
        category: str,
        license_type: str,
        document_path: str,
        license_number: str | None,
        issuing_authority: str | None,
        expiration_date: str | None,
        business_name: str | None,
    ) -> ProfessionalVerification: ...
