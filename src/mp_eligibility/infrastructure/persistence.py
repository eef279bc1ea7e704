"""VerificationRepository — concrete implementation of VerificationRepositoryProtocol.

Read-mostly: this core only submits requests. Admin review writes live
outside this service.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mp_common.errors import InternalError
from src.mp_eligibility.domain.models import ProfessionalVerification, VerificationRequest

_VR_COLUMNS = """
    id, user_id, id_image_path, selfie_image_path, status, age_confirmed,
    admin_notes, created_at, reviewed_at
"""

_PV_COLUMNS = """
    id, user_id, category, license_type, license_number, issuing_authority,
    expiration_date, document_path, business_name, status, admin_notes,
    created_at, reviewed_at
"""

_LIST_VR_SQL = text(f"""
    SELECT {_VR_COLUMNS}
    FROM verification_requests
    WHERE user_id = :user_id
    ORDER BY created_at DESC, id DESC
""")

_INSERT_VR_SQL = text(f"""
    INSERT INTO verification_requests (user_id, id_image_path, selfie_image_path)
    VALUES (:user_id, :id_image_path, :selfie_image_path)
    RETURNING {_VR_COLUMNS}
""")

_LIST_PV_SQL = text(f"""
    SELECT {_PV_COLUMNS}
    FROM professional_verifications
    WHERE user_id = :user_id
    ORDER BY created_at DESC, id DESC
""")

_INSERT_PV_SQL = text(f"""
    INSERT INTO professional_verifications
        (user_id, category, license_type, license_number, issuing_authority,
         expiration_date, document_path, business_name)
    VALUES
        (:user_id, :category, :license_type, :license_number, :issuing_authority,
         :expiration_date, :document_path, :business_name)
    RETURNING {_PV_COLUMNS}
""")


def _row_to_request(row: object) -> VerificationRequest:
    return VerificationRequest(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        id_image_path=row.id_image_path,  # type: ignore[attr-defined]
        selfie_image_path=row.selfie_image_path,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        age_confirmed=row.age_confirmed,  # type: ignore[attr-defined]
        admin_notes=row.admin_notes,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        reviewed_at=row.reviewed_at,  # type: ignore[attr-defined]
    )


def _row_to_professional(row: object) -> ProfessionalVerification:
    return ProfessionalVerification(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        license_type=row.license_type,  # type: ignore[attr-defined]
        license_number=row.license_number,  # type: ignore[attr-defined]
        issuing_authority=row.issuing_authority,  # type: ignore[attr-defined]
        expiration_date=row.expiration_date,  # type: ignore[attr-defined]
        document_path=row.document_path,  # type: ignore[attr-defined]
        business_name=row.business_name,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        admin_notes=row.admin_notes,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        reviewed_at=row.reviewed_at,  # type: ignore[attr-defined]
    )


class VerificationRepository:
    async def list_verification_requests(
        self, db: AsyncSession, user_id: str
    ) -> list[VerificationRequest]:
        result = await db.execute(_LIST_VR_SQL, {"user_id": user_id})
        return [_row_to_request(row) for row in result.fetchall()]

    async def create_verification_request(
        self,
        db: AsyncSession,
        user_id: str,
        id_image_path: str,
        selfie_image_path: str | None,
    ) -> VerificationRequest:
        result = await db.execute(
            _INSERT_VR_SQL,
            {
                "user_id": user_id,
                "id_image_path": id_image_path,
                "selfie_image_path": selfie_image_path,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Verification insert returned no rows")
        return _row_to_request(row)

    async def list_professional_verifications(
        self, db: AsyncSession, user_id: str
    ) -> list[ProfessionalVerification]:
        result = await db.execute(_LIST_PV_SQL, {"user_id": user_id})
        return [_row_to_professional(row) for row in result.fetchall()]

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
    ) -> ProfessionalVerification:
        result = await db.execute(
            _INSERT_PV_SQL,
            {
                "user_id": user_id,
                "category": category,
                "license_type": license_type,
                "license_number": license_number,
                "issuing_authority": issuing_authority,
                "expiration_date": expiration_date,
                "document_path": document_path,
                "business_name": business_name,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Professional verification insert returned no rows")
        return _row_to_professional(row)
