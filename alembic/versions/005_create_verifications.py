"""005: create verification_requests and professional_verifications tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE verification_requests (
            id                 SERIAL       PRIMARY KEY,
            user_id            VARCHAR(64)  NOT NULL,
            id_image_path      TEXT         NOT NULL,
            selfie_image_path  TEXT,
            status             VARCHAR(16)  NOT NULL DEFAULT 'pending',
            age_confirmed      BOOLEAN      NOT NULL DEFAULT FALSE,
            admin_notes        TEXT,
            created_at         TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            reviewed_at        TIMESTAMPTZ,
            CONSTRAINT ck_verification_requests_status
                CHECK (status IN ('pending', 'approved', 'rejected'))
        );
    """)
    op.execute("CREATE INDEX idx_verification_requests_user ON verification_requests (user_id);")
    op.execute("""
        CREATE TABLE professional_verifications (
            id                 SERIAL       PRIMARY KEY,
            user_id            VARCHAR(64)  NOT NULL,
            category           TEXT         NOT NULL,
            license_type       TEXT         NOT NULL,
            license_number     TEXT,
            issuing_authority  TEXT,
            expiration_date    TEXT,
            document_path      TEXT         NOT NULL,
            business_name      TEXT,
            status             VARCHAR(16)  NOT NULL DEFAULT 'pending',
            admin_notes        TEXT,
            created_at         TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            reviewed_at        TIMESTAMPTZ,
            CONSTRAINT ck_professional_verifications_status
                CHECK (status IN ('pending', 'approved', 'rejected'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_professional_verifications_user_category
            ON professional_verifications (user_id, category);
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS professional_verifications CASCADE;")
    op.execute("DROP TABLE IF EXISTS verification_requests CASCADE;")
