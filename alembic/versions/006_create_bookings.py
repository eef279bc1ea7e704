"""006: create bookings table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bookings (
            id                          SERIAL       PRIMARY KEY,
            post_id                     INTEGER,
            worker_slug                 VARCHAR(128),
            buyer_uid                   VARCHAR(64)  NOT NULL,
            tier                        VARCHAR(16)  NOT NULL,
            base_pay                    INTEGER      NOT NULL,
            platform_fee                INTEGER      NOT NULL DEFAULT 0,
            boost                       VARCHAR(32)  NOT NULL DEFAULT 'None',
            boost_fee                   INTEGER      NOT NULL DEFAULT 0,
            total_amount                INTEGER      NOT NULL,
            status                      VARCHAR(20)  NOT NULL DEFAULT 'pending_payment',
            payment_structure           VARCHAR(16)  NOT NULL DEFAULT 'full_upfront',
            deposit_amount              INTEGER,
            final_amount                INTEGER,
            deposit_status              VARCHAR(16),
            final_status                VARCHAR(16),
            payment_method              VARCHAR(16)  NOT NULL DEFAULT 'external',
            escrow_status               VARCHAR(16)  NOT NULL DEFAULT 'none',
            provider_session_id         VARCHAR(255),
            provider_payment_intent_id  VARCHAR(255),
            deposit_session_id          VARCHAR(255),
            final_session_id            VARCHAR(255),
            escrow_authorized_at        TIMESTAMPTZ,
            escrow_captured_at          TIMESTAMPTZ,
            created_at                  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bookings_status CHECK (
                status IN ('pending_payment', 'payment_submitted', 'deposit_paid',
                           'confirmed', 'cancelled')
            ),
            CONSTRAINT ck_bookings_payment_structure CHECK (
                payment_structure IN ('full_upfront', 'split_50_50')
            ),
            CONSTRAINT ck_bookings_installment_status CHECK (
                (deposit_status IS NULL OR deposit_status IN ('pending', 'submitted', 'paid'))
                AND (final_status IS NULL OR final_status IN ('pending', 'submitted', 'paid'))
            ),
            CONSTRAINT ck_bookings_payment_method CHECK (payment_method IN ('external', 'escrow')),
            CONSTRAINT ck_bookings_escrow_status CHECK (
                escrow_status IN ('none', 'authorized', 'captured', 'cancelled', 'refunded')
            ),
            CONSTRAINT ck_bookings_amounts_gte_0 CHECK (
                base_pay >= 0 AND platform_fee >= 0 AND boost_fee >= 0
                AND total_amount = base_pay + platform_fee + boost_fee
            ),
            CONSTRAINT ck_bookings_split CHECK (
                (payment_structure = 'full_upfront'
                    AND deposit_amount IS NULL AND final_amount IS NULL)
                OR (payment_structure = 'split_50_50'
                    AND deposit_amount = (total_amount + 1) / 2
                    AND deposit_amount + final_amount = total_amount
                    AND deposit_status IS NOT NULL AND final_status IS NOT NULL)
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_bookings_updated_at
            BEFORE UPDATE ON bookings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("CREATE INDEX idx_bookings_buyer ON bookings (buyer_uid, created_at DESC);")
    op.execute("CREATE INDEX idx_bookings_worker ON bookings (worker_slug);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bookings CASCADE;")
