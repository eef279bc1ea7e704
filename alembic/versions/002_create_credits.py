"""002: create credits and credit_logs tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE credits (
            id          BIGSERIAL   PRIMARY KEY,
            user_id     VARCHAR(64) NOT NULL,
            balance     INTEGER     NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_credits_user_id       UNIQUE (user_id),
            CONSTRAINT ck_credits_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_credits_updated_at
            BEFORE UPDATE ON credits
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE credit_logs (
            id            BIGSERIAL    PRIMARY KEY,
            user_id       VARCHAR(64)  NOT NULL,
            action        VARCHAR(32)  NOT NULL,
            amount        INTEGER      NOT NULL,
            description   TEXT,
            reference_id  VARCHAR(255),
            created_at    TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_credit_logs_action CHECK (
                action IN ('init', 'create_post', 'create_event', 'apply', 'booking', 'purchase')
            )
        );
    """)
    op.execute("CREATE INDEX idx_credit_logs_user_id ON credit_logs (user_id, id DESC);")
    op.execute("""
        CREATE UNIQUE INDEX uq_credit_logs_action_reference
            ON credit_logs (action, reference_id)
            WHERE reference_id IS NOT NULL;
    """)
    op.execute("""
        CREATE TRIGGER trg_credit_logs_append_only
            BEFORE UPDATE OR DELETE ON credit_logs
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE credits IS 'Per-user credit balance; sum(credit_logs.amount) = balance';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS credit_logs CASCADE;")
    op.execute("DROP TABLE IF EXISTS credits CASCADE;")
