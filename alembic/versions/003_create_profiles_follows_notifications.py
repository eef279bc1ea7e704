"""003: create profiles, follows and notifications tables

Only the columns this service reads or writes. The profile service owns the
rest of the profile.

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE profiles (
            id          SERIAL      PRIMARY KEY,
            user_id     VARCHAR(64) NOT NULL,
            slug        VARCHAR(128),
            plan        VARCHAR(16) NOT NULL DEFAULT 'free',
            verified    BOOLEAN     NOT NULL DEFAULT FALSE,
            cash_app_handle VARCHAR(64),
            created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_profiles_user_id UNIQUE (user_id),
            CONSTRAINT uq_profiles_slug UNIQUE (slug),
            CONSTRAINT ck_profiles_plan CHECK (plan IN ('free', 'pro', 'elite'))
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_profiles_updated_at
            BEFORE UPDATE ON profiles
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE follows (
            id                SERIAL      PRIMARY KEY,
            follower_user_id  VARCHAR(64) NOT NULL,
            followed_user_id  VARCHAR(64) NOT NULL,
            created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_follows_pair UNIQUE (follower_user_id, followed_user_id)
        );
    """)
    op.execute("CREATE INDEX idx_follows_followed ON follows (followed_user_id);")
    op.execute("""
        CREATE TABLE notifications (
            id          SERIAL       PRIMARY KEY,
            user_id     VARCHAR(64)  NOT NULL,
            type        VARCHAR(32)  NOT NULL,
            title       TEXT         NOT NULL,
            message     TEXT         NOT NULL,
            link_url    TEXT,
            read        BOOLEAN      NOT NULL DEFAULT FALSE,
            created_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_notifications_user ON notifications (user_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
    op.execute("DROP TABLE IF EXISTS follows CASCADE;")
    op.execute("DROP TABLE IF EXISTS profiles CASCADE;")
