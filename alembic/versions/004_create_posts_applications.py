"""004: create posts and applications tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE posts (
            id                 SERIAL       PRIMARY KEY,
            user_id            VARCHAR(64)  NOT NULL,
            post_type          VARCHAR(8)   NOT NULL DEFAULT 'gig',
            title              TEXT         NOT NULL,
            category           TEXT         NOT NULL,
            tier               VARCHAR(16)  NOT NULL,
            pay                INTEGER      NOT NULL,
            promoter_name      TEXT         NOT NULL,
            nsfw               BOOLEAN      NOT NULL DEFAULT FALSE,
            boost_level        VARCHAR(32)  NOT NULL DEFAULT 'None',
            boost_expires_at   TIMESTAMPTZ,
            verified           BOOLEAN      NOT NULL DEFAULT FALSE,
            payment_structure  VARCHAR(16)  NOT NULL DEFAULT 'full_upfront',
            venue              TEXT,
            address            TEXT,
            full_address       TEXT,
            date               TEXT,
            description        TEXT,
            created_at         TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_posts_post_type CHECK (post_type IN ('gig', 'event')),
            CONSTRAINT ck_posts_tier CHECK (
                tier IN ('Slots', 'Missions', 'Tasks', 'Projects', 'Chances')
            ),
            CONSTRAINT ck_posts_pay_gte_0 CHECK (pay >= 0),
            CONSTRAINT ck_posts_payment_structure CHECK (
                payment_structure IN ('full_upfront', 'split_50_50')
            ),
            CONSTRAINT ck_posts_adult_is_nsfw CHECK (
                category NOT IN ('Adult/NSFW', 'Adult Club Event') OR nsfw
            )
        );
    """)
    op.execute("CREATE INDEX idx_posts_user_id ON posts (user_id);")
    op.execute("CREATE INDEX idx_posts_feed ON posts (nsfw, post_type, category, created_at DESC);")
    op.execute("""
        CREATE TABLE applications (
            id               SERIAL       PRIMARY KEY,
            post_id          INTEGER      NOT NULL REFERENCES posts (id) ON DELETE CASCADE,
            applicant_id     VARCHAR(64)  NOT NULL,
            status           VARCHAR(16)  NOT NULL DEFAULT 'pending',
            poster_response  TEXT,
            created_at       TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            responded_at     TIMESTAMPTZ,
            CONSTRAINT uq_applications_post_applicant UNIQUE (post_id, applicant_id),
            CONSTRAINT ck_applications_status CHECK (status IN ('pending', 'accepted', 'rejected'))
        );
    """)
    op.execute("CREATE INDEX idx_applications_applicant ON applications (applicant_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS applications CASCADE;")
    op.execute("DROP TABLE IF EXISTS posts CASCADE;")
