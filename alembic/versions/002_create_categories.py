"""002: create categories table

Revision ID: 002
Revises: 001
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE categories (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name            VARCHAR(255)    NOT NULL,
            media_url       VARCHAR(1024),
            parent          UUID            REFERENCES categories (id) ON DELETE SET NULL,
            arrangement     INTEGER,
            active          BOOLEAN         NOT NULL DEFAULT TRUE,
            deleted_at      TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_categories_not_own_parent CHECK (parent IS NULL OR parent <> id)
        );
    """)
    op.execute("""
        CREATE INDEX idx_categories_live
        ON categories (arrangement, name)
        WHERE deleted_at IS NULL;
    """)
    op.execute("COMMENT ON TABLE categories IS 'Product categories, soft-deleted via deleted_at';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS categories CASCADE;")
