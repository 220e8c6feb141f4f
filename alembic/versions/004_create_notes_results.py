"""004: create notes and results tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notes (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            category_id     UUID            NOT NULL REFERENCES categories (id),
            amount          NUMERIC(14, 2)  NOT NULL,
            method          VARCHAR(2)      NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            target          VARCHAR(20)     NOT NULL,
            media_url       VARCHAR(2048),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notes_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_notes_method CHECK (method IN ('CA', 'BT', 'CH')),
            CONSTRAINT ck_notes_status CHECK (status IN ('PENDING', 'APPROVED', 'REJECTED')),
            CONSTRAINT ck_notes_target CHECK (target IN ('account_balance', 'baki'))
        );
    """)
    op.execute("CREATE INDEX idx_notes_user_time ON notes (user_id, created_at DESC);")
    op.execute("""
        CREATE INDEX idx_notes_pending
        ON notes (created_at)
        WHERE status = 'PENDING';
    """)
    op.execute("COMMENT ON TABLE notes IS 'User payment notes awaiting admin approval';")

    op.execute("""
        CREATE TABLE results (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            category_id     UUID            NOT NULL REFERENCES categories (id),
            target          VARCHAR(20)     NOT NULL,
            result          TEXT            NOT NULL,
            status          VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_results_target CHECK (target IN ('account_balance', 'baki')),
            CONSTRAINT ck_results_status CHECK (status IN ('PENDING', 'PROCESSED'))
        );
    """)
    op.execute("CREATE INDEX idx_results_time ON results (created_at DESC);")
    op.execute("COMMENT ON TABLE results IS 'Bulk result text; one transaction per resolved line';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS results CASCADE;")
    op.execute("DROP TABLE IF EXISTS notes CASCADE;")
