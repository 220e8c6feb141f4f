"""003: create account_balances and bakis tables

Revision ID: 003
Revises: 002
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Both kinds share one shape; only the table name differs
_TABLES = ("account_balances", "bakis")


def upgrade() -> None:
    for table in _TABLES:
        op.execute(f"""
            CREATE TABLE {table} (
                id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
                user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
                category_id     UUID            NOT NULL REFERENCES categories (id),
                balance         NUMERIC(14, 2)  NOT NULL DEFAULT 0,
                created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
                updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
                CONSTRAINT uq_{table}_user_category UNIQUE (user_id, category_id)
            );
        """)
        op.execute(f"CREATE INDEX idx_{table}_category ON {table} (category_id);")
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)
    op.execute(
        "COMMENT ON TABLE account_balances IS "
        "'Running account balance per (user, category); equals the signed sum of its transactions';"
    )
    op.execute(
        "COMMENT ON TABLE bakis IS "
        "'Running outstanding (baki) balance per (user, category); same invariant as account_balances';"
    )


def downgrade() -> None:
    for table in reversed(_TABLES):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE;")
