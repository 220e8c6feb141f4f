"""005: create transactions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id             UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            category_id         UUID            NOT NULL REFERENCES categories (id),
            amount              NUMERIC(14, 2)  NOT NULL,
            type                VARCHAR(10)     NOT NULL,
            target              VARCHAR(20)     NOT NULL,
            source              VARCHAR(10)     NOT NULL DEFAULT 'MANUAL',
            account_balance_id  UUID            REFERENCES account_balances (id) ON DELETE CASCADE,
            baki_id             UUID            REFERENCES bakis (id) ON DELETE CASCADE,
            result_id           UUID            REFERENCES results (id) ON DELETE SET NULL,
            note_id             UUID            REFERENCES notes (id) ON DELETE SET NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_type CHECK (type IN ('credit', 'debit')),
            CONSTRAINT ck_transactions_target CHECK (target IN ('account_balance', 'baki')),
            CONSTRAINT ck_transactions_source CHECK (source IN ('NOTE', 'RESULT', 'MANUAL')),
            CONSTRAINT ck_transactions_one_balance CHECK (
                (target = 'account_balance' AND account_balance_id IS NOT NULL AND baki_id IS NULL)
                OR (target = 'baki' AND baki_id IS NOT NULL AND account_balance_id IS NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_transactions_user_time ON transactions (user_id, created_at DESC);")
    op.execute("""
        CREATE INDEX idx_transactions_account_balance
        ON transactions (account_balance_id)
        WHERE account_balance_id IS NOT NULL;
    """)
    op.execute("""
        CREATE INDEX idx_transactions_baki
        ON transactions (baki_id)
        WHERE baki_id IS NOT NULL;
    """)
    op.execute("""
        CREATE INDEX idx_transactions_result
        ON transactions (result_id)
        WHERE result_id IS NOT NULL;
    """)
    op.execute(
        "COMMENT ON TABLE transactions IS "
        "'Ledger lines; credit adds and debit subtracts amount on the referenced balance';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
