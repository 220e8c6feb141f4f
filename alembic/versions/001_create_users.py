"""001: timestamp trigger function + users table

Revision ID: 001
Revises: 
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE users (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            email           VARCHAR(255)    NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            role            VARCHAR(16)     NOT NULL DEFAULT 'USER',
            is_active       BOOLEAN         NOT NULL DEFAULT TRUE,
            birthdate       DATE,
            city            VARCHAR(128),
            state           VARCHAR(128),
            race            VARCHAR(64),
            profile_image   VARCHAR(1024),
            lifetime_val    NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_email   UNIQUE (email),
            CONSTRAINT ck_users_role    CHECK (role IN ('USER', 'ADMIN'))
        );
    """)
    # Login and result-line resolution both match case-insensitively
    op.execute("CREATE UNIQUE INDEX uq_users_email_lower ON users (LOWER(email));")
    op.execute("""
        CREATE INDEX idx_users_local_part
        ON users (LOWER(split_part(email, '@', 1)));
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE users IS 'Login identity and profile, one row per user';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
