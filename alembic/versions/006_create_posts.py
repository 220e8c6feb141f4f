"""006: create post_folders, posts, post_medias, post_folder_medias

Revision ID: 006
Revises: 005
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE post_folders (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name            VARCHAR(255)    NOT NULL,
            image_count     INTEGER         NOT NULL DEFAULT 0,
            video_count     INTEGER         NOT NULL DEFAULT 0,
            active          BOOLEAN         NOT NULL DEFAULT TRUE,
            deleted_at      TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_post_folders_counts CHECK (image_count >= 0 AND video_count >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE posts (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name                VARCHAR(255)    NOT NULL,
            caption             TEXT,
            caption_position    VARCHAR(32)     NOT NULL DEFAULT 'bottom',
            cta_text            VARCHAR(255),
            font_family         VARCHAR(128),
            photo_size          VARCHAR(32)     NOT NULL DEFAULT 'square',
            post_folder_id      UUID            REFERENCES post_folders (id) ON DELETE SET NULL,
            status              VARCHAR(32)     NOT NULL DEFAULT 'active',
            time_post           TIMESTAMPTZ,
            active              BOOLEAN         NOT NULL DEFAULT TRUE,
            deleted_at          TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE INDEX idx_posts_time_post
        ON posts (time_post)
        WHERE deleted_at IS NULL;
    """)
    op.execute("""
        CREATE TABLE post_medias (
            id              BIGSERIAL       PRIMARY KEY,
            post_id         UUID            NOT NULL REFERENCES posts (id) ON DELETE CASCADE,
            media_url       VARCHAR(2048)   NOT NULL,
            arrangement     INTEGER,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_post_medias_post ON post_medias (post_id, arrangement);")
    op.execute("""
        CREATE TABLE post_folder_medias (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            post_folder_id  UUID            REFERENCES post_folders (id) ON DELETE CASCADE,
            media_url       VARCHAR(2048)   NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_post_folder_medias_folder ON post_folder_medias (post_folder_id);")
    op.execute("COMMENT ON TABLE posts IS 'Social posts; time_post drives the derived schedule state';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS post_folder_medias CASCADE;")
    op.execute("DROP TABLE IF EXISTS post_medias CASCADE;")
    op.execute("DROP TABLE IF EXISTS posts CASCADE;")
    op.execute("DROP TABLE IF EXISTS post_folders CASCADE;")
