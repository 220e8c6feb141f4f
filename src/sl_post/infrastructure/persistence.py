"""PostRepository: raw SQL over posts and post_medias.

Posts are soft-deleted (deleted_at + active=false) and restorable.
Medias are plain rows with BIGSERIAL ids, ordered by arrangement.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.errors import InternalError
from src.sl_post.domain.models import Post, PostMedia

_POST_COLUMNS = (
    "id, name, caption, caption_position, cta_text, font_family, photo_size, "
    "post_folder_id, status, time_post, active, deleted_at, created_at"
)

_LIST_POSTS_SQL = text(f"""
    SELECT {_POST_COLUMNS}
    FROM posts
    WHERE (:include_deleted OR deleted_at IS NULL)
      AND (CAST(:folder_id AS UUID) IS NULL OR post_folder_id = CAST(:folder_id AS UUID))
    ORDER BY created_at DESC
""")

_GET_POST_SQL = text(f"SELECT {_POST_COLUMNS} FROM posts WHERE id = :id")

_INSERT_POST_SQL = text(f"""
    INSERT INTO posts
        (name, caption, caption_position, cta_text, font_family, photo_size,
         post_folder_id, status, time_post, active)
    VALUES
        (:name, :caption, :caption_position, :cta_text, :font_family, :photo_size,
         :post_folder_id, :status, :time_post, :active)
    RETURNING {_POST_COLUMNS}
""")

_UPDATE_POST_SQL = text(f"""
    UPDATE posts
    SET name = :name,
        caption = :caption,
        caption_position = :caption_position,
        cta_text = :cta_text,
        font_family = :font_family,
        photo_size = :photo_size,
        post_folder_id = :post_folder_id,
        status = :status,
        time_post = :time_post,
        active = :active
    WHERE id = :id
    RETURNING {_POST_COLUMNS}
""")

_SOFT_DELETE_POST_SQL = text(f"""
    UPDATE posts SET deleted_at = NOW(), active = FALSE
    WHERE id = :id
    RETURNING {_POST_COLUMNS}
""")

_RESTORE_POST_SQL = text(f"""
    UPDATE posts SET deleted_at = NULL, active = TRUE
    WHERE id = :id
    RETURNING {_POST_COLUMNS}
""")

_SET_TIME_POST_SQL = text(f"""
    UPDATE posts SET time_post = :time_post
    WHERE id = :id AND deleted_at IS NULL
    RETURNING {_POST_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: post_medias
# ---------------------------------------------------------------------------

_MEDIA_COLUMNS = "id, post_id, media_url, arrangement, created_at"
_MEDIA_ORDER = "ORDER BY arrangement NULLS LAST, id"

_LIST_ALL_MEDIAS_SQL = text(f"SELECT {_MEDIA_COLUMNS} FROM post_medias {_MEDIA_ORDER}")

_LIST_MEDIAS_SQL = text(f"""
    SELECT {_MEDIA_COLUMNS}
    FROM post_medias
    WHERE post_id::text = ANY(:post_ids)
    {_MEDIA_ORDER}
""")

_GET_MEDIA_SQL = text(f"SELECT {_MEDIA_COLUMNS} FROM post_medias WHERE id = :id")

_INSERT_MEDIA_SQL = text(f"""
    INSERT INTO post_medias (post_id, media_url, arrangement)
    VALUES (:post_id, :media_url, :arrangement)
    RETURNING {_MEDIA_COLUMNS}
""")

_UPDATE_MEDIA_SQL = text(f"""
    UPDATE post_medias
    SET post_id = :post_id, media_url = :media_url, arrangement = :arrangement
    WHERE id = :id
    RETURNING {_MEDIA_COLUMNS}
""")

_DELETE_MEDIA_SQL = text("DELETE FROM post_medias WHERE id = :id RETURNING id")

_DELETE_MEDIAS_FOR_POST_SQL = text(
    "DELETE FROM post_medias WHERE post_id = :post_id RETURNING id"
)


def _opt_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _row_to_post(row: object) -> Post:
    return Post(
        id=str(row.id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        caption=row.caption,  # type: ignore[attr-defined]
        caption_position=row.caption_position,  # type: ignore[attr-defined]
        cta_text=row.cta_text,  # type: ignore[attr-defined]
        font_family=row.font_family,  # type: ignore[attr-defined]
        photo_size=row.photo_size,  # type: ignore[attr-defined]
        post_folder_id=_opt_str(row.post_folder_id),  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        time_post=row.time_post,  # type: ignore[attr-defined]
        active=row.active,  # type: ignore[attr-defined]
        deleted_at=row.deleted_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_media(row: object) -> PostMedia:
    return PostMedia(
        id=int(row.id),  # type: ignore[attr-defined]
        post_id=str(row.post_id),  # type: ignore[attr-defined]
        media_url=row.media_url,  # type: ignore[attr-defined]
        arrangement=row.arrangement,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _post_params(post: Post) -> dict[str, object]:
    return {
        "name": post.name,
        "caption": post.caption,
        "caption_position": post.caption_position,
        "cta_text": post.cta_text,
        "font_family": post.font_family,
        "photo_size": post.photo_size,
        "post_folder_id": post.post_folder_id,
        "status": post.status,
        "time_post": post.time_post,
        "active": post.active,
    }


class PostRepository:
    async def list_posts(
        self, db: AsyncSession, include_deleted: bool = False, folder_id: str | None = None
    ) -> list[Post]:
        result = await db.execute(
            _LIST_POSTS_SQL, {"include_deleted": include_deleted, "folder_id": folder_id}
        )
        return [_row_to_post(row) for row in result.fetchall()]

    async def get_post(self, db: AsyncSession, post_id: str) -> Post | None:
        result = await db.execute(_GET_POST_SQL, {"id": post_id})
        row = result.fetchone()
        return _row_to_post(row) if row else None

    async def insert_post(self, db: AsyncSession, post: Post) -> Post:
        result = await db.execute(_INSERT_POST_SQL, _post_params(post))
        row = result.fetchone()
        if row is None:
            raise InternalError("Post insert returned no rows")
        return _row_to_post(row)

    async def update_post(self, db: AsyncSession, post: Post) -> Post | None:
        result = await db.execute(_UPDATE_POST_SQL, {"id": post.id, **_post_params(post)})
        row = result.fetchone()
        return _row_to_post(row) if row else None

    async def soft_delete_post(self, db: AsyncSession, post_id: str) -> Post | None:
        result = await db.execute(_SOFT_DELETE_POST_SQL, {"id": post_id})
        row = result.fetchone()
        return _row_to_post(row) if row else None

    async def restore_post(self, db: AsyncSession, post_id: str) -> Post | None:
        result = await db.execute(_RESTORE_POST_SQL, {"id": post_id})
        row = result.fetchone()
        return _row_to_post(row) if row else None

    async def set_time_post(
        self, db: AsyncSession, post_id: str, time_post: datetime | None
    ) -> Post | None:
        result = await db.execute(_SET_TIME_POST_SQL, {"id": post_id, "time_post": time_post})
        row = result.fetchone()
        return _row_to_post(row) if row else None

    async def list_medias(
        self, db: AsyncSession, post_ids: list[str] | None = None
    ) -> list[PostMedia]:
        if post_ids is None:
            result = await db.execute(_LIST_ALL_MEDIAS_SQL)
        elif not post_ids:
            return []
        else:
            result = await db.execute(_LIST_MEDIAS_SQL, {"post_ids": post_ids})
        return [_row_to_media(row) for row in result.fetchall()]

    async def get_media(self, db: AsyncSession, media_id: int) -> PostMedia | None:
        result = await db.execute(_GET_MEDIA_SQL, {"id": media_id})
        row = result.fetchone()
        return _row_to_media(row) if row else None

    async def insert_media(self, db: AsyncSession, media: PostMedia) -> PostMedia:
        result = await db.execute(
            _INSERT_MEDIA_SQL,
            {"post_id": media.post_id, "media_url": media.media_url, "arrangement": media.arrangement},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Post media insert returned no rows")
        return _row_to_media(row)

    async def update_media(self, db: AsyncSession, media: PostMedia) -> PostMedia | None:
        result = await db.execute(
            _UPDATE_MEDIA_SQL,
            {
                "id": media.id,
                "post_id": media.post_id,
                "media_url": media.media_url,
                "arrangement": media.arrangement,
            },
        )
        row = result.fetchone()
        return _row_to_media(row) if row else None

    async def delete_media(self, db: AsyncSession, media_id: int) -> bool:
        result = await db.execute(_DELETE_MEDIA_SQL, {"id": media_id})
        return result.fetchone() is not None

    async def delete_medias_for_post(self, db: AsyncSession, post_id: str) -> list[int]:
        result = await db.execute(_DELETE_MEDIAS_FOR_POST_SQL, {"post_id": post_id})
        return [int(row.id) for row in result.fetchall()]
