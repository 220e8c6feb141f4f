"""PostFolderRepository: raw SQL over post_folders and post_folder_medias."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.errors import InternalError
from src.sl_post.domain.models import PostFolder, PostFolderMedia

_FOLDER_COLUMNS = "id, name, image_count, video_count, active, deleted_at, created_at"

_LIST_FOLDERS_SQL = text(f"""
    SELECT {_FOLDER_COLUMNS}
    FROM post_folders
    WHERE (:include_deleted OR deleted_at IS NULL)
    ORDER BY created_at DESC
""")

_GET_FOLDER_SQL = text(f"SELECT {_FOLDER_COLUMNS} FROM post_folders WHERE id = :id")

_INSERT_FOLDER_SQL = text(f"""
    INSERT INTO post_folders (name, image_count, video_count, active)
    VALUES (:name, :image_count, :video_count, :active)
    RETURNING {_FOLDER_COLUMNS}
""")

_UPDATE_FOLDER_SQL = text(f"""
    UPDATE post_folders
    SET name = :name, image_count = :image_count, video_count = :video_count, active = :active
    WHERE id = :id
    RETURNING {_FOLDER_COLUMNS}
""")

_SOFT_DELETE_FOLDER_SQL = text(f"""
    UPDATE post_folders SET deleted_at = NOW(), active = FALSE
    WHERE id = :id
    RETURNING {_FOLDER_COLUMNS}
""")

_RESTORE_FOLDER_SQL = text(f"""
    UPDATE post_folders SET deleted_at = NULL, active = TRUE
    WHERE id = :id
    RETURNING {_FOLDER_COLUMNS}
""")

_MEDIA_COLUMNS = "id, post_folder_id, media_url, created_at"

_LIST_ALL_MEDIAS_SQL = text(
    f"SELECT {_MEDIA_COLUMNS} FROM post_folder_medias ORDER BY created_at"
)

_LIST_MEDIAS_SQL = text(f"""
    SELECT {_MEDIA_COLUMNS}
    FROM post_folder_medias
    WHERE post_folder_id::text = ANY(:folder_ids)
    ORDER BY created_at
""")

_GET_MEDIA_SQL = text(f"SELECT {_MEDIA_COLUMNS} FROM post_folder_medias WHERE id = :id")

_INSERT_MEDIA_SQL = text(f"""
    INSERT INTO post_folder_medias (post_folder_id, media_url)
    VALUES (:post_folder_id, :media_url)
    RETURNING {_MEDIA_COLUMNS}
""")

_UPDATE_MEDIA_SQL = text(f"""
    UPDATE post_folder_medias
    SET post_folder_id = :post_folder_id, media_url = :media_url
    WHERE id = :id
    RETURNING {_MEDIA_COLUMNS}
""")

_DELETE_MEDIA_SQL = text("DELETE FROM post_folder_medias WHERE id = :id RETURNING id")


def _row_to_folder(row: object) -> PostFolder:
    return PostFolder(
        id=str(row.id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        image_count=row.image_count,  # type: ignore[attr-defined]
        video_count=row.video_count,  # type: ignore[attr-defined]
        active=row.active,  # type: ignore[attr-defined]
        deleted_at=row.deleted_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_media(row: object) -> PostFolderMedia:
    folder_id = row.post_folder_id  # type: ignore[attr-defined]
    return PostFolderMedia(
        id=str(row.id),  # type: ignore[attr-defined]
        post_folder_id=str(folder_id) if folder_id is not None else None,
        media_url=row.media_url,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class PostFolderRepository:
    async def list_folders(
        self, db: AsyncSession, include_deleted: bool = False
    ) -> list[PostFolder]:
        result = await db.execute(_LIST_FOLDERS_SQL, {"include_deleted": include_deleted})
        return [_row_to_folder(row) for row in result.fetchall()]

    async def get_folder(self, db: AsyncSession, folder_id: str) -> PostFolder | None:
        result = await db.execute(_GET_FOLDER_SQL, {"id": folder_id})
        row = result.fetchone()
        return _row_to_folder(row) if row else None

    async def insert_folder(self, db: AsyncSession, folder: PostFolder) -> PostFolder:
        result = await db.execute(
            _INSERT_FOLDER_SQL,
            {
                "name": folder.name,
                "image_count": folder.image_count,
                "video_count": folder.video_count,
                "active": folder.active,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Post folder insert returned no rows")
        return _row_to_folder(row)

    async def update_folder(self, db: AsyncSession, folder: PostFolder) -> PostFolder | None:
        result = await db.execute(
            _UPDATE_FOLDER_SQL,
            {
                "id": folder.id,
                "name": folder.name,
                "image_count": folder.image_count,
                "video_count": folder.video_count,
                "active": folder.active,
            },
        )
        row = result.fetchone()
        return _row_to_folder(row) if row else None

    async def soft_delete_folder(self, db: AsyncSession, folder_id: str) -> PostFolder | None:
        result = await db.execute(_SOFT_DELETE_FOLDER_SQL, {"id": folder_id})
        row = result.fetchone()
        return _row_to_folder(row) if row else None

    async def restore_folder(self, db: AsyncSession, folder_id: str) -> PostFolder | None:
        result = await db.execute(_RESTORE_FOLDER_SQL, {"id": folder_id})
        row = result.fetchone()
        return _row_to_folder(row) if row else None

    async def list_folder_medias(
        self, db: AsyncSession, folder_ids: list[str] | None = None
    ) -> list[PostFolderMedia]:
        if folder_ids is None:
            result = await db.execute(_LIST_ALL_MEDIAS_SQL)
        elif not folder_ids:
            return []
        else:
            result = await db.execute(_LIST_MEDIAS_SQL, {"folder_ids": folder_ids})
        return [_row_to_media(row) for row in result.fetchall()]

    async def get_folder_media(
        self, db: AsyncSession, media_id: str
    ) -> PostFolderMedia | None:
        result = await db.execute(_GET_MEDIA_SQL, {"id": media_id})
        row = result.fetchone()
        return _row_to_media(row) if row else None

    async def insert_folder_media(
        self, db: AsyncSession, media: PostFolderMedia
    ) -> PostFolderMedia:
        result = await db.execute(
            _INSERT_MEDIA_SQL,
            {"post_folder_id": media.post_folder_id, "media_url": media.media_url},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Post folder media insert returned no rows")
        return _row_to_media(row)

    async def update_folder_media(
        self, db: AsyncSession, media: PostFolderMedia
    ) -> PostFolderMedia | None:
        result = await db.execute(
            _UPDATE_MEDIA_SQL,
            {"id": media.id, "post_folder_id": media.post_folder_id, "media_url": media.media_url},
        )
        row = result.fetchone()
        return _row_to_media(row) if row else None

    async def delete_folder_media(self, db: AsyncSession, media_id: str) -> bool:
        result = await db.execute(_DELETE_MEDIA_SQL, {"id": media_id})
        return result.fetchone() is not None
