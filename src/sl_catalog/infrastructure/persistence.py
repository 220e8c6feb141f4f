"""CategoryRepository: raw SQL over the categories table.

Soft delete stamps deleted_at and clears active; restore reverses both.
Reads hide soft-deleted rows unless asked otherwise.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_catalog.domain.models import Category
from src.sl_common.errors import InternalError

_COLUMNS = "id, name, media_url, parent, arrangement, active, deleted_at, created_at"

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM categories
    WHERE (:include_deleted OR deleted_at IS NULL)
    ORDER BY arrangement NULLS LAST, created_at DESC
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM categories WHERE id = :id")

_INSERT_SQL = text(f"""
    INSERT INTO categories (name, media_url, parent, arrangement, active)
    VALUES (:name, :media_url, :parent, :arrangement, :active)
    RETURNING {_COLUMNS}
""")

_UPDATE_SQL = text(f"""
    UPDATE categories
    SET name = :name,
        media_url = :media_url,
        parent = :parent,
        arrangement = :arrangement,
        active = :active
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_SOFT_DELETE_SQL = text(f"""
    UPDATE categories
    SET deleted_at = NOW(), active = FALSE
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_RESTORE_SQL = text(f"""
    UPDATE categories
    SET deleted_at = NULL, active = TRUE
    WHERE id = :id
    RETURNING {_COLUMNS}
""")


def _row_to_category(row: object) -> Category:
    return Category(
        id=str(row.id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        media_url=row.media_url,  # type: ignore[attr-defined]
        parent=str(row.parent) if row.parent else None,  # type: ignore[attr-defined]
        arrangement=row.arrangement,  # type: ignore[attr-defined]
        active=row.active,  # type: ignore[attr-defined]
        deleted_at=row.deleted_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class CategoryRepository:
    async def list_categories(
        self, db: AsyncSession, include_deleted: bool = False
    ) -> list[Category]:
        result = await db.execute(_LIST_SQL, {"include_deleted": include_deleted})
        return [_row_to_category(row) for row in result.fetchall()]

    async def get_category(self, db: AsyncSession, category_id: str) -> Category | None:
        result = await db.execute(_GET_SQL, {"id": category_id})
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def insert_category(self, db: AsyncSession, category: Category) -> Category:
        result = await db.execute(
            _INSERT_SQL,
            {
                "name": category.name,
                "media_url": category.media_url,
                "parent": category.parent,
                "arrangement": category.arrangement,
                "active": category.active,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Category insert returned no rows")
        return _row_to_category(row)

    async def update_category(self, db: AsyncSession, category: Category) -> Category | None:
        result = await db.execute(
            _UPDATE_SQL,
            {
                "id": category.id,
                "name": category.name,
                "media_url": category.media_url,
                "parent": category.parent,
                "arrangement": category.arrangement,
                "active": category.active,
            },
        )
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def soft_delete_category(
        self, db: AsyncSession, category_id: str
    ) -> Category | None:
        result = await db.execute(_SOFT_DELETE_SQL, {"id": category_id})
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def restore_category(self, db: AsyncSession, category_id: str) -> Category | None:
        result = await db.execute(_RESTORE_SQL, {"id": category_id})
        row = result.fetchone()
        return _row_to_category(row) if row else None
