"""Repository Protocol: unit tests inject an AsyncMock conforming to it."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_catalog.domain.models import Category


class CategoryRepositoryProtocol(Protocol):
    async def list_categories(
        self, db: AsyncSession, include_deleted: bool = False
    ) -> list[Category]: ...

    async def get_category(self, db: AsyncSession, category_id: str) -> Category | None: ...

    async def insert_category(self, db: AsyncSession, category: Category) -> Category: ...

    async def update_category(self, db: AsyncSession, category: Category) -> Category | None: ...

    async def soft_delete_category(
        self, db: AsyncSession, category_id: str
    ) -> Category | None: ...

    async def restore_category(self, db: AsyncSession, category_id: str) -> Category | None: ...
