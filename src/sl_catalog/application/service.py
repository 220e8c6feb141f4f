"""CategoryApplicationService: category CRUD with soft delete and restore.

Every write runs in unit_of_work() and publishes on "categories" after
commit. Soft-deleted rows go out as Delete(id) so replicas drop them.
"""

import dataclasses
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_catalog.application.schemas import CreateCategoryRequest, UpdateCategoryRequest
from src.sl_catalog.domain.models import Category
from src.sl_catalog.domain.repository import CategoryRepositoryProtocol
from src.sl_catalog.infrastructure.persistence import CategoryRepository
from src.sl_common.change_feed import (
    ChangeFeedProtocol,
    Delete,
    Insert,
    Update,
    as_row,
    get_change_feed,
    publish_changes,
)
from src.sl_common.database import unit_of_work
from src.sl_common.errors import CategoryNotFoundError

logger = logging.getLogger(__name__)

CATEGORIES_TABLE = "categories"


class CategoryApplicationService:
    def __init__(
        self,
        repo: CategoryRepositoryProtocol | None = None,
        feed: ChangeFeedProtocol | None = None,
    ) -> None:
        self._repo: CategoryRepositoryProtocol = repo or CategoryRepository()
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    async def list_categories(
        self, db: AsyncSession, include_deleted: bool = False
    ) -> list[Category]:
        return await self._repo.list_categories(db, include_deleted)

    async def get_category(self, db: AsyncSession, category_id: str) -> Category:
        category = await self._repo.get_category(db, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def create_category(
        self, db: AsyncSession, body: CreateCategoryRequest
    ) -> Category:
        draft = Category(id="", **body.model_dump())
        async with unit_of_work(db):
            category = await self._repo.insert_category(db, draft)
        await publish_changes(self.feed, [(CATEGORIES_TABLE, Insert(as_row(category)))])
        return category

    async def update_category(
        self, db: AsyncSession, category_id: str, body: UpdateCategoryRequest
    ) -> Category:
        async with unit_of_work(db):
            current = await self.get_category(db, category_id)
            merged = dataclasses.replace(current, **body.model_dump(exclude_unset=True))
            category = await self._repo.update_category(db, merged)
            if category is None:
                raise CategoryNotFoundError(category_id)

        event = Delete(category.id) if category.is_deleted else Update(as_row(category))
        await publish_changes(self.feed, [(CATEGORIES_TABLE, event)])
        return category

    async def delete_category(self, db: AsyncSession, category_id: str) -> Category:
        async with unit_of_work(db):
            category = await self._repo.soft_delete_category(db, category_id)
            if category is None:
                raise CategoryNotFoundError(category_id)
        logger.info("Category soft-deleted: id=%s", category_id)
        await publish_changes(self.feed, [(CATEGORIES_TABLE, Delete(category.id))])
        return category

    async def restore_category(self, db: AsyncSession, category_id: str) -> Category:
        async with unit_of_work(db):
            category = await self._repo.restore_category(db, category_id)
            if category is None:
                raise CategoryNotFoundError(category_id)
        logger.info("Category restored: id=%s", category_id)
        await publish_changes(self.feed, [(CATEGORIES_TABLE, Insert(as_row(category)))])
        return category
