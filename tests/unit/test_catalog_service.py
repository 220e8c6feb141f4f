"""Unit tests for CategoryApplicationService using a mock repository."""

from dataclasses import replace
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from src.sl_catalog.application.schemas import CreateCategoryRequest, UpdateCategoryRequest
from src.sl_catalog.application.service import CategoryApplicationService
from src.sl_catalog.domain.models import Category
from src.sl_common.change_feed import Delete, Insert, LocalChangeFeed, Update
from src.sl_common.errors import CategoryNotFoundError


def _make_category(**kwargs) -> Category:
    defaults = dict(id="c-1", name="Shoes", media_url="https://cdn/shoes.png", arrangement=1)
    defaults.update(kwargs)
    return Category(**defaults)


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def feed() -> LocalChangeFeed:
    return LocalChangeFeed()


@pytest.fixture
async def seen(feed: LocalChangeFeed) -> list:
    events: list = []
    await feed.subscribe("categories", events.append)
    return events


class TestCategoryService:
    async def test_get_missing_raises(self, db, feed) -> None:
        repo = AsyncMock()
        repo.get_category.return_value = None
        with pytest.raises(CategoryNotFoundError):
            await CategoryApplicationService(repo, feed).get_category(db, "nope")

    async def test_create_publishes_insert(self, db, feed, seen) -> None:
        repo = AsyncMock()
        repo.insert_category.side_effect = lambda db, c: replace(c, id="c-9")
        svc = CategoryApplicationService(repo, feed)

        category = await svc.create_category(
            db, CreateCategoryRequest(name="Bags", media_url="https://cdn/bags.png")
        )

        assert category.id == "c-9"
        assert isinstance(seen[0], Insert)
        assert seen[0].row["name"] == "Bags"

    async def test_partial_update_keeps_other_fields(self, db, feed, seen) -> None:
        repo = AsyncMock()
        repo.get_category.return_value = _make_category()
        repo.update_category.side_effect = lambda db, c: c
        svc = CategoryApplicationService(repo, feed)

        updated = await svc.update_category(db, "c-1", UpdateCategoryRequest(arrangement=5))

        assert (updated.name, updated.arrangement) == ("Shoes", 5)
        assert isinstance(seen[0], Update)

    async def test_deactivating_update_publishes_delete(self, db, feed, seen) -> None:
        repo = AsyncMock()
        repo.get_category.return_value = _make_category()
        repo.update_category.side_effect = lambda db, c: c
        svc = CategoryApplicationService(repo, feed)

        await svc.update_category(db, "c-1", UpdateCategoryRequest(active=False))

        assert seen == [Delete("c-1")]

    async def test_soft_delete_and_restore(self, db, feed, seen) -> None:
        repo = AsyncMock()
        repo.soft_delete_category.return_value = _make_category(
            active=False, deleted_at=datetime.now(UTC)
        )
        repo.restore_category.return_value = _make_category()
        svc = CategoryApplicationService(repo, feed)

        deleted = await svc.delete_category(db, "c-1")
        await svc.restore_category(db, "c-1")

        assert deleted.is_deleted
        assert isinstance(seen[0], Delete)
        assert isinstance(seen[1], Insert)

    async def test_restore_missing_raises(self, db, feed) -> None:
        repo = AsyncMock()
        repo.restore_category.return_value = None
        with pytest.raises(CategoryNotFoundError):
            await CategoryApplicationService(repo, feed).restore_category(db, "nope")
