"""Unit tests for posts, scheduling and post folders."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.sl_common.change_feed import Delete, Insert, LocalChangeFeed
from src.sl_common.enums import ScheduleState
from src.sl_common.errors import PostMediaNotFoundError, PostNotFoundError
from src.sl_post.application.folder_service import PostFolderApplicationService
from src.sl_post.application.schemas import (
    CreatePostFolderRequest,
    CreatePostMediaRequest,
    CreatePostRequest,
    PostResponse,
    UpdatePostRequest,
)
from src.sl_post.application.service import PostApplicationService
from src.sl_post.domain.models import Post, PostFolder, PostFolderMedia, PostMedia
from src.sl_post.domain.schedule import schedule_state

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_post(**kwargs) -> Post:
    defaults = dict(id="p-1", name="Launch")
    defaults.update(kwargs)
    return Post(**defaults)


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def feed() -> LocalChangeFeed:
    return LocalChangeFeed()


class TestScheduleState:
    def test_no_time_is_draft(self) -> None:
        assert schedule_state(None, NOW) is ScheduleState.DRAFT

    def test_future_is_scheduled(self) -> None:
        assert schedule_state(NOW + timedelta(minutes=1), NOW) is ScheduleState.SCHEDULED

    def test_past_or_now_is_published(self) -> None:
        assert schedule_state(NOW, NOW) is ScheduleState.PUBLISHED

    def test_naive_times_are_utc(self) -> None:
        naive = datetime(2026, 3, 1, 13, 0)
        assert schedule_state(naive, NOW) is ScheduleState.SCHEDULED


class TestPosts:
    def test_defaults(self) -> None:
        body = CreatePostRequest(name="Launch")
        assert (body.caption_position, body.photo_size, body.status) == (
            "bottom", "square", "active"
        )

    async def test_get_attaches_medias(self, db, feed) -> None:
        repo = AsyncMock()
        repo.get_post.return_value = _make_post()
        repo.list_medias.return_value = [
            PostMedia(1, "p-1", "https://cdn/a.png", 1),
            PostMedia(2, "p-1", "https://cdn/b.png", 2),
        ]
        post = await PostApplicationService(repo, feed).get_post(db, "p-1")
        assert [m.id for m in post.medias] == [1, 2]
        repo.list_medias.assert_awaited_once_with(db, ["p-1"])

    async def test_get_missing_raises(self, db, feed) -> None:
        repo = AsyncMock()
        repo.get_post.return_value = None
        with pytest.raises(PostNotFoundError):
            await PostApplicationService(repo, feed).get_post(db, "nope")

    async def test_update_is_partial(self, db, feed) -> None:
        repo = AsyncMock()
        repo.get_post.return_value = _make_post(caption="old")
        repo.update_post.side_effect = lambda db, p: p
        repo.list_medias.return_value = []
        post = await PostApplicationService(repo, feed).update_post(
            db, "p-1", UpdatePostRequest(name="Relaunch")
        )
        assert (post.name, post.caption) == ("Relaunch", "old")

    async def test_soft_delete_publishes_delete(self, db, feed) -> None:
        repo = AsyncMock()
        repo.soft_delete_post.return_value = _make_post(active=False, deleted_at=NOW)
        seen: list = []
        await feed.subscribe("posts", seen.append)
        await PostApplicationService(repo, feed).delete_post(db, "p-1")
        assert seen == [Delete("p-1")]

    async def test_restore_publishes_insert(self, db, feed) -> None:
        repo = AsyncMock()
        repo.restore_post.return_value = _make_post()
        repo.list_medias.return_value = []
        seen: list = []
        await feed.subscribe("posts", seen.append)
        await PostApplicationService(repo, feed).restore_post(db, "p-1")
        assert isinstance(seen[0], Insert)

    def test_response_carries_schedule_state(self) -> None:
        future = datetime.now(UTC) + timedelta(days=1)
        assert PostResponse.from_domain(_make_post(time_post=future)).schedule_state == "SCHEDULED"


class TestScheduling:
    async def test_schedule_normalises_to_utc(self, db, feed) -> None:
        repo = AsyncMock()
        repo.set_time_post.side_effect = lambda db, post_id, t: _make_post(time_post=t)
        repo.list_medias.return_value = []
        local = datetime(2026, 3, 2, 9, 0, tzinfo=UTC).astimezone()
        post = await PostApplicationService(repo, feed).schedule_post(db, "p-1", local)
        assert post.time_post.tzinfo == UTC

    async def test_unschedule_clears_time(self, db, feed) -> None:
        repo = AsyncMock()
        repo.set_time_post.side_effect = lambda db, post_id, t: _make_post(time_post=t)
        repo.list_medias.return_value = []
        post = await PostApplicationService(repo, feed).unschedule_post(db, "p-1")
        assert post.time_post is None

    async def test_schedule_deleted_post_raises(self, db, feed) -> None:
        repo = AsyncMock()
        repo.set_time_post.return_value = None
        with pytest.raises(PostNotFoundError):
            await PostApplicationService(repo, feed).schedule_post(db, "p-1", NOW)

    async def test_list_scheduled_filters_and_orders(self, db, feed) -> None:
        repo = AsyncMock()
        repo.list_posts.return_value = [
            _make_post(id="draft"),
            _make_post(id="late", time_post=NOW + timedelta(days=2)),
            _make_post(id="past", time_post=NOW - timedelta(days=1)),
            _make_post(id="soon", time_post=NOW + timedelta(hours=1)),
        ]
        repo.list_medias.return_value = []
        svc = PostApplicationService(repo, feed)

        everything = await svc.list_scheduled_posts(db, now=NOW)
        upcoming = await svc.list_scheduled_posts(db, ScheduleState.SCHEDULED, now=NOW)

        assert [p.id for p in everything] == ["past", "soon", "late", "draft"]
        assert [p.id for p in upcoming] == ["soon", "late"]


class TestPostMedias:
    async def test_create_for_missing_post_raises(self, db, feed) -> None:
        repo = AsyncMock()
        repo.get_post.return_value = None
        body = CreatePostMediaRequest(post_id="nope", media_url="https://cdn/a.png")
        with pytest.raises(PostNotFoundError):
            await PostApplicationService(repo, feed).create_media(db, body)

    async def test_delete_missing_raises(self, db, feed) -> None:
        repo = AsyncMock()
        repo.delete_media.return_value = False
        with pytest.raises(PostMediaNotFoundError):
            await PostApplicationService(repo, feed).delete_media(db, 7)

    async def test_delete_all_publishes_each(self, db, feed) -> None:
        repo = AsyncMock()
        repo.delete_medias_for_post.return_value = [3, 4]
        seen: list = []
        await feed.subscribe("post_medias", seen.append)
        deleted = await PostApplicationService(repo, feed).delete_all_medias_for_post(db, "p-1")
        assert deleted == [3, 4]
        assert seen == [Delete(3), Delete(4)]


class TestFolders:
    async def test_folders_come_with_medias(self, db, feed) -> None:
        repo = AsyncMock()
        repo.list_folders.return_value = [PostFolder("f-1", "Spring"), PostFolder("f-2", "Empty")]
        repo.list_folder_medias.return_value = [
            PostFolderMedia("m-1", "f-1", "https://cdn/x.png")
        ]
        folders = await PostFolderApplicationService(repo, feed).list_folders(db)
        assert [len(f.medias) for f in folders] == [1, 0]

    async def test_created_folder_is_published(self, db, feed) -> None:
        repo = AsyncMock()
        repo.insert_folder.side_effect = lambda db, f: replace(f, id="f-9")
        seen: list = []
        await feed.subscribe("post_folders", seen.append)
        folder = await PostFolderApplicationService(repo, feed).create_folder(
            db, CreatePostFolderRequest(name="Summer")
        )
        assert folder.id == "f-9"
        assert isinstance(seen[0], Insert)
