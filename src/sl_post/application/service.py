"""PostApplicationService: posts, their medias, and scheduling.

Posts come back with their medias attached. Soft-deleted posts are published
as Delete(id) so replicas drop them; restore publishes them as inserts again.
"""

import dataclasses
import logging
from collections import defaultdict
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.change_feed import (
    ChangeEvent,
    ChangeFeedProtocol,
    Delete,
    Insert,
    Update,
    as_row,
    get_change_feed,
    publish_changes,
)
from src.sl_common.database import unit_of_work
from src.sl_common.datetime_utils import ensure_utc, utc_now
from src.sl_common.enums import ScheduleState
from src.sl_common.errors import PostMediaNotFoundError, PostNotFoundError
from src.sl_post.application.schemas import (
    CreatePostMediaRequest,
    CreatePostRequest,
    UpdatePostMediaRequest,
    UpdatePostRequest,
)
from src.sl_post.domain.models import Post, PostMedia
from src.sl_post.domain.repository import PostRepositoryProtocol
from src.sl_post.domain.schedule import schedule_state
from src.sl_post.infrastructure.persistence import PostRepository

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"
POST_MEDIAS_TABLE = "post_medias"


def _post_event(post: Post) -> ChangeEvent:
    return Delete(post.id) if post.is_deleted else Update(as_row(post))


class PostApplicationService:
    def __init__(
        self,
        repo: PostRepositoryProtocol | None = None,
        feed: ChangeFeedProtocol | None = None,
    ) -> None:
        self._repo: PostRepositoryProtocol = repo or PostRepository()
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def list_posts(
        self, db: AsyncSession, include_deleted: bool = False, folder_id: str | None = None
    ) -> list[Post]:
        posts = await self._repo.list_posts(db, include_deleted, folder_id)
        return await self._attach_medias(db, posts)

    async def get_post(self, db: AsyncSession, post_id: str) -> Post:
        post = await self._repo.get_post(db, post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        [post] = await self._attach_medias(db, [post])
        return post

    async def create_post(self, db: AsyncSession, body: CreatePostRequest) -> Post:
        draft = Post(id="", **body.model_dump())
        async with unit_of_work(db):
            post = await self._repo.insert_post(db, draft)
        await publish_changes(self.feed, [(POSTS_TABLE, Insert(as_row(post)))])
        return post

    async def update_post(
        self, db: AsyncSession, post_id: str, body: UpdatePostRequest
    ) -> Post:
        async with unit_of_work(db):
            current = await self._repo.get_post(db, post_id)
            if current is None:
                raise PostNotFoundError(post_id)
            merged = dataclasses.replace(current, **body.model_dump(exclude_unset=True))
            post = await self._repo.update_post(db, merged)
            if post is None:
                raise PostNotFoundError(post_id)
        [post] = await self._attach_medias(db, [post])
        await publish_changes(self.feed, [(POSTS_TABLE, _post_event(post))])
        return post

    async def delete_post(self, db: AsyncSession, post_id: str) -> Post:
        async with unit_of_work(db):
            post = await self._repo.soft_delete_post(db, post_id)
            if post is None:
                raise PostNotFoundError(post_id)
        logger.info("Post soft-deleted: id=%s", post_id)
        await publish_changes(self.feed, [(POSTS_TABLE, Delete(post.id))])
        return post

    async def restore_post(self, db: AsyncSession, post_id: str) -> Post:
        async with unit_of_work(db):
            post = await self._repo.restore_post(db, post_id)
            if post is None:
                raise PostNotFoundError(post_id)
        [post] = await self._attach_medias(db, [post])
        logger.info("Post restored: id=%s", post_id)
        await publish_changes(self.feed, [(POSTS_TABLE, Insert(as_row(post)))])
        return post

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def schedule_post(self, db: AsyncSession, post_id: str, time_post: datetime) -> Post:
        return await self._set_time_post(db, post_id, ensure_utc(time_post))

    async def unschedule_post(self, db: AsyncSession, post_id: str) -> Post:
        return await self._set_time_post(db, post_id, None)

    async def list_scheduled_posts(
        self,
        db: AsyncSession,
        state: ScheduleState | None = None,
        now: datetime | None = None,
    ) -> list[Post]:
        """Live posts in time_post order, drafts last; optionally one state only."""
        current = now or utc_now()
        posts = await self.list_posts(db)
        if state is not None:
            posts = [p for p in posts if schedule_state(p.time_post, current) is state]
        return sorted(
            posts,
            key=lambda p: (p.time_post is None, ensure_utc(p.time_post) if p.time_post else current),
        )

    async def _set_time_post(
        self, db: AsyncSession, post_id: str, time_post: datetime | None
    ) -> Post:
        async with unit_of_work(db):
            post = await self._repo.set_time_post(db, post_id, time_post)
            if post is None:
                raise PostNotFoundError(post_id)
        [post] = await self._attach_medias(db, [post])
        logger.info("Post %s time_post=%s", post_id, time_post)
        await publish_changes(self.feed, [(POSTS_TABLE, Update(as_row(post)))])
        return post

    # ------------------------------------------------------------------
    # Post medias
    # ------------------------------------------------------------------

    async def list_medias(
        self, db: AsyncSession, post_id: str | None = None
    ) -> list[PostMedia]:
        return await self._repo.list_medias(db, [post_id] if post_id else None)

    async def get_media(self, db: AsyncSession, media_id: int) -> PostMedia:
        media = await self._repo.get_media(db, media_id)
        if media is None:
            raise PostMediaNotFoundError(str(media_id))
        return media

    async def create_media(self, db: AsyncSession, body: CreatePostMediaRequest) -> PostMedia:
        draft = PostMedia(id=0, **body.model_dump())
        async with unit_of_work(db):
            if await self._repo.get_post(db, body.post_id) is None:
                raise PostNotFoundError(body.post_id)
            media = await self._repo.insert_media(db, draft)
        await publish_changes(self.feed, [(POST_MEDIAS_TABLE, Insert(as_row(media)))])
        return media

    async def update_media(
        self, db: AsyncSession, media_id: int, body: UpdatePostMediaRequest
    ) -> PostMedia:
        async with unit_of_work(db):
            current = await self.get_media(db, media_id)
            merged = dataclasses.replace(current, **body.model_dump(exclude_unset=True))
            media = await self._repo.update_media(db, merged)
            if media is None:
                raise PostMediaNotFoundError(str(media_id))
        await publish_changes(self.feed, [(POST_MEDIAS_TABLE, Update(as_row(media)))])
        return media

    async def delete_media(self, db: AsyncSession, media_id: int) -> None:
        async with unit_of_work(db):
            if not await self._repo.delete_media(db, media_id):
                raise PostMediaNotFoundError(str(media_id))
        await publish_changes(self.feed, [(POST_MEDIAS_TABLE, Delete(media_id))])

    async def delete_all_medias_for_post(self, db: AsyncSession, post_id: str) -> list[int]:
        async with unit_of_work(db):
            deleted = await self._repo.delete_medias_for_post(db, post_id)
        logger.info("Deleted %d media(s) of post %s", len(deleted), post_id)
        await publish_changes(
            self.feed, [(POST_MEDIAS_TABLE, Delete(media_id)) for media_id in deleted]
        )
        return deleted

    async def _attach_medias(self, db: AsyncSession, posts: list[Post]) -> list[Post]:
        if not posts:
            return posts
        by_post: dict[str, list[PostMedia]] = defaultdict(list)
        for media in await self._repo.list_medias(db, [p.id for p in posts]):
            by_post[media.post_id].append(media)
        return [dataclasses.replace(p, medias=by_post.get(p.id, [])) for p in posts]
