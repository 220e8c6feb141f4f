"""PostFolderApplicationService: folders (soft-deletable) and their medias."""

import dataclasses
import logging
from collections import defaultdict

from sqlalchemy.ext.asyncio import AsyncSession

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
from src.sl_common.errors import PostFolderMediaNotFoundError, PostFolderNotFoundError
from src.sl_post.application.schemas import (
    CreatePostFolderMediaRequest,
    CreatePostFolderRequest,
    UpdatePostFolderMediaRequest,
    UpdatePostFolderRequest,
)
from src.sl_post.domain.models import PostFolder, PostFolderMedia
from src.sl_post.domain.repository import PostFolderRepositoryProtocol
from src.sl_post.infrastructure.folders_repository import PostFolderRepository

logger = logging.getLogger(__name__)

POST_FOLDERS_TABLE = "post_folders"
POST_FOLDER_MEDIAS_TABLE = "post_folder_medias"


class PostFolderApplicationService:
    def __init__(
        self,
        repo: PostFolderRepositoryProtocol | None = None,
        feed: ChangeFeedProtocol | None = None,
    ) -> None:
        self._repo: PostFolderRepositoryProtocol = repo or PostFolderRepository()
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    async def list_folders(
        self, db: AsyncSession, include_deleted: bool = False
    ) -> list[PostFolder]:
        folders = await self._repo.list_folders(db, include_deleted)
        return await self._attach_medias(db, folders)

    async def get_folder(self, db: AsyncSession, folder_id: str) -> PostFolder:
        folder = await self._repo.get_folder(db, folder_id)
        if folder is None:
            raise PostFolderNotFoundError(folder_id)
        [folder] = await self._attach_medias(db, [folder])
        return folder

    async def create_folder(self, db: AsyncSession, body: CreatePostFolderRequest) -> PostFolder:
        draft = PostFolder(id="", **body.model_dump())
        async with unit_of_work(db):
            folder = await self._repo.insert_folder(db, draft)
        await publish_changes(self.feed, [(POST_FOLDERS_TABLE, Insert(as_row(folder)))])
        return folder

    async def update_folder(
        self, db: AsyncSession, folder_id: str, body: UpdatePostFolderRequest
    ) -> PostFolder:
        async with unit_of_work(db):
            current = await self._repo.get_folder(db, folder_id)
            if current is None:
                raise PostFolderNotFoundError(folder_id)
            merged = dataclasses.replace(current, **body.model_dump(exclude_unset=True))
            folder = await self._repo.update_folder(db, merged)
            if folder is None:
                raise PostFolderNotFoundError(folder_id)
        [folder] = await self._attach_medias(db, [folder])
        event = Delete(folder.id) if folder.is_deleted else Update(as_row(folder))
        await publish_changes(self.feed, [(POST_FOLDERS_TABLE, event)])
        return folder

    async def delete_folder(self, db: AsyncSession, folder_id: str) -> PostFolder:
        async with unit_of_work(db):
            folder = await self._repo.soft_delete_folder(db, folder_id)
            if folder is None:
                raise PostFolderNotFoundError(folder_id)
        logger.info("Post folder soft-deleted: id=%s", folder_id)
        await publish_changes(self.feed, [(POST_FOLDERS_TABLE, Delete(folder.id))])
        return folder

    async def restore_folder(self, db: AsyncSession, folder_id: str) -> PostFolder:
        async with unit_of_work(db):
            folder = await self._repo.restore_folder(db, folder_id)
            if folder is None:
                raise PostFolderNotFoundError(folder_id)
        [folder] = await self._attach_medias(db, [folder])
        logger.info("Post folder restored: id=%s", folder_id)
        await publish_changes(self.feed, [(POST_FOLDERS_TABLE, Insert(as_row(folder)))])
        return folder

    # ------------------------------------------------------------------
    # Folder medias
    # ------------------------------------------------------------------

    async def list_medias(
        self, db: AsyncSession, folder_id: str | None = None
    ) -> list[PostFolderMedia]:
        return await self._repo.list_folder_medias(db, [folder_id] if folder_id else None)

    async def get_media(self, db: AsyncSession, media_id: str) -> PostFolderMedia:
        media = await self._repo.get_folder_media(db, media_id)
        if media is None:
            raise PostFolderMediaNotFoundError(media_id)
        return media

    async def create_media(
        self, db: AsyncSession, body: CreatePostFolderMediaRequest
    ) -> PostFolderMedia:
        draft = PostFolderMedia(id="", **body.model_dump())
        async with unit_of_work(db):
            if body.post_folder_id and await self._repo.get_folder(db, body.post_folder_id) is None:
                raise PostFolderNotFoundError(body.post_folder_id)
            media = await self._repo.insert_folder_media(db, draft)
        await publish_changes(self.feed, [(POST_FOLDER_MEDIAS_TABLE, Insert(as_row(media)))])
        return media

    async def update_media(
        self, db: AsyncSession, media_id: str, body: UpdatePostFolderMediaRequest
    ) -> PostFolderMedia:
        async with unit_of_work(db):
            current = await self.get_media(db, media_id)
            merged = dataclasses.replace(current, **body.model_dump(exclude_unset=True))
            media = await self._repo.update_folder_media(db, merged)
            if media is None:
                raise PostFolderMediaNotFoundError(media_id)
        await publish_changes(self.feed, [(POST_FOLDER_MEDIAS_TABLE, Update(as_row(media)))])
        return media

    async def delete_media(self, db: AsyncSession, media_id: str) -> None:
        async with unit_of_work(db):
            if not await self._repo.delete_folder_media(db, media_id):
                raise PostFolderMediaNotFoundError(media_id)
        await publish_changes(self.feed, [(POST_FOLDER_MEDIAS_TABLE, Delete(media_id))])

    async def _attach_medias(
        self, db: AsyncSession, folders: list[PostFolder]
    ) -> list[PostFolder]:
        if not folders:
            return folders
        by_folder: dict[str, list[PostFolderMedia]] = defaultdict(list)
        for media in await self._repo.list_folder_medias(db, [f.id for f in folders]):
            if media.post_folder_id is not None:
                by_folder[media.post_folder_id].append(media)
        return [dataclasses.replace(f, medias=by_folder.get(f.id, [])) for f in folders]
