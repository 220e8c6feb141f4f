"""Repository Protocols for posts, post medias, folders and folder medias."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_post.domain.models import Post, PostFolder, PostFolderMedia, PostMedia


class PostRepositoryProtocol(Protocol):
    async def list_posts(
        self, db: AsyncSession, include_deleted: bool = False, folder_id: str | None = None
    ) -> list[Post]: ...

    async def get_post(self, db: AsyncSession, post_id: str) -> Post | None: ...

    async def insert_post(self, db: AsyncSession, post: Post) -> Post: ...

    async def update_post(self, db: AsyncSession, post: Post) -> Post | None: ...

    async def soft_delete_post(self, db: AsyncSession, post_id: str) -> Post | None: ...

    async def restore_post(self, db: AsyncSession, post_id: str) -> Post | None: ...

    async def set_time_post(
        self, db: AsyncSession, post_id: str, time_post: datetime | None
    ) -> Post | None: ...

    async def list_medias(
        self, db: AsyncSession, post_ids: list[str] | None = None
    ) -> list[PostMedia]: ...

    async def get_media(self, db: AsyncSession, media_id: int) -> PostMedia | None: ...

    async def insert_media(self, db: AsyncSession, media: PostMedia) -> PostMedia: ...

    async def update_media(self, db: AsyncSession, media: PostMedia) -> PostMedia | None: ...

    async def delete_media(self, db: AsyncSession, media_id: int) -> bool: ...

    async def delete_medias_for_post(self, db: AsyncSession, post_id: str) -> list[int]: ...


class PostFolderRepositoryProtocol(Protocol):
    async def list_folders(
        self, db: AsyncSession, include_deleted: bool = False
    ) -> list[PostFolder]: ...

    async def get_folder(self, db: AsyncSession, folder_id: str) -> PostFolder | None: ...

    async def insert_folder(self, db: AsyncSession, folder: PostFolder) -> PostFolder: ...

    async def update_folder(self, db: AsyncSession, folder: PostFolder) -> PostFolder | None: ...

    async def soft_delete_folder(self, db: AsyncSession, folder_id: str) -> PostFolder | None: ...

    async def restore_folder(self, db: AsyncSession, folder_id: str) -> PostFolder | None: ...

    async def list_folder_medias(
        self, db: AsyncSession, folder_ids: list[str] | None = None
    ) -> list[PostFolderMedia]: ...

    async def get_folder_media(
        self, db: AsyncSession, media_id: str
    ) -> PostFolderMedia | None: ...

    async def insert_folder_media(
        self, db: AsyncSession, media: PostFolderMedia
    ) -> PostFolderMedia: ...

    async def update_folder_media(
        self, db: AsyncSession, media: PostFolderMedia
    ) -> PostFolderMedia | None: ...

    async def delete_folder_media(self, db: AsyncSession, media_id: str) -> bool: ...
