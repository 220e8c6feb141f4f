"""Domain models for sl_post: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class PostMedia:
    id: int                          # BIGSERIAL
    post_id: str
    media_url: str
    arrangement: int | None = None
    created_at: datetime | None = None


@dataclass
class Post:
    id: str
    name: str
    caption: str | None = None
    caption_position: str = "bottom"
    cta_text: str | None = None
    font_family: str | None = None
    photo_size: str = "square"
    post_folder_id: str | None = None
    status: str = "active"
    time_post: datetime | None = None   # None = unscheduled draft
    active: bool = True
    deleted_at: datetime | None = None
    created_at: datetime | None = None
    medias: list[PostMedia] = field(default_factory=list)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None or not self.active


@dataclass
class PostFolderMedia:
    id: str
    post_folder_id: str | None
    media_url: str
    created_at: datetime | None = None


@dataclass
class PostFolder:
    id: str
    name: str
    image_count: int = 0
    video_count: int = 0
    active: bool = True
    deleted_at: datetime | None = None
    created_at: datetime | None = None
    medias: list[PostFolderMedia] = field(default_factory=list)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None or not self.active
