"""Pydantic schemas for sl_post API."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.sl_common.datetime_utils import to_iso
from src.sl_post.domain.models import Post, PostFolder, PostFolderMedia, PostMedia
from src.sl_post.domain.schedule import schedule_state

# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class CreatePostRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    caption: str | None = None
    caption_position: str = "bottom"
    cta_text: str | None = Field(None, max_length=255)
    font_family: str | None = Field(None, max_length=128)
    photo_size: str = "square"
    post_folder_id: str | None = None
    status: str = "active"
    time_post: datetime | None = None


class UpdatePostRequest(BaseModel):
    """Partial update: only fields present in the body are written."""

    name: str | None = Field(None, min_length=1, max_length=255)
    caption: str | None = None
    caption_position: str | None = None
    cta_text: str | None = Field(None, max_length=255)
    font_family: str | None = Field(None, max_length=128)
    photo_size: str | None = None
    post_folder_id: str | None = None
    status: str | None = None
    time_post: datetime | None = None


class SchedulePostRequest(BaseModel):
    time_post: datetime


class PostMediaResponse(BaseModel):
    id: int
    post_id: str
    media_url: str
    arrangement: int | None
    created_at: str | None

    @classmethod
    def from_domain(cls, media: PostMedia) -> "PostMediaResponse":
        return cls(
            id=media.id,
            post_id=media.post_id,
            media_url=media.media_url,
            arrangement=media.arrangement,
            created_at=to_iso(media.created_at),
        )


class PostResponse(BaseModel):
    id: str
    name: str
    caption: str | None
    caption_position: str
    cta_text: str | None
    font_family: str | None
    photo_size: str
    post_folder_id: str | None
    status: str
    time_post: str | None
    schedule_state: str
    active: bool
    deleted_at: str | None
    created_at: str | None
    medias: list[PostMediaResponse]

    @classmethod
    def from_domain(cls, post: Post, now: datetime | None = None) -> "PostResponse":
        return cls(
            id=post.id,
            name=post.name,
            caption=post.caption,
            caption_position=post.caption_position,
            cta_text=post.cta_text,
            font_family=post.font_family,
            photo_size=post.photo_size,
            post_folder_id=post.post_folder_id,
            status=post.status,
            time_post=to_iso(post.time_post),
            schedule_state=schedule_state(post.time_post, now).value,
            active=post.active,
            deleted_at=to_iso(post.deleted_at),
            created_at=to_iso(post.created_at),
            medias=[PostMediaResponse.from_domain(m) for m in post.medias],
        )


class CreatePostMediaRequest(BaseModel):
    post_id: str
    media_url: str = Field(..., max_length=2048)
    arrangement: int | None = None


class UpdatePostMediaRequest(BaseModel):
    post_id: str | None = None
    media_url: str | None = Field(None, max_length=2048)
    arrangement: int | None = None


# ---------------------------------------------------------------------------
# Folders
# ---------------------------------------------------------------------------


class CreatePostFolderRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    image_count: int = Field(0, ge=0)
    video_count: int = Field(0, ge=0)


class UpdatePostFolderRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    image_count: int | None = Field(None, ge=0)
    video_count: int | None = Field(None, ge=0)


class PostFolderMediaResponse(BaseModel):
    id: str
    post_folder_id: str | None
    media_url: str
    created_at: str | None

    @classmethod
    def from_domain(cls, media: PostFolderMedia) -> "PostFolderMediaResponse":
        return cls(
            id=media.id,
            post_folder_id=media.post_folder_id,
            media_url=media.media_url,
            created_at=to_iso(media.created_at),
        )


class PostFolderResponse(BaseModel):
    id: str
    name: str
    image_count: int
    video_count: int
    active: bool
    deleted_at: str | None
    created_at: str | None
    medias: list[PostFolderMediaResponse]

    @classmethod
    def from_domain(cls, folder: PostFolder) -> "PostFolderResponse":
        return cls(
            id=folder.id,
            name=folder.name,
            image_count=folder.image_count,
            video_count=folder.video_count,
            active=folder.active,
            deleted_at=to_iso(folder.deleted_at),
            created_at=to_iso(folder.created_at),
            medias=[PostFolderMediaResponse.from_domain(m) for m in folder.medias],
        )


class CreatePostFolderMediaRequest(BaseModel):
    post_folder_id: str | None = None
    media_url: str = Field(..., max_length=2048)


class UpdatePostFolderMediaRequest(BaseModel):
    post_folder_id: str | None = None
    media_url: str | None = Field(None, max_length=2048)
