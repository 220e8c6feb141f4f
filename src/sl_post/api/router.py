"""sl_post REST API: /posts and /post-medias.

Reads for any signed-in user; writes and scheduling for admins.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.database import get_db_session
from src.sl_common.enums import ScheduleState
from src.sl_common.response import ApiResponse, respond
from src.sl_gateway.auth.dependencies import get_current_user, is_admin, require_admin
from src.sl_gateway.user.db_models import UserModel
from src.sl_post.application.schemas import (
    CreatePostMediaRequest,
    CreatePostRequest,
    PostMediaResponse,
    PostResponse,
    SchedulePostRequest,
    UpdatePostMediaRequest,
    UpdatePostRequest,
)
from src.sl_post.application.service import PostApplicationService

CurrentUser = Annotated[UserModel, Depends(get_current_user)]
AdminUser = Annotated[UserModel, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

router = APIRouter(prefix="/posts", tags=["posts"])
medias_router = APIRouter(prefix="/post-medias", tags=["post-medias"])

_service = PostApplicationService()


@router.get("")
async def list_posts(
    current_user: CurrentUser,
    db: DbSession,
    request: Request,
    folder_id: str | None = Query(None),
    include_deleted: bool = Query(False),
) -> ApiResponse:
    posts = await _service.list_posts(db, include_deleted and is_admin(current_user), folder_id)
    return respond(request, [PostResponse.from_domain(p).model_dump() for p in posts])


@router.get("/scheduled")
async def list_scheduled_posts(
    admin: AdminUser,
    db: DbSession,
    request: Request,
    state: ScheduleState | None = Query(None),
) -> ApiResponse:
    posts = await _service.list_scheduled_posts(db, state)
    return respond(request, [PostResponse.from_domain(p).model_dump() for p in posts])


@router.get("/{post_id}")
async def get_post(
    post_id: str, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    post = await _service.get_post(db, post_id)
    return respond(request, PostResponse.from_domain(post).model_dump())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    body: CreatePostRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    post = await _service.create_post(db, body)
    return respond(request, PostResponse.from_domain(post).model_dump())


@router.patch("/{post_id}")
async def update_post(
    post_id: str, body: UpdatePostRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    post = await _service.update_post(db, post_id, body)
    return respond(request, PostResponse.from_domain(post).model_dump())


@router.delete("/{post_id}")
async def delete_post(
    post_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    post = await _service.delete_post(db, post_id)
    return respond(request, PostResponse.from_domain(post).model_dump(), message="Post deleted")


@router.post("/{post_id}/restore")
async def restore_post(
    post_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    post = await _service.restore_post(db, post_id)
    return respond(request, PostResponse.from_domain(post).model_dump(), message="Post restored")


@router.put("/{post_id}/schedule")
async def schedule_post(
    post_id: str, body: SchedulePostRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    post = await _service.schedule_post(db, post_id, body.time_post)
    return respond(request, PostResponse.from_domain(post).model_dump())


@router.delete("/{post_id}/schedule")
async def unschedule_post(
    post_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    post = await _service.unschedule_post(db, post_id)
    return respond(request, PostResponse.from_domain(post).model_dump())


@router.delete("/{post_id}/medias")
async def delete_all_medias_for_post(
    post_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    deleted = await _service.delete_all_medias_for_post(db, post_id)
    return respond(request, {"post_id": post_id, "deleted_ids": deleted})


# ---------------------------------------------------------------------------
# /post-medias
# ---------------------------------------------------------------------------


@medias_router.get("")
async def list_post_medias(
    current_user: CurrentUser,
    db: DbSession,
    request: Request,
    post_id: str | None = Query(None),
) -> ApiResponse:
    medias = await _service.list_medias(db, post_id)
    return respond(request, [PostMediaResponse.from_domain(m).model_dump() for m in medias])


@medias_router.get("/{media_id}")
async def get_post_media(
    media_id: int, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    media = await _service.get_media(db, media_id)
    return respond(request, PostMediaResponse.from_domain(media).model_dump())


@medias_router.post("", status_code=status.HTTP_201_CREATED)
async def create_post_media(
    body: CreatePostMediaRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    media = await _service.create_media(db, body)
    return respond(request, PostMediaResponse.from_domain(media).model_dump())


@medias_router.patch("/{media_id}")
async def update_post_media(
    media_id: int,
    body: UpdatePostMediaRequest,
    admin: AdminUser,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    media = await _service.update_media(db, media_id, body)
    return respond(request, PostMediaResponse.from_domain(media).model_dump())


@medias_router.delete("/{media_id}")
async def delete_post_media(
    media_id: int, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    await _service.delete_media(db, media_id)
    return respond(request, {"id": media_id}, message="Post media deleted")
