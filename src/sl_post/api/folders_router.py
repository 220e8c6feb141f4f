"""sl_post REST API: /post-folders and /post-folder-medias."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.database import get_db_session
from src.sl_common.response import ApiResponse, respond
from src.sl_gateway.auth.dependencies import get_current_user, is_admin, require_admin
from src.sl_gateway.user.db_models import UserModel
from src.sl_post.application.folder_service import PostFolderApplicationService
from src.sl_post.application.schemas import (
    CreatePostFolderMediaRequest,
    CreatePostFolderRequest,
    PostFolderMediaResponse,
    PostFolderResponse,
    UpdatePostFolderMediaRequest,
    UpdatePostFolderRequest,
)

CurrentUser = Annotated[UserModel, Depends(get_current_user)]
AdminUser = Annotated[UserModel, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

router = APIRouter(prefix="/post-folders", tags=["post-folders"])
medias_router = APIRouter(prefix="/post-folder-medias", tags=["post-folder-medias"])

_service = PostFolderApplicationService()


@router.get("")
async def list_folders(
    current_user: CurrentUser,
    db: DbSession,
    request: Request,
    include_deleted: bool = Query(False),
) -> ApiResponse:
    folders = await _service.list_folders(db, include_deleted and is_admin(current_user))
    return respond(request, [PostFolderResponse.from_domain(f).model_dump() for f in folders])


@router.get("/{folder_id}")
async def get_folder(
    folder_id: str, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    folder = await _service.get_folder(db, folder_id)
    return respond(request, PostFolderResponse.from_domain(folder).model_dump())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_folder(
    body: CreatePostFolderRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    folder = await _service.create_folder(db, body)
    return respond(request, PostFolderResponse.from_domain(folder).model_dump())


@router.patch("/{folder_id}")
async def update_folder(
    folder_id: str,
    body: UpdatePostFolderRequest,
    admin: AdminUser,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    folder = await _service.update_folder(db, folder_id, body)
    return respond(request, PostFolderResponse.from_domain(folder).model_dump())


@router.delete("/{folder_id}")
async def delete_folder(
    folder_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    folder = await _service.delete_folder(db, folder_id)
    return respond(
        request, PostFolderResponse.from_domain(folder).model_dump(), message="Folder deleted"
    )


@router.post("/{folder_id}/restore")
async def restore_folder(
    folder_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    folder = await _service.restore_folder(db, folder_id)
    return respond(
        request, PostFolderResponse.from_domain(folder).model_dump(), message="Folder restored"
    )


@medias_router.get("")
async def list_folder_medias(
    current_user: CurrentUser,
    db: DbSession,
    request: Request,
    folder_id: str | None = Query(None),
) -> ApiResponse:
    medias = await _service.list_medias(db, folder_id)
    return respond(request, [PostFolderMediaResponse.from_domain(m).model_dump() for m in medias])


@medias_router.get("/{media_id}")
async def get_folder_media(
    media_id: str, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    media = await _service.get_media(db, media_id)
    return respond(request, PostFolderMediaResponse.from_domain(media).model_dump())


@medias_router.post("", status_code=status.HTTP_201_CREATED)
async def create_folder_media(
    body: CreatePostFolderMediaRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    media = await _service.create_media(db, body)
    return respond(request, PostFolderMediaResponse.from_domain(media).model_dump())


@medias_router.patch("/{media_id}")
async def update_folder_media(
    media_id: str,
    body: UpdatePostFolderMediaRequest,
    admin: AdminUser,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    media = await _service.update_media(db, media_id, body)
    return respond(request, PostFolderMediaResponse.from_domain(media).model_dump())


@medias_router.delete("/{media_id}")
async def delete_folder_media(
    media_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    await _service.delete_media(db, media_id)
    return respond(request, {"id": media_id}, message="Folder media deleted")
