"""Admin user management: /users. Every route requires role ADMIN."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.database import get_db_session
from src.sl_common.response import ApiResponse, respond
from src.sl_gateway.auth.dependencies import require_admin
from src.sl_gateway.user.db_models import UserModel
from src.sl_gateway.user.schemas import CreateUserRequest, UpdateUserRequest, UserInfo
from src.sl_gateway.user.service import UserService

router = APIRouter(prefix="/users", tags=["users"])
_service = UserService()

AdminUser = Annotated[UserModel, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_users(request: Request, _admin: AdminUser, db: DbSession) -> ApiResponse:
    users = await _service.list_users(db)
    return respond(request, [UserInfo.from_model(u).model_dump(mode="json") for u in users])


@router.get("/{user_id}")
async def get_user(
    user_id: str, request: Request, _admin: AdminUser, db: DbSession
) -> ApiResponse:
    user = await _service.get_user(db, user_id)
    return respond(request, UserInfo.from_model(user).model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest, request: Request, _admin: AdminUser, db: DbSession
) -> ApiResponse:
    user = await _service.create_user(db, body)
    return respond(
        request, UserInfo.from_model(user).model_dump(mode="json"), message="User created"
    )


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UpdateUserRequest,
    request: Request,
    _admin: AdminUser,
    db: DbSession,
) -> ApiResponse:
    user = await _service.update_user(db, user_id, body)
    return respond(request, UserInfo.from_model(user).model_dump(mode="json"))


@router.delete("/{user_id}")
async def delete_user(
    user_id: str, request: Request, _admin: AdminUser, db: DbSession
) -> ApiResponse:
    await _service.delete_user(db, user_id)
    return respond(request, {"user_id": user_id}, message="User deleted")
