"""sl_catalog REST API: reads for any signed-in user, writes for admins."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_catalog.application.schemas import (
    CategoryResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from src.sl_catalog.application.service import CategoryApplicationService
from src.sl_catalog.domain.models import Category
from src.sl_common.database import get_db_session
from src.sl_common.response import ApiResponse, respond
from src.sl_gateway.auth.dependencies import get_current_user, is_admin, require_admin
from src.sl_gateway.user.db_models import UserModel

router = APIRouter(prefix="/categories", tags=["categories"])

_service = CategoryApplicationService()


def _dump(category: Category) -> dict[str, Any]:
    return CategoryResponse.from_domain(category).model_dump()


@router.get("")
async def list_categories(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    include_deleted: bool = Query(False, description="Admins only: include soft-deleted rows"),
) -> ApiResponse:
    show_deleted = include_deleted and is_admin(current_user)
    categories = await _service.list_categories(db, show_deleted)
    return respond(request, [_dump(c) for c in categories])


@router.get("/{category_id}")
async def get_category(
    category_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    category = await _service.get_category(db, category_id)
    return respond(request, _dump(category))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CreateCategoryRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    category = await _service.create_category(db, body)
    return respond(request, _dump(category))


@router.patch("/{category_id}")
async def update_category(
    category_id: str,
    body: UpdateCategoryRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    category = await _service.update_category(db, category_id, body)
    return respond(request, _dump(category))


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    category = await _service.delete_category(db, category_id)
    return respond(request, _dump(category), message="Category deleted")


@router.post("/{category_id}/restore")
async def restore_category(
    category_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    category = await _service.restore_category(db, category_id)
    return respond(request, _dump(category), message="Category restored")
