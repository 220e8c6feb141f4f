"""sl_result REST API: admin only."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.database import get_db_session
from src.sl_common.response import ApiResponse, respond
from src.sl_gateway.auth.dependencies import require_admin
from src.sl_gateway.user.db_models import UserModel
from src.sl_result.application.schemas import (
    CreateResultRequest,
    IngestionReportResponse,
    PreviewResultRequest,
    ResultResponse,
    UpdateResultRequest,
)
from src.sl_result.application.service import ResultApplicationService

router = APIRouter(prefix="/results", tags=["results"])

_service = ResultApplicationService()

AdminUser = Annotated[UserModel, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_results(
    admin: AdminUser,
    db: DbSession,
    request: Request,
    category_id: str | None = Query(None),
) -> ApiResponse:
    results = await _service.list_results(db, category_id)
    return respond(request, [ResultResponse.from_domain(r).model_dump() for r in results])


@router.post("/preview")
async def preview_result(
    body: PreviewResultRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    report = await _service.preview_result(db, body.result)
    return respond(request, IngestionReportResponse.from_domain(report).model_dump())


@router.get("/{result_id}")
async def get_result(
    result_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    result = await _service.get_result(db, result_id)
    return respond(request, ResultResponse.from_domain(result).model_dump())


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_result(
    body: CreateResultRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    result, report = await _service.add_result(db, body)
    return respond(
        request,
        {
            "result": ResultResponse.from_domain(result).model_dump(),
            "report": IngestionReportResponse.from_domain(report).model_dump(),
        },
    )


@router.put("/{result_id}")
async def update_result(
    result_id: str,
    body: UpdateResultRequest,
    admin: AdminUser,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    result, report = await _service.update_result(db, result_id, body)
    return respond(
        request,
        {
            "result": ResultResponse.from_domain(result).model_dump(),
            "report": IngestionReportResponse.from_domain(report).model_dump(),
        },
    )


@router.delete("/{result_id}")
async def delete_result(
    result_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    reversed_count = await _service.delete_result(db, result_id)
    return respond(
        request,
        {"id": result_id, "reversed_count": reversed_count},
        message="Result deleted",
    )
