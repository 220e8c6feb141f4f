"""sl_ledger REST API: /balances, /bakis and /transactions.

Signed-in users see their own balances and transactions; listing everyone's
rows and every write require ADMIN.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.database import get_db_session
from src.sl_common.enums import BalanceKind, TransactionSource
from src.sl_common.errors import ForbiddenError
from src.sl_common.response import ApiResponse, respond
from src.sl_gateway.auth.dependencies import get_current_user, is_admin, require_admin
from src.sl_gateway.user.db_models import UserModel
from src.sl_ledger.application.schemas import (
    BalanceCheckResponse,
    BalanceResponse,
    CreateBalanceRequest,
    CreateTransactionRequest,
    TransactionResponse,
    UpdateBalanceRequest,
    UpdateTransactionRequest,
)
from src.sl_ledger.application.service import (
    BalanceApplicationService,
    TransactionApplicationService,
)

CurrentUser = Annotated[UserModel, Depends(get_current_user)]
AdminUser = Annotated[UserModel, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def build_balance_router(kind: BalanceKind, prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[kind.table])
    service = BalanceApplicationService(kind)

    @router.get("")
    async def list_balances(
        current_user: CurrentUser,
        db: DbSession,
        request: Request,
        user_id: str | None = Query(None),
        category_id: str | None = Query(None),
    ) -> ApiResponse:
        if not is_admin(current_user):
            user_id = str(current_user.id)
        balances = await service.list_balances(db, user_id, category_id)
        return respond(request, [BalanceResponse.from_domain(b).model_dump() for b in balances])

    @router.get("/me")
    async def list_mine(current_user: CurrentUser, db: DbSession, request: Request) -> ApiResponse:
        balances = await service.list_mine(db, str(current_user.id))
        return respond(request, [BalanceResponse.from_domain(b).model_dump() for b in balances])

    @router.get("/{balance_id}")
    async def get_balance(
        balance_id: str, current_user: CurrentUser, db: DbSession, request: Request
    ) -> ApiResponse:
        balance = await service.get_balance(db, balance_id)
        if not is_admin(current_user) and balance.user_id != str(current_user.id):
            raise ForbiddenError(f"{kind.value} belongs to another user")
        return respond(request, BalanceResponse.from_domain(balance).model_dump())

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_balance(
        body: CreateBalanceRequest, admin: AdminUser, db: DbSession, request: Request
    ) -> ApiResponse:
        balance = await service.create_balance(db, body)
        return respond(request, BalanceResponse.from_domain(balance).model_dump())

    @router.put("/{balance_id}")
    async def update_balance(
        balance_id: str,
        body: UpdateBalanceRequest,
        admin: AdminUser,
        db: DbSession,
        request: Request,
    ) -> ApiResponse:
        balance = await service.update_balance(db, balance_id, body)
        return respond(request, BalanceResponse.from_domain(balance).model_dump())

    @router.delete("/{balance_id}")
    async def delete_balance(
        balance_id: str, admin: AdminUser, db: DbSession, request: Request
    ) -> ApiResponse:
        await service.delete_balance(db, balance_id)
        return respond(request, {"id": balance_id}, message=f"{kind.value} deleted")

    @router.get("/{balance_id}/verify")
    async def verify_balance(
        balance_id: str, admin: AdminUser, db: DbSession, request: Request
    ) -> ApiResponse:
        check = await service.verify_balance(db, balance_id)
        return respond(request, BalanceCheckResponse.from_domain(check).model_dump())

    @router.post("/{balance_id}/reconcile")
    async def reconcile_balance(
        balance_id: str, admin: AdminUser, db: DbSession, request: Request
    ) -> ApiResponse:
        check = await service.reconcile_balance(db, balance_id)
        return respond(request, BalanceCheckResponse.from_domain(check).model_dump())

    return router


balances_router = build_balance_router(BalanceKind.ACCOUNT_BALANCE, "/balances")
bakis_router = build_balance_router(BalanceKind.BAKI, "/bakis")

transactions_router = APIRouter(prefix="/transactions", tags=["transactions"])
_transactions = TransactionApplicationService()


@transactions_router.get("")
async def list_transactions(
    current_user: CurrentUser,
    db: DbSession,
    request: Request,
    user_id: str | None = Query(None),
    category_id: str | None = Query(None),
    target: BalanceKind | None = Query(None),
    source: TransactionSource | None = Query(None),
    result_id: str | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
) -> ApiResponse:
    if not is_admin(current_user):
        user_id = str(current_user.id)
    txs = await _transactions.list_transactions(
        db, user_id, category_id, target, source, result_id, limit
    )
    return respond(request, [TransactionResponse.from_domain(t).model_dump() for t in txs])


@transactions_router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: str, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    tx = await _transactions.get_transaction(db, transaction_id)
    if not is_admin(current_user) and tx.user_id != str(current_user.id):
        raise ForbiddenError("Transaction belongs to another user")
    return respond(request, TransactionResponse.from_domain(tx).model_dump())


@transactions_router.post("", status_code=status.HTTP_201_CREATED)
async def add_transaction(
    body: CreateTransactionRequest, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    tx = await _transactions.add_transaction(db, body)
    return respond(request, TransactionResponse.from_domain(tx).model_dump())


@transactions_router.patch("/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    body: UpdateTransactionRequest,
    admin: AdminUser,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    tx = await _transactions.update_transaction(db, transaction_id, body)
    return respond(request, TransactionResponse.from_domain(tx).model_dump())


@transactions_router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    await _transactions.delete_transaction(db, transaction_id)
    return respond(request, {"id": transaction_id}, message="Transaction deleted")
