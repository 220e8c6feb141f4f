"""API tests: routing, auth gating and the error envelope (services mocked)."""

import uuid
from collections.abc import Iterator
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from src.main import app
from src.sl_common.database import get_db_session
from src.sl_common.enums import (
    BalanceKind,
    NoteMethod,
    NoteStatus,
    TransactionSource,
    TransactionType,
)
from src.sl_common.errors import NoteNotPendingError
from src.sl_gateway.auth.dependencies import get_current_user
from src.sl_gateway.user.db_models import UserModel
from src.sl_ledger.application.service import BalanceApplicationService
from src.sl_ledger.domain.models import Balance, Transaction
from src.sl_note.api import router as notes_api
from src.sl_note.domain.models import Note
from src.sl_result.api import router as results_api
from src.sl_result.domain.models import IngestionReport

USER_ID = uuid.uuid4()


def _make_user(role: str = "USER") -> UserModel:
    user = UserModel()
    user.id = USER_ID
    user.email = "alice@example.com"
    user.role = role
    user.is_active = True
    return user


def _make_note(**kwargs) -> Note:
    defaults = dict(
        id="n-1", user_id=str(USER_ID), category_id="c-1", amount=Decimal("25"),
        method=NoteMethod.CASH, status=NoteStatus.PENDING, target=BalanceKind.ACCOUNT_BALANCE,
    )
    defaults.update(kwargs)
    return Note(**defaults)


@pytest.fixture
def as_user() -> Iterator[UserModel]:
    user = _make_user()
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_db_session] = lambda: AsyncMock()
    yield user
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin() -> Iterator[UserModel]:
    admin = _make_user(role="ADMIN")
    app.dependency_overrides[get_current_user] = lambda: admin
    app.dependency_overrides[get_db_session] = lambda: AsyncMock()
    yield admin
    app.dependency_overrides.clear()


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestAuthGating:
    async def test_missing_token_is_401(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/notes")
        assert resp.status_code == 401

    async def test_non_admin_cannot_approve(self, client: AsyncClient, as_user) -> None:
        resp = await client.post("/api/v1/notes/n-1/approve")
        assert resp.status_code == 403
        assert resp.json()["code"] == 1007

    async def test_non_admin_cannot_use_results(self, client: AsyncClient, as_user) -> None:
        resp = await client.post("/api/v1/results/preview", json={"result": "1 a"})
        assert resp.status_code == 403


class TestNotes:
    async def test_list_is_scoped_to_caller(self, client: AsyncClient, as_user) -> None:
        with patch.object(
            notes_api._service, "list_notes", AsyncMock(return_value=[_make_note()])
        ) as list_notes:
            resp = await client.get("/api/v1/notes", params={"user_id": "someone-else"})
        assert resp.status_code == 200
        assert list_notes.await_args.args[1] == str(USER_ID)
        assert resp.json()["data"][0]["amount"] == "25.00"

    async def test_cannot_read_foreign_note(self, client: AsyncClient, as_user) -> None:
        with patch.object(
            notes_api._service, "get_note", AsyncMock(return_value=_make_note(user_id="other"))
        ):
            resp = await client.get("/api/v1/notes/n-1")
        assert resp.status_code == 403

    async def test_approve_returns_note_and_transaction(
        self, client: AsyncClient, as_admin
    ) -> None:
        tx = Transaction(
            id="tx-1", user_id=str(USER_ID), category_id="c-1", amount=Decimal("25"),
            type=TransactionType.CREDIT, target=BalanceKind.ACCOUNT_BALANCE,
            source=TransactionSource.NOTE, account_balance_id="ab-1", note_id="n-1",
        )
        approved = _make_note(status=NoteStatus.APPROVED)
        with patch.object(
            notes_api._service, "approve_note", AsyncMock(return_value=(approved, tx))
        ):
            resp = await client.post("/api/v1/notes/n-1/approve")
        body = resp.json()
        assert resp.status_code == 200
        assert body["data"]["note"]["status"] == "APPROVED"
        assert body["data"]["transaction"]["source"] == "NOTE"

    async def test_double_approval_is_409_envelope(self, client: AsyncClient, as_admin) -> None:
        with patch.object(
            notes_api._service,
            "approve_note",
            AsyncMock(side_effect=NoteNotPendingError("n-1", "APPROVED")),
        ):
            resp = await client.post("/api/v1/notes/n-1/approve")
        assert resp.status_code == 409
        assert resp.json()["code"] == 3002
        assert resp.json()["data"] is None

    async def test_upload_target(self, client: AsyncClient, as_user) -> None:
        resp = await client.get("/api/v1/notes/upload-target", params={"filename": "Slip 1.PNG"})
        data = resp.json()["data"]
        assert data["path"].startswith("notes/")
        assert data["path"].endswith("-slip-1.png")
        assert data["media_url"].endswith(data["path"])


class TestBalances:
    async def test_foreign_balance_is_forbidden(self, client: AsyncClient, as_user) -> None:
        balance = Balance("ab-1", "other", "c-1", Decimal("5"), BalanceKind.ACCOUNT_BALANCE)
        with patch.object(
            BalanceApplicationService, "get_balance", AsyncMock(return_value=balance)
        ):
            resp = await client.get("/api/v1/balances/ab-1")
        assert resp.status_code == 403

    async def test_own_baki_is_visible(self, client: AsyncClient, as_user) -> None:
        baki = Balance("bk-1", str(USER_ID), "c-1", Decimal("1500"), BalanceKind.BAKI)
        with patch.object(BalanceApplicationService, "get_balance", AsyncMock(return_value=baki)):
            resp = await client.get("/api/v1/bakis/bk-1")
        data = resp.json()["data"]
        assert (data["kind"], data["balance_display"]) == ("baki", "1,500.00")


class TestResults:
    async def test_preview(self, client: AsyncClient, as_admin) -> None:
        with patch.object(
            results_api._service, "preview_result", AsyncMock(return_value=IngestionReport())
        ):
            resp = await client.post("/api/v1/results/preview", json={"result": "1 alice"})
        assert resp.status_code == 200
        assert resp.json()["data"]["ingested_count"] == 0
