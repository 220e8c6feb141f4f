"""Unit tests for user service (mocked DB)."""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.sl_common.change_feed import Delete, Insert, LocalChangeFeed
from src.sl_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UserNotFoundError,
)
from src.sl_gateway.auth.jwt_handler import create_refresh_token, decode_token
from src.sl_gateway.user.db_models import UserModel
from src.sl_gateway.user.schemas import CreateUserRequest, UpdateUserRequest, UserDetails
from src.sl_gateway.user.service import UserService


def _make_user(is_active: bool = True, role: str = "USER") -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.email = "alice@example.com"
    user.password_hash = "$2b$12$fakehash"
    user.role = role
    user.is_active = is_active
    user.lifetime_val = Decimal("0")
    return user


def _result(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def feed() -> LocalChangeFeed:
    return LocalChangeFeed()


@pytest.fixture
def service(feed: LocalChangeFeed) -> UserService:
    return UserService(feed)


class TestLogin:
    async def test_unknown_email_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody@example.com", "Pass1word", mock_db)

    async def test_wrong_password_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        with patch("src.sl_gateway.user.service.verify_password", return_value=False):
            with pytest.raises(InvalidCredentialsError):
                await service.login("alice@example.com", "WrongPass1", mock_db)

    async def test_disabled_account_raises(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user(is_active=False)))
        with patch("src.sl_gateway.user.service.verify_password", return_value=True):
            with pytest.raises(AccountDisabledError):
                await service.login("alice@example.com", "Pass1word", mock_db)

    async def test_success_returns_tokens_with_role(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = _make_user(role="ADMIN")
        mock_db.execute = AsyncMock(return_value=_result(user))
        with patch("src.sl_gateway.user.service.verify_password", return_value=True):
            got, access, refresh = await service.login("ALICE@example.com", "Pass1word", mock_db)
        assert got is user
        assert decode_token(access, "access")["role"] == "ADMIN"
        assert decode_token(refresh, "refresh")["sub"] == str(user.id)


class TestRefresh:
    async def test_refresh_rereads_user(self, service: UserService, mock_db: AsyncMock) -> None:
        user = _make_user()
        mock_db.execute = AsyncMock(return_value=_result(user))
        token = await service.refresh(create_refresh_token(str(user.id)), mock_db)
        assert decode_token(token, "access")["sub"] == str(user.id)

    async def test_disabled_user_cannot_refresh(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = _make_user(is_active=False)
        mock_db.execute = AsyncMock(return_value=_result(user))
        with pytest.raises(AccountDisabledError):
            await service.refresh(create_refresh_token(str(user.id)), mock_db)

    async def test_garbage_token(self, service: UserService, mock_db: AsyncMock) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh("not-a-token", mock_db)


class TestAdminManagement:
    async def test_duplicate_email_raises(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))
        body = CreateUserRequest(email="alice@example.com", password="Pass1word")
        with pytest.raises(EmailExistsError):
            await service.create_user(mock_db, body)
        mock_db.rollback.assert_awaited_once()

    async def test_create_publishes_insert(
        self, service: UserService, mock_db: AsyncMock, feed: LocalChangeFeed
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        async def refresh(user: UserModel) -> None:
            user.id = uuid.uuid4()

        mock_db.refresh.side_effect = refresh
        seen: list = []
        await feed.subscribe("users", seen.append)

        body = CreateUserRequest(
            email="carol@example.com", password="Pass1word",
            details=UserDetails(role="ADMIN", city="Kuching"),
        )
        user = await service.create_user(mock_db, body)

        assert user.password_hash != "Pass1word"
        assert user.role == "ADMIN"
        assert isinstance(seen[0], Insert)
        assert seen[0].row["username"] == "carol"

    async def test_update_keeps_password_when_blank(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        user = _make_user()
        mock_db.execute = AsyncMock(return_value=_result(user))
        body = UpdateUserRequest(password="  ", details=UserDetails(city="Miri"), is_active=False)

        updated = await service.update_user(mock_db, str(user.id), body)

        assert updated.password_hash == "$2b$12$fakehash"
        assert updated.city == "Miri"
        assert updated.is_active is False

    async def test_delete_unknown_raises(self, service: UserService, mock_db: AsyncMock) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(UserNotFoundError):
            await service.delete_user(mock_db, "missing")

    async def test_delete_publishes_key(
        self, service: UserService, mock_db: AsyncMock, feed: LocalChangeFeed
    ) -> None:
        user = _make_user()
        mock_db.execute = AsyncMock(return_value=_result(user))
        seen: list = []
        await feed.subscribe("users", seen.append)
        await service.delete_user(mock_db, str(user.id))
        mock_db.delete.assert_awaited_once_with(user)
        assert seen == [Delete(str(user.id))]


class TestSchemas:
    def test_weak_password_rejected(self) -> None:
        with pytest.raises(ValueError):
            CreateUserRequest(email="a@example.com", password="alllowercase1")

    def test_username_is_email_local_part(self) -> None:
        assert _make_user().username == "alice"
