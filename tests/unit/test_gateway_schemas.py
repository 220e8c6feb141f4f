"""Unit tests for sl_gateway Pydantic schemas."""

import uuid

import pytest
from pydantic import ValidationError

from src.sl_common.enums import UserRole
from src.sl_gateway.user.db_models import UserModel
from src.sl_gateway.user.schemas import (
    CreateUserRequest,
    UpdateUserRequest,
    UserDetails,
    UserInfo,
)


class TestCreateUserRequest:
    def test_valid_input_defaults_to_user_role(self) -> None:
        req = CreateUserRequest(email="alice@example.com", password="SecureP4ss")
        assert req.details.role is UserRole.USER

    def test_password_too_short(self) -> None:
        with pytest.raises(ValidationError):
            CreateUserRequest(email="alice@example.com", password="Ab1")

    @pytest.mark.parametrize("password", ["alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
    def test_password_complexity(self, password: str) -> None:
        with pytest.raises(ValidationError):
            CreateUserRequest(email="alice@example.com", password=password)

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            CreateUserRequest(email="not-an-email", password="SecureP4ss")


class TestUpdateUserRequest:
    def test_blank_password_means_unchanged(self) -> None:
        req = UpdateUserRequest(password="   ", details=UserDetails())
        assert req.password is None

    def test_weak_password_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UpdateUserRequest(password="weakpass", details=UserDetails())


class TestUserInfo:
    def test_username_is_email_local_part(self) -> None:
        user = UserModel(
            id=uuid.uuid4(), email="Bob.Smith@example.com", role="ADMIN", is_active=True
        )
        info = UserInfo.from_model(user)
        assert info.username == "Bob.Smith"
        assert info.role == "ADMIN"
        assert str(info.lifetime_val) == "0"
