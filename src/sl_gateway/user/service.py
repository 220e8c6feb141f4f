"""User domain service: login, refresh, admin user management.

Reads run on the injected AsyncSession directly. Writes go through
unit_of_work() and publish a change on the "users" channel after commit.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.change_feed import (
    ChangeFeedProtocol,
    Delete,
    Insert,
    Update,
    get_change_feed,
    publish_changes,
)
from src.sl_common.database import unit_of_work
from src.sl_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from src.sl_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.sl_gateway.auth.password import hash_password, verify_password
from src.sl_gateway.user.db_models import UserModel
from src.sl_gateway.user.schemas import (
    CreateUserRequest,
    UpdateUserRequest,
    UserDetails,
    UserInfo,
)

logger = logging.getLogger(__name__)

USERS_TABLE = "users"


def _apply_details(user: UserModel, details: UserDetails) -> None:
    user.role = details.role.value
    user.birthdate = details.birthdate
    user.city = details.city
    user.state = details.state
    user.race = details.race
    user.profile_image = details.profile_image
    user.lifetime_val = details.lifetime_val


class UserService:
    """Stateless apart from the change feed handle; instantiate once."""

    def __init__(self, feed: ChangeFeedProtocol | None = None) -> None:
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    async def _find_by_email(self, db: AsyncSession, email: str) -> UserModel | None:
        result = await db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown email and wrong password both raise InvalidCredentialsError.
        """
        user = await self._find_by_email(db, email)

        hashed = user.password_hash if user is not None else None
        if not verify_password(password, hashed) or user is None:
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        user_id = str(user.id)
        return (
            user,
            create_access_token(user_id, user.role),
            create_refresh_token(user_id),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        """Exchange a refresh token for a new access token.

        The user row is re-read so a disabled account cannot keep refreshing
        and a changed role shows up in the new token.
        """
        payload = decode_token(refresh_token, expected_type="refresh")
        user = await self.get_user(db, payload["sub"])
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(str(user.id), user.role)

    # ------------------------------------------------------------------
    # Admin management
    # ------------------------------------------------------------------

    async def list_users(self, db: AsyncSession) -> list[UserModel]:
        result = await db.execute(select(UserModel).order_by(UserModel.created_at.desc()))
        return list(result.scalars().all())

    async def get_user(self, db: AsyncSession, user_id: str) -> UserModel:
        result = await db.execute(select(UserModel).where(UserModel.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def create_user(self, db: AsyncSession, body: CreateUserRequest) -> UserModel:
        async with unit_of_work(db):
            if await self._find_by_email(db, body.email) is not None:
                raise EmailExistsError()
            user = UserModel(
                email=body.email,
                password_hash=hash_password(body.password),
                is_active=True,
            )
            _apply_details(user, body.details)
            db.add(user)
            await db.flush()
            await db.refresh(user)

        logger.info("User created: id=%s role=%s", user.id, user.role)
        await publish_changes(
            self.feed, [(USERS_TABLE, Insert(UserInfo.from_model(user).model_dump()))]
        )
        return user

    async def update_user(
        self, db: AsyncSession, user_id: str, body: UpdateUserRequest
    ) -> UserModel:
        async with unit_of_work(db):
            user = await self.get_user(db, user_id)
            if body.password is not None:
                user.password_hash = hash_password(body.password)
            _apply_details(user, body.details)
            if body.is_active is not None:
                user.is_active = body.is_active
            await db.flush()
            await db.refresh(user)

        await publish_changes(
            self.feed, [(USERS_TABLE, Update(UserInfo.from_model(user).model_dump()))]
        )
        return user

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        """Balances, bakis and their transactions go with the user (FK cascade)."""
        async with unit_of_work(db):
            user = await self.get_user(db, user_id)
            await db.delete(user)

        logger.info("User deleted: id=%s", user_id)
        await publish_changes(self.feed, [(USERS_TABLE, Delete(str(user_id)))])
