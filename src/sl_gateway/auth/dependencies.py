"""FastAPI dependencies: get_current_user, require_admin.

Usage in any protected router:
    from src.sl_gateway.auth.dependencies import get_current_user, require_admin

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.database import get_db_session
from src.sl_common.enums import UserRole
from src.sl_common.errors import AccountDisabledError, AdminRequiredError, InvalidCredentialsError
from src.sl_gateway.auth.jwt_handler import decode_token
from src.sl_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def resolve_token_user(token: str, db: AsyncSession) -> UserModel:
    """Shared by HTTP routes and the WebSocket relay."""
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == payload["sub"]))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Extract and validate the JWT Bearer token, return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    Raises AccountDisabledError (403) if the user account is disabled.
    """
    return await resolve_token_user(token, db)


def is_admin(user: UserModel) -> bool:
    return user.role == UserRole.ADMIN.value


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Back-office routes: users, results, transactions, approvals."""
    if not is_admin(current_user):
        raise AdminRequiredError()
    return current_user
