"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Pre-condition: PostgreSQL and Redis up, `alembic upgrade head` applied.
The whole directory is skipped when either is unreachable.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.main import app
from src.sl_common.database import async_session_factory, engine
from src.sl_common.enums import UserRole
from src.sl_common.errors import EmailExistsError
from src.sl_common.redis_client import get_redis
from src.sl_gateway.user.schemas import CreateUserRequest, UserDetails
from src.sl_gateway.user.service import UserService

ADMIN_EMAIL = "integration_admin@example.com"
ADMIN_PASSWORD = "AdminPass123"


@pytest_asyncio.fixture(loop_scope="session", scope="session", autouse=True)
async def backing_services() -> None:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM users LIMIT 1"))
        await (await get_redis()).ping()
    except (OSError, SQLAlchemyError, RedisError) as exc:
        pytest.skip(f"PostgreSQL/Redis not available: {exc}")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(backing_services: None) -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client; keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _ensure_user(email: str, password: str, role: UserRole) -> None:
    body = CreateUserRequest(email=email, password=password, details=UserDetails(role=role))
    try:
        async with async_session_factory() as db:
            await UserService().create_user(db, body)
    except EmailExistsError:
        # Left over from an earlier run
        pass


async def _login(client: AsyncClient, email: str, password: str) -> dict[str, str]:
    resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    await _ensure_user(ADMIN_EMAIL, ADMIN_PASSWORD, UserRole.ADMIN)
    return await _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest_asyncio.fixture(loop_scope="session")
async def member(client: AsyncClient, admin_headers: dict[str, str]) -> dict[str, str]:
    """A fresh USER created through the admin API: {user_id, username, headers}."""
    uid = uuid.uuid4().hex[:8]
    email, password = f"member_{uid}@example.com", "MemberPass1"
    resp = await client.post(
        "/api/v1/users",
        json={"email": email, "password": password},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return {
        "user_id": data["user_id"],
        "username": data["username"],
        "headers": await _login(client, email, password),
    }


@pytest_asyncio.fixture(loop_scope="session")
async def category_id(client: AsyncClient, admin_headers: dict[str, str]) -> str:
    resp = await client.post(
        "/api/v1/categories",
        json={"name": f"cat-{uuid.uuid4().hex[:6]}", "media_url": "https://cdn.example.com/c.png"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]
