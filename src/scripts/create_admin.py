"""Create the first ADMIN account.

Every /users route needs an admin, so the very first one is created here,
after `alembic upgrade head`.

Usage:
    python -m src.scripts.create_admin --email admin@example.com --password 'Secret123'
"""

import argparse
import asyncio
import logging

from src.sl_common.database import async_session_factory, engine
from src.sl_common.enums import UserRole
from src.sl_common.errors import EmailExistsError
from src.sl_common.redis_client import close_redis
from src.sl_gateway.user.schemas import CreateUserRequest, UserDetails
from src.sl_gateway.user.service import UserService


async def main(email: str, password: str) -> int:
    body = CreateUserRequest(
        email=email,
        password=password,
        details=UserDetails(role=UserRole.ADMIN),
    )
    try:
        async with async_session_factory() as db:
            user = await UserService().create_user(db, body)
    except EmailExistsError:
        print(f"User {email} already exists; nothing to do.")
        return 1
    finally:
        await engine.dispose()
        await close_redis()

    print(f"Admin created: id={user.id} email={user.email}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Create an ADMIN user.")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args()
    raise SystemExit(asyncio.run(main(args.email, args.password)))
