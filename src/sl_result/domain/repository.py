from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_result.domain.models import Result, UserRef


class ResultRepositoryProtocol(Protocol):
    async def list_results(
        self, db: AsyncSession, category_id: str | None = None
    ) -> list[Result]: ...

    async def get_result(
        self, db: AsyncSession, result_id: str, for_update: bool = False
    ) -> Result | None: ...

    async def insert_result(self, db: AsyncSession, result: Result) -> Result: ...

    async def update_result(self, db: AsyncSession, result: Result) -> Result | None: ...

    async def delete_result(self, db: AsyncSession, result_id: str) -> bool: ...

    async def find_users(self, db: AsyncSession, usernames: list[str]) -> list[UserRef]: ...
