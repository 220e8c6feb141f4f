"""ResultRepository: raw SQL over results, plus the username lookup."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.enums import BalanceKind, ResultStatus
from src.sl_common.errors import InternalError
from src.sl_result.domain.models import Result, UserRef

_COLUMNS = "id, category_id, target, result, status, created_at"

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM results
    WHERE (CAST(:category_id AS UUID) IS NULL OR category_id = CAST(:category_id AS UUID))
    ORDER BY created_at DESC
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM results WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM results WHERE id = :id FOR UPDATE")

_INSERT_SQL = text(f"""
    INSERT INTO results (category_id, target, result, status)
    VALUES (:category_id, :target, :result, :status)
    RETURNING {_COLUMNS}
""")

_UPDATE_SQL = text(f"""
    UPDATE results
    SET category_id = :category_id,
        target = :target,
        result = :result,
        status = :status
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text("DELETE FROM results WHERE id = :id RETURNING id")

# Candidates only; resolve_username() makes the final pick
_FIND_USERS_SQL = text("""
    SELECT id, email
    FROM users
    WHERE lower(split_part(email, '@', 1)) = ANY(:names)
       OR lower(email) = ANY(:names)
""")


def _row_to_result(row: object) -> Result:
    return Result(
        id=str(row.id),  # type: ignore[attr-defined]
        category_id=str(row.category_id),  # type: ignore[attr-defined]
        target=BalanceKind(row.target),  # type: ignore[attr-defined]
        result=row.result,  # type: ignore[attr-defined]
        status=ResultStatus(row.status),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class ResultRepository:
    async def list_results(
        self, db: AsyncSession, category_id: str | None = None
    ) -> list[Result]:
        result = await db.execute(_LIST_SQL, {"category_id": category_id})
        return [_row_to_result(row) for row in result.fetchall()]

    async def get_result(
        self, db: AsyncSession, result_id: str, for_update: bool = False
    ) -> Result | None:
        sql = _GET_FOR_UPDATE_SQL if for_update else _GET_SQL
        result = await db.execute(sql, {"id": result_id})
        row = result.fetchone()
        return _row_to_result(row) if row else None

    async def insert_result(self, db: AsyncSession, result: Result) -> Result:
        res = await db.execute(
            _INSERT_SQL,
            {
                "category_id": result.category_id,
                "target": result.target.value,
                "result": result.result,
                "status": result.status.value,
            },
        )
        row = res.fetchone()
        if row is None:
            raise InternalError("Result insert returned no rows")
        return _row_to_result(row)

    async def update_result(self, db: AsyncSession, result: Result) -> Result | None:
        res = await db.execute(
            _UPDATE_SQL,
            {
                "id": result.id,
                "category_id": result.category_id,
                "target": result.target.value,
                "result": result.result,
                "status": result.status.value,
            },
        )
        row = res.fetchone()
        return _row_to_result(row) if row else None

    async def delete_result(self, db: AsyncSession, result_id: str) -> bool:
        res = await db.execute(_DELETE_SQL, {"id": result_id})
        return res.fetchone() is not None

    async def find_users(self, db: AsyncSession, usernames: list[str]) -> list[UserRef]:
        if not usernames:
            return []
        names = sorted({u.lower() for u in usernames})
        res = await db.execute(_FIND_USERS_SQL, {"names": names})
        return [UserRef(id=str(row.id), email=row.email) for row in res.fetchall()]
