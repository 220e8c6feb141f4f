"""NoteRepository: raw SQL over the notes table."""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.enums import BalanceKind, NoteMethod, NoteStatus
from src.sl_common.errors import InternalError
from src.sl_note.domain.models import Note

_COLUMNS = "id, user_id, category_id, amount, method, status, target, media_url, created_at"

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM notes
    WHERE (CAST(:user_id AS UUID) IS NULL OR user_id = CAST(:user_id AS UUID))
      AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
    ORDER BY created_at DESC
""")

_GET_SQL = text(f"SELECT {_COLUMNS} FROM notes WHERE id = :id")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM notes WHERE id = :id FOR UPDATE")

_INSERT_SQL = text(f"""
    INSERT INTO notes (user_id, category_id, amount, method, status, target, media_url)
    VALUES (:user_id, :category_id, :amount, :method, :status, :target, :media_url)
    RETURNING {_COLUMNS}
""")

# status is deliberately absent: it only moves through _SET_STATUS_SQL
_UPDATE_SQL = text(f"""
    UPDATE notes
    SET category_id = :category_id,
        amount = :amount,
        method = :method,
        target = :target,
        media_url = :media_url
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_SET_STATUS_SQL = text(f"""
    UPDATE notes
    SET status = :status
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text("DELETE FROM notes WHERE id = :id RETURNING id")

_USER_EXISTS_SQL = text("SELECT 1 FROM users WHERE id = :id")


def _row_to_note(row: object) -> Note:
    return Note(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        category_id=str(row.category_id),  # type: ignore[attr-defined]
        amount=Decimal(row.amount),  # type: ignore[attr-defined]
        method=NoteMethod(row.method),  # type: ignore[attr-defined]
        status=NoteStatus(row.status),  # type: ignore[attr-defined]
        target=BalanceKind(row.target),  # type: ignore[attr-defined]
        media_url=row.media_url,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class NoteRepository:
    async def list_notes(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        status: NoteStatus | None = None,
    ) -> list[Note]:
        result = await db.execute(
            _LIST_SQL, {"user_id": user_id, "status": status.value if status else None}
        )
        return [_row_to_note(row) for row in result.fetchall()]

    async def get_note(
        self, db: AsyncSession, note_id: str, for_update: bool = False
    ) -> Note | None:
        sql = _GET_FOR_UPDATE_SQL if for_update else _GET_SQL
        result = await db.execute(sql, {"id": note_id})
        row = result.fetchone()
        return _row_to_note(row) if row else None

    async def insert_note(self, db: AsyncSession, note: Note) -> Note:
        result = await db.execute(
            _INSERT_SQL,
            {
                "user_id": note.user_id,
                "category_id": note.category_id,
                "amount": note.amount,
                "method": note.method.value,
                "status": note.status.value,
                "target": note.target.value,
                "media_url": note.media_url,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Note insert returned no rows")
        return _row_to_note(row)

    async def update_note(self, db: AsyncSession, note: Note) -> Note | None:
        result = await db.execute(
            _UPDATE_SQL,
            {
                "id": note.id,
                "category_id": note.category_id,
                "amount": note.amount,
                "method": note.method.value,
                "target": note.target.value,
                "media_url": note.media_url,
            },
        )
        row = result.fetchone()
        return _row_to_note(row) if row else None

    async def set_status(
        self, db: AsyncSession, note_id: str, status: NoteStatus
    ) -> Note | None:
        result = await db.execute(_SET_STATUS_SQL, {"id": note_id, "status": status.value})
        row = result.fetchone()
        return _row_to_note(row) if row else None

    async def delete_note(self, db: AsyncSession, note_id: str) -> bool:
        result = await db.execute(_DELETE_SQL, {"id": note_id})
        return result.fetchone() is not None

    async def user_exists(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(_USER_EXISTS_SQL, {"id": user_id})
        return result.fetchone() is not None
