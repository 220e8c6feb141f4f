from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.enums import NoteStatus
from src.sl_note.domain.models import Note


class NoteRepositoryProtocol(Protocol):
    async def list_notes(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        status: NoteStatus | None = None,
    ) -> list[Note]: ...

    async def get_note(
        self, db: AsyncSession, note_id: str, for_update: bool = False
    ) -> Note | None: ...

    async def insert_note(self, db: AsyncSession, note: Note) -> Note: ...

    async def update_note(self, db: AsyncSession, note: Note) -> Note | None: ...

    async def set_status(
        self, db: AsyncSession, note_id: str, status: NoteStatus
    ) -> Note | None: ...

    async def delete_note(self, db: AsyncSession, note_id: str) -> bool: ...

    async def user_exists(self, db: AsyncSession, user_id: str) -> bool: ...
