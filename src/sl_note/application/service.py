"""NoteApplicationService: note CRUD and the approval state machine.

approve_note locks the note, posts one credit through the LedgerService and
marks the note APPROVED, all in one database transaction. A note that is
no longer PENDING cannot be approved or rejected again, so a double click
never double-posts.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.change_feed import (
    ChangeFeedProtocol,
    Delete,
    Insert,
    Update,
    as_row,
    get_change_feed,
    publish_changes,
)
from src.sl_common.database import unit_of_work
from src.sl_common.enums import NoteStatus, TransactionSource, TransactionType
from src.sl_common.errors import NoteNotFoundError, NoteNotPendingError, UserNotFoundError
from src.sl_common.storage import public_media_url
from src.sl_ledger.application.ledger import Changes, LedgerService
from src.sl_ledger.domain.models import Transaction, TransactionDraft
from src.sl_note.application.schemas import CreateNoteRequest, UpdateNoteRequest
from src.sl_note.domain.models import Note
from src.sl_note.domain.repository import NoteRepositoryProtocol
from src.sl_note.infrastructure.persistence import NoteRepository

logger = logging.getLogger(__name__)

NOTES_TABLE = "notes"


def _media_url(media_url: str | None, media_path: str | None) -> str | None:
    if media_path:
        return public_media_url(media_path)
    return media_url


class NoteApplicationService:
    def __init__(
        self,
        repo: NoteRepositoryProtocol | None = None,
        ledger: LedgerService | None = None,
        feed: ChangeFeedProtocol | None = None,
    ) -> None:
        self._repo: NoteRepositoryProtocol = repo or NoteRepository()
        self._ledger = ledger or LedgerService()
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        status: NoteStatus | None = None,
    ) -> list[Note]:
        return await self._repo.list_notes(db, user_id, status)

    async def get_note(self, db: AsyncSession, note_id: str) -> Note:
        note = await self._repo.get_note(db, note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    async def add_note(self, db: AsyncSession, user_id: str, body: CreateNoteRequest) -> Note:
        """New notes always start PENDING."""
        draft = Note(
            id="",
            user_id=user_id,
            category_id=body.category_id,
            amount=body.amount,
            method=body.method,
            status=NoteStatus.PENDING,
            target=body.target,
            media_url=_media_url(body.media_url, body.media_path),
        )
        async with unit_of_work(db):
            note = await self._repo.insert_note(db, draft)
        await publish_changes(self.feed, [(NOTES_TABLE, Insert(as_row(note)))])
        return note

    async def update_note(
        self, db: AsyncSession, note_id: str, body: UpdateNoteRequest
    ) -> Note:
        async with unit_of_work(db):
            note = await self._pending(db, note_id)
            if body.category_id is not None:
                note.category_id = body.category_id
            if body.amount is not None:
                note.amount = body.amount
            if body.method is not None:
                note.method = body.method
            if body.target is not None:
                note.target = body.target
            if body.media_url is not None or body.media_path is not None:
                note.media_url = _media_url(body.media_url, body.media_path)
            updated = await self._repo.update_note(db, note)
            if updated is None:
                raise NoteNotFoundError(note_id)
        await publish_changes(self.feed, [(NOTES_TABLE, Update(as_row(updated)))])
        return updated

    async def delete_note(self, db: AsyncSession, note_id: str) -> None:
        """Transactions an approved note already posted stay on the ledger."""
        async with unit_of_work(db):
            if not await self._repo.delete_note(db, note_id):
                raise NoteNotFoundError(note_id)
        await publish_changes(self.feed, [(NOTES_TABLE, Delete(note_id))])

    async def approve_note(self, db: AsyncSession, note_id: str) -> tuple[Note, Transaction]:
        """Credit note.amount to the owner's (category, target) balance.

        The balance row is created at zero if it does not exist yet.
        """
        changes: Changes = []
        async with unit_of_work(db):
            note = await self._pending(db, note_id)
            if not await self._repo.user_exists(db, note.user_id):
                raise UserNotFoundError(note.user_id)

            tx, post_changes = await self._ledger.post(
                db,
                TransactionDraft(
                    user_id=note.user_id,
                    category_id=note.category_id,
                    amount=note.amount,
                    type=TransactionType.CREDIT,
                    target=note.target,
                    source=TransactionSource.NOTE,
                    note_id=note.id,
                ),
            )
            changes.extend(post_changes)
            approved = await self._repo.set_status(db, note.id, NoteStatus.APPROVED)
            if approved is None:
                raise NoteNotFoundError(note_id)
            changes.append((NOTES_TABLE, Update(as_row(approved))))

        logger.info(
            "Note approved: id=%s user=%s amount=%s tx=%s",
            approved.id, approved.user_id, approved.amount, tx.id,
        )
        await publish_changes(self.feed, changes)
        return approved, tx

    async def reject_note(self, db: AsyncSession, note_id: str) -> Note:
        """Terminal, and never touches the ledger."""
        async with unit_of_work(db):
            await self._pending(db, note_id)
            rejected = await self._repo.set_status(db, note_id, NoteStatus.REJECTED)
            if rejected is None:
                raise NoteNotFoundError(note_id)
        logger.info("Note rejected: id=%s", note_id)
        await publish_changes(self.feed, [(NOTES_TABLE, Update(as_row(rejected)))])
        return rejected

    async def _pending(self, db: AsyncSession, note_id: str) -> Note:
        note = await self._repo.get_note(db, note_id, for_update=True)
        if note is None:
            raise NoteNotFoundError(note_id)
        if not note.is_pending:
            raise NoteNotPendingError(note_id, note.status.value)
        return note
