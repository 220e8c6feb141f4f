"""sl_note REST API.

Users create, list and edit their own PENDING notes; admins see every note
and drive the approve/reject transitions.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.database import get_db_session
from src.sl_common.enums import NoteStatus
from src.sl_common.errors import ForbiddenError
from src.sl_common.response import ApiResponse, respond
from src.sl_common.storage import build_media_path, public_media_url
from src.sl_gateway.auth.dependencies import get_current_user, is_admin, require_admin
from src.sl_gateway.user.db_models import UserModel
from src.sl_ledger.application.schemas import TransactionResponse
from src.sl_note.application.schemas import (
    CreateNoteRequest,
    NoteResponse,
    UpdateNoteRequest,
    UploadTarget,
)
from src.sl_note.application.service import NoteApplicationService
from src.sl_note.domain.models import Note

router = APIRouter(prefix="/notes", tags=["notes"])

_service = NoteApplicationService()

CurrentUser = Annotated[UserModel, Depends(get_current_user)]
AdminUser = Annotated[UserModel, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

NOTES_MEDIA_FOLDER = "notes"


def _check_owner(note: Note, user: UserModel) -> None:
    if not is_admin(user) and note.user_id != str(user.id):
        raise ForbiddenError("Note belongs to another user")


@router.get("")
async def list_notes(
    current_user: CurrentUser,
    db: DbSession,
    request: Request,
    user_id: str | None = Query(None),
    status_filter: NoteStatus | None = Query(None, alias="status"),
) -> ApiResponse:
    if not is_admin(current_user):
        user_id = str(current_user.id)
    notes = await _service.list_notes(db, user_id, status_filter)
    return respond(request, [NoteResponse.from_domain(n).model_dump() for n in notes])


@router.get("/upload-target")
async def upload_target(
    current_user: CurrentUser,
    request: Request,
    filename: str = Query(..., min_length=1, max_length=255),
) -> ApiResponse:
    """Where the client should put a receipt image, and the URL it will have."""
    path = build_media_path(NOTES_MEDIA_FOLDER, filename)
    return respond(request, UploadTarget(path=path, media_url=public_media_url(path)).model_dump())


@router.get("/{note_id}")
async def get_note(
    note_id: str, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    note = await _service.get_note(db, note_id)
    _check_owner(note, current_user)
    return respond(request, NoteResponse.from_domain(note).model_dump())


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_note(
    body: CreateNoteRequest, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    owner_id = str(current_user.id)
    if body.user_id is not None and body.user_id != owner_id:
        if not is_admin(current_user):
            raise ForbiddenError("Cannot create notes for another user")
        owner_id = body.user_id
    note = await _service.add_note(db, owner_id, body)
    return respond(request, NoteResponse.from_domain(note).model_dump())


@router.patch("/{note_id}")
async def update_note(
    note_id: str,
    body: UpdateNoteRequest,
    current_user: CurrentUser,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    _check_owner(await _service.get_note(db, note_id), current_user)
    note = await _service.update_note(db, note_id, body)
    return respond(request, NoteResponse.from_domain(note).model_dump())


@router.delete("/{note_id}")
async def delete_note(
    note_id: str, current_user: CurrentUser, db: DbSession, request: Request
) -> ApiResponse:
    note = await _service.get_note(db, note_id)
    _check_owner(note, current_user)
    if not is_admin(current_user) and not note.is_pending:
        raise ForbiddenError("Only pending notes can be withdrawn")
    await _service.delete_note(db, note_id)
    return respond(request, {"id": note_id}, message="Note deleted")


@router.post("/{note_id}/approve")
async def approve_note(
    note_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    note, tx = await _service.approve_note(db, note_id)
    return respond(
        request,
        {
            "note": NoteResponse.from_domain(note).model_dump(),
            "transaction": TransactionResponse.from_domain(tx).model_dump(),
        },
        message="Note approved",
    )


@router.post("/{note_id}/reject")
async def reject_note(
    note_id: str, admin: AdminUser, db: DbSession, request: Request
) -> ApiResponse:
    note = await _service.reject_note(db, note_id)
    return respond(request, NoteResponse.from_domain(note).model_dump(), message="Note rejected")
