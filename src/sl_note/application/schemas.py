"""Pydantic schemas for sl_note API."""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from src.sl_common.amount import amount_to_display, quantize
from src.sl_common.enums import BalanceKind, NoteMethod
from src.sl_note.domain.models import Note


class _MediaFields(BaseModel):
    """A note carries either a full media_url or a storage media_path."""

    media_url: str | None = Field(None, max_length=2048)
    media_path: str | None = Field(None, max_length=1024)

    @model_validator(mode="after")
    def one_media_source(self) -> "_MediaFields":
        if self.media_url and self.media_path:
            raise ValueError("Give media_url or media_path, not both")
        return self


class CreateNoteRequest(_MediaFields):
    category_id: str
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    method: NoteMethod
    target: BalanceKind = BalanceKind.ACCOUNT_BALANCE
    user_id: str | None = Field(None, description="Admins only; defaults to the caller")


class UpdateNoteRequest(_MediaFields):
    category_id: str | None = None
    amount: Decimal | None = Field(None, gt=0, max_digits=14, decimal_places=2)
    method: NoteMethod | None = None
    target: BalanceKind | None = None


class NoteResponse(BaseModel):
    id: str
    user_id: str
    category_id: str
    amount: str
    amount_display: str
    method: str
    status: str
    target: str
    media_url: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, note: Note) -> "NoteResponse":
        return cls(
            id=note.id,
            user_id=note.user_id,
            category_id=note.category_id,
            amount=str(quantize(note.amount)),
            amount_display=amount_to_display(note.amount),
            method=note.method.value,
            status=note.status.value,
            target=note.target.value,
            media_url=note.media_url,
            created_at=note.created_at.isoformat() if note.created_at else None,
        )


class UploadTarget(BaseModel):
    path: str
    media_url: str
