"""Domain models for sl_note: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.sl_common.enums import BalanceKind, NoteMethod, NoteStatus


@dataclass
class Note:
    """A user's claim of a payment, credited to their balance once approved.

    PENDING -> APPROVED | REJECTED; both outcomes are terminal.
    """

    id: str
    user_id: str
    category_id: str
    amount: Decimal
    method: NoteMethod
    status: NoteStatus
    target: BalanceKind
    media_url: str | None = None
    created_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is NoteStatus.PENDING
