"""Domain models for sl_catalog: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Category:
    id: str
    name: str
    media_url: str
    parent: str | None = None        # parent category id, None for top level
    arrangement: int | None = None   # display order
    active: bool = True
    deleted_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None or not self.active
