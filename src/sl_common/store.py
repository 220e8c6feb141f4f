"""ReplicatedStore: a local mirror of one table kept fresh by its change feed.

Seeded by a full list(), then every Insert/Update/Delete event is applied in
order: insert prepends, update replaces by key, delete removes by key.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from src.sl_common.change_feed import (
    ChangeEvent,
    Delete,
    Insert,
    SubscriptionScope,
    Update,
)

logger = logging.getLogger(__name__)

Row = dict[str, Any]


def _default_key(row: Row) -> Any:
    return row["id"]


class ReplicatedStore:
    def __init__(
        self,
        table: str,
        loader: Callable[[], Awaitable[list[Row]]],
        key: Callable[[Row], Any] = _default_key,
        keep: Callable[[Row], bool] | None = None,
    ) -> None:
        self.table = table
        self._loader = loader
        self._key = key
        self._keep = keep
        self._rows: list[Row] = []
        # Events seen while not loaded; replayed over the snapshot
        self._pending: list[ChangeEvent] = []
        self.loaded = False

    @property
    def rows(self) -> list[Row]:
        return list(self._rows)

    def get(self, key: Any) -> Row | None:
        for row in self._rows:
            if self._matches(row, key):
                return row
        return None

    async def load(self) -> None:
        """Replace the rows with a fresh list(), then replay buffered events.

        Events applied while the loader runs may or may not be in its result;
        replaying them is safe because every event is idempotent by key.
        """
        self.loaded = False
        rows = await self._loader()
        self._rows = [row for row in rows if self._keep is None or self._keep(row)]
        pending, self._pending = self._pending, []
        self.loaded = True
        for event in pending:
            self._apply(event)

    async def attach(self, scope: SubscriptionScope) -> None:
        """Subscribe first, then load, so no event between the two is lost."""
        await scope.subscribe(self.table, self.apply)
        await self.load()

    def apply(self, event: ChangeEvent) -> None:
        if not self.loaded:
            self._pending.append(event)
            return
        self._apply(event)

    def _apply(self, event: ChangeEvent) -> None:
        if isinstance(event, Delete):
            self._rows = [r for r in self._rows if not self._matches(r, event.key)]
            return

        row = event.row
        if self._keep is not None and not self._keep(row):
            self._rows = [r for r in self._rows if not self._matches(r, self._key(row))]
            return

        if isinstance(event, Insert):
            key = self._key(row)
            self._rows = [row] + [r for r in self._rows if not self._matches(r, key)]
        elif isinstance(event, Update):
            key = self._key(row)
            replaced = False
            updated: list[Row] = []
            for existing in self._rows:
                if self._matches(existing, key):
                    updated.append(row)
                    replaced = True
                else:
                    updated.append(existing)
            if not replaced:
                logger.debug("Update for unknown row, inserting: table=%s key=%s", self.table, key)
                updated.insert(0, row)
            self._rows = updated

    def _matches(self, row: Row, key: Any) -> bool:
        return str(self._key(row)) == str(key)
