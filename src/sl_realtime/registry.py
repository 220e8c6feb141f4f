"""Which tables can be watched, by whom, and how to snapshot them.

Owner-scoped tables only show a non-admin the rows whose user_id is theirs;
admin-only tables are closed to everyone else.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_catalog.application.service import CATEGORIES_TABLE, CategoryApplicationService
from src.sl_common.change_feed import as_row
from src.sl_common.enums import BalanceKind
from src.sl_gateway.user.schemas import UserInfo
from src.sl_gateway.user.service import USERS_TABLE, UserService
from src.sl_ledger.application.ledger import TRANSACTIONS_TABLE
from src.sl_ledger.application.service import (
    BalanceApplicationService,
    TransactionApplicationService,
)
from src.sl_note.application.service import NOTES_TABLE, NoteApplicationService
from src.sl_post.application.folder_service import (
    POST_FOLDER_MEDIAS_TABLE,
    POST_FOLDERS_TABLE,
    PostFolderApplicationService,
)
from src.sl_post.application.service import (
    POST_MEDIAS_TABLE,
    POSTS_TABLE,
    PostApplicationService,
)
from src.sl_result.application.service import RESULTS_TABLE, ResultApplicationService

Row = dict[str, Any]
Loader = Callable[[AsyncSession, str | None], Awaitable[list[Row]]]


@dataclass(frozen=True)
class WatchedTable:
    loader: Loader               # (db, owner user_id or None for everything)
    owner_scoped: bool = False
    admin_only: bool = False
    key_field: str = "id"


_categories = CategoryApplicationService()
_balances = {kind: BalanceApplicationService(kind) for kind in BalanceKind}
_transactions = TransactionApplicationService()
_notes = NoteApplicationService()
_results = ResultApplicationService()
_users = UserService()
_posts = PostApplicationService()
_folders = PostFolderApplicationService()


async def _load_categories(db: AsyncSession, _owner: str | None) -> list[Row]:
    return [as_row(c) for c in await _categories.list_categories(db)]


def _balance_loader(kind: BalanceKind) -> Loader:
    async def load(db: AsyncSession, owner: str | None) -> list[Row]:
        return [as_row(b) for b in await _balances[kind].list_balances(db, user_id=owner)]

    return load


async def _load_transactions(db: AsyncSession, owner: str | None) -> list[Row]:
    return [as_row(t) for t in await _transactions.list_transactions(db, user_id=owner)]


async def _load_notes(db: AsyncSession, owner: str | None) -> list[Row]:
    return [as_row(n) for n in await _notes.list_notes(db, user_id=owner)]


async def _load_results(db: AsyncSession, _owner: str | None) -> list[Row]:
    return [as_row(r) for r in await _results.list_results(db)]


async def _load_users(db: AsyncSession, _owner: str | None) -> list[Row]:
    return [UserInfo.from_model(u).model_dump(mode="json") for u in await _users.list_users(db)]


async def _load_posts(db: AsyncSession, _owner: str | None) -> list[Row]:
    return [as_row(p) for p in await _posts.list_posts(db)]


async def _load_post_medias(db: AsyncSession, _owner: str | None) -> list[Row]:
    return [as_row(m) for m in await _posts.list_medias(db)]


async def _load_post_folders(db: AsyncSession, _owner: str | None) -> list[Row]:
    return [as_row(f) for f in await _folders.list_folders(db)]


async def _load_post_folder_medias(db: AsyncSession, _owner: str | None) -> list[Row]:
    return [as_row(m) for m in await _folders.list_medias(db)]


TABLES: dict[str, WatchedTable] = {
    CATEGORIES_TABLE: WatchedTable(_load_categories),
    BalanceKind.ACCOUNT_BALANCE.table: WatchedTable(
        _balance_loader(BalanceKind.ACCOUNT_BALANCE), owner_scoped=True
    ),
    BalanceKind.BAKI.table: WatchedTable(_balance_loader(BalanceKind.BAKI), owner_scoped=True),
    TRANSACTIONS_TABLE: WatchedTable(_load_transactions, owner_scoped=True),
    NOTES_TABLE: WatchedTable(_load_notes, owner_scoped=True),
    RESULTS_TABLE: WatchedTable(_load_results, admin_only=True),
    USERS_TABLE: WatchedTable(_load_users, admin_only=True, key_field="user_id"),
    POSTS_TABLE: WatchedTable(_load_posts),
    POST_MEDIAS_TABLE: WatchedTable(_load_post_medias),
    POST_FOLDERS_TABLE: WatchedTable(_load_post_folders),
    POST_FOLDER_MEDIAS_TABLE: WatchedTable(_load_post_folder_medias),
}
