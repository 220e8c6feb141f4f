"""WebSocket relay: one connection watches one table.

On connect the client gets a snapshot of the rows it may see, then every
change to them in wire form:

    {"kind": "SNAPSHOT", "rows": [...]}
    {"kind": "INSERT", "row": {...}} / {"kind": "UPDATE", "row": {...}} / {"kind": "DELETE", "key": "..."}

The connection's SubscriptionScope is closed when the socket goes away.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.sl_common.change_feed import (
    ChangeEvent,
    ChangeFeedProtocol,
    Delete,
    SubscriptionScope,
    encode_event,
    get_change_feed,
)
from src.sl_common.database import async_session_factory
from src.sl_common.errors import AppError
from src.sl_common.store import ReplicatedStore, Row
from src.sl_gateway.auth.dependencies import is_admin, resolve_token_user
from src.sl_gateway.user.db_models import UserModel
from src.sl_realtime.registry import TABLES, WatchedTable

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/realtime", tags=["realtime"])


class TableRelay:
    """Keeps a per-connection replica so only visible rows are forwarded."""

    def __init__(
        self,
        table: str,
        watched: WatchedTable,
        owner_id: str | None,
        session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
    ) -> None:
        self.table = table
        self._watched = watched
        self._owner_id = owner_id
        self._session_factory = session_factory
        self.queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self.store = ReplicatedStore(
            table,
            self._load,
            key=lambda row: row[watched.key_field],
            keep=self._visible if owner_id is not None else None,
        )

    async def _load(self) -> list[Row]:
        async with self._session_factory() as db:
            return await self._watched.loader(db, self._owner_id)

    def _visible(self, row: Row) -> bool:
        return str(row.get("user_id")) == self._owner_id

    def on_change(self, event: ChangeEvent) -> None:
        if not self.store.loaded:
            # Folded into the snapshot once the load finishes
            self.store.apply(event)
            return

        if isinstance(event, Delete):
            known = self.store.get(event.key) is not None
            self.store.apply(event)
            if known or self._owner_id is None:
                self.queue.put_nowait(event)
            return

        key = event.row.get(self._watched.key_field)
        known = self.store.get(key) is not None
        self.store.apply(event)
        if self.store.get(key) is not None:
            self.queue.put_nowait(event)
        elif known:
            # Row moved out of view: the client sees it go away
            self.queue.put_nowait(Delete(key))

    async def start(self, scope: SubscriptionScope) -> list[Row]:
        """Subscribe before loading so nothing between the two is missed."""
        await scope.subscribe(self.table, self.on_change)
        await self.store.load()
        return self.store.rows


async def _authenticate(
    token: str, session_factory: Callable[[], Any] = async_session_factory
) -> UserModel:
    async with session_factory() as db:
        return await resolve_token_user(token, db)


async def _pump(websocket: WebSocket, relay: TableRelay) -> None:
    while True:
        event = await relay.queue.get()
        await websocket.send_text(encode_event(event))


async def _drain(websocket: WebSocket) -> None:
    """Clients do not send anything meaningful; this just notices the close."""
    while True:
        await websocket.receive_text()


async def serve_table(
    websocket: WebSocket,
    table: str,
    user: UserModel,
    feed: ChangeFeedProtocol | None = None,
) -> None:
    watched = TABLES[table]
    owner_id = None if is_admin(user) or not watched.owner_scoped else str(user.id)
    relay = TableRelay(table, watched, owner_id)

    async with SubscriptionScope(feed or get_change_feed()) as scope:
        rows = await relay.start(scope)
        await websocket.send_text(json.dumps({"kind": "SNAPSHOT", "rows": rows}))
        tasks = [
            asyncio.create_task(_pump(websocket, relay)),
            asyncio.create_task(_drain(websocket)),
        ]
        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                raise exc


@router.websocket("/{table}")
async def realtime(
    websocket: WebSocket,
    table: str,
    token: str = Query(..., description="Access token; browsers cannot set headers on a socket"),
) -> None:
    watched = TABLES.get(table)
    if watched is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown table")
        return

    try:
        user = await _authenticate(token)
    except (HTTPException, AppError):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unauthorized")
        return

    if watched.admin_only and not is_admin(user):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Admin role required")
        return

    await websocket.accept()
    logger.info("Realtime subscribe: table=%s user=%s", table, user.id)
    try:
        await serve_table(websocket, table, user)
    except WebSocketDisconnect:
        pass
    finally:
        logger.info("Realtime unsubscribe: table=%s user=%s", table, user.id)
