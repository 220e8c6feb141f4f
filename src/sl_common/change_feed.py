"""Per-table change feed.

Every committed mutation publishes one ChangeEvent on `changes:<table>`.
Consumers (ReplicatedStore caches, the WebSocket relay) subscribe through a
SubscriptionScope and are torn down when the scope closes.

Wire form (JSON):
    {"kind": "INSERT", "row": {...}}
    {"kind": "UPDATE", "row": {...}}
    {"kind": "DELETE", "key": "<id>"}
"""

import asyncio
import inspect
import json
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

import redis.asyncio as aioredis
from pydantic_core import to_jsonable_python

from src.sl_common.redis_client import get_redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHANNEL_PREFIX = "changes:"


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Insert(Generic[T]):
    row: T
    kind = ChangeKind.INSERT


@dataclass(frozen=True)
class Update(Generic[T]):
    row: T
    kind = ChangeKind.UPDATE


@dataclass(frozen=True)
class Delete:
    key: str | int
    kind = ChangeKind.DELETE


ChangeEvent = Insert[Any] | Update[Any] | Delete
ChangeHandler = Callable[[ChangeEvent], Awaitable[None] | None]


def channel_for(table: str) -> str:
    return f"{CHANNEL_PREFIX}{table}"


def as_row(entity: Any) -> dict[str, Any]:
    """Dataclass or model -> the JSON-ready dict subscribers receive."""
    row = to_jsonable_python(entity)
    if not isinstance(row, dict):
        raise TypeError(f"Cannot publish {type(entity).__name__} as a row")
    return row


def encode_event(event: ChangeEvent) -> str:
    if isinstance(event, Delete):
        return json.dumps({"kind": ChangeKind.DELETE.value, "key": event.key})
    return json.dumps({"kind": event.kind.value, "row": to_jsonable_python(event.row)})


def decode_event(raw: str | bytes) -> ChangeEvent:
    """Parse the wire form back into a tagged event. Rows come back as dicts."""
    try:
        payload = json.loads(raw)
        kind = ChangeKind(payload["kind"])
    except (ValueError, KeyError, TypeError) as exc:
        raise ValueError(f"Malformed change event: {raw!r}") from exc
    if kind is ChangeKind.DELETE:
        if "key" not in payload:
            raise ValueError(f"DELETE event without key: {raw!r}")
        return Delete(payload["key"])
    if not isinstance(payload.get("row"), dict):
        raise ValueError(f"{kind.value} event without row: {raw!r}")
    if kind is ChangeKind.INSERT:
        return Insert(payload["row"])
    return Update(payload["row"])


async def _dispatch(handler: ChangeHandler, event: ChangeEvent) -> None:
    outcome = handler(event)
    if inspect.isawaitable(outcome):
        await outcome


class Subscription(Protocol):
    table: str

    async def close(self) -> None: ...


class ChangeFeedProtocol(Protocol):
    async def publish(self, table: str, event: ChangeEvent) -> None: ...

    async def subscribe(self, table: str, handler: ChangeHandler) -> Subscription: ...


# ---------------------------------------------------------------------------
# Redis implementation
# ---------------------------------------------------------------------------

class RedisSubscription:
    def __init__(self, table: str, pubsub: Any, task: asyncio.Task[None]) -> None:
        self.table = table
        self._pubsub = pubsub
        self._task = task

    async def close(self) -> None:
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        await self._pubsub.unsubscribe(channel_for(self.table))
        await self._pubsub.aclose()


class RedisChangeFeed:
    """Change feed over Redis pub/sub, one channel per table."""

    def __init__(
        self, redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis
    ) -> None:
        self._redis_factory = redis_factory

    async def publish(self, table: str, event: ChangeEvent) -> None:
        redis = await self._redis_factory()
        await redis.publish(channel_for(table), encode_event(event))

    async def subscribe(self, table: str, handler: ChangeHandler) -> RedisSubscription:
        redis = await self._redis_factory()
        pubsub = redis.pubsub()
        await pubsub.subscribe(channel_for(table))
        task = asyncio.create_task(self._pump(table, pubsub, handler))
        return RedisSubscription(table, pubsub, task)

    async def _pump(self, table: str, pubsub: Any, handler: ChangeHandler) -> None:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                event = decode_event(message["data"])
            except ValueError:
                logger.warning("Dropping malformed event on %s", table)
                continue
            try:
                await _dispatch(handler, event)
            except Exception:
                logger.exception("Change handler failed: table=%s", table)


# ---------------------------------------------------------------------------
# In-process implementation (single worker, tests)
# ---------------------------------------------------------------------------

class LocalSubscription:
    def __init__(self, feed: "LocalChangeFeed", table: str, handler: ChangeHandler) -> None:
        self.table = table
        self._feed = feed
        self._handler = handler

    async def close(self) -> None:
        self._feed._remove(self.table, self._handler)


class LocalChangeFeed:
    """Delivers events synchronously to handlers in this process."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[ChangeHandler]] = defaultdict(list)

    async def publish(self, table: str, event: ChangeEvent) -> None:
        for handler in list(self._handlers[table]):
            await _dispatch(handler, event)

    async def subscribe(self, table: str, handler: ChangeHandler) -> LocalSubscription:
        self._handlers[table].append(handler)
        return LocalSubscription(self, table, handler)

    def subscriber_count(self, table: str) -> int:
        return len(self._handlers[table])

    def _remove(self, table: str, handler: ChangeHandler) -> None:
        if handler in self._handlers[table]:
            self._handlers[table].remove(handler)


# ---------------------------------------------------------------------------
# Scope + publishing helper
# ---------------------------------------------------------------------------

class SubscriptionScope:
    """Owns subscriptions; closing the scope tears all of them down.

    Usage:
        async with SubscriptionScope(feed) as scope:
            await scope.subscribe("notes", on_change)
    """

    def __init__(self, feed: ChangeFeedProtocol) -> None:
        self._feed = feed
        self._subscriptions: list[Subscription] = []
        self._closed = False

    async def subscribe(self, table: str, handler: ChangeHandler) -> Subscription:
        if self._closed:
            raise RuntimeError("SubscriptionScope is closed")
        subscription = await self._feed.subscribe(table, handler)
        self._subscriptions.append(subscription)
        return subscription

    async def close(self) -> None:
        self._closed = True
        while self._subscriptions:
            await self._subscriptions.pop().close()

    async def __aenter__(self) -> "SubscriptionScope":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


async def publish_changes(
    feed: ChangeFeedProtocol, changes: list[tuple[str, ChangeEvent]]
) -> None:
    """Publish after commit. The rows are already durable, so a feed outage is
    logged and caches catch up on their next list()."""
    for table, event in changes:
        try:
            await feed.publish(table, event)
        except Exception:
            logger.exception("Change feed publish failed: table=%s kind=%s", table, event.kind)


_default_feed: ChangeFeedProtocol = RedisChangeFeed()


def get_change_feed() -> ChangeFeedProtocol:
    return _default_feed
