"""Tests for sl_common.store.ReplicatedStore."""

import asyncio
from unittest.mock import AsyncMock

from src.sl_common.change_feed import Delete, Insert, LocalChangeFeed, SubscriptionScope, Update
from src.sl_common.store import ReplicatedStore


def _store(rows: list[dict] | None = None, **kwargs) -> ReplicatedStore:
    return ReplicatedStore("notes", AsyncMock(return_value=rows or []), **kwargs)


class TestApply:
    async def test_insert_prepends(self) -> None:
        store = _store([{"id": "a"}])
        await store.load()
        store.apply(Insert({"id": "b"}))
        assert [r["id"] for r in store.rows] == ["b", "a"]

    async def test_update_replaces_in_place(self) -> None:
        store = _store([{"id": "a", "v": 1}, {"id": "b", "v": 1}])
        await store.load()
        store.apply(Update({"id": "b", "v": 2}))
        assert store.rows == [{"id": "a", "v": 1}, {"id": "b", "v": 2}]

    async def test_update_of_unknown_row_inserts(self) -> None:
        store = _store()
        await store.load()
        store.apply(Update({"id": "z"}))
        assert store.get("z") == {"id": "z"}

    async def test_delete_removes_by_key(self) -> None:
        store = _store([{"id": 1}, {"id": 2}])
        await store.load()
        store.apply(Delete("1"))
        assert [r["id"] for r in store.rows] == [2]

    async def test_keep_filter_drops_rows_that_leave_view(self) -> None:
        store = _store([{"id": "a", "user_id": "u1"}], keep=lambda r: r["user_id"] == "u1")
        await store.load()
        store.apply(Update({"id": "a", "user_id": "u2"}))
        assert store.rows == []

    async def test_custom_key(self) -> None:
        store = _store([{"user_id": "u1"}], key=lambda r: r["user_id"])
        await store.load()
        assert store.get("u1") == {"user_id": "u1"}


class TestAttach:
    async def test_attach_loads_and_follows_feed(self) -> None:
        feed = LocalChangeFeed()
        store = _store([{"id": "a"}])
        async with SubscriptionScope(feed) as scope:
            await store.attach(scope)
            assert store.loaded
            await feed.publish("notes", Insert({"id": "b"}))
        await feed.publish("notes", Insert({"id": "c"}))
        assert [r["id"] for r in store.rows] == ["b", "a"]


class TestEventsDuringLoad:
    async def _attach_with_gate(self, feed: LocalChangeFeed, scope: SubscriptionScope):
        gate = asyncio.Event()

        async def loader() -> list[dict]:
            await gate.wait()
            return [{"id": "a"}, {"id": "c"}]

        store = ReplicatedStore("notes", loader)
        task = asyncio.create_task(store.attach(scope))
        while feed.subscriber_count("notes") == 0:
            await asyncio.sleep(0)
        return store, gate, task

    async def test_insert_during_load_survives_snapshot(self) -> None:
        feed = LocalChangeFeed()
        async with SubscriptionScope(feed) as scope:
            store, gate, task = await self._attach_with_gate(feed, scope)
            await feed.publish("notes", Insert({"id": "b"}))
            assert not store.loaded
            gate.set()
            await task
        assert store.get("b") == {"id": "b"}
        assert [r["id"] for r in store.rows] == ["b", "a", "c"]

    async def test_delete_during_load_is_replayed(self) -> None:
        feed = LocalChangeFeed()
        async with SubscriptionScope(feed) as scope:
            store, gate, task = await self._attach_with_gate(feed, scope)
            await feed.publish("notes", Delete("c"))
            gate.set()
            await task
        assert [r["id"] for r in store.rows] == ["a"]

    async def test_events_before_first_load_are_kept(self) -> None:
        store = _store([{"id": "a"}])
        store.apply(Update({"id": "a", "v": 2}))
        assert store.rows == []
        await store.load()
        assert store.rows == [{"id": "a", "v": 2}]
