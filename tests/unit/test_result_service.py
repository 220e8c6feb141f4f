"""Unit tests for ResultApplicationService: bulk ingestion over the fake ledger."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.sl_common.change_feed import Delete
from src.sl_common.enums import BalanceKind, ResultStatus, TransactionSource, TransactionType
from src.sl_common.errors import ResultNotFoundError
from src.sl_result.application.schemas import CreateResultRequest, UpdateResultRequest
from src.sl_result.application.service import ResultApplicationService
from src.sl_result.domain.models import SKIP_UNKNOWN_USER, Result, UserRef

USERS = [UserRef("u-alice", "alice@shop.test"), UserRef("u-bob", "bob@shop.test")]


def _make_repo() -> AsyncMock:
    """Result rows live in a dict so update/delete see what insert wrote."""
    rows: dict[str, Result] = {}
    repo = AsyncMock()

    async def insert(db, result):
        result.id = f"r-{len(rows) + 1}"
        rows[result.id] = result
        return result

    async def get(db, result_id, for_update=False):
        return rows.get(result_id)

    async def update(db, result):
        rows[result.id] = result
        return result

    async def delete(db, result_id):
        return rows.pop(result_id, None) is not None

    repo.insert_result.side_effect = insert
    repo.get_result.side_effect = get
    repo.update_result.side_effect = update
    repo.delete_result.side_effect = delete
    repo.find_users.return_value = USERS
    return repo


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def svc(transactions, ledger, feed) -> ResultApplicationService:
    return ResultApplicationService(_make_repo(), transactions, ledger, feed)


def _body(text: str, **kwargs) -> CreateResultRequest:
    return CreateResultRequest(category_id="c-1", result=text, **kwargs)


class TestAddResult:
    async def test_ingests_resolved_lines(
        self, db, svc, transactions, balances, consistent
    ) -> None:
        result, report = await svc.add_result(db, _body("10 alice\n-5 bob\ngarbage"))

        assert len(report.ingested) == 2
        assert len(report.skipped) == 1
        txs = list(transactions.rows.values())
        assert {(t.user_id, t.amount, t.type) for t in txs} == {
            ("u-alice", Decimal("-10.00"), TransactionType.DEBIT),
            ("u-bob", Decimal("5.00"), TransactionType.CREDIT),
        }
        assert all(t.result_id == result.id and t.source is TransactionSource.RESULT for t in txs)
        assert consistent()

    async def test_unknown_user_is_reported(self, db, svc, transactions) -> None:
        _, report = await svc.add_result(db, _body("3 zoe\n4 alice"))
        assert [s.reason for s in report.unresolved] == [SKIP_UNKNOWN_USER]
        assert len(transactions.rows) == 1

    async def test_targets_bakis(self, db, svc, balances) -> None:
        await svc.add_result(db, _body("1 alice", target=BalanceKind.BAKI))
        [row] = balances.rows.values()
        assert row.kind is BalanceKind.BAKI


class TestUpdateResult:
    async def test_full_replace(self, db, svc, transactions, balances, consistent) -> None:
        result, _ = await svc.add_result(db, _body("10 alice\n-5 bob"))

        _, report = await svc.update_result(
            db, result.id, UpdateResultRequest(result="2 bob", status=ResultStatus.PROCESSED)
        )

        assert report.reversed_count == 2
        [tx] = transactions.rows.values()
        assert (tx.user_id, tx.amount) == ("u-bob", Decimal("-2.00"))
        by_user = {b.user_id: b.balance for b in balances.rows.values()}
        assert by_user == {"u-alice": Decimal("0.00"), "u-bob": Decimal("2.00")}
        assert consistent()

    async def test_unknown_result_raises(self, db, svc) -> None:
        with pytest.raises(ResultNotFoundError):
            await svc.update_result(db, "missing", UpdateResultRequest(result="1 alice"))


class TestDeleteResult:
    async def test_reverses_every_transaction(
        self, db, svc, transactions, balances, feed
    ) -> None:
        result, _ = await svc.add_result(db, _body("10 alice\n-5 bob"))
        seen: list = []
        await feed.subscribe("results", seen.append)

        count = await svc.delete_result(db, result.id)

        assert count == 2
        assert transactions.rows == {}
        assert all(b.balance == 0 for b in balances.rows.values())
        assert seen == [Delete(result.id)]


class TestPreview:
    async def test_writes_nothing(self, db, svc, transactions) -> None:
        report = await svc.preview_result(db, "10 alice\n1 nobody")
        assert [line.transaction_id for line in report.ingested] == [None]
        assert len(report.skipped) == 1
        assert transactions.rows == {}
        db.commit.assert_not_awaited()
