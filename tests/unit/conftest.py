"""In-memory ledger repositories shared by the ledger, note and result tests.

They honour the same contracts as the SQL repositories: apply_delta returns
None for a missing row, insert_balance returns None on a (user, category)
conflict, and every read hands back a copy.
"""

import itertools
from dataclasses import replace
from decimal import Decimal

import pytest

from src.sl_common.change_feed import LocalChangeFeed
from src.sl_common.enums import BalanceKind
from src.sl_ledger.application.ledger import LedgerService
from src.sl_ledger.domain.effects import signed_total
from src.sl_ledger.domain.models import Balance, Transaction, TransactionDraft


class FakeBalances:
    def __init__(self) -> None:
        self.rows: dict[str, Balance] = {}
        self._ids = itertools.count(1)

    def seed(
        self,
        kind: BalanceKind,
        user_id: str,
        category_id: str,
        balance: Decimal = Decimal("0"),
    ) -> Balance:
        row = Balance(f"{kind.value}-{next(self._ids)}", user_id, category_id, balance, kind)
        self.rows[row.id] = row
        return replace(row)

    async def list_balances(self, db, kind, user_id=None, category_id=None):
        return [
            replace(b) for b in self.rows.values()
            if b.kind is kind
            and (user_id is None or b.user_id == user_id)
            and (category_id is None or b.category_id == category_id)
        ]

    async def get_balance(self, db, kind, balance_id, for_update=False):
        row = self.rows.get(balance_id)
        return replace(row) if row is not None and row.kind is kind else None

    async def find_balance(self, db, kind, user_id, category_id):
        for row in self.rows.values():
            if row.kind is kind and row.user_id == user_id and row.category_id == category_id:
                return replace(row)
        return None

    async def insert_balance(self, db, kind, user_id, category_id):
        if await self.find_balance(db, kind, user_id, category_id) is not None:
            return None
        return self.seed(kind, user_id, category_id)

    async def get_or_create_balance(self, db, kind, user_id, category_id):
        created = await self.insert_balance(db, kind, user_id, category_id)
        if created is not None:
            return created, True
        return await self.find_balance(db, kind, user_id, category_id), False

    async def apply_delta(self, db, kind, balance_id, delta):
        row = self.rows.get(balance_id)
        if row is None or row.kind is not kind:
            return None
        row.balance += delta
        return replace(row)

    async def set_balance(self, db, kind, balance_id, balance):
        row = self.rows.get(balance_id)
        if row is None or row.kind is not kind:
            return None
        row.balance = balance
        return replace(row)

    async def delete_balance(self, db, kind, balance_id):
        row = self.rows.get(balance_id)
        if row is None or row.kind is not kind:
            return False
        del self.rows[balance_id]
        return True


class FakeTransactions:
    def __init__(self) -> None:
        self.rows: dict[str, Transaction] = {}
        self._ids = itertools.count(1)

    async def list_transactions(
        self, db, user_id=None, category_id=None, target=None, source=None,
        result_id=None, limit=200,
    ):
        return [
            replace(t) for t in self.rows.values()
            if (user_id is None or t.user_id == user_id)
            and (result_id is None or t.result_id == result_id)
        ][:limit]

    async def get_transaction(self, db, transaction_id, for_update=False):
        row = self.rows.get(transaction_id)
        return replace(row) if row is not None else None

    async def list_by_result(self, db, result_id):
        return [replace(t) for t in self.rows.values() if t.result_id == result_id]

    async def list_by_balance(self, db, kind, balance_id):
        return [
            replace(t) for t in self.rows.values()
            if t.target is kind and t.balance_id == balance_id
        ]

    async def insert_transaction(self, db, draft: TransactionDraft, balance_id):
        tx = Transaction(
            id=f"tx-{next(self._ids)}",
            user_id=draft.user_id,
            category_id=draft.category_id,
            amount=draft.amount,
            type=draft.type,
            target=draft.target,
            source=draft.source,
            result_id=draft.result_id,
            note_id=draft.note_id,
        ).with_balance(draft.target, balance_id)
        self.rows[tx.id] = tx
        return replace(tx)

    async def update_transaction(self, db, tx):
        if tx.id not in self.rows:
            return None
        self.rows[tx.id] = replace(tx)
        return replace(tx)

    async def delete_transaction(self, db, transaction_id):
        return self.rows.pop(transaction_id, None) is not None


def ledger_is_consistent(balances: FakeBalances, transactions: FakeTransactions) -> bool:
    """Every balance equals the signed sum of the transactions referencing it."""
    for row in balances.rows.values():
        referencing = [
            t for t in transactions.rows.values()
            if t.target is row.kind and t.balance_id == row.id
        ]
        if row.balance != signed_total(referencing):
            return False
    return True


@pytest.fixture
def balances() -> FakeBalances:
    return FakeBalances()


@pytest.fixture
def transactions() -> FakeTransactions:
    return FakeTransactions()


@pytest.fixture
def ledger(balances: FakeBalances, transactions: FakeTransactions) -> LedgerService:
    return LedgerService(balances, transactions)


@pytest.fixture
def feed() -> LocalChangeFeed:
    return LocalChangeFeed()


@pytest.fixture
def consistent(balances: FakeBalances, transactions: FakeTransactions):
    return lambda: ledger_is_consistent(balances, transactions)
