"""Ledger application services: transactions and the two balance kinds.

Writes run in unit_of_work(): the LedgerService mutations and the rows they
touch commit together or not at all. Change events go out after commit.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.change_feed import (
    ChangeFeedProtocol,
    Delete,
    Insert,
    Update,
    as_row,
    get_change_feed,
    publish_changes,
)
from src.sl_common.database import unit_of_work
from src.sl_common.enums import BalanceKind, TransactionSource, TransactionType
from src.sl_common.errors import (
    BalanceExistsError,
    BalanceNotFoundError,
    TransactionNotFoundError,
)
from src.sl_ledger.application.ledger import TRANSACTIONS_TABLE, Changes, LedgerService
from src.sl_ledger.application.schemas import (
    CreateBalanceRequest,
    CreateTransactionRequest,
    UpdateBalanceRequest,
    UpdateTransactionRequest,
)
from src.sl_ledger.domain.effects import signed_total
from src.sl_ledger.domain.models import Balance, BalanceCheck, Transaction, TransactionDraft
from src.sl_ledger.domain.repository import (
    BalanceRepositoryProtocol,
    TransactionRepositoryProtocol,
)
from src.sl_ledger.infrastructure.persistence import BalanceRepository, TransactionRepository

logger = logging.getLogger(__name__)


class TransactionApplicationService:
    def __init__(
        self,
        transactions: TransactionRepositoryProtocol | None = None,
        balances: BalanceRepositoryProtocol | None = None,
        ledger: LedgerService | None = None,
        feed: ChangeFeedProtocol | None = None,
    ) -> None:
        self._transactions: TransactionRepositoryProtocol = transactions or TransactionRepository()
        self._balances: BalanceRepositoryProtocol = balances or BalanceRepository()
        self._ledger = ledger or LedgerService(self._balances, self._transactions)
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        category_id: str | None = None,
        target: BalanceKind | None = None,
        source: TransactionSource | None = None,
        result_id: str | None = None,
        limit: int = 200,
    ) -> list[Transaction]:
        return await self._transactions.list_transactions(
            db,
            user_id=user_id,
            category_id=category_id,
            target=target,
            source=source.value if source else None,
            result_id=result_id,
            limit=limit,
        )

    async def get_transaction(self, db: AsyncSession, transaction_id: str) -> Transaction:
        tx = await self._transactions.get_transaction(db, transaction_id)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        return tx

    async def add_transaction(
        self, db: AsyncSession, body: CreateTransactionRequest
    ) -> Transaction:
        draft = TransactionDraft(
            user_id=body.user_id,
            category_id=body.category_id,
            amount=body.amount,
            type=body.type,
            target=body.target,
            source=body.source,
            balance_id=body.balance_id,
        )
        async with unit_of_work(db):
            tx, changes = await self._ledger.post(db, draft)
        await publish_changes(self.feed, changes)
        return tx

    async def update_transaction(
        self, db: AsyncSession, transaction_id: str, body: UpdateTransactionRequest
    ) -> Transaction:
        changes: Changes = []
        async with unit_of_work(db):
            old = await self._transactions.get_transaction(db, transaction_id, for_update=True)
            if old is None:
                raise TransactionNotFoundError(transaction_id)

            target = body.target or old.target
            balance_id = body.balance_id
            if balance_id is None and target is not old.target:
                balance, created = await self._balances.get_or_create_balance(
                    db, target, old.user_id, old.category_id
                )
                balance_id = balance.id
                if created:
                    changes.append((target.table, Insert(as_row(balance))))
            elif balance_id is None:
                balance_id = old.balance_id

            new = old.with_balance(target, balance_id)
            if body.amount is not None:
                new.amount = body.amount
            if body.type is not None:
                new.type = body.type

            tx, amend_changes = await self._ledger.amend(db, old, new)
            changes.extend(amend_changes)

        await publish_changes(self.feed, changes)
        return tx

    async def delete_transaction(self, db: AsyncSession, transaction_id: str) -> None:
        async with unit_of_work(db):
            tx = await self._transactions.get_transaction(db, transaction_id, for_update=True)
            if tx is None:
                raise TransactionNotFoundError(transaction_id)
            changes = await self._ledger.reverse(db, tx)
        await publish_changes(self.feed, changes)


class BalanceApplicationService:
    """Account balances and bakis share everything but the table."""

    def __init__(
        self,
        kind: BalanceKind,
        balances: BalanceRepositoryProtocol | None = None,
        transactions: TransactionRepositoryProtocol | None = None,
        ledger: LedgerService | None = None,
        feed: ChangeFeedProtocol | None = None,
    ) -> None:
        self.kind = kind
        self._balances: BalanceRepositoryProtocol = balances or BalanceRepository()
        self._transactions: TransactionRepositoryProtocol = transactions or TransactionRepository()
        self._ledger = ledger or LedgerService(self._balances, self._transactions)
        self._feed = feed

    @property
    def feed(self) -> ChangeFeedProtocol:
        return self._feed or get_change_feed()

    async def list_balances(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        category_id: str | None = None,
    ) -> list[Balance]:
        return await self._balances.list_balances(db, self.kind, user_id, category_id)

    async def list_mine(self, db: AsyncSession, user_id: str) -> list[Balance]:
        return await self._balances.list_balances(db, self.kind, user_id=user_id)

    async def get_balance(self, db: AsyncSession, balance_id: str) -> Balance:
        balance = await self._balances.get_balance(db, self.kind, balance_id)
        if balance is None:
            raise BalanceNotFoundError(self.kind.value, balance_id)
        return balance

    async def create_balance(self, db: AsyncSession, body: CreateBalanceRequest) -> Balance:
        """Create the (user, category) row. A non-zero opening balance is
        booked as a MANUAL transaction so the row stays explained by its ledger."""
        changes: Changes = []
        async with unit_of_work(db):
            balance = await self._balances.insert_balance(
                db, self.kind, body.user_id, body.category_id
            )
            if balance is None:
                raise BalanceExistsError(self.kind.value, body.user_id, body.category_id)
            changes.append((self.kind.table, Insert(as_row(balance))))
            if body.balance != 0:
                balance, post_changes = await self._adjust(db, balance, body.balance)
                changes.extend(post_changes)

        await publish_changes(self.feed, changes)
        return balance

    async def update_balance(
        self, db: AsyncSession, balance_id: str, body: UpdateBalanceRequest
    ) -> Balance:
        """Admin overwrite: posts the difference as a MANUAL adjustment."""
        async with unit_of_work(db):
            current = await self._balances.get_balance(db, self.kind, balance_id, for_update=True)
            if current is None:
                raise BalanceNotFoundError(self.kind.value, balance_id)
            balance, changes = await self._adjust(db, current, body.balance - current.balance)

        await publish_changes(self.feed, changes)
        return balance

    async def delete_balance(self, db: AsyncSession, balance_id: str) -> None:
        """Deletes the row; its transactions go with it (FK cascade)."""
        async with unit_of_work(db):
            transactions = await self._transactions.list_by_balance(db, self.kind, balance_id)
            if not await self._balances.delete_balance(db, self.kind, balance_id):
                raise BalanceNotFoundError(self.kind.value, balance_id)

        logger.info(
            "Deleted %s %s with %d transaction(s)", self.kind.value, balance_id, len(transactions)
        )
        changes: Changes = [(TRANSACTIONS_TABLE, Delete(tx.id)) for tx in transactions]
        changes.append((self.kind.table, Delete(balance_id)))
        await publish_changes(self.feed, changes)

    async def verify_balance(self, db: AsyncSession, balance_id: str) -> BalanceCheck:
        balance = await self.get_balance(db, balance_id)
        transactions = await self._transactions.list_by_balance(db, self.kind, balance_id)
        return BalanceCheck(
            kind=self.kind,
            balance_id=balance_id,
            stored=balance.balance,
            computed=signed_total(transactions),
            transaction_count=len(transactions),
        )

    async def reconcile_balance(self, db: AsyncSession, balance_id: str) -> BalanceCheck:
        """Rewrite the stored balance to the signed sum of its transactions."""
        async with unit_of_work(db):
            balance = await self._balances.get_balance(db, self.kind, balance_id, for_update=True)
            if balance is None:
                raise BalanceNotFoundError(self.kind.value, balance_id)
            transactions = await self._transactions.list_by_balance(db, self.kind, balance_id)
            check = BalanceCheck(
                kind=self.kind,
                balance_id=balance_id,
                stored=balance.balance,
                computed=signed_total(transactions),
                transaction_count=len(transactions),
            )
            repaired = None
            if not check.consistent:
                repaired = await self._balances.set_balance(
                    db, self.kind, balance_id, check.computed
                )

        if repaired is not None:
            logger.warning(
                "Reconciled %s %s: stored=%s computed=%s drift=%s",
                self.kind.value, balance_id, check.stored, check.computed, check.drift,
            )
            await publish_changes(self.feed, [(self.kind.table, Update(as_row(repaired)))])
        return check

    async def _adjust(
        self, db: AsyncSession, balance: Balance, difference: Decimal
    ) -> tuple[Balance, Changes]:
        if difference == 0:
            return balance, []
        draft = TransactionDraft(
            user_id=balance.user_id,
            category_id=balance.category_id,
            amount=abs(difference),
            type=TransactionType.CREDIT if difference > 0 else TransactionType.DEBIT,
            target=self.kind,
            source=TransactionSource.MANUAL,
            balance_id=balance.id,
        )
        _, changes = await self._ledger.post(db, draft)
        updated = await self._balances.get_balance(db, self.kind, balance.id)
        return updated or balance, changes
