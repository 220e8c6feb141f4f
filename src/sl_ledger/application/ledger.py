"""LedgerService: the balance mutation protocol.

Every operation runs inside the caller's database transaction and returns
the change events to publish once that transaction commits. Nothing here
commits, so a failure anywhere rolls back the balance write and the
transaction-row write together.
"""

import dataclasses
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.change_feed import ChangeEvent, Delete, Insert, Update, as_row
from src.sl_common.errors import BalanceNotFoundError, TransactionNotFoundError
from src.sl_ledger.domain.effects import (
    BalanceDelta,
    plan_post,
    plan_reconciliation,
    plan_reversal,
)
from src.sl_ledger.domain.models import Balance, Transaction, TransactionDraft
from src.sl_ledger.domain.repository import (
    BalanceRepositoryProtocol,
    TransactionRepositoryProtocol,
)
from src.sl_ledger.infrastructure.persistence import BalanceRepository, TransactionRepository

logger = logging.getLogger(__name__)

TRANSACTIONS_TABLE = "transactions"

Changes = list[tuple[str, ChangeEvent]]


class LedgerService:
    def __init__(
        self,
        balances: BalanceRepositoryProtocol | None = None,
        transactions: TransactionRepositoryProtocol | None = None,
    ) -> None:
        self._balances: BalanceRepositoryProtocol = balances or BalanceRepository()
        self._transactions: TransactionRepositoryProtocol = transactions or TransactionRepository()

    async def post(
        self, db: AsyncSession, draft: TransactionDraft
    ) -> tuple[Transaction, Changes]:
        """Insert a transaction and apply its effect to the referenced balance.

        Without an explicit balance_id the (user, category) row of the target
        kind is used, created at zero if absent.
        """
        created = False
        if draft.balance_id is None:
            balance, created = await self._balances.get_or_create_balance(
                db, draft.target, draft.user_id, draft.category_id
            )
        else:
            found = await self._balances.get_balance(db, draft.target, draft.balance_id)
            if found is None:
                raise BalanceNotFoundError(draft.target.value, draft.balance_id)
            balance = found
            draft = dataclasses.replace(
                draft, user_id=balance.user_id, category_id=balance.category_id
            )

        tx = await self._transactions.insert_transaction(db, draft, balance.id)
        touched = await self._apply(db, plan_post(tx))

        changes: Changes = []
        if created:
            final = touched.get(balance.id, balance)
            changes.append((balance.kind.table, Insert(as_row(final))))
            touched.pop(balance.id, None)
        changes.extend(_balance_updates(touched))
        changes.append((TRANSACTIONS_TABLE, Insert(as_row(tx))))

        logger.info(
            "Posted %s %s %s on %s=%s (source=%s)",
            tx.id, tx.type.value, tx.amount, tx.target.value, balance.id, tx.source.value,
        )
        return tx, changes

    async def reverse(self, db: AsyncSession, tx: Transaction) -> Changes:
        """Undo a transaction's effect exactly and delete its row."""
        touched = await self._apply(db, plan_reversal(tx))
        if not await self._transactions.delete_transaction(db, tx.id):
            raise TransactionNotFoundError(tx.id)

        logger.info("Reversed %s %s %s on %s", tx.id, tx.type.value, tx.amount, tx.balance_id)
        return [*_balance_updates(touched), (TRANSACTIONS_TABLE, Delete(tx.id))]

    async def amend(
        self, db: AsyncSession, old: Transaction, new: Transaction
    ) -> tuple[Transaction, Changes]:
        """Rewrite a transaction: full reversal of `old`, full application of `new`.

        `old` must be the row as currently stored (read FOR UPDATE by the caller).
        """
        if new.balance_id is not None and new.balance_id != old.balance_id:
            target = await self._balances.get_balance(db, new.target, new.balance_id)
            if target is None:
                raise BalanceNotFoundError(new.target.value, new.balance_id)
            new = dataclasses.replace(
                new, user_id=target.user_id, category_id=target.category_id
            )

        touched = await self._apply(db, plan_reconciliation(old, new))
        updated = await self._transactions.update_transaction(db, new)
        if updated is None:
            raise TransactionNotFoundError(old.id)

        if touched:
            logger.info("Amended %s: %s balance row(s) adjusted", old.id, len(touched))
        return updated, [*_balance_updates(touched), (TRANSACTIONS_TABLE, Update(as_row(updated)))]

    async def _apply(
        self, db: AsyncSession, deltas: list[BalanceDelta]
    ) -> dict[str, Balance]:
        """Apply deltas in a stable order so concurrent writers lock rows alike."""
        touched: dict[str, Balance] = {}
        for d in sorted(deltas, key=lambda d: (d.kind.value, d.balance_id)):
            balance = await self._balances.apply_delta(db, d.kind, d.balance_id, d.delta)
            if balance is None:
                raise BalanceNotFoundError(d.kind.value, d.balance_id)
            touched[balance.id] = balance
        return touched


def _balance_updates(touched: dict[str, Balance]) -> Changes:
    return [(b.kind.table, Update(as_row(b))) for b in touched.values()]
