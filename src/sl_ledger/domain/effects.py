"""Balance effects of transactions: pure functions, no I/O.

credit moves a balance by +amount, debit by -amount. Posting applies the
effect, deleting applies its exact inverse, and editing reverses the old
transaction in full before applying the new one.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from src.sl_common.enums import BalanceKind, TransactionType
from src.sl_ledger.domain.models import Transaction


@dataclass(frozen=True)
class BalanceDelta:
    kind: BalanceKind
    balance_id: str
    delta: Decimal


def effect(type_: TransactionType, amount: Decimal) -> Decimal:
    """Signed change a transaction makes to its balance."""
    if type_ is TransactionType.CREDIT:
        return amount
    return -amount


def plan_post(tx: Transaction) -> list[BalanceDelta]:
    return _merge([_delta(tx, effect(tx.type, tx.amount))])


def plan_reversal(tx: Transaction) -> list[BalanceDelta]:
    return _merge([_delta(tx, -effect(tx.type, tx.amount))])


def touches_balance(old: Transaction, new: Transaction) -> bool:
    """True when an edit changes amount, type, target or the referenced row."""
    return (
        old.amount != new.amount
        or old.type is not new.type
        or old.target is not new.target
        or old.balance_id != new.balance_id
    )


def plan_reconciliation(old: Transaction, new: Transaction) -> list[BalanceDelta]:
    """Deltas that turn the effect of `old` into the effect of `new`.

    Reverse-then-apply, merged per balance row. An edit that touches none of
    the balance-relevant fields plans nothing.
    """
    if not touches_balance(old, new):
        return []
    return _merge([
        _delta(old, -effect(old.type, old.amount)),
        _delta(new, effect(new.type, new.amount)),
    ])


def signed_total(transactions: Iterable[Transaction]) -> Decimal:
    """What a balance should hold given every transaction that references it."""
    return sum((effect(tx.type, tx.amount) for tx in transactions), Decimal("0"))


def _delta(tx: Transaction, value: Decimal) -> BalanceDelta:
    if tx.balance_id is None:
        raise ValueError(f"Transaction {tx.id or '<new>'} has no {tx.target.value} reference")
    return BalanceDelta(tx.target, tx.balance_id, value)


def _merge(deltas: list[BalanceDelta]) -> list[BalanceDelta]:
    """Collapse deltas per (kind, balance_id) and drop the ones that cancel out."""
    totals: dict[tuple[BalanceKind, str], Decimal] = {}
    for d in deltas:
        key = (d.kind, d.balance_id)
        totals[key] = totals.get(key, Decimal("0")) + d.delta
    return [
        BalanceDelta(kind, balance_id, total)
        for (kind, balance_id), total in totals.items()
        if total != 0
    ]
