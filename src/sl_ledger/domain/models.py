"""Domain models for sl_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from src.sl_common.enums import BalanceKind, TransactionSource, TransactionType


@dataclass
class Balance:
    """One running balance per (user, category) and kind."""

    id: str
    user_id: str
    category_id: str
    balance: Decimal
    kind: BalanceKind
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Transaction:
    id: str
    user_id: str
    category_id: str
    amount: Decimal
    type: TransactionType
    target: BalanceKind
    source: TransactionSource
    account_balance_id: str | None = None
    baki_id: str | None = None
    result_id: str | None = None
    note_id: str | None = None
    created_at: datetime | None = None

    @property
    def balance_id(self) -> str | None:
        """The balance row this transaction moves, per its target."""
        if self.target is BalanceKind.ACCOUNT_BALANCE:
            return self.account_balance_id
        return self.baki_id

    def with_balance(self, target: BalanceKind, balance_id: str | None) -> "Transaction":
        """Copy pointing at `balance_id` of kind `target`; the other reference is cleared."""
        return replace(
            self,
            target=target,
            account_balance_id=balance_id if target is BalanceKind.ACCOUNT_BALANCE else None,
            baki_id=balance_id if target is BalanceKind.BAKI else None,
        )


@dataclass
class TransactionDraft:
    """A transaction not yet posted.

    balance_id None means "the (user_id, category_id) row of `target`,
    created on first use".
    """

    user_id: str
    category_id: str
    amount: Decimal
    type: TransactionType
    target: BalanceKind
    source: TransactionSource
    balance_id: str | None = None
    result_id: str | None = None
    note_id: str | None = None


@dataclass
class BalanceCheck:
    """Stored balance against the signed sum of its transactions."""

    kind: BalanceKind
    balance_id: str
    stored: Decimal
    computed: Decimal
    transaction_count: int

    @property
    def drift(self) -> Decimal:
        return self.stored - self.computed

    @property
    def consistent(self) -> bool:
        return self.drift == 0
