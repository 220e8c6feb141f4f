"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class BalanceKind(str, Enum):
    """Which running-balance table a transaction targets."""
    ACCOUNT_BALANCE = "account_balance"
    BAKI = "baki"

    @property
    def table(self) -> str:
        return "account_balances" if self is BalanceKind.ACCOUNT_BALANCE else "bakis"

    @property
    def id_column(self) -> str:
        """Column on `transactions` that references this kind of balance."""
        return "account_balance_id" if self is BalanceKind.ACCOUNT_BALANCE else "baki_id"


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionSource(str, Enum):
    NOTE = "NOTE"
    RESULT = "RESULT"
    MANUAL = "MANUAL"


class NoteStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class NoteMethod(str, Enum):
    CASH = "CA"
    BANK_TRANSFER = "BT"
    CHEQUE = "CH"


class ResultStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class ScheduleState(str, Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"
