"""Pydantic schemas for sl_ledger API."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.sl_common.amount import amount_to_display, quantize
from src.sl_common.enums import BalanceKind, TransactionSource, TransactionType
from src.sl_ledger.domain.models import Balance, BalanceCheck, Transaction

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


def _nonzero_amount(v: Decimal) -> Decimal:
    v = quantize(v)
    if v == 0:
        raise ValueError("Amount must be non-zero")
    return v


class CreateTransactionRequest(BaseModel):
    user_id: str
    category_id: str
    amount: Decimal = Field(..., max_digits=14, decimal_places=2)
    type: TransactionType
    target: BalanceKind = BalanceKind.ACCOUNT_BALANCE
    balance_id: str | None = Field(
        None, description="Explicit balance row; defaults to the user's row in the category"
    )
    source: TransactionSource = TransactionSource.MANUAL

    @field_validator("amount")
    @classmethod
    def amount_nonzero(cls, v: Decimal) -> Decimal:
        return _nonzero_amount(v)


class UpdateTransactionRequest(BaseModel):
    """Partial update. Changing target without balance_id moves the
    transaction to the user's row of the new kind."""

    amount: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    type: TransactionType | None = None
    target: BalanceKind | None = None
    balance_id: str | None = None

    @field_validator("amount")
    @classmethod
    def amount_nonzero(cls, v: Decimal | None) -> Decimal | None:
        return _nonzero_amount(v) if v is not None else None


class CreateBalanceRequest(BaseModel):
    user_id: str
    category_id: str
    balance: Decimal = Field(Decimal("0"), max_digits=14, decimal_places=2)


class UpdateBalanceRequest(BaseModel):
    balance: Decimal = Field(..., max_digits=14, decimal_places=2)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    id: str
    kind: str
    user_id: str
    category_id: str
    balance: str
    balance_display: str
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, balance: Balance) -> "BalanceResponse":
        return cls(
            id=balance.id,
            kind=balance.kind.value,
            user_id=balance.user_id,
            category_id=balance.category_id,
            balance=str(quantize(balance.balance)),
            balance_display=amount_to_display(balance.balance),
            created_at=balance.created_at.isoformat() if balance.created_at else None,
            updated_at=balance.updated_at.isoformat() if balance.updated_at else None,
        )


class TransactionResponse(BaseModel):
    id: str
    user_id: str
    category_id: str
    amount: str
    amount_display: str
    type: str
    target: str
    source: str
    account_balance_id: str | None
    baki_id: str | None
    result_id: str | None
    note_id: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionResponse":
        return cls(
            id=tx.id,
            user_id=tx.user_id,
            category_id=tx.category_id,
            amount=str(quantize(tx.amount)),
            amount_display=amount_to_display(tx.amount),
            type=tx.type.value,
            target=tx.target.value,
            source=tx.source.value,
            account_balance_id=tx.account_balance_id,
            baki_id=tx.baki_id,
            result_id=tx.result_id,
            note_id=tx.note_id,
            created_at=tx.created_at.isoformat() if tx.created_at else None,
        )


class BalanceCheckResponse(BaseModel):
    kind: str
    balance_id: str
    stored: str
    computed: str
    drift: str
    transaction_count: int
    consistent: bool

    @classmethod
    def from_domain(cls, check: BalanceCheck) -> "BalanceCheckResponse":
        return cls(
            kind=check.kind.value,
            balance_id=check.balance_id,
            stored=str(quantize(check.stored)),
            computed=str(quantize(check.computed)),
            drift=str(quantize(check.drift)),
            transaction_count=check.transaction_count,
            consistent=check.consistent,
        )
