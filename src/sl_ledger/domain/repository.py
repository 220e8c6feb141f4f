"""Repository Protocols: dependency inversion for testability."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.enums import BalanceKind
from src.sl_ledger.domain.models import Balance, Transaction, TransactionDraft


class BalanceRepositoryProtocol(Protocol):
    async def list_balances(
        self,
        db: AsyncSession,
        kind: BalanceKind,
        user_id: str | None = None,
        category_id: str | None = None,
    ) -> list[Balance]: ...

    async def get_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str, for_update: bool = False
    ) -> Balance | None: ...

    async def find_balance(
        self, db: AsyncSession, kind: BalanceKind, user_id: str, category_id: str
    ) -> Balance | None: ...

    async def get_or_create_balance(
        self, db: AsyncSession, kind: BalanceKind, user_id: str, category_id: str
    ) -> tuple[Balance, bool]: ...

    async def insert_balance(
        self, db: AsyncSession, kind: BalanceKind, user_id: str, category_id: str
    ) -> Balance | None: ...

    async def apply_delta(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str, delta: Decimal
    ) -> Balance | None: ...

    async def set_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str, balance: Decimal
    ) -> Balance | None: ...

    async def delete_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str
    ) -> bool: ...


class TransactionRepositoryProtocol(Protocol):
    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        category_id: str | None = None,
        target: BalanceKind | None = None,
        source: str | None = None,
        result_id: str | None = None,
        limit: int = 200,
    ) -> list[Transaction]: ...

    async def get_transaction(
        self, db: AsyncSession, transaction_id: str, for_update: bool = False
    ) -> Transaction | None: ...

    async def list_by_result(self, db: AsyncSession, result_id: str) -> list[Transaction]: ...

    async def list_by_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str
    ) -> list[Transaction]: ...

    async def insert_transaction(
        self, db: AsyncSession, draft: TransactionDraft, balance_id: str
    ) -> Transaction: ...

    async def update_transaction(
        self, db: AsyncSession, tx: Transaction
    ) -> Transaction | None: ...

    async def delete_transaction(self, db: AsyncSession, transaction_id: str) -> bool: ...
