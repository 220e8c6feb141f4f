"""Ledger repositories: raw SQL over account_balances, bakis, transactions.

Balance changes are a single atomic UPDATE ... SET balance = balance + :delta
RETURNING. Zero rows back means the referenced balance does not exist.

Transaction ownership: the caller (application service) commits or rolls
back; nothing here commits.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import TextClause, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sl_common.enums import BalanceKind, TransactionSource, TransactionType
from src.sl_common.errors import InternalError
from src.sl_ledger.domain.models import Balance, Transaction, TransactionDraft

_BALANCE_COLUMNS = "id, user_id, category_id, balance, created_at, updated_at"


@dataclass(frozen=True)
class _BalanceSql:
    list_: TextClause
    get: TextClause
    get_for_update: TextClause
    find: TextClause
    insert: TextClause
    apply_delta: TextClause
    set_balance: TextClause
    delete: TextClause


def _balance_sql(table: str) -> _BalanceSql:
    return _BalanceSql(
        list_=text(f"""
            SELECT {_BALANCE_COLUMNS}
            FROM {table}
            WHERE (CAST(:user_id AS UUID) IS NULL OR user_id = CAST(:user_id AS UUID))
              AND (CAST(:category_id AS UUID) IS NULL OR category_id = CAST(:category_id AS UUID))
            ORDER BY updated_at DESC
        """),
        get=text(f"SELECT {_BALANCE_COLUMNS} FROM {table} WHERE id = :id"),
        get_for_update=text(
            f"SELECT {_BALANCE_COLUMNS} FROM {table} WHERE id = :id FOR UPDATE"
        ),
        find=text(f"""
            SELECT {_BALANCE_COLUMNS}
            FROM {table}
            WHERE user_id = :user_id AND category_id = :category_id
        """),
        insert=text(f"""
            INSERT INTO {table} (user_id, category_id, balance)
            VALUES (:user_id, :category_id, 0)
            ON CONFLICT (user_id, category_id) DO NOTHING
            RETURNING {_BALANCE_COLUMNS}
        """),
        apply_delta=text(f"""
            UPDATE {table}
            SET balance = balance + :delta,
                updated_at = NOW()
            WHERE id = :id
            RETURNING {_BALANCE_COLUMNS}
        """),
        set_balance=text(f"""
            UPDATE {table}
            SET balance = :balance,
                updated_at = NOW()
            WHERE id = :id
            RETURNING {_BALANCE_COLUMNS}
        """),
        delete=text(f"DELETE FROM {table} WHERE id = :id RETURNING id"),
    )


_BALANCE_SQL: dict[BalanceKind, _BalanceSql] = {
    kind: _balance_sql(kind.table) for kind in BalanceKind
}

# ---------------------------------------------------------------------------
# SQL: transactions
# ---------------------------------------------------------------------------

_TX_COLUMNS = (
    "id, user_id, category_id, amount, type, target, source, "
    "account_balance_id, baki_id, result_id, note_id, created_at"
)

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE (CAST(:user_id AS UUID) IS NULL OR user_id = CAST(:user_id AS UUID))
      AND (CAST(:category_id AS UUID) IS NULL OR category_id = CAST(:category_id AS UUID))
      AND (CAST(:target AS TEXT) IS NULL OR target = CAST(:target AS TEXT))
      AND (CAST(:source AS TEXT) IS NULL OR source = CAST(:source AS TEXT))
      AND (CAST(:result_id AS UUID) IS NULL OR result_id = CAST(:result_id AS UUID))
    ORDER BY created_at DESC
    LIMIT :limit
""")

_GET_TX_SQL = text(f"SELECT {_TX_COLUMNS} FROM transactions WHERE id = :id")

_GET_TX_FOR_UPDATE_SQL = text(
    f"SELECT {_TX_COLUMNS} FROM transactions WHERE id = :id FOR UPDATE"
)

_LIST_BY_RESULT_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE result_id = :result_id
    ORDER BY created_at
    FOR UPDATE
""")

_LIST_BY_BALANCE_SQL = {
    kind: text(f"""
        SELECT {_TX_COLUMNS}
        FROM transactions
        WHERE target = '{kind.value}' AND {kind.id_column} = :balance_id
        ORDER BY created_at
    """)
    for kind in BalanceKind
}

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (user_id, category_id, amount, type, target, source,
         account_balance_id, baki_id, result_id, note_id)
    VALUES
        (:user_id, :category_id, :amount, :type, :target, :source,
         :account_balance_id, :baki_id, :result_id, :note_id)
    RETURNING {_TX_COLUMNS}
""")

_UPDATE_TX_SQL = text(f"""
    UPDATE transactions
    SET user_id = :user_id,
        category_id = :category_id,
        amount = :amount,
        type = :type,
        target = :target,
        account_balance_id = :account_balance_id,
        baki_id = :baki_id
    WHERE id = :id
    RETURNING {_TX_COLUMNS}
""")

_DELETE_TX_SQL = text("DELETE FROM transactions WHERE id = :id RETURNING id")


def _row_to_balance(row: object, kind: BalanceKind) -> Balance:
    return Balance(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        category_id=str(row.category_id),  # type: ignore[attr-defined]
        balance=Decimal(row.balance),  # type: ignore[attr-defined]
        kind=kind,
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _opt_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        category_id=str(row.category_id),  # type: ignore[attr-defined]
        amount=Decimal(row.amount),  # type: ignore[attr-defined]
        type=TransactionType(row.type),  # type: ignore[attr-defined]
        target=BalanceKind(row.target),  # type: ignore[attr-defined]
        source=TransactionSource(row.source),  # type: ignore[attr-defined]
        account_balance_id=_opt_str(row.account_balance_id),  # type: ignore[attr-defined]
        baki_id=_opt_str(row.baki_id),  # type: ignore[attr-defined]
        result_id=_opt_str(row.result_id),  # type: ignore[attr-defined]
        note_id=_opt_str(row.note_id),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _balance_refs(target: BalanceKind, balance_id: str | None) -> dict[str, str | None]:
    """Exactly one of account_balance_id / baki_id is set, per target."""
    return {
        "account_balance_id": balance_id if target is BalanceKind.ACCOUNT_BALANCE else None,
        "baki_id": balance_id if target is BalanceKind.BAKI else None,
    }


class BalanceRepository:
    """Serves both balance kinds; the kind picks the table."""

    async def list_balances(
        self,
        db: AsyncSession,
        kind: BalanceKind,
        user_id: str | None = None,
        category_id: str | None = None,
    ) -> list[Balance]:
        result = await db.execute(
            _BALANCE_SQL[kind].list_, {"user_id": user_id, "category_id": category_id}
        )
        return [_row_to_balance(row, kind) for row in result.fetchall()]

    async def get_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str, for_update: bool = False
    ) -> Balance | None:
        sql = _BALANCE_SQL[kind].get_for_update if for_update else _BALANCE_SQL[kind].get
        result = await db.execute(sql, {"id": balance_id})
        row = result.fetchone()
        return _row_to_balance(row, kind) if row else None

    async def find_balance(
        self, db: AsyncSession, kind: BalanceKind, user_id: str, category_id: str
    ) -> Balance | None:
        result = await db.execute(
            _BALANCE_SQL[kind].find, {"user_id": user_id, "category_id": category_id}
        )
        row = result.fetchone()
        return _row_to_balance(row, kind) if row else None

    async def insert_balance(
        self, db: AsyncSession, kind: BalanceKind, user_id: str, category_id: str
    ) -> Balance | None:
        """Insert a zero balance. None if the (user, category) row already exists."""
        result = await db.execute(
            _BALANCE_SQL[kind].insert, {"user_id": user_id, "category_id": category_id}
        )
        row = result.fetchone()
        return _row_to_balance(row, kind) if row else None

    async def get_or_create_balance(
        self, db: AsyncSession, kind: BalanceKind, user_id: str, category_id: str
    ) -> tuple[Balance, bool]:
        """Returns (balance, created). ON CONFLICT makes concurrent creators converge."""
        created = await self.insert_balance(db, kind, user_id, category_id)
        if created is not None:
            return created, True
        existing = await self.find_balance(db, kind, user_id, category_id)
        if existing is None:
            raise InternalError(
                f"{kind.table} row vanished after conflict: user={user_id} category={category_id}"
            )
        return existing, False

    async def apply_delta(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str, delta: Decimal
    ) -> Balance | None:
        result = await db.execute(
            _BALANCE_SQL[kind].apply_delta, {"id": balance_id, "delta": delta}
        )
        row = result.fetchone()
        return _row_to_balance(row, kind) if row else None

    async def set_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str, balance: Decimal
    ) -> Balance | None:
        result = await db.execute(
            _BALANCE_SQL[kind].set_balance, {"id": balance_id, "balance": balance}
        )
        row = result.fetchone()
        return _row_to_balance(row, kind) if row else None

    async def delete_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str
    ) -> bool:
        result = await db.execute(_BALANCE_SQL[kind].delete, {"id": balance_id})
        return result.fetchone() is not None


class TransactionRepository:
    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        category_id: str | None = None,
        target: BalanceKind | None = None,
        source: str | None = None,
        result_id: str | None = None,
        limit: int = 200,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "user_id": user_id,
                "category_id": category_id,
                "target": target.value if target else None,
                "source": source,
                "result_id": result_id,
                "limit": limit,
            },
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def get_transaction(
        self, db: AsyncSession, transaction_id: str, for_update: bool = False
    ) -> Transaction | None:
        sql = _GET_TX_FOR_UPDATE_SQL if for_update else _GET_TX_SQL
        result = await db.execute(sql, {"id": transaction_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def list_by_result(self, db: AsyncSession, result_id: str) -> list[Transaction]:
        """Locks the rows: callers are about to reverse them."""
        result = await db.execute(_LIST_BY_RESULT_SQL, {"result_id": result_id})
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def list_by_balance(
        self, db: AsyncSession, kind: BalanceKind, balance_id: str
    ) -> list[Transaction]:
        result = await db.execute(_LIST_BY_BALANCE_SQL[kind], {"balance_id": balance_id})
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def insert_transaction(
        self, db: AsyncSession, draft: TransactionDraft, balance_id: str
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": draft.user_id,
                "category_id": draft.category_id,
                "amount": draft.amount,
                "type": draft.type.value,
                "target": draft.target.value,
                "source": draft.source.value,
                "result_id": draft.result_id,
                "note_id": draft.note_id,
                **_balance_refs(draft.target, balance_id),
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_transaction(row)

    async def update_transaction(
        self, db: AsyncSession, tx: Transaction
    ) -> Transaction | None:
        result = await db.execute(
            _UPDATE_TX_SQL,
            {
                "id": tx.id,
                "user_id": tx.user_id,
                "category_id": tx.category_id,
                "amount": tx.amount,
                "type": tx.type.value,
                "target": tx.target.value,
                **_balance_refs(tx.target, tx.balance_id),
            },
        )
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def delete_transaction(self, db: AsyncSession, transaction_id: str) -> bool:
        result = await db.execute(_DELETE_TX_SQL, {"id": transaction_id})
        return result.fetchone() is not None
