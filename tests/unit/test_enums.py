"""Tests for sl_common.enums: all enum values must match DB CHECK constraints."""

from src.sl_common.enums import (
    BalanceKind,
    NoteMethod,
    NoteStatus,
    ResultStatus,
    ScheduleState,
    TransactionSource,
    TransactionType,
    UserRole,
)


class TestAllEnumsAreStr:
    def test_transaction_type_is_str(self) -> None:
        assert isinstance(TransactionType.CREDIT, str)
        assert TransactionType.CREDIT == "credit"

    def test_balance_kind_is_str(self) -> None:
        assert BalanceKind.BAKI == "baki"


class TestBalanceKind:
    def test_tables(self) -> None:
        assert BalanceKind.ACCOUNT_BALANCE.table == "account_balances"
        assert BalanceKind.BAKI.table == "bakis"

    def test_reference_columns(self) -> None:
        assert BalanceKind.ACCOUNT_BALANCE.id_column == "account_balance_id"
        assert BalanceKind.BAKI.id_column == "baki_id"


class TestValues:
    def test_transaction_sources(self) -> None:
        assert {s.value for s in TransactionSource} == {"NOTE", "RESULT", "MANUAL"}

    def test_note_statuses(self) -> None:
        assert {s.value for s in NoteStatus} == {"PENDING", "APPROVED", "REJECTED"}

    def test_note_methods(self) -> None:
        assert {m.value for m in NoteMethod} == {"CA", "BT", "CH"}

    def test_result_statuses(self) -> None:
        assert {s.value for s in ResultStatus} == {"PENDING", "PROCESSED"}

    def test_roles(self) -> None:
        assert {r.value for r in UserRole} == {"USER", "ADMIN"}

    def test_schedule_states(self) -> None:
        assert {s.value for s in ScheduleState} == {"DRAFT", "SCHEDULED", "PUBLISHED"}
