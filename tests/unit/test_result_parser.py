"""Unit tests for result text parsing and username resolution."""

from decimal import Decimal

from src.sl_common.enums import TransactionType
from src.sl_result.domain.models import SKIP_BAD_AMOUNT, SKIP_MISSING_TOKEN, UserRef
from src.sl_result.domain.parser import parse_result_lines, resolve_username


class TestParseResultLines:
    def test_sign_convention(self) -> None:
        parsed, skipped = parse_result_lines("10 alice\n-5 bob\ngarbage")

        assert [(p.username, p.amount, p.type) for p in parsed] == [
            ("alice", Decimal("-10.00"), TransactionType.DEBIT),
            ("bob", Decimal("5.00"), TransactionType.CREDIT),
        ]
        assert [(s.line_no, s.reason) for s in skipped] == [(3, SKIP_MISSING_TOKEN)]

    def test_non_numeric_amount_is_skipped(self) -> None:
        parsed, skipped = parse_result_lines("ten alice")
        assert parsed == []
        assert skipped[0].reason == SKIP_BAD_AMOUNT
        assert skipped[0].raw == "ten alice"

    def test_out_of_range_amounts_are_skipped(self) -> None:
        parsed, skipped = parse_result_lines("10 alice\n1e40 bob\n1000000000000000 bob\n")
        assert [p.username for p in parsed] == ["alice"]
        assert [(s.line_no, s.reason) for s in skipped] == [
            (2, SKIP_BAD_AMOUNT),
            (3, SKIP_BAD_AMOUNT),
        ]

    def test_blank_lines_are_ignored_but_counted(self) -> None:
        parsed, skipped = parse_result_lines("\n   \n3 carol\r\n")
        assert skipped == []
        assert parsed[0].line_no == 3

    def test_extra_tokens_and_whitespace(self) -> None:
        [line], _ = parse_result_lines("  2.5\t dave  extra words")
        assert line.username == "dave"
        assert line.amount == Decimal("-2.50")

    def test_empty_text(self) -> None:
        assert parse_result_lines("") == ([], [])


class TestResolveUsername:
    _alice = UserRef("u-1", "alice@shop.test")
    _alice2 = UserRef("u-2", "alice@other.test")
    _bob = UserRef("u-3", "Bob@shop.test")

    def test_local_part_match_is_case_insensitive(self) -> None:
        assert resolve_username("BOB", [self._alice, self._bob]) == self._bob

    def test_no_substring_matching(self) -> None:
        assert resolve_username("ali", [self._alice]) is None

    def test_ambiguous_local_part_needs_full_email(self) -> None:
        candidates = [self._alice, self._alice2]
        assert resolve_username("alice", candidates) is None
        assert resolve_username("alice@other.test", candidates) == self._alice2

    def test_unknown(self) -> None:
        assert resolve_username("zoe", []) is None
