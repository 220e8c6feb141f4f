"""Tests for sl_common.amount."""

from decimal import Decimal

import pytest

from src.sl_common.amount import amount_to_display, parse_amount, quantize


class TestQuantize:
    def test_rounds_half_up(self) -> None:
        assert quantize(Decimal("1.005")) == Decimal("1.01")

    def test_pads_to_two_places(self) -> None:
        assert str(quantize(Decimal("7"))) == "7.00"


class TestParseAmount:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("10", Decimal("10")), ("-5", Decimal("-5")), (" 2.50 ", Decimal("2.50"))],
    )
    def test_numbers(self, raw: str, expected: Decimal) -> None:
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["garbage", "", "1,000", "NaN", "Infinity"])
    def test_rejects_non_numbers(self, raw: str) -> None:
        assert parse_amount(raw) is None

    @pytest.mark.parametrize(
        "raw", ["1e40", "-1e40", "1000000000000000", "1000000000000", "999999999999.995"]
    )
    def test_rejects_amounts_too_large_for_the_columns(self, raw: str) -> None:
        assert parse_amount(raw) is None

    @pytest.mark.parametrize("raw", ["999999999999.99", "-999999999999.99", "1e-40"])
    def test_accepts_amounts_at_the_edge(self, raw: str) -> None:
        assert parse_amount(raw) == Decimal(raw)


class TestDisplay:
    def test_thousands_separator(self) -> None:
        assert amount_to_display(Decimal("1500")) == "1,500.00"

    def test_negative(self) -> None:
        assert amount_to_display(Decimal("-12.5")) == "-12.50"

    def test_zero(self) -> None:
        assert amount_to_display(Decimal("0")) == "0.00"
