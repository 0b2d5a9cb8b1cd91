"""
Tests unitaires: montants Decimal
"""

from decimal import Decimal

import pytest

from cafe_client.core.money import ZERO, format_money, parse_money, quantize


class TestParseMoney:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("4.50", Decimal("4.50")),
            (4.5, Decimal("4.50")),
            (4, Decimal("4.00")),
            (" 3.2 ", Decimal("3.20")),
            ("2.005", Decimal("2.01")),
            (Decimal("0.125"), Decimal("0.13")),
        ],
    )
    def test_valid(self, value, expected) -> None:
        assert parse_money(value) == expected

    @pytest.mark.parametrize("value", [None, True, "abc", "", "NaN", "Infinity"])
    def test_invalid(self, value) -> None:
        with pytest.raises(ValueError, match="Invalid amount"):
            parse_money(value)


class TestFormatting:
    def test_half_up(self) -> None:
        assert quantize(Decimal("0.645")) == Decimal("0.65")
        assert quantize(Decimal("0.644")) == Decimal("0.64")

    def test_wire_form(self) -> None:
        assert format_money(Decimal("4.5")) == "4.50"
        assert format_money(ZERO) == "0.00"
