"""
Tests unitaires LOT 7: Panier
"""

from decimal import Decimal

import pytest

from cafe_client.pos import Cart, CartError
from cafe_client.services import MenuItem


def item(item_id: int, price: str, name: str = "") -> MenuItem:
    return MenuItem(id=item_id, name=name or f"Item {item_id}", base_price=Decimal(price))


@pytest.fixture
def cart() -> Cart:
    return Cart(tax_rate=Decimal("0.08"))


class TestLines:
    def test_add_new_line(self, cart) -> None:
        line = cart.add_line(item(1, "4.50", "Latte"))

        assert line.quantity == 1
        assert line.unit_price == Decimal("4.50")
        assert cart.item_count == 1

    def test_duplicate_add_increments(self, cart) -> None:
        latte = item(1, "4.50")
        cart.add_line(latte)
        cart.add_line(latte)

        assert len(cart.lines) == 1
        assert cart.get_line(1).quantity == 2

    def test_price_frozen_at_first_add(self, cart) -> None:
        cart.add_line(item(1, "4.50"))
        cart.add_line(item(1, "9.99"))

        assert cart.get_line(1).unit_price == Decimal("4.50")

    def test_negative_price_rejected(self, cart) -> None:
        with pytest.raises(CartError):
            cart.add_line(item(1, "-1"))
        assert cart.is_empty

    def test_set_quantity_clamped(self, cart) -> None:
        cart.add_line(item(1, "4.00"))

        assert cart.set_quantity(1, 0).quantity == 1
        assert cart.set_quantity(1, -3).quantity == 1
        assert cart.set_quantity(1, 5).quantity == 5

    def test_set_quantity_unknown_item(self, cart) -> None:
        assert cart.set_quantity(99, 3) is None
        assert cart.is_empty

    def test_remove_and_clear(self, cart) -> None:
        cart.add_line(item(1, "1.00"))
        cart.add_line(item(2, "2.00"))

        assert cart.remove_line(1) is True
        assert cart.remove_line(1) is False
        cart.clear()
        assert cart.is_empty

    def test_lines_are_copies(self, cart) -> None:
        cart.add_line(item(1, "1.00"))
        cart.lines[0].quantity = 50

        assert cart.get_line(1).quantity == 1

    def test_insertion_order(self, cart) -> None:
        for item_id in (3, 1, 2):
            cart.add_line(item(item_id, "1.00"))

        assert [line.menu_item_id for line in cart.lines] == [3, 1, 2]


class TestTotals:
    def test_subtotal_tax_total(self, cart) -> None:
        cart.add_line(item(1, "4.00"))
        cart.set_quantity(1, 2)

        assert cart.subtotal == Decimal("8.00")
        assert cart.tax == Decimal("0.64")
        assert cart.total == Decimal("8.64")
        assert cart.format_amount(cart.total) == "₹8.64"

    def test_tax_rounded_half_up(self) -> None:
        cart = Cart(tax_rate="0.05")
        cart.add_line(item(1, "0.30"))

        # 0.30 * 0.05 = 0.015
        assert cart.tax == Decimal("0.02")
        assert cart.total == Decimal("0.32")

    def test_empty_cart(self, cart) -> None:
        assert cart.subtotal == Decimal("0.00")
        assert cart.total == Decimal("0.00")
        assert cart.item_count == 0

    def test_no_float_drift(self) -> None:
        cart = Cart()
        cart.add_line(item(1, "0.10"))
        cart.add_line(item(2, "0.20"))

        assert cart.total == Decimal("0.30")

    def test_currency_symbol(self) -> None:
        assert Cart(currency_symbol="$").format_amount(Decimal("3")) == "$3.00"

    @pytest.mark.parametrize("rate", ["-0.01", "1.5", "NaN"])
    def test_invalid_tax_rate(self, rate) -> None:
        with pytest.raises(CartError):
            Cart(tax_rate=rate)
