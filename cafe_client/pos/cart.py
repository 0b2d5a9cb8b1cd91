"""
LOT 7: Point de vente - Panier

Brouillon de commande en mémoire: une ligne par article, prix unitaire
figé au moment de l'ajout, montants en Decimal à deux décimales.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, List, Optional, Union

from ..core.errors import CafeClientError
from ..core.money import ZERO, format_money, parse_money, quantize
from ..services.interfaces import MenuItem


class CartError(CafeClientError):
    """Opération de panier invalide."""

    pass


@dataclass
class CartLine:
    """Ligne du panier."""

    menu_item_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return quantize(self.unit_price * self.quantity)


class Cart:
    """
    Panier du point de vente.

    Example:
        cart = Cart(tax_rate=Decimal("0.08"))
        cart.add_line(espresso)
        cart.set_quantity(espresso.id, 3)
        print(cart.format_amount(cart.total))
    """

    def __init__(self, tax_rate: Union[Decimal, str, int] = Decimal("0"), currency_symbol: str = "₹"):
        """
        Args:
            tax_rate: Taux appliqué au sous-total (0 à 1)
            currency_symbol: Symbole d'affichage

        Raises:
            CartError: Taux hors de [0, 1]
        """
        rate = Decimal(str(tax_rate))
        if not rate.is_finite() or rate < 0 or rate > 1:
            raise CartError(f"tax_rate must be between 0 and 1, got {tax_rate}")
        self.tax_rate = rate
        self.currency_symbol = currency_symbol
        # Ordre d'insertion conservé
        self._lines: Dict[int, CartLine] = {}

    def add_line(self, item: MenuItem) -> CartLine:
        """
        Ajoute un article (quantité +1 s'il est déjà présent).

        Raises:
            CartError: Prix négatif ou illisible
        """
        line = self._lines.get(item.id)
        if line is not None:
            line.quantity += 1
            return line

        try:
            price = parse_money(item.base_price)
        except ValueError as e:
            raise CartError(str(e)) from e
        if price < 0:
            raise CartError(f"Negative price for menu item {item.id}")

        line = CartLine(menu_item_id=item.id, name=item.name, unit_price=price)
        self._lines[item.id] = line
        return line

    def set_quantity(self, menu_item_id: int, quantity: int) -> Optional[CartLine]:
        """Fixe la quantité (minimum 1); article absent → aucun effet."""
        line = self._lines.get(menu_item_id)
        if line is None:
            return None
        line.quantity = max(1, int(quantity))
        return line

    def remove_line(self, menu_item_id: int) -> bool:
        return self._lines.pop(menu_item_id, None) is not None

    def clear(self) -> None:
        self._lines.clear()

    def get_line(self, menu_item_id: int) -> Optional[CartLine]:
        return self._lines.get(menu_item_id)

    @property
    def lines(self) -> List[CartLine]:
        """Copie des lignes (les modifier n'affecte pas le panier)."""
        return [replace(line) for line in self._lines.values()]

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def subtotal(self) -> Decimal:
        return quantize(sum((line.unit_price * line.quantity for line in self._lines.values()), ZERO))

    @property
    def tax(self) -> Decimal:
        return quantize(self.subtotal * self.tax_rate)

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.tax

    def format_amount(self, value: Decimal) -> str:
        """Montant affichable: "₹8.64"."""
        return f"{self.currency_symbol}{format_money(value)}"
