"""
Cafe Client - Montants monétaires.

Tous les montants sont des Decimal à deux décimales, arrondi commercial
(ROUND_HALF_UP). Les floats ne sont jamais utilisés pour l'argent.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_money(value: Any) -> Decimal:
    """
    Convertit un prix serveur ("4.50", 4.5, 4) en Decimal à deux décimales.

    Raises:
        ValueError: Valeur non numérique, infinie ou booléenne
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return quantize(amount)


def format_money(value: Decimal) -> str:
    """Forme fil ("4.50") attendue par l'API."""
    return f"{quantize(value):.2f}"
