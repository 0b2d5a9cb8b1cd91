"""
LOT 7: Point de vente

Panier en mémoire et soumission de commande en deux phases.
"""

from .cart import Cart, CartLine, CartError
from .order_composer import (
    OrderComposer,
    SubmittedOrder,
    to_base36,
    OrderSubmissionError,
    PartialOrderSubmissionError,
)

__all__ = [
    "Cart",
    "CartLine",
    "OrderComposer",
    "SubmittedOrder",
    "to_base36",
    # Exceptions
    "CartError",
    "OrderSubmissionError",
    "PartialOrderSubmissionError",
]
