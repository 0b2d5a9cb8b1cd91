"""
LOT 7: Point de vente - Soumission de commande

Soumission en deux phases:
    1. Création de l'en-tête (numéro de commande généré localement)
    2. Attache séquentielle de chaque ligne avec le prix figé du panier

Échec de l'en-tête → rien n'est créé.
Échec d'une ligne → les lignes déjà attachées restent sur la commande
serveur (pas de rollback), le panier est conservé et l'erreur indique
précisément la ligne fautive.
"""

import random
import time
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, List, Optional

from ..core.errors import CafeClientError
from ..logging import get_logger
from ..network.api_client import ApiConnectError, ApiError
from ..network.interfaces import RetryConfig
from ..network.retry_handler import RetryHandler
from ..services.interfaces import Order
from ..services.orders_service import OrdersService
from .cart import Cart, CartError, CartLine

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    digits = []
    while True:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
        if value == 0:
            break
    return "".join(reversed(digits))


class OrderSubmissionError(CafeClientError):
    """La commande n'a pas pu être créée; rien n'existe côté serveur."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        self.cause = cause
        super().__init__(message)


class PartialOrderSubmissionError(OrderSubmissionError):
    """
    En-tête créé mais une ligne a échoué.

    Attributes:
        order: Commande serveur (statut inchangé)
        attached_lines: Lignes attachées avec succès, dans l'ordre
        failed_line: Ligne dont l'attache a échoué
    """

    def __init__(
        self,
        order: Order,
        attached_lines: List[CartLine],
        failed_line: CartLine,
        cause: Optional[Exception] = None,
    ) -> None:
        self.order = order
        self.attached_lines = attached_lines
        self.failed_line = failed_line
        super().__init__(
            f"Order {order.order_number} is incomplete: item {failed_line.menu_item_id} "
            f"({failed_line.name}) failed after {len(attached_lines)} attached: {cause}",
            cause=cause,
        )


@dataclass
class SubmittedOrder:
    """Commande entièrement soumise."""

    order: Order
    lines: List[CartLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    tax: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")

    @property
    def order_number(self) -> str:
        return self.order.order_number


class OrderComposer:
    """
    Transforme le panier en commande serveur.

    Example:
        composer = OrderComposer(orders_service, cart)
        try:
            submitted = await composer.submit()
        except PartialOrderSubmissionError as e:
            show_incomplete(e.order, e.failed_line)
    """

    def __init__(
        self,
        orders: OrdersService,
        cart: Cart,
        retry_handler: Optional[RetryHandler] = None,
        item_retry_attempts: int = 3,
        order_number_prefix: str = "P",
        order_number_max_length: int = 20,
        clock: Optional[Callable[[], float]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Args:
            orders: Service commandes
            cart: Panier à soumettre
            retry_handler: Retries des lignes (échecs de connexion uniquement)
            item_retry_attempts: Tentatives par ligne
            order_number_prefix: Préfixe du numéro de commande
            order_number_max_length: Limite de la colonne serveur
            clock: Source de temps (secondes epoch)
            rng: Générateur aléatoire du suffixe
        """
        self._orders = orders
        self.cart = cart
        self._retry = retry_handler or RetryHandler()
        # Seule une ligne jamais envoyée est rejouée: add_item n'est pas idempotent
        self._retry_config: RetryConfig = replace(
            self._retry.default_config,
            max_attempts=item_retry_attempts,
            retryable_exceptions=(ApiConnectError,),
        )
        self._prefix = order_number_prefix
        self._max_length = order_number_max_length
        self._clock = clock or time.time
        self._rng = rng or random.Random()
        self._submitting = False
        self._logger = get_logger("cafe_client.pos.order_composer")

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def generate_order_number(self) -> str:
        """Numéro <préfixe>-<ms base36>-<2 car. aléatoires>, tronqué à la limite."""
        stamp = to_base36(int(self._clock() * 1000))
        suffix = to_base36(self._rng.randrange(36 * 36)).rjust(2, "0")
        return f"{self._prefix}-{stamp}-{suffix}"[: self._max_length]

    async def submit(self, customer: Optional[int] = None) -> SubmittedOrder:
        """
        Soumet le panier.

        Raises:
            CartError: Panier vide
            OrderSubmissionError: Soumission en cours, ou en-tête refusé
            PartialOrderSubmissionError: Une ligne n'a pas pu être attachée
        """
        if self.cart.is_empty:
            raise CartError("Cannot submit an empty cart")
        if self._submitting:
            raise OrderSubmissionError("An order submission is already in progress")

        self._submitting = True
        try:
            return await self._submit(customer)
        finally:
            self._submitting = False

    async def _submit(self, customer: Optional[int]) -> SubmittedOrder:
        # Prix et quantités figés avant le premier appel réseau
        lines = self.cart.lines
        subtotal, tax, total = self.cart.subtotal, self.cart.tax, self.cart.total

        order_number = self.generate_order_number()
        log = self._logger.with_context(correlation_id=order_number)

        try:
            order = await self._orders.create(order_number, customer=customer)
        except ApiError as e:
            log.error("Order creation failed", error=str(e))
            raise OrderSubmissionError(f"Failed to create order: {e}", cause=e) from e

        log.info("Order created", order_id=order.id, lines=len(lines))

        attached: List[CartLine] = []
        latest = order
        for line in lines:
            result = await self._retry.execute_with_retry(
                self._orders.add_item,
                order.id,
                menu_item=line.menu_item_id,
                quantity=line.quantity,
                price=line.unit_price,
                config=self._retry_config,
            )
            if not result.success:
                log.error(
                    "Order item attachment failed",
                    order_id=order.id,
                    menu_item=line.menu_item_id,
                    attached=len(attached),
                    attempts=result.attempts,
                    error=str(result.last_error),
                )
                raise PartialOrderSubmissionError(order, attached, line, cause=result.last_error)

            attached.append(line)
            latest = result.result or latest

        self.cart.clear()
        log.info("Order submitted", order_id=order.id, total=str(total))
        return SubmittedOrder(order=latest, lines=attached, subtotal=subtotal, tax=tax, total=total)
