"""
LOT 5: Services - Commandes

Endpoints /api/orders/: en-tête de commande, lignes et statut.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from ..core.money import format_money
from ..network.api_client import unwrap
from .base import BaseService
from .interfaces import Order, OrderStatus

ORDERS_ENDPOINT = "/api/orders/"


class OrdersService(BaseService):
    """
    Example:
        order = await orders.create("P-LX2K9Q-4F")
        order = await orders.add_item(order.id, menu_item=3, quantity=2, price=Decimal("4.50"))
    """

    async def list(self, customer_id: Optional[Union[int, str]] = None) -> List[Order]:
        params = {"customer_id": customer_id} if customer_id else None
        data = unwrap(await self._api.get(ORDERS_ENDPOINT, params=params), default=[])
        return self._parse_list(Order.from_dict, data, "order")

    async def retrieve(self, order_id: int) -> Order:
        data = unwrap(await self._api.get(f"{ORDERS_ENDPOINT}{order_id}/"))
        return self._parse(Order.from_dict, data, "order")

    async def create(self, order_number: str, customer: Optional[int] = None) -> Order:
        """
        Crée l'en-tête de commande.

        Raises:
            ApiError: Refus serveur ou corps sans commande
            ApiNetworkError: Échec de transport
        """
        payload: Dict[str, Any] = {"order_number": order_number, "customer": customer}
        data = unwrap(await self._api.post(ORDERS_ENDPOINT, payload))
        return self._parse(Order.from_dict, data, "order")

    async def update(self, order_id: int, **changes: Any) -> Order:
        if isinstance(changes.get("status"), OrderStatus):
            changes["status"] = changes["status"].value
        data = unwrap(await self._api.put(f"{ORDERS_ENDPOINT}{order_id}/", changes))
        return self._parse(Order.from_dict, data, "order")

    async def remove(self, order_id: int) -> bool:
        unwrap(await self._api.delete(f"{ORDERS_ENDPOINT}{order_id}/"))
        return True

    async def add_item(
        self,
        order_id: int,
        menu_item: int,
        quantity: int,
        price: Optional[Decimal] = None,
    ) -> Order:
        """
        Attache une ligne; price est le prix unitaire figé ("x.yy").

        Raises:
            ApiError: Refus serveur
            ApiConnectError: Requête jamais envoyée (rejouable)
            ApiNetworkError: Réponse perdue, la ligne a pu être attachée (non rejouable)
        """
        payload: Dict[str, Any] = {"menu_item": menu_item, "quantity": quantity}
        if price is not None:
            payload["price"] = format_money(price)
        data = unwrap(await self._api.post(f"{ORDERS_ENDPOINT}{order_id}/add_item/", payload))
        return self._parse(Order.from_dict, data, "order")

    async def set_status(self, order_id: int, status: Union[OrderStatus, str]) -> Order:
        value = OrderStatus(status).value
        data = unwrap(await self._api.post(f"{ORDERS_ENDPOINT}{order_id}/set_status/", {"status": value}))
        return self._parse(Order.from_dict, data, "order")
