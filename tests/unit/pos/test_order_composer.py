"""
Tests unitaires LOT 7: OrderComposer

En-tête puis lignes séquentielles; échec partiel signalé avec la ligne
fautive, panier conservé; retries limités aux échecs de connexion.
"""

import asyncio
import random
import re
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from cafe_client.network import ApiClient, ApiConnectError, ApiNetworkError
from cafe_client.pos import (
    Cart,
    CartError,
    OrderComposer,
    OrderSubmissionError,
    PartialOrderSubmissionError,
    to_base36,
)
from cafe_client.services import MenuItem, Order, OrdersService

ORDERS = "/api/orders/"
ADD_ITEM = "/api/orders/1/add_item/"


def order_body(**overrides):
    body = {"id": 1, "order_number": "P-TEST-00", "status": "pending", "items": []}
    body.update(overrides)
    return body


@pytest.fixture
def cart() -> Cart:
    cart = Cart(tax_rate=Decimal("0.08"))
    cart.add_line(MenuItem(id=1, name="Latte", base_price=Decimal("4.00")))
    cart.add_line(MenuItem(id=2, name="Croissant", base_price=Decimal("2.50")))
    cart.add_line(MenuItem(id=3, name="Juice", base_price=Decimal("3.00")))
    cart.set_quantity(1, 2)
    return cart


@pytest.fixture
def composer(api_client, cart) -> OrderComposer:
    return OrderComposer(OrdersService(api_client), cart, clock=lambda: 1_700_000_000.5, rng=random.Random(7))


# ══════════════════════════════════════════════════════════════════════════════
# TESTS NUMÉRO DE COMMANDE
# ══════════════════════════════════════════════════════════════════════════════


class TestOrderNumber:
    def test_base36(self) -> None:
        assert to_base36(0) == "0"
        assert to_base36(35) == "Z"
        assert to_base36(36) == "10"
        with pytest.raises(ValueError):
            to_base36(-1)

    def test_format(self, composer) -> None:
        number = composer.generate_order_number()

        assert re.fullmatch(r"P-[0-9A-Z]+-[0-9A-Z]{2}", number)
        assert number.split("-")[1] == to_base36(1_700_000_000_500)
        assert len(number) <= 20

    def test_truncated_to_max_length(self, api_client, cart) -> None:
        composer = OrderComposer(
            OrdersService(api_client), cart, order_number_prefix="TERMINAL-42", order_number_max_length=12
        )
        number = composer.generate_order_number()

        assert number == "TERMINAL-42-"


# ══════════════════════════════════════════════════════════════════════════════
# TESTS SOUMISSION
# ══════════════════════════════════════════════════════════════════════════════


class TestSubmit:
    @pytest.mark.asyncio
    async def test_full_submission(self, composer, cart, backend, read_json) -> None:
        backend.add("POST", ORDERS, order_body(), status=201)
        backend.add("POST", ADD_ITEM, order_body(total_amount="13.50"))

        submitted = await composer.submit(customer=5)

        header = read_json(backend.calls("POST", ORDERS)[0])
        assert header["customer"] == 5
        assert header["order_number"].startswith("P-")

        bodies = [read_json(r) for r in backend.calls("POST", ADD_ITEM)]
        assert bodies == [
            {"menu_item": 1, "quantity": 2, "price": "4.00"},
            {"menu_item": 2, "quantity": 1, "price": "2.50"},
            {"menu_item": 3, "quantity": 1, "price": "3.00"},
        ]

        assert submitted.subtotal == Decimal("13.50")
        assert submitted.tax == Decimal("1.08")
        assert submitted.total == Decimal("14.58")
        assert submitted.order.total_amount == Decimal("13.50")
        assert len(submitted.lines) == 3
        assert cart.is_empty
        assert composer.is_submitting is False

    @pytest.mark.asyncio
    async def test_empty_cart(self, api_client, backend) -> None:
        composer = OrderComposer(OrdersService(api_client), Cart())

        with pytest.raises(CartError):
            await composer.submit()
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_header_failure_creates_nothing(self, composer, cart, backend) -> None:
        backend.add("POST", ORDERS, {"detail": "Invalid order"}, status=400)

        with pytest.raises(OrderSubmissionError) as exc_info:
            await composer.submit()

        assert not isinstance(exc_info.value, PartialOrderSubmissionError)
        assert backend.calls("POST", ADD_ITEM) == []
        assert cart.item_count == 4
        assert composer.is_submitting is False

    @pytest.mark.asyncio
    async def test_second_line_rejected(self, composer, cart, backend) -> None:
        backend.add("POST", ORDERS, order_body(), status=201)
        backend.add("POST", ADD_ITEM, order_body())
        backend.add("POST", ADD_ITEM, {"detail": "Menu item unavailable"}, status=400)

        with pytest.raises(PartialOrderSubmissionError) as exc_info:
            await composer.submit()

        error = exc_info.value
        assert error.order.id == 1
        assert [line.menu_item_id for line in error.attached_lines] == [1]
        assert error.failed_line.menu_item_id == 2
        assert "Menu item unavailable" in str(error.cause)
        # Pas de retry sur un refus serveur, pas de tentative sur la 3e ligne
        assert len(backend.calls("POST", ADD_ITEM)) == 2
        assert len(cart.lines) == 3
        assert composer.is_submitting is False

    @pytest.mark.asyncio
    async def test_connection_failure_retried(self, composer, cart, backend) -> None:
        backend.add("POST", ORDERS, order_body(), status=201)
        backend.add("POST", ADD_ITEM, error=httpx.ConnectError("reset"))
        backend.add("POST", ADD_ITEM, order_body())

        with patch("asyncio.sleep", new_callable=AsyncMock):
            submitted = await composer.submit()

        assert len(backend.calls("POST", ADD_ITEM)) == 4
        assert len(submitted.lines) == 3
        assert cart.is_empty

    @pytest.mark.asyncio
    async def test_connection_failure_exhausts_attempts(self, api_client, cart, backend) -> None:
        composer = OrderComposer(OrdersService(api_client), cart, item_retry_attempts=2)
        backend.add("POST", ORDERS, order_body(), status=201)
        backend.add("POST", ADD_ITEM, error=httpx.ConnectError("offline"))

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(PartialOrderSubmissionError) as exc_info:
                await composer.submit()

        assert exc_info.value.attached_lines == []
        assert exc_info.value.failed_line.menu_item_id == 1
        assert len(backend.calls("POST", ADD_ITEM)) == 2
        assert not cart.is_empty

    @pytest.mark.asyncio
    async def test_lost_response_not_retried(self, cart, read_json) -> None:
        """La ligne est enregistrée côté serveur puis la réponse se perd: pas de second envoi."""
        committed = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == ORDERS:
                return httpx.Response(201, json=order_body())
            committed.append(read_json(request))
            if len(committed) == 1:
                raise httpx.ReadTimeout("read timed out", request=request)
            return httpx.Response(200, json=order_body())

        api = ApiClient("http://cafe.test", transport=httpx.MockTransport(handler))
        composer = OrderComposer(OrdersService(api), cart)

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            with pytest.raises(PartialOrderSubmissionError) as exc_info:
                await composer.submit()

        assert committed == [{"menu_item": 1, "quantity": 2, "price": "4.00"}]
        assert exc_info.value.failed_line.menu_item_id == 1
        assert exc_info.value.attached_lines == []
        assert isinstance(exc_info.value.cause, ApiNetworkError)
        assert not isinstance(exc_info.value.cause, ApiConnectError)
        sleep.assert_not_awaited()
        assert len(cart.lines) == 3

    @pytest.mark.asyncio
    async def test_cart_snapshot_before_network(self, api_client, cart) -> None:
        """Une modification du panier pendant la soumission n'affecte pas les lignes envoyées."""
        sent = []

        class RecordingOrders(OrdersService):
            async def create(self, order_number, customer=None):
                cart.set_quantity(1, 10)
                return Order(id=1, order_number=order_number)

            async def add_item(self, order_id, menu_item, quantity, price=None):
                sent.append((menu_item, quantity))
                return Order(id=order_id, order_number="x")

        composer = OrderComposer(RecordingOrders(api_client), cart)
        submitted = await composer.submit()

        assert sent[0] == (1, 2)
        assert submitted.subtotal == Decimal("13.50")

    @pytest.mark.asyncio
    async def test_concurrent_submit_rejected(self, api_client, cart) -> None:
        started = asyncio.Event()
        release = asyncio.Event()

        class SlowOrders(OrdersService):
            async def create(self, order_number, customer=None):
                started.set()
                await release.wait()
                return Order(id=1, order_number=order_number)

            async def add_item(self, order_id, menu_item, quantity, price=None):
                return Order(id=order_id, order_number="x")

        composer = OrderComposer(SlowOrders(api_client), cart)
        first = asyncio.ensure_future(composer.submit())
        await started.wait()

        assert composer.is_submitting is True
        with pytest.raises(OrderSubmissionError, match="already in progress"):
            await composer.submit()

        release.set()
        submitted = await first
        assert submitted.order.id == 1
        assert composer.is_submitting is False
