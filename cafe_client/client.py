"""
Cafe Client - Façade applicative

Assemble configuration, logging, stockage des tokens, client HTTP,
session, garde de permissions, services REST et point de vente dans un
objet unique à durée de vie explicite (pas d'état de session global).
"""

from pathlib import Path
from typing import Any, Callable, List, Optional

import httpx

from .auth.interfaces import ITokenStore
from .auth.navigation import NavItem, RoleSlots, role_slots, visible_navigation
from .auth.permission_gate import PermissionGate
from .auth.session_manager import AuthSessionManager
from .auth.token_inspector import TokenInspector
from .auth.token_store import FileTokenStore
from .core.config_loader import load_config
from .core.interfaces import ClientConfig
from .logging import configure_logging, get_logger
from .network.api_client import ApiClient
from .network.interfaces import RetryConfig, TimeoutConfig
from .network.retry_handler import RetryHandler
from .network.timeout_manager import TimeoutManager
from .pos.cart import Cart
from .pos.order_composer import OrderComposer
from .services.admin_service import AdminService
from .services.customers_service import CustomersService, UsersService
from .services.menu_service import MenuService
from .services.orders_service import OrdersService


class CafeClient:
    """
    Point d'entrée du client cafe.

    Example:
        async with CafeClient(load_config("cafe.yaml")) as cafe:
            await cafe.session.login("cashier1", "secret")
            cafe.cart.add_line(await cafe.menu.get_menu_item(3))
            submitted = await cafe.composer.submit()
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[ITokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """
        Args:
            config: Configuration (défauts + variables CAFE_* sinon)
            store: Stockage des tokens (fichier de la configuration sinon)
            transport: Transport httpx (MockTransport en test)
            clock: Horloge partagée par l'inspecteur et le composer
        """
        self.config = config or load_config()
        configure_logging(self.config.log_level)
        self._logger = get_logger("cafe_client.client")

        self.store = store or FileTokenStore(
            str(Path(self.config.token_store_path).expanduser()),
            namespace=self.config.storage_namespace,
        )
        self.inspector = TokenInspector(clock=clock)
        self.timeouts = self._build_timeouts(self.config)

        self.api = ApiClient(self.config.api_base_url, timeout_manager=self.timeouts, transport=transport)
        self.session = AuthSessionManager(self.api, self.store, self.inspector)
        self.gate = PermissionGate(self.session)

        self.orders = OrdersService(self.api)
        self.menu = MenuService(self.api)
        self.customers = CustomersService(self.api)
        self.users = UsersService(self.api)
        self.admin = AdminService(self.api)

        self.cart = Cart(tax_rate=self.config.tax_rate, currency_symbol=self.config.currency_symbol)
        self.composer = OrderComposer(
            self.orders,
            self.cart,
            retry_handler=RetryHandler(RetryConfig(max_attempts=self.config.item_retry_attempts)),
            item_retry_attempts=self.config.item_retry_attempts,
            order_number_prefix=self.config.order_number_prefix,
            order_number_max_length=self.config.order_number_max_length,
            clock=clock,
        )

        if not self.store.is_available():
            self._logger.warn("Token store unavailable, session will not persist")
        self._logger.debug("Cafe client ready", api_base_url=self.config.api_base_url)

    @staticmethod
    def _build_timeouts(config: ClientConfig) -> TimeoutManager:
        manager = TimeoutManager(
            TimeoutConfig(
                connection_timeout=config.connect_timeout,
                request_timeout=config.request_timeout,
            )
        )
        for endpoint, override in config.endpoint_timeouts.items():
            manager.set_endpoint_timeout(
                endpoint,
                TimeoutConfig(
                    connection_timeout=override.connect_timeout,
                    request_timeout=override.request_timeout,
                ),
            )
        return manager

    def navigation(self) -> List[NavItem]:
        """Entrées de menu visibles pour l'utilisateur courant."""
        return visible_navigation(self.gate)

    def slots(self) -> RoleSlots:
        return role_slots(self.gate)

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "CafeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
