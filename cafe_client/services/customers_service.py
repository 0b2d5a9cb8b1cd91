"""
LOT 5: Services - Clients et utilisateurs
"""

from typing import Any, List, Mapping, Optional

from ..network.api_client import unwrap
from .base import BaseService
from .interfaces import Customer, UserSummary

CUSTOMERS_ENDPOINT = "/api/customers/"
USERS_ENDPOINT = "/api/users/"

USER_ROLE_FILTERS = ("customer", "staff")


class CustomersService(BaseService):
    """Fiches clients rattachables à une commande."""

    async def list(self) -> List[Customer]:
        data = unwrap(await self._api.get(CUSTOMERS_ENDPOINT), default=[])
        return self._parse_list(Customer.from_dict, data, "customer")

    async def get(self, customer_id: int) -> Customer:
        data = unwrap(await self._api.get(f"{CUSTOMERS_ENDPOINT}{customer_id}/"))
        return self._parse(Customer.from_dict, data, "customer")

    async def create(self, name: str, email: str = "", phone: str = "") -> Customer:
        data = unwrap(
            await self._api.post(CUSTOMERS_ENDPOINT, {"name": name, "email": email, "phone": phone})
        )
        return self._parse(Customer.from_dict, data, "customer")

    async def update(self, customer_id: int, fields: Mapping[str, Any]) -> Customer:
        data = unwrap(await self._api.put(f"{CUSTOMERS_ENDPOINT}{customer_id}/", dict(fields)))
        return self._parse(Customer.from_dict, data, "customer")

    async def delete(self, customer_id: int) -> None:
        unwrap(await self._api.delete(f"{CUSTOMERS_ENDPOINT}{customer_id}/"))


class UsersService(BaseService):
    """Comptes utilisateurs (lecture)."""

    async def list(self, role: Optional[str] = None) -> List[UserSummary]:
        """
        Raises:
            ValueError: Filtre de rôle autre que customer / staff
        """
        if role is not None and role not in USER_ROLE_FILTERS:
            raise ValueError(f"Unknown user role filter: {role!r}")
        params = {"role": role} if role else None
        data = unwrap(await self._api.get(USERS_ENDPOINT, params=params), default=[])
        return self._parse_list(UserSummary.from_dict, data, "user")

    async def get(self, user_id: int) -> UserSummary:
        data = unwrap(await self._api.get(f"{USERS_ENDPOINT}{user_id}/"))
        return self._parse(UserSummary.from_dict, data, "user")
