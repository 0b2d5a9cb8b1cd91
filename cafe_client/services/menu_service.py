"""
LOT 5: Services - Menu

Catégories, articles, options et historique de disponibilité du menu.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..core.money import format_money, parse_money
from ..network.api_client import unwrap
from .base import BaseService
from .interfaces import AvailabilityChange, Category, MenuItem, Modifier, ModifierGroup, PricingRule

CATEGORIES_ENDPOINT = "/api/categories/"
MENU_ITEMS_ENDPOINT = "/api/menu-items/"
MODIFIER_GROUPS_ENDPOINT = "/api/modifier-groups/"
MODIFIERS_ENDPOINT = "/api/modifiers/"
PRICING_RULES_ENDPOINT = "/api/pricing-rules/"
AVAILABILITY_HISTORY_ENDPOINT = "/api/availability-history/"


class MenuService(BaseService):
    """Lecture publique du menu et administration du catalogue."""

    # Catégories

    async def get_categories(self) -> List[Category]:
        data = unwrap(await self._api.get(CATEGORIES_ENDPOINT), default=[])
        return self._parse_list(Category.from_dict, data, "category")

    async def get_category(self, category_id: int) -> Category:
        data = unwrap(await self._api.get(f"{CATEGORIES_ENDPOINT}{category_id}/"))
        return self._parse(Category.from_dict, data, "category")

    async def create_category(self, fields: Mapping[str, Any]) -> Category:
        data = unwrap(await self._api.post(CATEGORIES_ENDPOINT, dict(fields)))
        return self._parse(Category.from_dict, data, "category")

    async def update_category(self, category_id: int, fields: Mapping[str, Any]) -> Category:
        data = unwrap(await self._api.patch(f"{CATEGORIES_ENDPOINT}{category_id}/", dict(fields)))
        return self._parse(Category.from_dict, data, "category")

    async def delete_category(self, category_id: int) -> None:
        unwrap(await self._api.delete(f"{CATEGORIES_ENDPOINT}{category_id}/"))

    # Articles

    async def get_menu_items(self) -> List[MenuItem]:
        data = unwrap(await self._api.get(MENU_ITEMS_ENDPOINT), default=[])
        return self._parse_list(MenuItem.from_dict, data, "menu item")

    async def get_menu_item(self, item_id: int) -> MenuItem:
        data = unwrap(await self._api.get(f"{MENU_ITEMS_ENDPOINT}{item_id}/"))
        return self._parse(MenuItem.from_dict, data, "menu item")

    async def get_menu_items_by_category(self, category_id: int) -> List[MenuItem]:
        data = unwrap(await self._api.get(MENU_ITEMS_ENDPOINT, params={"category": category_id}), default=[])
        return self._parse_list(MenuItem.from_dict, data, "menu item")

    async def get_featured_menu_items(self) -> List[MenuItem]:
        data = unwrap(await self._api.get(MENU_ITEMS_ENDPOINT, params={"is_featured": "true"}), default=[])
        return self._parse_list(MenuItem.from_dict, data, "menu item")

    async def create_menu_item(self, fields: Mapping[str, Any]) -> MenuItem:
        data = unwrap(await self._api.post(MENU_ITEMS_ENDPOINT, self._serialize(fields)))
        return self._parse(MenuItem.from_dict, data, "menu item")

    async def update_menu_item(self, item_id: int, fields: Mapping[str, Any]) -> MenuItem:
        data = unwrap(await self._api.patch(f"{MENU_ITEMS_ENDPOINT}{item_id}/", self._serialize(fields)))
        return self._parse(MenuItem.from_dict, data, "menu item")

    async def delete_menu_item(self, item_id: int) -> None:
        unwrap(await self._api.delete(f"{MENU_ITEMS_ENDPOINT}{item_id}/"))

    async def set_availability(self, item_id: int, is_available: bool) -> MenuItem:
        return await self.update_menu_item(item_id, {"is_available": is_available})

    # Options (lecture seule)

    async def get_modifier_groups(self) -> List[ModifierGroup]:
        data = unwrap(await self._api.get(MODIFIER_GROUPS_ENDPOINT), default=[])
        return self._parse_list(ModifierGroup.from_dict, data, "modifier group")

    async def get_modifier_group(self, group_id: int) -> ModifierGroup:
        data = unwrap(await self._api.get(f"{MODIFIER_GROUPS_ENDPOINT}{group_id}/"))
        return self._parse(ModifierGroup.from_dict, data, "modifier group")

    async def get_modifiers(self) -> List[Modifier]:
        data = unwrap(await self._api.get(MODIFIERS_ENDPOINT), default=[])
        return self._parse_list(Modifier.from_dict, data, "modifier")

    async def get_modifiers_by_group(self, group_id: int) -> List[Modifier]:
        data = unwrap(await self._api.get(MODIFIERS_ENDPOINT, params={"group": group_id}), default=[])
        return self._parse_list(Modifier.from_dict, data, "modifier")

    # Règles de prix et historique

    async def get_pricing_rules(self, menu_item_id: Optional[int] = None) -> List[PricingRule]:
        """Toutes les règles, ou celles d'un article si menu_item_id est fourni."""
        params = None if menu_item_id is None else {"menu_item": menu_item_id}
        data = unwrap(await self._api.get(PRICING_RULES_ENDPOINT, params=params), default=[])
        return self._parse_list(PricingRule.from_dict, data, "pricing rule")

    async def get_availability_history(self, menu_item_id: Optional[int] = None) -> List[AvailabilityChange]:
        params = None if menu_item_id is None else {"menu_item": menu_item_id}
        data = unwrap(await self._api.get(AVAILABILITY_HISTORY_ENDPOINT, params=params), default=[])
        return self._parse_list(AvailabilityChange.from_dict, data, "availability change")

    @staticmethod
    def _serialize(fields: Mapping[str, Any]) -> Dict[str, Any]:
        # Les prix partent en texte "x.yy"
        payload = dict(fields)
        if payload.get("base_price") is not None:
            payload["base_price"] = format_money(parse_money(payload["base_price"]))
        return payload
