"""
LOT 5: Services - Modèles

Représentations typées des ressources REST consommées par les écrans
(commandes, menu, clients, utilisateurs, tableau de bord).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..core.money import ZERO, parse_money


def _money_or_zero(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    return parse_money(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


class OrderStatus(Enum):
    """Statuts de commande côté serveur."""

    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELED = "canceled"


# ══════════════════════════════════════════════════════════════════════════════
# COMMANDES
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class OrderLine:
    """Ligne attachée à une commande (prix figé à l'ajout)."""

    menu_item: int
    quantity: int
    price: Decimal
    menu_item_name: str = ""
    total_price: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderLine":
        return cls(
            menu_item=int(data["menu_item"]),
            quantity=int(data.get("quantity", 1)),
            price=_money_or_zero(data.get("price")),
            menu_item_name=data.get("menu_item_name") or "",
            total_price=_money_or_zero(data.get("total_price")),
        )


@dataclass
class Order:
    """Commande serveur."""

    id: int
    order_number: str
    status: OrderStatus = OrderStatus.PENDING
    customer: Optional[int] = None
    cashier: Optional[int] = None
    created_at: str = ""
    completed_at: Optional[str] = None
    table_number: Optional[str] = None
    customer_name: Optional[str] = None
    contact: Optional[str] = None
    items: List[OrderLine] = field(default_factory=list)
    total_amount: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Order":
        """
        Raises:
            ValueError: id manquant ou statut inconnu
        """
        if data.get("id") is None:
            raise ValueError("order has no id")
        return cls(
            id=int(data["id"]),
            order_number=data.get("order_number") or "",
            status=OrderStatus(data.get("status") or OrderStatus.PENDING.value),
            customer=_optional_int(data.get("customer")),
            cashier=_optional_int(data.get("cashier")),
            created_at=data.get("created_at") or "",
            completed_at=data.get("completed_at"),
            table_number=data.get("table_number"),
            customer_name=data.get("customer_name"),
            contact=data.get("contact"),
            items=[OrderLine.from_dict(item) for item in data.get("items") or []],
            total_amount=_money_or_zero(data.get("total_amount")),
        )


# ══════════════════════════════════════════════════════════════════════════════
# MENU
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class Category:
    id: int
    name: str
    description: str = ""
    display_order: int = 0
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Category":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            display_order=int(data.get("display_order") or 0),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class MenuItem:
    """Article vendable; base_price fait foi pour le panier."""

    id: int
    name: str
    base_price: Decimal
    category: Optional[int] = None
    description: str = ""
    is_available: bool = True
    is_featured: bool = False
    image_url: Optional[str] = None
    calories: Optional[int] = None
    allergens: Optional[str] = None
    preparation_time: Optional[int] = None
    modifier_groups: List[int] = field(default_factory=list)
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MenuItem":
        """
        Raises:
            ValueError: Prix illisible
        """
        price = data.get("base_price")
        if price is None:
            price = data.get("price")
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            base_price=parse_money(price),
            category=_optional_int(data.get("category")),
            description=data.get("description") or "",
            is_available=bool(data.get("is_available", True)),
            is_featured=bool(data.get("is_featured", False)),
            image_url=data.get("image_url"),
            calories=_optional_int(data.get("calories")),
            allergens=data.get("allergens"),
            preparation_time=_optional_int(data.get("preparation_time")),
            modifier_groups=[int(g) for g in data.get("modifier_groups") or []],
            display_order=int(data.get("display_order") or 0),
        )


@dataclass
class ModifierGroup:
    """Groupe d'options (ex: "Lait", "Taille") rattaché aux articles."""

    id: int
    name: str
    description: str = ""
    is_required: bool = False
    max_selections: int = 1
    display_order: int = 0
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModifierGroup":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            is_required=bool(data.get("is_required", False)),
            max_selections=int(data.get("max_selections") or 1),
            display_order=int(data.get("display_order") or 0),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class Modifier:
    id: int
    group: int
    name: str
    price_adjustment: Decimal = ZERO
    is_available: bool = True
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Modifier":
        return cls(
            id=int(data["id"]),
            group=int(data["group"]),
            name=data.get("name") or "",
            price_adjustment=_money_or_zero(data.get("price_adjustment")),
            is_available=bool(data.get("is_available", True)),
            display_order=int(data.get("display_order") or 0),
        )


@dataclass
class PricingRule:
    """
    Règle de prix horaire d'un article.

    Lue pour affichage uniquement: le panier ne l'applique pas.
    """

    id: int
    name: str
    menu_item: int
    price_adjustment: Decimal = ZERO
    percentage_adjustment: Decimal = ZERO
    description: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    days_of_week: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PricingRule":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            menu_item=int(data["menu_item"]),
            price_adjustment=_money_or_zero(data.get("price_adjustment")),
            percentage_adjustment=_money_or_zero(data.get("percentage_adjustment")),
            description=data.get("description") or "",
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            days_of_week=data.get("days_of_week"),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class AvailabilityChange:
    """Entrée de l'historique de disponibilité d'un article."""

    id: int
    menu_item: int
    is_available: bool
    changed_at: str = ""
    reason: Optional[str] = None
    changed_by: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AvailabilityChange":
        changed_by = data.get("changed_by")
        return cls(
            id=int(data["id"]),
            menu_item=int(data["menu_item"]),
            is_available=bool(data.get("is_available", False)),
            changed_at=data.get("changed_at") or "",
            reason=data.get("reason"),
            changed_by=None if changed_by is None else str(changed_by),
        )


# ══════════════════════════════════════════════════════════════════════════════
# CLIENTS / UTILISATEURS
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class Customer:
    id: int
    name: str
    email: str = ""
    phone: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Customer":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            created_at=data.get("created_at") or "",
        )


@dataclass
class UserSummary:
    """Compte utilisateur tel que listé par /api/users/."""

    id: int
    username: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    date_joined: str = ""
    role: Optional[str] = None
    permissions: List[str] = field(default_factory=list)
    sidebar: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserSummary":
        return cls(
            id=int(data["id"]),
            username=data.get("username") or "",
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            email=data.get("email") or "",
            date_joined=data.get("date_joined") or "",
            role=data.get("role"),
            permissions=list(data.get("permissions") or []),
            sidebar=list(data.get("sidebar") or []),
        )


# ══════════════════════════════════════════════════════════════════════════════
# TABLEAU DE BORD
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class DashboardStats:
    total_users: int = 0
    total_orders: int = 0
    total_revenue: Decimal = ZERO
    today_orders: int = 0
    today_revenue: Decimal = ZERO
    low_stock_items: int = 0
    pending_orders: int = 0
    completed_orders: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DashboardStats":
        return cls(
            total_users=int(data.get("totalUsers", 0)),
            total_orders=int(data.get("totalOrders", 0)),
            total_revenue=_money_or_zero(data.get("totalRevenue")),
            today_orders=int(data.get("todayOrders", 0)),
            today_revenue=_money_or_zero(data.get("todayRevenue")),
            low_stock_items=int(data.get("lowStockItems", 0)),
            pending_orders=int(data.get("pendingOrders", 0)),
            completed_orders=int(data.get("completedOrders", 0)),
        )
