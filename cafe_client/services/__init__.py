"""
LOT 5: Services REST

Enveloppes typées des ressources de l'API cafe. Toute erreur de réponse
est levée en ApiError (ApiNetworkError pour le transport).
"""

from .interfaces import (
    OrderStatus,
    OrderLine,
    Order,
    Category,
    MenuItem,
    ModifierGroup,
    Modifier,
    PricingRule,
    AvailabilityChange,
    Customer,
    UserSummary,
    DashboardStats,
)
from .base import BaseService
from .orders_service import OrdersService
from .menu_service import MenuService
from .customers_service import CustomersService, UsersService
from .admin_service import AdminService

__all__ = [
    # Models
    "OrderStatus",
    "OrderLine",
    "Order",
    "Category",
    "MenuItem",
    "ModifierGroup",
    "Modifier",
    "PricingRule",
    "AvailabilityChange",
    "Customer",
    "UserSummary",
    "DashboardStats",
    # Services
    "BaseService",
    "OrdersService",
    "MenuService",
    "CustomersService",
    "UsersService",
    "AdminService",
]
