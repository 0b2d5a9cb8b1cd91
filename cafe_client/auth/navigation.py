"""
LOT 3: Navigation par rôle

Page d'accueil après login, entrées de menu visibles et emplacements
par rôle (admin / caisse / client).
"""

from dataclasses import dataclass
from typing import List, Optional

from .interfaces import RoleLike, UserRole, parse_role
from .permission_gate import GateRule, PermissionGate

DEFAULT_LANDING = "/menu"

_LANDING_BY_ROLE = {
    UserRole.OWNER: "/dashboard",
    UserRole.MANAGER: "/dashboard",
    UserRole.CASHIER: "/pos",
    UserRole.BARISTA: "/pos",
    UserRole.KITCHEN: "/pos",
}


@dataclass(frozen=True)
class NavItem:
    name: str
    href: str
    rule: GateRule


SIDEBAR: List[NavItem] = [
    NavItem("Dashboard", "/dashboard", PermissionGate.DASHBOARD),
    NavItem("Orders", "/orders", PermissionGate.ORDERS),
    NavItem("Menu", "/menu", PermissionGate.MENU),
    NavItem("Inventory", "/inventory", PermissionGate.INVENTORY),
    NavItem("Reports", "/reports", PermissionGate.REPORTS),
    NavItem("Settings", "/settings", PermissionGate.SETTINGS),
]


@dataclass(frozen=True)
class RoleSlots:
    """Emplacements d'interface à afficher pour l'utilisateur courant."""

    admin: bool = False
    cashier: bool = False
    customer: bool = False


def role_landing(role: Optional[RoleLike]) -> str:
    """Route de redirection après login (rôle inconnu → /menu)."""
    if role is None:
        return DEFAULT_LANDING
    try:
        return _LANDING_BY_ROLE.get(parse_role(role), DEFAULT_LANDING)
    except ValueError:
        return DEFAULT_LANDING


def visible_navigation(gate: PermissionGate) -> List[NavItem]:
    return [item for item in SIDEBAR if gate.allows(item.rule)]


def role_slots(gate: PermissionGate) -> RoleSlots:
    return RoleSlots(
        admin=gate.allows(PermissionGate.ADMIN),
        cashier=gate.check(roles=[UserRole.CASHIER]),
        customer=gate.check(roles=[UserRole.CUSTOMER]),
    )
