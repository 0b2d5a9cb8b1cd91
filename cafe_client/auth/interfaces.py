"""
LOT 3: Interfaces Auth

Types et contrats pour l'authentification, la session et les permissions
côté client.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union


class UserRole(Enum):
    """Rôles connus du backend cafe."""

    OWNER = "owner"
    MANAGER = "manager"
    BARISTA = "barista"
    CASHIER = "cashier"
    KITCHEN = "kitchen"
    CUSTOMER = "customer"


class Permission(Enum):
    """Capacités fines attribuées aux utilisateurs."""

    # Dashboard
    VIEW_DASHBOARD = "view_dashboard"

    # Orders
    VIEW_ORDERS = "view_orders"
    CREATE_ORDERS = "create_orders"
    EDIT_ORDERS = "edit_orders"
    DELETE_ORDERS = "delete_orders"
    MANAGE_ORDERS = "manage_orders"

    # Menu
    VIEW_MENU = "view_menu"
    CREATE_MENU_ITEMS = "create_menu_items"
    EDIT_MENU_ITEMS = "edit_menu_items"
    DELETE_MENU_ITEMS = "delete_menu_items"
    MANAGE_MENU = "manage_menu"

    # Inventory
    VIEW_INVENTORY = "view_inventory"
    EDIT_INVENTORY = "edit_inventory"
    MANAGE_INVENTORY = "manage_inventory"

    # Reports
    VIEW_REPORTS = "view_reports"
    EXPORT_REPORTS = "export_reports"
    MANAGE_REPORTS = "manage_reports"

    # Settings
    VIEW_SETTINGS = "view_settings"
    EDIT_SETTINGS = "edit_settings"
    MANAGE_SETTINGS = "manage_settings"

    # User Management
    VIEW_USERS = "view_users"
    CREATE_USERS = "create_users"
    EDIT_USERS = "edit_users"
    DELETE_USERS = "delete_users"
    MANAGE_USERS = "manage_users"

    # System
    VIEW_AUDIT_LOGS = "view_audit_logs"
    MANAGE_SYSTEM = "manage_system"


PermissionLike = Union[Permission, str]
RoleLike = Union[UserRole, str]


# Permissions par défaut de chaque rôle (owner = toutes)
ROLE_PERMISSIONS: Dict[UserRole, List[Permission]] = {
    UserRole.OWNER: list(Permission),
    UserRole.MANAGER: [
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_ORDERS, Permission.CREATE_ORDERS, Permission.EDIT_ORDERS, Permission.MANAGE_ORDERS,
        Permission.VIEW_MENU, Permission.CREATE_MENU_ITEMS, Permission.EDIT_MENU_ITEMS, Permission.MANAGE_MENU,
        Permission.VIEW_INVENTORY, Permission.EDIT_INVENTORY, Permission.MANAGE_INVENTORY,
        Permission.VIEW_REPORTS, Permission.EXPORT_REPORTS, Permission.MANAGE_REPORTS,
        Permission.VIEW_SETTINGS, Permission.EDIT_SETTINGS,
        Permission.VIEW_USERS, Permission.CREATE_USERS, Permission.EDIT_USERS,
        Permission.VIEW_AUDIT_LOGS,
    ],
    UserRole.BARISTA: [
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_ORDERS, Permission.EDIT_ORDERS,
        Permission.VIEW_MENU,
        Permission.VIEW_INVENTORY, Permission.EDIT_INVENTORY,
    ],
    UserRole.CASHIER: [
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_ORDERS, Permission.CREATE_ORDERS, Permission.EDIT_ORDERS,
        Permission.VIEW_MENU,
        Permission.VIEW_INVENTORY,
    ],
    UserRole.KITCHEN: [
        Permission.VIEW_DASHBOARD,
        Permission.VIEW_ORDERS, Permission.EDIT_ORDERS,
        Permission.VIEW_MENU,
        Permission.VIEW_INVENTORY, Permission.EDIT_INVENTORY,
    ],
    UserRole.CUSTOMER: [
        Permission.VIEW_MENU,
    ],
}

ROLE_DESCRIPTIONS: Dict[UserRole, str] = {
    UserRole.OWNER: "Full system access and control",
    UserRole.MANAGER: "Manage operations, staff, and business functions",
    UserRole.BARISTA: "Prepare drinks and manage orders",
    UserRole.CASHIER: "Process payments and manage customer orders",
    UserRole.KITCHEN: "Prepare food items and manage kitchen operations",
    UserRole.CUSTOMER: "View menu and place orders",
}


def permission_tag(permission: PermissionLike) -> str:
    """Valeur texte d'une permission (enum ou tag brut)."""
    if isinstance(permission, Permission):
        return permission.value
    return str(permission)


def parse_role(value: RoleLike) -> UserRole:
    """
    Convertit un rôle texte en UserRole.

    Raises:
        ValueError: Rôle inconnu
    """
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown role: {value!r}")


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Première clé présente parmi les variantes camelCase / snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Identity:
    """
    Utilisateur connecté.

    Attributes:
        id: Identifiant serveur
        role: Rôle unique de l'utilisateur
        permissions: Liste explicite (fait foi si présente, sinon table des rôles)
        verified: False pour une identité reconstruite depuis le token seul
    """

    id: str
    role: UserRole
    permissions: Optional[List[str]] = None
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    is_active: bool = True
    is_email_verified: bool = False
    is_mfa_enabled: bool = False
    last_login_at: Optional[str] = None
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)
    verified: bool = True

    @property
    def effective_permissions(self) -> List[str]:
        """Permissions applicables: liste explicite, sinon défauts du rôle."""
        if self.permissions is not None:
            return list(self.permissions)
        return [p.value for p in ROLE_PERMISSIONS[self.role]]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def placeholder(cls, user_id: Optional[Any]) -> "Identity":
        """
        Identité minimale non vérifiée (réponse login sans utilisateur).

        Ne doit jamais servir de base à une décision d'administration.
        """
        return cls(
            id=str(user_id) if user_id not in (None, "") else "me",
            role=UserRole.CUSTOMER,
            permissions=[Permission.VIEW_MENU.value],
            is_email_verified=True,
            verified=False,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], verified: Optional[bool] = None) -> "Identity":
        """
        Construit une identité depuis la réponse serveur ou le stockage.

        Raises:
            ValueError: Champ id/role manquant ou rôle inconnu
        """
        if not isinstance(data, Mapping):
            raise ValueError("identity must be a mapping")

        user_id = _pick(data, "id", "user_id", "pk")
        if user_id is None:
            raise ValueError("identity has no id")

        role_value = _pick(data, "role")
        if role_value is None:
            raise ValueError("identity has no role")

        permissions = _pick(data, "permissions")
        if permissions is not None:
            permissions = [permission_tag(p) for p in permissions]

        if verified is None:
            verified = bool(data.get("verified", True))

        return cls(
            id=str(user_id),
            role=parse_role(role_value),
            permissions=permissions,
            email=_pick(data, "email", default=""),
            first_name=_pick(data, "firstName", "first_name", default=""),
            last_name=_pick(data, "lastName", "last_name", default=""),
            is_active=bool(_pick(data, "isActive", "is_active", default=True)),
            is_email_verified=bool(_pick(data, "isEmailVerified", "is_email_verified", default=False)),
            is_mfa_enabled=bool(_pick(data, "isMFAEnabled", "is_mfa_enabled", default=False)),
            last_login_at=_pick(data, "lastLoginAt", "last_login_at", "last_login"),
            created_at=_pick(data, "createdAt", "created_at", "date_joined", default=_now_iso()),
            updated_at=_pick(data, "updatedAt", "updated_at", default=_now_iso()),
            verified=verified,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Forme sérialisée (camelCase, comme le backend)."""
        result: Dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "isActive": self.is_active,
            "isEmailVerified": self.is_email_verified,
            "isMFAEnabled": self.is_mfa_enabled,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "verified": self.verified,
        }
        if self.permissions is not None:
            result["permissions"] = list(self.permissions)
        if self.last_login_at is not None:
            result["lastLoginAt"] = self.last_login_at
        return result


@dataclass(frozen=True)
class TokenPair:
    """Couple access / refresh émis par le serveur."""

    access: str
    refresh: str


class SessionState(Enum):
    """Validité de la session locale."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    NEEDS_REFRESH = "needs_refresh"


@dataclass
class DeviceInfo:
    """Appareil rattaché à une session serveur."""

    type: str = "desktop"
    browser: str = ""
    os: str = ""
    device_id: str = ""


@dataclass
class ServerSession:
    """Session ouverte côté serveur (liste /api/auth/sessions/)."""

    id: str
    user_id: str
    device_info: DeviceInfo
    ip_address: str = ""
    user_agent: str = ""
    is_active: bool = True
    last_activity_at: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerSession":
        device = _pick(data, "deviceInfo", "device_info", default={}) or {}
        return cls(
            id=str(_pick(data, "id", default="")),
            user_id=str(_pick(data, "userId", "user_id", default="")),
            device_info=DeviceInfo(
                type=device.get("type", "desktop"),
                browser=device.get("browser", ""),
                os=device.get("os", ""),
                device_id=str(_pick(device, "deviceId", "device_id", default="")),
            ),
            ip_address=_pick(data, "ipAddress", "ip_address", default=""),
            user_agent=_pick(data, "userAgent", "user_agent", default=""),
            is_active=bool(_pick(data, "isActive", "is_active", default=True)),
            last_activity_at=_pick(data, "lastActivityAt", "last_activity_at"),
            created_at=_pick(data, "createdAt", "created_at"),
        )


@dataclass
class AuditLogEntry:
    """Entrée du journal d'audit serveur."""

    id: str
    user_id: str
    action: str
    resource: str
    timestamp: str
    resource_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    ip_address: str = ""
    user_agent: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditLogEntry":
        return cls(
            id=str(_pick(data, "id", default="")),
            user_id=str(_pick(data, "userId", "user_id", default="")),
            action=_pick(data, "action", default=""),
            resource=_pick(data, "resource", default=""),
            timestamp=_pick(data, "timestamp", default=""),
            resource_id=_pick(data, "resourceId", "resource_id"),
            details=dict(_pick(data, "details", default={}) or {}),
            ip_address=_pick(data, "ipAddress", "ip_address", default=""),
            user_agent=_pick(data, "userAgent", "user_agent", default=""),
        )


@dataclass
class AuditLogPage:
    """Page du journal d'audit."""

    logs: List[AuditLogEntry]
    total: int = 0
    page: int = 1
    total_pages: int = 1

    @classmethod
    def empty(cls) -> "AuditLogPage":
        return cls(logs=[], total=0, page=1, total_pages=1)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditLogPage":
        return cls(
            logs=[AuditLogEntry.from_dict(item) for item in data.get("logs") or []],
            total=int(data.get("total", 0)),
            page=int(data.get("page", 1)),
            total_pages=int(_pick(data, "totalPages", "total_pages", default=1)),
        )


@dataclass(frozen=True)
class MfaSetup:
    """Secret TOTP et QR code renvoyés par /api/auth/setup-mfa/."""

    qr_code: str
    secret: str


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class ITokenStore(ABC):
    """
    Persistance locale des tokens et de l'identité.

    Les lectures renvoient None en cas d'absence ou de stockage indisponible,
    jamais d'exception.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """True si le stockage client est utilisable."""
        pass

    @abstractmethod
    def set_tokens(self, access: str, refresh: str) -> None:
        """Écrit access et refresh ensemble."""
        pass

    @abstractmethod
    def set_user(self, identity: Identity) -> None:
        """Écrase l'identité stockée."""
        pass

    @abstractmethod
    def get_access_token(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_refresh_token(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_current_user(self) -> Optional[Identity]:
        pass

    @abstractmethod
    def clear_auth(self) -> None:
        """Supprime les trois entrées."""
        pass


class ITokenInspector(ABC):
    """Lecture des claims d'un bearer token, sans vérification de signature."""

    @abstractmethod
    def decode(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Décode le payload du token.

        Returns:
            Claims ou None si le token est illisible (jamais d'exception)
        """
        pass

    @abstractmethod
    def is_expired(self, token: Optional[str]) -> bool:
        """True si illisible, sans exp, ou exp dépassé."""
        pass

    @abstractmethod
    def time_remaining(self, token: Optional[str]) -> int:
        """Secondes restantes avant expiration (>= 0)."""
        pass


class IAuthSessionManager(ABC):
    """
    Source unique de vérité sur l'utilisateur connecté et ses droits.

    Seul composant autorisé à écrire dans le ITokenStore.
    """

    @abstractmethod
    async def login(self, username: str, password: str, remember_me: bool = False) -> Identity:
        pass

    @abstractmethod
    async def logout(self) -> None:
        pass

    @abstractmethod
    async def refresh_token(self) -> None:
        pass

    @abstractmethod
    def is_authenticated(self) -> bool:
        pass

    @abstractmethod
    def get_current_user(self) -> Optional[Identity]:
        pass

    @abstractmethod
    def has_role(self, role: RoleLike) -> bool:
        pass

    @abstractmethod
    def has_any_role(self, roles: Iterable[RoleLike]) -> bool:
        pass

    @abstractmethod
    def has_permission(self, permission: PermissionLike) -> bool:
        pass

    @abstractmethod
    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        pass

    @abstractmethod
    def has_all_permissions(self, permissions: Iterable[PermissionLike]) -> bool:
        pass


class IPermissionGate(ABC):
    """Décision booléenne d'affichage / d'accès."""

    @abstractmethod
    def check(
        self,
        permissions: Sequence[PermissionLike] = (),
        roles: Sequence[RoleLike] = (),
        require_all_permissions: bool = False,
        require_all_roles: bool = False,
    ) -> bool:
        pass
