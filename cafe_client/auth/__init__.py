"""
LOT 3: Authentication & Authorization

Tokens, session utilisateur et décisions permissions / rôles côté client.
"""

from .interfaces import (
    ITokenStore,
    ITokenInspector,
    IAuthSessionManager,
    IPermissionGate,
    UserRole,
    Permission,
    SessionState,
    ROLE_PERMISSIONS,
    ROLE_DESCRIPTIONS,
    Identity,
    TokenPair,
    DeviceInfo,
    ServerSession,
    AuditLogEntry,
    AuditLogPage,
    MfaSetup,
    parse_role,
    permission_tag,
)
from .token_store import MemoryTokenStore, FileTokenStore
from .token_inspector import TokenInspector
from .session_manager import AuthSessionManager, AuthError, normalize_login_response
from .permission_gate import PermissionGate, GateRule, SENSITIVE_PERMISSIONS
from .navigation import DEFAULT_LANDING, NavItem, RoleSlots, SIDEBAR, role_landing, visible_navigation, role_slots

__all__ = [
    # Interfaces
    "ITokenStore",
    "ITokenInspector",
    "IAuthSessionManager",
    "IPermissionGate",
    # Enums / tables
    "UserRole",
    "Permission",
    "SessionState",
    "ROLE_PERMISSIONS",
    "ROLE_DESCRIPTIONS",
    "SENSITIVE_PERMISSIONS",
    # Data classes
    "Identity",
    "TokenPair",
    "DeviceInfo",
    "ServerSession",
    "AuditLogEntry",
    "AuditLogPage",
    "MfaSetup",
    "GateRule",
    "NavItem",
    "DEFAULT_LANDING",
    "RoleSlots",
    "SIDEBAR",
    # Implementations
    "MemoryTokenStore",
    "FileTokenStore",
    "TokenInspector",
    "AuthSessionManager",
    "PermissionGate",
    # Functions
    "parse_role",
    "permission_tag",
    "normalize_login_response",
    "role_landing",
    "visible_navigation",
    "role_slots",
    # Exceptions
    "AuthError",
]
