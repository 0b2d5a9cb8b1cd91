"""
LOT 3: Permission Gate

Décision booléenne "cet utilisateur peut-il voir / faire X".

Même évaluation pour l'affichage conditionnel et pour la garde de route:
    1. Non authentifié → refus
    2. Permissions demandées → ALL ou ANY selon le flag, refus sinon
    3. Rôles demandés → ALL ou ANY selon le flag, refus sinon
    4. Autorisé

Sans effet de bord: l'identité est relue dans le stockage à chaque appel
et un token illisible refuse l'accès sans effacer la session.
"""

from dataclasses import dataclass
from typing import Any, FrozenSet, Optional, Sequence, Tuple

from .interfaces import (
    Identity,
    IPermissionGate,
    Permission,
    PermissionLike,
    RoleLike,
    SessionState,
    UserRole,
    parse_role,
    permission_tag,
)
from .session_manager import AuthSessionManager


# Jamais accordées à une identité non vérifiée (placeholder)
SENSITIVE_PERMISSIONS: FrozenSet[str] = frozenset(
    p.value
    for p in (
        Permission.DELETE_ORDERS,
        Permission.MANAGE_ORDERS,
        Permission.DELETE_MENU_ITEMS,
        Permission.MANAGE_MENU,
        Permission.MANAGE_INVENTORY,
        Permission.EXPORT_REPORTS,
        Permission.MANAGE_REPORTS,
        Permission.EDIT_SETTINGS,
        Permission.MANAGE_SETTINGS,
        Permission.VIEW_USERS,
        Permission.CREATE_USERS,
        Permission.EDIT_USERS,
        Permission.DELETE_USERS,
        Permission.MANAGE_USERS,
        Permission.VIEW_AUDIT_LOGS,
        Permission.MANAGE_SYSTEM,
    )
)


@dataclass(frozen=True)
class GateRule:
    """Exigence réutilisable (garde de page ou de composant)."""

    permissions: Tuple[PermissionLike, ...] = ()
    roles: Tuple[RoleLike, ...] = ()
    require_all_permissions: bool = False
    require_all_roles: bool = False


class PermissionGate(IPermissionGate):
    """
    Garde permissions / rôles.

    Example:
        gate = PermissionGate(session_manager)
        if gate.check(permissions=[Permission.VIEW_ORDERS]):
            ...
        gate.allows(PermissionGate.ADMIN)
    """

    DASHBOARD = GateRule(permissions=(Permission.VIEW_DASHBOARD,))
    ORDERS = GateRule(permissions=(Permission.VIEW_ORDERS,))
    MENU = GateRule(permissions=(Permission.VIEW_MENU,))
    INVENTORY = GateRule(permissions=(Permission.VIEW_INVENTORY,))
    REPORTS = GateRule(permissions=(Permission.VIEW_REPORTS,))
    SETTINGS = GateRule(permissions=(Permission.VIEW_SETTINGS,))
    ADMIN = GateRule(roles=(UserRole.OWNER, UserRole.MANAGER))
    OWNER = GateRule(roles=(UserRole.OWNER,))

    def __init__(self, session: AuthSessionManager) -> None:
        self._session = session

    def _identity(self) -> Optional[Identity]:
        if self._session.session_state(clear_unreadable=False) is not SessionState.AUTHENTICATED:
            return None
        return self._session.get_current_user()

    @staticmethod
    def _permission_granted(identity: Identity, permission: PermissionLike) -> bool:
        tag = permission_tag(permission)
        if not identity.verified and tag in SENSITIVE_PERMISSIONS:
            return False
        return tag in identity.effective_permissions

    @staticmethod
    def _role_granted(identity: Identity, role: RoleLike) -> bool:
        try:
            wanted = parse_role(role)
        except ValueError:
            return False
        if not identity.verified and wanted is not UserRole.CUSTOMER:
            return False
        return identity.role is wanted

    def check(
        self,
        permissions: Sequence[PermissionLike] = (),
        roles: Sequence[RoleLike] = (),
        require_all_permissions: bool = False,
        require_all_roles: bool = False,
    ) -> bool:
        """
        Args:
            permissions: Permissions exigées (liste vide = pas de contrainte)
            roles: Rôles exigés (liste vide = pas de contrainte)
            require_all_permissions: ALL au lieu de ANY pour les permissions
            require_all_roles: ALL au lieu de ANY pour les rôles

        Returns:
            True si toutes les contraintes fournies passent
        """
        identity = self._identity()
        if identity is None:
            return False

        if permissions:
            combine = all if require_all_permissions else any
            if not combine(self._permission_granted(identity, p) for p in permissions):
                return False

        if roles:
            combine = all if require_all_roles else any
            if not combine(self._role_granted(identity, r) for r in roles):
                return False

        return True

    def allows(self, rule: GateRule) -> bool:
        return self.check(
            permissions=rule.permissions,
            roles=rule.roles,
            require_all_permissions=rule.require_all_permissions,
            require_all_roles=rule.require_all_roles,
        )

    def render(
        self,
        rule: GateRule,
        content: Any,
        fallback: Any = None,
        show_fallback: bool = False,
    ) -> Any:
        """Contenu si autorisé, sinon fallback (si show_fallback) ou None."""
        if self.allows(rule):
            return content
        return fallback if show_fallback else None
