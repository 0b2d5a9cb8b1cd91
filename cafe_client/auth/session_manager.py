"""
LOT 3: Auth Session Manager

Source unique de vérité sur l'utilisateur connecté et ses droits.

Seul composant qui écrit dans le ITokenStore. Sert aussi d'autorité de
token pour le client HTTP (refresh, effacement, déconnexion).

Cycle de vie:
    UNAUTHENTICATED → login → AUTHENTICATED → access expiré → NEEDS_REFRESH
    NEEDS_REFRESH → refresh OK → AUTHENTICATED | refresh KO → UNAUTHENTICATED
    logout() depuis n'importe quel état → UNAUTHENTICATED
"""

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..core.errors import CafeClientError
from ..logging import get_logger
from ..network.api_client import (
    LOGIN_ENDPOINT,
    LOGOUT_ENDPOINT,
    REFRESH_ENDPOINT,
    ApiClient,
    unwrap,
)
from ..network.interfaces import ITokenAuthority
from .interfaces import (
    AuditLogPage,
    IAuthSessionManager,
    Identity,
    ITokenStore,
    MfaSetup,
    PermissionLike,
    RoleLike,
    ServerSession,
    SessionState,
    TokenPair,
    parse_role,
    permission_tag,
)
from .token_inspector import TokenInspector

VERIFY_MFA_ENDPOINT = "/api/auth/verify-mfa/"
SESSIONS_ENDPOINT = "/api/auth/sessions/"
REVOKE_OTHERS_ENDPOINT = "/api/auth/sessions/revoke-all-other/"
AUDIT_LOGS_ENDPOINT = "/api/auth/audit-logs/"
PROFILE_ENDPOINT = "/api/auth/profile/"
CHANGE_PASSWORD_ENDPOINT = "/api/auth/change-password/"
TOGGLE_MFA_ENDPOINT = "/api/auth/toggle-mfa/"
SETUP_MFA_ENDPOINT = "/api/auth/setup-mfa/"

MFA_METHODS = ("totp", "sms", "email")

# Filtres du journal d'audit: nom Python → paramètre serveur
_AUDIT_FILTERS = {
    "user_id": "userId",
    "action": "action",
    "resource": "resource",
    "start_date": "startDate",
    "end_date": "endDate",
}


class AuthError(CafeClientError):
    """Échec d'authentification ou de renouvellement de session."""

    pass


def normalize_login_response(data: Any) -> Tuple[TokenPair, Optional[Mapping[str, Any]]]:
    """
    Ramène les deux formes de réponse login à un TokenPair.

    Formes acceptées:
        {"accessToken": ..., "refreshToken": ..., "user": {...}}
        {"access": ..., "refresh": ...}

    Returns:
        (tokens, identité brute ou None)

    Raises:
        AuthError: Corps non objet, ou token manquant
    """
    if not isinstance(data, Mapping):
        raise AuthError("unrecognized login response")

    access = data.get("accessToken") or data.get("access")
    refresh = data.get("refreshToken") or data.get("refresh")
    if not access or not refresh:
        raise AuthError("tokens missing")

    user = data.get("user")
    if not isinstance(user, Mapping):
        user = None
    return TokenPair(access=str(access), refresh=str(refresh)), user


class AuthSessionManager(IAuthSessionManager, ITokenAuthority):
    """
    Gestionnaire de session côté client.

    Example:
        manager = AuthSessionManager(api, MemoryTokenStore())
        identity = await manager.login("alice", "secret")
        if manager.has_permission(Permission.CREATE_ORDERS):
            ...
    """

    def __init__(
        self,
        api_client: ApiClient,
        store: ITokenStore,
        inspector: Optional[TokenInspector] = None,
    ) -> None:
        """
        Args:
            api_client: Client HTTP (l'autorité y est branchée ici)
            store: Stockage des tokens et de l'identité
            inspector: Lecteur de claims (horloge injectable)
        """
        self._api = api_client
        self._store = store
        self._inspector = inspector or TokenInspector()
        self._refresh_task: Optional["asyncio.Future[None]"] = None
        self._logger = get_logger("cafe_client.auth.session_manager")

        api_client.bind_authority(self)

    @property
    def store(self) -> ITokenStore:
        return self._store

    @property
    def inspector(self) -> TokenInspector:
        return self._inspector

    # ──────────────────────────────────────────────────────────────────────
    # Login / logout
    # ──────────────────────────────────────────────────────────────────────

    def _establish(self, data: Any) -> Identity:
        tokens, user = normalize_login_response(data)

        if user is not None:
            try:
                identity = Identity.from_dict(user, verified=True)
            except ValueError as e:
                raise AuthError(f"invalid user in login response: {e}") from e
        else:
            claims = self._inspector.decode(tokens.access) or {}
            identity = Identity.placeholder(claims.get("user_id") or claims.get("sub"))
            self._logger.warn("Login response without user, using placeholder identity", user_id=identity.id)

        self._store.set_tokens(tokens.access, tokens.refresh)
        self._store.set_user(identity)
        return identity

    async def login(self, username: str, password: str, remember_me: bool = False) -> Identity:
        """
        Ouvre une session.

        Raises:
            AuthError: Identifiants refusés, réponse invalide ou tokens manquants
        """
        response = await self._api.post(
            LOGIN_ENDPOINT,
            {"username": username, "password": password, "rememberMe": remember_me},
        )
        if response.error is not None:
            self._logger.warn("Login rejected", status=response.status_code, error=response.error)
            raise AuthError(response.error)

        identity = self._establish(response.data)
        self._logger.info("Login succeeded", user_id=identity.id, role=identity.role.value)
        return identity

    async def verify_mfa(self, code: str, method: str = "totp") -> Identity:
        """
        Termine un login à deux facteurs.

        Raises:
            ValueError: Méthode inconnue
            AuthError: Code refusé ou réponse invalide
        """
        if method not in MFA_METHODS:
            raise ValueError(f"Unknown MFA method: {method!r}")

        response = await self._api.post(VERIFY_MFA_ENDPOINT, {"code": code, "method": method})
        if response.error is not None:
            raise AuthError(response.error)

        identity = self._establish(response.data)
        self._logger.info("MFA verified", user_id=identity.id, method=method)
        return identity

    async def logout(self) -> None:
        """Notifie le serveur (best-effort) puis efface toujours la session."""
        identity = self._store.get_current_user()
        try:
            response = await self._api.post(LOGOUT_ENDPOINT)
            if response.error is not None:
                self._logger.warn("Logout call failed", status=response.status_code, error=response.error)
        finally:
            self._store.clear_auth()
        self._logger.info("Logged out", user_id=identity.id if identity else None)

    # ──────────────────────────────────────────────────────────────────────
    # Refresh (ITokenAuthority)
    # ──────────────────────────────────────────────────────────────────────

    async def refresh_token(self) -> None:
        """
        Renouvelle l'access token.

        Les appels concurrents partagent un seul appel réseau.

        Raises:
            AuthError: "no refresh token" ou "refresh failed"
        """
        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._perform_refresh())
            self._refresh_task.add_done_callback(self._refresh_finished)
        await asyncio.shield(self._refresh_task)

    def _refresh_finished(self, task: "asyncio.Future[None]") -> None:
        if self._refresh_task is task:
            self._refresh_task = None

    async def _perform_refresh(self) -> None:
        refresh = self._store.get_refresh_token()
        if not refresh:
            raise AuthError("no refresh token")

        response = await self._api.post(REFRESH_ENDPOINT, {"refresh": refresh})
        data = response.data if isinstance(response.data, Mapping) else {}
        access = data.get("access") or data.get("accessToken")

        if response.error is not None or not access:
            self._logger.warn("Token refresh failed", status=response.status_code, error=response.error)
            self._store.clear_auth()
            raise AuthError("refresh failed")

        # Rotation: le serveur peut renvoyer un nouveau refresh token
        rotated = data.get("refresh") or data.get("refreshToken") or refresh
        self._store.set_tokens(str(access), str(rotated))
        self._logger.debug("Access token refreshed")

    def current_access_token(self) -> Optional[str]:
        return self._store.get_access_token()

    def access_token_expired(self, token: str) -> bool:
        return self._inspector.is_expired(token)

    def clear_auth(self) -> None:
        self._store.clear_auth()

    # ──────────────────────────────────────────────────────────────────────
    # État
    # ──────────────────────────────────────────────────────────────────────

    def session_state(self, clear_unreadable: bool = True) -> SessionState:
        """
        État courant de la session locale.

        Args:
            clear_unreadable: Efface la session si l'access token est illisible
                (False pour une lecture sans effet de bord)
        """
        token = self._store.get_access_token()
        identity = self._store.get_current_user()
        if not token or identity is None:
            return SessionState.UNAUTHENTICATED

        if self._inspector.decode(token) is None:
            if clear_unreadable:
                self._logger.warn("Stored access token is unreadable, clearing session")
                self._store.clear_auth()
            return SessionState.UNAUTHENTICATED

        if self._inspector.is_expired(token):
            if self._store.get_refresh_token():
                return SessionState.NEEDS_REFRESH
            return SessionState.UNAUTHENTICATED

        return SessionState.AUTHENTICATED

    def is_authenticated(self) -> bool:
        return self.session_state() is SessionState.AUTHENTICATED

    def get_current_user(self) -> Optional[Identity]:
        return self._store.get_current_user()

    def effective_permissions(self) -> List[str]:
        identity = self._store.get_current_user()
        if identity is None:
            return []
        return identity.effective_permissions

    def has_role(self, role: RoleLike) -> bool:
        identity = self._store.get_current_user()
        if identity is None:
            return False
        try:
            return identity.role is parse_role(role)
        except ValueError:
            return False

    def has_any_role(self, roles: Iterable[RoleLike]) -> bool:
        return any(self.has_role(role) for role in roles)

    def has_all_roles(self, roles: Iterable[RoleLike]) -> bool:
        return all(self.has_role(role) for role in roles)

    def has_permission(self, permission: PermissionLike) -> bool:
        return permission_tag(permission) in self.effective_permissions()

    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        granted = set(self.effective_permissions())
        return any(permission_tag(p) in granted for p in permissions)

    def has_all_permissions(self, permissions: Iterable[PermissionLike]) -> bool:
        granted = set(self.effective_permissions())
        return all(permission_tag(p) in granted for p in permissions)

    # ──────────────────────────────────────────────────────────────────────
    # Sessions serveur, audit, profil
    # ──────────────────────────────────────────────────────────────────────

    async def get_user_sessions(self) -> List[ServerSession]:
        data = unwrap(await self._api.get(SESSIONS_ENDPOINT), default=[])
        return [ServerSession.from_dict(item) for item in data]

    async def revoke_session(self, session_id: str) -> None:
        """
        Raises:
            ApiError: Erreur serveur, transmise telle quelle
        """
        unwrap(await self._api.delete(f"{SESSIONS_ENDPOINT}{session_id}/"))
        self._logger.info("Session revoked", session_id=session_id)

    async def revoke_all_other_sessions(self) -> None:
        unwrap(await self._api.post(REVOKE_OTHERS_ENDPOINT))
        self._logger.info("All other sessions revoked")

    async def get_audit_logs(self, page: int = 1, limit: int = 50, **filters: Any) -> AuditLogPage:
        """
        Page du journal d'audit.

        Args:
            page: Numéro de page (1-based)
            limit: Taille de page
            filters: user_id, action, resource, start_date, end_date

        Raises:
            ValueError: Filtre inconnu
        """
        params: Dict[str, Any] = {"page": page, "limit": limit}
        for name, value in filters.items():
            if name not in _AUDIT_FILTERS:
                raise ValueError(f"Unknown audit log filter: {name}")
            if value is not None:
                params[_AUDIT_FILTERS[name]] = value

        data = unwrap(await self._api.get(AUDIT_LOGS_ENDPOINT, params=params))
        if not isinstance(data, Mapping):
            return AuditLogPage.empty()
        return AuditLogPage.from_dict(data)

    async def update_profile(self, changes: Mapping[str, Any]) -> Identity:
        data = unwrap(await self._api.put(PROFILE_ENDPOINT, dict(changes)))
        if not isinstance(data, Mapping):
            raise AuthError("profile update failed")

        try:
            identity = Identity.from_dict(data, verified=True)
        except ValueError as e:
            raise AuthError(f"profile update failed: {e}") from e
        self._store.set_user(identity)
        return identity

    async def change_password(self, current_password: str, new_password: str) -> None:
        unwrap(
            await self._api.post(
                CHANGE_PASSWORD_ENDPOINT,
                {"current_password": current_password, "new_password": new_password},
            )
        )
        self._logger.info("Password changed")

    async def toggle_mfa(self, enabled: bool) -> None:
        unwrap(await self._api.post(TOGGLE_MFA_ENDPOINT, {"enabled": enabled}))

        identity = self._store.get_current_user()
        if identity is not None:
            identity.is_mfa_enabled = enabled
            self._store.set_user(identity)

    async def setup_mfa(self) -> MfaSetup:
        data = unwrap(await self._api.post(SETUP_MFA_ENDPOINT))
        if not isinstance(data, Mapping):
            raise AuthError("MFA setup failed")
        return MfaSetup(
            qr_code=str(data.get("qrCode") or data.get("qr_code") or ""),
            secret=str(data.get("secret") or ""),
        )
