"""
LOT 4: Network - API Client

Client REST asynchrone (httpx) avec gestion transparente des credentials.

Comportement:
    - Bearer token attaché tant qu'il n'est pas expiré
    - Token expiré → un refresh proactif avant l'envoi (sauf login/refresh);
      échec → auth effacée, requête envoyée sans credentials
    - 401 → un seul refresh réactif puis un seul nouvel essai;
      échec → déconnexion forcée et erreur "Session expired"
    - Erreur de transport → "Network error", sans retry; les échecs survenus
      avant l'envoi (connexion, pool) sont distingués de ceux survenus après,
      où le serveur a pu traiter la requête
    - Aucune exception ne remonte de request(): résultat taggé ApiResponse
"""

import uuid
from typing import Any, Dict, Optional

import httpx

from ..core.errors import CafeClientError
from ..logging import get_logger
from .interfaces import ApiResponse, IApiClient, ITokenAuthority
from .timeout_manager import TimeoutManager

LOGIN_ENDPOINT = "/api/auth/login/"
REFRESH_ENDPOINT = "/api/auth/refresh/"
LOGOUT_ENDPOINT = "/api/auth/logout/"

NETWORK_ERROR_MESSAGE = "Network error"
TIMEOUT_ERROR_MESSAGE = "Request timed out"
SESSION_EXPIRED_MESSAGE = "Session expired. Please log in again."
GENERIC_ERROR_MESSAGE = "API error"

CORRELATION_HEADER = "X-Correlation-ID"


class ApiError(CafeClientError):
    """Erreur rapportée par l'API (statut non 2xx)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.payload = payload or {}
        super().__init__(message)


class ApiNetworkError(ApiError, ConnectionError):
    """Aucune réponse reçue (transport ou timeout); le serveur a pu traiter la requête."""

    pass


class ApiConnectError(ApiNetworkError):
    """La requête n'a jamais été envoyée (connexion impossible): rejouable sans risque."""

    pass


def unwrap(response: ApiResponse, default: Any = None) -> Any:
    """
    Convertit un ApiResponse en valeur ou en exception.

    Raises:
        ApiConnectError: Requête jamais envoyée
        ApiNetworkError: Échec de transport après envoi possible
        ApiError: Erreur serveur
    """
    if response.connect_error:
        raise ApiConnectError(response.error or NETWORK_ERROR_MESSAGE)
    if response.network_error:
        raise ApiNetworkError(response.error or NETWORK_ERROR_MESSAGE)
    if response.error is not None:
        raise ApiError(response.error, response.status_code, response.extra)
    return default if response.data is None else response.data


class ApiClient(IApiClient):
    """
    Client HTTP/JSON vers l'API cafe.

    L'autorité de token (gestionnaire de session) est branchée après
    construction, les deux composants dépendant l'un de l'autre.

    Example:
        async with ApiClient("http://127.0.0.1:8000") as api:
            api.bind_authority(session_manager)
            response = await api.get("/api/orders/")
    """

    NO_PROACTIVE_REFRESH = frozenset({LOGIN_ENDPOINT, REFRESH_ENDPOINT})
    NO_REACTIVE_REFRESH = frozenset({LOGIN_ENDPOINT, REFRESH_ENDPOINT, LOGOUT_ENDPOINT})

    def __init__(
        self,
        base_url: str,
        timeout_manager: Optional[TimeoutManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            base_url: URL racine de l'API
            timeout_manager: Timeouts par endpoint (défauts sinon)
            transport: Transport httpx (MockTransport en test)
        """
        self.base_url = base_url.rstrip("/")
        self._timeouts = timeout_manager or TimeoutManager()
        # Le cookie jar du client joue le rôle de credentials: include
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._authority: Optional[ITokenAuthority] = None
        self._logger = get_logger("cafe_client.network.api_client")

    def bind_authority(self, authority: ITokenAuthority) -> None:
        """Branche le gestionnaire de session (tokens, refresh, logout)."""
        self._authority = authority

    @property
    def authority(self) -> Optional[ITokenAuthority]:
        return self._authority

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ──────────────────────────────────────────────────────────────────────
    # Credentials
    # ──────────────────────────────────────────────────────────────────────

    @staticmethod
    def _path(endpoint: str) -> str:
        return endpoint.split("?", 1)[0]

    async def _usable_token(self, endpoint: str) -> Optional[str]:
        """Access token à envoyer, après refresh proactif éventuel."""
        authority = self._authority
        if authority is None:
            return None

        token = authority.current_access_token()
        if token and authority.access_token_expired(token):
            if self._path(endpoint) in self.NO_PROACTIVE_REFRESH:
                return None
            try:
                await authority.refresh_token()
            except CafeClientError as e:
                # Les endpoints publics doivent continuer à répondre
                self._logger.warn("Proactive refresh failed", endpoint=endpoint, error=str(e))
                authority.clear_auth()
                return None
            token = authority.current_access_token()

        if token and authority.access_token_expired(token):
            return None
        return token

    async def _force_logout(self, endpoint: str) -> ApiResponse:
        self._logger.info("Session expired, forcing logout", endpoint=endpoint)
        if self._authority is not None:
            await self._authority.logout()
        return ApiResponse(error=SESSION_EXPIRED_MESSAGE, status_code=401)

    # ──────────────────────────────────────────────────────────────────────
    # Requêtes
    # ──────────────────────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        retry: bool = True,
    ) -> ApiResponse:
        """
        Exécute une requête REST.

        Args:
            method: Verbe HTTP
            endpoint: Chemin relatif (ex: /api/orders/)
            json: Corps JSON optionnel
            params: Query string optionnelle
            retry: False pour l'essai rejoué après un 401

        Returns:
            ApiResponse (jamais d'exception)
        """
        token = await self._usable_token(endpoint)
        correlation_id = str(uuid.uuid4())

        headers = {
            "Content-Type": "application/json",
            CORRELATION_HEADER: correlation_id,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        log = self._logger.with_context(correlation_id=correlation_id)

        try:
            response = await self._http.request(
                method,
                endpoint,
                json=json,
                params=params,
                headers=headers,
                timeout=self._timeouts.httpx_timeout(self._path(endpoint)),
            )
        except (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout) as e:
            log.warn("Connection failed", method=method, endpoint=endpoint, error=str(e))
            message = TIMEOUT_ERROR_MESSAGE if isinstance(e, httpx.TimeoutException) else NETWORK_ERROR_MESSAGE
            return ApiResponse(error=message, network_error=True, connect_error=True)
        except httpx.TimeoutException as e:
            log.warn("Request timed out", method=method, endpoint=endpoint, error=str(e))
            return ApiResponse(error=TIMEOUT_ERROR_MESSAGE, network_error=True)
        except httpx.HTTPError as e:
            log.warn("Network error", method=method, endpoint=endpoint, error=str(e))
            return ApiResponse(error=NETWORK_ERROR_MESSAGE, network_error=True)

        log.debug("Response received", method=method, endpoint=endpoint, status=response.status_code)

        if response.status_code == 401 and self._path(endpoint) not in self.NO_REACTIVE_REFRESH:
            if not retry:
                return await self._force_logout(endpoint)
            if self._authority is None:
                return self._build_response(response)
            try:
                await self._authority.refresh_token()
            except CafeClientError as e:
                log.warn("Reactive refresh failed", endpoint=endpoint, error=str(e))
                return await self._force_logout(endpoint)
            return await self.request(method, endpoint, json=json, params=params, retry=False)

        return self._build_response(response)

    @staticmethod
    def _build_response(response: httpx.Response) -> ApiResponse:
        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_success:
            return ApiResponse(data=data, status_code=response.status_code)

        extra: Dict[str, Any] = {}
        message: Any = None
        if isinstance(data, dict):
            message = data.get("detail") or data.get("error")
            extra = {key: value for key, value in data.items() if key != "error"}

        return ApiResponse(
            error=str(message) if message else GENERIC_ERROR_MESSAGE,
            status_code=response.status_code,
            extra=extra,
        )

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, data: Any = None) -> ApiResponse:
        return await self.request("POST", endpoint, json=data)

    async def put(self, endpoint: str, data: Any = None) -> ApiResponse:
        return await self.request("PUT", endpoint, json=data)

    async def patch(self, endpoint: str, data: Any = None) -> ApiResponse:
        return await self.request("PATCH", endpoint, json=data)

    async def delete(self, endpoint: str) -> ApiResponse:
        return await self.request("DELETE", endpoint)
