"""
LOT 4: Network - Interfaces

Contrats de la couche HTTP:
- Résultat taggé ApiResponse (jamais d'exception côté client HTTP)
- Timeouts bornés par endpoint
- Retry avec backoff pour les erreurs de transport
- Autorité de token (refresh, logout) branchée sur le client HTTP
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

T = TypeVar("T")


class TimeoutType(Enum):
    """Types de timeout supportés."""

    CONNECTION = "connection"
    REQUEST = "request"


@dataclass
class TimeoutConfig:
    """Configuration des timeouts (secondes)."""

    connection_timeout: float = 5.0
    request_timeout: float = 15.0


@dataclass
class RetryConfig:
    """Configuration des retries."""

    max_attempts: int = 3
    initial_delay: float = 0.5
    max_delay: float = 5.0
    exponential_base: float = 2.0
    retryable_exceptions: tuple = field(
        default_factory=lambda: (ConnectionError, TimeoutError)
    )


@dataclass
class RetryResult:
    """Résultat d'une opération avec retry."""

    success: bool
    result: Optional[Any]
    attempts: int
    total_delay: float
    last_error: Optional[Exception]


@dataclass
class ApiResponse:
    """
    Résultat taggé d'un appel REST.

    Attributes:
        data: Corps JSON décodé (None si absent ou non JSON)
        error: Message d'erreur (None si succès)
        status_code: Statut HTTP (None si aucune réponse reçue)
        extra: Champs supplémentaires renvoyés avec une erreur
        network_error: True si échec de transport ou timeout
        connect_error: True si la requête n'a jamais quitté le client
            (connexion refusée, timeout de connexion ou de pool)
    """

    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    network_error: bool = False
    connect_error: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class ITokenAuthority(ABC):
    """
    Accès aux credentials pour le client HTTP.

    Implémenté par le gestionnaire de session, seul propriétaire des tokens.
    """

    @abstractmethod
    def current_access_token(self) -> Optional[str]:
        """Access token stocké ou None."""
        pass

    @abstractmethod
    def access_token_expired(self, token: str) -> bool:
        """True si le token ne doit plus être envoyé."""
        pass

    @abstractmethod
    async def refresh_token(self) -> None:
        """
        Obtient un nouvel access token.

        Raises:
            AuthError: Refresh impossible
        """
        pass

    @abstractmethod
    def clear_auth(self) -> None:
        """Efface tokens et identité."""
        pass

    @abstractmethod
    async def logout(self) -> None:
        """Déconnexion (notification serveur best-effort + effacement)."""
        pass


class IApiClient(ABC):
    """Interface client REST."""

    @abstractmethod
    async def request(
        self,
        method: str,
        endpoint: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        """
        Exécute une requête; ne lève jamais d'exception.

        Returns:
            ApiResponse avec data ou error
        """
        pass


class ITimeoutManager(ABC):
    """Interface gestion timeouts."""

    @abstractmethod
    def get_timeout(self, timeout_type: TimeoutType, endpoint: Optional[str] = None) -> float:
        pass

    @abstractmethod
    def set_endpoint_timeout(self, endpoint: str, config: TimeoutConfig) -> None:
        pass


class IRetryHandler(ABC):
    """Interface gestion retries."""

    @abstractmethod
    async def execute_with_retry(
        self,
        func: Callable[..., T],
        *args: Any,
        config: Optional[RetryConfig] = None,
        **kwargs: Any,
    ) -> RetryResult:
        pass

    @abstractmethod
    def calculate_delay(self, attempt: int, config: RetryConfig) -> float:
        pass
