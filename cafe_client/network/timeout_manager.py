"""
LOT 4: Network - Timeout Manager

Timeouts bornés par endpoint: aucune requête ne peut attendre indéfiniment.
"""

from typing import Dict, List, Optional

import httpx

from ..core.errors import ConfigError
from ..core.interfaces import MAX_CONNECT_TIMEOUT, MAX_REQUEST_TIMEOUT
from .interfaces import ITimeoutManager, TimeoutConfig, TimeoutType


class InvalidTimeoutError(ConfigError):
    """Configuration timeout invalide."""

    pass


class TimeoutManager(ITimeoutManager):
    """
    Gestion centralisée des timeouts.

    Example:
        manager = TimeoutManager(TimeoutConfig(request_timeout=10.0))
        manager.set_endpoint_timeout("/api/admin/dashboard/", TimeoutConfig(request_timeout=30.0))
        timeout = manager.httpx_timeout("/api/admin/dashboard/")
    """

    # Limites strictes
    MAX_CONNECTION_TIMEOUT: float = MAX_CONNECT_TIMEOUT
    MAX_REQUEST_TIMEOUT: float = MAX_REQUEST_TIMEOUT

    def __init__(self, default_config: Optional[TimeoutConfig] = None) -> None:
        self._default = default_config or TimeoutConfig()
        self._endpoint_configs: Dict[str, TimeoutConfig] = {}

        self._validate_config(self._default)

    def _validate_config(self, config: TimeoutConfig) -> None:
        """
        Raises:
            InvalidTimeoutError: Valeur nulle, négative ou au-delà des limites
        """
        if config.connection_timeout <= 0:
            raise InvalidTimeoutError("connection_timeout must be positive")

        if config.connection_timeout > self.MAX_CONNECTION_TIMEOUT:
            raise InvalidTimeoutError(
                f"connection_timeout ({config.connection_timeout}s) exceeds "
                f"maximum ({self.MAX_CONNECTION_TIMEOUT}s)"
            )

        if config.request_timeout <= 0:
            raise InvalidTimeoutError("request_timeout must be positive")

        if config.request_timeout > self.MAX_REQUEST_TIMEOUT:
            raise InvalidTimeoutError(
                f"request_timeout ({config.request_timeout}s) exceeds "
                f"maximum ({self.MAX_REQUEST_TIMEOUT}s)"
            )

    def _config_for(self, endpoint: Optional[str]) -> TimeoutConfig:
        if endpoint:
            # Correspondance exacte, puis par préfixe le plus long
            if endpoint in self._endpoint_configs:
                return self._endpoint_configs[endpoint]
            path = endpoint.split("?", 1)[0]
            matches = [key for key in self._endpoint_configs if path.startswith(key)]
            if matches:
                return self._endpoint_configs[max(matches, key=len)]
        return self._default

    def get_timeout(self, timeout_type: TimeoutType, endpoint: Optional[str] = None) -> float:
        """Timeout configuré (spécifique à l'endpoint ou défaut)."""
        config = self._config_for(endpoint)

        if timeout_type == TimeoutType.CONNECTION:
            return config.connection_timeout
        elif timeout_type == TimeoutType.REQUEST:
            return config.request_timeout
        else:
            raise ValueError(f"Unknown timeout type: {timeout_type}")

    def httpx_timeout(self, endpoint: Optional[str] = None) -> httpx.Timeout:
        """Timeout httpx prêt à l'emploi pour cet endpoint."""
        config = self._config_for(endpoint)
        return httpx.Timeout(config.request_timeout, connect=config.connection_timeout)

    def set_endpoint_timeout(self, endpoint: str, config: TimeoutConfig) -> None:
        """
        Configure un timeout spécifique (endpoint exact ou préfixe de chemin).

        Raises:
            InvalidTimeoutError: Si configuration invalide
            ValueError: Si endpoint vide
        """
        if not endpoint or not endpoint.strip():
            raise ValueError("endpoint cannot be empty")

        self._validate_config(config)
        self._endpoint_configs[endpoint] = config

    def get_all_endpoints(self) -> List[str]:
        return list(self._endpoint_configs.keys())

    def remove_endpoint_config(self, endpoint: str) -> bool:
        if endpoint in self._endpoint_configs:
            del self._endpoint_configs[endpoint]
            return True
        return False

    def get_default_config(self) -> TimeoutConfig:
        return self._default
