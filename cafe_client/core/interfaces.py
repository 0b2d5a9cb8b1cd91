"""
Cafe Client - LOT 1 Core Interfaces
Configuration du client et contrat de chargement.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


# Bornes strictes partagées avec le TimeoutManager
MAX_CONNECT_TIMEOUT = 10.0
MAX_REQUEST_TIMEOUT = 60.0


class EndpointTimeout(BaseModel):
    """Surcharge de timeout pour un endpoint précis."""

    connect_timeout: float = 5.0
    request_timeout: float = 15.0


class ClientConfig(BaseModel):
    """
    Configuration runtime du client cafe.

    Attributes:
        api_base_url: URL racine de l'API REST externe
        token_store_path: Fichier JSON de persistance des tokens
        storage_namespace: Préfixe des clés de stockage (cafe_access_token...)
        connect_timeout: Timeout connexion par défaut (secondes)
        request_timeout: Timeout requête par défaut (secondes)
        endpoint_timeouts: Surcharges par endpoint
        tax_rate: Taux de taxe appliqué au panier (0 à 1)
        currency_symbol: Symbole affiché devant les montants
        order_number_prefix: Préfixe des numéros de commande générés
        order_number_max_length: Longueur max imposée par la colonne serveur
        item_retry_attempts: Tentatives par ligne de commande (erreurs réseau)
        log_level: Niveau minimum de log
    """

    api_base_url: str = "http://127.0.0.1:8000"
    token_store_path: str = "~/.cafe_client/auth.json"
    storage_namespace: str = "cafe"
    connect_timeout: float = 5.0
    request_timeout: float = 15.0
    endpoint_timeouts: Dict[str, EndpointTimeout] = Field(default_factory=dict)
    tax_rate: Decimal = Decimal("0")
    currency_symbol: str = "₹"
    order_number_prefix: str = "P"
    order_number_max_length: int = 20
    item_retry_attempts: int = 3
    log_level: str = "INFO"

    @field_validator("api_base_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("tax_rate")
    @classmethod
    def _check_tax_rate(cls, value: Decimal) -> Decimal:
        if value < 0 or value > 1:
            raise ValueError("tax_rate must be between 0 and 1")
        return value

    @field_validator("connect_timeout", "request_timeout")
    @classmethod
    def _check_timeout(cls, value: float, info: ValidationInfo) -> float:
        if value <= 0:
            raise ValueError("timeouts must be positive")
        limit = MAX_CONNECT_TIMEOUT if info.field_name == "connect_timeout" else MAX_REQUEST_TIMEOUT
        if value > limit:
            raise ValueError(f"{info.field_name} ({value}s) exceeds maximum ({limit}s)")
        return value

    @field_validator("order_number_max_length")
    @classmethod
    def _check_order_number_length(cls, value: int) -> int:
        if value < 8:
            raise ValueError("order_number_max_length must be at least 8")
        return value

    @field_validator("item_retry_attempts")
    @classmethod
    def _check_retry_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("item_retry_attempts must be at least 1")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level == "WARNING":
            level = "WARN"
        if level not in {"DEBUG", "INFO", "WARN", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

    def storage_key(self, name: str) -> str:
        """Clé de stockage namespacée (ex: cafe_access_token)."""
        return f"{self.storage_namespace}_{name}"


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IConfigLoader(ABC):
    """Charge la configuration client depuis fichier et environnement."""

    @abstractmethod
    def load(self, path: Optional[str] = None) -> ClientConfig:
        """
        Charge et valide la configuration.

        Raises:
            ConfigError: Fichier absent, YAML invalide ou valeurs hors limites
        """
        pass
