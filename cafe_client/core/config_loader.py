"""
Cafe Client - Config Loader Implementation
Charge la configuration depuis un fichier YAML et les variables d'environnement.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .interfaces import ClientConfig, IConfigLoader


class ConfigLoader(IConfigLoader):
    """
    Chargement de la configuration client.

    Ordre de priorité: variables CAFE_* > fichier YAML > valeurs par défaut.

    Example:
        config = ConfigLoader().load("cafe.yaml")
    """

    # Variable d'environnement -> champ ClientConfig
    ENV_MAPPING: Dict[str, str] = {
        "CAFE_API_URL": "api_base_url",
        "CAFE_TOKEN_STORE": "token_store_path",
        "CAFE_STORAGE_NAMESPACE": "storage_namespace",
        "CAFE_CONNECT_TIMEOUT": "connect_timeout",
        "CAFE_REQUEST_TIMEOUT": "request_timeout",
        "CAFE_TAX_RATE": "tax_rate",
        "CAFE_CURRENCY_SYMBOL": "currency_symbol",
        "CAFE_ITEM_RETRY_ATTEMPTS": "item_retry_attempts",
        "CAFE_LOG_LEVEL": "log_level",
    }

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def load(self, path: Optional[str] = None) -> ClientConfig:
        """
        Charge la configuration.

        Args:
            path: Fichier YAML optionnel

        Returns:
            ClientConfig validée

        Raises:
            ConfigError: Fichier inexistant, YAML invalide ou validation échouée
        """
        raw: Dict[str, Any] = {}
        if path is not None:
            raw = self._read_file(Path(path))

        raw.update(self._read_environment())

        try:
            return ClientConfig(**raw)
        except ValidationError as e:
            raise ConfigError(f"Configuration invalide: {e}") from e

    def _read_file(self, config_file: Path) -> Dict[str, Any]:
        """Lit et vérifie le document YAML."""
        if not config_file.exists():
            raise ConfigError(f"Configuration non trouvée: {config_file}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Erreur de parsing YAML: {e}") from e
        except OSError as e:
            raise ConfigError(f"Erreur de lecture fichier: {e}") from e

        # Fichier vide = configuration par défaut
        if config is None:
            return {}

        if not isinstance(config, dict):
            raise ConfigError("Configuration doit être un objet YAML")

        return dict(config)

    def _read_environment(self) -> Dict[str, Any]:
        """Extrait les surcharges CAFE_* présentes."""
        overrides: Dict[str, Any] = {}
        for env_name, field_name in self.ENV_MAPPING.items():
            value = self._environ.get(env_name)
            if value:
                overrides[field_name] = value
        return overrides


def load_config(path: Optional[str] = None) -> ClientConfig:
    """Raccourci: configuration par défaut + fichier optionnel + environnement."""
    return ConfigLoader().load(path)
