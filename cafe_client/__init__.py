"""
Cafe Client

Noyau client d'une application de caisse / back-office de café:
session et permissions, client REST avec refresh transparent, panier
et soumission de commande.
"""

from .client import CafeClient
from .core.config_loader import ConfigLoader, load_config
from .core.errors import CafeClientError, ConfigError
from .core.interfaces import ClientConfig

__version__ = "0.1.0"

__all__ = [
    "CafeClient",
    "ClientConfig",
    "ConfigLoader",
    "load_config",
    "CafeClientError",
    "ConfigError",
]
