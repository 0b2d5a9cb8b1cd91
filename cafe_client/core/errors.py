"""
Cafe Client - Hiérarchie d'erreurs commune.

Toutes les exceptions levées par le client héritent de CafeClientError,
ce qui permet aux écrans d'attraper une seule famille d'erreurs.
"""


class CafeClientError(Exception):
    """Erreur de base du client cafe."""

    pass


class ConfigError(CafeClientError):
    """Configuration invalide ou illisible."""

    pass
