"""
LOT 3: Token Inspector

Lecture des claims d'un JWT sans vérification de signature.

La signature est vérifiée par le serveur; côté client on ne lit que
l'expiration et les claims d'identité. Toute lecture impossible est traitée
comme un token expiré. Un exp non fini (NaN, infini) est illisible.
"""

import math
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import jwt

from .interfaces import ITokenInspector


# Aucune vérification: lecture seule des claims
_UNVERIFIED_OPTIONS: Dict[str, bool] = {
    "verify_signature": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


def _finite_timestamp(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


class TokenInspector(ITokenInspector):
    """
    Inspecteur de bearer tokens.

    Example:
        inspector = TokenInspector()
        if inspector.is_expired(access_token):
            ...
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Args:
            clock: Source de temps en secondes epoch (time.time par défaut)
        """
        self._clock = clock or time.time

    def now(self) -> float:
        return self._clock()

    def is_valid_format(self, token: Optional[str]) -> bool:
        """True si le token a trois segments séparés par des points."""
        if not token or not isinstance(token, str):
            return False
        return len(token.split(".")) == 3

    def decode(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """Décode le payload; None sur toute erreur."""
        if not self.is_valid_format(token):
            return None
        try:
            payload = jwt.decode(token, options=_UNVERIFIED_OPTIONS)
        except (jwt.PyJWTError, ValueError, TypeError):
            return None
        return payload if isinstance(payload, dict) else None

    def _expiry(self, token: Optional[str]) -> Optional[float]:
        payload = self.decode(token)
        if payload is None:
            return None
        return _finite_timestamp(payload.get("exp"))

    def is_expired(self, token: Optional[str]) -> bool:
        exp = self._expiry(token)
        if exp is None:
            return True
        return exp < self.now()

    def time_remaining(self, token: Optional[str]) -> int:
        exp = self._expiry(token)
        if exp is None:
            return 0
        return max(0, int(exp - self.now()))

    def format_expiry(self, token: Optional[str]) -> str:
        """Durée restante lisible: "Expired", "4m 10s" ou "42s"."""
        remaining = self.time_remaining(token)
        if remaining == 0:
            return "Expired"

        minutes, seconds = divmod(remaining, 60)
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"

    def token_info(self, token: Optional[str]) -> Dict[str, Any]:
        """Résumé de diagnostic d'un token (écran de debug)."""
        if not self.is_valid_format(token):
            return {"valid": False, "error": "Invalid token format"}

        payload = self.decode(token)
        if payload is None:
            return {"valid": False, "error": "Failed to decode token"}

        return {
            "valid": True,
            "is_expired": self.is_expired(token),
            "time_until_expiry": self.time_remaining(token),
            "formatted_expiry": self.format_expiry(token),
            "payload": payload,
            "issued_at": self._iso(payload.get("iat")),
            "expires_at": self._iso(payload.get("exp")),
        }

    @staticmethod
    def _iso(timestamp: Any) -> str:
        seconds = _finite_timestamp(timestamp)
        if seconds is None:
            return "Unknown"
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            return "Unknown"
