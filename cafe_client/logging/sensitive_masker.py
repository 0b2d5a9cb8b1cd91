"""
LOT 6: Logging - Sensitive Masker

Masquage des tokens, mots de passe et cookies avant écriture.

Deux règles:
    - clé sensible (password, refresh_token, Authorization...) → valeur masquée
    - valeur ressemblant à un JWT ou à un header Bearer → masquée quelle que
      soit la clé (ex: un token recopié dans un message d'erreur)
"""

import re
from typing import Any, Dict, List, Optional

from .interfaces import ISensitiveMasker

# header.payload.signature en base64url; "eyJ" = début de '{"' encodé
_JWT_RE = re.compile(r"eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*")
_BEARER_RE = re.compile(r"(?i)\bbearer\s+\S+")


class SensitiveMasker(ISensitiveMasker):
    """
    Example:
        masker = SensitiveMasker()
        masker.mask({"password": "secret123", "note": "Bearer eyJhbGciOi..."})
        # {"password": "***MASKED***", "note": "***MASKED***"}
    """

    def __init__(self, additional_patterns: Optional[List[str]] = None) -> None:
        self._patterns: List[str] = []
        for pattern in list(self.SENSITIVE_PATTERNS) + list(additional_patterns or []):
            if pattern and pattern.strip():
                self._register(pattern)

    def _register(self, pattern: str) -> None:
        normalized = pattern.strip().lower()
        if normalized not in self._patterns:
            self._patterns.append(normalized)

    @property
    def patterns(self) -> List[str]:
        return list(self._patterns)

    def mask(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copie masquée de data (récursive sur dicts et listes)."""
        if not isinstance(data, dict):
            return data
        return {
            key: self.MASK_VALUE if self.is_sensitive_key(str(key)) else self._mask_value(value)
            for key, value in data.items()
        }

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.mask(value)
        if isinstance(value, (list, tuple)):
            return [self._mask_value(item) for item in value]
        if isinstance(value, str):
            return self.mask_text(value)
        return value

    def mask_text(self, text: str) -> str:
        """Remplace les JWT et headers Bearer présents dans un texte libre."""
        text = _BEARER_RE.sub(self.MASK_VALUE, text)
        return _JWT_RE.sub(self.MASK_VALUE, text)

    def is_sensitive_key(self, key: str) -> bool:
        """True si la clé contient un pattern sensible (insensible à la casse)."""
        if not key:
            return False
        lowered = key.lower()
        return any(pattern in lowered for pattern in self._patterns)

    def add_pattern(self, pattern: str) -> None:
        """
        Raises:
            ValueError: Pattern vide
        """
        if not pattern or not pattern.strip():
            raise ValueError("Pattern cannot be empty")
        self._register(pattern)
