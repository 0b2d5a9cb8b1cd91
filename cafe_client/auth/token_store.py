"""
LOT 3: Token Store Implementation

Persistance locale de l'access token, du refresh token et de l'identité.

Deux implémentations:
    MemoryTokenStore: stockage en mémoire (tests, processus éphémères)
    FileTokenStore: document JSON sur disque, écriture atomique
"""

import json
import os
from abc import abstractmethod
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from ..logging import get_logger
from .interfaces import ITokenStore, Identity

logger = get_logger("cafe_client.auth.token_store")

DEFAULT_NAMESPACE = "cafe"


class _KeyedTokenStore(ITokenStore):
    """Logique commune: trois clés namespacées dans un document clé/valeur."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace
        self.access_key = f"{namespace}_access_token"
        self.refresh_key = f"{namespace}_refresh_token"
        self.user_key = f"{namespace}_user"

    @abstractmethod
    def _read(self) -> Dict[str, Any]:
        """Document complet (vide si absent)."""
        pass

    @abstractmethod
    def _write(self, document: Dict[str, Any]) -> None:
        """Remplace le document complet."""
        pass

    def set_tokens(self, access: str, refresh: str) -> None:
        if not self.is_available():
            return
        document = self._read()
        document[self.access_key] = access
        document[self.refresh_key] = refresh
        self._write(document)

    def set_user(self, identity: Identity) -> None:
        if not self.is_available():
            return
        document = self._read()
        document[self.user_key] = json.dumps(identity.to_dict())
        self._write(document)

    def get_access_token(self) -> Optional[str]:
        if not self.is_available():
            return None
        return self._read().get(self.access_key) or None

    def get_refresh_token(self) -> Optional[str]:
        if not self.is_available():
            return None
        return self._read().get(self.refresh_key) or None

    def get_current_user(self) -> Optional[Identity]:
        if not self.is_available():
            return None

        raw = self._read().get(self.user_key)
        if not raw:
            return None

        try:
            return Identity.from_dict(json.loads(raw))
        except (ValueError, TypeError) as e:
            # Identité corrompue = pas d'identité
            logger.warn("Stored identity is unreadable", error=str(e))
            return None

    def clear_auth(self) -> None:
        if not self.is_available():
            return
        document = self._read()
        for key in (self.access_key, self.refresh_key, self.user_key):
            document.pop(key, None)
        self._write(document)


class MemoryTokenStore(_KeyedTokenStore):
    """
    Token store en mémoire.

    Example:
        store = MemoryTokenStore()
        store.set_tokens("access", "refresh")
    """

    def __init__(self, namespace: str = DEFAULT_NAMESPACE, available: bool = True):
        """
        Args:
            namespace: Préfixe des clés
            available: False simule l'absence de contexte client
        """
        super().__init__(namespace)
        self._available = available
        self._document: Dict[str, Any] = {}

    def is_available(self) -> bool:
        return self._available

    def _read(self) -> Dict[str, Any]:
        return dict(self._document)

    def _write(self, document: Dict[str, Any]) -> None:
        # Remplacement en un bloc: les lecteurs ne voient jamais un état partiel
        self._document = dict(document)


class FileTokenStore(_KeyedTokenStore):
    """
    Token store persistant dans un fichier JSON.

    Chaque écriture passe par un fichier temporaire puis os.replace, ce qui
    rend les deux tokens visibles en même temps.

    Une écriture impossible (disque plein, permissions) est journalisée et
    le store se comporte comme vide jusqu'à la prochaine écriture réussie:
    ni exception, ni token périmé relu depuis le disque.

    Example:
        store = FileTokenStore("~/.cafe_client/auth.json")
    """

    def __init__(self, path: str, namespace: str = DEFAULT_NAMESPACE):
        super().__init__(namespace)
        self.path = Path(path).expanduser()
        self._available = self._prepare_directory()
        self._write_failed = False

    def _prepare_directory(self) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warn("Token store directory unavailable", path=str(self.path.parent), error=str(e))
            return False
        return os.access(self.path.parent, os.W_OK)

    def is_available(self) -> bool:
        return self._available

    def _read(self) -> Dict[str, Any]:
        if self._write_failed or not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            logger.warn("Token store file is unreadable", path=str(self.path), error=str(e))
            return {}
        return document if isinstance(document, dict) else {}

    def _write(self, document: Dict[str, Any]) -> None:
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=".auth-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.chmod(tmp_path, 0o600)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            logger.error("Token store write failed", path=str(self.path), error=str(e))
            self._write_failed = True
            return
        self._write_failed = False
