"""
LOT 6: Logging - Structured Logger

Logger JSON structuré utilisé par tous les composants du client.
"""

import sys
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    LogConfig,
    LogEntry,
    LogLevel,
)
from .sensitive_masker import SensitiveMasker


class InvalidLogLevelError(Exception):
    """Niveau de log invalide."""

    def __init__(self, level: str) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")


def _stderr_handler(line: str) -> None:
    sys.stderr.write(line + "\n")


class StructuredLogger(IStructuredLogger):
    """
    Logger JSON structuré.

    Les entrées sont conservées dans un buffer borné (diagnostic, tests) et
    transmises à un handler de sortie (stderr par défaut).

    Example:
        logger = StructuredLogger("cafe_client.auth")
        logger.set_default_user("42")
        logger.info("Login succeeded", role="cashier")
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        masker: Optional[ISensitiveMasker] = None,
        output_handler: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            name: Nom du logger (module émetteur)
            config: Configuration optionnelle
            masker: Masker pour données sensibles
            output_handler: Handler de sortie (stderr si None)

        Raises:
            ValueError: Si name vide
        """
        if not name or not name.strip():
            raise ValueError("Logger name cannot be empty")

        self._name = name.strip()
        self._config = config or LogConfig()
        self._masker = masker or SensitiveMasker()
        self._output_handler = output_handler or _stderr_handler
        self._entries: Deque[LogEntry] = deque(maxlen=self._config.max_entries)
        self._default_user_id: str = self._config.default_user_id
        self._default_correlation_id: Optional[str] = self._config.default_correlation_id

    @property
    def name(self) -> str:
        """Retourne le nom du logger."""
        return self._name

    @property
    def config(self) -> LogConfig:
        """Retourne la configuration."""
        return self._config

    def set_default_user(self, user_id: Optional[str]) -> None:
        """Définit l'utilisateur par défaut (None = anonyme)."""
        self._default_user_id = user_id or self._config.default_user_id

    def set_default_correlation(self, correlation_id: str) -> None:
        """Définit correlation_id par défaut."""
        self._default_correlation_id = correlation_id

    def set_output_handler(self, handler: Callable[[str], None]) -> None:
        """Remplace le handler de sortie."""
        self._output_handler = handler

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Crée un log structuré JSON.

        Processus:
            1. Vérifie niveau >= min_level
            2. Résout correlation_id et user_id
            3. Masque données sensibles dans extra
            4. Stocke l'entrée et l'envoie au handler

        Raises:
            ValueError: Si message vide
        """
        if not self._should_log(level):
            return None

        if not message:
            raise ValueError("Log message cannot be empty")

        resolved_correlation = (
            correlation_id or self._default_correlation_id or self._generate_correlation_id()
        )
        resolved_user = user_id or self._default_user_id

        masked_extra: Dict[str, Any] = {}
        if extra and self._config.include_extra:
            if self._config.mask_sensitive:
                masked_extra = self._masker.mask(dict(extra))
            else:
                masked_extra = dict(extra)

        entry = LogEntry(
            timestamp=self._generate_timestamp(),
            level=level,
            correlation_id=resolved_correlation,
            user_id=str(resolved_user),
            message=self._masker.mask_text(message) if self._config.mask_sensitive else message,
            extra=masked_extra,
            logger_name=self._name,
        )

        self._entries.append(entry)
        self._output_handler(entry.to_json())

        return entry

    def _generate_timestamp(self) -> str:
        """
        Timestamp ISO 8601 UTC avec millisecondes.

        Format: 2024-12-04T14:30:00.123Z
        """
        now = datetime.now(timezone.utc)
        return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

    def _generate_correlation_id(self) -> str:
        return str(uuid.uuid4())

    def _should_log(self, level: LogLevel) -> bool:
        return LogLevel.get_priority(level) >= LogLevel.get_priority(self._config.min_level)

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau DEBUG."""
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau INFO."""
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau WARN."""
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau ERROR."""
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau CRITICAL."""
        return self.log(LogLevel.CRITICAL, message, **extra)

    def get_entries(self) -> List[LogEntry]:
        """
        Retourne les entrées de log capturées.

        Utile pour tests et débogage.
        """
        return list(self._entries)

    def clear_entries(self) -> None:
        """Efface les entrées capturées."""
        self._entries.clear()

    def get_entries_by_level(self, level: LogLevel) -> List[LogEntry]:
        """Filtre les entrées par niveau."""
        return [e for e in self._entries if e.level == level]

    def with_context(
        self,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> "ContextualLogger":
        """
        Crée un logger avec contexte pré-défini.

        Args:
            correlation_id: ID corrélation pour ce contexte
            user_id: Utilisateur pour ce contexte
        """
        return ContextualLogger(
            self,
            correlation_id=correlation_id or self._default_correlation_id,
            user_id=user_id or self._default_user_id,
        )


class ContextualLogger:
    """
    Logger avec contexte pré-défini.

    Fixe correlation_id et user_id pour une requête ou une soumission de commande.
    """

    def __init__(
        self,
        logger: StructuredLogger,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        self._logger = logger
        self._correlation_id = correlation_id
        self._user_id = user_id

    @property
    def correlation_id(self) -> Optional[str]:
        return self._correlation_id

    def log(self, level: LogLevel, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log avec contexte."""
        return self._logger.log(
            level,
            message,
            correlation_id=self._correlation_id,
            user_id=self._user_id,
            **extra,
        )

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, message, **extra)


# Registre des loggers par nom
_loggers: Dict[str, StructuredLogger] = {}
_active_level: LogLevel = LogLevel.INFO
_active_handler: Optional[Callable[[str], None]] = None


def configure_logging(
    min_level: str = "INFO",
    output_handler: Optional[Callable[[str], None]] = None,
) -> LogLevel:
    """
    Applique un niveau minimum (et un handler) à tous les loggers.

    Raises:
        InvalidLogLevelError: Si niveau inconnu
    """
    global _active_level, _active_handler
    try:
        level = LogLevel(min_level.upper())
    except ValueError as e:
        raise InvalidLogLevelError(min_level) from e

    _active_level = level
    if output_handler is not None:
        _active_handler = output_handler

    for logger in _loggers.values():
        logger.config.min_level = level
        if output_handler is not None:
            logger.set_output_handler(output_handler)
    return level


def get_logger(name: str) -> StructuredLogger:
    """Retourne le logger partagé pour ce nom (créé à la demande)."""
    logger = _loggers.get(name)
    if logger is None:
        logger = StructuredLogger(
            name,
            LogConfig(min_level=_active_level),
            output_handler=_active_handler,
        )
        _loggers[name] = logger
    return logger
