"""
LOT 6: Logging

Logging structuré JSON du client:
- Champs obligatoires (timestamp, level, correlation_id, user_id, message)
- Timestamp ISO 8601 UTC
- Masquage des tokens et mots de passe
"""

from .interfaces import (
    # Enums
    LogLevel,
    # Dataclasses
    LogEntry,
    LogConfig,
    # Interfaces
    IStructuredLogger,
    ISensitiveMasker,
)
from .sensitive_masker import SensitiveMasker
from .structured_logger import (
    StructuredLogger,
    ContextualLogger,
    configure_logging,
    get_logger,
    # Exceptions
    InvalidLogLevelError,
)

__all__ = [
    "LogLevel",
    "LogEntry",
    "LogConfig",
    "IStructuredLogger",
    "ISensitiveMasker",
    "SensitiveMasker",
    "StructuredLogger",
    "ContextualLogger",
    "configure_logging",
    "get_logger",
    "InvalidLogLevelError",
]
