"""
LOT 4: Network

Client REST avec refresh transparent, timeouts bornés et retries
réservés aux erreurs de transport.
"""

from .interfaces import (
    # Enums
    TimeoutType,
    # Dataclasses
    TimeoutConfig,
    RetryConfig,
    RetryResult,
    ApiResponse,
    # Interfaces
    ITokenAuthority,
    IApiClient,
    ITimeoutManager,
    IRetryHandler,
)
from .timeout_manager import TimeoutManager, InvalidTimeoutError
from .retry_handler import RetryHandler
from .api_client import (
    ApiClient,
    ApiError,
    ApiNetworkError,
    ApiConnectError,
    unwrap,
    SESSION_EXPIRED_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    TIMEOUT_ERROR_MESSAGE,
)

__all__ = [
    "TimeoutType",
    "TimeoutConfig",
    "RetryConfig",
    "RetryResult",
    "ApiResponse",
    "ITokenAuthority",
    "IApiClient",
    "ITimeoutManager",
    "IRetryHandler",
    "TimeoutManager",
    "RetryHandler",
    "ApiClient",
    "unwrap",
    "SESSION_EXPIRED_MESSAGE",
    "NETWORK_ERROR_MESSAGE",
    "TIMEOUT_ERROR_MESSAGE",
    # Exceptions
    "InvalidTimeoutError",
    "ApiError",
    "ApiNetworkError",
    "ApiConnectError",
]
