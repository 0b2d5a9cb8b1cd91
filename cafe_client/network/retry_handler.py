"""
LOT 4: Network - Retry Handler

Retries avec backoff exponentiel, réservés aux erreurs de transport.

Les erreurs rapportées par le serveur (4xx/5xx avec corps) ne sont jamais
rejouées: seules les exceptions listées dans RetryConfig.retryable_exceptions
le sont. ApiNetworkError hérite de ConnectionError, donc la configuration
par défaut la couvre; un appelant non idempotent restreint la liste à
ApiConnectError.
"""

import asyncio
import inspect
from collections import Counter
from typing import Any, Callable, Dict, Optional, TypeVar

from ..logging import get_logger
from .interfaces import IRetryHandler, RetryConfig, RetryResult

T = TypeVar("T")


def _operation_name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or repr(func)


class RetryHandler(IRetryHandler):
    """
    Rejoue une opération réseau tant que l'échec est transitoire.

    Example:
        handler = RetryHandler(RetryConfig(max_attempts=3))
        result = await handler.execute_with_retry(orders.add_item, order_id, menu_item=3, quantity=1)
        if not result.success:
            raise result.last_error
    """

    def __init__(self, default_config: Optional[RetryConfig] = None) -> None:
        self._default_config = default_config or RetryConfig()
        self._counters: Counter = Counter()
        self._logger = get_logger("cafe_client.network.retry_handler")

    @property
    def default_config(self) -> RetryConfig:
        return self._default_config

    async def execute_with_retry(
        self,
        func: Callable[..., T],
        *args: Any,
        config: Optional[RetryConfig] = None,
        **kwargs: Any,
    ) -> RetryResult:
        """
        Appelle func (sync ou async) jusqu'à max_attempts fois.

        Le délai avant la tentative n+1 vaut
        min(initial_delay * exponential_base^n, max_delay); aucune attente
        après la dernière tentative.

        Returns:
            RetryResult (succès ou dernière erreur, jamais d'exception)
        """
        retry_config = config or self._default_config
        operation = _operation_name(func)
        waited = 0.0
        last_error: Optional[Exception] = None
        attempt = 0

        while attempt < retry_config.max_attempts:
            attempt += 1
            try:
                value = func(*args, **kwargs)
                if inspect.isawaitable(value):
                    value = await value
            except Exception as e:
                last_error = e
            else:
                if attempt > 1:
                    self._counters["successful_retries"] += 1
                return RetryResult(True, value, attempt, waited, None)

            if not self.is_retryable(last_error, retry_config):
                return RetryResult(False, None, attempt, waited, last_error)

            self._counters["total_retries"] += 1
            if attempt == retry_config.max_attempts:
                break

            delay = self.calculate_delay(attempt - 1, retry_config)
            self._logger.debug(
                "Transient failure, retrying",
                operation=operation,
                attempt=attempt,
                delay=delay,
                error=str(last_error),
            )
            waited += delay
            await asyncio.sleep(delay)

        self._counters["failed_retries"] += 1
        self._logger.warn("Retries exhausted", operation=operation, attempts=attempt, error=str(last_error))
        return RetryResult(False, None, attempt, waited, last_error)

    def calculate_delay(self, attempt: int, config: RetryConfig) -> float:
        """Délai après l'échec n° attempt (0-based), plafonné à max_delay."""
        return min(config.initial_delay * config.exponential_base**attempt, config.max_delay)

    def is_retryable(self, error: Exception, config: RetryConfig) -> bool:
        return isinstance(error, config.retryable_exceptions)

    def get_retry_stats(self) -> Dict[str, int]:
        """Compteurs: total_retries, successful_retries, failed_retries."""
        return {
            key: self._counters[key]
            for key in ("total_retries", "successful_retries", "failed_retries")
        }
