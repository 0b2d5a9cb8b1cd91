"""
LOT 5: Services - Base

Enveloppe commune des services REST: unwrap de l'ApiResponse et
conversion des corps JSON en modèles typés.
"""

from typing import Any, Callable, List, Mapping, TypeVar

from ..network.api_client import ApiClient, ApiError

M = TypeVar("M")


class BaseService:
    """Service REST adossé au client HTTP partagé."""

    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    @staticmethod
    def _parse(factory: Callable[[Mapping[str, Any]], M], data: Any, what: str) -> M:
        """
        Raises:
            ApiError: Corps absent ou mal formé
        """
        if not isinstance(data, Mapping):
            raise ApiError(f"{what} not found")
        try:
            return factory(data)
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(f"Malformed {what} in response: {e}") from e

    @classmethod
    def _parse_list(cls, factory: Callable[[Mapping[str, Any]], M], data: Any, what: str) -> List[M]:
        # Pagination DRF: {"count": ..., "results": [...]}
        if isinstance(data, Mapping) and "results" in data:
            data = data["results"]
        if not data:
            return []
        if not isinstance(data, list):
            raise ApiError(f"Malformed {what} list in response")
        return [cls._parse(factory, item, what) for item in data]
