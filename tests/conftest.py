"""
Cafe Client - Pytest Configuration
Fixtures partagées: tokens signés, backend HTTP simulé, session.
"""

import json
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx
import jwt
import pytest

from cafe_client.auth.interfaces import Identity
from cafe_client.auth.session_manager import AuthSessionManager
from cafe_client.auth.token_inspector import TokenInspector
from cafe_client.auth.token_store import MemoryTokenStore
from cafe_client.logging import configure_logging
from cafe_client.network.api_client import ApiClient

BASE_URL = "http://cafe.test"
SECRET = "test-secret"


def make_token(exp_offset: Optional[int] = 900, **claims: Any) -> str:
    """JWT HS256; exp_offset=None → pas de claim exp."""
    now = int(time.time())
    payload: Dict[str, Any] = {"iat": now, "token_type": "access", "user_id": 42}
    if exp_offset is not None:
        payload["exp"] = now + exp_offset
    payload.update(claims)
    return jwt.encode(payload, SECRET, algorithm="HS256")


def user_payload(role: str = "manager", **overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": "7",
        "email": "alice@cafe.test",
        "firstName": "Alice",
        "lastName": "Martin",
        "role": role,
        "isActive": True,
        "isEmailVerified": True,
        "isMFAEnabled": False,
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    }
    data.update(overrides)
    return data


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


class FakeBackend:
    """
    Backend REST simulé pour httpx.MockTransport.

    Plusieurs réponses pour une même route forment une file;
    la dernière est rejouée indéfiniment.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], List[Tuple[int, Any, Optional[Exception], Optional[bytes]]]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status: int = 200,
        error: Optional[Exception] = None,
        content: Optional[bytes] = None,
    ) -> "FakeBackend":
        self.routes.setdefault((method.upper(), path), []).append((status, json, error, content))
        return self

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not found."})

        status, body, error, content = queue[0] if len(queue) == 1 else queue.pop(0)
        if error is not None:
            raise error
        if content is not None:
            return httpx.Response(status, content=content)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture(autouse=True, scope="session")
def silent_logs():
    """Pas de sortie stderr pendant les tests."""
    configure_logging("DEBUG", output_handler=lambda line: None)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def api_client(backend: FakeBackend) -> ApiClient:
    return ApiClient(BASE_URL, transport=backend.transport)


@pytest.fixture
def session(api_client: ApiClient, store: MemoryTokenStore) -> AuthSessionManager:
    return AuthSessionManager(api_client, store, TokenInspector())


@pytest.fixture
def login_as(store: MemoryTokenStore):
    """Installe directement une session dans le stockage."""

    def _login(role: str = "manager", access: Optional[str] = None, refresh: str = "refresh-1", **overrides: Any) -> Identity:
        identity = Identity.from_dict(user_payload(role, **overrides))
        store.set_tokens(access or make_token(), refresh)
        store.set_user(identity)
        return identity

    return _login


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def user_factory():
    return user_payload


@pytest.fixture
def read_json():
    return request_json
