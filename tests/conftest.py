"""Shared fixtures for the ZN-Vault SDK test suite."""

import json
import time
from typing import Callable, Dict, List, Tuple

import httpx
import jwt
import pytest

from znvault_sdk import ZnVaultClient

BASE_URL = "https://vault.test"

JWT_SIGNING_KEY = "test-signing-key-0123456789abcdef0123456789"

Handler = Callable[[httpx.Request], httpx.Response]


def respond(status: int = 200, json_body=None, text=None, headers=None) -> Handler:
    """Build a handler that returns a fresh response on every call."""
    def handler(request: httpx.Request) -> httpx.Response:
        if json_body is not None:
            return httpx.Response(status, json=json_body, headers=headers)
        return httpx.Response(status, text=text or "", headers=headers)
    return handler


def _make_jwt(expires_in: int = 3600, **claims) -> str:
    payload = {"sub": "user-1", "exp": int(time.time()) + expires_in, **claims}
    return jwt.encode(payload, JWT_SIGNING_KEY, algorithm="HS256")


class FakeServer:
    """
    Route table behind an httpx.MockTransport.

    Each route holds a queue of handlers; the last one is reused once the
    others have been consumed. Unrouted requests get a 404 error body.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Handler]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *handlers: Handler) -> None:
        self.routes.setdefault((method, path), []).extend(handlers)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "Not Found", "message": request.url.path})
        handler = queue.pop(0) if len(queue) > 1 else queue[0]
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1):
        return json.loads(self.requests[index].content)


@pytest.fixture
def make_jwt() -> Callable[..., str]:
    """Factory for HS256 access tokens expiring in `expires_in` seconds."""
    return _make_jwt


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def make_client(server) -> Callable[..., ZnVaultClient]:
    """Factory for clients wired to the fake server."""
    def factory(**options) -> ZnVaultClient:
        options.setdefault("base_url", BASE_URL)
        return ZnVaultClient(transport=server.transport, **options)
    return factory


# ── Sample payloads ──────────────────────────────────────────────────

@pytest.fixture
def secret_payload() -> dict:
    return {
        "id": "sec-1",
        "alias": "api/prod/db-credentials",
        "tenant": "acme",
        "type": "credential",
        "version": 1,
        "tags": ["db", "prod"],
        "created_at": "2025-12-03 14:18:42.123",
        "updated_at": "2025-12-03T14:18:42.123Z",
        "created_by": "admin",
    }


@pytest.fixture
def kms_key_payload() -> dict:
    return {
        "keyId": "key-1",
        "alias": "alias/app-data",
        "description": "App data key",
        "keyUsage": "ENCRYPT_DECRYPT",
        "keySpec": "AES_256",
        "keyState": "ENABLED",
        "tenant": "acme",
        "createdDate": "2025-12-03T14:18:42Z",
        "tags": [{"key": "env", "value": "prod"}],
        "currentVersion": 2,
    }


@pytest.fixture
def certificate_payload() -> dict:
    return {
        "id": "cert-1",
        "tenantId": "acme",
        "clientId": "B12345678",
        "kind": "AEAT",
        "alias": "main",
        "certificateType": "PEM",
        "purpose": "SIGNING",
        "fingerprintSha256": "ab" * 32,
        "subjectCn": "ACME SL",
        "issuerCn": "Test CA",
        "notBefore": "2025-01-01T00:00:00Z",
        "notAfter": "2027-01-01T00:00:00Z",
        "status": "ACTIVE",
        "version": 1,
        "createdAt": "2025-01-02 09:00:00",
        "accessCount": 3,
        "tags": ["tax"],
        "daysUntilExpiry": 420,
        "isExpired": False,
    }


@pytest.fixture
def audit_entry_payload() -> dict:
    return {
        "id": 42,
        "ts": "2025-12-03 14:18:42.123456",
        "client_cn": "svc-backend",
        "action": "secret.decrypt",
        "resource": "secret:sec-1",
        "result": "success",
        "ip": "10.0.0.5",
        "user_id": "user-1",
        "username": "admin",
        "tenant_id": "acme",
        "metadata": {"alias": "api/prod/db-credentials"},
    }


@pytest.fixture
def user_payload() -> dict:
    return {
        "id": "user-1",
        "username": "alice",
        "email": "alice@example.com",
        "role": "user",
        "tenant_id": "acme",
        "totp_enabled": True,
        "status": "active",
        "created_at": "2025-01-01 00:00:00",
        "last_login": "2025-12-03T14:18:42.123Z",
    }
