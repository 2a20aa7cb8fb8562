"""Tests for http.py: request building, auth headers and error translation."""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List
from uuid import UUID

import httpx
import pytest

from conftest import BASE_URL, respond
from znvault_sdk.config import ZnVaultConfig
from znvault_sdk.exceptions import (
    ConfigurationError,
    DecodingError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TokenExpiredError,
    ValidationError,
)
from znvault_sdk.http import API_KEY_HEADER, HttpClient, to_jsonable
from znvault_sdk.models import Secret, SecretType, SuccessResponse


def _http(server, **options) -> HttpClient:
    config = ZnVaultConfig.create(base_url=BASE_URL, **options)
    return HttpClient(config, transport=server.transport)


# ── Request building ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_url_query_and_default_headers(server):
    server.add("GET", "/v1/secrets", respond(200, []))
    async with _http(server) as http:
        await http.get("/v1/secrets", query={"limit": "10", "offset": "0"})

    request = server.last
    assert str(request.url) == f"{BASE_URL}/v1/secrets?limit=10&offset=0"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"] == "zn-vault-sdk-python"
    assert "Content-Type" not in request.headers


@pytest.mark.asyncio
async def test_json_body_from_model(server, secret_payload):
    server.add("POST", "/v1/secrets", respond(201, secret_payload))
    body = {"alias": "a", "type": SecretType.OPAQUE, "ttl_until": datetime(2026, 1, 1, tzinfo=timezone.utc)}
    async with _http(server) as http:
        await http.post("/v1/secrets", body, response_type=Secret)

    assert server.last.headers["Content-Type"] == "application/json"
    assert server.body() == {"alias": "a", "type": "opaque", "ttl_until": "2026-01-01T00:00:00Z"}


def test_to_jsonable_uses_aliases_and_drops_none():
    response = SuccessResponse(success=True)
    assert to_jsonable(response) == {"success": True}
    assert to_jsonable([SecretType.SETTING, {"n": None}]) == ["setting", {"n": None}]


def test_to_jsonable_stringifies_uuid_and_decimal():
    key = UUID("12345678-1234-5678-1234-567812345678")
    assert to_jsonable({"id": key, "amount": Decimal("10.50")}) == {
        "id": "12345678-1234-5678-1234-567812345678",
        "amount": "10.50",
    }


@pytest.mark.asyncio
async def test_unencodable_body_is_validation_error(server):
    async with _http(server) as http:
        with pytest.raises(ValidationError, match="bytes"):
            await http.post("/v1/secrets", {"data": {"blob": b"\x00\x01"}})
    assert server.requests == []


# ── Authentication headers ───────────────────────────────────────────

@pytest.mark.asyncio
async def test_no_credentials_no_auth_header(server):
    server.add("GET", "/v1/health", respond(200, {"status": "ok"}))
    async with _http(server) as http:
        await http.get("/v1/health")
    assert "Authorization" not in server.last.headers
    assert API_KEY_HEADER not in server.last.headers


@pytest.mark.asyncio
async def test_api_key_header(server):
    server.add("GET", "/v1/health", respond(200, {"status": "ok"}))
    async with _http(server, api_key="znv_key") as http:
        await http.get("/v1/health")
    assert server.last.headers["X-API-Key"] == "znv_key"
    assert "Authorization" not in server.last.headers


@pytest.mark.asyncio
async def test_bearer_token_wins_over_api_key(server):
    server.add("GET", "/v1/health", respond(200, {"status": "ok"}))
    async with _http(server, api_key="znv_key", access_token="opaque-token") as http:
        await http.get("/v1/health")
    assert server.last.headers["Authorization"] == "Bearer opaque-token"
    assert API_KEY_HEADER not in server.last.headers


@pytest.mark.asyncio
async def test_expired_jwt_is_not_sent(server, make_jwt):
    async with _http(server, access_token=make_jwt(expires_in=-60)) as http:
        with pytest.raises(TokenExpiredError):
            await http.get("/v1/secrets")
    assert server.requests == []


@pytest.mark.asyncio
async def test_out_of_range_jwt_expiry_is_sent(server, make_jwt):
    token = make_jwt(expires_in=10**20)
    server.add("GET", "/v1/health", respond(200, {"status": "ok"}))
    async with _http(server, access_token=token) as http:
        await http.get("/v1/health")
    assert server.last.headers["Authorization"] == f"Bearer {token}"


@pytest.mark.asyncio
async def test_expired_jwt_allowed_for_token_flows(server, make_jwt):
    expired = make_jwt(expires_in=-60)
    server.add("POST", "/auth/refresh", respond(200, {"accessToken": "new"}))
    async with _http(server, access_token=expired) as http:
        await http.post("/auth/refresh", {}, allow_expired_token=True)
    assert server.last.headers["Authorization"] == f"Bearer {expired}"


@pytest.mark.asyncio
async def test_credentials_read_per_request(server):
    server.add("GET", "/v1/health", respond(200, {"status": "ok"}))
    async with _http(server) as http:
        http.tokens.set_api_key("first")
        await http.get("/v1/health")
        http.tokens.set_api_key("second")
        await http.get("/v1/health")
    assert [r.headers[API_KEY_HEADER] for r in server.requests] == ["first", "second"]


# ── Responses ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_decodes_typed_response(server, secret_payload):
    server.add("GET", "/v1/secrets", respond(200, [secret_payload]))
    async with _http(server) as http:
        secrets = await http.get("/v1/secrets", response_type=List[Secret])
    assert secrets[0].alias == "api/prod/db-credentials"


@pytest.mark.asyncio
async def test_body_discarded_without_response_type(server):
    server.add("DELETE", "/v1/secrets/sec-1", respond(204))
    async with _http(server) as http:
        assert await http.delete("/v1/secrets/sec-1") is None


@pytest.mark.asyncio
async def test_schema_mismatch_is_decoding_error(server):
    server.add("GET", "/v1/secrets/sec-1/meta", respond(200, {"id": "sec-1"}))
    async with _http(server) as http:
        with pytest.raises(DecodingError):
            await http.get("/v1/secrets/sec-1/meta", response_type=Secret)


@pytest.mark.asyncio
async def test_invalid_json_is_decoding_error(server):
    server.add("GET", "/v1/health", respond(200, text="<html>ok</html>"))
    async with _http(server) as http:
        with pytest.raises(DecodingError):
            await http.get("/v1/health", response_type=SuccessResponse)


@pytest.mark.asyncio
async def test_get_text_returns_raw_body(server):
    server.add("GET", "/v1/audit/export", respond(200, text="id,action\n1,login\n"))
    async with _http(server) as http:
        assert await http.get_text("/v1/audit/export") == "id,action\n1,login\n"


# ── Errors ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_error_status_raises_mapped_error(server):
    server.add("GET", "/v1/secrets/missing/meta", respond(404, {"error": "Not Found", "message": "Secret missing"}))
    async with _http(server) as http:
        with pytest.raises(NotFoundError) as exc_info:
            await http.get("/v1/secrets/missing/meta", response_type=Secret)
    assert exc_info.value.resource == "Secret missing"


@pytest.mark.asyncio
async def test_rate_limit_reads_retry_after(server):
    server.add("GET", "/v1/secrets", respond(429, headers={"Retry-After": "7"}))
    async with _http(server) as http:
        with pytest.raises(RateLimitError) as exc_info:
            await http.get("/v1/secrets")
    assert exc_info.value.retry_after == 7.0


@pytest.mark.asyncio
async def test_no_automatic_retry(server):
    server.add("GET", "/v1/health", respond(503, text="down"))
    async with _http(server) as http:
        with pytest.raises(ServerError):
            await http.get("/v1/health")
    assert len(server.requests) == 1


@pytest.mark.asyncio
async def test_transport_failure_is_network_error(caplog):
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    config = ZnVaultConfig.create(base_url=BASE_URL)
    async with HttpClient(config, transport=httpx.MockTransport(fail)) as http:
        with caplog.at_level(logging.ERROR, logger="znvault_sdk.http"):
            with pytest.raises(NetworkError) as exc_info:
                await http.get("/v1/health")
    assert isinstance(exc_info.value.cause, httpx.ConnectError)
    assert "Request failed" in caplog.text


@pytest.mark.asyncio
async def test_resource_timeout_is_network_error():
    async def slow(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={})

    config = ZnVaultConfig.create(base_url=BASE_URL, timeout=0.05)
    async with HttpClient(config, transport=httpx.MockTransport(slow)) as http:
        with pytest.raises(NetworkError):
            await http.get("/v1/health")


@pytest.mark.asyncio
async def test_cancellation_propagates():
    started = asyncio.Event()

    async def hang(request):
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200, json={})

    config = ZnVaultConfig.create(base_url=BASE_URL, access_token="tok")
    async with HttpClient(config, transport=httpx.MockTransport(hang)) as http:
        task = asyncio.ensure_future(http.get("/v1/health"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert http.tokens.get().access_token == "tok"


@pytest.mark.asyncio
async def test_invalid_url_is_configuration_error(server):
    async with _http(server) as http:
        with pytest.raises(ConfigurationError):
            await http.get("/v1/secrets/\x00bad")


# ── TLS ──────────────────────────────────────────────────────────────

def test_insecure_tls_logs_warning(caplog):
    config = ZnVaultConfig.create(base_url=BASE_URL, insecure_tls=True)
    with caplog.at_level(logging.WARNING, logger="znvault_sdk.http"):
        HttpClient(config)
    assert "TLS certificate verification is disabled" in caplog.text


def test_missing_ca_bundle_is_configuration_error(tmp_path):
    config = ZnVaultConfig.create(base_url=BASE_URL, ca_bundle=str(tmp_path / "missing-ca.pem"))
    with pytest.raises(ConfigurationError, match="Invalid CA bundle"):
        HttpClient(config)


def test_unreadable_ca_bundle_is_configuration_error(tmp_path):
    bundle = tmp_path / "ca.pem"
    bundle.write_text("not a certificate\n")
    config = ZnVaultConfig.create(base_url=BASE_URL, ca_bundle=str(bundle))
    with pytest.raises(ConfigurationError, match="Invalid CA bundle"):
        HttpClient(config)
