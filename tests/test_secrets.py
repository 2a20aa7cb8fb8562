"""Tests for secrets.py: CRUD, history, listing and file helpers."""

import base64
from datetime import datetime, timezone

import pytest

from conftest import respond
from znvault_sdk.exceptions import DecodingError, NotFoundError
from znvault_sdk.models import SecretFilter, SecretType
from znvault_sdk.secrets import DEFAULT_CONTENT_TYPE, detect_content_type

UTC = timezone.utc


# ── CRUD ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_secret(server, make_client, secret_payload):
    server.add("POST", "/v1/secrets", respond(201, secret_payload))
    async with make_client(api_key="znv_key") as client:
        secret = await client.secrets.create(
            alias="api/prod/db-credentials",
            type=SecretType.CREDENTIAL,
            data={"username": "app", "password": "s3cret", "port": 5432},
            tags=["db", "prod"],
            ttl_until=datetime(2026, 6, 1, tzinfo=UTC),
        )

    assert secret.id == "sec-1"
    assert secret.type is SecretType.CREDENTIAL
    assert secret.created_at == datetime(2025, 12, 3, 14, 18, 42, 123000, tzinfo=UTC)
    assert server.body() == {
        "alias": "api/prod/db-credentials",
        "type": "credential",
        "data": {"username": "app", "password": "s3cret", "port": 5432},
        "tags": ["db", "prod"],
        "ttl_until": "2026-06-01T00:00:00Z",
    }


@pytest.mark.asyncio
async def test_get_uses_meta_path(server, make_client, secret_payload):
    server.add("GET", "/v1/secrets/sec-1/meta", respond(200, secret_payload))
    async with make_client(api_key="znv_key") as client:
        secret = await client.secrets.get("sec-1")
    assert secret.alias == "api/prod/db-credentials"


@pytest.mark.asyncio
async def test_get_by_alias_keeps_slashes(server, make_client, secret_payload):
    server.add("GET", "/v1/secrets/alias/api/prod/db credentials", respond(200, secret_payload))
    async with make_client(api_key="znv_key") as client:
        await client.secrets.get_by_alias("api/prod/db credentials")
    assert server.last.url.raw_path == b"/v1/secrets/alias/api/prod/db%20credentials"


@pytest.mark.asyncio
async def test_decrypt_returns_data(server, make_client):
    server.add("POST", "/v1/secrets/sec-1/decrypt", respond(200, {
        "data": {"username": "app", "nested": {"ports": [1, 2]}, "enabled": True},
        "decrypted_at": "2025-12-03T14:18:42Z",
    }))
    async with make_client(api_key="znv_key") as client:
        secret = await client.secrets.decrypt("sec-1")
    assert secret.data["nested"] == {"ports": [1, 2]}
    assert secret.data["enabled"] is True
    assert server.last.content == b""


@pytest.mark.asyncio
async def test_update_and_rotate(server, make_client, secret_payload):
    server.add("PUT", "/v1/secrets/sec-1", respond(200, {**secret_payload, "version": 2}))
    server.add("POST", "/v1/secrets/sec-1/rotate", respond(200, {**secret_payload, "version": 3}))
    async with make_client(api_key="znv_key") as client:
        updated = await client.secrets.update("sec-1", {"password": "new"}, tags=["rotated"])
        rotated = await client.secrets.rotate("sec-1", {"password": "newer"})

    assert updated.version == 2
    assert rotated.version == 3
    assert server.body(0) == {"data": {"password": "new"}, "tags": ["rotated"]}
    assert server.body(1) == {"data": {"password": "newer"}}


@pytest.mark.asyncio
async def test_delete_missing_secret(server, make_client):
    server.add("DELETE", "/v1/secrets/nope", respond(404, {"message": "Secret not found"}))
    async with make_client(api_key="znv_key") as client:
        with pytest.raises(NotFoundError):
            await client.secrets.delete("nope")


# ── Listing ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_with_filter(server, make_client, secret_payload):
    server.add("GET", "/v1/secrets", respond(200, [secret_payload]))
    async with make_client(api_key="znv_key") as client:
        secrets = await client.secrets.list(
            SecretFilter(type=SecretType.CREDENTIAL, tags=["db", "prod"], limit=10, offset=20)
        )

    assert len(secrets) == 1
    params = server.last.url.params
    assert params["type"] == "credential"
    assert params["tags"] == "db,prod"
    assert params["limit"] == "10"
    assert params["offset"] == "20"


@pytest.mark.asyncio
async def test_list_default_filter(server, make_client):
    server.add("GET", "/v1/secrets", respond(200, []))
    async with make_client(api_key="znv_key") as client:
        assert await client.secrets.list() == []
    assert dict(server.last.url.params) == {"limit": "50", "offset": "0"}


@pytest.mark.asyncio
async def test_list_all_yields_each_secret(server, make_client, secret_payload):
    second = {**secret_payload, "id": "sec-2", "alias": "api/prod/other"}
    server.add("GET", "/v1/secrets", respond(200, [secret_payload, second]))
    async with make_client(api_key="znv_key") as client:
        ids = [secret.id async for secret in client.secrets.list_all()]
    assert ids == ["sec-1", "sec-2"]


# ── History ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_history_decrypt_version_and_rollback(server, make_client, secret_payload):
    server.add("GET", "/v1/secrets/sec-1/history", respond(200, {
        "history": [
            {"id": 11, "version": 1, "created_at": "2025-12-01 10:00:00", "created_by": "admin"},
            {"id": 12, "version": 2, "created_at": "2025-12-02 10:00:00.123456"},
        ],
        "count": 2,
    }))
    server.add("POST", "/v1/secrets/sec-1/history/1/decrypt", respond(200, {"data": {"password": "old"}}))
    server.add("POST", "/v1/secrets/sec-1/rollback", respond(200, {**secret_payload, "version": 3}))

    async with make_client(api_key="znv_key") as client:
        history = await client.secrets.get_history("sec-1")
        old = await client.secrets.decrypt_version("sec-1", 1)
        rolled_back = await client.secrets.rollback("sec-1", 1)

    assert [v.version for v in history] == [1, 2]
    assert old.data == {"password": "old"}
    assert rolled_back.version == 3
    assert server.body() == {"version": 1}


# ── Files ────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "content, filename, expected",
    [
        (b"\x89PNG\r\n\x1a\n....", "x.bin", "image/png"),
        (b"%PDF-1.7", None, "application/pdf"),
        (b"\xff\xd8\xff\xe0", None, "image/jpeg"),
        (b"PK\x03\x04", None, "application/zip"),
        (b"hello", "notes.txt", "text/plain"),
        (b"hello", None, DEFAULT_CONTENT_TYPE),
    ],
)
def test_detect_content_type(content, filename, expected):
    assert detect_content_type(content, filename) == expected


@pytest.mark.asyncio
async def test_upload_file(server, make_client, secret_payload):
    server.add("POST", "/v1/secrets", respond(201, {**secret_payload, "type": "opaque"}))
    async with make_client(api_key="znv_key") as client:
        await client.secrets.upload_file("files/report", b"%PDF-1.7 data", "report.pdf", tags=["docs"])

    body = server.body()
    assert body["type"] == "opaque"
    assert body["data"] == {
        "filename": "report.pdf",
        "content": base64.b64encode(b"%PDF-1.7 data").decode(),
        "contentType": "application/pdf",
    }


@pytest.mark.asyncio
async def test_download_file(server, make_client):
    server.add("POST", "/v1/secrets/sec-1/decrypt", respond(200, {"data": {
        "filename": "cert.der",
        "content": base64.b64encode(b"\x30\x82\x01").decode(),
        "contentType": "application/pkix-cert",
    }}))
    async with make_client(api_key="znv_key") as client:
        file = await client.secrets.download_file("sec-1")
    assert file.content == b"\x30\x82\x01"
    assert file.filename == "cert.der"
    assert file.content_type == "application/pkix-cert"


@pytest.mark.asyncio
async def test_download_file_defaults(server, make_client):
    server.add("POST", "/v1/secrets/sec-1/decrypt", respond(200, {"data": {"content": "aGk="}}))
    async with make_client(api_key="znv_key") as client:
        file = await client.secrets.download_file("sec-1")
    assert file == (b"hi", "file", DEFAULT_CONTENT_TYPE)


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [{"filename": "x"}, {"content": "***not base64***"}])
async def test_download_file_without_valid_content(server, make_client, data):
    server.add("POST", "/v1/secrets/sec-1/decrypt", respond(200, {"data": data}))
    async with make_client(api_key="znv_key") as client:
        with pytest.raises(DecodingError):
            await client.secrets.download_file("sec-1")
