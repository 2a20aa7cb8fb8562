"""
Secret management for ZN-Vault SDK.
"""

import base64
import binascii
import mimetypes
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, NamedTuple, Optional
from urllib.parse import quote

from .exceptions import DecodingError
from .http import HttpClient, QueryParams
from .models import (
    CreateSecretRequest,
    RollbackRequest,
    RotateSecretRequest,
    Secret,
    SecretData,
    SecretFilter,
    SecretHistoryResponse,
    SecretType,
    SecretVersion,
    UpdateSecretRequest,
)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Leading bytes of common binary formats.
_MAGIC_NUMBERS = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG", "image/png"),
    (b"%PDF", "application/pdf"),
    (b"PK", "application/zip"),
)


def detect_content_type(content: bytes, filename: Optional[str] = None) -> str:
    """Guess a MIME type from file content, then from the filename."""
    for magic, content_type in _MAGIC_NUMBERS:
        if content.startswith(magic):
            return content_type
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return DEFAULT_CONTENT_TYPE


class SecretFile(NamedTuple):
    """File stored in an opaque secret."""
    content: bytes
    filename: str
    content_type: str


class SecretClient:
    """Create, read, version and delete secrets."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def create(
        self,
        alias: str,
        type: SecretType,
        data: Dict[str, Any],
        tags: Optional[List[str]] = None,
        ttl_until: Optional[datetime] = None,
    ) -> Secret:
        """
        Create a new secret.

        Args:
            alias: Secret alias, e.g. ``api/prod/db-credentials``
            type: Secret type
            data: Secret payload as key/value pairs
            tags: Optional tags
            ttl_until: Optional expiration time

        Returns:
            Secret metadata
        """
        request = CreateSecretRequest(
            alias=alias, type=type, data=data, tags=tags, ttl_until=ttl_until
        )
        return await self._http.post("/v1/secrets", request, response_type=Secret)

    async def get(self, secret_id: str) -> Secret:
        """Get secret metadata by ID."""
        return await self._http.get(f"/v1/secrets/{secret_id}/meta", response_type=Secret)

    async def get_by_alias(self, alias: str) -> Secret:
        """Get secret metadata by alias."""
        return await self._http.get(
            f"/v1/secrets/alias/{quote(alias, safe='/')}", response_type=Secret
        )

    async def decrypt(self, secret_id: str) -> SecretData:
        """Decrypt and return the current value of a secret."""
        return await self._http.post(f"/v1/secrets/{secret_id}/decrypt", response_type=SecretData)

    async def update(
        self,
        secret_id: str,
        data: Dict[str, Any],
        tags: Optional[List[str]] = None,
    ) -> Secret:
        """Update secret data; the server creates a new version."""
        return await self._http.put(
            f"/v1/secrets/{secret_id}",
            UpdateSecretRequest(data=data, tags=tags),
            response_type=Secret,
        )

    async def rotate(self, secret_id: str, data: Dict[str, Any]) -> Secret:
        return await self._http.post(
            f"/v1/secrets/{secret_id}/rotate",
            RotateSecretRequest(data=data),
            response_type=Secret,
        )

    async def delete(self, secret_id: str) -> None:
        await self._http.delete(f"/v1/secrets/{secret_id}")

    async def list(self, filter: Optional[SecretFilter] = None) -> List[Secret]:
        """
        List secret metadata.

        Args:
            filter: Optional filter (type, tags, limit, offset)

        Returns:
            Matching secrets, without decrypted values
        """
        filter = filter or SecretFilter()
        query: QueryParams = {}
        if filter.type is not None:
            query["type"] = filter.type.value
        if filter.tags:
            query["tags"] = ",".join(filter.tags)
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/secrets", query=query, response_type=List[Secret])

    async def list_all(self, filter: Optional[SecretFilter] = None) -> AsyncIterator[Secret]:
        """Yield every matching secret (the server returns them in one response)."""
        for secret in await self.list(filter):
            yield secret

    # Version history

    async def get_history(self, secret_id: str) -> List[SecretVersion]:
        response = await self._http.get(
            f"/v1/secrets/{secret_id}/history", response_type=SecretHistoryResponse
        )
        return response.history

    async def decrypt_version(self, secret_id: str, version: int) -> SecretData:
        """Decrypt a specific historical version."""
        return await self._http.post(
            f"/v1/secrets/{secret_id}/history/{version}/decrypt", response_type=SecretData
        )

    async def rollback(self, secret_id: str, version: int) -> Secret:
        """Make a previous version current again."""
        return await self._http.post(
            f"/v1/secrets/{secret_id}/rollback",
            RollbackRequest(version=version),
            response_type=Secret,
        )

    # Files

    async def upload_file(
        self,
        alias: str,
        content: bytes,
        filename: str,
        content_type: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Secret:
        """
        Store a file as an opaque secret.

        The file is base64 encoded into the ``content`` field next to its
        ``filename`` and ``contentType``.
        """
        data = {
            "filename": filename,
            "content": base64.b64encode(content).decode("ascii"),
            "contentType": content_type or detect_content_type(content, filename),
        }
        return await self.create(alias, SecretType.OPAQUE, data, tags=tags)

    async def download_file(self, secret_id: str) -> SecretFile:
        """
        Decrypt a secret created by upload_file().

        Raises:
            DecodingError: if the secret holds no valid file content.
        """
        secret = await self.decrypt(secret_id)
        encoded = secret.data.get("content")
        if not isinstance(encoded, str):
            raise DecodingError(ValueError("Secret has no file content"))
        try:
            content = base64.b64decode(encoded, validate=True)
        except binascii.Error as e:
            raise DecodingError(e) from e

        filename = secret.data.get("filename")
        content_type = secret.data.get("contentType")
        return SecretFile(
            content=content,
            filename=filename if isinstance(filename, str) else "file",
            content_type=content_type if isinstance(content_type, str) else DEFAULT_CONTENT_TYPE,
        )
