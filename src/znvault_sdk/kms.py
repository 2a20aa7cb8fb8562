"""
Key management (KMS) operations for ZN-Vault SDK.
"""

import base64
import binascii
from typing import AsyncIterator, Dict, List, Optional, Union

from .exceptions import DecodingError, ValidationError
from .http import HttpClient, QueryParams
from .models import (
    CreateKmsKeyRequest,
    DataKeyResult,
    DecryptRequest,
    DecryptResult,
    EncryptRequest,
    EncryptResult,
    GenerateDataKeyRequest,
    KeyFilter,
    KeySpec,
    KeyUsage,
    KmsKey,
    KmsKeyVersion,
    ScheduleDeletionRequest,
    UpdateKmsKeyRequest,
)
from .pagination import Page, iterate_pages

Context = Optional[Dict[str, str]]


def _b64decode(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise DecodingError(e) from e


def _ciphertext_b64(ciphertext: Union[bytes, str]) -> str:
    # str is taken as already base64 encoded, as returned in EncryptResult
    if isinstance(ciphertext, str):
        return ciphertext
    return base64.b64encode(ciphertext).decode("ascii")


class KmsClient:
    """KMS key lifecycle, encryption and data key generation."""

    def __init__(self, http: HttpClient):
        self._http = http

    # Keys

    async def create_key(
        self,
        alias: Optional[str] = None,
        description: Optional[str] = None,
        usage: KeyUsage = KeyUsage.ENCRYPT_DECRYPT,
        key_spec: KeySpec = KeySpec.AES_256,
        tags: Optional[Dict[str, str]] = None,
        rotation_enabled: bool = False,
        rotation_days: Optional[int] = None,
    ) -> KmsKey:
        """
        Create a new KMS key.

        Args:
            alias: Key alias, e.g. ``alias/app-data``
            description: Free-form description
            usage: Key usage
            key_spec: Key specification
            tags: Key tags
            rotation_enabled: Enable automatic rotation
            rotation_days: Rotation period in days
        """
        request = CreateKmsKeyRequest(
            alias=alias,
            description=description,
            usage=usage,
            key_spec=key_spec,
            tags=tags,
            rotation_enabled=rotation_enabled,
            rotation_days=rotation_days,
        )
        return await self._http.post("/v1/kms/keys", request, response_type=KmsKey)

    async def get_key(self, key_id: str) -> KmsKey:
        return await self._http.get(f"/v1/kms/keys/{key_id}", response_type=KmsKey)

    async def list_keys(self, filter: Optional[KeyFilter] = None) -> Page[KmsKey]:
        """List one page of KMS keys."""
        filter = filter or KeyFilter()
        query: QueryParams = {}
        if filter.tenant:
            query["tenant"] = filter.tenant
        if filter.state is not None:
            query["state"] = filter.state.value
        if filter.usage is not None:
            query["usage"] = filter.usage.value
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/kms/keys", query=query, response_type=Page[KmsKey])

    async def list_all_keys(self, filter: Optional[KeyFilter] = None) -> AsyncIterator[KmsKey]:
        """Yield every matching key, fetching pages as needed."""
        filter = filter or KeyFilter()

        async def fetch(offset: int) -> Page[KmsKey]:
            return await self.list_keys(filter.model_copy(update={"offset": offset}))

        async for key in iterate_pages(fetch, filter.offset):
            yield key

    async def update_key(
        self,
        key_id: str,
        description: Optional[str] = None,
        tags: Optional[Dict[str, str]] = None,
    ) -> KmsKey:
        return await self._http.patch(
            f"/v1/kms/keys/{key_id}",
            UpdateKmsKeyRequest(description=description, tags=tags),
            response_type=KmsKey,
        )

    async def enable_key(self, key_id: str) -> KmsKey:
        return await self._http.post(f"/v1/kms/keys/{key_id}/enable", response_type=KmsKey)

    async def disable_key(self, key_id: str) -> KmsKey:
        return await self._http.post(f"/v1/kms/keys/{key_id}/disable", response_type=KmsKey)

    async def schedule_key_deletion(self, key_id: str, pending_window_days: int = 7) -> KmsKey:
        """Schedule a key for deletion after a waiting period."""
        return await self._http.post(
            f"/v1/kms/keys/{key_id}/schedule-deletion",
            ScheduleDeletionRequest(pending_window_days=pending_window_days),
            response_type=KmsKey,
        )

    async def cancel_key_deletion(self, key_id: str) -> KmsKey:
        return await self._http.post(f"/v1/kms/keys/{key_id}/cancel-deletion", response_type=KmsKey)

    async def rotate_key(self, key_id: str) -> KmsKey:
        """Rotate a key; the server creates a new key version."""
        return await self._http.post(f"/v1/kms/keys/{key_id}/rotate", response_type=KmsKey)

    async def list_key_versions(self, key_id: str) -> List[KmsKeyVersion]:
        return await self._http.get(
            f"/v1/kms/keys/{key_id}/versions", response_type=List[KmsKeyVersion]
        )

    # Cryptographic operations

    async def encrypt(
        self,
        key_id: str,
        plaintext: Union[bytes, str],
        context: Context = None,
    ) -> EncryptResult:
        """
        Encrypt data with a KMS key.

        Args:
            key_id: Key ID or alias
            plaintext: Data to encrypt; str is encoded as UTF-8
            context: Optional encryption context, required again on decrypt

        Returns:
            Encryption result with base64 ciphertext
        """
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")
        request = EncryptRequest(
            key_id=key_id,
            plaintext=base64.b64encode(plaintext).decode("ascii"),
            context=context or {},
        )
        return await self._http.post("/v1/kms/encrypt", request, response_type=EncryptResult)

    async def decrypt(
        self,
        key_id: str,
        ciphertext: Union[bytes, str],
        context: Context = None,
    ) -> bytes:
        """
        Decrypt data with a KMS key.

        Args:
            key_id: Key ID or alias
            ciphertext: Raw ciphertext bytes, or the base64 text from EncryptResult
            context: Encryption context used on encrypt

        Returns:
            The plaintext bytes

        Raises:
            DecodingError: if the server returns invalid base64.
        """
        request = DecryptRequest(
            key_id=key_id,
            ciphertext=_ciphertext_b64(ciphertext),
            context=context or {},
        )
        result = await self._http.post("/v1/kms/decrypt", request, response_type=DecryptResult)
        return _b64decode(result.plaintext)

    async def decrypt_to_string(
        self,
        key_id: str,
        ciphertext: Union[bytes, str],
        context: Context = None,
    ) -> str:
        data = await self.decrypt(key_id, ciphertext, context)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(e) from e

    # Data keys

    async def generate_data_key(
        self,
        key_id: str,
        key_spec: KeySpec = KeySpec.AES_256,
        context: Context = None,
    ) -> DataKeyResult:
        """Generate a data key for envelope encryption."""
        request = GenerateDataKeyRequest(key_id=key_id, key_spec=key_spec, context=context or {})
        return await self._http.post(
            "/v1/kms/generate-data-key", request, response_type=DataKeyResult
        )

    async def generate_data_key_without_plaintext(
        self,
        key_id: str,
        key_spec: KeySpec = KeySpec.AES_256,
        context: Context = None,
    ) -> str:
        """Generate a data key and return only its wrapped (base64) form."""
        request = GenerateDataKeyRequest(key_id=key_id, key_spec=key_spec, context=context or {})
        result = await self._http.post(
            "/v1/kms/generate-data-key-without-plaintext", request, response_type=DataKeyResult
        )
        return result.encrypted_key

    async def decrypt_data_key(
        self,
        encrypted_key: str,
        key_id: str,
        context: Context = None,
    ) -> bytes:
        """
        Unwrap a data key produced by generate_data_key*().

        Raises:
            ValidationError: if encrypted_key is not valid base64.
        """
        try:
            base64.b64decode(encrypted_key, validate=True)
        except binascii.Error:
            raise ValidationError("Invalid encrypted key encoding") from None
        return await self.decrypt(key_id, encrypted_key, context)
