"""
HTTP layer for ZN-Vault SDK.

Every remote call goes through HttpClient.request(): it builds the request,
attaches the current credential, performs the call and turns the response into
either a decoded value or one of the typed exceptions in .exceptions.
"""

import asyncio
import logging
import ssl
from datetime import datetime
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional, Union
from uuid import UUID

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .config import ZnVaultConfig
from .dates import format_datetime
from .exceptions import (
    ConfigurationError,
    DecodingError,
    NetworkError,
    TokenExpiredError,
    ValidationError,
    error_from_response,
)
from .tokens import TokenStore, is_token_expired

logger = logging.getLogger(__name__)

QueryParams = Dict[str, str]

API_KEY_HEADER = "X-API-Key"


def to_jsonable(value: Any) -> Any:
    """
    Convert a request payload into plain JSON data.

    UUIDs and decimals become strings, as in pydantic's JSON mode.

    Raises:
        ValidationError: for values with no JSON form, e.g. raw bytes.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise ValidationError(f"Cannot encode {type(value).__name__} as JSON")


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def decode_json(content: bytes, response_type: Any) -> Any:
    """
    Decode a JSON body into response_type.

    Raises:
        DecodingError: if the body does not match the expected schema.
    """
    try:
        return _adapter(response_type).validate_json(content)
    except PydanticValidationError as e:
        raise DecodingError(e) from e


def _tls_verify(config: ZnVaultConfig) -> Union[bool, ssl.SSLContext]:
    if not config.verifies_tls:
        logger.warning(f"TLS certificate verification is disabled for {config.base_url}")
        return False
    if config.ca_bundle:
        try:
            return ssl.create_default_context(cafile=config.ca_bundle)
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(f"Invalid CA bundle: {config.ca_bundle}") from e
    return True


class HttpClient:
    """
    Request executor shared by all resource clients.

    Performs no automatic retry and no automatic token refresh.
    """

    def __init__(
        self,
        config: ZnVaultConfig,
        tokens: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            config: Client configuration
            tokens: Credential store, seeded from config when omitted
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self.base_url = config.base_url
        self.tokens = tokens or TokenStore(
            access_token=config.access_token,
            api_key=config.api_key,
        )

        # Connection pool shared by every resource client
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout),
            limits=httpx.Limits(
                max_keepalive_connections=config.max_connections,
                max_connections=config.max_connections,
            ),
            verify=_tls_verify(config),
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Close the HTTP client."""
        await self._client.aclose()

    # Request building

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, allow_expired_token: bool = False) -> Dict[str, str]:
        credentials = self.tokens.get()
        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }

        if credentials.access_token:
            if not allow_expired_token and is_token_expired(credentials.access_token):
                raise TokenExpiredError()
            headers["Authorization"] = f"Bearer {credentials.access_token}"
        elif credentials.api_key:
            headers[API_KEY_HEADER] = credentials.api_key

        return headers

    # Request execution

    async def send(
        self,
        method: str,
        path: str,
        *,
        query: Optional[QueryParams] = None,
        body: Any = None,
        allow_expired_token: bool = False,
    ) -> httpx.Response:
        """
        Perform a request and return the successful response.

        Raises:
            NetworkError: on any transport failure or timeout.
            ZnVaultError: the mapped error for a non-2xx status.
        """
        url = self._url(path)
        headers = self._headers(allow_expired_token)
        payload = None
        if body is not None:
            payload = to_jsonable(body)
            headers["Content-Type"] = "application/json"

        if self.config.log_requests:
            logger.debug(f"{method} {url} params={sorted(query or {})}")

        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method=method,
                    url=url,
                    params=query or None,
                    json=payload,
                    headers=headers,
                ),
                timeout=self.config.resource_timeout,
            )
        except httpx.InvalidURL as e:
            raise ConfigurationError(f"Invalid URL: {url}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Request timed out: {method} {url}")
            raise NetworkError(e) from e
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Request failed: {method} {url}: {e}")
            raise NetworkError(e) from e

        if self.config.log_requests:
            logger.debug(f"{method} {url} -> {response.status_code}")

        if not 200 <= response.status_code <= 299:
            raise error_from_response(
                response.status_code, response.content, response.headers
            )
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: Optional[QueryParams] = None,
        body: Any = None,
        response_type: Any = None,
        allow_expired_token: bool = False,
    ) -> Any:
        """
        Perform a request and decode the response.

        Args:
            method: HTTP method
            path: API path, appended to the base URL
            query: Query parameters
            body: JSON body (model, dict or list)
            response_type: Type to decode the body into; None discards it
            allow_expired_token: Send the access token even if its JWT
                expiry has passed (token refresh and login flows)
        """
        response = await self.send(
            method,
            path,
            query=query,
            body=body,
            allow_expired_token=allow_expired_token,
        )
        if response_type is None:
            return None
        return decode_json(response.content, response_type)

    async def get(self, path: str, query: Optional[QueryParams] = None, response_type: Any = None) -> Any:
        return await self.request("GET", path, query=query, response_type=response_type)

    async def get_text(self, path: str, query: Optional[QueryParams] = None) -> str:
        """GET a non-JSON body (exports)."""
        response = await self.send("GET", path, query=query)
        return response.text

    async def post(
        self,
        path: str,
        body: Any = None,
        query: Optional[QueryParams] = None,
        response_type: Any = None,
        **kwargs,
    ) -> Any:
        return await self.request(
            "POST", path, query=query, body=body, response_type=response_type, **kwargs
        )

    async def put(self, path: str, body: Any = None, query: Optional[QueryParams] = None, response_type: Any = None) -> Any:
        return await self.request("PUT", path, query=query, body=body, response_type=response_type)

    async def patch(self, path: str, body: Any = None, query: Optional[QueryParams] = None, response_type: Any = None) -> Any:
        return await self.request("PATCH", path, query=query, body=body, response_type=response_type)

    async def delete(self, path: str, query: Optional[QueryParams] = None, response_type: Any = None) -> Any:
        return await self.request("DELETE", path, query=query, response_type=response_type)
