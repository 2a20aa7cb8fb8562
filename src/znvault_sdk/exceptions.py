"""
Exception classes for ZN-Vault SDK.

Every failure that leaves the request executor is one of the classes below,
so callers can handle errors by type instead of inspecting status codes.
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, Mapping, Optional

import httpx
from pydantic import BaseModel, ConfigDict, JsonValue
from pydantic import ValidationError as PydanticValidationError


class ZnVaultError(Exception):
    """Base exception for ZN-Vault SDK."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ZnVaultError):
    """Request validation failed (400)."""

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(f"Validation error: {message}", 400)
        self.message = message
        self.fields = fields


class AuthenticationError(ZnVaultError):
    """Authentication failed (401)."""

    def __init__(self, message: str):
        super().__init__(f"Authentication failed: {message}", 401)
        self.message = message


class AuthorizationError(ZnVaultError):
    """Authorization failed, insufficient permissions (403)."""

    def __init__(self, message: str):
        super().__init__(f"Access denied: {message}", 403)
        self.message = message


class NotFoundError(ZnVaultError):
    """Resource not found (404)."""

    def __init__(self, resource: str):
        super().__init__(f"Resource not found: {resource}", 404)
        self.message = resource
        self.resource = resource


class ConflictError(ZnVaultError):
    """Resource state conflict (409)."""

    def __init__(self, message: str):
        super().__init__(f"Conflict: {message}", 409)
        self.message = message


class RateLimitError(ZnVaultError):
    """Rate limit exceeded (429)."""

    def __init__(self, retry_after: Optional[float] = None):
        if retry_after is not None:
            text = f"Rate limit exceeded. Retry after {int(retry_after)} seconds"
        else:
            text = "Rate limit exceeded"
        super().__init__(text, 429)
        self.retry_after = retry_after


class ServerError(ZnVaultError):
    """Server-side failure (5xx)."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(f"Server error: {message}", status_code)
        self.message = message


class HttpError(ZnVaultError):
    """Any other non-2xx response."""

    def __init__(self, status_code: int, message: str, details: Optional[JsonValue] = None):
        super().__init__(f"HTTP {status_code}: {message}", status_code)
        self.message = message
        self.details = details


class NetworkError(ZnVaultError):
    """Transport-level failure: connection, DNS, TLS or timeout."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Network error: {cause}")
        self.cause = cause


class DecodingError(ZnVaultError):
    """Response body did not match the expected schema."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Decoding error: {cause}")
        self.cause = cause


class ConfigurationError(ZnVaultError):
    """Invalid client configuration."""

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}")
        self.message = message


class NotAuthenticatedError(ZnVaultError):
    """An operation needing a credential was attempted without one."""

    def __init__(self):
        super().__init__("Not authenticated. Please login first.")


class TokenExpiredError(ZnVaultError):
    """The current access token is known to be expired."""

    def __init__(self):
        super().__init__("Authentication token expired. Please refresh or login again.")


class ApiErrorResponse(BaseModel):
    """Error body returned by the server. Every field is optional."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    error: Optional[str] = None
    message: Optional[str] = None
    statusCode: Optional[int] = None
    details: Optional[JsonValue] = None
    fields: Optional[Dict[str, str]] = None


def parse_error_body(content: bytes) -> Optional[ApiErrorResponse]:
    """Decode a structured error body, or None if the body is not one."""
    if not content:
        return None
    try:
        return ApiErrorResponse.model_validate_json(content)
    except PydanticValidationError:
        return None


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header given as delta-seconds or an HTTP-date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


def _body_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def error_from_response(
    status_code: int,
    content: bytes = b"",
    headers: Optional[Mapping[str, str]] = None,
) -> ZnVaultError:
    """Map a non-2xx status code and body onto the error taxonomy."""
    details = None
    fields = None

    body = parse_error_body(content)
    if body is not None:
        if body.message is not None:
            message = body.message
        elif body.error is not None:
            message = body.error
        else:
            message = "Unknown error"
        details = body.details
        fields = body.fields
    elif content and _body_text(content).strip():
        message = _body_text(content)
    else:
        message = httpx.codes.get_reason_phrase(status_code) or "Unknown error"

    if status_code == 400:
        return ValidationError(message, fields=fields)
    if status_code == 401:
        return AuthenticationError(message)
    if status_code == 403:
        return AuthorizationError(message)
    if status_code == 404:
        return NotFoundError(message)
    if status_code == 409:
        return ConflictError(message)
    if status_code == 429:
        retry_after = parse_retry_after(httpx.Headers(headers or {}).get("retry-after"))
        return RateLimitError(retry_after)
    if 500 <= status_code <= 599:
        return ServerError(message, status_code)
    return HttpError(status_code, message, details)
