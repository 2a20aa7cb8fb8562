"""
Configuration classes for ZN-Vault SDK.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError

ENV_PREFIX = "ZNVAULT_"

_ENV_FIELDS = (
    "base_url",
    "api_key",
    "access_token",
    "timeout",
    "trust_self_signed",
    "insecure_tls",
    "ca_bundle",
)


class ZnVaultConfig(BaseModel):
    """Configuration for ZN-Vault client."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = Field("", validate_default=True, description="Base URL of the ZN-Vault server")
    api_key: Optional[str] = Field(None, description="API key sent in the X-API-Key header")
    access_token: Optional[str] = Field(None, description="Access token for a pre-authenticated session")
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    max_connections: int = Field(10, ge=1, description="Maximum number of pooled connections")
    user_agent: str = Field("zn-vault-sdk-python", description="User-Agent header value")

    # TLS (development and testing only)
    trust_self_signed: bool = Field(False, description="Accept self-signed server certificates")
    insecure_tls: bool = Field(False, description="Disable TLS certificate validation entirely")
    ca_bundle: Optional[str] = Field(None, description="Path to CA bundle file")

    # Logging configuration
    log_requests: bool = Field(False, description="Whether to log HTTP requests")

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Base URL is required")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must start with http:// or https://, got {value!r}")
        return value.rstrip("/")

    @property
    def resource_timeout(self) -> float:
        """Upper bound for a whole request/response exchange."""
        return self.timeout * 2

    @property
    def verifies_tls(self) -> bool:
        return not (self.insecure_tls or self.trust_self_signed)

    @classmethod
    def create(cls, **fields) -> "ZnVaultConfig":
        """
        Build a configuration, failing fast on invalid input.

        Raises:
            ConfigurationError: if a field is missing or invalid.
        """
        try:
            return cls(**fields)
        except PydanticValidationError as e:
            problems = []
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"]) or "config"
                reason = error.get("ctx", {}).get("error", error["msg"])
                problems.append(f"{location}: {reason}")
            raise ConfigurationError("; ".join(problems)) from e

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides) -> "ZnVaultConfig":
        """
        Build a configuration from ZNVAULT_* environment variables.

        Keyword arguments take precedence over the environment.
        """
        fields = {}
        for name in _ENV_FIELDS:
            value = os.environ.get(prefix + name.upper(), "").strip().strip('"')
            if value:
                fields[name] = value
        fields.update(overrides)
        return cls.create(**fields)
