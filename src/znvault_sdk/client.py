"""
ZN-Vault Client

Main client class for interacting with ZN-Vault instances.
"""

import logging
from typing import Optional

import httpx

from .audit import AuditClient
from .auth import AuthClient
from .certificates import CertificateClient
from .config import ZnVaultConfig
from .health import HealthClient
from .http import HttpClient
from .kms import KmsClient
from .policies import PolicyClient
from .roles import RoleClient
from .secrets import SecretClient
from .tenants import TenantClient
from .users import UserClient

logger = logging.getLogger(__name__)


class ZnVaultClient:
    """
    Main client for interacting with ZN-Vault instances.

    All resource clients share one connection pool and one credential store,
    so a login through ``client.auth`` is immediately used by
    ``client.secrets`` and the rest.

    Example:
        async with ZnVaultClient("https://vault.example.com") as client:
            await client.auth.login("admin", "password")
            secret = await client.secrets.get_by_alias("api/prod/db")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        config: Optional[ZnVaultConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **options,
    ):
        """
        Initialize the ZN-Vault client.

        Args:
            base_url: Base URL of the ZN-Vault server
            config: Complete configuration; excludes base_url and options
            transport: Optional httpx transport (used by tests)
            **options: Further ZnVaultConfig fields, e.g. api_key or timeout

        Raises:
            ConfigurationError: if the configuration is invalid.
        """
        if config is None:
            if base_url is not None:
                options["base_url"] = base_url
            config = ZnVaultConfig.create(**options)
        elif base_url is not None or options:
            raise TypeError("Pass either config or base_url/options, not both")

        self.config = config
        self._http = HttpClient(config, transport=transport)

        self.auth = AuthClient(self._http)
        self.secrets = SecretClient(self._http)
        self.kms = KmsClient(self._http)
        self.certificates = CertificateClient(self._http)
        self.audit = AuditClient(self._http)
        self.health = HealthClient(self._http)
        self.users = UserClient(self._http)
        self.tenants = TenantClient(self._http)
        self.roles = RoleClient(self._http)
        self.policies = PolicyClient(self._http)

        logger.debug(f"ZN-Vault client created for {config.base_url}")

    @classmethod
    def from_env(cls, transport: Optional[httpx.AsyncBaseTransport] = None, **overrides) -> "ZnVaultClient":
        """Create a client configured from ZNVAULT_* environment variables."""
        return cls(config=ZnVaultConfig.from_env(**overrides), transport=transport)

    @property
    def tokens(self):
        """The credential store shared by all resource clients."""
        return self._http.tokens

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Close the underlying connection pool."""
        await self._http.aclose()
