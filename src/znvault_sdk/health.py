"""
Health checks for ZN-Vault SDK.
"""

import logging

from tenacity import AsyncRetrying, retry_if_result, stop_after_delay, wait_fixed

from .exceptions import ServerError, ZnVaultError
from .http import HttpClient
from .models import (
    DatabaseHealth,
    HealthResponse,
    KmsHealth,
    LivenessResponse,
    ReadinessResponse,
)

logger = logging.getLogger(__name__)


class HealthClient:
    """Server health, readiness and liveness checks."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def check(self) -> HealthResponse:
        return await self._http.get("/v1/health", response_type=HealthResponse)

    async def is_healthy(self) -> bool:
        """Return True if the server reports itself healthy; never raises."""
        try:
            health = await self.check()
        except ZnVaultError as e:
            logger.debug(f"Health check failed: {e}")
            return False
        return health.is_healthy

    async def wait_for_healthy(self, timeout: float = 60.0, check_interval: float = 1.0) -> bool:
        """
        Poll the health endpoint until the server is healthy.

        Args:
            timeout: Maximum time to wait in seconds
            check_interval: Delay between checks in seconds

        Returns:
            True once healthy, False if the timeout elapsed first
        """
        retrying = AsyncRetrying(
            stop=stop_after_delay(timeout),
            wait=wait_fixed(check_interval),
            retry=retry_if_result(lambda healthy: not healthy),
            retry_error_callback=lambda state: False,
        )
        return await retrying(self.is_healthy)

    async def check_database(self) -> DatabaseHealth:
        health = await self.check()
        if health.database is None:
            raise ServerError("Database health not available")
        return health.database

    async def check_kms(self) -> KmsHealth:
        health = await self.check()
        if health.kms is None:
            raise ServerError("KMS health not available")
        return health.kms

    async def ready(self) -> ReadinessResponse:
        return await self._http.get("/v1/health/ready", response_type=ReadinessResponse)

    async def live(self) -> LivenessResponse:
        return await self._http.get("/v1/health/live", response_type=LivenessResponse)
