"""
Tenant management for ZN-Vault SDK.
"""

import logging
from typing import AsyncIterator, Optional

from .http import HttpClient, QueryParams
from .models import (
    AddUserToTenantRequest,
    CreateTenantRequest,
    Tenant,
    TenantFilter,
    TenantSettings,
    TenantStats,
    TenantStatus,
    UpdateTenantRequest,
    User,
)
from .pagination import Page, iterate_pages

logger = logging.getLogger(__name__)


class TenantClient:
    """Tenant lifecycle, settings and membership. Superadmin only."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def create(
        self,
        tenant_id: str,
        name: str,
        description: Optional[str] = None,
        settings: Optional[TenantSettings] = None,
        contact_email: Optional[str] = None,
        contact_name: Optional[str] = None,
    ) -> Tenant:
        """
        Create a tenant.

        Args:
            tenant_id: Tenant identifier, chosen by the caller
            name: Display name
            description: Free-form description
            settings: Initial quotas and retention
            contact_email: Contact email address
            contact_name: Contact person
        """
        request = CreateTenantRequest(
            id=tenant_id,
            name=name,
            description=description,
            contact_email=contact_email,
            contact_name=contact_name,
            settings=settings,
        )
        tenant = await self._http.post("/v1/tenants", request, response_type=Tenant)
        logger.info(f"Created tenant {tenant.id}")
        return tenant

    async def get(self, tenant_id: str) -> Tenant:
        return await self._http.get(f"/v1/tenants/{tenant_id}", response_type=Tenant)

    async def list(self, filter: Optional[TenantFilter] = None) -> Page[Tenant]:
        filter = filter or TenantFilter()
        query: QueryParams = {}
        if filter.status is not None:
            query["status"] = filter.status.value
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/tenants", query=query, response_type=Page[Tenant])

    async def list_all(self, filter: Optional[TenantFilter] = None) -> AsyncIterator[Tenant]:
        filter = filter or TenantFilter()

        async def fetch(offset: int) -> Page[Tenant]:
            return await self.list(filter.model_copy(update={"offset": offset}))

        async for tenant in iterate_pages(fetch, filter.offset):
            yield tenant

    async def update(
        self,
        tenant_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[TenantStatus] = None,
        contact_email: Optional[str] = None,
        contact_name: Optional[str] = None,
    ) -> Tenant:
        request = UpdateTenantRequest(
            name=name,
            description=description,
            status=status,
            contact_email=contact_email,
            contact_name=contact_name,
        )
        return await self._http.patch(f"/v1/tenants/{tenant_id}", request, response_type=Tenant)

    async def delete(self, tenant_id: str) -> None:
        await self._http.delete(f"/v1/tenants/{tenant_id}")
        logger.info(f"Deleted tenant {tenant_id}")

    async def activate(self, tenant_id: str) -> Tenant:
        return await self._http.post(f"/v1/tenants/{tenant_id}/activate", response_type=Tenant)

    async def suspend(self, tenant_id: str) -> Tenant:
        """Suspend a tenant; its users can no longer authenticate."""
        return await self._http.post(f"/v1/tenants/{tenant_id}/suspend", response_type=Tenant)

    # Settings and statistics

    async def get_settings(self, tenant_id: str) -> TenantSettings:
        return await self._http.get(
            f"/v1/tenants/{tenant_id}/settings", response_type=TenantSettings
        )

    async def update_settings(self, tenant_id: str, settings: TenantSettings) -> TenantSettings:
        """Replace the tenant's settings."""
        return await self._http.put(
            f"/v1/tenants/{tenant_id}/settings", settings, response_type=TenantSettings
        )

    async def get_stats(self, tenant_id: str) -> TenantStats:
        return await self._http.get(f"/v1/tenants/{tenant_id}/stats", response_type=TenantStats)

    # Members

    async def list_users(self, tenant_id: str, limit: int = 50, offset: int = 0) -> Page[User]:
        return await self._http.get(
            f"/v1/tenants/{tenant_id}/users",
            query={"limit": str(limit), "offset": str(offset)},
            response_type=Page[User],
        )

    async def add_user(self, tenant_id: str, user_id: str) -> None:
        await self._http.post(
            f"/v1/tenants/{tenant_id}/users", AddUserToTenantRequest(user_id=user_id)
        )

    async def remove_user(self, tenant_id: str, user_id: str) -> None:
        await self._http.delete(f"/v1/tenants/{tenant_id}/users/{user_id}")
