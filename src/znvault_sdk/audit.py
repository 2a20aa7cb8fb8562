"""
Audit log queries for ZN-Vault SDK.
"""

from datetime import datetime
from typing import AsyncIterator, List, Optional

from .dates import format_datetime
from .http import HttpClient, QueryParams
from .models import (
    AuditEntry,
    AuditExportFormat,
    AuditFilter,
    AuditStats,
    AuditVerifyResult,
)
from .pagination import Page, iterate_pages


def _filter_query(filter: AuditFilter, *fields: str) -> QueryParams:
    """Render the named filter fields as camelCase query parameters."""
    names = {
        "client_cn": "clientCn",
        "action": "action",
        "resource": "resource",
        "result": "result",
        "user_id": "userId",
        "tenant_id": "tenantId",
        "start_date": "startDate",
        "end_date": "endDate",
    }
    query: QueryParams = {}
    for field in fields:
        value = getattr(filter, field)
        if value is None:
            continue
        if isinstance(value, datetime):
            value = format_datetime(value)
        query[names[field]] = str(value)
    return query


class AuditClient:
    """Read-only access to the tamper-evident audit log."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def list(self, filter: Optional[AuditFilter] = None) -> Page[AuditEntry]:
        """
        List one page of audit entries.

        Args:
            filter: Optional filter; the default page size is 100

        Returns:
            Page of audit entries
        """
        filter = filter or AuditFilter()
        query = _filter_query(
            filter,
            "client_cn", "action", "resource", "result",
            "user_id", "tenant_id", "start_date", "end_date",
        )
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/audit", query=query, response_type=Page[AuditEntry])

    async def list_all(self, filter: Optional[AuditFilter] = None) -> AsyncIterator[AuditEntry]:
        """Yield every matching audit entry, fetching pages as needed."""
        filter = filter or AuditFilter()

        async def fetch(offset: int) -> Page[AuditEntry]:
            return await self.list(filter.model_copy(update={"offset": offset}))

        async for entry in iterate_pages(fetch, filter.offset):
            yield entry

    async def get(self, entry_id: int) -> AuditEntry:
        return await self._http.get(f"/v1/audit/{entry_id}", response_type=AuditEntry)

    async def get_stats(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        tenant_id: Optional[str] = None,
    ) -> AuditStats:
        filter = AuditFilter(start_date=start_date, end_date=end_date, tenant_id=tenant_id)
        query = _filter_query(filter, "start_date", "end_date", "tenant_id")
        return await self._http.get("/v1/audit/stats", query=query, response_type=AuditStats)

    async def verify(self) -> AuditVerifyResult:
        """Verify the integrity of the audit hash chain."""
        return await self._http.get("/v1/audit/verify", response_type=AuditVerifyResult)

    async def search(self, text: str, filter: Optional[AuditFilter] = None) -> Page[AuditEntry]:
        """Full-text search over audit entries."""
        filter = filter or AuditFilter()
        query: QueryParams = {"q": text}
        query.update(_filter_query(filter, "action", "start_date", "end_date"))
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/audit/search", query=query, response_type=Page[AuditEntry])

    async def export(
        self,
        format: AuditExportFormat = AuditExportFormat.JSON,
        filter: Optional[AuditFilter] = None,
    ) -> str:
        """
        Export audit entries.

        Returns:
            The export body as text, in the requested format
        """
        filter = filter or AuditFilter()
        query: QueryParams = {"format": format.value}
        query.update(
            _filter_query(filter, "client_cn", "action", "resource", "start_date", "end_date")
        )
        return await self._http.get_text("/v1/audit/export", query=query)

    async def get_user_activity(self, user_id: str, limit: int = 100) -> List[AuditEntry]:
        page = await self.list(AuditFilter(user_id=user_id, limit=limit))
        return page.items

    async def get_tenant_activity(self, tenant_id: str, limit: int = 100) -> List[AuditEntry]:
        page = await self.list(AuditFilter(tenant_id=tenant_id, limit=limit))
        return page.items

    async def get_recent_failures(self, limit: int = 100) -> List[AuditEntry]:
        """Most recent entries whose result is ``failure``."""
        page = await self.list(AuditFilter(result="failure", limit=limit))
        return page.items
