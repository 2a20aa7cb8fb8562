"""
Role-based access control (RBAC) for ZN-Vault SDK.
"""

from typing import AsyncIterator, List, Optional
from urllib.parse import quote

from .http import HttpClient, QueryParams
from .models import (
    AddPermissionRequest,
    AssignRoleRequest,
    CreateRoleRequest,
    Permission,
    Role,
    RoleFilter,
    UpdateRoleRequest,
    User,
)
from .pagination import Page, iterate_pages


class RoleClient:
    """Roles, their permissions and their members."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def create(
        self,
        name: str,
        permissions: List[str],
        description: Optional[str] = None,
    ) -> Role:
        """
        Create a role.

        Args:
            name: Role name
            permissions: Permission names, e.g. ``secret:read``
            description: Free-form description
        """
        request = CreateRoleRequest(name=name, description=description, permissions=permissions)
        return await self._http.post("/v1/admin/roles", request, response_type=Role)

    async def get(self, role_id: str) -> Role:
        return await self._http.get(f"/v1/admin/roles/{role_id}", response_type=Role)

    async def list(self, filter: Optional[RoleFilter] = None) -> Page[Role]:
        """List one page of roles; built-in roles only when include_system is set."""
        filter = filter or RoleFilter()
        query: QueryParams = {}
        if filter.include_system:
            query["includeSystem"] = "true"
        if filter.tenant_id:
            query["tenantId"] = filter.tenant_id
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/admin/roles", query=query, response_type=Page[Role])

    async def list_all(self, filter: Optional[RoleFilter] = None) -> AsyncIterator[Role]:
        filter = filter or RoleFilter()

        async def fetch(offset: int) -> Page[Role]:
            return await self.list(filter.model_copy(update={"offset": offset}))

        async for role in iterate_pages(fetch, filter.offset):
            yield role

    async def update(
        self,
        role_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        permissions: Optional[List[str]] = None,
    ) -> Role:
        request = UpdateRoleRequest(name=name, description=description, permissions=permissions)
        return await self._http.patch(f"/v1/admin/roles/{role_id}", request, response_type=Role)

    async def delete(self, role_id: str) -> None:
        await self._http.delete(f"/v1/admin/roles/{role_id}")

    # Permissions

    async def add_permission(self, role_id: str, permission: str) -> Role:
        return await self._http.post(
            f"/v1/admin/roles/{role_id}/permissions",
            AddPermissionRequest(permission=permission),
            response_type=Role,
        )

    async def remove_permission(self, role_id: str, permission: str) -> Role:
        return await self._http.delete(
            f"/v1/admin/roles/{role_id}/permissions/{quote(permission, safe='')}",
            response_type=Role,
        )

    async def list_permissions(self) -> List[Permission]:
        """List every permission the server knows."""
        return await self._http.get("/v1/admin/permissions", response_type=List[Permission])

    # Members

    async def get_users(self, role_id: str) -> List[User]:
        return await self._http.get(f"/v1/admin/roles/{role_id}/users", response_type=List[User])

    async def assign_to_user(self, role_id: str, user_id: str) -> None:
        await self._http.post(
            f"/v1/admin/roles/{role_id}/users",
            AssignRoleRequest(user_id=user_id, role_id=role_id),
        )

    async def remove_from_user(self, role_id: str, user_id: str) -> None:
        await self._http.delete(f"/v1/admin/roles/{role_id}/users/{user_id}")
