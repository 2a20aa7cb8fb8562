"""
User administration for ZN-Vault SDK.

These endpoints require an admin or superadmin account.
"""

import logging
from typing import AsyncIterator, List, Optional

from .http import HttpClient, QueryParams
from .models import (
    AdminResetPasswordRequest,
    AssignRoleRequest,
    CreateUserRequest,
    Role,
    UpdateUserRequest,
    User,
    UserFilter,
    UserStatus,
)
from .pagination import Page, iterate_pages

logger = logging.getLogger(__name__)


class UserClient:
    """Create, update, lock and unlock user accounts."""

    def __init__(self, http: HttpClient):
        self._http = http

    async def create(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        tenant_id: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        """
        Create a user.

        Args:
            username: Login name
            password: Initial password
            email: Email address
            tenant_id: Tenant the user belongs to
            role: Role name, e.g. ``admin`` or ``user``

        Returns:
            The created user
        """
        request = CreateUserRequest(
            username=username,
            password=password,
            email=email,
            tenant_id=tenant_id,
            role=role,
        )
        user = await self._http.post("/v1/admin/users", request, response_type=User)
        logger.info(f"Created user {user.username} ({user.id})")
        return user

    async def get(self, user_id: str) -> User:
        return await self._http.get(f"/v1/admin/users/{user_id}", response_type=User)

    async def get_by_username(self, username: str) -> User:
        return await self._http.get(
            "/v1/admin/users/by-username", query={"username": username}, response_type=User
        )

    async def list(self, filter: Optional[UserFilter] = None) -> Page[User]:
        """List one page of users."""
        filter = filter or UserFilter()
        query: QueryParams = {}
        if filter.tenant_id:
            query["tenantId"] = filter.tenant_id
        if filter.status is not None:
            query["status"] = filter.status.value
        if filter.role:
            query["role"] = filter.role
        query["limit"] = str(filter.limit)
        query["offset"] = str(filter.offset)

        return await self._http.get("/v1/admin/users", query=query, response_type=Page[User])

    async def list_all(self, filter: Optional[UserFilter] = None) -> AsyncIterator[User]:
        filter = filter or UserFilter()

        async def fetch(offset: int) -> Page[User]:
            return await self.list(filter.model_copy(update={"offset": offset}))

        async for user in iterate_pages(fetch, filter.offset):
            yield user

    async def update(
        self,
        user_id: str,
        email: Optional[str] = None,
        tenant_id: Optional[str] = None,
        status: Optional[UserStatus] = None,
    ) -> User:
        """Update a user; fields left as None are unchanged."""
        request = UpdateUserRequest(email=email, tenant_id=tenant_id, status=status)
        return await self._http.patch(f"/v1/admin/users/{user_id}", request, response_type=User)

    async def delete(self, user_id: str) -> None:
        await self._http.delete(f"/v1/admin/users/{user_id}")
        logger.info(f"Deleted user {user_id}")

    # Status

    async def activate(self, user_id: str) -> User:
        return await self._http.post(f"/v1/admin/users/{user_id}/activate", response_type=User)

    async def deactivate(self, user_id: str) -> User:
        return await self._http.post(f"/v1/admin/users/{user_id}/deactivate", response_type=User)

    async def suspend(self, user_id: str) -> User:
        return await self._http.post(f"/v1/admin/users/{user_id}/suspend", response_type=User)

    async def unlock(self, user_id: str) -> User:
        """Unlock an account locked after failed logins."""
        return await self._http.post(f"/v1/admin/users/{user_id}/unlock", response_type=User)

    # Passwords and 2FA

    async def reset_password(self, user_id: str, new_password: str) -> None:
        await self._http.post(
            f"/v1/admin/users/{user_id}/reset-password",
            AdminResetPasswordRequest(new_password=new_password),
        )

    async def force_password_change(self, user_id: str) -> User:
        """Require a password change at the user's next login."""
        return await self._http.post(
            f"/v1/admin/users/{user_id}/force-password-change", response_type=User
        )

    async def reset_2fa(self, user_id: str) -> None:
        """Remove the user's TOTP enrollment."""
        await self._http.post(f"/v1/admin/users/{user_id}/reset-2fa", {})

    # Roles

    async def assign_role(self, user_id: str, role_id: str) -> None:
        await self._http.post(
            f"/v1/admin/users/{user_id}/roles",
            AssignRoleRequest(user_id=user_id, role_id=role_id),
        )

    async def remove_role(self, user_id: str, role_id: str) -> None:
        await self._http.delete(f"/v1/admin/users/{user_id}/roles/{role_id}")

    async def get_roles(self, user_id: str) -> List[Role]:
        return await self._http.get(f"/v1/admin/users/{user_id}/roles", response_type=List[Role])
