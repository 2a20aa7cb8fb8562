"""Tests for users.py: admin user management."""

import pytest

from conftest import respond
from znvault_sdk.exceptions import ConflictError
from znvault_sdk.models import UserFilter, UserStatus


@pytest.mark.asyncio
async def test_create_user(server, make_client, user_payload):
    server.add("POST", "/v1/admin/users", respond(201, user_payload))
    async with make_client(access_token="tok") as client:
        user = await client.users.create("alice", "Pa55word!", email="alice@example.com", tenant_id="acme")

    assert user.id == "user-1"
    assert user.totp_enabled is True
    assert server.body() == {
        "username": "alice",
        "password": "Pa55word!",
        "email": "alice@example.com",
        "tenant_id": "acme",
    }


@pytest.mark.asyncio
async def test_duplicate_username_is_conflict(server, make_client):
    server.add("POST", "/v1/admin/users", respond(409, {"error": "Conflict", "message": "Username taken"}))
    async with make_client(access_token="tok") as client:
        with pytest.raises(ConflictError):
            await client.users.create("alice", "pw")


@pytest.mark.asyncio
async def test_get_and_get_by_username(server, make_client, user_payload):
    server.add("GET", "/v1/admin/users/user-1", respond(200, user_payload))
    server.add("GET", "/v1/admin/users/by-username", respond(200, user_payload))
    async with make_client(access_token="tok") as client:
        by_id = await client.users.get("user-1")
        by_name = await client.users.get_by_username("alice")

    assert by_id.username == by_name.username == "alice"
    assert server.last.url.params["username"] == "alice"


@pytest.mark.asyncio
async def test_list_query(server, make_client, user_payload):
    server.add("GET", "/v1/admin/users", respond(200, {
        "data": [user_payload], "total": 1, "limit": 10, "offset": 0,
    }))
    async with make_client(access_token="tok") as client:
        page = await client.users.list(
            UserFilter(tenant_id="acme", status=UserStatus.LOCKED, role="admin", limit=10)
        )

    assert page.items[0].id == "user-1"
    assert dict(server.last.url.params) == {
        "tenantId": "acme", "status": "locked", "role": "admin", "limit": "10", "offset": "0",
    }


@pytest.mark.asyncio
async def test_list_all_follows_offsets(server, make_client, user_payload):
    server.add(
        "GET",
        "/v1/admin/users",
        respond(200, {"items": [user_payload] * 2, "total": 3, "limit": 2, "offset": 0, "hasMore": True}),
        respond(200, {"items": [user_payload], "total": 3, "limit": 2, "offset": 2}),
    )
    async with make_client(access_token="tok") as client:
        users = [u async for u in client.users.list_all(UserFilter(limit=2))]

    assert len(users) == 3
    assert [r.url.params["offset"] for r in server.requests] == ["0", "2"]


@pytest.mark.asyncio
async def test_update_sends_only_given_fields(server, make_client, user_payload):
    server.add("PATCH", "/v1/admin/users/user-1", respond(200, {**user_payload, "status": "disabled"}))
    async with make_client(access_token="tok") as client:
        user = await client.users.update("user-1", status=UserStatus.DISABLED)

    assert user.status is UserStatus.DISABLED
    assert server.body() == {"status": "disabled"}


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["activate", "deactivate", "suspend", "unlock", "force_password_change"])
async def test_status_actions(server, make_client, user_payload, action):
    path = "/v1/admin/users/user-1/" + action.replace("_", "-")
    server.add("POST", path, respond(200, user_payload))
    async with make_client(access_token="tok") as client:
        user = await getattr(client.users, action)("user-1")
    assert user.id == "user-1"
    assert server.last.url.path == path


@pytest.mark.asyncio
async def test_reset_password_and_2fa(server, make_client):
    server.add("POST", "/v1/admin/users/user-1/reset-password", respond(204))
    server.add("POST", "/v1/admin/users/user-1/reset-2fa", respond(200, {"success": True}))
    async with make_client(access_token="tok") as client:
        await client.users.reset_password("user-1", "Temp0rary!")
        await client.users.reset_2fa("user-1")

    assert server.body(0) == {"new_password": "Temp0rary!"}
    assert server.body(1) == {}


@pytest.mark.asyncio
async def test_role_membership(server, make_client):
    server.add("POST", "/v1/admin/users/user-1/roles", respond(204))
    server.add("GET", "/v1/admin/users/user-1/roles", respond(200, [
        {"id": "role-1", "name": "auditor", "permissions": ["audit:read"]},
    ]))
    server.add("DELETE", "/v1/admin/users/user-1/roles/role-1", respond(204))
    async with make_client(access_token="tok") as client:
        await client.users.assign_role("user-1", "role-1")
        roles = await client.users.get_roles("user-1")
        await client.users.remove_role("user-1", "role-1")

    assert server.body(0) == {"user_id": "user-1", "role_id": "role-1"}
    assert roles[0].permissions == ["audit:read"]
    assert server.last.method == "DELETE"


@pytest.mark.asyncio
async def test_delete_user(server, make_client):
    server.add("DELETE", "/v1/admin/users/user-1", respond(204))
    async with make_client(access_token="tok") as client:
        assert await client.users.delete("user-1") is None
