"""Tests for user lookups and tenant-scoped queries."""

import pytest
from sqlalchemy import select

from _helpers import add_user

from authp.admin.users import AuthUsersAdminService
from authp.db.models import Tenant


async def _seed_tenant_users(session):
    await add_user(session, "u-t1", "t1@x.com", "t1", ["Role1"], "Tenant1")
    await add_user(session, "u-west", "west@x.com", "west", [], "Tenant1 | West")
    await add_user(session, "u-t2", "t2@x.com", "t2", [], "Tenant2")
    await add_user(session, "u-none", "none@x.com", "none")


async def _tenant(session, name: str) -> Tenant:
    result = await session.execute(select(Tenant).where(Tenant.tenant_full_name == name))
    return result.scalars().one()


def test_tenant_data_key_extends_parent():
    parent = Tenant(tenant_id=1, tenant_full_name="P")
    child = Tenant(tenant_id=4, tenant_full_name="C", parent_data_key=parent.data_key)
    assert parent.data_key == "1."
    assert child.data_key == "1.4."


@pytest.mark.asyncio
async def test_query_without_data_key_returns_everyone(session):
    await _seed_tenant_users(session)
    service = AuthUsersAdminService(session)

    users = [u.user_id async for u in service.iter_auth_users()]

    assert users == ["u-none", "u-t1", "u-t2", "u-west"]


@pytest.mark.asyncio
async def test_query_with_data_key_includes_child_tenants(session):
    await _seed_tenant_users(session)
    service = AuthUsersAdminService(session)
    tenant1 = await _tenant(session, "Tenant1")

    users = [u.user_id async for u in service.iter_auth_users(tenant1.data_key)]

    assert users == ["u-t1", "u-west"]


@pytest.mark.asyncio
async def test_query_with_child_data_key_excludes_parent(session):
    await _seed_tenant_users(session)
    service = AuthUsersAdminService(session)
    west = await _tenant(session, "Tenant1 | West")

    users = [u.user_id async for u in service.iter_auth_users(west.data_key)]

    assert users == ["u-west"]


@pytest.mark.asyncio
async def test_query_is_composable(session):
    await _seed_tenant_users(session)
    service = AuthUsersAdminService(session)
    tenant1 = await _tenant(session, "Tenant1")

    query = service.query_auth_users(tenant1.data_key).limit(1)
    result = await session.execute(query)

    assert [u.user_id for u in result.scalars()] == ["u-t1"]


@pytest.mark.asyncio
async def test_find_by_user_id_and_email_load_associations(session):
    await _seed_tenant_users(session)
    service = AuthUsersAdminService(session)

    by_id = await service.find_auth_user_by_user_id("u-t1")
    by_email = await service.find_auth_user_by_email("t1@x.com")

    assert by_id is by_email
    assert by_id.role_names == ["Role1"]
    assert by_id.tenant.tenant_full_name == "Tenant1"


@pytest.mark.asyncio
async def test_find_missing_user_returns_none(session):
    service = AuthUsersAdminService(session)
    assert await service.find_auth_user_by_user_id("nobody") is None
    assert await service.find_auth_user_by_email("nobody@x.com") is None


@pytest.mark.asyncio
async def test_streamed_users_have_roles_and_tenant_loaded(session):
    await _seed_tenant_users(session)
    service = AuthUsersAdminService(session)
    tenant1 = await _tenant(session, "Tenant1")

    users = {u.user_id: u async for u in service.iter_auth_users(tenant1.data_key)}

    assert users["u-t1"].role_names == ["Role1"]
    assert users["u-west"].tenant.tenant_full_name == "Tenant1 | West"


@pytest.mark.asyncio
async def test_find_by_email_in_fresh_session(session, session_factory):
    await _seed_tenant_users(session)

    async with session_factory() as fresh:
        user = await AuthUsersAdminService(fresh).find_auth_user_by_email("west@x.com")

    assert user.user_id == "u-west"
    assert user.role_names == []
    assert user.tenant.tenant_full_name == "Tenant1 | West"
