"""
Tenant directory tests - host parsing, subdomain lookup, template fallback
"""
from menuisland.models import Restaurant
from menuisland.services.tenant_directory import (
    normalize_subdomain,
    resolve_template,
    resolve_tenant,
    subdomain_from_host,
)


def test_normalize_subdomain():
    assert normalize_subdomain("  Demo ") == "demo"
    assert normalize_subdomain(None) == ""


def test_subdomain_from_tenant_host():
    assert subdomain_from_host("demo.menuisland.it", "menuisland.it") == "demo"
    assert subdomain_from_host("Demo.MenuIsland.it:8000", "menuisland.it") == "demo"


def test_subdomain_from_platform_hosts():
    assert subdomain_from_host("menuisland.it", "menuisland.it") is None
    assert subdomain_from_host("www.menuisland.it", "menuisland.it") is None
    assert subdomain_from_host("a.b.menuisland.it", "menuisland.it") is None
    assert subdomain_from_host("demo.example.com", "menuisland.it") is None
    assert subdomain_from_host(None, "menuisland.it") is None


async def test_resolve_tenant_exact_match(db_session, seed_data):
    restaurant = await resolve_tenant(db_session, "DEMO")
    assert restaurant is not None
    assert restaurant.id == seed_data["demo"].id


async def test_resolve_tenant_no_partial_match(db_session, seed_data):
    assert await resolve_tenant(db_session, "dem") is None
    assert await resolve_tenant(db_session, "demo-2") is None
    assert await resolve_tenant(db_session, "") is None


async def test_resolve_template_falls_back_to_default(db_session, seed_data):
    template = await resolve_template(db_session, None)
    assert template is not None
    assert template.id == 1


async def test_resolve_template_missing(db_session, seed_data):
    assert await resolve_template(db_session, 42) is None


async def test_resolve_tenant_ghost(db_session, seed_data):
    db_session.add(Restaurant(name="Ghost", subdomain="ghost-kitchen", owner_id="owner-9"))
    await db_session.commit()
    assert await resolve_tenant(db_session, "ghost") is None
    assert (await resolve_tenant(db_session, "ghost-kitchen")).name == "Ghost"
