"""
Subdomain provisioning tests - Cloudflare API mocked with httpx.MockTransport
"""
import json

import httpx

from menuisland.services.provisioning import (
    MAX_SUFFIX_ATTEMPTS,
    SUBDOMAIN_MAX_LENGTH,
    SubdomainProvisioner,
    generate_subdomain,
    with_suffix,
)
from menuisland.utils.validators import validate_subdomain


class FakeCloudflare:
    """Minimal in-memory stand-in for the zone's dns_records endpoints"""

    def __init__(self, names=(), fail=False):
        self.records = {f"rec-{i}": name for i, name in enumerate(names)}
        self.fail = fail
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(400, json={"success": False, "errors": [{"message": "bad token"}]})

        path = request.url.path
        if request.method == "GET" and path.endswith("/dns_records"):
            name = request.url.params.get("name")
            result = [{"id": rid, "name": n} for rid, n in self.records.items() if n == name]
            return httpx.Response(200, json={"success": True, "result": result})
        if request.method == "POST" and path.endswith("/dns_records"):
            body = json.loads(request.content)
            rid = f"rec-{len(self.records)}"
            self.records[rid] = f"{body['name']}.menuisland.it"
            return httpx.Response(200, json={"success": True, "result": {"id": rid}})
        if request.method == "DELETE":
            self.records.pop(path.rsplit("/", 1)[-1], None)
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404, json={"success": False})


def _provisioner(api, **kwargs):
    return SubdomainProvisioner(
        api_token="token",
        zone_id="zone",
        base_domain="menuisland.it",
        transport=httpx.MockTransport(api),
        **kwargs,
    )


def test_generate_subdomain():
    assert generate_subdomain("Pizzeria Da Mario") == "pizzeria-da-mario"
    assert generate_subdomain("  Caffè & Co.  ") == "caff-co"
    assert generate_subdomain("!!!") == "menu"
    assert len(generate_subdomain("a" * 80)) == 50


async def test_create_subdomain():
    api = FakeCloudflare()
    provisioner = _provisioner(api)

    assert await provisioner.create_subdomain("demo") is True
    request = api.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/client/v4/zones/zone/dns_records"
    assert request.headers["Authorization"] == "Bearer token"
    assert json.loads(request.content)["proxied"] is True


async def test_exists_and_delete():
    api = FakeCloudflare(names=["demo.menuisland.it"])
    provisioner = _provisioner(api)

    assert await provisioner.subdomain_exists("demo") is True
    assert await provisioner.subdomain_exists("altra") is False
    assert await provisioner.delete_subdomain("demo") is True
    assert api.records == {}
    # deleting a record that is already gone is not an error
    assert await provisioner.delete_subdomain("demo") is True


async def test_api_failure_returns_false():
    provisioner = _provisioner(FakeCloudflare(fail=True))
    assert await provisioner.create_subdomain("demo") is False
    assert await provisioner.subdomain_exists("demo") is False
    assert await provisioner.delete_subdomain("demo") is False


async def test_network_error_returns_false():
    def unreachable(request):
        raise httpx.ConnectError("unreachable", request=request)

    provisioner = _provisioner(unreachable)
    assert await provisioner.create_subdomain("demo") is False


async def test_unconfigured_provisioner():
    provisioner = SubdomainProvisioner(api_token="", zone_id="")
    assert provisioner.is_configured is False
    assert await provisioner.create_subdomain("demo") is False
    assert await provisioner.subdomain_exists("demo") is False
    assert await provisioner.delete_subdomain("demo") is False


async def test_find_available_subdomain_suffixes():
    api = FakeCloudflare(names=["demo.menuisland.it", "demo-1.menuisland.it"])
    provisioner = _provisioner(api)

    async def taken_locally(name):
        return name == "demo-2"

    assert await provisioner.find_available_subdomain("demo", is_taken=taken_locally) == "demo-3"
    assert await provisioner.find_available_subdomain("nuovo") == "nuovo"


async def test_find_available_subdomain_timestamp_fallback():
    provisioner = SubdomainProvisioner(api_token="", zone_id="")
    checked = []

    async def always_taken(name):
        checked.append(name)
        return True

    name = await provisioner.find_available_subdomain("demo", is_taken=always_taken)
    assert len(checked) == MAX_SUFFIX_ATTEMPTS + 1
    assert name.startswith("demo-")
    assert int(name.split("-", 1)[1]) > MAX_SUFFIX_ATTEMPTS


def test_with_suffix_keeps_label_length():
    assert with_suffix("demo", "-1") == "demo-1"
    assert with_suffix("a" * SUBDOMAIN_MAX_LENGTH, "-12") == "a" * (SUBDOMAIN_MAX_LENGTH - 3) + "-12"
    # Trimming must not leave a double dash behind
    assert with_suffix("a" * 47 + "-bc", "-1") == "a" * 47 + "-1"


async def test_find_available_subdomain_long_base_stays_valid():
    provisioner = SubdomainProvisioner(api_token="", zone_id="")
    base = generate_subdomain("Antica Trattoria della Nonna Rosa e del Nonno Beppe al Porto")
    assert len(base) == SUBDOMAIN_MAX_LENGTH

    async def always_taken(name):
        return True

    async def first_taken(name):
        return name == base

    numbered = await provisioner.find_available_subdomain(base, is_taken=first_taken)
    assert len(numbered) <= SUBDOMAIN_MAX_LENGTH
    assert numbered.endswith("-1")
    assert validate_subdomain(numbered) == numbered

    stamped = await provisioner.find_available_subdomain(base, is_taken=always_taken)
    assert len(stamped) <= SUBDOMAIN_MAX_LENGTH
    assert validate_subdomain(stamped) == stamped
