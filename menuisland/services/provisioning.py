"""
Subdomain provisioning through the Cloudflare DNS API.

Every call is best-effort: network errors and API failures are logged and
reported as False, never raised, so restaurant creation is not rolled back
when DNS provisioning fails.
"""
import logging
import re
import time
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from menuisland.config import get_settings

logger = logging.getLogger(__name__)

CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"
MAX_SUFFIX_ATTEMPTS = 100
SUBDOMAIN_MAX_LENGTH = 50


def generate_subdomain(restaurant_name: str) -> str:
    """Turn a restaurant name into a [a-z0-9-] subdomain label"""
    slug = re.sub(r"[^a-z0-9]", "-", (restaurant_name or "").lower())
    slug = re.sub(r"-+", "-", slug).strip("-")
    slug = slug[:SUBDOMAIN_MAX_LENGTH].strip("-")
    return slug or "menu"


def with_suffix(base: str, suffix: str) -> str:
    """Append a suffix, shortening the base so the label stays within SUBDOMAIN_MAX_LENGTH"""
    room = SUBDOMAIN_MAX_LENGTH - len(suffix)
    trimmed = base[:room].rstrip("-")
    return f"{trimmed}{suffix}" if trimmed else suffix.lstrip("-")


class SubdomainProvisioner:
    def __init__(
        self,
        api_token: Optional[str] = None,
        zone_id: Optional[str] = None,
        base_domain: Optional[str] = None,
        target_ip: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.api_token = api_token if api_token is not None else settings.CLOUDFLARE_API_TOKEN
        self.zone_id = zone_id if zone_id is not None else settings.CLOUDFLARE_ZONE_ID
        self.base_domain = base_domain or settings.BASE_DOMAIN
        self.target_ip = target_ip or settings.DNS_TARGET_IP
        self.timeout = timeout or settings.PROVISIONING_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token and self.zone_id)

    def _fqdn(self, subdomain: str) -> str:
        return f"{subdomain}.{self.base_domain}"

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            base_url=f"{CLOUDFLARE_API_URL}/zones/{self.zone_id}",
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, **kwargs)
            return response.json()

    async def create_subdomain(self, subdomain: str) -> bool:
        """Create a proxied A record for <subdomain>.<base_domain>"""
        if not self.is_configured:
            logger.warning(f"Cloudflare not configured - subdomain {subdomain} not provisioned")
            return False
        try:
            data = await self._request("POST", "/dns_records", json={
                "type": "A",
                "name": subdomain,
                "content": self.target_ip,
                "ttl": 1,  # automatic
                "proxied": True,
            })
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error creating subdomain {subdomain}: {e}")
            return False

        if not data.get("success"):
            logger.error(f"Cloudflare API error creating {subdomain}: {data.get('errors')}")
            return False

        logger.info(f"Subdomain {self._fqdn(subdomain)} created")
        return True

    async def _find_record_id(self, subdomain: str) -> Optional[str]:
        data = await self._request("GET", "/dns_records", params={"name": self._fqdn(subdomain)})
        if not data.get("success"):
            raise ValueError(f"Cloudflare API error: {data.get('errors')}")
        records = data.get("result") or []
        return records[0]["id"] if records else None

    async def subdomain_exists(self, subdomain: str) -> bool:
        if not self.is_configured:
            return False
        try:
            return await self._find_record_id(subdomain) is not None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error checking subdomain {subdomain}: {e}")
            return False

    async def delete_subdomain(self, subdomain: str) -> bool:
        if not self.is_configured:
            logger.warning(f"Cloudflare not configured - subdomain {subdomain} not removed")
            return False
        try:
            record_id = await self._find_record_id(subdomain)
            if record_id is None:
                logger.info(f"No DNS record found for {self._fqdn(subdomain)}")
                return True
            data = await self._request("DELETE", f"/dns_records/{record_id}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error deleting subdomain {subdomain}: {e}")
            return False

        if not data.get("success"):
            logger.error(f"Cloudflare API error deleting {subdomain}: {data.get('errors')}")
            return False

        logger.info(f"Subdomain {self._fqdn(subdomain)} deleted")
        return True

    async def find_available_subdomain(
        self,
        base: str,
        is_taken: Optional[Callable[[str], Awaitable[bool]]] = None,
    ) -> str:
        """First free name among base, base-1, base-2, ...

        After MAX_SUFFIX_ATTEMPTS collisions a millisecond timestamp suffix
        is used instead.
        """

        async def taken(name: str) -> bool:
            if is_taken is not None and await is_taken(name):
                return True
            return await self.subdomain_exists(name)

        candidate = base
        counter = 1
        while await taken(candidate):
            if counter > MAX_SUFFIX_ATTEMPTS:
                return with_suffix(base, f"-{int(time.time() * 1000)}")
            candidate = with_suffix(base, f"-{counter}")
            counter += 1
        return candidate


@lru_cache()
def get_provisioner() -> SubdomainProvisioner:
    return SubdomainProvisioner()
