"""
Input validation utilities
"""
import re
from typing import Optional

import pytz

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


def validate_subdomain(subdomain: str) -> str:
    """Validate subdomain charset ([a-z0-9-]) after lowercasing"""
    value = (subdomain or "").strip().lower()
    if not SUBDOMAIN_PATTERN.match(value):
        raise ValueError(f"Invalid subdomain: {subdomain!r}")
    return value


def normalize_language(language: Optional[str], default: str = "it") -> str:
    """Reduce a language tag like 'en-US' to its lowercase 2-letter code"""
    if not language:
        return default
    code = language.strip().split("-")[0].split("_")[0].lower()[:2]
    if len(code) != 2 or not code.isalpha():
        return default
    return code


def validate_timezone(timezone: Optional[str]) -> Optional[str]:
    """Validate an IANA timezone name"""
    if not timezone:
        return None
    if timezone not in pytz.all_timezones_set:
        raise ValueError(f"Unknown timezone: {timezone}")
    return timezone
