"""
Helper and validator tests - money formatting/parsing, languages, timezones
"""
from datetime import date, datetime, timedelta

import pytest

from menuisland.utils.db_compat import window_start, window_start_datetime
from menuisland.utils.helpers import format_price, local_now, local_today, parse_price
from menuisland.utils.validators import normalize_language, validate_subdomain, validate_timezone


def test_format_price():
    assert format_price(1290) == "€12.90"
    assert format_price(500, "USD") == "$5.00"
    assert format_price(123456, "EUR") == "€1,234.56"
    assert format_price(700, "JPY") == "JPY 7.00"
    assert format_price(None) == ""


@pytest.mark.parametrize("raw, cents", [
    ("€12,90", 1290),
    ("12.90 EUR", 1290),
    ("1.200,50", 120050),
    ("1,200.50", 120050),
    ("€16", 1600),
    ("7,5", 750),
    ("1.200", 120000),
])
def test_parse_price(raw, cents):
    assert parse_price(raw) == cents


@pytest.mark.parametrize("raw", ["", "gratis", "-3,00"])
def test_parse_price_invalid(raw):
    with pytest.raises(ValueError):
        parse_price(raw)


def test_normalize_language():
    assert normalize_language("en-US") == "en"
    assert normalize_language("pt_BR") == "pt"
    assert normalize_language("DE") == "de"
    assert normalize_language("") == "it"
    assert normalize_language("1x", default="en") == "en"


def test_validate_subdomain():
    assert validate_subdomain("Demo-1") == "demo-1"
    for bad in ("", "-demo", "demo_1", "demo.it"):
        with pytest.raises(ValueError):
            validate_subdomain(bad)


def test_validate_timezone():
    assert validate_timezone("Europe/Rome") == "Europe/Rome"
    assert validate_timezone(None) is None
    with pytest.raises(ValueError):
        validate_timezone("Mars/Olympus")


def test_local_today():
    assert local_today() == date.today()
    # Rome is never more than a calendar day away from the server
    assert abs((local_today("Europe/Rome") - date.today()).days) <= 1


def test_local_now_is_naive_wall_clock():
    assert local_now().tzinfo is None
    assert abs(local_now() - datetime.now()) < timedelta(minutes=1)

    # UTC+14 and UTC-12 are 26 hours apart on the wall clock
    ahead = local_now("Etc/GMT-14")
    behind = local_now("Etc/GMT+12")
    assert ahead.tzinfo is None
    assert abs((ahead - behind) - timedelta(hours=26)) < timedelta(minutes=1)
    assert local_today("Etc/GMT-14") == ahead.date()


def test_window_bounds():
    today = date(2024, 3, 1)
    assert window_start(30, today) == date(2024, 1, 31)
    assert window_start_datetime(1, today).isoformat() == "2024-02-29T00:00:00"
