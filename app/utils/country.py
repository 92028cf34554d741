"""
Country metadata and country selection helpers.
Country scoping for pricing and listings comes from the `country-code` cookie.
"""

from typing import Dict, Optional
from app.config import settings


COUNTRY_INFO: Dict[str, Dict[str, str]] = {
    "GY": {"code": "GY", "name": "Guyana", "currency": "GYD", "symbol": "GY$"},
    "JM": {"code": "JM", "name": "Jamaica", "currency": "JMD", "symbol": "J$"},
}

FALLBACK_COUNTRY_INFO = {"name": "International", "currency": "USD", "symbol": "$"}


def normalize_country_code(value: Optional[str]) -> Optional[str]:
    """Uppercase and strip a country code, None for blanks."""
    if value is None:
        return None
    code = value.strip().upper()
    return code or None


def is_supported_country(value: Optional[str]) -> bool:
    return normalize_country_code(value) in settings.supported_countries


def get_country_info(country_id: Optional[str]) -> Dict[str, str]:
    """
    Get display name and currency for a country.

    Unknown countries fall back to USD with a "$" symbol.
    """
    code = normalize_country_code(country_id)
    if code in COUNTRY_INFO:
        return dict(COUNTRY_INFO[code])
    return {"code": code or "", **FALLBACK_COUNTRY_INFO}


def country_from_hostname(hostname: Optional[str]) -> Optional[str]:
    """Jamaica-branded hostnames select JM."""
    if hostname and "jamaica" in hostname.lower():
        return "JM"
    return None


def resolve_country(
    explicit: Optional[str] = None,
    cookie_value: Optional[str] = None,
    hostname: Optional[str] = None
) -> str:
    """
    Resolve the active country for a request.

    Order: explicit parameter, supported cookie value, hostname, default country.
    An explicit parameter is honoured even for unsupported codes so that
    callers can query any country's data.
    """
    code = normalize_country_code(explicit)
    if code:
        return code

    cookie_code = normalize_country_code(cookie_value)
    if cookie_code in settings.supported_countries:
        return cookie_code

    return country_from_hostname(hostname) or settings.default_country
