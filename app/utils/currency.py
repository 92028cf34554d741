"""
Currency conversion and price formatting helpers.
"""

from typing import Dict, Optional, Union
from app.config import settings
from app.utils.country import get_country_info

Number = Union[int, float]


def convert_gyd_to_usd_cents(amount_gyd: Number, rate: Optional[float] = None) -> int:
    """
    Convert a GYD amount to USD cents for the card gateway.

    Args:
        amount_gyd: Amount in Guyanese dollars
        rate: GYD per USD, defaults to the configured rate

    Returns:
        Rounded USD amount in cents
    """
    rate = rate or settings.gyd_to_usd_rate
    return round(amount_gyd / rate * 100)


def format_amount(amount: Number) -> str:
    """Thousands-separated amount, dropping a zero fractional part."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def format_gyd(amount_gyd: Number) -> str:
    return f"G${format_amount(amount_gyd)}"


def format_plan_price(price_minor_units: int, country_id: Optional[str]) -> Dict[str, object]:
    """
    Display values for a plan price stored in minor units.

    Returns:
        Dict with price_display (major units) and price_formatted (symbol + amount)
    """
    info = get_country_info(country_id)
    display = price_minor_units / 100
    return {
        "price_display": display,
        "price_formatted": f"{info['symbol']}{format_amount(display)}",
        "currency": info["currency"],
    }
