import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from api_clients.cdp_client import get_token_price
from api_clients.exceptions import ProviderError, PriceUnavailable

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Parse a provider amount; anything non-numeric counts as zero."""
    if value is None:
        return ZERO
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def format_usd(value: Decimal) -> str:
    """Plain decimal string without exponent or trailing zeros ('6000', '100', '0.5')."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


def resolve_price(token_identifier: str) -> Decimal:
    """
    Resolve the USD unit price of a token/currency code with one provider round-trip.

    Raises:
        PriceUnavailable: the code is empty, the provider call failed, or the
            returned rate is missing or not positive.
    """
    if not token_identifier:
        raise PriceUnavailable("No token identifier to price")

    try:
        price = get_token_price(token_identifier)
    except PriceUnavailable:
        raise
    except ProviderError as e:
        raise PriceUnavailable(f"Price lookup for {token_identifier} failed: {e}") from e

    unit_price = to_decimal(price.get("amount"))
    if unit_price <= 0:
        raise PriceUnavailable(f"Non-positive price {price.get('amount')!r} for {token_identifier}")
    return unit_price
