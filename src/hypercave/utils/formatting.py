"""
formatting.py - Display and input-validation helpers for amounts and icons

All arithmetic is Decimal; amounts arrive as the decimal strings the Gateway
returns or as raw user input.
"""

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional, Union
from urllib.parse import quote

from ..domain.models.resource import DEFAULT_DIVISIBILITY, shorten_address


IPFS_SCHEME = "ipfs://"
IPFS_GATEWAY = "https://ipfs.io/ipfs/"
TINY_AMOUNT = Decimal("0.000001")

_DEFAULT_ICON_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 32 32">\n'
    '  <circle cx="16" cy="16" r="15" fill="#4A3520"/>\n'
    '  <circle cx="16" cy="16" r="8" fill="#8B5A2B"/>\n'
    "</svg>"
)
DEFAULT_ICON = "data:image/svg+xml," + quote(_DEFAULT_ICON_SVG, safe="")

_AMOUNT_RE = re.compile(r"^[0-9]*\.?[0-9]*$")


@dataclass(frozen=True)
class AmountValidation:
    valid: bool
    error: Optional[str] = None


def _parse(value: Union[str, Decimal, int, float, None]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def format_amount(amount: Union[str, Decimal, int, float, None], max_decimals: int = 6) -> str:
    """Grouped, rounded to ``max_decimals``, trailing zeros dropped."""
    num = _parse(amount)
    if num is None or num == 0:
        return "0"
    if 0 < num < TINY_AMOUNT:
        return "< 0.000001"

    with localcontext() as ctx:
        ctx.prec = 80
        rounded = num.quantize(Decimal(1).scaleb(-max_decimals), rounding=ROUND_HALF_UP)
        if rounded == 0:
            return "0"
        return format(rounded.normalize(), ",f")


def truncate_to_decimals(value: str, divisibility: int) -> str:
    """
    Cut (never round) the fractional part to ``divisibility`` digits.

    A trailing "." is kept so partially typed input survives.
    """
    if not value or "." not in value:
        return value
    whole, frac = value.split(".", 1)
    if divisibility == 0:
        return whole
    return f"{whole}.{frac[:divisibility]}"


def _decimal_places(value: str) -> int:
    if "." not in value:
        return 0
    return len(value.split(".", 1)[1])


def validate_amount(
    value: Optional[str],
    max_amount: Optional[Union[str, Decimal]],
    divisibility: int = DEFAULT_DIVISIBILITY,
) -> AmountValidation:
    """Check user input. ``max_amount=None`` skips the balance check (OUT flow)."""
    if not value or not value.strip():
        return AmountValidation(False, "Amount required")

    trimmed = value.strip()
    if not _AMOUNT_RE.match(trimmed) or trimmed == ".":
        return AmountValidation(False, "Invalid number")

    num = _parse(trimmed)
    if num is None:
        return AmountValidation(False, "Invalid number")
    if num <= 0:
        return AmountValidation(False, "Must be greater than 0")

    if _decimal_places(trimmed) > divisibility:
        if divisibility == 0:
            return AmountValidation(False, "Must be a whole number")
        return AmountValidation(False, f"Max {divisibility} decimal places")

    if max_amount is not None:
        max_num = _parse(max_amount)
        if max_num is not None and num > max_num:
            return AmountValidation(False, "Exceeds available balance")

    return AmountValidation(True)


def icon_url(url: Optional[str]) -> str:
    if not url:
        return DEFAULT_ICON
    if url.startswith(IPFS_SCHEME):
        return IPFS_GATEWAY + url[len(IPFS_SCHEME):]
    return url


__all__ = [
    "AmountValidation",
    "DEFAULT_ICON",
    "format_amount",
    "icon_url",
    "shorten_address",
    "truncate_to_decimals",
    "validate_amount",
]
