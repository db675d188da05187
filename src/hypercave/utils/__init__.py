from .formatting import (
    AmountValidation,
    DEFAULT_ICON,
    format_amount,
    icon_url,
    shorten_address,
    truncate_to_decimals,
    validate_amount,
)
from .log_setup import configure_logging

__all__ = [
    "AmountValidation",
    "DEFAULT_ICON",
    "configure_logging",
    "format_amount",
    "icon_url",
    "shorten_address",
    "truncate_to_decimals",
    "validate_amount",
]
