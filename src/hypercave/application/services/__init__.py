from .balance_preview import BalancePreviewEngine, decode_balances
from .holdings_resolver import HoldingsResolver
from .metadata_resolver import MetadataResolver
from .reconciliation import ReconciliationEngine
from .vault_token_discovery import VaultTokenDiscovery, decode_resource_key

__all__ = [
    "BalancePreviewEngine",
    "decode_balances",
    "HoldingsResolver",
    "MetadataResolver",
    "ReconciliationEngine",
    "VaultTokenDiscovery",
    "decode_resource_key",
]
