from .manifest import ManifestBuilderPort
from .wallet import TransactionOutcome, WalletAccount, WalletPort

__all__ = [
    "ManifestBuilderPort",
    "TransactionOutcome",
    "WalletAccount",
    "WalletPort",
]
