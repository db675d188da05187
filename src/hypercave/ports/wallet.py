from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class WalletAccount:
    """An account the wallet shares with this client."""

    address: str
    label: str = ""


@dataclass
class TransactionOutcome:
    """Result of asking the wallet to sign and submit a manifest."""

    ok: bool
    intent_hash: Optional[str] = None
    error_message: str = ""


class WalletPort(ABC):
    """Wallet connector abstraction (signing and submission)."""

    @abstractmethod
    async def send_transaction(self, manifest: str, message: str = "") -> TransactionOutcome:
        ...
