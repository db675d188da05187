from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from .nft_id import NftId


DEFAULT_DIVISIBILITY = 18
FUNGIBLE_RESOURCE = "FungibleResource"
NON_FUNGIBLE_RESOURCE = "NonFungibleResource"


def shorten_address(address: str, start_len: int = 12, end_len: int = 6) -> str:
    """Shorten an address for display: head + "..." + tail."""
    if not address or len(address) <= start_len + end_len + 3:
        return address
    return f"{address[:start_len]}...{address[-end_len:]}"


@dataclass(frozen=True)
class ResourceMetadata:
    """Display metadata for a resource. Immutable once cached."""

    address: str
    name: Optional[str] = None
    symbol: str = ""
    icon_url: Optional[str] = None
    description: str = ""
    entity_type: Optional[str] = None
    divisibility: int = DEFAULT_DIVISIBILITY

    @property
    def is_fungible(self) -> bool:
        return self.entity_type == FUNGIBLE_RESOURCE

    def display_name(self, start_len: int = 15, end_len: int = 6) -> str:
        # Computed, never stored as ``name``: an explicit name added later wins.
        if self.name:
            return self.name
        return shorten_address(self.address, start_len, end_len)

    def label(self) -> str:
        """Short label for token pickers: symbol, then name, then UNKNOWN."""
        return self.symbol or self.name or "UNKNOWN"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResourceMetadata":
        return cls(
            address=data["address"],
            name=data.get("name"),
            symbol=data.get("symbol") or "",
            icon_url=data.get("icon_url"),
            description=data.get("description") or "",
            entity_type=data.get("entity_type"),
            divisibility=int(data.get("divisibility", DEFAULT_DIVISIBILITY)),
        )


@dataclass(frozen=True)
class FungibleHolding:
    resource_address: str
    amount: str
    metadata: Optional[ResourceMetadata] = None

    @property
    def symbol(self) -> str:
        return self.metadata.symbol if self.metadata else ""

    @property
    def divisibility(self) -> int:
        return self.metadata.divisibility if self.metadata else DEFAULT_DIVISIBILITY


@dataclass(frozen=True)
class NonFungibleCollection:
    """
    One vault of one non-fungible resource held by an account.

    ``nf_ids`` may be a strict prefix of the vault's ids; a non-null
    ``next_cursor`` means more can be fetched.
    """

    resource_address: str
    vault_address: str
    total_count: int
    nf_ids: Tuple[NftId, ...] = ()
    next_cursor: Optional[str] = None
    metadata: Optional[ResourceMetadata] = None

    @property
    def is_complete(self) -> bool:
        return self.next_cursor is None


@dataclass(frozen=True)
class NftIdPage:
    ids: Tuple[NftId, ...]
    next_cursor: Optional[str] = None


@dataclass(frozen=True)
class SelectedNft:
    """The NFT whose vault an operation targets."""

    collection: str
    nft_id: NftId
