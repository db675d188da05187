from abc import ABC, abstractmethod
from typing import Sequence

from ..domain.models.resource import SelectedNft
from ..domain.models.vault import ResourceMove


class ManifestBuilderPort(ABC):
    """Builds opaque transaction manifests for the vault component."""

    @abstractmethod
    def build_deposit(
        self, account: str, nft: SelectedNft, moves: Sequence[ResourceMove]
    ) -> str:
        ...

    @abstractmethod
    def build_withdrawal(
        self, account: str, nft: SelectedNft, moves: Sequence[ResourceMove]
    ) -> str:
        ...

    @abstractmethod
    def build_lookup(
        self, account: str, nft: SelectedNft, resource_addresses: Sequence[str]
    ) -> str:
        """Read-only manifest returning one Option<Decimal> per address, in order."""
        ...
