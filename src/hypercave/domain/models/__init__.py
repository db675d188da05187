from .nft_id import NftId, IntegerNftId, StringNftId, BytesNftId, RuidNftId
from .resource import (
    ResourceMetadata,
    FungibleHolding,
    NonFungibleCollection,
    NftIdPage,
    SelectedNft,
    DEFAULT_DIVISIBILITY,
)
from .preview import NetworkStatus, PreviewReceipt, PreviewResult, ReceiptOutput
from .vault import CaveOperation, ResourceMove, VaultBalanceSnapshot

__all__ = [
    "NftId",
    "IntegerNftId",
    "StringNftId",
    "BytesNftId",
    "RuidNftId",
    "ResourceMetadata",
    "FungibleHolding",
    "NonFungibleCollection",
    "NftIdPage",
    "SelectedNft",
    "DEFAULT_DIVISIBILITY",
    "NetworkStatus",
    "PreviewReceipt",
    "PreviewResult",
    "ReceiptOutput",
    "CaveOperation",
    "ResourceMove",
    "VaultBalanceSnapshot",
]
