"""
cave_session.py - Account-scoped orchestration of the IN / OUT / LOOK flows

Owns the "current account" and routes each user action through the resolvers,
the wallet, and the reconciliation engine. Presentation is left to callers:
every method returns plain records or raises a CaveSessionError.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from loguru import logger

from ..domain.errors import (
    InvalidOperationError,
    NoAccountError,
    NoNftError,
    WalletRejectedError,
)
from ..domain.models.resource import (
    FungibleHolding,
    NonFungibleCollection,
    ResourceMetadata,
    SelectedNft,
)
from ..domain.models.vault import CaveOperation, ResourceMove
from ..ports.manifest import ManifestBuilderPort
from ..ports.wallet import WalletAccount, WalletPort
from .services.balance_preview import BalancePreviewEngine
from .services.holdings_resolver import HoldingsResolver
from .services.metadata_resolver import MetadataResolver
from .services.reconciliation import ReconciliationEngine
from .services.vault_token_discovery import VaultTokenDiscovery


DEPOSIT_MESSAGE = "PUT IN CAVE"
WITHDRAW_MESSAGE = "TAKE FROM CAVE"


@dataclass
class LoadResult:
    operation: CaveOperation
    collections: List[NonFungibleCollection]
    holdings: List[FungibleHolding]


@dataclass
class LookupResult:
    nft: SelectedNft
    balances: Dict[str, Optional[str]]
    metadata: Dict[str, ResourceMetadata] = field(default_factory=dict)

    @property
    def found(self) -> Dict[str, str]:
        """Only the resources the vault has a record for."""
        return {addr: bal for addr, bal in self.balances.items() if bal is not None}


class CaveSession:
    def __init__(
        self,
        holdings: HoldingsResolver,
        discovery: VaultTokenDiscovery,
        metadata: MetadataResolver,
        preview: BalancePreviewEngine,
        reconciliation: ReconciliationEngine,
        wallet: WalletPort,
        manifests: ManifestBuilderPort,
    ):
        self.holdings = holdings
        self.discovery = discovery
        self.metadata = metadata
        self.preview = preview
        self.reconciliation = reconciliation
        self.wallet = wallet
        self.manifests = manifests
        self.accounts: List[WalletAccount] = []

    @property
    def account(self) -> Optional[str]:
        return self.reconciliation.account

    # ------------------------------------------------------------------ #
    # Accounts                                                          #
    # ------------------------------------------------------------------ #
    def on_wallet_accounts(self, accounts: Sequence[WalletAccount]) -> Optional[str]:
        """Track the wallet's shared accounts. Returns the active address."""
        self.accounts = list(accounts)
        if not self.accounts:
            self.reconciliation.disconnect()
            return None

        addresses = [a.address for a in self.accounts]
        chosen = self.account if self.account in addresses else addresses[0]
        self.reconciliation.switch_account(chosen)
        return chosen

    def select_account(self, address: str) -> None:
        if address not in [a.address for a in self.accounts]:
            logger.warning(f"CAVE | select_account | unknown={address[:16]}...")
            return
        self.reconciliation.switch_account(address)

    def disconnect(self) -> None:
        self.accounts = []
        self.reconciliation.disconnect()

    # ------------------------------------------------------------------ #
    # Flows                                                             #
    # ------------------------------------------------------------------ #
    async def load(self, operation: CaveOperation) -> LoadResult:
        account = self._require_account()

        if operation is CaveOperation.IN:
            holdings, collections = await asyncio.gather(
                self.holdings.fungibles(account),
                self.holdings.non_fungibles(account),
            )
            if not collections:
                raise NoNftError("No NFT held: an NFT is required to use the cave")
        else:
            collections = await self.holdings.non_fungibles(account)
            if not collections:
                raise NoNftError("No NFT held: an NFT is required to use the cave")
            addresses = await self.discovery.discover()
            metadata = await self.metadata.resolve(addresses)
            # Amounts are not known until a LOOK preview runs.
            holdings = [
                FungibleHolding(resource_address=addr, amount="0", metadata=metadata.get(addr))
                for addr in addresses
            ]

        logger.info(
            f"CAVE | load | op={operation.value} | collections={len(collections)} "
            f"| resources={len(holdings)}"
        )
        return LoadResult(operation=operation, collections=collections, holdings=holdings)

    async def submit(
        self,
        operation: CaveOperation,
        nft: SelectedNft,
        moves: Sequence[ResourceMove],
    ) -> str:
        """Send an IN or OUT transaction. Returns the transaction intent hash."""
        account = self._require_account()
        if not moves:
            raise InvalidOperationError("No resources selected")

        if operation is CaveOperation.IN:
            manifest = self.manifests.build_deposit(account, nft, moves)
            message = DEPOSIT_MESSAGE
        elif operation is CaveOperation.OUT:
            manifest = self.manifests.build_withdrawal(account, nft, moves)
            message = WITHDRAW_MESSAGE
        else:
            raise InvalidOperationError(f"Operation {operation.value!r} does not submit")

        logger.debug(f"CAVE | submit | op={operation.value} | nft={nft.nft_id} | moves={len(moves)}")
        outcome = await self.wallet.send_transaction(manifest, message)
        if not outcome.ok:
            logger.warning(f"CAVE | rejected | op={operation.value} | {outcome.error_message}")
            raise WalletRejectedError(outcome.error_message or "Transaction rejected")

        if operation is CaveOperation.IN:
            self.reconciliation.apply_deposit(account, nft, moves)
        else:
            self.reconciliation.apply_withdrawal(account, nft, moves)

        logger.info(f"CAVE | submitted | op={operation.value} | intent={outcome.intent_hash}")
        return outcome.intent_hash or ""

    async def lookup(self, nft: SelectedNft, resource_addresses: Sequence[str]) -> LookupResult:
        account = self._require_account()
        addresses = list(resource_addresses)
        if not addresses:
            raise InvalidOperationError("No resources selected")

        manifest = self.manifests.build_lookup(account, nft, addresses)
        balances = await self.preview.lookup(manifest, addresses)
        metadata = await self.metadata.resolve(addresses)
        self.reconciliation.record_preview(nft, balances, metadata)

        return LookupResult(nft=nft, balances=balances, metadata=metadata)

    def _require_account(self) -> str:
        if not self.account:
            raise NoAccountError("No wallet account connected")
        return self.account
