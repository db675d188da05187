"""
reconciliation.py - Optimistic local corrections after a confirmed transaction

The Gateway settles eventually, so right after a deposit or withdrawal the
cached holdings and the last previewed vault balances are stale. This engine
patches the vault snapshot in place and drops the session entries that can no
longer be trusted.

Rules:
    IN   -> +amount per move, invalidate fungibles, nfts and cave_tokens
    OUT  -> -amount per move, invalidate fungibles and nfts only
    Balances never go below zero, and a resource with no recorded balance is
    never given one. Each preview replaces the snapshot; a transaction on any
    other NFT leaves it untouched.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from loguru import logger

from ...adapters.cache.keys import VAULT_TOKENS_KEY, fungibles_key, nfts_key
from ...adapters.cache.session_cache import SessionCache
from ...domain.models.resource import ResourceMetadata, SelectedNft
from ...domain.models.vault import ResourceMove, VaultBalanceSnapshot


class ReconciliationEngine:
    def __init__(self, session_cache: SessionCache):
        self.session_cache = session_cache
        self.snapshot = VaultBalanceSnapshot()
        self.account: Optional[str] = None

    def record_preview(
        self,
        nft: SelectedNft,
        balances: Mapping[str, Optional[str]],
        metadata: Optional[Mapping[str, ResourceMetadata]] = None,
    ) -> None:
        self.snapshot = VaultBalanceSnapshot(
            nft=nft,
            balances=dict(balances),
            metadata=dict(metadata or {}),
        )

    def apply_deposit(
        self, account: str, nft: SelectedNft, moves: Iterable[ResourceMove]
    ) -> Dict[str, str]:
        updated = self._apply(nft, moves, negate=False, op="deposit")
        self._invalidate_account(account)
        self.session_cache.remove(VAULT_TOKENS_KEY)
        return updated

    def apply_withdrawal(
        self, account: str, nft: SelectedNft, moves: Iterable[ResourceMove]
    ) -> Dict[str, str]:
        # Discovery is kept: an emptied vault still lists the resource.
        updated = self._apply(nft, moves, negate=True, op="withdrawal")
        self._invalidate_account(account)
        return updated

    def switch_account(self, account: str) -> None:
        if account != self.account:
            logger.info(f"RECONCILE | switch_account | account={account[:16]}...")
        self.session_cache.clear()
        self.snapshot = VaultBalanceSnapshot()
        self.account = account

    def disconnect(self) -> None:
        logger.info("RECONCILE | disconnect")
        self.session_cache.clear()
        self.snapshot = VaultBalanceSnapshot()
        self.account = None

    def _apply(
        self, nft: SelectedNft, moves: Iterable[ResourceMove], negate: bool, op: str
    ) -> Dict[str, str]:
        updated: Dict[str, str] = {}
        if not self.snapshot.describes(nft):
            logger.debug(f"RECONCILE | {op} | no_snapshot | nft={nft.nft_id}")
            return updated
        skipped: List[str] = []
        for move in moves:
            amount = move.amount_decimal
            delta = amount.copy_negate() if negate else amount
            new_balance = self.snapshot.apply_delta(move.resource_address, delta)
            if new_balance is None:
                skipped.append(move.resource_address)
                continue
            updated[move.resource_address] = new_balance
            logger.info(
                f"RECONCILE | {op} | resource={move.resource_address[:16]}... "
                f"| amount={move.amount} | balance={new_balance}"
            )
        if skipped:
            logger.debug(f"RECONCILE | {op} | unknown_balances={len(skipped)}")
        return updated

    def _invalidate_account(self, account: str) -> None:
        self.session_cache.remove(fungibles_key(account))
        self.session_cache.remove(nfts_key(account))
