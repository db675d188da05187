"""
balance_preview.py - Read vault balances by dry-running a manifest

The read-only manifest returns one Option<Decimal> per queried resource, in
query order. The preview runs with free credit and assumed signature proofs,
so it needs neither funds nor a signature.

Decoding never raises: a failed preview or an unexpected payload shape yields
None for the affected resources.
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from ...adapters.gateway.gateway_client import TRANSACTION_PREVIEW, GatewayClient
from ...domain.models.preview import PreviewReceipt, PreviewResult


EPOCH_WINDOW = 2
SOME_VARIANT_ID = "1"
SOME_VARIANT_NAME = "Some"


class BalancePreviewEngine:
    def __init__(self, gateway: GatewayClient, rng: Optional[random.Random] = None):
        self.gateway = gateway
        self._rng = rng or random.Random()

    async def preview(self, manifest: str) -> PreviewResult:
        status = await self.gateway.network_status()
        epoch = status.epoch

        data = await self.gateway.request(TRANSACTION_PREVIEW, {
            "manifest": manifest,
            "start_epoch_inclusive": epoch,
            "end_epoch_exclusive": epoch + EPOCH_WINDOW,
            "tip_percentage": 0,
            "nonce": self._rng.getrandbits(32),
            "signer_public_keys": [],
            "flags": {
                "assume_all_signature_proofs": True,
                "skip_epoch_check": False,
                "use_free_credit": True,
            },
        })
        result = PreviewResult.from_json(data)
        logger.debug(f"PREVIEW | done | epoch={epoch} | status={result.receipt.status}")
        return result

    async def lookup(
        self, manifest: str, resource_addresses: Sequence[str]
    ) -> Dict[str, Optional[str]]:
        result = await self.preview(manifest)
        return decode_balances(result.receipt, resource_addresses)


def decode_balances(
    receipt: PreviewReceipt,
    resource_addresses: Sequence[str],
) -> Dict[str, Optional[str]]:
    """
    Map each address to its vault balance, or None when the vault has no record.

    ``resource_addresses`` must be in the same order the manifest read them;
    positions are matched one to one.
    """
    balances: Dict[str, Optional[str]] = {addr: None for addr in resource_addresses}

    try:
        if not receipt.succeeded:
            logger.warning(
                f"PREVIEW | not_succeeded | status={receipt.status} | error={receipt.error_message}"
            )
            return balances

        return_value = receipt.last_return_value
        if not return_value:
            return balances

        elements: List[Any] = return_value.get("elements") or return_value.get("fields") or []
        for addr, element in zip(resource_addresses, elements):
            if _is_some(element):
                fields = element.get("fields") or []
                value = fields[0].get("value") if fields else None
                balances[addr] = value or "0"
    except Exception as e:
        logger.error(f"PREVIEW | decode_failed | {type(e).__name__}: {e}")

    return balances


def _is_some(element: Any) -> bool:
    return (
        str(element.get("variant_id")) == SOME_VARIANT_ID
        or element.get("variant_name") == SOME_VARIANT_NAME
    )
