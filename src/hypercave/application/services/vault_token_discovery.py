"""
vault_token_discovery.py - Resource addresses ever deposited into the vault store

The vault store is a key/value store on ledger whose keys identify resources.
Keys are decoded one by one; a malformed key is logged and skipped so one bad
entry never aborts discovery.

Addresses are never removed here: a withdrawal that empties a vault leaves the
resource enumerable (balance "0"). Only a deposit invalidates the cached set.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from loguru import logger

from ...adapters.cache.keys import VAULT_TOKENS_KEY
from ...adapters.cache.session_cache import NEVER, SessionCache
from ...adapters.gateway.gateway_client import KEY_VALUE_STORE_KEYS, GatewayClient
from ...domain.errors import DecodeError


RESOURCE_ADDRESS_TYPE = "ResourceAddress"


class VaultTokenDiscovery:
    def __init__(
        self,
        gateway: GatewayClient,
        session_cache: SessionCache,
        vault_store_address: str,
        ttl_ms: float = NEVER,
        max_pages: Optional[int] = None,
    ):
        if not vault_store_address:
            raise ValueError("vault_store_address is required")
        self.gateway = gateway
        self.session_cache = session_cache
        self.vault_store_address = vault_store_address
        self.ttl_ms = ttl_ms
        self.max_pages = max_pages

    async def discover(self) -> Tuple[str, ...]:
        """Unique resource addresses in first-seen order."""
        cached = self.session_cache.get(VAULT_TOKENS_KEY)
        if cached is not None:
            return cached

        items = await self.gateway.paginate(
            KEY_VALUE_STORE_KEYS,
            {"key_value_store_address": self.vault_store_address},
            max_pages=self.max_pages,
        )

        found: Dict[str, None] = {}
        skipped = 0
        for item in items:
            try:
                found[decode_resource_key(item)] = None
            except DecodeError as exc:
                skipped += 1
                logger.warning(f"VAULT_DISCOVERY | skip_key | {exc}")

        result = tuple(found)
        self.session_cache.set(VAULT_TOKENS_KEY, result, self.ttl_ms)
        logger.info(
            f"VAULT_DISCOVERY | done | keys={len(items)} | resources={len(result)} | skipped={skipped}"
        )
        return result

    def invalidate(self) -> None:
        self.session_cache.remove(VAULT_TOKENS_KEY)


def decode_resource_key(item: Any) -> str:
    """
    Extract the resource address from one key-listing item.

    Accepted shapes of ``item.key.programmatic_json``:
    - a Reference typed ResourceAddress with a non-empty value
    - a Tuple containing such a Reference (composite per-NFT keys)
    """
    if not isinstance(item, dict):
        raise DecodeError(f"key item is not an object: {item!r}")
    key = item.get("key")
    if not isinstance(key, dict):
        raise DecodeError("key item has no key")
    pj = key.get("programmatic_json")
    if not isinstance(pj, dict):
        raise DecodeError("key has no programmatic_json")

    address = _resource_reference(pj)
    if address:
        return address

    if pj.get("kind") == "Tuple":
        for field in pj.get("fields") or []:
            address = _resource_reference(field)
            if address:
                return address

    raise DecodeError(f"key is not a ResourceAddress reference (kind={pj.get('kind')!r})")


def _resource_reference(node: Any) -> Optional[str]:
    if not isinstance(node, dict):
        return None
    if node.get("kind") != "Reference" or node.get("type_name") != RESOURCE_ADDRESS_TYPE:
        return None
    value = node.get("value")
    if isinstance(value, str) and value:
        return value
    return None


__all__ = ["VaultTokenDiscovery", "decode_resource_key"]
