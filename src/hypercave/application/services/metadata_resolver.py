"""
metadata_resolver.py - Resource metadata with durable cache-first batching

Addresses already in the durable cache are never fetched again. Everything
else goes out in ONE /state/entity/details call.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from ...adapters.cache.durable_cache import DurableCache
from ...adapters.cache.keys import resource_key
from ...adapters.cache.session_cache import NEVER
from ...adapters.gateway.gateway_client import ENTITY_DETAILS, GatewayClient
from ...domain.errors import DecodeError
from ...domain.models.resource import (
    DEFAULT_DIVISIBILITY,
    FUNGIBLE_RESOURCE,
    ResourceMetadata,
)


EXPLICIT_METADATA_FIELDS = ["name", "symbol", "icon_url", "description"]


class MetadataResolver:
    def __init__(
        self,
        gateway: GatewayClient,
        cache: DurableCache,
        ttl_ms: float = NEVER,
    ):
        self.gateway = gateway
        self.cache = cache
        self.ttl_ms = ttl_ms

    async def resolve(self, addresses: Iterable[str]) -> Dict[str, ResourceMetadata]:
        """Map each address to its metadata. Unknown addresses are left out."""
        results: Dict[str, ResourceMetadata] = {}
        to_fetch: List[str] = []

        for address in dict.fromkeys(addresses):
            cached = self._from_cache(address)
            if cached is not None:
                results[address] = cached
            else:
                to_fetch.append(address)

        if not to_fetch:
            return results

        logger.debug(f"METADATA | fetch | cached={len(results)} | uncached={len(to_fetch)}")
        data = await self.gateway.request(ENTITY_DETAILS, {
            "addresses": to_fetch,
            "aggregation_level": "Global",
            "opt_ins": {"explicit_metadata": list(EXPLICIT_METADATA_FIELDS)},
        })

        for item in data.get("items") or []:
            if not isinstance(item, dict) or not item.get("address"):
                logger.warning("METADATA | skip_item | reason=no_address")
                continue
            try:
                meta = parse_entity_item(item)
            except DecodeError as exc:
                logger.warning(f"METADATA | skip_item | address={item['address']} | {exc}")
                continue
            results[meta.address] = meta
            self.cache.set(resource_key(meta.address), meta.to_dict(), self.ttl_ms)

        return results

    def invalidate(self, address: str) -> None:
        self.cache.remove(resource_key(address))

    def _from_cache(self, address: str) -> Optional[ResourceMetadata]:
        cached = self.cache.get(resource_key(address))
        if not isinstance(cached, dict):
            return None
        try:
            return ResourceMetadata.from_dict(cached)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"METADATA | bad_cache_entry | address={address} | {exc}")
            return None


def extract_metadata(items: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only key/value pairs whose typed value carries a ``value`` field."""
    result: Dict[str, Any] = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        value = item.get("value")
        typed = value.get("typed") if isinstance(value, dict) else None
        if isinstance(typed, dict) and "value" in typed and typed["value"] is not None:
            result[item.get("key")] = typed["value"]
    return result


def parse_entity_item(item: Dict[str, Any]) -> ResourceMetadata:
    """Raises DecodeError when the item is too malformed to describe a resource."""
    explicit = item.get("explicit_metadata") or {}
    details = item.get("details") or {}
    if not isinstance(explicit, dict) or not isinstance(details, dict):
        raise DecodeError("entity item sections are not objects")
    meta = extract_metadata(explicit.get("items") or [])
    entity_type = details.get("type")

    divisibility = DEFAULT_DIVISIBILITY
    if entity_type == FUNGIBLE_RESOURCE and details.get("divisibility") is not None:
        try:
            divisibility = int(details["divisibility"])
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"bad divisibility {details['divisibility']!r}") from exc

    return ResourceMetadata(
        address=item["address"],
        name=meta.get("name") or None,
        symbol=meta.get("symbol") or "",
        icon_url=meta.get("icon_url") or None,
        description=meta.get("description") or "",
        entity_type=entity_type,
        divisibility=divisibility,
    )
