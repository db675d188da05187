"""
holdings_resolver.py - Account fungible and non-fungible holdings

Both listings are session-cached per account. A cache hit (an empty list
included) means no network access at all. On a miss, every page is fetched,
metadata is resolved once for the distinct resources seen, and the merged
result is cached.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, List, Optional, Sequence, Tuple

from loguru import logger

from ...adapters.cache.keys import fungibles_key, nfts_key
from ...adapters.cache.session_cache import NEVER, SessionCache
from ...adapters.gateway.gateway_client import (
    ENTITY_FUNGIBLES,
    ENTITY_NON_FUNGIBLES,
    NON_FUNGIBLE_VAULT_IDS,
    GatewayClient,
)
from ...domain.errors import DecodeError
from ...domain.models.nft_id import NftId
from ...domain.models.resource import FungibleHolding, NftIdPage, NonFungibleCollection
from .metadata_resolver import MetadataResolver


class HoldingsResolver:
    def __init__(
        self,
        gateway: GatewayClient,
        metadata: MetadataResolver,
        session_cache: SessionCache,
        ttl_ms: float = NEVER,
        max_pages: Optional[int] = None,
    ):
        self.gateway = gateway
        self.metadata = metadata
        self.session_cache = session_cache
        self.ttl_ms = ttl_ms
        self.max_pages = max_pages

    async def fungibles(self, account: str) -> List[FungibleHolding]:
        cache_key = fungibles_key(account)
        cached = self.session_cache.get(cache_key)
        if cached is not None:
            return cached

        items = await self.gateway.paginate(
            ENTITY_FUNGIBLES,
            {"address": account, "aggregation_level": "Global"},
            max_pages=self.max_pages,
        )
        raw: List[Tuple[str, str]] = [
            (item["resource_address"], str(item.get("amount") or "0"))
            for item in items
            if isinstance(item, dict) and item.get("resource_address")
        ]

        metadata = await self.metadata.resolve(addr for addr, _ in raw)
        result = [
            FungibleHolding(resource_address=addr, amount=amount, metadata=metadata.get(addr))
            for addr, amount in raw
        ]

        self.session_cache.set(cache_key, result, self.ttl_ms)
        logger.info(f"HOLDINGS | fungibles | account={account[:16]}... | count={len(result)}")
        return result

    async def non_fungibles(self, account: str) -> List[NonFungibleCollection]:
        """One record per (resource, vault) pair held by ``account``."""
        cache_key = nfts_key(account)
        cached = self.session_cache.get(cache_key)
        if cached is not None:
            return cached

        items = await self.gateway.paginate(
            ENTITY_NON_FUNGIBLES,
            {
                "address": account,
                "aggregation_level": "Vault",
                "opt_ins": {"non_fungible_include_nfids": True},
            },
            max_pages=self.max_pages,
        )

        collections: List[NonFungibleCollection] = []
        for item in items:
            if not isinstance(item, dict) or not item.get("resource_address"):
                continue
            resource_address = item["resource_address"]
            for vault in (item.get("vaults") or {}).get("items") or []:
                collections.append(NonFungibleCollection(
                    resource_address=resource_address,
                    vault_address=vault.get("vault_address", ""),
                    total_count=int(vault.get("total_count") or 0),
                    nf_ids=parse_nft_ids(vault.get("items") or [], resource_address),
                    next_cursor=vault.get("next_cursor") or None,
                ))

        metadata = await self.metadata.resolve(c.resource_address for c in collections)
        result = [replace(c, metadata=metadata.get(c.resource_address)) for c in collections]

        self.session_cache.set(cache_key, result, self.ttl_ms)
        logger.info(f"HOLDINGS | non_fungibles | account={account[:16]}... | vaults={len(result)}")
        return result

    # ------------------------------------------------------------------ #
    # NFT id paging                                                     #
    # ------------------------------------------------------------------ #
    async def more_nft_ids(
        self,
        account: str,
        vault_address: str,
        resource_address: str,
        cursor: str,
    ) -> NftIdPage:
        """Fetch the next page of ids for one vault. Not cached."""
        data = await self.gateway.request(NON_FUNGIBLE_VAULT_IDS, {
            "address": account,
            "vault_address": vault_address,
            "resource_address": resource_address,
            "cursor": cursor,
        })
        return NftIdPage(
            ids=parse_nft_ids(data.get("items") or [], resource_address),
            next_cursor=data.get("next_cursor") or None,
        )

    async def expand_collection(
        self,
        account: str,
        collection: NonFungibleCollection,
        max_pages: Optional[int] = None,
    ) -> NonFungibleCollection:
        """Follow ``collection.next_cursor`` until every id is loaded."""
        ids = list(collection.nf_ids)
        cursor = collection.next_cursor
        pages = 0
        while cursor:
            if max_pages is not None and pages >= max_pages:
                break
            page = await self.more_nft_ids(
                account, collection.vault_address, collection.resource_address, cursor
            )
            ids.extend(page.ids)
            cursor = page.next_cursor
            pages += 1
        return replace(collection, nf_ids=tuple(ids), next_cursor=cursor)


def parse_nft_ids(raw_ids: Sequence[Any], resource_address: str = "") -> Tuple[NftId, ...]:
    parsed: List[NftId] = []
    for raw in raw_ids:
        try:
            parsed.append(NftId.parse(raw))
        except DecodeError as exc:
            logger.warning(f"HOLDINGS | bad_nft_id | resource={resource_address[:16]}... | {exc}")
    return tuple(parsed)
