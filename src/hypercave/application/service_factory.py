"""
service_factory.py - Wire caches, limiter, client and services from AppConfig

One limiter and one cache pair are built here and shared by every service;
nothing else constructs them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
from loguru import logger

from ..adapters.cache.durable_cache import DurableCache
from ..adapters.cache.session_cache import SessionCache
from ..adapters.gateway.gateway_client import GatewayClient
from ..adapters.gateway.rate_limiter import RateLimiter
from ..config.app_config import AppConfig
from ..ports.manifest import ManifestBuilderPort
from ..ports.wallet import WalletPort
from ..utils.log_setup import configure_logging
from .cave_session import CaveSession
from .services.balance_preview import BalancePreviewEngine
from .services.holdings_resolver import HoldingsResolver
from .services.metadata_resolver import MetadataResolver
from .services.reconciliation import ReconciliationEngine
from .services.vault_token_discovery import VaultTokenDiscovery


@dataclass
class CaveServices:
    gateway: GatewayClient
    durable_cache: DurableCache
    session_cache: SessionCache
    metadata: MetadataResolver
    holdings: HoldingsResolver
    discovery: VaultTokenDiscovery
    preview: BalancePreviewEngine
    reconciliation: ReconciliationEngine

    def session(self, wallet: WalletPort, manifests: ManifestBuilderPort) -> CaveSession:
        return CaveSession(
            holdings=self.holdings,
            discovery=self.discovery,
            metadata=self.metadata,
            preview=self.preview,
            reconciliation=self.reconciliation,
            wallet=wallet,
            manifests=manifests,
        )

    async def aclose(self) -> None:
        await self.gateway.aclose()


def build_services(
    config: AppConfig,
    http_client: Optional[httpx.AsyncClient] = None,
    setup_logging: bool = True,
) -> CaveServices:
    if not config.gateway.vault_store_address:
        raise ValueError("gateway.vault_store_address is required")
    if setup_logging:
        configure_logging(config.logging.level, config.logging.log_dir)

    limiter = RateLimiter(
        max_requests=config.rate_limit.max_requests,
        window_ms=config.rate_limit.window_ms,
    )
    gateway = GatewayClient(
        config.gateway.url,
        limiter,
        session=http_client,
        timeout=config.gateway.timeout_seconds,
    )
    durable_cache = DurableCache(config.durable_cache.path, prefix=config.durable_cache.prefix)
    session_cache = SessionCache()

    ttl = config.cache_ttl
    max_pages = config.gateway.max_pages
    metadata = MetadataResolver(gateway, durable_cache, ttl_ms=ttl.resource_metadata)

    services = CaveServices(
        gateway=gateway,
        durable_cache=durable_cache,
        session_cache=session_cache,
        metadata=metadata,
        holdings=HoldingsResolver(
            gateway, metadata, session_cache, ttl_ms=ttl.account_resources, max_pages=max_pages
        ),
        discovery=VaultTokenDiscovery(
            gateway,
            session_cache,
            config.gateway.vault_store_address,
            ttl_ms=ttl.account_resources,
            max_pages=max_pages,
        ),
        preview=BalancePreviewEngine(gateway),
        reconciliation=ReconciliationEngine(session_cache),
    )
    logger.info(f"FACTORY | built | gateway={config.gateway.url}")
    return services
