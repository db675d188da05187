"""Rate-limited Gateway client and cache layer for per-NFT token vaults."""

__version__ = "0.1.0"
