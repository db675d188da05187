from .session_cache import SessionCache, CacheEntry, NEVER
from .durable_cache import DurableCache
from .keys import VAULT_TOKENS_KEY, resource_key, fungibles_key, nfts_key

__all__ = [
    "SessionCache",
    "CacheEntry",
    "NEVER",
    "DurableCache",
    "VAULT_TOKENS_KEY",
    "resource_key",
    "fungibles_key",
    "nfts_key",
]
