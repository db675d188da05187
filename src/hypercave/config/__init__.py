from .app_config import (
    AppConfig,
    CacheTtlSettings,
    DurableCacheSettings,
    GatewaySettings,
    LoggingSettings,
    RateLimitSettings,
)

__all__ = [
    "AppConfig",
    "CacheTtlSettings",
    "DurableCacheSettings",
    "GatewaySettings",
    "LoggingSettings",
    "RateLimitSettings",
]
