from .rate_limiter import RateLimiter
from .gateway_client import GatewayClient

__all__ = ["RateLimiter", "GatewayClient"]
