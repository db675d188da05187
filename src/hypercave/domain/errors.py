"""
Error taxonomy.

Network-facing failures (TransportError, GatewayError) propagate to callers.
DecodeError and CacheWriteError are raised and absorbed locally by the component
that hits them; they never escape a resolver.
"""

from __future__ import annotations

from typing import Optional


class HypercaveError(Exception):
    """Base class for every error raised by this package."""


# =============================================================================
# GATEWAY
# =============================================================================

class GatewayClientError(HypercaveError):
    """A Gateway request did not produce a usable response."""


class TransportError(GatewayClientError):
    """Request never reached the Gateway or no response came back."""


class GatewayError(GatewayClientError):
    """Gateway answered with a non-success status or an unusable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# =============================================================================
# LOCAL (absorbed)
# =============================================================================

class DecodeError(HypercaveError):
    """Payload shape did not match what the decoder expects."""


class CacheWriteError(HypercaveError):
    """Durable storage rejected a write."""


# =============================================================================
# SESSION
# =============================================================================

class CaveSessionError(HypercaveError):
    pass


class NoAccountError(CaveSessionError):
    pass


class NoNftError(CaveSessionError):
    pass


class WalletRejectedError(CaveSessionError):
    pass


class InvalidOperationError(CaveSessionError):
    pass
