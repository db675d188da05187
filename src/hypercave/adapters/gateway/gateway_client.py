"""
gateway_client.py - Rate-limited JSON client for the ledger Gateway API

Every request waits on the shared RateLimiter first, retries included. There is
no automatic retry: callers decide what to do with a TransportError or a
GatewayError.

Usage:
    limiter = RateLimiter(max_requests=10, window_ms=1000)
    async with GatewayClient("https://stokenet.radixdlt.com", limiter) as gw:
        status = await gw.network_status()
        items = await gw.paginate(ENTITY_FUNGIBLES, {"address": account})
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from ...domain.errors import GatewayError, TransportError
from ...domain.models.preview import NetworkStatus
from .rate_limiter import RateLimiter


# =============================================================================
# ENDPOINTS
# =============================================================================

GATEWAY_STATUS = "/status/gateway-status"
ENTITY_DETAILS = "/state/entity/details"
ENTITY_FUNGIBLES = "/state/entity/page/fungibles/"
ENTITY_NON_FUNGIBLES = "/state/entity/page/non-fungibles/"
NON_FUNGIBLE_VAULT_IDS = "/state/entity/page/non-fungible-vault/ids"
KEY_VALUE_STORE_KEYS = "/state/key-value-store/keys"
TRANSACTION_PREVIEW = "/transaction/preview"


class GatewayClient:
    """
    Thin async client over the Gateway's POST/JSON endpoints.

    The httpx client can be injected (tests pass one built on MockTransport);
    otherwise one is created and owned by this instance.
    """

    def __init__(
        self,
        base_url: str,
        rate_limiter: RateLimiter,
        session: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter
        self._owns_client = session is None
        self._client = session or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------ #
    # Core request                                                      #
    # ------------------------------------------------------------------ #
    async def request(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        await self.rate_limiter.acquire()

        url = f"{self.base_url}{endpoint}"
        try:
            resp = await self._client.post(url, json=body)
        except httpx.RequestError as exc:
            logger.error(f"GATEWAY | transport_error | endpoint={endpoint} | {exc}")
            raise TransportError(f"Gateway unreachable ({endpoint}): {exc}") from exc

        if not resp.is_success:
            message = _error_message(resp)
            logger.warning(f"GATEWAY | error | endpoint={endpoint} | status={resp.status_code} | {message}")
            raise GatewayError(message, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise GatewayError(
                f"Malformed Gateway response from {endpoint}", status_code=resp.status_code
            ) from exc
        if not isinstance(data, dict):
            raise GatewayError(
                f"Unexpected Gateway response shape from {endpoint}", status_code=resp.status_code
            )
        return data

    async def paginate(
        self,
        endpoint: str,
        body: Dict[str, Any],
        max_pages: Optional[int] = None,
    ) -> List[Any]:
        """
        Follow ``next_cursor`` until the Gateway returns none, collecting ``items``.

        The first request carries no ``cursor`` field. ``max_pages`` is an
        optional ceiling; by default the loop ends only on the null cursor.
        """
        items: List[Any] = []
        cursor: Optional[str] = None
        pages = 0

        while True:
            if max_pages is not None and pages >= max_pages:
                raise GatewayError(f"Pagination of {endpoint} exceeded {max_pages} pages")

            request_body = dict(body)
            if cursor:
                request_body["cursor"] = cursor

            data = await self.request(endpoint, request_body)
            pages += 1
            items.extend(data.get("items") or [])

            cursor = data.get("next_cursor")
            if not cursor:
                break

        logger.debug(f"GATEWAY | paginate | endpoint={endpoint} | pages={pages} | items={len(items)}")
        return items

    # ------------------------------------------------------------------ #
    # Status                                                            #
    # ------------------------------------------------------------------ #
    async def network_status(self) -> NetworkStatus:
        data = await self.request(GATEWAY_STATUS, {})
        try:
            return NetworkStatus.from_json(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise GatewayError("Gateway status response has no ledger_state.epoch") from exc


def _error_message(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"Gateway error: {resp.status_code}"


__all__ = [
    "GatewayClient",
    "GATEWAY_STATUS",
    "ENTITY_DETAILS",
    "ENTITY_FUNGIBLES",
    "ENTITY_NON_FUNGIBLES",
    "NON_FUNGIBLE_VAULT_IDS",
    "KEY_VALUE_STORE_KEYS",
    "TRANSACTION_PREVIEW",
]
