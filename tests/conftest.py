from __future__ import annotations

import httpx
import pytest

from fakes import BASE_URL, FakeClock, GatewayStub
from hypercave.adapters.gateway.gateway_client import GatewayClient
from hypercave.adapters.gateway.rate_limiter import RateLimiter


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1_000_000.0)


@pytest.fixture
def gateway_stub() -> GatewayStub:
    return GatewayStub()


@pytest.fixture
def gateway(gateway_stub: GatewayStub) -> GatewayClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(gateway_stub.handler))
    return GatewayClient(BASE_URL, RateLimiter(max_requests=1000), session=client)
