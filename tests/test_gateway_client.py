from __future__ import annotations

import asyncio

import httpx
import pytest

from fakes import BASE_URL, FakeClock, GatewayStub
from hypercave.adapters.gateway.gateway_client import (
    ENTITY_FUNGIBLES,
    GATEWAY_STATUS,
    GatewayClient,
)
from hypercave.adapters.gateway.rate_limiter import RateLimiter
from hypercave.domain.errors import GatewayError, TransportError


def client_for(stub: GatewayStub, limiter: RateLimiter = None) -> GatewayClient:
    session = httpx.AsyncClient(transport=httpx.MockTransport(stub.handler))
    return GatewayClient(BASE_URL, limiter or RateLimiter(max_requests=100), session=session)


@pytest.mark.anyio
async def test_request_posts_json_body(gateway, gateway_stub):
    gateway_stub.on(ENTITY_FUNGIBLES, {"items": [], "next_cursor": None})

    data = await gateway.request(ENTITY_FUNGIBLES, {"address": "account_1"})

    assert data == {"items": [], "next_cursor": None}
    assert gateway_stub.requests == [(ENTITY_FUNGIBLES, {"address": "account_1"})]


@pytest.mark.anyio
async def test_every_request_waits_on_the_limiter():
    clock = FakeClock()
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        clock.advance(seconds * 1000)
        await asyncio.sleep(0)

    stub = GatewayStub().on(GATEWAY_STATUS, {"ledger_state": {"epoch": 1, "round": 0}})
    gw = client_for(stub, RateLimiter(max_requests=2, window_ms=1000, clock=clock, sleep=fake_sleep))

    for _ in range(3):
        await gw.request(GATEWAY_STATUS, {})

    assert len(stub.requests) == 3
    assert sleeps == [pytest.approx(1.0)]


@pytest.mark.anyio
async def test_error_status_uses_body_message(gateway, gateway_stub):
    gateway_stub.on(ENTITY_FUNGIBLES, httpx.Response(400, json={"message": "Invalid address"}))

    with pytest.raises(GatewayError) as info:
        await gateway.request(ENTITY_FUNGIBLES, {"address": "bad"})

    assert info.value.message == "Invalid address"
    assert info.value.status_code == 400


@pytest.mark.anyio
async def test_error_status_without_json_falls_back(gateway, gateway_stub):
    gateway_stub.on(ENTITY_FUNGIBLES, httpx.Response(503, text="upstream down"))

    with pytest.raises(GatewayError) as info:
        await gateway.request(ENTITY_FUNGIBLES, {})

    assert info.value.message == "Gateway error: 503"
    assert info.value.status_code == 503


@pytest.mark.anyio
async def test_transport_failure_is_not_retried(gateway, gateway_stub):
    def refuse(body):
        raise httpx.ConnectError("connection refused")

    gateway_stub.on(ENTITY_FUNGIBLES, refuse)

    with pytest.raises(TransportError):
        await gateway.request(ENTITY_FUNGIBLES, {})
    assert len(gateway_stub.requests) == 1


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response",
    [httpx.Response(200, text="<html>"), httpx.Response(200, json=[1, 2, 3])],
)
async def test_unusable_success_body_raises(gateway, gateway_stub, response):
    gateway_stub.on(ENTITY_FUNGIBLES, response)
    with pytest.raises(GatewayError):
        await gateway.request(ENTITY_FUNGIBLES, {})


@pytest.mark.anyio
async def test_paginate_follows_cursor_until_null(gateway, gateway_stub):
    gateway_stub.on(
        ENTITY_FUNGIBLES,
        {"items": [1, 2], "next_cursor": "c1"},
        {"items": [3], "next_cursor": "c2"},
        {"items": [4, 5], "next_cursor": None},
    )
    body = {"address": "account_1"}

    items = await gateway.paginate(ENTITY_FUNGIBLES, body)

    assert items == [1, 2, 3, 4, 5]
    calls = gateway_stub.calls(ENTITY_FUNGIBLES)
    assert len(calls) == 3
    assert "cursor" not in calls[0]
    assert calls[1]["cursor"] == "c1"
    assert calls[2]["cursor"] == "c2"
    assert body == {"address": "account_1"}


@pytest.mark.anyio
async def test_paginate_single_page_without_cursor_field(gateway, gateway_stub):
    gateway_stub.on(ENTITY_FUNGIBLES, {"items": ["only"]})
    assert await gateway.paginate(ENTITY_FUNGIBLES, {}) == ["only"]
    assert len(gateway_stub.requests) == 1


@pytest.mark.anyio
async def test_paginate_page_ceiling(gateway, gateway_stub):
    gateway_stub.on(ENTITY_FUNGIBLES, {"items": [1], "next_cursor": "again"})

    with pytest.raises(GatewayError):
        await gateway.paginate(ENTITY_FUNGIBLES, {}, max_pages=3)
    assert len(gateway_stub.requests) == 3


@pytest.mark.anyio
async def test_network_status(gateway, gateway_stub):
    gateway_stub.on(GATEWAY_STATUS, {"ledger_state": {"epoch": 4321, "round": 17}})
    status = await gateway.network_status()
    assert (status.epoch, status.round) == (4321, 17)


@pytest.mark.anyio
async def test_network_status_without_epoch(gateway, gateway_stub):
    gateway_stub.on(GATEWAY_STATUS, {"release_info": {}})
    with pytest.raises(GatewayError):
        await gateway.network_status()


@pytest.mark.anyio
async def test_injected_session_is_left_open():
    session = httpx.AsyncClient(transport=httpx.MockTransport(GatewayStub().handler))
    async with GatewayClient(BASE_URL, RateLimiter(), session=session):
        pass
    assert not session.is_closed
    await session.aclose()
