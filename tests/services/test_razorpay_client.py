"""Tests for the Razorpay orders client."""

import base64
import json

import httpx
import pytest

from phoenix_blog.services.razorpay import (
    ORDERS_PATH,
    RazorpayClient,
    RazorpayConfig,
    RazorpayError,
    _RazorpayClientSingleton,
    close_razorpay_client,
    get_razorpay_client,
)

CONFIG = RazorpayConfig(
    key_id="rzp_test_abc",
    key_secret="shh",
    base_url="https://razorpay.test",
    timeout_seconds=5.0,
)


def _client(handler) -> RazorpayClient:
    return RazorpayClient(CONFIG, transport=httpx.MockTransport(handler))


async def test_create_order_posts_json_with_basic_auth() -> None:
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "order_Abc123",
                "amount": 500,
                "currency": "INR",
                "receipt": "rcpt_1234abcd",
                "status": "created",
            },
        )

    client = _client(handler)
    order = await client.create_order(amount=500, currency="INR", receipt="rcpt_1234abcd")
    await client.close()

    assert order.id == "order_Abc123"
    assert order.amount == 500
    assert order.receipt == "rcpt_1234abcd"
    assert seen["path"] == ORDERS_PATH
    assert seen["body"] == {"amount": 500, "currency": "INR", "receipt": "rcpt_1234abcd"}
    expected_auth = base64.b64encode(b"rzp_test_abc:shh").decode()
    assert seen["auth"] == f"Basic {expected_auth}"


async def test_error_response_raises_with_description() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": {"code": "BAD_REQUEST_ERROR", "description": "amount too small"}},
        )

    client = _client(handler)
    with pytest.raises(RazorpayError, match="amount too small"):
        await client.create_order(amount=1, currency="INR", receipt="rcpt_x")
    await client.close()


async def test_transport_failure_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = _client(handler)
    with pytest.raises(RazorpayError, match="request failed"):
        await client.create_order(amount=500, currency="INR", receipt="rcpt_x")
    await client.close()


async def test_missing_order_id_raises() -> None:
    client = _client(lambda request: httpx.Response(200, json={"status": "created"}))
    with pytest.raises(RazorpayError, match="order id"):
        await client.create_order(amount=500, currency="INR", receipt="rcpt_x")
    await client.close()


def test_keys_exposed_from_config() -> None:
    client = RazorpayClient(CONFIG)
    assert client.key_id == "rzp_test_abc"
    assert client.key_secret == "shh"


async def test_singleton_is_shared_and_closable(monkeypatch) -> None:
    monkeypatch.setattr(_RazorpayClientSingleton, "_instance", None)

    first = get_razorpay_client()
    assert get_razorpay_client() is first

    await close_razorpay_client()
    assert first._client is None
