# tests/v1/test_payments_api.py
"""Tests for the premium purchase endpoints."""

import uuid

import pytest
from fastapi import status

from phoenix_blog.services.razorpay import RazorpayError
from tests.conftest import bearer, sign

pytestmark = pytest.mark.usefixtures("override_gateway")


@pytest.fixture()
def premium_post(make_post):
    return make_post(is_premium=True, price=500, content="the good stuff")


def _order(client, post_id, headers) -> dict:
    response = client.post(
        "/api/v1/payments/create-order",
        json={"post_id": str(post_id)},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK, response.text
    return response.json()


def test_purchase_flow_unlocks_content(client, premium_post, reader_headers) -> None:
    order = _order(client, premium_post.id, reader_headers)
    assert order["amount"] == 500
    assert order["currency"] == "INR"
    assert order["key_id"] == "rzp_test_key"

    before = client.get(f"/api/v1/posts/{premium_post.id}", headers=reader_headers).json()
    assert before["content"] == ""

    verified = client.post(
        "/api/v1/payments/verify",
        json={
            "order_id": order["order_id"],
            "payment_id": "pay_42",
            "signature": sign(order["order_id"], "pay_42"),
        },
        headers=reader_headers,
    )
    assert verified.status_code == status.HTTP_200_OK
    assert verified.json() == {
        "status": "success",
        "order_id": order["order_id"],
        "payment_status": "COMPLETED",
    }

    check = client.get(f"/api/v1/payments/check/{premium_post.id}", headers=reader_headers)
    assert check.json() == {"post_id": str(premium_post.id), "paid": True}

    after = client.get(f"/api/v1/posts/{premium_post.id}", headers=reader_headers).json()
    assert after["content"] == "the good stuff"
    assert after["paid_by_current_user"] is True


def test_repurchase_conflicts(client, premium_post, reader_headers) -> None:
    order = _order(client, premium_post.id, reader_headers)
    client.post(
        "/api/v1/payments/verify",
        json={
            "order_id": order["order_id"],
            "payment_id": "pay_1",
            "signature": sign(order["order_id"], "pay_1"),
        },
        headers=reader_headers,
    )

    response = client.post(
        "/api/v1/payments/create-order",
        json={"post_id": str(premium_post.id)},
        headers=reader_headers,
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "already_paid"


def test_bad_signature(client, premium_post, reader_headers) -> None:
    order = _order(client, premium_post.id, reader_headers)

    response = client.post(
        "/api/v1/payments/verify",
        json={"order_id": order["order_id"], "payment_id": "pay_1", "signature": "deadbeef"},
        headers=reader_headers,
    )
    check = client.get(f"/api/v1/payments/check/{premium_post.id}", headers=reader_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "signature_mismatch"
    assert check.json()["paid"] is False


def test_verify_foreign_order(client, premium_post, reader_headers, make_user) -> None:
    order = _order(client, premium_post.id, reader_headers)
    intruder = make_user("Mallory")

    response = client.post(
        "/api/v1/payments/verify",
        json={
            "order_id": order["order_id"],
            "payment_id": "pay_1",
            "signature": sign(order["order_id"], "pay_1"),
        },
        headers=bearer(intruder),
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["code"] == "payment_ownership_mismatch"


def test_verify_unknown_order(client, reader_headers) -> None:
    response = client.post(
        "/api/v1/payments/verify",
        json={"order_id": "order_nope", "payment_id": "pay_1", "signature": "00"},
        headers=reader_headers,
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["code"] == "payment_not_found"


def test_order_for_free_post(client, make_post, reader_headers) -> None:
    post = make_post()

    response = client.post(
        "/api/v1/payments/create-order",
        json={"post_id": str(post.id)},
        headers=reader_headers,
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "not_premium"


def test_order_for_unknown_post(client, reader_headers) -> None:
    response = client.post(
        "/api/v1/payments/create-order",
        json={"post_id": str(uuid.uuid4())},
        headers=reader_headers,
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_gateway_failure_maps_to_bad_gateway(client, premium_post, reader_headers, gateway) -> None:
    gateway.create_order.side_effect = RazorpayError("timeout")

    response = client.post(
        "/api/v1/payments/create-order",
        json={"post_id": str(premium_post.id)},
        headers=reader_headers,
    )

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json()["code"] == "gateway_error"


def test_payment_routes_require_auth(client, premium_post) -> None:
    response = client.post(
        "/api/v1/payments/create-order",
        json={"post_id": str(premium_post.id)},
    )

    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}
