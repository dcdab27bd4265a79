# src/phoenix_blog/api/v1/endpoints/payments.py
"""Premium-post purchase endpoints for the Phoenix Blog API."""

import uuid

from fastapi import APIRouter

from phoenix_blog.api.v1.dependencies import CurrentUserDep, PaymentGatewayDep, SessionDep
from phoenix_blog.schemas.common import ErrorResponse
from phoenix_blog.schemas.payment import (
    OrderCreate,
    OrderResponse,
    PaymentCheckResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)
from phoenix_blog.services import payments

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/create-order",
    response_model=OrderResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def create_order(
    order_data: OrderCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    gateway: PaymentGatewayDep,
) -> OrderResponse:
    """Open a provider order for a premium post."""
    receipt = await payments.create_order(db, gateway, order_data.post_id, current_user.id)
    return OrderResponse(
        order_id=receipt.order_id,
        amount=receipt.amount,
        currency=receipt.currency,
        key_id=receipt.key_id,
    )


@router.post(
    "/verify",
    response_model=PaymentVerifyResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Signature mismatch"},
        403: {"model": ErrorResponse, "description": "Payment belongs to another user"},
        404: {"model": ErrorResponse, "description": "Unknown order"},
        409: {"model": ErrorResponse, "description": "Payment already settled"},
    },
)
async def verify_payment(
    verify_data: PaymentVerifyRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PaymentVerifyResponse:
    """Verify the checkout signature and unlock the post on success."""
    payment = payments.verify_payment(
        db,
        order_id=verify_data.order_id,
        payment_id=verify_data.payment_id,
        signature=verify_data.signature,
        user_id=current_user.id,
    )
    return PaymentVerifyResponse(order_id=payment.order_id, payment_status=payment.status.value)


@router.get("/check/{post_id}", response_model=PaymentCheckResponse)
async def check_payment(
    post_id: uuid.UUID,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PaymentCheckResponse:
    """Report whether the caller has completed payment for a post."""
    return PaymentCheckResponse(post_id=post_id, paid=payments.has_paid(db, post_id, current_user.id))
