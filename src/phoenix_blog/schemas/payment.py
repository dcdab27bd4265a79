# src/phoenix_blog/schemas/payment.py
"""Payment-related Pydantic schemas."""

import uuid

from pydantic import BaseModel, Field


class OrderCreate(BaseModel):
    """Request to open a provider order for a premium post."""

    post_id: uuid.UUID


class OrderResponse(BaseModel):
    """Parameters the browser checkout needs."""

    order_id: str
    amount: int
    currency: str
    key_id: str


class PaymentVerifyRequest(BaseModel):
    """Checkout result posted back by the client."""

    order_id: str = Field(..., min_length=1, description="Provider order token")
    payment_id: str = Field(..., min_length=1, description="Provider payment token")
    signature: str = Field(..., min_length=1, description="Hex HMAC-SHA256 signature")


class PaymentVerifyResponse(BaseModel):
    """Successful verification outcome."""

    status: str = "success"
    order_id: str
    payment_status: str


class PaymentCheckResponse(BaseModel):
    """Whether the caller has unlocked a post."""

    post_id: uuid.UUID
    paid: bool
