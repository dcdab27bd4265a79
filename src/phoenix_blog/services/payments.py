"""Payment order creation and checkout verification for premium posts.

A payment starts PENDING when the provider order is minted and moves exactly
once, to COMPLETED when the checkout signature verifies or to FAILED when it
does not. Unlocking a premium post only asks whether a COMPLETED row exists.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from phoenix_blog.core.security import verify_payment_signature
from phoenix_blog.core.settings import settings
from phoenix_blog.models import Payment, PaymentStatus, Post
from phoenix_blog.repositories.post_repo import PostRepository
from phoenix_blog.services.errors import (
    GatewayError,
    InvalidStateError,
    PaymentNotFoundError,
    PaymentOwnershipError,
    PostNotFoundError,
    SignatureMismatchError,
)
from phoenix_blog.services.razorpay import RazorpayClient, RazorpayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderReceipt:
    """Everything the browser checkout needs to complete a purchase."""

    order_id: str
    amount: int
    currency: str
    key_id: str


def _receipt_for(post: Post) -> str:
    return f"rcpt_{str(post.id)[:8]}"


def _transition(payment: Payment, status: PaymentStatus) -> None:
    if payment.status.is_terminal:
        raise InvalidStateError(
            f"Payment {payment.order_id} is already {payment.status.value}",
        )
    payment.status = status


def has_paid(db: Session, post_id: uuid.UUID, user_id: uuid.UUID | None) -> bool:
    """Return True if ``user_id`` holds a COMPLETED payment for the post.

    Anonymous callers are simply reported as not having paid.
    """
    if user_id is None:
        return False
    return PostRepository(db).has_completed_payment(post_id, user_id)


async def create_order(
    db: Session,
    gateway: RazorpayClient,
    post_id: uuid.UUID,
    user_id: uuid.UUID,
) -> OrderReceipt:
    """Mint a provider order for a premium post and record it as PENDING.

    Args:
        db: Active database session.
        gateway: Provider client used to create the order.
        post_id: Premium post being purchased.
        user_id: Buyer.

    Returns:
        The order token plus the public checkout parameters.

    Raises:
        PostNotFoundError: If the post does not exist.
        InvalidStateError: If the post is free, the buyer wrote it, or the
            buyer already completed a purchase.
        GatewayError: If the provider call fails; nothing is persisted.
    """
    post = PostRepository(db).get_by_id(post_id)
    if post is None:
        raise PostNotFoundError("Post not found")
    if not post.is_premium:
        raise InvalidStateError("Post is not a premium post", code="not_premium")
    if post.author_id == user_id:
        raise InvalidStateError("You are the author of this post", code="author_purchase")
    if has_paid(db, post.id, user_id):
        raise InvalidStateError("You have already paid for this post", code="already_paid")

    currency = settings.payment_currency
    try:
        order = await gateway.create_order(
            amount=post.price,
            currency=currency,
            receipt=_receipt_for(post),
        )
    except RazorpayError as exc:
        logger.error("Razorpay order creation failed for post %s: %s", post.id, exc)
        raise GatewayError(f"Payment gateway error: {exc}") from exc

    payment = Payment(
        user_id=user_id,
        post_id=post.id,
        order_id=order.id,
        amount=post.price,
        currency=currency,
        status=PaymentStatus.PENDING,
    )
    db.add(payment)
    db.commit()
    logger.info("Created order %s for post %s (amount=%d %s)", order.id, post.id, post.price, currency)

    return OrderReceipt(
        order_id=order.id,
        amount=post.price,
        currency=currency,
        key_id=gateway.key_id,
    )


def verify_payment(
    db: Session,
    *,
    order_id: str,
    payment_id: str,
    signature: str,
    user_id: uuid.UUID,
    key_secret: str | None = None,
) -> Payment:
    """Verify a checkout signature and settle the matching payment.

    The HMAC over ``order_id|payment_id`` is the only thing that unlocks
    content. A mismatch is committed as FAILED before the error is raised.

    Raises:
        PaymentNotFoundError: No payment exists for ``order_id``.
        PaymentOwnershipError: The payment belongs to another user.
        InvalidStateError: The payment already reached a terminal state.
        SignatureMismatchError: The signature does not verify.
    """
    payment = db.execute(
        select(Payment).where(Payment.order_id == order_id)
    ).scalars().first()
    if payment is None:
        raise PaymentNotFoundError("Payment record not found")
    if payment.user_id != user_id:
        raise PaymentOwnershipError("Payment does not belong to current user")

    secret = key_secret if key_secret is not None else settings.razorpay_key_secret
    if not verify_payment_signature(order_id, payment_id, signature, secret):
        _transition(payment, PaymentStatus.FAILED)
        db.commit()
        logger.warning("Signature verification failed for order %s", order_id)
        raise SignatureMismatchError("Payment signature verification failed")

    _transition(payment, PaymentStatus.COMPLETED)
    payment.payment_id = payment_id
    db.commit()
    logger.info("Payment %s completed for order %s", payment_id, order_id)
    return payment
