"""Token and signature utilities."""
from __future__ import annotations

import hashlib
import hmac
from datetime import UTC, datetime, timedelta
from uuid import UUID

from jose import jwt

from phoenix_blog.core.settings import settings


def create_access_token(subject: UUID | str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is the user identifier."""
    to_encode: dict[str, object] = {"sub": str(subject)}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, object]:
    """Decode and validate an access token.

    Raises:
        jose.JWTError: If the token is malformed, expired or badly signed.
    """
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def payment_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 of ``order_id|payment_id`` under ``secret``.

    This is the exact message Razorpay signs when a checkout succeeds.
    """
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """Check a claimed checkout signature in constant time.

    Args:
        order_id: Provider order token the payment was made against.
        payment_id: Provider payment token claimed by the client.
        signature: Hex signature claimed by the client.
        secret: Server-held key secret.

    Returns:
        True if the signature matches; False otherwise.
    """
    expected = payment_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
