"""Domain errors raised by the feed, gating and payment services.

The API layer maps each family onto one HTTP status; ``code`` is the
machine-readable reason echoed to clients.
"""

from __future__ import annotations


class PhoenixError(RuntimeError):
    """Base exception for service-level failures."""

    code = "error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(PhoenixError):
    """A referenced post or payment record does not exist."""

    code = "not_found"


class PostNotFoundError(NotFoundError):
    """Raised when a post identifier does not resolve."""

    code = "post_not_found"


class PaymentNotFoundError(NotFoundError):
    """Raised when no payment exists for an order token."""

    code = "payment_not_found"


class UnauthorizedError(PhoenixError):
    """The caller may not act on the target resource."""

    code = "unauthorized"


class PaymentOwnershipError(UnauthorizedError):
    """The payment being confirmed belongs to another account."""

    code = "payment_ownership_mismatch"


class SignatureMismatchError(UnauthorizedError):
    """The checkout signature did not match the recomputed HMAC."""

    code = "signature_mismatch"


class InvalidStateError(PhoenixError):
    """The requested transition is not allowed from the current state."""

    code = "invalid_state"


class GatewayError(PhoenixError):
    """The external payment provider call failed."""

    code = "gateway_error"
