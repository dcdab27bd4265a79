"""HTTP client for the Razorpay Orders API.

Only order creation goes over the network; checkout signatures are verified
locally with the key secret (see ``phoenix_blog.core.security``).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from phoenix_blog.core.settings import settings

logger = logging.getLogger(__name__)

ORDERS_PATH = "/v1/orders"


class RazorpayError(RuntimeError):
    """Raised when the provider cannot be reached or rejects a request."""


@dataclass(frozen=True)
class RazorpayConfig:
    """Immutable configuration for provider calls."""

    key_id: str
    key_secret: str
    base_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class RazorpayOrder:
    """Order minted by the provider."""

    id: str
    amount: int
    currency: str
    receipt: str | None
    status: str


def load_razorpay_config() -> RazorpayConfig:
    """Build configuration object from global settings."""
    return RazorpayConfig(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        base_url=settings.razorpay_base_url,
        timeout_seconds=float(settings.razorpay_timeout_seconds),
    )


class RazorpayClient:
    """Async wrapper around the provider's REST API."""

    def __init__(
        self,
        config: RazorpayConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_razorpay_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def key_id(self) -> str:
        """Public key id handed to the browser checkout."""
        return self.config.key_id

    @property
    def key_secret(self) -> str:
        """Server-held secret used for checkout signatures."""
        return self.config.key_secret

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    auth=(self.config.key_id, self.config.key_secret),
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def create_order(self, *, amount: int, currency: str, receipt: str) -> RazorpayOrder:
        """Create an order for ``amount`` (smallest currency unit).

        Raises:
            RazorpayError: On transport failure or a non-2xx response.
        """
        client = await self._ensure_client()
        body: dict[str, Any] = {"amount": amount, "currency": currency, "receipt": receipt}
        try:
            response = await client.post(ORDERS_PATH, json=body)
        except httpx.HTTPError as exc:
            raise RazorpayError(f"Razorpay request failed: {exc}") from exc

        if response.is_error:
            raise RazorpayError(
                f"Razorpay responded with {response.status_code}: {_error_description(response)}"
            )

        payload = response.json()
        order_id = payload.get("id")
        if not order_id:
            raise RazorpayError("Razorpay response did not include an order id")

        logger.debug("Razorpay order %s created for receipt %s", order_id, receipt)
        return RazorpayOrder(
            id=order_id,
            amount=int(payload.get("amount", amount)),
            currency=payload.get("currency", currency),
            receipt=payload.get("receipt"),
            status=payload.get("status", "created"),
        )

    async def close(self) -> None:
        """Dispose of the underlying HTTP client."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


def _error_description(response: httpx.Response) -> str:
    try:
        error = response.json().get("error", {})
    except ValueError:
        return response.text[:200]
    return str(error.get("description") or error.get("code") or "unknown error")


class _RazorpayClientSingleton:
    """Singleton wrapper for RazorpayClient."""

    _instance: RazorpayClient | None = None

    @classmethod
    def get_instance(cls) -> RazorpayClient:
        """Get or create the singleton RazorpayClient instance."""
        if cls._instance is None:
            cls._instance = RazorpayClient()
        return cls._instance

    @classmethod
    def peek(cls) -> RazorpayClient | None:
        return cls._instance


def get_razorpay_client() -> RazorpayClient:
    """Return a singleton Razorpay client instance."""
    return _RazorpayClientSingleton.get_instance()


async def close_razorpay_client() -> None:
    """Close the singleton client if one was ever created."""
    client = _RazorpayClientSingleton.peek()
    if client is not None:
        await client.close()
