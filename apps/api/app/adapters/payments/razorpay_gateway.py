"""Razorpay Orders API adapter."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from app.adapters.payments.base import PaymentGateway, PaymentGatewayError
from app.schemas.payment import GatewayOrder

logger = logging.getLogger(__name__)


class RazorpayGateway(PaymentGateway):
    """Creates orders through ``POST /orders`` with HTTP basic auth."""

    def __init__(
        self,
        *,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._key_id = key_id
        self._client = httpx.Client(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=timeout,
            transport=transport,
        )

    @property
    def public_key(self) -> str:
        return self._key_id

    def create_order(
        self,
        *,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
    ) -> GatewayOrder:
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes,
        }
        try:
            response = self._client.post("/orders", json=payload)
        except httpx.TimeoutException as exc:
            logger.warning("gateway.order_failed reason=timeout")
            raise PaymentGatewayError("Razorpay order request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("gateway.order_failed reason=%s", type(exc).__name__)
            raise PaymentGatewayError("Razorpay order request failed") from exc

        if response.status_code >= 400:
            logger.warning("gateway.order_rejected status=%s", response.status_code)
            raise PaymentGatewayError(f"Razorpay rejected order request with status {response.status_code}")

        try:
            return GatewayOrder.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("gateway.order_failed reason=unreadable_response")
            raise PaymentGatewayError("Razorpay returned an unreadable order") from exc

    def close(self) -> None:
        self._client.close()


__all__ = ["RazorpayGateway"]
