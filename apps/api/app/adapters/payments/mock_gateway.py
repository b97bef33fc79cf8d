"""Mock payment gateway for local development and tests."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from app.adapters.payments.base import PaymentGateway, PaymentGatewayError
from app.schemas.payment import GatewayOrder


class MockPaymentGateway(PaymentGateway):
    """Issues ``order_<hex>`` ids and records every order it creates.

    Setting ``failure_message`` makes the next ``create_order`` call fail once.
    """

    def __init__(self, key_id: str = "rzp_test_mock") -> None:
        self._key_id = key_id
        self.orders: list[GatewayOrder] = []
        self.failure_message: str | None = None

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
        if self.failure_message is not None:
            message = self.failure_message
            self.failure_message = None
            raise PaymentGatewayError(message)

        order = GatewayOrder(
            id=f"order_{uuid4().hex[:14]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            status="created",
            notes=dict(notes),
            created_at=int(datetime.now(UTC).timestamp()),
        )
        self.orders.append(order)
        return order


__all__ = ["MockPaymentGateway"]
