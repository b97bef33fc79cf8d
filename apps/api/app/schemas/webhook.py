"""Razorpay webhook event schemas."""

from typing import Any

from pydantic import BaseModel, Field

PAYMENT_CAPTURED_EVENT = "payment.captured"


class WebhookEvent(BaseModel):
    """Outer event envelope. The payload is only interpreted for events we handle."""

    event: str
    payload: dict[str, Any] = Field(default_factory=dict)


class PaymentEntity(BaseModel):
    id: str | None = None
    order_id: str | None = None
    amount: int | None = None
    currency: str | None = None
    method: str | None = None
    created_at: int | None = None
    # Razorpay serialises empty notes as a JSON array.
    notes: dict[str, Any] | list[Any] = Field(default_factory=dict)

    def note(self, key: str) -> str | None:
        if not isinstance(self.notes, dict):
            return None
        value = self.notes.get(key)
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class PaymentWrapper(BaseModel):
    entity: PaymentEntity


class PaymentCapturedPayload(BaseModel):
    payment: PaymentWrapper
