"""Payment and order API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PaymentStatus(str, Enum):
    CREATED = "created"
    CAPTURED = "captured"


class PaymentDetails(BaseModel):
    """Summary of the capture that unlocked a job. Written once."""

    payment_id: str
    order_id: str
    amount: float
    currency: str
    method: str | None = None
    paid_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GatewayOrder(BaseModel):
    """Order descriptor as returned by the payment gateway."""

    id: str
    amount: int
    currency: str
    receipt: str | None = None
    status: str | None = None
    notes: dict[str, str] | list[str] = Field(default_factory=dict)
    created_at: int | None = None


class CreateOrderRequest(BaseModel):
    job_id: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateOrderResponse(BaseModel):
    order: GatewayOrder
    gateway_public_key: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
