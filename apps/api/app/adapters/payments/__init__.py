"""Payment gateway adapters."""

from .base import PaymentGateway, PaymentGatewayError
from .mock_gateway import MockPaymentGateway
from .razorpay_gateway import RazorpayGateway

__all__ = [
    "MockPaymentGateway",
    "PaymentGateway",
    "PaymentGatewayError",
    "RazorpayGateway",
]
