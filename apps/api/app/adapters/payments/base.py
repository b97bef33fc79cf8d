"""Payment gateway interfaces."""

from abc import ABC, abstractmethod

from app.schemas.payment import GatewayOrder


class PaymentGatewayError(Exception):
    """Raised when the gateway rejects, fails or times out an order request."""


class PaymentGateway(ABC):
    """Provider-neutral order creation interface."""

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Key id the client needs to open checkout for an order."""

    @abstractmethod
    def create_order(
        self,
        *,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
    ) -> GatewayOrder:
        """Create an order for ``amount`` minor units tagged with ``notes``."""

    def close(self) -> None:
        """Release transport resources. Nothing to release by default."""


__all__ = ["PaymentGateway", "PaymentGatewayError"]
