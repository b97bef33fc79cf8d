"""Order creation service layer."""

import logging

from app.adapters.payments import PaymentGateway, PaymentGatewayError
from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError
from app.repositories.base import DocumentStore, StoreUnavailableError
from app.schemas.payment import CreateOrderResponse
from app.services.jobs import load_owned_job

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, store: DocumentStore, gateway: PaymentGateway, *, currency: str) -> None:
        self._store = store
        self._gateway = gateway
        self._currency = currency

    def create_order(self, *, owner_id: str, job_id: str | None) -> CreateOrderResponse:
        job_id = (job_id or "").strip()
        if not job_id:
            raise ApiError(status_code=400, code="INVALID_ARGUMENT", message="jobId is required.")

        job = load_owned_job(self._store, owner_id=owner_id, job_id=job_id)
        safe_job_id = safe_log_identifier(job.id, prefix="jid")
        if job.unlocked:
            logger.info("order.rejected job_id=%s code=JOB_ALREADY_UNLOCKED", safe_job_id)
            raise ApiError(
                status_code=400,
                code="JOB_ALREADY_UNLOCKED",
                message="This job is already unlocked.",
            )

        # The webhook recovers job and user linkage from these notes alone.
        try:
            order = self._gateway.create_order(
                amount=job.price_minor_units,
                currency=self._currency,
                receipt=f"receipt_job_{job.id}",
                notes={"jobId": job.id, "userId": owner_id},
            )
        except PaymentGatewayError as exc:
            logger.warning(
                "order.gateway_failed job_id=%s code=PAYMENT_GATEWAY_UNAVAILABLE reason=%s",
                safe_job_id,
                type(exc).__name__,
            )
            raise ApiError(
                status_code=500,
                code="PAYMENT_GATEWAY_UNAVAILABLE",
                message="Failed to create payment order.",
            ) from exc

        safe_order_id = safe_log_identifier(order.id, prefix="oid")
        try:
            self._store.create_payment(
                order_id=order.id,
                job_id=job.id,
                user_id=owner_id,
                amount=order.amount,
                currency=order.currency,
            )
        except StoreUnavailableError as exc:
            logger.warning(
                "order.persist_failed job_id=%s order_id=%s code=STORE_UNAVAILABLE reason=%s",
                safe_job_id,
                safe_order_id,
                type(exc).__name__,
            )
            raise ApiError(
                status_code=500,
                code="STORE_UNAVAILABLE",
                message="Failed to create payment order.",
            ) from exc

        logger.info(
            "order.created job_id=%s order_id=%s amount=%s currency=%s",
            safe_job_id,
            safe_order_id,
            order.amount,
            order.currency,
        )
        return CreateOrderResponse(order=order, gateway_public_key=self._gateway.public_key)
