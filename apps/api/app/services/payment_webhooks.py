"""Payment webhook reconciliation service layer."""

from dataclasses import dataclass
from datetime import UTC, datetime
import logging

from pydantic import ValidationError

from app.core.logging_safety import safe_body_fingerprint, safe_log_identifier
from app.core.signatures import is_valid_webhook_signature
from app.errors import WebhookError
from app.repositories.base import CaptureEvent, CaptureOutcome, DocumentStore, StoreUnavailableError
from app.schemas.webhook import PAYMENT_CAPTURED_EVENT, PaymentCapturedPayload, WebhookEvent

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WebhookProcessResult:
    event: str
    outcome: CaptureOutcome | None = None


class PaymentWebhookService:
    """Turns gateway deliveries into at-most-once job unlocks.

    Deliveries are at-least-once and may be duplicated, reordered or forged.
    The signature gate runs on the raw bytes before anything is parsed, and
    every accepted capture goes through a single store transaction.
    """

    def __init__(self, store: DocumentStore, *, webhook_secret: str) -> None:
        self._store = store
        self._webhook_secret = webhook_secret

    def process_delivery(
        self,
        *,
        raw_body: bytes,
        signature: str | None,
        correlation_id: str,
    ) -> WebhookProcessResult:
        safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")

        if not is_valid_webhook_signature(secret=self._webhook_secret, body=raw_body, signature=signature):
            logger.warning(
                "webhook.rejected correlation_id=%s code=INVALID_SIGNATURE body=%s",
                safe_correlation_id,
                safe_body_fingerprint(raw_body),
            )
            raise WebhookError(status_code=400, message="Invalid signature")

        try:
            event = WebhookEvent.model_validate_json(raw_body)
        except ValidationError as exc:
            logger.warning(
                "webhook.rejected correlation_id=%s code=MALFORMED_PAYLOAD reason=unparseable_event",
                safe_correlation_id,
            )
            raise WebhookError(status_code=400, message="Malformed webhook payload") from exc

        if event.event != PAYMENT_CAPTURED_EVENT:
            logger.info("webhook.ignored correlation_id=%s event=%s", safe_correlation_id, event.event)
            return WebhookProcessResult(event=event.event)

        capture = self._extract_capture(event, safe_correlation_id=safe_correlation_id)
        safe_order_id = safe_log_identifier(capture.order_id, prefix="oid")
        safe_job_id = safe_log_identifier(capture.job_id, prefix="jid")

        try:
            outcome = self._store.apply_capture(capture)
        except StoreUnavailableError as exc:
            logger.warning(
                "webhook.failed correlation_id=%s order_id=%s job_id=%s code=STORE_UNAVAILABLE reason=%s",
                safe_correlation_id,
                safe_order_id,
                safe_job_id,
                type(exc).__name__,
            )
            raise WebhookError(status_code=500, message="Internal Server Error") from exc

        if outcome is CaptureOutcome.APPLIED:
            logger.info(
                "webhook.job_unlocked correlation_id=%s order_id=%s job_id=%s",
                safe_correlation_id,
                safe_order_id,
                safe_job_id,
            )
        elif outcome is CaptureOutcome.ALREADY_UNLOCKED:
            logger.info(
                "webhook.replayed correlation_id=%s order_id=%s job_id=%s",
                safe_correlation_id,
                safe_order_id,
                safe_job_id,
            )
        else:
            logger.warning(
                "webhook.capture_ignored correlation_id=%s order_id=%s job_id=%s outcome=%s",
                safe_correlation_id,
                safe_order_id,
                safe_job_id,
                outcome.value,
            )
        return WebhookProcessResult(event=event.event, outcome=outcome)

    @staticmethod
    def _extract_capture(event: WebhookEvent, *, safe_correlation_id: str) -> CaptureEvent:
        try:
            entity = PaymentCapturedPayload.model_validate(event.payload).payment.entity
        except ValidationError as exc:
            logger.warning(
                "webhook.rejected correlation_id=%s code=MALFORMED_PAYLOAD reason=missing_payment_entity",
                safe_correlation_id,
            )
            raise WebhookError(status_code=400, message="Malformed webhook payload") from exc

        order_id = (entity.order_id or "").strip()
        payment_id = (entity.id or "").strip()
        job_id = entity.note("jobId")
        user_id = entity.note("userId")
        if not order_id or not payment_id or job_id is None or user_id is None:
            logger.warning(
                "webhook.rejected correlation_id=%s code=MALFORMED_PAYLOAD reason=missing_linkage "
                "has_order_id=%s has_payment_id=%s has_job_id=%s has_user_id=%s",
                safe_correlation_id,
                bool(order_id),
                bool(payment_id),
                job_id is not None,
                user_id is not None,
            )
            raise WebhookError(status_code=400, message="Missing required data in payment notes.")

        captured_at = datetime.now(UTC)
        if entity.created_at is not None:
            try:
                captured_at = datetime.fromtimestamp(entity.created_at, UTC)
            except (OverflowError, OSError, ValueError) as exc:
                logger.warning(
                    "webhook.rejected correlation_id=%s code=MALFORMED_PAYLOAD reason=invalid_created_at",
                    safe_correlation_id,
                )
                raise WebhookError(status_code=400, message="Malformed webhook payload") from exc
        return CaptureEvent(
            order_id=order_id,
            job_id=job_id,
            user_id=user_id,
            payment_id=payment_id,
            amount=entity.amount,
            currency=entity.currency,
            method=entity.method,
            captured_at=captured_at,
        )
