"""Capture reconciliation rules shared by every store implementation."""

from app.repositories.base import CaptureEvent, CaptureOutcome, JobRecord, PaymentRecord
from app.schemas.payment import PaymentDetails

_MINOR_UNITS_PER_MAJOR = 100


def decide_capture(
    *,
    capture: CaptureEvent,
    job: JobRecord | None,
    payment: PaymentRecord | None,
) -> CaptureOutcome:
    """Decide what a capture event does given the state read inside the transaction.

    Only ``APPLIED`` results in writes. Everything else is a no-op that the
    webhook acknowledges so the gateway stops redelivering.
    """
    if job is None:
        return CaptureOutcome.JOB_NOT_FOUND
    if job.unlocked:
        return CaptureOutcome.ALREADY_UNLOCKED
    if payment is None:
        return CaptureOutcome.PAYMENT_NOT_FOUND
    if payment.job_id != job.id or payment.user_id != capture.user_id or job.owner_id != capture.user_id:
        return CaptureOutcome.LINKAGE_MISMATCH
    return CaptureOutcome.APPLIED


def build_payment_details(*, capture: CaptureEvent, payment: PaymentRecord) -> PaymentDetails:
    """Project the capture onto the job, falling back to the stored order amount."""
    amount_minor = capture.amount if capture.amount is not None else payment.amount
    return PaymentDetails(
        payment_id=capture.payment_id,
        order_id=capture.order_id,
        amount=amount_minor / _MINOR_UNITS_PER_MAJOR,
        currency=capture.currency or payment.currency,
        method=capture.method,
        paid_at=capture.captured_at,
    )
