"""In-memory document store used for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from threading import RLock
from typing import Literal
from uuid import uuid4

from app.domain.unlock import build_payment_details, decide_capture
from app.repositories.base import (
    CaptureEvent,
    CaptureOutcome,
    DocumentStore,
    JobRecord,
    PaymentRecord,
    StoreUnavailableError,
)
from app.schemas.job import JobStatus
from app.schemas.payment import PaymentStatus

_CAPTURE_FAILPOINT_STAGES = ("after_payment", "after_job")


@dataclass(slots=True)
class InMemoryStore(DocumentStore):
    """Deterministic store whose transactions are serialized by a single lock."""

    jobs: dict[str, JobRecord] = field(default_factory=dict)
    payments: dict[str, PaymentRecord] = field(default_factory=dict)
    job_write_count: int = 0
    payment_write_count: int = 0
    payment_details_write_count: int = 0
    unavailable_message: str | None = None
    capture_failpoint_order_id: str | None = None
    capture_failpoint_stage: Literal["after_payment", "after_job"] | None = None
    capture_failpoint_message: str = "Injected capture persistence failure"
    _lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def create_job(
        self,
        *,
        owner_id: str,
        filename: str,
        price_minor_units: int,
        file_ref: str | None,
        profile_url: str | None,
    ) -> JobRecord:
        with self._lock:
            self._maybe_raise_unavailable()
            job = JobRecord(
                id=uuid4().hex,
                owner_id=owner_id,
                filename=filename,
                status=JobStatus.PENDING.value,
                price_minor_units=price_minor_units,
                created_at=datetime.now(UTC),
                file_ref=file_ref,
                profile_url=profile_url,
            )
            self.jobs[job.id] = job
            self.job_write_count += 1
            return replace(job)

    def get_job(self, job_id: str) -> JobRecord | None:
        with self._lock:
            self._maybe_raise_unavailable()
            job = self.jobs.get(job_id)
            return replace(job) if job is not None else None

    def create_payment(
        self,
        *,
        order_id: str,
        job_id: str,
        user_id: str,
        amount: int,
        currency: str,
    ) -> PaymentRecord:
        with self._lock:
            self._maybe_raise_unavailable()
            payment = PaymentRecord(
                order_id=order_id,
                job_id=job_id,
                user_id=user_id,
                amount=amount,
                currency=currency,
                status=PaymentStatus.CREATED,
                created_at=datetime.now(UTC),
            )
            self.payments[order_id] = payment
            self.payment_write_count += 1
            return replace(payment)

    def apply_capture(self, capture: CaptureEvent) -> CaptureOutcome:
        """Read both records and write both, or neither, under the store lock."""
        with self._lock:
            self._maybe_raise_unavailable()
            job = self.jobs.get(capture.job_id)
            payment = self.payments.get(capture.order_id)

            outcome = decide_capture(capture=capture, job=job, payment=payment)
            if outcome is not CaptureOutcome.APPLIED or job is None or payment is None:
                return outcome

            previous_payment = replace(payment)
            previous_job = replace(job)
            previous_counts = (
                self.payment_write_count,
                self.job_write_count,
                self.payment_details_write_count,
            )
            try:
                payment.status = PaymentStatus.CAPTURED
                payment.payment_id = capture.payment_id
                payment.captured_at = capture.captured_at
                self.payment_write_count += 1
                self._maybe_raise_capture_failpoint(order_id=capture.order_id, stage="after_payment")

                job.unlocked = True
                job.payment_details = build_payment_details(capture=capture, payment=payment)
                self.job_write_count += 1
                self.payment_details_write_count += 1
                self._maybe_raise_capture_failpoint(order_id=capture.order_id, stage="after_job")
            except Exception:
                self.payments[capture.order_id] = previous_payment
                self.jobs[capture.job_id] = previous_job
                (
                    self.payment_write_count,
                    self.job_write_count,
                    self.payment_details_write_count,
                ) = previous_counts
                raise

            return outcome

    def _maybe_raise_unavailable(self) -> None:
        if self.unavailable_message is None:
            return
        message = self.unavailable_message
        self.unavailable_message = None
        raise StoreUnavailableError(message)

    def _maybe_raise_capture_failpoint(
        self,
        *,
        order_id: str,
        stage: Literal["after_payment", "after_job"],
    ) -> None:
        if stage not in _CAPTURE_FAILPOINT_STAGES:
            return
        if self.capture_failpoint_order_id != order_id:
            return
        if self.capture_failpoint_stage != stage:
            return

        self.capture_failpoint_order_id = None
        self.capture_failpoint_stage = None
        raise StoreUnavailableError(self.capture_failpoint_message)
