"""Document store interface and the records it persists."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from app.schemas.payment import PaymentDetails, PaymentStatus

JOBS_COLLECTION = "jobs"
PAYMENTS_COLLECTION = "payments"
DEFAULT_PROFILE_FILENAME = "LinkedIn Profile"


class StoreUnavailableError(RuntimeError):
    """Transient store failure; callers surface it as a retryable 5xx."""


@dataclass(slots=True)
class JobRecord:
    id: str
    owner_id: str
    filename: str
    status: str
    price_minor_units: int
    created_at: datetime
    file_ref: str | None = None
    profile_url: str | None = None
    unlocked: bool = False
    payment_details: PaymentDetails | None = None
    preview: str | None = None
    full_report: str | None = None
    retry_count: int = 0
    error: str | None = None


@dataclass(slots=True)
class PaymentRecord:
    order_id: str
    job_id: str
    user_id: str
    amount: int
    currency: str
    status: PaymentStatus
    created_at: datetime
    payment_id: str | None = None
    captured_at: datetime | None = None


@dataclass(slots=True)
class CaptureEvent:
    """Linkage and payment facts extracted from a verified capture webhook."""

    order_id: str
    job_id: str
    user_id: str
    payment_id: str
    amount: int | None
    currency: str | None
    method: str | None
    captured_at: datetime


class CaptureOutcome(str, Enum):
    APPLIED = "applied"
    ALREADY_UNLOCKED = "already_unlocked"
    JOB_NOT_FOUND = "job_not_found"
    PAYMENT_NOT_FOUND = "payment_not_found"
    LINKAGE_MISMATCH = "linkage_mismatch"


class DocumentStore(ABC):
    """Persistence boundary for jobs and payments.

    Implementations must run ``apply_capture`` as one serializable
    read-modify-write over the payment and the job.
    """

    @abstractmethod
    def create_job(
        self,
        *,
        owner_id: str,
        filename: str,
        price_minor_units: int,
        file_ref: str | None,
        profile_url: str | None,
    ) -> JobRecord:
        """Persist a new locked job and return it with its generated id."""

    @abstractmethod
    def get_job(self, job_id: str) -> JobRecord | None:
        """Return the job or None."""

    @abstractmethod
    def create_payment(
        self,
        *,
        order_id: str,
        job_id: str,
        user_id: str,
        amount: int,
        currency: str,
    ) -> PaymentRecord:
        """Persist a payment in ``created`` state keyed by the gateway order id."""

    @abstractmethod
    def apply_capture(self, capture: CaptureEvent) -> CaptureOutcome:
        """Atomically capture the payment and unlock its job, at most once."""


__all__ = [
    "DEFAULT_PROFILE_FILENAME",
    "JOBS_COLLECTION",
    "PAYMENTS_COLLECTION",
    "CaptureEvent",
    "CaptureOutcome",
    "DocumentStore",
    "JobRecord",
    "PaymentRecord",
    "StoreUnavailableError",
]
