"""Cloud Firestore document store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import firebase_admin
from firebase_admin import firestore as firebase_firestore
from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore

from app.domain.unlock import build_payment_details, decide_capture
from app.repositories.base import (
    JOBS_COLLECTION,
    PAYMENTS_COLLECTION,
    CaptureEvent,
    CaptureOutcome,
    DocumentStore,
    JobRecord,
    PaymentRecord,
    StoreUnavailableError,
)
from app.schemas.job import JobStatus
from app.schemas.payment import PaymentDetails, PaymentStatus


def job_to_document(job: JobRecord) -> dict[str, Any]:
    return {
        "ownerId": job.owner_id,
        "fileRef": job.file_ref,
        "profileUrl": job.profile_url,
        "filename": job.filename,
        "status": job.status,
        "preview": job.preview,
        "fullReport": job.full_report,
        "unlocked": job.unlocked,
        "priceMinorUnits": job.price_minor_units,
        "paymentDetails": (
            job.payment_details.model_dump(by_alias=True) if job.payment_details is not None else None
        ),
        "createdAt": job.created_at,
        "retryCount": job.retry_count,
        "error": job.error,
    }


def job_from_document(job_id: str, data: dict[str, Any]) -> JobRecord:
    payment_details = data.get("paymentDetails")
    return JobRecord(
        id=job_id,
        owner_id=str(data.get("ownerId") or ""),
        filename=str(data.get("filename") or ""),
        status=str(data.get("status") or JobStatus.PENDING.value),
        price_minor_units=int(data.get("priceMinorUnits") or 0),
        created_at=data.get("createdAt") or datetime.now(UTC),
        file_ref=data.get("fileRef"),
        profile_url=data.get("profileUrl"),
        unlocked=bool(data.get("unlocked", False)),
        payment_details=PaymentDetails.model_validate(payment_details) if payment_details else None,
        preview=data.get("preview"),
        full_report=data.get("fullReport"),
        retry_count=int(data.get("retryCount") or 0),
        error=data.get("error"),
    )


def payment_to_document(payment: PaymentRecord) -> dict[str, Any]:
    return {
        "orderId": payment.order_id,
        "jobId": payment.job_id,
        "userId": payment.user_id,
        "amount": payment.amount,
        "currency": payment.currency,
        "status": payment.status.value,
        "paymentId": payment.payment_id,
        "createdAt": payment.created_at,
        "capturedAt": payment.captured_at,
    }


def payment_from_document(order_id: str, data: dict[str, Any]) -> PaymentRecord:
    return PaymentRecord(
        order_id=order_id,
        job_id=str(data.get("jobId") or ""),
        user_id=str(data.get("userId") or ""),
        amount=int(data.get("amount") or 0),
        currency=str(data.get("currency") or ""),
        status=PaymentStatus(data.get("status") or PaymentStatus.CREATED.value),
        created_at=data.get("createdAt") or datetime.now(UTC),
        payment_id=data.get("paymentId"),
        captured_at=data.get("capturedAt"),
    )


class FirestoreStore(DocumentStore):
    """Persists ``jobs`` and ``payments`` collections in Cloud Firestore."""

    def __init__(self, client: firestore.Client, *, timeout: float) -> None:
        self._db = client
        self._timeout = timeout

    @classmethod
    def from_default_app(cls, *, timeout: float) -> FirestoreStore:
        if not firebase_admin._apps:
            firebase_admin.initialize_app()
        return cls(firebase_firestore.client(), timeout=timeout)

    def create_job(
        self,
        *,
        owner_id: str,
        filename: str,
        price_minor_units: int,
        file_ref: str | None,
        profile_url: str | None,
    ) -> JobRecord:
        job_ref = self._db.collection(JOBS_COLLECTION).document()
        job = JobRecord(
            id=job_ref.id,
            owner_id=owner_id,
            filename=filename,
            status=JobStatus.PENDING.value,
            price_minor_units=price_minor_units,
            created_at=datetime.now(UTC),
            file_ref=file_ref,
            profile_url=profile_url,
        )
        document = job_to_document(job)
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        try:
            job_ref.set(document, timeout=self._timeout)
        except GoogleAPIError as exc:
            raise StoreUnavailableError("Failed to write job document") from exc
        return job

    def get_job(self, job_id: str) -> JobRecord | None:
        try:
            snapshot = self._db.collection(JOBS_COLLECTION).document(job_id).get(timeout=self._timeout)
        except GoogleAPIError as exc:
            raise StoreUnavailableError("Failed to read job document") from exc
        if not snapshot.exists:
            return None
        return job_from_document(snapshot.id, snapshot.to_dict() or {})

    def create_payment(
        self,
        *,
        order_id: str,
        job_id: str,
        user_id: str,
        amount: int,
        currency: str,
    ) -> PaymentRecord:
        payment = PaymentRecord(
            order_id=order_id,
            job_id=job_id,
            user_id=user_id,
            amount=amount,
            currency=currency,
            status=PaymentStatus.CREATED,
            created_at=datetime.now(UTC),
        )
        document = payment_to_document(payment)
        document["createdAt"] = firestore.SERVER_TIMESTAMP
        try:
            self._db.collection(PAYMENTS_COLLECTION).document(order_id).set(document, timeout=self._timeout)
        except GoogleAPIError as exc:
            raise StoreUnavailableError("Failed to write payment document") from exc
        return payment

    def apply_capture(self, capture: CaptureEvent) -> CaptureOutcome:
        payment_ref = self._db.collection(PAYMENTS_COLLECTION).document(capture.order_id)
        job_ref = self._db.collection(JOBS_COLLECTION).document(capture.job_id)
        timeout = self._timeout

        # Firestore retries the function on contention; reads must precede writes.
        @firestore.transactional
        def _reconcile(transaction: firestore.Transaction) -> CaptureOutcome:
            payment_snapshot = payment_ref.get(transaction=transaction, timeout=timeout)
            job_snapshot = job_ref.get(transaction=transaction, timeout=timeout)
            payment = (
                payment_from_document(payment_snapshot.id, payment_snapshot.to_dict() or {})
                if payment_snapshot.exists
                else None
            )
            job = job_from_document(job_snapshot.id, job_snapshot.to_dict() or {}) if job_snapshot.exists else None

            outcome = decide_capture(capture=capture, job=job, payment=payment)
            if outcome is not CaptureOutcome.APPLIED or payment is None:
                return outcome

            transaction.update(
                payment_ref,
                {
                    "status": PaymentStatus.CAPTURED.value,
                    "paymentId": capture.payment_id,
                    "capturedAt": capture.captured_at,
                },
            )
            transaction.update(
                job_ref,
                {
                    "unlocked": True,
                    "paymentDetails": build_payment_details(capture=capture, payment=payment).model_dump(
                        by_alias=True
                    ),
                },
            )
            return outcome

        try:
            return _reconcile(self._db.transaction())
        except GoogleAPIError as exc:
            raise StoreUnavailableError("Capture transaction failed") from exc
