"""Firestore store tests against a mocked client and transaction."""

from __future__ import annotations

from datetime import UTC, datetime
import unittest
from unittest.mock import MagicMock, patch

from google.api_core.exceptions import ServiceUnavailable
from google.cloud import firestore

from app.repositories.base import (
    CaptureEvent,
    CaptureOutcome,
    JobRecord,
    PaymentRecord,
    StoreUnavailableError,
)
from app.repositories.firestore import FirestoreStore, job_to_document, payment_to_document
from app.schemas.payment import PaymentStatus

_NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _job_document(**overrides) -> dict:
    values = {
        "id": "job-1",
        "owner_id": "user-1",
        "filename": "resume.pdf",
        "status": "pending",
        "price_minor_units": 900,
        "created_at": _NOW,
        "file_ref": "uploads/a.pdf",
    }
    values.update(overrides)
    return job_to_document(JobRecord(**values))


def _payment_document(**overrides) -> dict:
    values = {
        "order_id": "order_1",
        "job_id": "job-1",
        "user_id": "user-1",
        "amount": 900,
        "currency": "INR",
        "status": PaymentStatus.CREATED,
        "created_at": _NOW,
    }
    values.update(overrides)
    return payment_to_document(PaymentRecord(**values))


def _snapshot(doc_id: str, data: dict | None) -> MagicMock:
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


def _capture() -> CaptureEvent:
    return CaptureEvent(
        order_id="order_1",
        job_id="job-1",
        user_id="user-1",
        payment_id="pay_1",
        amount=900,
        currency="INR",
        method="upi",
        captured_at=_NOW,
    )


class _FirestoreStoreCase(unittest.TestCase):
    def setUp(self) -> None:
        self.collections = {"jobs": MagicMock(), "payments": MagicMock()}
        self.client = MagicMock()
        self.client.collection.side_effect = lambda name: self.collections[name]
        self.job_ref = self.collections["jobs"].document.return_value
        self.payment_ref = self.collections["payments"].document.return_value
        self.transaction = self.client.transaction.return_value
        self.store = FirestoreStore(self.client, timeout=3.0)

        # Run the transaction body once, directly.
        patcher = patch("app.repositories.firestore.firestore.transactional", new=lambda func: func)
        patcher.start()
        self.addCleanup(patcher.stop)


class FirestoreCaptureTests(_FirestoreStoreCase):
    def test_locked_job_gets_payment_and_job_updates_in_one_transaction(self) -> None:
        self.payment_ref.get.return_value = _snapshot("order_1", _payment_document())
        self.job_ref.get.return_value = _snapshot("job-1", _job_document())

        outcome = self.store.apply_capture(_capture())

        self.assertEqual(outcome, CaptureOutcome.APPLIED)
        self.payment_ref.get.assert_called_once_with(transaction=self.transaction, timeout=3.0)
        self.job_ref.get.assert_called_once_with(transaction=self.transaction, timeout=3.0)
        self.assertEqual(self.transaction.update.call_count, 2)
        payment_call, job_call = self.transaction.update.call_args_list
        self.assertEqual(
            payment_call.args,
            (self.payment_ref, {"status": "captured", "paymentId": "pay_1", "capturedAt": _NOW}),
        )
        self.assertIs(job_call.args[0], self.job_ref)
        self.assertEqual(
            job_call.args[1],
            {
                "unlocked": True,
                "paymentDetails": {
                    "paymentId": "pay_1",
                    "orderId": "order_1",
                    "amount": 9.0,
                    "currency": "INR",
                    "method": "upi",
                    "paidAt": _NOW,
                },
            },
        )

    def test_job_in_a_pipeline_status_is_still_unlocked(self) -> None:
        self.payment_ref.get.return_value = _snapshot("order_1", _payment_document())
        self.job_ref.get.return_value = _snapshot("job-1", _job_document(status="analysis_complete"))

        outcome = self.store.apply_capture(_capture())

        self.assertEqual(outcome, CaptureOutcome.APPLIED)
        self.assertEqual(self.transaction.update.call_count, 2)

    def test_short_circuits_issue_no_writes(self) -> None:
        cases = {
            CaptureOutcome.ALREADY_UNLOCKED: (_payment_document(), _job_document(unlocked=True)),
            CaptureOutcome.PAYMENT_NOT_FOUND: (None, _job_document()),
            CaptureOutcome.JOB_NOT_FOUND: (_payment_document(), None),
            CaptureOutcome.LINKAGE_MISMATCH: (_payment_document(job_id="job-2"), _job_document()),
        }
        for expected, (payment_data, job_data) in cases.items():
            with self.subTest(outcome=expected.value):
                self.transaction.update.reset_mock()
                self.payment_ref.get.return_value = _snapshot("order_1", payment_data)
                self.job_ref.get.return_value = _snapshot("job-1", job_data)

                self.assertEqual(self.store.apply_capture(_capture()), expected)
                self.transaction.update.assert_not_called()

    def test_google_api_error_becomes_store_unavailable(self) -> None:
        self.payment_ref.get.side_effect = ServiceUnavailable("firestore down")

        with self.assertRaises(StoreUnavailableError):
            self.store.apply_capture(_capture())

        self.transaction.update.assert_not_called()


class FirestoreJobAndPaymentTests(_FirestoreStoreCase):
    def test_create_job_writes_locked_pending_document_with_server_timestamp(self) -> None:
        new_ref = MagicMock()
        new_ref.id = "job-abc"
        self.collections["jobs"].document.return_value = new_ref

        job = self.store.create_job(
            owner_id="user-1",
            filename="resume.pdf",
            price_minor_units=900,
            file_ref="uploads/a.pdf",
            profile_url=None,
        )

        self.assertEqual(job.id, "job-abc")
        self.assertFalse(job.unlocked)
        new_ref.set.assert_called_once()
        document = new_ref.set.call_args.args[0]
        self.assertEqual(new_ref.set.call_args.kwargs, {"timeout": 3.0})
        self.assertIs(document["createdAt"], firestore.SERVER_TIMESTAMP)
        self.assertEqual(document["status"], "pending")
        self.assertEqual(document["ownerId"], "user-1")
        self.assertIs(document["unlocked"], False)
        self.assertIsNone(document["paymentDetails"])

    def test_create_job_maps_google_api_error(self) -> None:
        self.job_ref.set.side_effect = ServiceUnavailable("firestore down")

        with self.assertRaises(StoreUnavailableError):
            self.store.create_job(
                owner_id="user-1",
                filename="resume.pdf",
                price_minor_units=900,
                file_ref="uploads/a.pdf",
                profile_url=None,
            )

    def test_create_payment_is_keyed_by_order_id(self) -> None:
        payment = self.store.create_payment(
            order_id="order_1",
            job_id="job-1",
            user_id="user-1",
            amount=900,
            currency="INR",
        )

        self.assertEqual(payment.status, PaymentStatus.CREATED)
        self.collections["payments"].document.assert_called_once_with("order_1")
        document = self.payment_ref.set.call_args.args[0]
        self.assertEqual(document["jobId"], "job-1")
        self.assertEqual(document["userId"], "user-1")
        self.assertEqual(document["status"], "created")
        self.assertIs(document["createdAt"], firestore.SERVER_TIMESTAMP)

    def test_get_job_returns_none_for_missing_document(self) -> None:
        self.job_ref.get.return_value = _snapshot("job-1", None)

        self.assertIsNone(self.store.get_job("job-1"))
        self.job_ref.get.assert_called_once_with(timeout=3.0)

    def test_get_job_keeps_status_written_by_pipeline(self) -> None:
        self.job_ref.get.return_value = _snapshot("job-1", _job_document(status="analysis_complete"))

        job = self.store.get_job("job-1")

        self.assertIsNotNone(job)
        self.assertEqual(job.status, "analysis_complete")
        self.assertEqual(job.owner_id, "user-1")

    def test_get_job_maps_google_api_error(self) -> None:
        self.job_ref.get.side_effect = ServiceUnavailable("firestore down")

        with self.assertRaises(StoreUnavailableError):
            self.store.get_job("job-1")


if __name__ == "__main__":
    unittest.main()
