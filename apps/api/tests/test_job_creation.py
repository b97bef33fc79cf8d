"""Job creation and job read endpoint tests."""

from __future__ import annotations

import os
import unittest

from fastapi.testclient import TestClient

from app.adapters.payments import MockPaymentGateway
from app.core.config import get_settings
from app.main import create_app
from app.repositories.memory import InMemoryStore
from app.schemas.job import JobStatus
from app.schemas.payment import PaymentDetails


class _SettingsEnvCase(unittest.TestCase):
    _env_keys = (
        "UNLOCKER_AUTH_PROVIDER",
        "UNLOCKER_WEBHOOK_SECRET",
        "UNLOCKER_STORE_BACKEND",
        "UNLOCKER_PAYMENT_PROVIDER",
        "UNLOCKER_JOB_PRICE_MINOR_UNITS",
    )

    def setUp(self) -> None:
        self._old_env = {k: os.environ.get(k) for k in self._env_keys}
        os.environ["UNLOCKER_AUTH_PROVIDER"] = "mock"
        os.environ["UNLOCKER_WEBHOOK_SECRET"] = "test-webhook-secret"
        os.environ["UNLOCKER_STORE_BACKEND"] = "memory"
        os.environ["UNLOCKER_PAYMENT_PROVIDER"] = "mock"
        os.environ.pop("UNLOCKER_JOB_PRICE_MINOR_UNITS", None)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


class JobCreationTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = InMemoryStore()
        self.app = create_app(store=self.store, payment_gateway=MockPaymentGateway())
        self.client = TestClient(self.app)

    def test_create_job_with_file_reference_returns_job_id_and_locked_job(self) -> None:
        response = self.client.post(
            "/api/v1/jobs",
            headers={"Authorization": "Bearer test:user-1"},
            json={"fileRef": "uploads/user-1/resume.pdf", "filename": "resume.pdf"},
        )

        self.assertEqual(response.status_code, 200)
        job_id = response.json()["jobId"]
        job = self.store.jobs[job_id]
        self.assertEqual(job.owner_id, "user-1")
        self.assertEqual(job.file_ref, "uploads/user-1/resume.pdf")
        self.assertIsNone(job.profile_url)
        self.assertEqual(job.filename, "resume.pdf")
        self.assertEqual(job.status, JobStatus.PENDING)
        self.assertFalse(job.unlocked)
        self.assertEqual(job.price_minor_units, 900)
        self.assertIsNone(job.payment_details)
        self.assertIsNone(job.preview)
        self.assertIsNone(job.full_report)
        self.assertIsNone(job.error)
        self.assertEqual(job.retry_count, 0)

    def test_create_job_with_profile_url_defaults_filename(self) -> None:
        response = self.client.post(
            "/api/v1/jobs",
            headers={"Authorization": "Bearer test:user-1"},
            json={"profileUrl": "https://www.linkedin.com/in/someone"},
        )

        self.assertEqual(response.status_code, 200)
        job = self.store.jobs[response.json()["jobId"]]
        self.assertEqual(job.profile_url, "https://www.linkedin.com/in/someone")
        self.assertEqual(job.filename, "LinkedIn Profile")

    def test_price_comes_from_configuration(self) -> None:
        os.environ["UNLOCKER_JOB_PRICE_MINOR_UNITS"] = "4900"
        get_settings.cache_clear()

        response = self.client.post(
            "/api/v1/jobs",
            headers={"Authorization": "Bearer test:user-1"},
            json={"fileRef": "uploads/a.pdf"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.store.jobs[response.json()["jobId"]].price_minor_units, 4900)

    def test_missing_input_reference_returns_400_and_no_job(self) -> None:
        for body in ({}, {"filename": "resume.pdf"}, {"fileRef": "   ", "profileUrl": ""}):
            with self.subTest(body=body):
                response = self.client.post(
                    "/api/v1/jobs",
                    headers={"Authorization": "Bearer test:user-1"},
                    json=body,
                )
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["code"], "INVALID_ARGUMENT")

        self.assertEqual(self.store.job_write_count, 0)

    def test_non_object_body_returns_400(self) -> None:
        response = self.client.post(
            "/api/v1/jobs",
            headers={"Authorization": "Bearer test:user-1", "Content-Type": "application/json"},
            content=b"[1, 2, 3]",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "INVALID_ARGUMENT")

    def test_invalid_body_returns_400_when_mounted_under_root_path(self) -> None:
        client = TestClient(self.app, root_path="/svc")

        response = client.post(
            "/api/v1/jobs",
            headers={"Authorization": "Bearer test:user-1", "Content-Type": "application/json"},
            content=b"{bad",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "INVALID_ARGUMENT")
        self.assertEqual(self.store.job_write_count, 0)

    def test_missing_bearer_returns_401_and_no_job(self) -> None:
        response = self.client.post("/api/v1/jobs", json={"fileRef": "uploads/a.pdf"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "UNAUTHORIZED")
        self.assertEqual(self.store.job_write_count, 0)

    def test_invalid_bearer_returns_401_and_no_job(self) -> None:
        response = self.client.post(
            "/api/v1/jobs",
            headers={"Authorization": "Bearer not-a-test-token"},
            json={"fileRef": "uploads/a.pdf"},
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.store.job_write_count, 0)

    def test_store_failure_returns_generic_500(self) -> None:
        self.store.unavailable_message = "firestore deadline exceeded on jobs/abc"

        response = self.client.post(
            "/api/v1/jobs",
            headers={"Authorization": "Bearer test:user-1"},
            json={"fileRef": "uploads/a.pdf"},
        )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"code": "JOB_CREATE_FAILED", "message": "Failed to create job."})
        self.assertEqual(self.store.jobs, {})


class JobReadTests(_SettingsEnvCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = InMemoryStore()
        self.client = TestClient(create_app(store=self.store, payment_gateway=MockPaymentGateway()))
        self.job = self.store.create_job(
            owner_id="user-1",
            filename="resume.pdf",
            price_minor_units=900,
            file_ref="uploads/a.pdf",
            profile_url=None,
        )
        self.store.jobs[self.job.id].preview = "preview text"
        self.store.jobs[self.job.id].full_report = "full report text"

    def test_owner_sees_locked_job_without_full_report(self) -> None:
        response = self.client.get(
            f"/api/v1/jobs/{self.job.id}",
            headers={"Authorization": "Bearer test:user-1"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["jobId"], self.job.id)
        self.assertFalse(body["unlocked"])
        self.assertEqual(body["priceMinorUnits"], 900)
        self.assertEqual(body["preview"], "preview text")
        self.assertIsNone(body["fullReport"])
        self.assertIsNone(body["paymentDetails"])

    def test_unlocked_job_exposes_full_report_and_payment_details(self) -> None:
        record = self.store.jobs[self.job.id]
        record.unlocked = True
        record.payment_details = PaymentDetails(
            payment_id="pay_1",
            order_id="order_1",
            amount=9.0,
            currency="INR",
            method="upi",
            paid_at=record.created_at,
        )

        response = self.client.get(
            f"/api/v1/jobs/{self.job.id}",
            headers={"Authorization": "Bearer test:user-1"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["unlocked"])
        self.assertEqual(body["fullReport"], "full report text")
        self.assertEqual(body["paymentDetails"]["paymentId"], "pay_1")
        self.assertEqual(body["paymentDetails"]["amount"], 9.0)

    def test_status_written_by_pipeline_is_returned_as_is(self) -> None:
        self.store.jobs[self.job.id].status = "analysis_complete"

        response = self.client.get(
            f"/api/v1/jobs/{self.job.id}",
            headers={"Authorization": "Bearer test:user-1"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "analysis_complete")

    def test_other_user_gets_403(self) -> None:
        response = self.client.get(
            f"/api/v1/jobs/{self.job.id}",
            headers={"Authorization": "Bearer test:user-2"},
        )

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "PERMISSION_DENIED")

    def test_unknown_job_gets_404(self) -> None:
        response = self.client.get(
            "/api/v1/jobs/does-not-exist",
            headers={"Authorization": "Bearer test:user-1"},
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "RESOURCE_NOT_FOUND")


if __name__ == "__main__":
    unittest.main()
