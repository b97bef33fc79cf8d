"""Job service layer."""

import logging

from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError
from app.repositories.base import DEFAULT_PROFILE_FILENAME, DocumentStore, JobRecord, StoreUnavailableError
from app.schemas.job import CreateJobResponse, Job

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text or None


def load_owned_job(store: DocumentStore, *, owner_id: str, job_id: str) -> JobRecord:
    """Fetch a job and enforce that the caller owns it."""
    try:
        record = store.get_job(job_id)
    except StoreUnavailableError as exc:
        logger.warning(
            "job.read_failed job_id=%s reason=%s",
            safe_log_identifier(job_id, prefix="jid"),
            type(exc).__name__,
        )
        raise ApiError(status_code=500, code="STORE_UNAVAILABLE", message="Failed to load job.") from exc

    if record is None:
        raise ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Job not found.")
    if record.owner_id != owner_id:
        logger.warning(
            "job.access_denied job_id=%s principal_id=%s",
            safe_log_identifier(job_id, prefix="jid"),
            safe_log_identifier(owner_id, prefix="pid"),
        )
        raise ApiError(status_code=403, code="PERMISSION_DENIED", message="You do not own this job.")
    return record


class JobService:
    def __init__(self, store: DocumentStore, *, price_minor_units: int) -> None:
        self._store = store
        self._price_minor_units = price_minor_units

    def create_job(
        self,
        *,
        owner_id: str,
        file_ref: str | None,
        filename: str | None,
        profile_url: str | None,
    ) -> CreateJobResponse:
        file_ref = _clean(file_ref)
        profile_url = _clean(profile_url)
        if file_ref is None and profile_url is None:
            raise ApiError(
                status_code=400,
                code="INVALID_ARGUMENT",
                message="Either fileRef or profileUrl is required.",
            )

        safe_principal_id = safe_log_identifier(owner_id, prefix="pid")
        try:
            record = self._store.create_job(
                owner_id=owner_id,
                filename=_clean(filename) or DEFAULT_PROFILE_FILENAME,
                price_minor_units=self._price_minor_units,
                file_ref=file_ref,
                profile_url=profile_url,
            )
        except StoreUnavailableError as exc:
            logger.warning(
                "job.create_failed principal_id=%s reason=%s",
                safe_principal_id,
                type(exc).__name__,
            )
            raise ApiError(status_code=500, code="JOB_CREATE_FAILED", message="Failed to create job.") from exc

        logger.info(
            "job.created job_id=%s principal_id=%s price_minor_units=%s",
            safe_log_identifier(record.id, prefix="jid"),
            safe_principal_id,
            record.price_minor_units,
        )
        return CreateJobResponse(job_id=record.id)

    def get_job(self, *, owner_id: str, job_id: str) -> Job:
        record = load_owned_job(self._store, owner_id=owner_id, job_id=job_id)
        return self._to_job(record)

    @staticmethod
    def _to_job(record: JobRecord) -> Job:
        return Job(
            job_id=record.id,
            status=record.status,
            filename=record.filename,
            unlocked=record.unlocked,
            price_minor_units=record.price_minor_units,
            payment_details=record.payment_details,
            preview=record.preview,
            # The full report is the paid content.
            full_report=record.full_report if record.unlocked else None,
            created_at=record.created_at,
        )
