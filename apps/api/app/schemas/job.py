"""Job API schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.schemas.payment import PaymentDetails


class JobStatus(str, Enum):
    """Statuses this service writes. The analysis pipeline writes later ones."""

    PENDING = "pending"


class CreateJobRequest(BaseModel):
    file_ref: str | None = None
    filename: str | None = None
    profile_url: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateJobResponse(BaseModel):
    job_id: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Job(BaseModel):
    job_id: str
    # Opaque: the pipeline owns every value after creation.
    status: str
    filename: str
    unlocked: bool
    price_minor_units: int
    payment_details: PaymentDetails | None = None
    preview: str | None = None
    full_report: str | None = None
    created_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
