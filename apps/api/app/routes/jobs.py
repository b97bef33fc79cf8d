"""Job routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.routes.dependencies import get_authenticated_principal, get_job_service
from app.schemas.auth import AuthPrincipal
from app.schemas.error import ErrorResponse, NotFoundError, PermissionDeniedError, UnavailableError
from app.schemas.job import CreateJobRequest, CreateJobResponse, Job
from app.services.jobs import JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post(
    "",
    response_model=CreateJobResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": UnavailableError},
    },
)
def create_job(
    payload: CreateJobRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[JobService, Depends(get_job_service)],
) -> CreateJobResponse:
    return service.create_job(
        owner_id=principal.user_id,
        file_ref=payload.file_ref,
        filename=payload.filename,
        profile_url=payload.profile_url,
    )


@router.get(
    "/{jobId}",
    response_model=Job,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": PermissionDeniedError},
        404: {"model": NotFoundError},
        500: {"model": UnavailableError},
    },
)
def get_job(
    job_id: Annotated[str, Path(alias="jobId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[JobService, Depends(get_job_service)],
) -> Job:
    return service.get_job(owner_id=principal.user_id, job_id=job_id)
