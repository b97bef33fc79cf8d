"""Payment order routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.routes.dependencies import get_authenticated_principal, get_order_service
from app.schemas.auth import AuthPrincipal
from app.schemas.error import ErrorResponse, NotFoundError, PermissionDeniedError, UnavailableError
from app.schemas.payment import CreateOrderRequest, CreateOrderResponse
from app.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["Payments"])


@router.post(
    "",
    response_model=CreateOrderResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": PermissionDeniedError},
        404: {"model": NotFoundError},
        500: {"model": UnavailableError},
    },
)
def create_order(
    payload: CreateOrderRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[OrderService, Depends(get_order_service)],
) -> CreateOrderResponse:
    return service.create_order(owner_id=principal.user_id, job_id=payload.job_id)
