"""FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from app.adapters.payments import PaymentGateway
from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError, WebhookError
from app.repositories.base import DocumentStore
from app.routes import jobs_router, orders_router, webhooks_router
from app.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_CLIENT_VALIDATION_PATHS: set[tuple[str, str]] = {
    ("POST", f"{API_PREFIX}/jobs"),
    ("POST", f"{API_PREFIX}/orders"),
}


def _application_path(request: Request) -> str:
    """Request path relative to the mount point, without trailing slash."""
    path = request.url.path
    root_path = request.scope.get("root_path") or ""
    if root_path and path.startswith(root_path):
        path = path[len(root_path) :]
    return path.rstrip("/") or "/"


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    gateway = app.state.payment_gateway
    if gateway is not None:
        logger.info("app.shutdown closing_payment_gateway=%s", type(gateway).__name__)
        gateway.close()


def create_app(
    *,
    store: DocumentStore | None = None,
    payment_gateway: PaymentGateway | None = None,
) -> FastAPI:
    """Build the API. Adapters left as None are built from settings on first use."""
    app = FastAPI(title="Unlocker API", version="1.0.0", lifespan=_lifespan)
    app.state.store = store
    app.state.payment_gateway = payment_gateway

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(WebhookError)
    async def handle_webhook_error(_, exc: WebhookError) -> PlainTextResponse:
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        path = _application_path(request)
        if (request.method.upper(), path) in _CLIENT_VALIDATION_PATHS:
            logger.info(
                "request.invalid correlation_id=%s method=%s path=%s errors=%s",
                safe_log_identifier(getattr(request.state, "correlation_id", None), prefix="cid"),
                request.method,
                path,
                len(exc.errors()),
            )
            payload = ErrorResponse(code="INVALID_ARGUMENT", message="Invalid request payload")
            return JSONResponse(status_code=400, content=payload.model_dump(exclude_none=True))

        return await request_validation_exception_handler(request, exc)

    app.include_router(jobs_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)
    app.include_router(webhooks_router, prefix=API_PREFIX)

    return app


app = create_app()
