"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.adapters.auth import (
    AuthVerificationError,
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from app.adapters.payments import MockPaymentGateway, PaymentGateway, RazorpayGateway
from app.core.config import Settings, get_settings
from app.core.logging_safety import safe_log_identifier
from app.errors import ApiError
from app.repositories.base import DocumentStore
from app.repositories.firestore import FirestoreStore
from app.repositories.memory import InMemoryStore
from app.schemas.auth import AuthPrincipal
from app.services.jobs import JobService
from app.services.orders import OrderService
from app.services.payment_webhooks import PaymentWebhookService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _auth_error(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_request_correlation_id(request: Request) -> str:
    return _request_correlation_id(request)


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockTokenVerifier()


def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> AuthPrincipal:
    """Validate bearer token and attach normalized principal to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error("Invalid or missing bearer token")

    try:
        principal = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise _auth_error(str(exc) or "Invalid bearer token") from exc

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
    )
    request.state.auth_principal = principal
    return principal


def build_store(settings: Settings) -> DocumentStore:
    if settings.store_backend == "firestore":
        return FirestoreStore.from_default_app(timeout=settings.store_timeout_seconds)
    return InMemoryStore()


def build_payment_gateway(settings: Settings) -> PaymentGateway:
    if settings.payment_provider == "razorpay":
        if not settings.razorpay_key_id or not settings.razorpay_key_secret:
            raise RuntimeError("Razorpay key id and key secret must be configured")
        return RazorpayGateway(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_key_secret,
            base_url=settings.razorpay_api_base_url,
            timeout=settings.gateway_timeout_seconds,
        )
    return MockPaymentGateway()


def get_store(request: Request, settings: Annotated[Settings, Depends(get_settings)]) -> DocumentStore:
    store = request.app.state.store
    if store is None:
        store = build_store(settings)
        request.app.state.store = store
    return store


def get_payment_gateway(request: Request, settings: Annotated[Settings, Depends(get_settings)]) -> PaymentGateway:
    gateway = request.app.state.payment_gateway
    if gateway is None:
        gateway = build_payment_gateway(settings)
        request.app.state.payment_gateway = gateway
    return gateway


def get_job_service(
    store: Annotated[DocumentStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JobService:
    return JobService(store, price_minor_units=settings.job_price_minor_units)


def get_order_service(
    store: Annotated[DocumentStore, Depends(get_store)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> OrderService:
    return OrderService(store, gateway, currency=settings.currency)


def get_payment_webhook_service(
    store: Annotated[DocumentStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PaymentWebhookService:
    return PaymentWebhookService(store, webhook_secret=settings.webhook_secret)
