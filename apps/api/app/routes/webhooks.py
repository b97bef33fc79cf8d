"""Payment gateway webhook routes."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import PlainTextResponse

from app.routes.dependencies import get_payment_webhook_service, get_request_correlation_id
from app.services.payment_webhooks import PaymentWebhookService

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/razorpay",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Webhook processed (including no-op deliveries)"},
        400: {"description": "Invalid signature or malformed payload; not retried"},
        500: {"description": "Transient failure; safe to retry"},
    },
)
async def post_razorpay_webhook(
    request: Request,
    correlation_id: Annotated[str, Depends(get_request_correlation_id)],
    service: Annotated[PaymentWebhookService, Depends(get_payment_webhook_service)],
    x_razorpay_signature: Annotated[str | None, Header()] = None,
    x_razorpay_event_id: Annotated[str | None, Header()] = None,
) -> PlainTextResponse:
    # The signature covers the exact bytes received.
    raw_body = await request.body()
    await asyncio.to_thread(
        service.process_delivery,
        raw_body=raw_body,
        signature=x_razorpay_signature,
        correlation_id=x_razorpay_event_id or correlation_id,
    )
    return PlainTextResponse("Webhook processed.", status_code=status.HTTP_200_OK)
