from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import PlainTextResponse
from app.schemas import WebhookAck
from app.services.forwarder import SheetForwarder, get_forwarder
from app.services.pipeline import process_webhook
from app.utils.razorpay import verify_razorpay_webhook
from app.utils.exceptions import InvalidRazorpayWebhookException, InvalidWebhookPayloadException
from app.utils.logger import logger
import json

router = APIRouter(tags=["razorpay"])

SIGNATURE_HEADER = "x-razorpay-signature"


@router.post("/webhook", response_model=WebhookAck, status_code=status.HTTP_200_OK)
@router.post("/razorpay-webhook", response_model=WebhookAck, include_in_schema=False)
async def razorpay_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    forwarder: SheetForwarder = Depends(get_forwarder),
):
    """
    Handle Razorpay webhook events.

    - Verify the signature against the raw body
    - Acknowledge immediately with 200
    - Filter, normalize and append to sheets in a background task

    The acknowledgment only covers signature validation. Sheet writes happen
    after the response and their failures are never reported to Razorpay.
    """
    body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    if not signature:
        logger.warning("Missing Razorpay signature header")
        raise InvalidRazorpayWebhookException("Missing signature")

    if not verify_razorpay_webhook(body, signature):
        logger.warning("Razorpay signature verification failed")
        raise InvalidRazorpayWebhookException("Invalid signature")

    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Invalid JSON in webhook body")
        raise InvalidWebhookPayloadException()

    if not isinstance(payload, dict):
        logger.warning("Webhook body is not a JSON object")
        raise InvalidWebhookPayloadException("Webhook body must be a JSON object")

    background_tasks.add_task(process_webhook, payload, forwarder)

    return WebhookAck(success=True)


@router.get("/webhook", response_class=PlainTextResponse)
async def webhook_liveness():
    """Liveness probe for the webhook URL."""
    return "Razorpay webhook endpoint is running"
