from app.config.settings import settings
from app.services.forwarder import SheetForwarder, get_forwarder, resolve_destinations
from app.services.normalizer import normalize_payment, build_row, build_web_app_payload
from app.utils.logger import logger
from typing import Any, Dict, Optional


def is_allowed_event(event: Any) -> bool:
    """Check the event name against ALLOWED_EVENTS."""
    return isinstance(event, str) and event in settings.ALLOWED_EVENTS


def extract_payment_entity(body: Any) -> Optional[Dict[str, Any]]:
    """Return `payload.payment.entity`, or None if any level is missing."""
    node = body
    for key in ("payload", "payment", "entity"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if not isinstance(node, dict):
        return None
    return node


async def process_webhook(
    body: Dict[str, Any],
    forwarder: Optional[SheetForwarder] = None,
) -> int:
    """
    Filter, normalize and forward one verified webhook body.

    Runs detached from the HTTP request, after the sender has been answered,
    so nothing here is ever reported back to Razorpay. Skipped events and
    forwarding failures are logged only.

    Returns:
        Number of destinations the row was written to
    """
    event = body.get("event") if isinstance(body, dict) else None

    if not is_allowed_event(event):
        logger.info(f"Skipping unhandled event: {event}", extra={"event": event})
        return 0

    entity = extract_payment_entity(body)
    if entity is None:
        logger.info("Skipping event without payment entity", extra={"event": event})
        return 0

    if forwarder is None:
        forwarder = get_forwarder()

    try:
        payment = normalize_payment(event, entity)
        clickable = settings.CLICKABLE_LINKS
        row = build_row(payment, clickable=clickable)
        destinations = resolve_destinations(payment)

        if not destinations:
            logger.warning(
                "No destination configured, dropping payment",
                extra={"event": event, "payment_id": payment.payment_id},
            )
            return 0

        logger.info(
            "Processing payment webhook",
            extra={
                "event": event,
                "payment_id": payment.payment_id,
                "amount": payment.amount,
            },
        )

        written = 0
        for destination in destinations:
            if destination.is_web_app:
                ok = await forwarder.forward(
                    destination,
                    build_web_app_payload(payment),
                    payment_id=payment.payment_id,
                )
            else:
                ok = await forwarder.forward(
                    destination,
                    row,
                    value_input_option="USER_ENTERED" if clickable else "RAW",
                    payment_id=payment.payment_id,
                )
            if ok:
                written += 1

        return written

    except Exception as e:
        logger.error(f"Webhook processing failed: {e}", exc_info=True, extra={"event": event})
        return 0
