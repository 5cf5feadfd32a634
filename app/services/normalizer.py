from app.config.settings import settings
from app.models import PaymentEvent, StatusMode, EVENT_STATUS_MAP, SheetRow
from app.schemas import PaymentEntity
from app.utils.formatting import (
    normalize_amount,
    format_timestamp,
    payment_link,
    email_link,
)
from typing import Any, Dict, Optional, Union


def resolve_status(
    event: str,
    raw_status: Optional[str],
    mode: Union[StatusMode, str, None] = None,
) -> str:
    """
    Pick the status written to the sheet.

    Args:
        event: Webhook event name, e.g. "payment.captured"
        raw_status: Status reported on the payment entity
        mode: "raw" keeps the gateway status, "simplified" maps the event name
            to authorized/success/failed; defaults to STATUS_MODE

    Returns:
        Status string ("" when nothing is known)
    """
    mode = StatusMode(mode or settings.STATUS_MODE)
    raw_status = raw_status or ""

    if mode == StatusMode.SIMPLIFIED:
        simplified = EVENT_STATUS_MAP.get(event)
        if simplified is not None:
            return simplified.value

    return raw_status


def _note(notes: Dict[str, Any], key: str) -> str:
    value = notes.get(key)
    if value is None:
        return ""
    return str(value)


def normalize_payment(
    event: str,
    entity: Dict[str, Any],
    status_mode: Union[StatusMode, str, None] = None,
    tz_name: Optional[str] = None,
) -> PaymentEvent:
    """
    Build a PaymentEvent from a raw Razorpay payment entity.

    Absent fields become empty strings; a missing amount stays None and a
    missing creation time falls back to the current time.
    """
    parsed = PaymentEntity.model_validate(entity)
    notes = parsed.notes

    return PaymentEvent(
        payment_id=parsed.id or "",
        order_id=parsed.order_id or "",
        email=parsed.email or "",
        phone=parsed.contact or "",
        amount=normalize_amount(parsed.amount),
        amount_minor=parsed.amount,
        currency=parsed.currency or "",
        event=event,
        status=resolve_status(event, parsed.status, status_mode),
        raw_status=parsed.status or "",
        method=parsed.method or "",
        error_code=parsed.error_code or "",
        error_description=parsed.error_description or "",
        name=_note(notes, "name"),
        notes_phone=_note(notes, "phone"),
        notes_email=_note(notes, "email"),
        custom1=_note(notes, "custom1"),
        custom2=_note(notes, "custom2"),
        city=_note(notes, "city"),
        notes=dict(notes),
        timestamp=format_timestamp(parsed.created_at, tz_name or settings.SHEET_TIMEZONE),
    )


def build_row(payment: PaymentEvent, clickable: Optional[bool] = None) -> SheetRow:
    """
    Lay out a PaymentEvent in the canonical 18-column order.

    With clickable cells on, the payment id and email become HYPERLINK
    formulas; the append must then use USER_ENTERED input.
    """
    if clickable is None:
        clickable = settings.CLICKABLE_LINKS

    if clickable:
        payment_cell = payment_link(payment.payment_id, settings.DASHBOARD_URL_TEMPLATE)
        email_cell = email_link(payment.email)
    else:
        payment_cell = payment.payment_id
        email_cell = payment.email

    amount_cell = float(payment.amount) if payment.amount is not None else ""

    return [
        payment_cell,
        payment.order_id,
        email_cell,
        payment.phone,
        amount_cell,
        payment.currency,
        payment.event,
        payment.status,
        payment.method,
        payment.error_code,
        payment.error_description,
        payment.name,
        payment.notes_phone,
        payment.notes_email,
        payment.custom1,
        payment.custom2,
        payment.city,
        payment.timestamp,
    ]


def build_web_app_payload(payment: PaymentEvent) -> Dict[str, Any]:
    """JSON body for an Apps Script web app destination."""
    return {
        "name": payment.name,
        "email": payment.email,
        "phone": payment.phone,
        "amount": float(payment.amount) if payment.amount is not None else "",
        "paymentId": payment.payment_id,
        "status": payment.status,
    }
