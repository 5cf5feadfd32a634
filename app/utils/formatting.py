from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from zoneinfo import ZoneInfo


TIMESTAMP_FORMAT = "%d/%m/%Y, %H:%M:%S"
TWO_PLACES = Decimal("0.01")


def normalize_amount(amount_minor: Any) -> Optional[Decimal]:
    """
    Convert an amount in minor units (paise) to major units (rupees).

    Args:
        amount_minor: Integer amount as sent by Razorpay

    Returns:
        Decimal with two places (9900 -> 99.00), or None if absent/invalid
    """
    if amount_minor is None or isinstance(amount_minor, bool):
        return None
    try:
        return (Decimal(str(amount_minor)) / 100).quantize(TWO_PLACES)
    except (InvalidOperation, ValueError):
        return None


def format_timestamp(epoch_seconds: Any, tz_name: str = "Asia/Kolkata") -> str:
    """
    Render epoch seconds as a civil date/time string in a fixed timezone.

    Uses a 24-hour clock and day-first dates, independent of the host's local
    timezone. Falls back to the current time when the epoch is absent.
    """
    tz = ZoneInfo(tz_name)
    moment = None
    if epoch_seconds is not None and not isinstance(epoch_seconds, bool):
        try:
            moment = datetime.fromtimestamp(int(epoch_seconds), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            moment = None
    if moment is None:
        moment = datetime.now(timezone.utc)
    return moment.astimezone(tz).strftime(TIMESTAMP_FORMAT)


def _escape_formula_text(value: str) -> str:
    return value.replace('"', '""')


def hyperlink_formula(url: str, label: str) -> str:
    """Spreadsheet HYPERLINK formula; only evaluated with USER_ENTERED input."""
    return f'=HYPERLINK("{_escape_formula_text(url)}","{_escape_formula_text(label)}")'


def payment_link(payment_id: str, url_template: str) -> str:
    if not payment_id:
        return ""
    return hyperlink_formula(url_template.format(payment_id=payment_id), payment_id)


def email_link(email: str) -> str:
    if not email:
        return ""
    return hyperlink_formula(f"mailto:{email}", email)
