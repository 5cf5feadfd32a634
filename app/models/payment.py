from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional
import enum


class StatusMode(str, enum.Enum):
    RAW = "raw"
    SIMPLIFIED = "simplified"


class SimplifiedStatus(str, enum.Enum):
    AUTHORIZED = "authorized"
    SUCCESS = "success"
    FAILED = "failed"


EVENT_STATUS_MAP = {
    "payment.authorized": SimplifiedStatus.AUTHORIZED,
    "payment.captured": SimplifiedStatus.SUCCESS,
    "payment.failed": SimplifiedStatus.FAILED,
}


@dataclass(frozen=True)
class PaymentEvent:
    """Normalized view of a Razorpay payment entity."""

    payment_id: str
    event: str
    timestamp: str
    amount: Optional[Decimal] = None
    amount_minor: Optional[int] = None
    order_id: str = ""
    email: str = ""
    phone: str = ""
    currency: str = ""
    status: str = ""
    raw_status: str = ""
    method: str = ""
    error_code: str = ""
    error_description: str = ""
    name: str = ""
    notes_phone: str = ""
    notes_email: str = ""
    custom1: str = ""
    custom2: str = ""
    city: str = ""
    notes: Dict[str, Any] = field(default_factory=dict)
