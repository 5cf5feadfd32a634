from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, Dict, Optional


# ============== Razorpay Schemas ==============

class PaymentEntity(BaseModel):
    """Razorpay payment entity (`payload.payment.entity`). Every field is optional."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    order_id: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    method: Optional[str] = None
    status: Optional[str] = None
    notes: Dict[str, Any] = {}
    created_at: Optional[int] = None
    error_code: Optional[str] = None
    error_description: Optional[str] = None

    @field_validator("notes", mode="before")
    @classmethod
    def coerce_notes(cls, value: Any) -> Dict[str, Any]:
        # Razorpay sends `"notes": []` when a payment has no notes
        if isinstance(value, dict):
            return value
        return {}

    @field_validator(
        "id", "order_id", "email", "contact", "currency", "method", "status",
        "error_code", "error_description",
        mode="before",
    )
    @classmethod
    def coerce_str(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)

    @field_validator("amount", "created_at", mode="before")
    @classmethod
    def coerce_int(cls, value: Any) -> Optional[int]:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


# ============== Response Schemas ==============

class WebhookAck(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
