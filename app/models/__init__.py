from app.models.payment import PaymentEvent, StatusMode, SimplifiedStatus, EVENT_STATUS_MAP
from app.models.sheet import SheetDestination, SheetRow, SheetCell, SHEET_COLUMNS

__all__ = [
    "PaymentEvent",
    "StatusMode",
    "SimplifiedStatus",
    "EVENT_STATUS_MAP",
    "SheetDestination",
    "SheetRow",
    "SheetCell",
    "SHEET_COLUMNS",
]
