from pydantic_settings import BaseSettings
from app.models.payment import StatusMode
from typing import List, Optional


class Settings(BaseSettings):
    # Razorpay
    RAZORPAY_WEBHOOK_SECRET: str = ""
    ALLOWED_EVENTS: List[str] = [
        "payment.created",
        "payment.authorized",
        "payment.captured",
        "payment.failed",
        "payment.refunded",
    ]
    STATUS_MODE: StatusMode = StatusMode.RAW
    DASHBOARD_URL_TEMPLATE: str = "https://dashboard.razorpay.com/app/payments/{payment_id}"

    # Sheets
    PRIMARY_SHEET_ID: str = ""
    PRIMARY_SHEET_RANGE: str = "Sheet1!A1"
    SECONDARY_SHEET_ID: str = ""
    SECONDARY_SHEET_RANGE: str = "Sheet1!A1"
    SHEET_WEB_APP_URL: str = ""
    SHEET_TIMEZONE: str = "Asia/Kolkata"
    CLICKABLE_LINKS: bool = False
    WRITE_HEADER_ROW: bool = True
    SHEETS_API_BASE_URL: str = "https://sheets.googleapis.com/v4"
    SHEETS_TIMEOUT_SECONDS: float = 30.0
    SHEETS_MAX_ATTEMPTS: int = 3
    SHEETS_RETRY_DELAY_SECONDS: float = 1.0

    # Secondary sheet fan-out
    FANOUT_AMOUNT_MINOR: int = 9900
    FANOUT_PAGE_ID: Optional[str] = None
    FANOUT_PAGE_ID_NOTE_KEY: str = "payment_page_id"

    # Google service account
    GOOGLE_SERVICE_ACCOUNT_EMAIL: str = ""
    GOOGLE_PRIVATE_KEY: str = ""
    GOOGLE_SERVICE_ACCOUNT_FILE: str = ""

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Environment
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
