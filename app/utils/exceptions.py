from fastapi import HTTPException, status
from typing import Optional


class WebhookException(HTTPException):
    """Base exception for webhook intake errors."""
    pass


class InvalidRazorpayWebhookException(WebhookException):
    def __init__(self, message: str = "Invalid Razorpay webhook signature"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class InvalidWebhookPayloadException(WebhookException):
    def __init__(self, message: str = "Webhook body is not valid JSON"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class ForwardingError(Exception):
    """Base exception for failures writing rows to a destination."""
    pass


class MissingCredentialsError(ForwardingError):
    def __init__(self, message: str = "Google service account credentials are not configured"):
        super().__init__(message)


class SheetsAPIError(ForwardingError):
    """Non-2xx response from the Sheets API or an Apps Script web app."""

    def __init__(self, status_code: int, message: str, destination: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.destination = destination
        where = f" from {destination}" if destination else ""
        super().__init__(f"Sheets API error {status_code}{where}: {message}")

    @property
    def is_transient(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500
