import httpx
from google.auth import exceptions as google_auth_exceptions
from app.config.settings import settings
from app.models import PaymentEvent, SheetDestination, SheetRow
from app.services.sheets import GoogleSheetsClient, get_sheets_client
from app.utils.exceptions import ForwardingError, MissingCredentialsError, SheetsAPIError
from app.utils.logger import logger
from typing import List, Optional, Set, Union
import asyncio


FORWARDING_ERRORS = (ForwardingError, httpx.HTTPError, google_auth_exceptions.GoogleAuthError)


def is_transient(exc: BaseException) -> bool:
    """Transport failures, 429 and 5xx are worth another attempt."""
    if isinstance(exc, SheetsAPIError):
        return exc.is_transient
    return isinstance(exc, (httpx.TransportError, google_auth_exceptions.TransportError))


def primary_destination() -> Optional[SheetDestination]:
    if not settings.PRIMARY_SHEET_ID:
        return None
    return SheetDestination(
        name="primary",
        spreadsheet_id=settings.PRIMARY_SHEET_ID,
        range=settings.PRIMARY_SHEET_RANGE,
    )


def secondary_destination() -> Optional[SheetDestination]:
    if not settings.SECONDARY_SHEET_ID:
        return None
    return SheetDestination(
        name="secondary",
        spreadsheet_id=settings.SECONDARY_SHEET_ID,
        range=settings.SECONDARY_SHEET_RANGE,
    )


def web_app_destination() -> Optional[SheetDestination]:
    if not settings.SHEET_WEB_APP_URL:
        return None
    return SheetDestination(name="web_app", web_app_url=settings.SHEET_WEB_APP_URL)


def should_fan_out(payment: PaymentEvent) -> bool:
    """
    Decide whether a payment also goes to the secondary sheet.

    Matches when a secondary sheet is configured, the amount equals
    FANOUT_AMOUNT_MINOR and, if FANOUT_PAGE_ID is configured, the payment
    notes carry that page id under FANOUT_PAGE_ID_NOTE_KEY.
    """
    if not settings.SECONDARY_SHEET_ID:
        return False

    if payment.amount_minor != settings.FANOUT_AMOUNT_MINOR:
        return False

    if settings.FANOUT_PAGE_ID:
        page_id = payment.notes.get(settings.FANOUT_PAGE_ID_NOTE_KEY)
        return page_id is not None and str(page_id) == settings.FANOUT_PAGE_ID

    return True


def resolve_destinations(payment: PaymentEvent) -> List[SheetDestination]:
    """Primary sheet, secondary sheet when the fan-out rule matches, and the web app."""
    destinations = []

    primary = primary_destination()
    if primary is not None:
        destinations.append(primary)

    secondary = secondary_destination()
    if secondary is not None and should_fan_out(payment):
        destinations.append(secondary)

    web_app = web_app_destination()
    if web_app is not None:
        destinations.append(web_app)

    return destinations


class SheetForwarder:
    """
    Appends rows to destinations with header bootstrap and bounded retry.

    Failures are logged and swallowed: by the time a row is forwarded the
    webhook sender has already been answered.
    """

    def __init__(
        self,
        client: GoogleSheetsClient,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        write_header: Optional[bool] = None,
    ):
        self.client = client
        self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.SHEETS_MAX_ATTEMPTS)
        self.retry_delay = retry_delay if retry_delay is not None else settings.SHEETS_RETRY_DELAY_SECONDS
        self.write_header = write_header if write_header is not None else settings.WRITE_HEADER_ROW
        self._bootstrapped: Set[SheetDestination] = set()

    async def ensure_header(self, destination: SheetDestination) -> None:
        """
        Write the header row if the destination tab is empty.

        Runs once per destination per process. Two processes may both see an
        empty sheet and both write the header; the second write lands on the
        same cells.
        """
        if destination.is_web_app or destination in self._bootstrapped:
            return

        header = await self.client.get_header_row(destination)
        if not header:
            await self.client.write_header_row(destination)
            logger.info("Header row written", extra={"destination": destination.name})

        self._bootstrapped.add(destination)

    async def _send(
        self,
        destination: SheetDestination,
        row: Union[SheetRow, dict],
        value_input_option: str,
    ) -> None:
        if destination.is_web_app:
            await self.client.post_to_web_app(destination, row)
        else:
            await self.client.append_row(destination, row, value_input_option)

    async def forward(
        self,
        destination: SheetDestination,
        row: Union[SheetRow, dict],
        value_input_option: str = "RAW",
        payment_id: Optional[str] = None,
    ) -> bool:
        """
        Append a row to one destination, retrying transient failures.

        Args:
            destination: Target sheet or web app
            row: Sheet row, or a JSON object for a web app destination
            value_input_option: "RAW" or "USER_ENTERED" (formulas)
            payment_id: Used for log context only

        Returns:
            True if the row was written, False if it was given up on
        """
        log_extra = {"destination": destination.name, "payment_id": payment_id}

        if self.write_header and not destination.is_web_app:
            try:
                await self.ensure_header(destination)
            except MissingCredentialsError as e:
                logger.error(f"Skipping forward: {e}", extra=log_extra)
                return False
            except FORWARDING_ERRORS as e:
                logger.warning(f"Header check failed, appending anyway: {e}", extra=log_extra)

        for attempt in range(1, self.max_attempts + 1):
            try:
                await self._send(destination, row, value_input_option)
            except MissingCredentialsError as e:
                logger.error(f"Skipping forward: {e}", extra=log_extra)
                return False
            except FORWARDING_ERRORS as e:
                failure_extra = {**log_extra, "attempt": attempt, "status_code": getattr(e, "status_code", None)}
                if not is_transient(e):
                    logger.error(
                        f"Forwarding failed with non-retryable error: {e}",
                        extra=failure_extra,
                    )
                    return False
                if attempt == self.max_attempts:
                    logger.error(
                        f"Forwarding failed after {attempt} attempts: {e}",
                        extra=failure_extra,
                    )
                    return False
                logger.warning(
                    f"Forward attempt {attempt}/{self.max_attempts} failed, retrying in {self.retry_delay}s: {e}",
                    extra=failure_extra,
                )
                if self.retry_delay > 0:
                    await asyncio.sleep(self.retry_delay)
                continue

            logger.info("Row forwarded", extra={**log_extra, "attempt": attempt})
            return True

        return False


_forwarder: Optional[SheetForwarder] = None


def get_forwarder() -> SheetForwarder:
    """Process-wide forwarder sharing the process-wide Sheets client."""
    global _forwarder
    if _forwarder is None:
        _forwarder = SheetForwarder(get_sheets_client())
    return _forwarder
