import httpx
from google.oauth2 import service_account
from google.auth.transport import requests as google_requests
from app.config.settings import settings
from app.models import SheetDestination, SheetRow, SHEET_COLUMNS
from app.utils.exceptions import MissingCredentialsError, SheetsAPIError
from typing import Any, Dict, List, Optional
from urllib.parse import quote
import asyncio


# Service account scope granting write access to spreadsheets
SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def load_credentials() -> Optional[service_account.Credentials]:
    """
    Load service account credentials from settings.

    A key file takes precedence over an inline email/private key pair. Private
    keys pasted into env files usually carry literal "\\n" sequences, which are
    turned back into newlines.

    Returns:
        Credentials, or None if nothing is configured
    """
    if settings.GOOGLE_SERVICE_ACCOUNT_FILE:
        return service_account.Credentials.from_service_account_file(
            settings.GOOGLE_SERVICE_ACCOUNT_FILE,
            scopes=SCOPES,
        )

    if settings.GOOGLE_SERVICE_ACCOUNT_EMAIL and settings.GOOGLE_PRIVATE_KEY:
        info = {
            "client_email": settings.GOOGLE_SERVICE_ACCOUNT_EMAIL,
            "private_key": settings.GOOGLE_PRIVATE_KEY.replace("\\n", "\n"),
            "token_uri": TOKEN_URI,
        }
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)

    return None


class GoogleSheetsClient:
    """Service for the two Sheets v4 operations we need: read header, append row."""

    def __init__(
        self,
        credentials: Any = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.SHEETS_API_BASE_URL
        self.timeout = timeout if timeout is not None else settings.SHEETS_TIMEOUT_SECONDS
        self._credentials = credentials
        self._transport = transport

    def _get_credentials(self) -> Any:
        if self._credentials is None:
            try:
                self._credentials = load_credentials()
            except (OSError, ValueError) as e:
                # Unreadable key file or malformed private key
                raise MissingCredentialsError(
                    f"Could not load Google service account credentials: {e}"
                ) from e
        if self._credentials is None:
            raise MissingCredentialsError()
        return self._credentials

    async def authorize(self) -> Dict[str, str]:
        """
        Return an Authorization header, refreshing the access token if needed.

        Refreshing goes through google-auth's blocking transport, so it runs
        in a worker thread.

        Raises:
            MissingCredentialsError: nothing configured, or the configured
                key material could not be loaded
        """
        credentials = self._get_credentials()
        if not credentials.valid:
            await asyncio.to_thread(credentials.refresh, google_requests.Request())
        return {"Authorization": f"Bearer {credentials.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        destination: SheetDestination,
        params: Optional[dict] = None,
        payload: Optional[dict] = None,
    ) -> dict:
        headers = await self.authorize()

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            response = await client.request(
                method,
                path,
                params=params,
                json=payload,
                headers=headers,
            )

        if response.status_code >= 400:
            raise SheetsAPIError(response.status_code, response.text, destination.name)

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _values_path(destination: SheetDestination, range_: str) -> str:
        return f"/spreadsheets/{destination.spreadsheet_id}/values/{quote(range_, safe='')}"

    async def get_header_row(self, destination: SheetDestination) -> List[Any]:
        """Read row 1 of the destination tab; empty list when the tab is blank."""
        data = await self._request(
            "GET",
            self._values_path(destination, destination.header_range),
            destination,
        )
        values = data.get("values") or []
        return values[0] if values else []

    async def write_header_row(self, destination: SheetDestination) -> dict:
        return await self._request(
            "PUT",
            self._values_path(destination, destination.header_range),
            destination,
            params={"valueInputOption": "RAW"},
            payload={"values": [SHEET_COLUMNS]},
        )

    async def append_row(
        self,
        destination: SheetDestination,
        row: SheetRow,
        value_input_option: str = "RAW",
    ) -> dict:
        """
        Append one row after the last row of the destination range.

        Args:
            destination: Spreadsheet and range to write to
            row: Cells in canonical column order
            value_input_option: "RAW" stores literals, "USER_ENTERED" evaluates formulas

        Returns:
            Sheets API append response

        Raises:
            MissingCredentialsError
            SheetsAPIError
            httpx.HTTPError
        """
        return await self._request(
            "POST",
            self._values_path(destination, destination.range) + ":append",
            destination,
            params={
                "valueInputOption": value_input_option,
                "insertDataOption": "INSERT_ROWS",
            },
            payload={"values": [row]},
        )

    async def post_to_web_app(self, destination: SheetDestination, data: dict) -> None:
        """POST a JSON object to an Apps Script web app (no Google auth needed)."""
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            response = await client.post(destination.web_app_url, json=data)

        if response.status_code >= 400:
            raise SheetsAPIError(response.status_code, response.text, destination.name)


_sheets_client: Optional[GoogleSheetsClient] = None


def get_sheets_client() -> GoogleSheetsClient:
    """Process-wide client, created on first use."""
    global _sheets_client
    if _sheets_client is None:
        _sheets_client = GoogleSheetsClient()
    return _sheets_client
