from dataclasses import dataclass
from typing import List, Union


SheetCell = Union[str, int, float]
SheetRow = List[SheetCell]

SHEET_COLUMNS = [
    "Payment ID",
    "Order ID",
    "Email",
    "Phone",
    "Amount",
    "Currency",
    "Event",
    "Status",
    "Method",
    "Error Code",
    "Error Description",
    "Name",
    "Notes Phone",
    "Notes Email",
    "Custom 1",
    "Custom 2",
    "City",
    "Timestamp",
]


@dataclass(frozen=True)
class SheetDestination:
    """Where a row goes: a spreadsheet range, or an Apps Script web app URL."""

    name: str
    spreadsheet_id: str = ""
    range: str = "Sheet1!A1"
    web_app_url: str = ""

    @property
    def is_web_app(self) -> bool:
        return bool(self.web_app_url)

    @property
    def tab(self) -> str:
        """Sheet tab portion of the range ("Sheet1!A1" -> "Sheet1")."""
        return self.range.split("!", 1)[0]

    @property
    def header_range(self) -> str:
        return f"{self.tab}!1:1"
