import json
import pytest
from fastapi.testclient import TestClient
from app.config.settings import settings
from app.models import SHEET_COLUMNS, StatusMode
from app.services.forwarder import SheetForwarder, get_forwarder
from app.utils.razorpay import generate_razorpay_signature


WEBHOOK_SECRET = "test-webhook-secret"


class FakeSheetsClient:
    """In-memory stand-in for GoogleSheetsClient.

    `append_failures` is consumed one exception per append call; once it is
    empty appends succeed.
    """

    def __init__(self, header=None, append_failures=None, header_error=None):
        self.header = list(header) if header else []
        self.append_failures = list(append_failures or [])
        self.header_error = header_error
        self.appended = []
        self.web_app_posts = []
        self.header_reads = 0
        self.header_writes = 0
        self.append_calls = 0

    async def get_header_row(self, destination):
        self.header_reads += 1
        if self.header_error is not None:
            raise self.header_error
        return list(self.header)

    async def write_header_row(self, destination):
        self.header_writes += 1
        self.header = list(SHEET_COLUMNS)
        return {}

    async def append_row(self, destination, row, value_input_option="RAW"):
        self.append_calls += 1
        if self.append_failures:
            raise self.append_failures.pop(0)
        self.appended.append((destination, list(row), value_input_option))
        return {}

    async def post_to_web_app(self, destination, data):
        self.append_calls += 1
        if self.append_failures:
            raise self.append_failures.pop(0)
        self.web_app_posts.append((destination, dict(data)))

    def rows_for(self, name):
        return [row for destination, row, _ in self.appended if destination.name == name]


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Pin settings so a local .env never leaks into tests."""
    values = {
        "RAZORPAY_WEBHOOK_SECRET": WEBHOOK_SECRET,
        "ALLOWED_EVENTS": [
            "payment.created",
            "payment.authorized",
            "payment.captured",
            "payment.failed",
            "payment.refunded",
        ],
        "STATUS_MODE": StatusMode.RAW,
        "DASHBOARD_URL_TEMPLATE": "https://dashboard.razorpay.com/app/payments/{payment_id}",
        "PRIMARY_SHEET_ID": "primary-sheet-id",
        "PRIMARY_SHEET_RANGE": "Sheet1!A1",
        "SECONDARY_SHEET_ID": "secondary-sheet-id",
        "SECONDARY_SHEET_RANGE": "Payments!A1",
        "SHEET_WEB_APP_URL": "",
        "SHEET_TIMEZONE": "Asia/Kolkata",
        "CLICKABLE_LINKS": False,
        "WRITE_HEADER_ROW": True,
        "SHEETS_MAX_ATTEMPTS": 3,
        "SHEETS_RETRY_DELAY_SECONDS": 0.0,
        "FANOUT_AMOUNT_MINOR": 9900,
        "FANOUT_PAGE_ID": None,
        "FANOUT_PAGE_ID_NOTE_KEY": "payment_page_id",
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": "",
        "GOOGLE_PRIVATE_KEY": "",
        "GOOGLE_SERVICE_ACCOUNT_FILE": "",
    }
    for key, value in values.items():
        monkeypatch.setattr(settings, key, value)
    return settings


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET


@pytest.fixture
def sheets_client():
    return FakeSheetsClient()


@pytest.fixture
def forwarder(sheets_client):
    return SheetForwarder(sheets_client, max_attempts=3, retry_delay=0)


@pytest.fixture
def make_forwarder():
    """Build (forwarder, fake client) pairs with custom failure scripts."""

    def _make(max_attempts=3, write_header=True, **client_kwargs):
        fake = FakeSheetsClient(**client_kwargs)
        return SheetForwarder(fake, max_attempts=max_attempts, retry_delay=0, write_header=write_header), fake

    return _make


@pytest.fixture
def client(forwarder):
    """TestClient whose webhook route forwards into the fake Sheets client."""
    from app.main import app

    app.dependency_overrides[get_forwarder] = lambda: forwarder
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def payment_entity():
    """Build a Razorpay payment entity with sensible defaults."""

    def _build(**overrides):
        entity = {
            "id": "pay_29QQoUBi66xm2f",
            "entity": "payment",
            "amount": 9900,
            "currency": "INR",
            "status": "captured",
            "order_id": "order_9A33XWu170gUtm",
            "method": "upi",
            "email": "asha@example.com",
            "contact": "+919876543210",
            "notes": {
                "name": "Asha",
                "city": "Pune",
                "phone": "9876543210",
                "email": "asha@example.com",
            },
            "error_code": None,
            "error_description": None,
            "created_at": 1700000000,
        }
        entity.update(overrides)
        return entity

    return _build


@pytest.fixture
def webhook_body(payment_entity):
    """Build a full webhook body around a payment entity."""

    def _build(event="payment.captured", **entity_overrides):
        return {
            "entity": "event",
            "account_id": "acc_BFQ7uQEaa7j2z7",
            "event": event,
            "contains": ["payment"],
            "payload": {"payment": {"entity": payment_entity(**entity_overrides)}},
            "created_at": 1700000001,
        }

    return _build


@pytest.fixture
def signed_request(webhook_secret):
    """Serialize a body and sign the exact bytes, returning (bytes, headers)."""

    def _sign(body, secret=None, **dumps_kwargs):
        raw = body if isinstance(body, bytes) else json.dumps(body, **dumps_kwargs).encode()
        signature = generate_razorpay_signature(raw, secret or webhook_secret)
        headers = {
            "Content-Type": "application/json",
            "x-razorpay-signature": signature,
        }
        return raw, headers

    return _sign
