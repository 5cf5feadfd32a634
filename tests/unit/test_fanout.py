import pytest

from app.services.forwarder import should_fan_out, resolve_destinations
from app.services.normalizer import normalize_payment


PAGE_ID = "pl_TestPage99"


class TestShouldFanOut:
    """Tests for the secondary-sheet predicate."""

    @pytest.mark.unit
    def test_amount_match_without_page_rule(self, payment_entity):
        payment = normalize_payment("payment.captured", payment_entity(amount=9900))
        assert should_fan_out(payment) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("amount", [9800, 10000, 990000, None])
    def test_other_amounts_do_not_fan_out(self, payment_entity, amount):
        payment = normalize_payment("payment.captured", payment_entity(amount=amount))
        assert should_fan_out(payment) is False

    @pytest.mark.unit
    def test_page_rule_requires_matching_page_id(self, payment_entity, test_settings):
        test_settings.FANOUT_PAGE_ID = PAGE_ID
        matching = normalize_payment(
            "payment.captured",
            payment_entity(amount=9900, notes={"payment_page_id": PAGE_ID}),
        )
        other_page = normalize_payment(
            "payment.captured",
            payment_entity(amount=9900, notes={"payment_page_id": "pl_Other"}),
        )
        no_page = normalize_payment("payment.captured", payment_entity(amount=9900))

        assert should_fan_out(matching) is True
        assert should_fan_out(other_page) is False
        assert should_fan_out(no_page) is False

    @pytest.mark.unit
    def test_page_rule_still_requires_amount(self, payment_entity, test_settings):
        test_settings.FANOUT_PAGE_ID = PAGE_ID
        payment = normalize_payment(
            "payment.captured",
            payment_entity(amount=19900, notes={"payment_page_id": PAGE_ID}),
        )
        assert should_fan_out(payment) is False

    @pytest.mark.unit
    def test_note_key_is_configurable(self, payment_entity, test_settings):
        test_settings.FANOUT_PAGE_ID = PAGE_ID
        test_settings.FANOUT_PAGE_ID_NOTE_KEY = "page"
        payment = normalize_payment(
            "payment.captured",
            payment_entity(amount=9900, notes={"page": PAGE_ID}),
        )
        assert should_fan_out(payment) is True

    @pytest.mark.unit
    def test_no_fan_out_without_secondary_sheet(self, payment_entity, test_settings):
        test_settings.SECONDARY_SHEET_ID = ""
        payment = normalize_payment("payment.captured", payment_entity(amount=9900))
        assert should_fan_out(payment) is False

    @pytest.mark.unit
    def test_threshold_is_configurable(self, payment_entity, test_settings):
        test_settings.FANOUT_AMOUNT_MINOR = 49900
        payment = normalize_payment("payment.captured", payment_entity(amount=49900))
        assert should_fan_out(payment) is True


class TestResolveDestinations:
    """Tests for resolve_destinations()."""

    @pytest.mark.unit
    def test_primary_and_secondary(self, payment_entity):
        payment = normalize_payment("payment.captured", payment_entity(amount=9900))
        destinations = resolve_destinations(payment)

        assert [d.name for d in destinations] == ["primary", "secondary"]
        assert destinations[0].spreadsheet_id == "primary-sheet-id"
        assert destinations[1].spreadsheet_id == "secondary-sheet-id"
        assert destinations[1].range == "Payments!A1"

    @pytest.mark.unit
    def test_primary_only_when_predicate_fails(self, payment_entity):
        payment = normalize_payment("payment.captured", payment_entity(amount=50000))
        assert [d.name for d in resolve_destinations(payment)] == ["primary"]

    @pytest.mark.unit
    def test_no_secondary_when_unconfigured(self, payment_entity, test_settings):
        test_settings.SECONDARY_SHEET_ID = ""
        payment = normalize_payment("payment.captured", payment_entity(amount=9900))
        assert [d.name for d in resolve_destinations(payment)] == ["primary"]

    @pytest.mark.unit
    def test_web_app_destination(self, payment_entity, test_settings):
        test_settings.SHEET_WEB_APP_URL = "https://script.google.com/macros/s/abc/exec"
        payment = normalize_payment("payment.captured", payment_entity(amount=50000))
        destinations = resolve_destinations(payment)

        assert [d.name for d in destinations] == ["primary", "web_app"]
        assert destinations[1].is_web_app

    @pytest.mark.unit
    def test_nothing_configured(self, payment_entity, test_settings):
        test_settings.PRIMARY_SHEET_ID = ""
        test_settings.SECONDARY_SHEET_ID = ""
        payment = normalize_payment("payment.captured", payment_entity())
        assert resolve_destinations(payment) == []
