"""
Unit Tests for Rate Agreements

Tests boundary coercion, creation rules, the approval gate, and lookup.

Run with: pytest freight/tests/test_agreements.py -v
"""

import pytest
from datetime import date

from shared.errors import ConfigurationError, GuardViolation, ValidationError
from freight.agreements import (
    APPROVED,
    PENDING_ADMIN,
    REJECTED,
    AgreementBook,
    RateAgreement,
    approve_agreement,
    coerce_agreement,
    load_agreements,
    reject_agreement,
    require_valid_sell_price,
    validate_new_agreement,
)


# =============================================================================
# FIXTURES
# =============================================================================

ON_DATE = date(2025, 5, 1)


@pytest.fixture
def lane():
    return {
        "origin_id": "CN-SHA",
        "destination_id": "OM-MCT",
        "rate_type": "AIR_KG",
    }


@pytest.fixture
def form(lane):
    """Agreement creation form as submitted."""
    return {
        **lane,
        "buy_price": "3.20",
        "sell_price": "4.00",
        "margin_percent": "25",
        "min_charge": "15",
        "valid_from": "2025-01-01",
        "valid_to": "",
    }


def row(id, sell_price="4.00", partner_id=None, valid_from="2025-01-01", valid_to=None, **overrides):
    record = {
        "id": id,
        "partner_id": partner_id,
        "origin_id": "CN-SHA",
        "destination_id": "OM-MCT",
        "rate_type": "AIR_KG",
        "buy_price": "1.00",
        "sell_price": sell_price,
        "valid_from": valid_from,
        "valid_to": valid_to,
        "approval_status": "approved",
        "active": "true",
    }
    record.update(overrides)
    return record


# =============================================================================
# COERCION TESTS
# =============================================================================

class TestCoerceAgreement:
    """Tests for parsing raw agreement records."""

    def test_string_prices_parsed(self, lane):
        agreement = coerce_agreement({**lane, "sell_price": "4.00", "buy_price": "3.2", "min_charge": "15"})
        assert agreement.sell_price == 4.0
        assert agreement.buy_price == 3.2
        assert agreement.min_charge == 15.0

    def test_blank_min_charge_is_none(self, lane):
        agreement = coerce_agreement({**lane, "sell_price": "4", "min_charge": ""})
        assert agreement.min_charge is None

    def test_default_currency(self, lane):
        assert coerce_agreement({**lane, "sell_price": 4}).currency == "OMR"

    def test_joined_place_names(self, lane):
        agreement = coerce_agreement({
            **lane,
            "sell_price": 4,
            "origins": {"name": "Shanghai"},
            "destinations": {"name": "Muscat"},
        })
        assert agreement.origin_name == "Shanghai"
        assert agreement.destination_name == "Muscat"

    def test_unparseable_price(self, lane):
        with pytest.raises(ConfigurationError) as exc:
            coerce_agreement({**lane, "id": "agr-9", "sell_price": "abc"})
        assert exc.value.agreement_id == "agr-9"
        assert "sell_price" in str(exc.value)

    def test_passthrough(self, lane):
        agreement = RateAgreement(**lane, sell_price=4)
        assert coerce_agreement(agreement) is agreement


class TestRequireValidSellPrice:

    def test_valid(self, lane):
        assert require_valid_sell_price(RateAgreement(**lane, sell_price=4)) == 4.0

    @pytest.mark.parametrize("price", [None, 0, -1, float("nan"), float("inf")])
    def test_invalid(self, lane, price):
        with pytest.raises(ConfigurationError, match="Rate configuration error"):
            require_valid_sell_price(RateAgreement(**lane, sell_price=price))


class TestIsUsable:

    def test_inside_window(self, lane):
        agreement = RateAgreement(**lane, valid_from=date(2025, 1, 1), valid_to=date(2025, 12, 31))
        assert agreement.is_usable(ON_DATE)

    def test_window_inclusive(self, lane):
        agreement = RateAgreement(**lane, valid_from=ON_DATE, valid_to=ON_DATE)
        assert agreement.is_usable(ON_DATE)

    def test_expired(self, lane):
        agreement = RateAgreement(**lane, valid_from=date(2025, 1, 1), valid_to=date(2025, 4, 30))
        assert not agreement.is_usable(ON_DATE)

    def test_pending(self, lane):
        assert not RateAgreement(**lane, approval_status=PENDING_ADMIN).is_usable(ON_DATE)

    def test_inactive(self, lane):
        assert not RateAgreement(**lane, active=False).is_usable(ON_DATE)


# =============================================================================
# CREATION AND APPROVAL TESTS
# =============================================================================

class TestValidateNewAgreement:
    """Tests for the admin and partner creation form rules."""

    def test_admin_created_is_approved(self, form):
        agreement = validate_new_agreement(form)
        assert agreement.approval_status == APPROVED
        assert agreement.sell_price == 4.0
        assert agreement.valid_to is None

    def test_partner_created_is_pending(self, form):
        agreement = validate_new_agreement(form, by_partner=True)
        assert agreement.approval_status == PENDING_ADMIN

    def test_missing_required(self, form):
        with pytest.raises(ValidationError, match="origin_id"):
            validate_new_agreement({**form, "origin_id": ""})

    def test_unknown_rate_type(self, form):
        with pytest.raises(ValidationError, match="Unknown rate type"):
            validate_new_agreement({**form, "rate_type": "RAIL_KG"})

    def test_sell_must_exceed_buy(self, form):
        with pytest.raises(ValidationError, match="greater than buy price"):
            validate_new_agreement({**form, "sell_price": "3.20"})

    def test_non_positive_buy(self, form):
        with pytest.raises(ValidationError, match="Buy price"):
            validate_new_agreement({**form, "buy_price": "0"})

    def test_negative_margin(self, form):
        with pytest.raises(ValidationError, match="Margin"):
            validate_new_agreement({**form, "margin_percent": "-5"})

    def test_min_charge_optional(self, form):
        assert validate_new_agreement({**form, "min_charge": ""}).min_charge is None

    def test_bad_min_charge(self, form):
        with pytest.raises(ValidationError, match="Minimum charge"):
            validate_new_agreement({**form, "min_charge": "abc"})

    def test_valid_to_before_valid_from(self, form):
        with pytest.raises(ValidationError, match="Valid-to"):
            validate_new_agreement({**form, "valid_to": "2024-12-31"})


class TestApprovalGate:
    """Tests for approving and rejecting pending agreements."""

    @pytest.fixture
    def pending(self, form):
        return validate_new_agreement(form, by_partner=True)

    def test_approve(self, pending):
        approved = approve_agreement(pending, "admin-1")
        assert approved.approval_status == APPROVED
        assert approved.approved_by == "admin-1"
        assert approved.approved_at is not None
        assert pending.approval_status == PENDING_ADMIN

    def test_reject_requires_reason(self, pending):
        with pytest.raises(GuardViolation, match="reason"):
            reject_agreement(pending, "admin-1", "  ")

    def test_reject(self, pending):
        rejected = reject_agreement(pending, "admin-1", "Sell price too low")
        assert rejected.approval_status == REJECTED
        assert rejected.rejection_reason == "Sell price too low"

    def test_cannot_approve_twice(self, pending):
        approved = approve_agreement(pending, "admin-1")
        with pytest.raises(GuardViolation, match="only pending"):
            approve_agreement(approved, "admin-2")


# =============================================================================
# LOOKUP TESTS
# =============================================================================

class TestAgreementBook:
    """Tests for selecting the single usable agreement for a lane."""

    def test_single_match(self):
        book = AgreementBook([row("agr-1")])
        agreement = book.find("CN-SHA", "OM-MCT", "AIR_KG", on_date=ON_DATE)
        assert agreement.id == "agr-1"
        assert agreement.sell_price == 4.0

    def test_no_match_returns_none(self):
        book = AgreementBook([row("agr-1")])
        assert book.find("CN-SHA", "OM-MCT", "SEA_CBM", on_date=ON_DATE) is None

    def test_partner_specific_wins(self):
        book = AgreementBook([
            row("global", valid_from="2025-04-01"),
            row("partner", partner_id="p-1", valid_from="2025-01-01"),
        ])
        assert book.find("CN-SHA", "OM-MCT", "AIR_KG", partner_id="p-1", on_date=ON_DATE).id == "partner"

    def test_other_partner_excluded(self):
        book = AgreementBook([
            row("global"),
            row("other", partner_id="p-2"),
        ])
        assert book.find("CN-SHA", "OM-MCT", "AIR_KG", partner_id="p-1", on_date=ON_DATE).id == "global"

    def test_most_recent_valid_from(self):
        book = AgreementBook([
            row("old", valid_from="2025-01-01"),
            row("new", valid_from="2025-03-01"),
        ])
        assert book.find("CN-SHA", "OM-MCT", "AIR_KG", on_date=ON_DATE).id == "new"

    def test_expired_and_pending_skipped(self):
        book = AgreementBook([
            row("expired", valid_to="2025-04-30"),
            row("pending", approval_status="pending_admin"),
            row("inactive", active="false"),
            row("future", valid_from="2025-06-01"),
        ])
        assert book.find("CN-SHA", "OM-MCT", "AIR_KG", on_date=ON_DATE) is None

    def test_callable_as_lookup(self):
        book = AgreementBook([row("agr-1", valid_from="2000-01-01")])
        assert book("CN-SHA", "OM-MCT", "AIR_KG").id == "agr-1"

    def test_bad_date(self):
        with pytest.raises(ConfigurationError, match="invalid date"):
            AgreementBook([row("agr-1", valid_from="first of may")])

    def test_sample_csv(self):
        book = load_agreements()
        assert len(book) == 8
        sea = book.find("CN-SHA", "OM-MCT", "SEA_CBM", on_date=ON_DATE)
        assert sea.id == "agr-002"
        assert sea.min_charge == 30.0
        assert book.find("AE-DXB", "OM-SLL", "SEA_CBM", on_date=ON_DATE) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
