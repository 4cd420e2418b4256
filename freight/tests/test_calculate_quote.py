"""
Unit Tests for Freight Quote Calculator

Tests item supplementing, summary metrics, pricing by mode, and error paths.

Run with: pytest freight/tests/test_calculate_quote.py -v
"""

import pytest
import polars as pl

from shared.errors import ConfigurationError, RateNotFoundError, ValidationError
from freight.calculate_quote import (
    calculate_quote,
    price_quote,
    supplement_items,
    summarize_items,
)
from freight.agreements import AgreementBook
from freight.items import items_to_frame
from freight.version import VERSION


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def base_item():
    """50 x 40 x 30 cm, 10 kg, qty 2. Actual and volumetric weight are equal."""
    return {
        "id": "item-1",
        "length": 50,
        "width": 40,
        "height": 30,
        "dimensionUnit": "cm",
        "weight": 10,
        "weightUnit": "kg",
        "quantity": 2,
    }


@pytest.fixture
def origin():
    return {"id": "CN-SHA", "name": "Shanghai"}


@pytest.fixture
def destination():
    return {"id": "OM-MCT", "name": "Muscat"}


def make_agreement(rate_type: str, sell_price, min_charge=None, **overrides) -> dict:
    """Agreement record as the transport layer delivers it (prices as text)."""
    record = {
        "id": f"agr-{rate_type.lower()}",
        "origin_id": "CN-SHA",
        "destination_id": "OM-MCT",
        "rate_type": rate_type,
        "currency": "OMR",
        "buy_price": "1.00",
        "sell_price": str(sell_price) if sell_price is not None else None,
        "min_charge": str(min_charge) if min_charge is not None else "",
        "approval_status": "approved",
    }
    record.update(overrides)
    return record


def lookup_returning(record):
    """Agreement lookup that returns the same record for every lane."""
    return lambda origin_id, destination_id, rate_type: record


def supplement(items) -> pl.DataFrame:
    return supplement_items(items_to_frame(items))


# =============================================================================
# SUPPLEMENT TESTS
# =============================================================================

class TestSupplementItems:
    """Tests for supplement_items calculations."""

    def test_volume_cm3(self, base_item):
        df = supplement([base_item])
        assert df["volume_cm3"][0] == pytest.approx(60000.0)

    def test_cbm(self, base_item):
        df = supplement([base_item])
        assert df["cbm_per_unit"][0] == pytest.approx(0.06)
        assert df["total_cbm"][0] == pytest.approx(0.12)

    def test_volumetric_weight(self, base_item):
        """IATA: volume_cm3 / 6000."""
        df = supplement([base_item])
        assert df["volumetric_weight_kg_per_unit"][0] == pytest.approx(10.0)
        assert df["total_volumetric_weight"][0] == pytest.approx(20.0)

    def test_total_weight(self, base_item):
        df = supplement([base_item])
        assert df["total_weight_kg"][0] == pytest.approx(20.0)

    def test_sea_volumetric_weight_informational(self, base_item):
        """1 CBM = 1000 kg."""
        df = supplement([base_item])
        assert df["sea_volumetric_weight_kg"][0] == pytest.approx(120.0)

    def test_total_ft3(self, base_item):
        df = supplement([base_item])
        assert df["total_ft3"][0] == pytest.approx(0.12 * 35.3147)

    def test_meters_normalized_before_volume(self, base_item):
        """0.5 m x 0.4 m x 0.3 m is the same box as 50 x 40 x 30 cm."""
        item = {**base_item, "length": 0.5, "width": 0.4, "height": 0.3, "dimensionUnit": "m"}
        df = supplement([item])
        assert df["volume_cm3"][0] == pytest.approx(60000.0)

    def test_inches_normalized(self, base_item):
        item = {**base_item, "length": 10, "width": 10, "height": 10, "dimensionUnit": "in"}
        df = supplement([item])
        assert df["length_cm"][0] == pytest.approx(25.4)
        assert df["volume_cm3"][0] == pytest.approx(25.4 ** 3)

    def test_pounds_normalized(self, base_item):
        item = {**base_item, "weight": 22.0462, "weightUnit": "lb"}
        df = supplement([item])
        assert df["weight_kg_per_unit"][0] == pytest.approx(10.0, rel=1e-4)

    def test_incomplete_row_flagged_invalid(self, base_item):
        df = supplement([base_item, {**base_item, "height": 0}])
        assert df["is_valid"].to_list() == [True, False]

    def test_zero_weight_flagged_invalid(self, base_item):
        df = supplement([{**base_item, "weight": 0}])
        assert df["is_valid"][0] == False

    def test_unknown_unit_in_frame(self, base_item):
        df = items_to_frame([base_item]).with_columns(pl.lit("ft").alias("dimension_unit"))
        with pytest.raises(ValidationError, match="Unsupported dimension unit"):
            supplement_items(df)

    def test_unknown_unit_in_record(self, base_item):
        with pytest.raises(ValidationError, match="Item 1"):
            items_to_frame([{**base_item, "dimensionUnit": "ft"}])

    @pytest.mark.parametrize("field", ["length", "width", "height", "weight"])
    @pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
    def test_non_finite_record_rejected(self, base_item, field, value):
        with pytest.raises(ValidationError, match="Item 1"):
            items_to_frame([{**base_item, field: value}])

    @pytest.mark.parametrize("field", ["length", "width", "height", "weight"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_frame_rejected(self, base_item, field, value):
        df = items_to_frame([base_item]).with_columns(pl.lit(value).alias(field))
        with pytest.raises(ValidationError, match=f"non-finite value.*{field}"):
            supplement_items(df)

    def test_missing_column(self, base_item):
        df = items_to_frame([base_item]).drop("weight_unit")
        with pytest.raises(ValidationError, match="weight_unit"):
            supplement_items(df)


# =============================================================================
# SUMMARY TESTS
# =============================================================================

class TestSummarizeItems:
    """Tests for aggregate metrics."""

    def test_scenario_totals(self, base_item):
        summary = summarize_items(supplement([base_item]))
        assert summary["item_count"] == 1
        assert summary["total_quantity"] == 2
        assert summary["actual_weight"] == pytest.approx(20.0)
        assert summary["volumetric_weight"] == pytest.approx(20.0)
        assert summary["chargeable_weight"] == pytest.approx(20.0)
        assert summary["total_cbm"] == pytest.approx(0.12)

    def test_invalid_rows_excluded(self, base_item):
        summary = summarize_items(supplement([base_item, {**base_item, "length": 0}]))
        assert summary["item_count"] == 1
        assert summary["actual_weight"] == pytest.approx(20.0)

    def test_empty(self):
        summary = summarize_items(supplement([]))
        assert summary["item_count"] == 0
        assert summary["chargeable_weight"] == 0.0

    def test_quantity_scales_linearly(self, base_item):
        """metric(n x quantity) == n x metric(quantity)."""
        one = supplement([{**base_item, "quantity": 1}])
        many = supplement([{**base_item, "quantity": 7}])
        for col in ("total_cbm", "total_weight_kg", "total_volumetric_weight"):
            assert many[col][0] == pytest.approx(7 * one[col][0])

    @pytest.mark.parametrize("dims,weight", [
        ((50, 40, 30), 1),      # bulky: volumetric wins
        ((10, 10, 10), 50),     # dense: actual wins
        ((50, 40, 30), 10),     # equal
    ])
    def test_chargeable_weight_dominance(self, base_item, dims, weight):
        length, width, height = dims
        item = {**base_item, "length": length, "width": width, "height": height, "weight": weight}
        summary = summarize_items(supplement([item]))
        assert summary["chargeable_weight"] >= summary["actual_weight"]
        assert summary["chargeable_weight"] >= summary["volumetric_weight"]
        assert summary["chargeable_weight"] == max(summary["actual_weight"], summary["volumetric_weight"])


# =============================================================================
# PRICING TESTS
# =============================================================================

class TestAirPricing:
    """Tests for air freight pricing."""

    def test_chargeable_weight_times_sell_price(self, base_item, origin, destination):
        quote = calculate_quote(
            [base_item], "air", origin, destination,
            lookup_returning(make_agreement("AIR_KG", "5.00")),
        )
        assert quote.total_price == pytest.approx(100.0)
        assert quote.min_charge_applied is False
        assert quote.rate_type == "AIR_KG"
        assert quote.calculation["chargeable_weight"] == pytest.approx(20.0)

    def test_volumetric_weight_billed_when_heavier(self, base_item, origin, destination):
        item = {**base_item, "weight": 1}
        quote = calculate_quote(
            [item], "air", origin, destination,
            lookup_returning(make_agreement("AIR_KG", "5.00")),
        )
        assert quote.calculation["uses_volumetric_weight"] is True
        assert quote.total_price == pytest.approx(100.0)

    def test_min_charge_floor(self, base_item, origin, destination):
        item = {**base_item, "length": 10, "width": 10, "height": 10, "weight": 0.5, "quantity": 1}
        quote = calculate_quote(
            [item], "air", origin, destination,
            lookup_returning(make_agreement("AIR_KG", "4.00", min_charge="15")),
        )
        assert quote.total_price == pytest.approx(15.0)
        assert quote.min_charge_applied is True
        assert quote.calculation["min_charge_applied"] is True

    @pytest.mark.parametrize("field,value", [("weight", "inf"), ("length", "nan")])
    def test_non_finite_item_never_priced(self, base_item, field, value):
        with pytest.raises(ValidationError):
            price_quote(
                [{**base_item, field: value}], "air",
                {"rate_type": "AIR_KG", "sell_price": "5", "min_charge": "15"},
            )

    def test_no_valid_items(self, base_item, origin, destination):
        with pytest.raises(ValidationError, match="at least one complete item"):
            calculate_quote(
                [{**base_item, "weight": 0}], "air", origin, destination,
                lookup_returning(make_agreement("AIR_KG", "5.00")),
            )


class TestSeaLclPricing:
    """Tests for sea LCL pricing."""

    def test_min_charge_floor(self, base_item, origin, destination):
        """0.12 CBM x 150 = 18, floored to 50."""
        quote = calculate_quote(
            [base_item], "sea_lcl", origin, destination,
            lookup_returning(make_agreement("SEA_CBM", "150", min_charge="50")),
        )
        assert quote.calculation["billing_quantity"] == pytest.approx(0.12)
        assert quote.total_price == pytest.approx(50.0)
        assert quote.min_charge_applied is True

    def test_above_min_charge(self, base_item, origin, destination):
        item = {**base_item, "quantity": 20}
        quote = calculate_quote(
            [item], "sea_lcl", origin, destination,
            lookup_returning(make_agreement("SEA_CBM", "150", min_charge="50")),
        )
        assert quote.total_price == pytest.approx(1.2 * 150)
        assert quote.min_charge_applied is False

    @pytest.mark.parametrize("quantity", [1, 2, 5])
    def test_never_below_min_charge(self, base_item, quantity):
        quote = price_quote(
            [{**base_item, "quantity": quantity}], "sea_lcl",
            make_agreement("SEA_CBM", "10", min_charge="30"),
        )
        assert quote.total_price >= 30.0


class TestSeaFclPricing:
    """Tests for sea FCL pricing."""

    @pytest.fixture
    def fcl_lookup(self):
        return lookup_returning(make_agreement("SEA_CONTAINER_20", "800.00", min_charge="5000"))

    def test_flat_with_empty_items(self, origin, destination, fcl_lookup):
        quote = calculate_quote([], "sea_fcl", origin, destination, fcl_lookup, container="SEA_CONTAINER_20")
        assert quote.total_price == 800.0
        assert quote.rate_type == "SEA_CONTAINER_20"

    def test_flat_regardless_of_items(self, base_item, origin, destination, fcl_lookup):
        """Items are not billed and min charge is not applied."""
        quote = calculate_quote(
            [{**base_item, "quantity": 50}], "sea_fcl", origin, destination,
            fcl_lookup, container="SEA_CONTAINER_20",
        )
        assert quote.total_price == 800.0
        assert quote.min_charge_applied is False
        assert quote.calculation["min_charge"] is None

    def test_calculation_detail(self, base_item, origin, destination, fcl_lookup):
        quote = calculate_quote(
            [base_item], "sea_fcl", origin, destination, fcl_lookup, container="SEA_CONTAINER_20",
        )
        calc = quote.calculation
        assert calc["container_type"] == "SEA_CONTAINER_20"
        assert calc["capacity_cbm"] == 33
        assert calc["dimensions"] == "5.9m × 2.35m × 2.39m"
        assert calc["utilization"]["filled_cbm"] == pytest.approx(0.12)

    def test_no_utilization_without_items(self, origin, destination, fcl_lookup):
        quote = calculate_quote([], "sea_fcl", origin, destination, fcl_lookup, container="SEA_CONTAINER_20")
        assert "utilization" not in quote.calculation

    def test_container_required(self, origin, destination, fcl_lookup):
        with pytest.raises(ValidationError, match="select a container type"):
            calculate_quote([], "sea_fcl", origin, destination, fcl_lookup)

    def test_bad_item_data_does_not_block_price(self, base_item, origin, destination, fcl_lookup):
        """Items are not billed, so an unusable item only drops the utilization detail."""
        quote = calculate_quote(
            [{**base_item, "dimensionUnit": "ft"}], "sea_fcl", origin, destination,
            fcl_lookup, container="SEA_CONTAINER_20",
        )
        assert quote.total_price == 800.0
        assert "utilization" not in quote.calculation
        assert "Item 1" in quote.calculation["items_error"]

    def test_container_checked_before_items(self, base_item, origin, destination, fcl_lookup):
        with pytest.raises(ValidationError, match="select a container type"):
            calculate_quote(
                [{**base_item, "dimensionUnit": "ft"}], "sea_fcl", origin, destination, fcl_lookup,
            )

    def test_45hc_not_selectable(self, origin, destination, fcl_lookup):
        with pytest.raises(ValidationError, match="Unsupported container type"):
            calculate_quote([], "sea_fcl", origin, destination, fcl_lookup, container="SEA_CONTAINER_45HC")


# =============================================================================
# ERROR PATH TESTS
# =============================================================================

class TestErrors:
    """Tests for lookup and configuration failures."""

    def test_no_agreement_names_places(self, base_item):
        with pytest.raises(RateNotFoundError) as exc:
            calculate_quote(
                [base_item], "air",
                {"id": "X", "name": "Xiamen"}, {"id": "Y", "name": "Sohar"},
                lookup_returning(None),
            )
        assert "Xiamen" in str(exc.value)
        assert "Sohar" in str(exc.value)
        assert exc.value.rate_type == "AIR_KG"

    def test_rate_not_found_is_lookup_error(self, base_item):
        with pytest.raises(LookupError):
            calculate_quote([base_item], "air", "X", "Y", lookup_returning(None))

    def test_fcl_message_names_container(self, origin, destination):
        with pytest.raises(RateNotFoundError, match="40HC container from Shanghai to Muscat"):
            calculate_quote(
                [], "sea_fcl", origin, destination, lookup_returning(None),
                container="SEA_CONTAINER_40HC",
            )

    @pytest.mark.parametrize("sell_price", [None, "", "0", "-3", "nan", "inf"])
    def test_invalid_sell_price(self, base_item, origin, destination, sell_price):
        record = make_agreement("AIR_KG", None)
        record["sell_price"] = sell_price
        with pytest.raises(ConfigurationError, match="Invalid or missing sell price"):
            calculate_quote([base_item], "air", origin, destination, lookup_returning(record))

    def test_unparseable_sell_price(self, base_item, origin, destination):
        record = make_agreement("AIR_KG", "four")
        with pytest.raises(ConfigurationError):
            calculate_quote([base_item], "air", origin, destination, lookup_returning(record))

    def test_unknown_mode(self, base_item, origin, destination):
        with pytest.raises(ValidationError, match="Unknown shipping mode"):
            calculate_quote([base_item], "rail", origin, destination, lookup_returning(None))


# =============================================================================
# QUOTE RECORD TESTS
# =============================================================================

class TestQuoteRecord:
    """Tests for the Quote boundary shape."""

    def test_to_record(self, base_item, origin, destination):
        quote = calculate_quote(
            [base_item], "air", origin, destination,
            lookup_returning(make_agreement("AIR_KG", "5.00")),
        )
        record = quote.to_record()
        assert record["agreement_reference"] == "agr-air_kg"
        assert record["totalPrice"] == pytest.approx(100.0)
        assert record["currency"] == "OMR"
        assert record["calculator_version"] == VERSION
        assert record["calculation"]["sell_price"] == 5.0

    def test_place_names_filled_from_request(self, base_item, origin, destination):
        quote = calculate_quote(
            [base_item], "air", origin, destination,
            lookup_returning(make_agreement("AIR_KG", "5.00")),
        )
        assert quote.agreement.origin_name == "Shanghai"
        assert quote.agreement.destination_name == "Muscat"

    def test_with_agreement_book(self, base_item, origin, destination):
        book = AgreementBook([make_agreement("AIR_KG", "5.00", valid_from="2020-01-01")])
        quote = calculate_quote([base_item], "air", origin, destination, book)
        assert quote.total_price == pytest.approx(100.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
