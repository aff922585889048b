"""
Test suite for domain models.
Following TDD - tests written first.
"""
import dataclasses

import pytest

from inkquote.domain import (
    Delay,
    Delivery,
    DeliveryMode,
    DtfPriceTable,
    DtfSelection,
    EmbroiderySelection,
    PriceBreakdown,
    PricingConfig,
    ProductLine,
    QuantityTier,
    QuoteItem,
    ScreenPrintSelection,
    Technique,
    Unavailable,
    technique_options_from_dict,
    technique_options_to_dict,
)


class TestQuantityTier:
    """Test tier membership."""

    def test_bounded_tier(self):
        """Test that both bounds are inclusive."""
        tier = QuantityTier(11, 50, "11-50")
        assert tier.contains(11)
        assert tier.contains(50)
        assert not tier.contains(10)
        assert not tier.contains(51)

    def test_unbounded_tier(self):
        """Test that max None has no upper bound."""
        tier = QuantityTier(101, None, "101+")
        assert tier.contains(1000000)
        assert not tier.contains(100)

    def test_from_dict(self):
        """Test building a tier from JSON data."""
        tier = QuantityTier.from_dict({"min": "1", "max": 10, "label": "1-10"})
        assert tier == QuantityTier(1, 10, "1-10")


class TestTechniqueOptions:
    """Test the technique selection variants."""

    def test_kind_is_fixed(self):
        """Test that each selection carries its technique."""
        assert ScreenPrintSelection(color_count=1).kind is Technique.SCREEN_PRINT
        assert EmbroiderySelection(stitch_count=100).kind is Technique.EMBROIDERY
        assert DtfSelection(dimension="A4").kind is Technique.DTF

    def test_to_dict_tags_kind(self):
        """Test that serialized selections carry their kind."""
        data = technique_options_to_dict(ScreenPrintSelection(2, "dark", ("gold",)))
        assert data == {
            "color_count": 2,
            "tone": "dark",
            "selected_option_ids": ["gold"],
            "kind": "screen_print",
        }

    def test_from_dict_picks_variant(self):
        """Test that the kind selects the variant."""
        selection = technique_options_from_dict({"kind": "embroidery", "stitch_count": 8000, "size": "large"})
        assert selection == EmbroiderySelection(stitch_count=8000, size="large")

    def test_from_dict_defaults(self):
        """Test selection defaults."""
        selection = technique_options_from_dict({"kind": "screen_print", "color_count": 1})
        assert selection.tone == "light"
        assert selection.selected_option_ids == ()

    def test_unknown_kind(self):
        """Test that an unknown kind raises ValueError."""
        with pytest.raises(ValueError):
            technique_options_from_dict({"kind": "sublimation"})


class TestQuoteItem:
    """Test quote item serialization."""

    def test_round_trip(self):
        """Test that to_dict output builds an equal item."""
        item = QuoteItem(
            id="item-1",
            product=ProductLine(name="Hoodie", quantity=20, category="sweat", unit_price=18.0),
            technique=Technique.DTF,
            options=DtfSelection(dimension="20x20 cm"),
            total_quantity=20,
            artwork_files=("uploads/logo.png",),
            vectorize=True,
        )
        assert QuoteItem.from_dict(item.to_dict()) == item

    def test_quantity_mismatch_rejected(self):
        """Test that the garment count and the decorated count must agree."""
        with pytest.raises(ValueError) as exc_info:
            QuoteItem("item-1", ProductLine("Tee", 10), Technique.DTF, DtfSelection("A4"), 12)
        assert "does not match" in str(exc_info.value)

    def test_items_are_immutable(self):
        """Test that quote items cannot be changed once built."""
        item = QuoteItem("item-1", ProductLine("Tee", 1), Technique.DTF, DtfSelection("A4"), 1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            item.total_quantity = 2


class TestOutcomes:
    """Test pricing outcome variants."""

    def test_breakdown_is_available(self):
        """Test that a breakdown reports available."""
        breakdown = PriceBreakdown(Technique.DTF, 4.5, 10, 0.0, 0.0, 0.0, 45.0)
        assert breakdown.available
        assert breakdown.to_dict()["technique"] == "dtf"

    def test_unavailable_is_not_available(self):
        """Test that Unavailable reports not available."""
        outcome = Unavailable(Technique.DTF, "invalid_selection", "dimension not offered")
        assert not outcome.available
        assert outcome.min_quantity_required is None


class TestDelivery:
    """Test delivery serialization."""

    def test_from_dict_with_address(self):
        """Test building a courier delivery from JSON data."""
        delivery = Delivery.from_dict({
            "mode": "courier",
            "address": {"street": "Rue Neuve 1", "city": "Bruxelles", "postal_code": "1000", "country": "BE"},
            "new_carton": True,
        })
        assert delivery.mode is DeliveryMode.COURIER
        assert delivery.address.city == "Bruxelles"
        assert delivery.new_carton
        assert not delivery.individual_packaging

    def test_unknown_mode(self):
        """Test that an unknown delivery mode raises ValueError."""
        with pytest.raises(ValueError):
            Delivery.from_dict({"mode": "drone"})


class TestDefaults:
    """Test default values."""

    def test_delay_default(self):
        """Test that the default delay is the standard 10 days."""
        assert Delay() == Delay(working_days=10, is_express=False, express_days=None)

    def test_pricing_config_defaults(self):
        """Test reference pricing knobs."""
        config = PricingConfig()
        assert config.textile_discount_percentage == 30.0
        assert config.client_provided_indexation == 10.0
        assert config.express_surcharge_percent == 10.0
        assert config.individual_packaging_price == 0.10
        assert config.new_carton_price == 2.00
        assert config.vectorization_price == 25.00


class TestPriceTableMatrices:
    """Test that price matrices are read-only."""

    def test_matrix_is_copied_and_frozen(self):
        """Test that a table keeps its own read-only copy of the caller's matrix."""
        prices = {"1+-A4": 5.0}
        table = DtfPriceTable(
            min_quantity=1,
            quantity_tiers=(QuantityTier(1, None, "1+"),),
            dimensions=("A4",),
            prices=prices,
        )

        prices["1+-A4"] = 99.0

        assert table.prices["1+-A4"] == 5.0
        with pytest.raises(TypeError):
            table.prices["1+-A4"] = 99.0

    def test_frozen_tables_still_compare_equal(self):
        """Test that equality is unaffected by freezing."""
        tiers = (QuantityTier(1, None, "1+"),)
        first = DtfPriceTable(1, tiers, ("A4",), {"1+-A4": 5.0})
        second = DtfPriceTable(1, tiers, ("A4",), {"1+-A4": 5.0})

        assert first == second
        assert first.to_dict()["prices"] == {"1+-A4": 5.0}
