"""
Test suite for service pricing (per-item decoration price).
Following TDD - tests written first.
"""
import pytest

from inkquote.domain import (
    Delay,
    DtfPriceTable,
    DtfSelection,
    EmbroiderySelection,
    PriceBreakdown,
    ProductLine,
    QuantityTier,
    QuoteItem,
    ScreenPrintOption,
    ScreenPrintPriceTable,
    ScreenPrintSelection,
    Technique,
    Unavailable,
)
from inkquote.price_tables import DEFAULT_PRICE_TABLES
from inkquote.service_pricing import (
    BelowMinimumQuantityError,
    check_min_quantity,
    get_min_quantity_for_technique,
    price_quote_item,
    price_quote_items,
)


def make_item(technique, options, quantity, item_id="item-1"):
    return QuoteItem(
        id=item_id,
        product=ProductLine(name="Organic T-shirt", quantity=quantity, category="tshirt"),
        technique=technique,
        options=options,
        total_quantity=quantity,
    )


@pytest.fixture
def screen_table():
    return DEFAULT_PRICE_TABLES[Technique.SCREEN_PRINT]


@pytest.fixture
def embroidery_table():
    return DEFAULT_PRICE_TABLES[Technique.EMBROIDERY]


@pytest.fixture
def dtf_table():
    return DEFAULT_PRICE_TABLES[Technique.DTF]


@pytest.fixture
def flat_screen_table():
    """Single unbounded tier, one color at 7.50, two options."""
    return ScreenPrintPriceTable(
        min_quantity=1,
        quantity_tiers=(QuantityTier(1, None, "1+"),),
        color_counts=(1,),
        prices_light={"1+-1": 7.5},
        prices_dark={},
        fee_per_color=25.0,
        options=(
            ScreenPrintOption("discharge", "Discharge", 15.0),
            ScreenPrintOption("gold", "Gold", 25.0),
        ),
    )


@pytest.fixture
def sparse_dtf_table():
    """DTF table priced only from 11 pieces on."""
    return DtfPriceTable(
        min_quantity=1,
        quantity_tiers=(
            QuantityTier(1, 10, "1-10"),
            QuantityTier(11, 50, "11-50"),
            QuantityTier(51, None, "51+"),
        ),
        dimensions=("10x10 cm",),
        prices={"11-50-10x10 cm": 3.5, "51+-10x10 cm": 2.5},
    )


class TestScreenPrinting:
    """Test screen printing prices."""

    def test_two_colors_ten_pieces(self, screen_table):
        """Test 10 pieces, 2 colors, light textile, standard delay."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=2), 10)

        result = price_quote_item(item, screen_table, Delay(working_days=10))

        assert isinstance(result, PriceBreakdown)
        assert result.unit_price == pytest.approx(2.20)
        assert result.fixed_fees == pytest.approx(50.0)
        assert result.options_surcharge == 0.0
        assert result.express_surcharge == 0.0
        assert result.total == pytest.approx(72.00)

    def test_dark_textile_uses_dark_matrix(self, screen_table):
        """Test that dark textiles are priced from the dark matrix."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=2, tone="dark"), 10)

        result = price_quote_item(item, screen_table)

        assert result.unit_price == pytest.approx(2.40)
        assert result.total == pytest.approx(74.00)

    def test_fee_is_per_color(self, screen_table):
        """Test that the screen fee is charged once per color."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=4), 60)

        result = price_quote_item(item, screen_table)

        assert result.fixed_fees == pytest.approx(100.0)

    def test_options_do_not_compound(self, flat_screen_table):
        """Test that option percentages are summed, not compounded."""
        selection = ScreenPrintSelection(color_count=1, selected_option_ids=("discharge", "gold"))
        item = make_item(Technique.SCREEN_PRINT, selection, 10)

        result = price_quote_item(item, flat_screen_table)

        # base = 7.50 × 10 + 25 = 100; 15% + 25% = 40% of base
        assert result.options_surcharge == pytest.approx(40.0)
        assert result.total == pytest.approx(140.0)
        assert result.total != pytest.approx(143.75)

    def test_unknown_option_is_ignored(self, flat_screen_table):
        """Test that an option id missing from the table adds no surcharge."""
        selection = ScreenPrintSelection(color_count=1, selected_option_ids=("glitter",))
        item = make_item(Technique.SCREEN_PRINT, selection, 10)

        result = price_quote_item(item, flat_screen_table)

        assert result.available
        assert result.options_surcharge == 0.0
        assert result.total == pytest.approx(100.0)

    def test_unsupported_color_count(self, screen_table):
        """Test that a color count outside the table is an invalid selection."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=9), 10)

        result = price_quote_item(item, screen_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "invalid_selection"

    def test_missing_color_count(self, screen_table):
        """Test that a missing color count is an invalid selection."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=None), 10)

        result = price_quote_item(item, screen_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "invalid_selection"

    def test_unconfigured_tone_matrix(self, flat_screen_table):
        """Test that an empty dark matrix makes dark textiles unavailable."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=1, tone="dark"), 10)

        result = price_quote_item(item, flat_screen_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "price_unconfigured"
        assert result.min_quantity_required is None


class TestEmbroidery:
    """Test embroidery prices and digitization fees."""

    def test_threshold_is_small_fee(self, embroidery_table):
        """Test that exactly 10000 stitches pays the small digitization fee."""
        item = make_item(Technique.EMBROIDERY, EmbroiderySelection(stitch_count=10000), 10)

        result = price_quote_item(item, embroidery_table)

        assert result.unit_price == pytest.approx(4.00)
        assert result.fixed_fees == pytest.approx(40.0)
        assert result.total == pytest.approx(80.0)

    def test_above_threshold_is_large_fee(self, embroidery_table):
        """Test that 10001 stitches pays the large digitization fee."""
        item = make_item(Technique.EMBROIDERY, EmbroiderySelection(stitch_count=10001), 10)

        result = price_quote_item(item, embroidery_table)

        assert result.unit_price == pytest.approx(4.50)
        assert result.fixed_fees == pytest.approx(60.0)
        assert result.total == pytest.approx(105.0)

    def test_large_design_uses_large_matrix(self, embroidery_table):
        """Test that large designs are priced from the large matrix."""
        item = make_item(Technique.EMBROIDERY, EmbroiderySelection(stitch_count=3000, size="large"), 20)

        result = price_quote_item(item, embroidery_table)

        assert result.unit_price == pytest.approx(4.00)
        assert result.total == pytest.approx(20 * 4.00 + 40.0)

    def test_no_embroidery_surcharge(self, embroidery_table):
        """Test that embroidery never carries option surcharges."""
        item = make_item(Technique.EMBROIDERY, EmbroiderySelection(stitch_count=500), 10)

        result = price_quote_item(item, embroidery_table)

        assert result.options_surcharge == 0.0

    def test_negative_stitch_count(self, embroidery_table):
        """Test that a negative stitch count is an invalid selection."""
        item = make_item(Technique.EMBROIDERY, EmbroiderySelection(stitch_count=-1), 10)

        result = price_quote_item(item, embroidery_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "invalid_selection"


class TestDtf:
    """Test DTF transfer prices."""

    def test_standard_dimension(self, dtf_table):
        """Test 10 pieces of 10x10 cm."""
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 10)

        result = price_quote_item(item, dtf_table)

        assert result.unit_price == pytest.approx(4.50)
        assert result.fixed_fees == 0.0
        assert result.total == pytest.approx(45.0)

    def test_dimension_not_offered(self, dtf_table):
        """Test that a dimension outside the table is unavailable, not an error."""
        item = make_item(Technique.DTF, DtfSelection(dimension="12x18 cm"), 10)

        result = price_quote_item(item, dtf_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "invalid_selection"
        assert "12x18 cm" in result.message

    def test_unlock_quantity_reported(self, sparse_dtf_table):
        """Test that an unconfigured cell reports the quantity that unlocks a price."""
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 5)

        result = price_quote_item(item, sparse_dtf_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "price_unconfigured"
        assert result.min_quantity_required == 11
        assert "11" in result.message

    def test_zero_price_is_unconfigured(self):
        """Test that a zero price is treated as not configured."""
        table = DtfPriceTable(
            min_quantity=1,
            quantity_tiers=(QuantityTier(1, None, "1+"),),
            dimensions=("10x10 cm",),
            prices={"1+-10x10 cm": 0.0},
        )
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 10)

        result = price_quote_item(item, table)

        assert isinstance(result, Unavailable)
        assert result.reason == "price_unconfigured"


class TestTierUnavailable:
    """Test quantities no tier covers."""

    @pytest.fixture
    def gapped_table(self):
        return DtfPriceTable(
            min_quantity=1,
            quantity_tiers=(QuantityTier(10, 50, "10-50"),),
            dimensions=("10x10 cm",),
            prices={"10-50-10x10 cm": 3.0},
        )

    def test_below_first_tier(self, gapped_table):
        """Test that a quantity below every tier reports the first tier min."""
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 5)

        result = price_quote_item(item, gapped_table)

        assert result.reason == "tier_unavailable"
        assert result.min_quantity_required == 10

    def test_above_last_bounded_tier(self, gapped_table):
        """Test that no unlock quantity exists above a bounded last tier."""
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 60)

        result = price_quote_item(item, gapped_table)

        assert result.reason == "tier_unavailable"
        assert result.min_quantity_required is None


class TestExpressSurcharge:
    """Test the express surcharge on item prices."""

    def test_seven_days_is_thirty_percent(self, screen_table):
        """Test that 3 days saved add 30% of the base total."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=2), 10)
        delay = Delay(working_days=10, is_express=True, express_days=7)

        result = price_quote_item(item, screen_table, delay)

        assert result.express_surcharge == pytest.approx(72.0 * 0.30)
        assert result.total == pytest.approx(72.0 * 1.30)

    def test_surcharge_applies_after_options(self, flat_screen_table):
        """Test that the express surcharge is computed on base + options."""
        selection = ScreenPrintSelection(color_count=1, selected_option_ids=("discharge",))
        item = make_item(Technique.SCREEN_PRINT, selection, 10)
        delay = Delay(working_days=10, is_express=True, express_days=8)

        result = price_quote_item(item, flat_screen_table, delay)

        assert result.express_surcharge == pytest.approx(115.0 * 0.20)
        assert result.total == pytest.approx(115.0 * 1.20)

    def test_express_flag_without_days(self, screen_table):
        """Test that is_express without express_days falls back to working_days."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=2), 10)

        result = price_quote_item(item, screen_table, Delay(working_days=10, is_express=True))

        assert result.express_surcharge == 0.0

    def test_longer_than_standard_has_no_surcharge(self, screen_table):
        """Test that a lead time above the standard never gives a discount."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=2), 10)

        result = price_quote_item(item, screen_table, Delay(working_days=15))

        assert result.express_surcharge == 0.0
        assert result.total == pytest.approx(72.0)

    def test_custom_rate_per_day(self, screen_table):
        """Test that the per-day rate is configurable."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=2), 10)
        delay = Delay(working_days=10, is_express=True, express_days=5)

        result = price_quote_item(item, screen_table, delay, surcharge_per_day=5.0)

        assert result.express_surcharge == pytest.approx(72.0 * 0.25)


class TestInvalidInputs:
    """Test inputs that can never be priced."""

    def test_zero_quantity(self, dtf_table):
        """Test that a zero quantity is an invalid selection."""
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 0)

        result = price_quote_item(item, dtf_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "invalid_selection"

    def test_mismatched_table(self, screen_table):
        """Test that a table for another technique is rejected."""
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 10)

        result = price_quote_item(item, screen_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "invalid_selection"

    def test_missing_options(self, dtf_table):
        """Test that an item without technique options is rejected."""
        item = make_item(Technique.DTF, None, 10)

        result = price_quote_item(item, dtf_table)

        assert isinstance(result, Unavailable)
        assert result.reason == "invalid_selection"

    def test_pricing_is_deterministic(self, screen_table):
        """Test that the same inputs always give the same breakdown."""
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=3), 42)

        assert price_quote_item(item, screen_table) == price_quote_item(item, screen_table)


class TestPriceQuoteItems:
    """Test pricing several items at once."""

    def test_outcomes_keyed_by_item_id(self):
        """Test that each item gets its own outcome."""
        items = [
            make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 10, "a"),
            make_item(Technique.DTF, DtfSelection(dimension="12x18 cm"), 10, "b"),
        ]

        outcomes = price_quote_items(items, DEFAULT_PRICE_TABLES)

        assert set(outcomes) == {"a", "b"}
        assert outcomes["a"].available
        assert not outcomes["b"].available

    def test_missing_table(self):
        """Test that a technique without a table is unavailable."""
        items = [make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 10)]

        outcomes = price_quote_items(items, {})

        assert outcomes["item-1"].reason == "tier_unavailable"


class TestMinimumQuantity:
    """Test the minimum quantity gate."""

    def test_default_minimum(self):
        """Test that default tables accept a single piece."""
        assert get_min_quantity_for_technique(Technique.SCREEN_PRINT) == 1

    def test_minimum_from_tables(self):
        """Test that the minimum comes from the given table."""
        table = DtfPriceTable(
            min_quantity=25,
            quantity_tiers=(QuantityTier(1, None, "1+"),),
            dimensions=("10x10 cm",),
            prices={"1+-10x10 cm": 3.0},
        )

        assert get_min_quantity_for_technique(Technique.DTF, {Technique.DTF: table}) == 25

    def test_check_below_minimum_raises(self):
        """Test that an item below the minimum raises."""
        table = DtfPriceTable(
            min_quantity=25,
            quantity_tiers=(QuantityTier(1, None, "1+"),),
            dimensions=("10x10 cm",),
            prices={"1+-10x10 cm": 3.0},
        )
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 10)

        with pytest.raises(BelowMinimumQuantityError) as exc_info:
            check_min_quantity(item, {Technique.DTF: table})

        assert exc_info.value.min_quantity == 25
        assert "25" in str(exc_info.value)

    def test_calculator_does_not_enforce_minimum(self):
        """Test that pricing ignores min_quantity."""
        table = DtfPriceTable(
            min_quantity=25,
            quantity_tiers=(QuantityTier(1, None, "1+"),),
            dimensions=("10x10 cm",),
            prices={"1+-10x10 cm": 3.0},
        )
        item = make_item(Technique.DTF, DtfSelection(dimension="10x10 cm"), 10)

        result = price_quote_item(item, table)

        assert result.available
        assert result.total == pytest.approx(30.0)


class TestPricingProperties:
    """Test properties that hold across the default tables."""

    @pytest.mark.parametrize("color_count", [1, 2, 3, 4, 5, 6])
    def test_screen_print_unit_price_never_increases(self, screen_table, color_count):
        """Test that unit prices drop or stay flat across tier boundaries."""
        quantities = [10, 11, 50, 51, 100, 101]
        prices = [
            price_quote_item(
                make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=color_count), q),
                screen_table,
            ).unit_price
            for q in quantities
        ]
        assert prices == sorted(prices, reverse=True)

    @pytest.mark.parametrize("dimension", ["10x10 cm", "20x20 cm", "Custom"])
    def test_dtf_unit_price_never_increases(self, dtf_table, dimension):
        """Test DTF tier monotonicity at each tier min and min-1."""
        prices = [
            price_quote_item(make_item(Technique.DTF, DtfSelection(dimension=dimension), q), dtf_table).unit_price
            for q in [10, 11, 50, 51, 100, 101]
        ]
        assert prices == sorted(prices, reverse=True)

    def test_embroidery_unit_price_never_increases(self, embroidery_table):
        """Test embroidery tier monotonicity."""
        prices = [
            price_quote_item(
                make_item(Technique.EMBROIDERY, EmbroiderySelection(stitch_count=7000), q), embroidery_table
            ).unit_price
            for q in [10, 11, 50, 51, 100, 101]
        ]
        assert prices == sorted(prices, reverse=True)

    @pytest.mark.parametrize("quantity", [1, 10, 75, 500])
    def test_fixed_fees_do_not_depend_on_quantity(self, screen_table, embroidery_table, quantity):
        """Test that screen and digitization fees are the same at any quantity."""
        screen = price_quote_item(
            make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=3), quantity), screen_table
        )
        embroidery = price_quote_item(
            make_item(Technique.EMBROIDERY, EmbroiderySelection(stitch_count=12000), quantity), embroidery_table
        )

        assert screen.fixed_fees == pytest.approx(75.0)
        assert embroidery.fixed_fees == pytest.approx(60.0)

    def test_six_colors_unlock_quantity(self, screen_table):
        """Test the unlock quantity when the low tier lacks a 6-color price."""
        prices = dict(screen_table.prices_light)
        del prices["1-10-6"]
        table = ScreenPrintPriceTable(
            min_quantity=1,
            quantity_tiers=screen_table.quantity_tiers,
            color_counts=screen_table.color_counts,
            prices_light=prices,
            prices_dark=screen_table.prices_dark,
            fee_per_color=screen_table.fee_per_color,
        )
        item = make_item(Technique.SCREEN_PRINT, ScreenPrintSelection(color_count=6), 5)

        result = price_quote_item(item, table)

        assert isinstance(result, Unavailable)
        assert result.reason == "price_unconfigured"
        assert result.min_quantity_required == 11
