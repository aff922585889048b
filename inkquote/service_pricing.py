"""
Service pricing for Inkquote.

Turns one quote item (technique, selection, quantity) into a priced
breakdown using the technique's price table, fixed fees, option
surcharges and the express surcharge.
"""
import logging
from typing import Dict, List, Mapping, Optional, Tuple

from inkquote.delivery_dates import (
    EXPRESS_SURCHARGE_PER_DAY,
    STANDARD_WORKING_DAYS,
    express_surcharge_percent,
    resolve_lead_time,
)
from inkquote.domain import (
    Delay,
    DtfPriceTable,
    DtfSelection,
    EmbroideryPriceTable,
    EmbroiderySelection,
    PriceBreakdown,
    PriceTable,
    PricingOutcome,
    QuantityTier,
    QuoteItem,
    ScreenPrintPriceTable,
    ScreenPrintSelection,
    Technique,
    Unavailable,
)
from inkquote.price_tables import DEFAULT_PRICE_TABLES, dtf_key, embroidery_key, screen_print_key
from inkquote.tier_resolver import (
    lookup_unit_price,
    min_quantity_for_price,
    resolve_stitch_range,
    resolve_tier,
)

logger = logging.getLogger(__name__)

TECHNIQUE_NAMES = {
    Technique.SCREEN_PRINT: "Screen printing",
    Technique.EMBROIDERY: "Embroidery",
    Technique.DTF: "DTF transfer",
}


class BelowMinimumQuantityError(Exception):
    """Raised when an item's quantity is below its technique's minimum."""

    def __init__(self, technique: Technique, quantity: int, min_quantity: int):
        self.technique = technique
        self.quantity = quantity
        self.min_quantity = min_quantity
        super().__init__(
            f"Minimum quantity for {TECHNIQUE_NAMES[technique]} is {min_quantity} "
            f"piece(s) (got {quantity})"
        )


def get_min_quantity_for_technique(
    technique: Technique,
    tables: Optional[Mapping[Technique, PriceTable]] = None,
) -> int:
    """
    Minimum total quantity before a technique can be ordered at all.

    Falls back to the default tables when the technique has no table, then to 1.
    """
    table = (tables or {}).get(technique) or DEFAULT_PRICE_TABLES.get(technique)
    if table is None or table.min_quantity < 0:
        logger.warning(f"No minimum quantity found for {technique.value}, using 1")
        return 1
    return table.min_quantity


def check_min_quantity(item: QuoteItem, tables: Optional[Mapping[Technique, PriceTable]] = None) -> None:
    """
    Gate used by the calling layer before an item is added to a quote.

    The calculator itself never enforces this.

    Raises:
        BelowMinimumQuantityError: If item.total_quantity is below the minimum
    """
    min_quantity = get_min_quantity_for_technique(item.technique, tables)
    if item.total_quantity < min_quantity:
        raise BelowMinimumQuantityError(item.technique, item.total_quantity, min_quantity)


def _unavailable(
    technique: Technique,
    reason: str,
    message: str,
    min_quantity_required: Optional[int] = None,
) -> Unavailable:
    logger.info(f"{technique.value} unavailable ({reason}): {message}")
    return Unavailable(
        technique=technique,
        reason=reason,
        message=message,
        min_quantity_required=min_quantity_required,
    )


def _price_not_configured(
    technique: Technique,
    axis_description: str,
    tiers: Tuple[QuantityTier, ...],
    matrix: Mapping[str, Optional[float]],
    key_for_tier,
    quantity: int,
    reason: str = "price_unconfigured",
) -> Unavailable:
    unlock_at = min_quantity_for_price(tiers, matrix, key_for_tier, quantity)
    name = TECHNIQUE_NAMES[technique]
    if unlock_at is None:
        message = f"{name}: no price configured for {axis_description}"
    else:
        message = (
            f"{name}: no price configured for {axis_description} at {quantity} piece(s); "
            f"available from {unlock_at} piece(s)"
        )
    return _unavailable(technique, reason, message, unlock_at)


def _resolve_screen_print(
    item: QuoteItem,
    table: ScreenPrintPriceTable,
    selection: ScreenPrintSelection,
):
    """Returns (unit_price, fixed_fees, surcharge_percentage) or an Unavailable."""
    technique = table.technique
    quantity = item.total_quantity
    color_count = selection.color_count

    if color_count is None or color_count not in table.color_counts:
        return _unavailable(
            technique,
            "invalid_selection",
            f"{TECHNIQUE_NAMES[technique]}: unsupported color count {color_count!r}",
        )
    if selection.tone not in ("light", "dark"):
        return _unavailable(
            technique,
            "invalid_selection",
            f"{TECHNIQUE_NAMES[technique]}: unknown substrate tone {selection.tone!r}",
        )

    matrix = table.matrix_for(selection.tone)

    def key_for_tier(tier: QuantityTier) -> str:
        return screen_print_key(tier.label, color_count)

    axis_description = f"{color_count} color(s) on {selection.tone} textile"
    tier = resolve_tier(quantity, table.quantity_tiers)
    if tier is None:
        return _price_not_configured(
            technique, axis_description, table.quantity_tiers, matrix, key_for_tier, quantity,
            reason="tier_unavailable",
        )

    unit_price = lookup_unit_price(matrix, key_for_tier(tier))
    if unit_price is None:
        return _price_not_configured(
            technique, axis_description, table.quantity_tiers, matrix, key_for_tier, quantity
        )

    fixed_fees = table.fee_per_color * color_count

    # Percentages are summed, then applied once to the base
    options_by_id = {option.id: option for option in table.options}
    surcharge_percentage = 0.0
    for option_id in selection.selected_option_ids:
        option = options_by_id.get(option_id)
        if option is None:
            logger.warning(f"Ignoring unknown screen printing option {option_id!r}")
            continue
        surcharge_percentage += option.surcharge_percentage

    return unit_price, fixed_fees, surcharge_percentage


def _resolve_embroidery(
    item: QuoteItem,
    table: EmbroideryPriceTable,
    selection: EmbroiderySelection,
):
    technique = table.technique
    quantity = item.total_quantity
    stitch_count = selection.stitch_count

    if selection.size not in ("small", "large"):
        return _unavailable(
            technique,
            "invalid_selection",
            f"{TECHNIQUE_NAMES[technique]}: unknown embroidery size {selection.size!r}",
        )
    if stitch_count is None or stitch_count < 0:
        return _unavailable(
            technique,
            "invalid_selection",
            f"{TECHNIQUE_NAMES[technique]}: invalid stitch count {stitch_count!r}",
        )

    stitch_range = resolve_stitch_range(stitch_count, table.ranges_for(selection.size))
    if stitch_range is None:
        return _unavailable(
            technique,
            "invalid_selection",
            f"{TECHNIQUE_NAMES[technique]}: no {selection.size} stitch range covers "
            f"{stitch_count} stitches",
        )

    matrix = table.matrix_for(selection.size)

    def key_for_tier(tier: QuantityTier) -> str:
        return embroidery_key(tier.label, stitch_range.label)

    axis_description = f"{selection.size} design with {stitch_range.label} stitches"
    tier = resolve_tier(quantity, table.quantity_tiers)
    if tier is None:
        return _price_not_configured(
            technique, axis_description, table.quantity_tiers, matrix, key_for_tier, quantity,
            reason="tier_unavailable",
        )

    unit_price = lookup_unit_price(matrix, key_for_tier(tier))
    if unit_price is None:
        return _price_not_configured(
            technique, axis_description, table.quantity_tiers, matrix, key_for_tier, quantity
        )

    # Threshold is inclusive on the small side
    if stitch_count <= table.small_digitization_threshold:
        fixed_fees = table.fee_small_digitization
    else:
        fixed_fees = table.fee_large_digitization

    return unit_price, fixed_fees, 0.0


def _resolve_dtf(item: QuoteItem, table: DtfPriceTable, selection: DtfSelection):
    technique = table.technique
    quantity = item.total_quantity
    dimension = selection.dimension

    if not dimension or dimension not in table.dimensions:
        return _unavailable(
            technique,
            "invalid_selection",
            f"{TECHNIQUE_NAMES[technique]}: dimension {dimension!r} is not offered",
        )

    def key_for_tier(tier: QuantityTier) -> str:
        return dtf_key(tier.label, dimension)

    axis_description = f"dimension {dimension}"
    tier = resolve_tier(quantity, table.quantity_tiers)
    if tier is None:
        return _price_not_configured(
            technique, axis_description, table.quantity_tiers, table.prices, key_for_tier, quantity,
            reason="tier_unavailable",
        )

    unit_price = lookup_unit_price(table.prices, key_for_tier(tier))
    if unit_price is None:
        return _price_not_configured(
            technique, axis_description, table.quantity_tiers, table.prices, key_for_tier, quantity
        )

    return unit_price, 0.0, 0.0


_RESOLVERS = {
    Technique.SCREEN_PRINT: (ScreenPrintPriceTable, ScreenPrintSelection, _resolve_screen_print),
    Technique.EMBROIDERY: (EmbroideryPriceTable, EmbroiderySelection, _resolve_embroidery),
    Technique.DTF: (DtfPriceTable, DtfSelection, _resolve_dtf),
}


def price_quote_item(
    item: QuoteItem,
    table: PriceTable,
    delay: Optional[Delay] = None,
    surcharge_per_day: float = EXPRESS_SURCHARGE_PER_DAY,
) -> PricingOutcome:
    """
    Price one quote item.

    Order of operations:
    1. Resolve the quantity tier and the axis bucket (fail fast => Unavailable)
    2. fixed fees (per color / digitization / none)
    3. base = unit_price × quantity + fixed fees
    4. options surcharge = base × Σ option percentages / 100
    5. base total = base + options surcharge
    6. express surcharge on base total when the lead time is under the standard
    7. total = base total + express surcharge

    Never raises for bad selections or unconfigured prices: those come back
    as Unavailable so the rest of the quote can still be priced.

    Args:
        item: Quote item to price
        table: Price table for item.technique
        delay: Requested turnaround (None = standard)
        surcharge_per_day: Express surcharge percentage per working day saved

    Returns:
        PriceBreakdown, or Unavailable with a message and the unlock quantity

    Example:
        >>> item = QuoteItem("1", product, Technique.DTF, DtfSelection("10x10 cm"), 10)
        >>> price_quote_item(item, DEFAULT_PRICE_TABLES[Technique.DTF]).total
        45.0
    """
    technique = item.technique
    name = TECHNIQUE_NAMES[technique]

    if item.total_quantity is None or item.total_quantity <= 0:
        return _unavailable(technique, "invalid_selection", f"{name}: quantity must be positive")

    table_class, selection_class, resolver = _RESOLVERS[technique]
    if not isinstance(table, table_class):
        return _unavailable(
            technique,
            "invalid_selection",
            f"{name}: price table is for {getattr(table, 'technique', None)!r}",
        )
    if not isinstance(item.options, selection_class):
        return _unavailable(technique, "invalid_selection", f"{name}: missing technique options")

    resolved = resolver(item, table, item.options)
    if isinstance(resolved, Unavailable):
        return resolved
    unit_price, fixed_fees, surcharge_percentage = resolved

    base = unit_price * item.total_quantity + fixed_fees
    options_surcharge = base * surcharge_percentage / 100
    base_total = base + options_surcharge

    express_surcharge = 0.0
    if delay is not None:
        percent = express_surcharge_percent(
            STANDARD_WORKING_DAYS, resolve_lead_time(delay), surcharge_per_day
        )
        express_surcharge = base_total * percent / 100

    return PriceBreakdown(
        technique=technique,
        unit_price=unit_price,
        quantity=item.total_quantity,
        fixed_fees=fixed_fees,
        options_surcharge=options_surcharge,
        express_surcharge=express_surcharge,
        total=base_total + express_surcharge,
    )


def price_quote_items(
    items: List[QuoteItem],
    tables: Mapping[Technique, PriceTable],
    delay: Optional[Delay] = None,
    surcharge_per_day: float = EXPRESS_SURCHARGE_PER_DAY,
) -> Dict[str, PricingOutcome]:
    """
    Price every item of a quote, keyed by item id.

    A technique without a table yields Unavailable for that item only.
    """
    outcomes: Dict[str, PricingOutcome] = {}
    for item in items:
        table = tables.get(item.technique)
        if table is None:
            outcomes[item.id] = _unavailable(
                item.technique,
                "tier_unavailable",
                f"{TECHNIQUE_NAMES[item.technique]}: no price table configured",
            )
            continue
        outcomes[item.id] = price_quote_item(item, table, delay, surcharge_per_day)
    return outcomes
