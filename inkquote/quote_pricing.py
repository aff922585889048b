"""
Quote aggregation for Inkquote.

Composes the grand total of a quote from the per-item service
breakdowns, garment prices, shipping and the packaging/carton/
vectorization add-ons.
"""
import logging
from typing import Iterable, List, Mapping, Optional

from inkquote.domain import (
    Delay,
    Delivery,
    ItemPricing,
    PriceTable,
    PricingConfig,
    PricingOutcome,
    ProductLine,
    QuoteItem,
    QuoteTotal,
    Technique,
    Unavailable,
)
from inkquote.service_pricing import price_quote_items
from inkquote.shipping import cartons_required, shipping_cost

logger = logging.getLogger(__name__)


def discounted_unit_price(unit_price: float, discount_percentage: float) -> float:
    """Garment unit price after the textile discount shown to the client."""
    return unit_price * (1 - discount_percentage / 100)


def products_total(lines: Iterable[ProductLine], config: PricingConfig) -> float:
    """
    Garment total with the textile discount applied per unit.

    Client-provided garments and garments whose price is only known to the
    ERP (unit_price None) contribute nothing.
    """
    total = 0.0
    for line in lines:
        if line.client_provided or line.unit_price is None:
            continue
        total += discounted_unit_price(line.unit_price, config.textile_discount_percentage) * line.quantity
    return total


def vectorization_count(items: Iterable[QuoteItem]) -> int:
    """Items whose attached artwork is flagged for vectorization."""
    return sum(1 for item in items if item.vectorize and item.artwork_files)


def aggregate_quote(
    items: List[QuoteItem],
    breakdowns: Mapping[str, PricingOutcome],
    shipping: float,
    delivery: Delivery,
    config: PricingConfig,
) -> QuoteTotal:
    """
    Sum independently computed parts into one quote total.

    grand_total = products + services + shipping + packaging + cartons +
    vectorization. Express surcharges are already inside each breakdown's
    total and are not added again; express_surcharge_total is for display.
    Unavailable items contribute 0; an item missing from breakdowns counts
    as unavailable.

    Args:
        items: Quote items, in display order
        breakdowns: Pricing outcome per item id
        shipping: Shipping cost from the shipping estimator
        delivery: Delivery choices (packaging and carton add-ons)
        config: Pricing knobs

    Returns:
        QuoteTotal with the per-item outcomes attached
    """
    details: List[ItemPricing] = []
    services_total = 0.0
    express_surcharge_total = 0.0

    for item in items:
        outcome = breakdowns.get(item.id)
        if outcome is None:
            logger.warning(f"No pricing outcome for item {item.id}, counted as unavailable")
            outcome = Unavailable(
                technique=item.technique,
                reason="tier_unavailable",
                message=f"No price computed for {item.product.name}",
            )
        details.append(ItemPricing(item=item, outcome=outcome))
        if outcome.available:
            services_total += outcome.total
            express_surcharge_total += outcome.express_surcharge

    lines = [item.product for item in items]
    garments_total = products_total(lines, config)

    total_pieces = sum(item.total_quantity for item in items)
    packaging_cost = total_pieces * config.individual_packaging_price if delivery.individual_packaging else 0.0

    cartons = cartons_required(lines)
    carton_cost = cartons * config.new_carton_price if delivery.new_carton else 0.0

    vectorization_cost = vectorization_count(items) * config.vectorization_price

    grand_total = (
        garments_total
        + services_total
        + shipping
        + packaging_cost
        + carton_cost
        + vectorization_cost
    )

    return QuoteTotal(
        products_total=garments_total,
        services_total=services_total,
        shipping_cost=shipping,
        packaging_cost=packaging_cost,
        carton_cost=carton_cost,
        vectorization_cost=vectorization_cost,
        express_surcharge_total=express_surcharge_total,
        grand_total=grand_total,
        cartons=cartons,
        item_details=tuple(details),
    )


def price_quote(
    items: List[QuoteItem],
    tables: Mapping[Technique, PriceTable],
    delivery: Delivery,
    config: PricingConfig,
    delay: Optional[Delay] = None,
    distance_provider=None,
) -> QuoteTotal:
    """
    Price a whole quote: item breakdowns, shipping, then aggregation.

    Example:
        >>> total = price_quote(items, DEFAULT_PRICE_TABLES, Delivery(DeliveryMode.PICKUP), PricingConfig())
        >>> total.is_complete
        True
    """
    breakdowns = price_quote_items(items, tables, delay, config.express_surcharge_percent)
    shipping = shipping_cost([item.product for item in items], delivery, config, distance_provider)
    total = aggregate_quote(items, breakdowns, shipping, delivery, config)

    logger.info(
        f"Quote priced: {len(items)} item(s), services €{total.services_total:.2f}, "
        f"shipping €{total.shipping_cost:.2f}, total €{total.grand_total:.2f}"
    )
    return total
