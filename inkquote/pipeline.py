"""
Pipeline orchestrator for Inkquote.

Coordinates end-to-end processing: pricing snapshot, minimum quantity
checks, item pricing, shipping and aggregation.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from inkquote.domain import Delay, Delivery, DeliveryMode, QuoteItem, QuoteResult
from inkquote.providers import SnapshotProvider, get_snapshot_provider
from inkquote.quote_pricing import price_quote
from inkquote.service_pricing import BelowMinimumQuantityError, check_min_quantity
from inkquote.settings import get_settings

# Configure logging
logger = logging.getLogger(__name__)


def process_quote(
    items: List[QuoteItem],
    delivery: Delivery,
    delay: Optional[Delay] = None,
    provider: Optional[SnapshotProvider] = None,
    distance_provider=None,
) -> QuoteResult:
    """
    Price a quote request end-to-end.

    Pipeline sequence:
    1. Load settings
    2. Get the current pricing snapshot (price tables + pricing config)
    3. Check each item against its technique's minimum quantity
    4. Price items, shipping and add-ons

    Errors are caught and returned in QuoteResult.errors instead of being raised.
    This allows the UI to display user-friendly error messages. Items whose
    price is unavailable are not errors: they are reported in the total's
    item details and make the quote incomplete.

    Args:
        items: Quote items built from the customer's selections
        delivery: Delivery mode and add-ons
        delay: Requested lead time (standard when None)
        provider: Snapshot provider (shared file-backed provider by default)
        distance_provider: Distance lookup for courier deliveries

    Returns:
        QuoteResult with the priced total and any errors

    Example:
        >>> result = process_quote(items, Delivery(DeliveryMode.PARCEL), Delay(7))
        >>> if result.errors:
        ...     print(f"Errors: {result.errors}")
        >>> else:
        ...     print(f"Total: €{result.total.grand_total:.2f}")
    """
    quote_id = str(uuid.uuid4())
    delay = delay or Delay()
    errors: List[str] = []
    total = None

    logger.info(f"Processing quote {quote_id}")
    logger.info(f"  Items: {len(items)}, delivery: {delivery.mode.value}, delay: {delay.working_days} day(s)")

    # Step 1: Load settings
    try:
        settings = get_settings()
        logger.info(f"Loaded settings: price tables {settings.PRICE_TABLES_PATH}")
    except Exception as e:
        error_msg = f"Failed to load settings: {str(e)}"
        logger.error(error_msg)
        errors.append(error_msg)

    if not items:
        errors.append("Quote has no items")

    # Step 2: Pricing snapshot
    snapshot = None
    if not errors:
        try:
            snapshot = (provider or get_snapshot_provider()).get()
            logger.info(f"Pricing snapshot: {len(snapshot.tables)} technique table(s)")
        except Exception as e:
            error_msg = f"Failed to load pricing data: {str(e)}"
            logger.error(error_msg)
            errors.append(error_msg)

    # Step 3: Minimum quantities (reported, pricing still runs)
    if snapshot is not None:
        for item in items:
            try:
                check_min_quantity(item, snapshot.tables)
            except BelowMinimumQuantityError as e:
                error_msg = f"{item.product.name}: {str(e)}"
                logger.warning(error_msg)
                errors.append(error_msg)

    # Step 4: Price the quote
    if snapshot is not None:
        try:
            total = price_quote(
                items,
                snapshot.tables,
                delivery,
                snapshot.config,
                delay,
                distance_provider,
            )
            logger.info("Quote calculated:")
            logger.info(f"  Services: €{total.services_total:.2f}")
            logger.info(f"  Shipping: €{total.shipping_cost:.2f} ({total.cartons} carton(s))")
            logger.info(f"  Grand total: €{total.grand_total:.2f}")
            for detail in total.item_details:
                if not detail.outcome.available:
                    logger.warning(f"  Not priced: {detail.item.product.name}: {detail.outcome.message}")
        except Exception as e:
            error_msg = f"Unexpected error during quote calculation: {str(e)}"
            logger.error(error_msg)
            errors.append(error_msg)

    # Log final status
    if errors:
        logger.error(f"Processing completed with {len(errors)} error(s)")
    else:
        logger.info("Processing completed successfully")

    return QuoteResult(
        quote_id=quote_id,
        items=list(items),
        delivery=delivery,
        delay=delay,
        total=total,
        errors=errors,
    )


def process_quote_request(data: Dict[str, Any], **kwargs) -> QuoteResult:
    """
    Price a JSON quote request.

    Expected keys: "items" (list of QuoteItem dicts), "delivery" and
    optionally "delay". Malformed requests come back with an error instead
    of raising.
    """
    try:
        items = [QuoteItem.from_dict(entry) for entry in data.get("items", [])]
        delivery = Delivery.from_dict(data["delivery"])
        delay = Delay.from_dict(data["delay"]) if data.get("delay") else None
    except (KeyError, TypeError, ValueError) as e:
        error_msg = f"Invalid quote request: {str(e)}"
        logger.error(error_msg)
        return QuoteResult(
            quote_id=str(uuid.uuid4()),
            items=[],
            delivery=Delivery(DeliveryMode.PICKUP),
            delay=Delay(),
            total=None,
            errors=[error_msg],
        )

    return process_quote(items, delivery, delay, **kwargs)
