"""
Shipping estimation for Inkquote.

Counts cartons per garment class and derives the delivery cost for the
selected delivery mode.
"""
import logging
import math
from typing import Dict, Iterable, Optional

from inkquote.domain import Delivery, DeliveryMode, PricingConfig, ProductLine

logger = logging.getLogger(__name__)

# Pieces per carton. Unknown garments pack like t-shirts.
CARTON_CAPACITY: Dict[str, int] = {
    "tshirt": 80,
    "sweat": 30,
    "totebag": 200,
}

_SWEAT_WORDS = ("sweat", "hoodie", "pull")
_TOTEBAG_WORDS = ("tote", "sac", "bag")


def classify_product(name: str, category: Optional[str] = None) -> str:
    """
    Packing class of a garment: "tshirt", "sweat" or "totebag".

    The category wins when it is one we know; otherwise the product name
    is searched for keywords.

    Example:
        >>> classify_product("Premium Hoodie")
        'sweat'
        >>> classify_product("Hoodie", category="tshirt")
        'tshirt'
    """
    if category == "sweat":
        return "sweat"
    if category in ("tshirt", "polo"):
        return "tshirt"
    if category == "totebag":
        return "totebag"

    name_lower = (name or "").lower()
    if any(word in name_lower for word in _SWEAT_WORDS):
        return "sweat"
    if any(word in name_lower for word in _TOTEBAG_WORDS):
        return "totebag"
    return "tshirt"


def quantities_by_class(lines: Iterable[ProductLine]) -> Dict[str, int]:
    quantities = {product_class: 0 for product_class in CARTON_CAPACITY}
    for line in lines:
        quantities[classify_product(line.name, line.category)] += line.quantity
    return quantities


def cartons_required(lines: Iterable[ProductLine]) -> int:
    """
    Number of cartons needed to ship the garments.

    Classes never share a carton: 81 t-shirts and 1 sweat need
    ceil(81/80) + ceil(1/30) = 3 cartons.
    """
    total = 0
    for product_class, quantity in quantities_by_class(lines).items():
        if quantity > 0:
            total += math.ceil(quantity / CARTON_CAPACITY[product_class])
    return total


def courier_cost(distance_km: float, config: PricingConfig) -> float:
    return max(distance_km * config.courier_price_per_km, config.courier_minimum_fee)


def shipping_cost(
    lines: Iterable[ProductLine],
    delivery: Delivery,
    config: PricingConfig,
    distance_provider=None,
) -> float:
    """
    Delivery cost for a set of garments.

    - parcel: cartons × parcel_price_per_carton
    - courier: max(distance × price per km, minimum fee); any distance
      lookup failure falls back to the minimum fee
    - pickup / client carrier: free

    Args:
        lines: Garment lines of the quote
        delivery: Delivery mode and address
        config: Pricing knobs
        distance_provider: Object with distance_to(address) -> DistanceResult,
            only used for courier deliveries

    Returns:
        Shipping cost in EUR
    """
    if delivery.mode is DeliveryMode.PARCEL:
        return cartons_required(lines) * config.parcel_price_per_carton

    if delivery.mode is DeliveryMode.COURIER:
        if delivery.address is None or distance_provider is None:
            logger.warning("Courier delivery without address or distance provider, charging minimum fee")
            return config.courier_minimum_fee
        try:
            result = distance_provider.distance_to(delivery.address)
        except Exception as e:
            logger.warning(f"Distance lookup failed, charging minimum courier fee: {e}")
            return config.courier_minimum_fee
        if result.error:
            logger.warning(f"Distance lookup failed, charging minimum courier fee: {result.error}")
            return config.courier_minimum_fee
        return courier_cost(result.distance_km, config)

    return 0.0


# Name used by the function-call API
estimate_shipping = shipping_cost
