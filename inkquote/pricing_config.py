"""
Pricing configuration loader and validator for Inkquote.

Loads the global pricing knobs (discounts, add-on prices, courier rates)
from a JSON file and validates them.
"""
import json
import logging
from typing import Dict, Any, List

from inkquote.domain import PricingConfig

logger = logging.getLogger(__name__)


# Keys every pricing config file must provide
REQUIRED_CONFIG_KEYS: List[str] = [
    "textile_discount_percentage",
    "individual_packaging_price",
    "new_carton_price",
    "vectorization_price",
]

# Keys that fall back to PricingConfig defaults when absent
OPTIONAL_CONFIG_KEYS: List[str] = [
    "client_provided_indexation",
    "express_surcharge_percent",
    "parcel_price_per_carton",
    "courier_price_per_km",
    "courier_minimum_fee",
]

PERCENTAGE_KEYS = ["textile_discount_percentage", "client_provided_indexation"]


class PricingConfigError(Exception):
    """Raised when pricing configuration is invalid or missing required fields."""
    pass


def validate_pricing_config(data: Dict[str, Any]) -> PricingConfig:
    """
    Validate a raw pricing config dictionary and build a PricingConfig.

    Args:
        data: Parsed JSON object

    Returns:
        Immutable PricingConfig

    Raises:
        PricingConfigError: If keys are missing, unknown, non-numeric,
            negative, or a percentage exceeds 100
    """
    if not isinstance(data, dict):
        raise PricingConfigError("Invalid pricing config: top level must be an object")

    missing_keys = [key for key in REQUIRED_CONFIG_KEYS if key not in data]
    if missing_keys:
        raise PricingConfigError(
            f"Missing required keys in pricing config: {', '.join(missing_keys)}"
        )

    known_keys = set(REQUIRED_CONFIG_KEYS) | set(OPTIONAL_CONFIG_KEYS)
    unknown_keys = sorted(key for key in data if key not in known_keys)
    if unknown_keys:
        raise PricingConfigError(
            f"Unknown keys in pricing config: {', '.join(unknown_keys)}"
        )

    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PricingConfigError(f"Invalid pricing config: '{key}' must be a number")
        if value < 0:
            raise PricingConfigError(f"Invalid pricing config: '{key}' must not be negative")

    for key in PERCENTAGE_KEYS:
        if key in data and data[key] > 100:
            raise PricingConfigError(f"Invalid pricing config: '{key}' must be between 0 and 100")

    return PricingConfig.from_dict(data)


def load_pricing_config(path: str) -> PricingConfig:
    """
    Load and validate pricing configuration from JSON file.

    Required keys in config:
    - textile_discount_percentage: Discount shown to the client on garments (%)
    - individual_packaging_price: Price per piece for individual bags
    - new_carton_price: Price per new carton
    - vectorization_price: Price per artwork redrawn by the designer

    Optional keys (PricingConfig defaults): client_provided_indexation,
    express_surcharge_percent, parcel_price_per_carton, courier_price_per_km,
    courier_minimum_fee.

    Args:
        path: Path to pricing_config.json file

    Returns:
        Validated PricingConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        PricingConfigError: If config is not valid JSON or fails validation
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Pricing config file not found: {path}")
    except json.JSONDecodeError as e:
        raise PricingConfigError(f"Invalid JSON in pricing config: {e}")

    return validate_pricing_config(data)


def load_pricing_config_or_default(path: str) -> PricingConfig:
    """Load the pricing config, falling back to defaults when the file is absent."""
    try:
        return load_pricing_config(path)
    except FileNotFoundError:
        logger.info(f"Pricing config {path} not found, using default configuration")
        return PricingConfig()


def save_pricing_config(path: str, config: PricingConfig) -> None:
    """Write a pricing config in the format load_pricing_config reads."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
