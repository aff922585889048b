"""
Price table datasets for Inkquote.

Holds the matrix key builders, the default tables, and the JSON loader and
validator for per-technique price tables.
"""
import json
import logging
from typing import Dict, Any, List, Mapping, Optional, Tuple

from inkquote.domain import (
    DtfPriceTable,
    EmbroideryPriceTable,
    PriceTable,
    QuantityTier,
    ScreenPrintOption,
    ScreenPrintPriceTable,
    Technique,
)

logger = logging.getLogger(__name__)


class PriceTableError(Exception):
    """Raised when a price table dataset is invalid or missing required fields."""
    pass


# Matrix keys. These are the only place keys are built: the table builders,
# the orphan check and the calculator must agree on the format.

def screen_print_key(tier_label: str, color_count: int) -> str:
    """Key for a screen printing matrix cell, e.g. "1-10-2"."""
    return f"{tier_label}-{color_count}"


def embroidery_key(tier_label: str, stitch_range_label: str) -> str:
    """Key for an embroidery matrix cell, e.g. "1-10-0-5000"."""
    return f"{tier_label}-{stitch_range_label}"


def dtf_key(tier_label: str, dimension: str) -> str:
    """Key for a DTF matrix cell, e.g. "1-10-10x10 cm"."""
    return f"{tier_label}-{dimension}"


STANDARD_TIERS: Tuple[QuantityTier, ...] = (
    QuantityTier(1, 10, "1-10"),
    QuantityTier(11, 50, "11-50"),
    QuantityTier(51, 100, "51-100"),
    QuantityTier(101, None, "101+"),
)

STANDARD_STITCH_RANGES: Tuple[QuantityTier, ...] = (
    QuantityTier(0, 5000, "0-5000"),
    QuantityTier(5001, 10000, "5001-10000"),
    QuantityTier(10001, 20000, "10001-20000"),
    QuantityTier(20001, None, "20001+"),
)


def build_matrix(
    tiers: Tuple[QuantityTier, ...],
    axis_labels: List[Any],
    rows: List[List[Optional[float]]],
    key_func,
) -> Dict[str, Optional[float]]:
    """
    Build a sparse price matrix from one row of prices per tier.

    Args:
        tiers: Quantity tiers, one per row
        axis_labels: Secondary axis values, one per column
        rows: Unit prices; None leaves the cell unconfigured
        key_func: One of the key builders above

    Returns:
        Dictionary mapping composite keys to unit prices

    Raises:
        PriceTableError: If the row/column shape does not match
    """
    if len(rows) != len(tiers):
        raise PriceTableError(f"Expected {len(tiers)} price rows, got {len(rows)}")

    matrix: Dict[str, Optional[float]] = {}
    for tier, row in zip(tiers, rows):
        if len(row) != len(axis_labels):
            raise PriceTableError(
                f"Tier {tier.label}: expected {len(axis_labels)} prices, got {len(row)}"
            )
        for axis_value, price in zip(axis_labels, row):
            if price is not None:
                matrix[key_func(tier.label, axis_value)] = price
    return matrix


_SCREEN_COLORS = [1, 2, 3, 4, 5, 6]
_DTF_DIMENSIONS = ["10x10 cm", "15x15 cm", "20x20 cm", "25x25 cm", "30x30 cm", "Custom"]
_STITCH_LABELS = [r.label for r in STANDARD_STITCH_RANGES]

DEFAULT_PRICE_TABLES: Dict[Technique, PriceTable] = {
    Technique.SCREEN_PRINT: ScreenPrintPriceTable(
        min_quantity=1,
        quantity_tiers=STANDARD_TIERS,
        color_counts=tuple(_SCREEN_COLORS),
        prices_light=build_matrix(STANDARD_TIERS, _SCREEN_COLORS, [
            [2.50, 2.20, 2.00, 1.90, 1.80, 1.70],
            [2.00, 1.80, 1.60, 1.50, 1.40, 1.30],
            [1.50, 1.30, 1.20, 1.10, 1.00, 0.95],
            [1.20, 1.00, 0.90, 0.85, 0.80, 0.75],
        ], screen_print_key),
        prices_dark=build_matrix(STANDARD_TIERS, _SCREEN_COLORS, [
            [2.70, 2.40, 2.20, 2.10, 2.00, 1.90],
            [2.20, 2.00, 1.80, 1.70, 1.60, 1.50],
            [1.70, 1.50, 1.40, 1.30, 1.20, 1.15],
            [1.40, 1.20, 1.10, 1.05, 1.00, 0.95],
        ], screen_print_key),
        fee_per_color=25.0,
        options=(
            ScreenPrintOption("discharge", "Discharge", 15.0),
            ScreenPrintOption("stop-sublimation", "Stop sublimation", 20.0),
            ScreenPrintOption("gold", "Gold", 25.0),
            ScreenPrintOption("phospho", "Glow in the dark", 30.0),
        ),
    ),
    Technique.EMBROIDERY: EmbroideryPriceTable(
        min_quantity=1,
        quantity_tiers=STANDARD_TIERS,
        stitch_ranges_small=STANDARD_STITCH_RANGES,
        stitch_ranges_large=STANDARD_STITCH_RANGES,
        prices_small=build_matrix(STANDARD_TIERS, _STITCH_LABELS, [
            [3.50, 4.00, 4.50, 5.00],
            [3.00, 3.50, 4.00, 4.50],
            [2.50, 3.00, 3.50, 4.00],
            [2.00, 2.50, 3.00, 3.50],
        ], embroidery_key),
        prices_large=build_matrix(STANDARD_TIERS, _STITCH_LABELS, [
            [4.50, 5.00, 5.50, 6.00],
            [4.00, 4.50, 5.00, 5.50],
            [3.50, 4.00, 4.50, 5.00],
            [3.00, 3.50, 4.00, 4.50],
        ], embroidery_key),
        fee_small_digitization=40.0,
        fee_large_digitization=60.0,
        small_digitization_threshold=10000,
    ),
    Technique.DTF: DtfPriceTable(
        min_quantity=1,
        quantity_tiers=STANDARD_TIERS,
        dimensions=tuple(_DTF_DIMENSIONS),
        prices=build_matrix(STANDARD_TIERS, _DTF_DIMENSIONS, [
            [4.50, 5.50, 6.50, 7.50, 8.50, 9.00],
            [3.50, 4.50, 5.50, 6.50, 7.50, 8.00],
            [2.50, 3.50, 4.50, 5.50, 6.50, 7.00],
            [2.00, 3.00, 4.00, 5.00, 6.00, 6.50],
        ], dtf_key),
    ),
}


REQUIRED_TABLE_KEYS: Dict[Technique, List[str]] = {
    Technique.SCREEN_PRINT: [
        "quantity_tiers", "color_counts", "prices_light", "prices_dark", "fee_per_color",
    ],
    Technique.EMBROIDERY: [
        "quantity_tiers",
        "stitch_ranges_small",
        "stitch_ranges_large",
        "prices_small",
        "prices_large",
        "fee_small_digitization",
        "fee_large_digitization",
        "small_digitization_threshold",
    ],
    Technique.DTF: ["quantity_tiers", "dimensions", "prices"],
}

_TABLE_CLASSES = {
    Technique.SCREEN_PRINT: ScreenPrintPriceTable,
    Technique.EMBROIDERY: EmbroideryPriceTable,
    Technique.DTF: DtfPriceTable,
}


def validate_tiers(tiers: Tuple[QuantityTier, ...], name: str = "quantity_tiers") -> None:
    """
    Check that tiers are sorted, contiguous, non-overlapping and uniquely labelled.

    Only the last tier may be unbounded.

    Raises:
        PriceTableError: On the first violation found
    """
    if not tiers:
        raise PriceTableError(f"{name} must not be empty")

    labels = [tier.label for tier in tiers]
    duplicates = sorted({label for label in labels if labels.count(label) > 1})
    if duplicates:
        raise PriceTableError(f"Duplicate labels in {name}: {', '.join(duplicates)}")

    ordered = sorted(tiers, key=lambda tier: tier.min)
    for current, following in zip(ordered, ordered[1:]):
        if current.max is None:
            raise PriceTableError(
                f"{name}: unbounded tier {current.label} must be the last one"
            )
        if following.min != current.max + 1:
            raise PriceTableError(
                f"{name}: tiers {current.label} and {following.label} are not contiguous"
            )

    for tier in tiers:
        if tier.min < 0 or (tier.max is not None and tier.max < tier.min):
            raise PriceTableError(f"{name}: invalid bounds for tier {tier.label}")


def expected_keys(table: PriceTable) -> Dict[str, List[str]]:
    """Map each matrix attribute of a table to the keys its axes can produce."""
    tier_labels = [tier.label for tier in table.quantity_tiers]

    if isinstance(table, ScreenPrintPriceTable):
        keys = [screen_print_key(t, c) for t in tier_labels for c in table.color_counts]
        return {"prices_light": keys, "prices_dark": keys}

    if isinstance(table, EmbroideryPriceTable):
        return {
            "prices_small": [
                embroidery_key(t, r.label) for t in tier_labels for r in table.stitch_ranges_small
            ],
            "prices_large": [
                embroidery_key(t, r.label) for t in tier_labels for r in table.stitch_ranges_large
            ],
        }

    return {"prices": [dtf_key(t, d) for t in tier_labels for d in table.dimensions]}


def validate_prices(table: PriceTable) -> None:
    """
    Check that every matrix value is null or a non-negative number.

    Raises:
        PriceTableError: On the first invalid value found
    """
    for attribute in expected_keys(table):
        matrix: Mapping[str, Optional[float]] = getattr(table, attribute)
        for key, value in matrix.items():
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise PriceTableError(
                    f"Invalid {table.technique.value} price table: "
                    f"{attribute}['{key}'] must be a number or null"
                )
            if value < 0:
                raise PriceTableError(
                    f"Invalid {table.technique.value} price table: "
                    f"{attribute}['{key}'] must not be negative"
                )


def orphaned_price_keys(table: PriceTable) -> Dict[str, List[str]]:
    """
    Find matrix entries no tier/axis combination can reach anymore.

    These appear when a tier, color count, stitch range or dimension is
    removed from a table without pruning its prices.

    Returns:
        Matrix attribute name -> sorted orphaned keys (only non-empty lists)
    """
    orphans: Dict[str, List[str]] = {}
    for attribute, keys in expected_keys(table).items():
        matrix: Mapping[str, Optional[float]] = getattr(table, attribute)
        unreachable = sorted(set(matrix) - set(keys))
        if unreachable:
            orphans[attribute] = unreachable
    return orphans


def price_table_from_dict(data: Dict[str, Any]) -> PriceTable:
    """
    Build and validate one price table from its JSON representation.

    Args:
        data: Dictionary with a "technique" key and the variant's fields

    Returns:
        Immutable price table

    Raises:
        PriceTableError: If technique is unknown, keys are missing or tiers are malformed
    """
    try:
        technique = Technique(data.get("technique"))
    except ValueError:
        raise PriceTableError(f"Unknown technique in price table: {data.get('technique')!r}")

    missing_keys = [key for key in REQUIRED_TABLE_KEYS[technique] if key not in data]
    if missing_keys:
        raise PriceTableError(
            f"Missing required keys in {technique.value} price table: {', '.join(missing_keys)}"
        )

    try:
        table = _TABLE_CLASSES[technique].from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise PriceTableError(f"Invalid {technique.value} price table: {e}")

    validate_prices(table)
    validate_tiers(table.quantity_tiers)
    if isinstance(table, EmbroideryPriceTable):
        validate_tiers(table.stitch_ranges_small, "stitch_ranges_small")
        validate_tiers(table.stitch_ranges_large, "stitch_ranges_large")

    for attribute, keys in orphaned_price_keys(table).items():
        logger.warning(
            f"{technique.value} {attribute}: {len(keys)} orphaned price(s) ignored: {', '.join(keys)}"
        )

    return table


def price_tables_from_list(data: List[Dict[str, Any]]) -> Dict[Technique, PriceTable]:
    """Build a technique -> table mapping, rejecting duplicate techniques."""
    tables: Dict[Technique, PriceTable] = {}
    for entry in data:
        table = price_table_from_dict(entry)
        if table.technique in tables:
            raise PriceTableError(f"Duplicate price table for {table.technique.value}")
        tables[table.technique] = table
    return tables


def load_price_tables(path: str) -> Dict[Technique, PriceTable]:
    """
    Load and validate price tables from a JSON file.

    The file holds a list of table objects, one per technique. Techniques
    absent from the file fall back to DEFAULT_PRICE_TABLES.

    Args:
        path: Path to the price tables JSON file

    Returns:
        Mapping of technique to price table

    Raises:
        FileNotFoundError: If the file doesn't exist
        PriceTableError: If the file is not valid JSON or a table is invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Price tables file not found: {path}")
    except json.JSONDecodeError as e:
        raise PriceTableError(f"Invalid JSON in price tables: {e}")

    if not isinstance(data, list):
        raise PriceTableError("Invalid price tables: top level must be a list of tables")

    tables = dict(DEFAULT_PRICE_TABLES)
    tables.update(price_tables_from_list(data))
    return tables


def save_price_tables(path: str, tables: Mapping[Technique, PriceTable]) -> None:
    """Write price tables to a JSON file in the format load_price_tables reads."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump([table.to_dict() for table in tables.values()], f, indent=2, ensure_ascii=False)
