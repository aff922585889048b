"""
Tier and axis lookup for Inkquote price tables.

Pure functions: no logging, no defaults. A miss is returned as None and the
caller decides how to report it.
"""
from typing import Callable, Iterable, Mapping, Optional, Sequence

from inkquote.domain import QuantityTier


def resolve_tier(quantity: int, tiers: Iterable[QuantityTier]) -> Optional[QuantityTier]:
    """
    Find the tier containing quantity.

    Tiers are scanned in ascending min order; the first tier with
    min <= quantity <= max (max None = unbounded) wins.

    Args:
        quantity: Total quantity of the quote item
        tiers: Quantity tiers of a price table

    Returns:
        The matching tier, or None when no tier covers quantity

    Example:
        >>> tiers = [QuantityTier(1, 10, "1-10"), QuantityTier(11, None, "11+")]
        >>> resolve_tier(11, tiers).label
        '11+'
    """
    for tier in sorted(tiers, key=lambda t: t.min):
        if tier.contains(quantity):
            return tier
    return None


def resolve_stitch_range(stitch_count: int, ranges: Iterable[QuantityTier]) -> Optional[QuantityTier]:
    """Find the stitch range containing stitch_count (same rule as quantity tiers)."""
    return resolve_tier(stitch_count, ranges)


def lookup_unit_price(matrix: Mapping[str, Optional[float]], key: str) -> Optional[float]:
    """
    Read a configured unit price from a sparse matrix.

    An absent key, a None value and a zero value all mean "not configured".
    The result is never coerced to 0.
    """
    price = matrix.get(key)
    if price is None or price <= 0:
        return None
    return float(price)


def min_quantity_for_price(
    tiers: Sequence[QuantityTier],
    matrix: Mapping[str, Optional[float]],
    key_for_tier: Callable[[QuantityTier], str],
    from_quantity: int = 0,
) -> Optional[int]:
    """
    Smallest quantity that unlocks a configured price for one axis value.

    Scans tiers at increasing min, skipping tiers that end below
    from_quantity, and returns the first tier min whose cell is configured.
    When from_quantity already sits inside that tier, from_quantity itself
    is returned.

    Args:
        tiers: Quantity tiers of the table
        matrix: Price matrix for the axis variant (tone, embroidery size)
        key_for_tier: Builds the matrix key for a tier with the axis value fixed
        from_quantity: Quantity currently requested

    Returns:
        Minimum quantity, or None if no tier has a price for this axis value
    """
    for tier in sorted(tiers, key=lambda t: t.min):
        if tier.max is not None and tier.max < from_quantity:
            continue
        if lookup_unit_price(matrix, key_for_tier(tier)) is not None:
            return max(tier.min, from_quantity)
    return None
