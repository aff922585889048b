"""
Lead time helpers for Inkquote: express surcharge and delivery dates.
"""
import math
from datetime import date, timedelta
from typing import Optional

from inkquote.domain import Delay

# Reference lead time; shorter turnarounds pay the express surcharge
STANDARD_WORKING_DAYS = 10

# Surcharge percentage per working day saved
EXPRESS_SURCHARGE_PER_DAY = 10.0


def resolve_lead_time(delay: Delay) -> float:
    """
    Working days used for pricing.

    express_days only counts when the delay is flagged express and the
    value is set; otherwise working_days applies.
    """
    if delay.is_express and delay.express_days is not None:
        return delay.express_days
    return delay.working_days


def express_surcharge_percent(
    standard_days: float,
    resolved_days: float,
    per_day: float = EXPRESS_SURCHARGE_PER_DAY,
) -> float:
    """
    Surcharge percentage for a shortened lead time.

    Linear and uncapped: per_day percent for every day below standard_days.

    Example:
        >>> express_surcharge_percent(10, 7)
        30.0
        >>> express_surcharge_percent(10, 10)
        0.0
    """
    days_saved = standard_days - resolved_days
    if days_saved <= 0:
        return 0.0
    return float(days_saved * per_day)


def is_working_day(day: date) -> bool:
    return day.weekday() < 5


def add_working_days(start: date, working_days: int) -> date:
    """Date reached after counting working_days Monday-Friday days after start."""
    result = start
    added = 0
    while added < working_days:
        result += timedelta(days=1)
        if is_working_day(result):
            added += 1
    return result


def get_delivery_date(delay: Delay, start: Optional[date] = None) -> date:
    """
    Expected delivery date for a delay, counted from start (today by default).

    Express delays may be shorter than a day (24h = 0.5); they are rounded
    up to at least one working day.
    """
    start = start or date.today()
    if delay.is_express and delay.express_days is not None:
        return add_working_days(start, max(1, math.ceil(delay.express_days)))
    return add_working_days(start, delay.working_days)
