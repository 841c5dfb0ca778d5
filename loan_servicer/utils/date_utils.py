"""Date manipulation utilities"""

from datetime import date
from typing import Tuple


def today() -> date:
    """Current calendar date; due-date comparisons ignore time of day"""
    return date.today()


def month_start(day: date) -> date:
    return day.replace(day=1)


def shift_month(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month"""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_bounds(day: date) -> Tuple[date, date]:
    """Half-open [start, next_start) range of the month containing ``day``"""
    return month_start(day), shift_month(day, 1)
