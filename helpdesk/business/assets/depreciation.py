"""
Straight-line depreciation and refresh-cycle (end of useful life) calculations
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

DEFAULT_USEFUL_LIFE_YEARS = 5
DAYS_PER_YEAR = 365

REFRESH_EXPIRED = 'expired'
REFRESH_CRITICAL = 'critical'
REFRESH_WARNING = 'warning'
REFRESH_GOOD = 'good'

# Days remaining at or below which an asset enters the given refresh status
REFRESH_CRITICAL_DAYS = 90
REFRESH_WARNING_DAYS = 365


@dataclass(frozen=True)
class Depreciation:
    current_value: float
    depreciation_percent: float
    total_depreciation: float


def calculate_depreciation(purchase_price: float | None, purchase_date: date | None,
                           useful_life_years: int | None, today: date | None = None) -> Depreciation:
    """
    Straight-line depreciation.

    years used = days since purchase / 365; the depreciation is capped at the
    purchase price. Without a purchase date or a positive price nothing has
    depreciated.
    """
    price = float(purchase_price or 0)
    if purchase_date is None or price <= 0:
        return Depreciation(current_value=price, depreciation_percent=0.0, total_depreciation=0.0)

    today = today or date.today()
    life = useful_life_years or DEFAULT_USEFUL_LIFE_YEARS
    years_used = max(0, (today - purchase_date).days) / DAYS_PER_YEAR

    annual_depreciation = price / life
    total_depreciation = min(annual_depreciation * years_used, price)
    current_value = max(0.0, price - total_depreciation)
    percent = min(total_depreciation / price * 100, 100.0)

    return Depreciation(
        current_value=current_value,
        depreciation_percent=percent,
        total_depreciation=total_depreciation,
    )


def end_of_life(purchase_date: date, useful_life_years: int | None) -> date:
    years = useful_life_years or DEFAULT_USEFUL_LIFE_YEARS
    try:
        return purchase_date.replace(year=purchase_date.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return purchase_date.replace(year=purchase_date.year + years, day=28)


def days_until_end_of_life(purchase_date: date, useful_life_years: int | None, today: date | None = None) -> int:
    today = today or date.today()
    return (end_of_life(purchase_date, useful_life_years) - today).days


def classify_refresh(days_remaining: int) -> str:
    if days_remaining <= 0:
        return REFRESH_EXPIRED
    if days_remaining <= REFRESH_CRITICAL_DAYS:
        return REFRESH_CRITICAL
    if days_remaining <= REFRESH_WARNING_DAYS:
        return REFRESH_WARNING
    return REFRESH_GOOD
