"""Booking price calculation.

Price = billed days x capacity (cu ft) x listing rate per cu ft per day,
rounded half-up to 2 places. Computed once when the booking is created; a
later change to the listing rate never touches existing bookings.
"""

import math
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")
ONE_DAY = timedelta(days=1)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a numeric input to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def billable_days(start_date: date, end_date: date) -> int:
    """Calendar days between the dates, rounded up, never below 1."""
    return max(1, math.ceil((end_date - start_date) / ONE_DAY))


def calculate_total_price(
    capacity_required: Decimal,
    start_date: date,
    end_date: date,
    price_per_unit_day: Decimal,
) -> Decimal:
    days = billable_days(start_date, end_date)
    raw = Decimal(days) * to_decimal(capacity_required) * to_decimal(price_per_unit_day)
    return quantize_money(raw)
