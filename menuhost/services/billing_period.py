"""
Billing period arithmetic
"""

import calendar
from datetime import datetime, timedelta
from typing import Optional, Union

from menuhost.core.exceptions import ValidationFailedError
from menuhost.models.plan import BillingPeriodUnit

# Accelerated mode: one billing month lasts a minute, one billing year five
ACCELERATED_MINUTES_PER_MONTH = 1
ACCELERATED_MINUTES_PER_YEAR = 5


def add_months(start: datetime, months: int) -> datetime:
    """Add calendar months, clamping to the last day of the target month"""
    month = start.month - 1 + months
    year = start.year + month // 12
    month = month % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    day = min(start.day, last_day)
    return start.replace(year=year, month=month, day=day)


def period_end(
    unit: Union[BillingPeriodUnit, str],
    value: int,
    accelerated: bool,
    start: Optional[datetime] = None,
) -> datetime:
    """
    Compute when a billing period that begins at ``start`` (default: now) ends.

    Args:
        unit: "month" or "year"
        value: Number of units, at least 1
        accelerated: Shrink periods to minutes for expiry testing

    Returns:
        The end instant, naive UTC like ``start``
    """
    start = start or datetime.utcnow()

    try:
        unit = BillingPeriodUnit(unit)
    except ValueError:
        raise ValidationFailedError(f"Unknown billing period unit '{unit}'", field="billing_period_unit")
    if value < 1:
        raise ValidationFailedError("Billing period value must be at least 1", field="billing_period_value")

    if accelerated:
        if unit == BillingPeriodUnit.MONTH:
            return start + timedelta(minutes=value * ACCELERATED_MINUTES_PER_MONTH)
        return start + timedelta(minutes=value * ACCELERATED_MINUTES_PER_YEAR)

    if unit == BillingPeriodUnit.MONTH:
        return add_months(start, value)
    return add_months(start, value * 12)
