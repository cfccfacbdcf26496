"""
plans.py
Plan policy: how many slots a plan holds, what it costs, when it ends.
"""

from __future__ import annotations

from datetime import date, timedelta
from math import ceil

from library_seats import config
from library_seats.models import PlanDuration, PlanType

SLOT_HOURS = 6

# Price per plan and duration, locker not included
PRICING = {
    PlanType.SIX_HOURS: {
        PlanDuration.ONE_MONTH: 799,
        PlanDuration.THREE_MONTHS: 2099,
        PlanDuration.SIX_MONTHS: 4199,
    },
    PlanType.EIGHT_HOURS: {
        PlanDuration.ONE_MONTH: 1000,
        PlanDuration.THREE_MONTHS: 2700,
        PlanDuration.SIX_MONTHS: 5500,
    },
    PlanType.FOURTEEN_HOURS: {
        PlanDuration.ONE_MONTH: 1400,
        PlanDuration.THREE_MONTHS: 4000,
        PlanDuration.SIX_MONTHS: 8000,
    },
    PlanType.TWENTY_FOUR_HOURS: {
        PlanDuration.ONE_MONTH: 1700,
        PlanDuration.THREE_MONTHS: 4800,
        PlanDuration.SIX_MONTHS: 9500,
    },
}


def required_slot_count(plan_type: PlanType) -> int:
    """
    Number of 6-hour slots a plan must hold: 6H -> 1, 8H -> 2, 14H -> 3, 24H -> 4.
    """
    return ceil(PlanType(plan_type).hours / SLOT_HOURS)


def add_months(start: date, months: int) -> date:
    """
    Add months while keeping day in valid range (e.g., Jan 31 + 1 month => Feb 28/29).
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    # last day of target month
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = next_month - timedelta(days=1)
    day = min(start.day, last_day.day)
    return date(y, m, day)


def end_date_for(start: date, duration: PlanDuration) -> date:
    return add_months(start, PlanDuration(duration).months)


def quote(plan_type: PlanType, duration: PlanDuration, locker_required: bool = False,
          locker_price_per_month: int | None = None) -> int:
    duration = PlanDuration(duration)
    price = PRICING[PlanType(plan_type)][duration]
    if locker_required:
        per_month = config.LOCKER_PRICE_PER_MONTH if locker_price_per_month is None else locker_price_per_month
        price += duration.months * per_month
    return price
