from datetime import date

import pytest

from library_seats import plans
from library_seats.models import PlanDuration, PlanType, Slot


@pytest.mark.parametrize(
    "plan_type, expected",
    [
        (PlanType.SIX_HOURS, 1),
        (PlanType.EIGHT_HOURS, 2),
        (PlanType.FOURTEEN_HOURS, 3),
        (PlanType.TWENTY_FOUR_HOURS, 4),
    ],
)
def test_required_slot_count(plan_type, expected):
    assert plans.required_slot_count(plan_type) == expected


def test_required_slot_count_accepts_wire_value():
    assert plans.required_slot_count("14H") == 3


def test_legacy_plan_and_duration_spellings():
    assert PlanType("8 Hours") is PlanType.EIGHT_HOURS
    assert PlanDuration(3) is PlanDuration.THREE_MONTHS
    with pytest.raises(ValueError):
        PlanType("10H")


def test_quote_without_locker():
    assert plans.quote(PlanType.SIX_HOURS, PlanDuration.ONE_MONTH) == 799
    assert plans.quote(PlanType.TWENTY_FOUR_HOURS, PlanDuration.SIX_MONTHS) == 9500


def test_quote_adds_locker_per_month():
    assert plans.quote(PlanType.EIGHT_HOURS, PlanDuration.THREE_MONTHS, locker_required=True) == 2700 + 3 * 100
    assert plans.quote(
        PlanType.EIGHT_HOURS, PlanDuration.ONE_MONTH, locker_required=True, locker_price_per_month=150
    ) == 1150


def test_add_months_clamps_to_month_end():
    assert plans.add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert plans.add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert plans.add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)


def test_end_date_for_duration():
    assert plans.end_date_for(date(2025, 1, 1), PlanDuration.SIX_MONTHS) == date(2025, 7, 1)


def test_slot_windows_cover_the_day():
    assert [s.label for s in Slot] == ["Morning", "Afternoon", "Evening", "Night"]
    assert Slot.S3.time == "7 PM – 1 AM"
