from datetime import date

import pytest

from weekgrid.core.exceptions import ValidationError
from weekgrid.models.arrangement import ArrangementKind
from weekgrid.services.grid import (
    SPECIAL_CARE_SLOT,
    compute_week_date_range,
    current_week_number,
    date_for_weekday,
    effective_weekday,
    format_time_slot,
    format_weekday,
    is_displayed_weekday,
    is_valid_placement,
    validate_drop,
    weekday_from_date,
)

REGULAR = ArrangementKind.regular
SPECIAL = ArrangementKind.special_care


def test_week_range_starts_on_monday_and_spans_school_days():
    first = compute_week_date_range(date(2024, 9, 2), 1)
    assert (first.start, first.end) == (date(2024, 9, 2), date(2024, 9, 6))

    second = compute_week_date_range(date(2024, 9, 2), 2)
    assert (second.start, second.end) == (date(2024, 9, 9), date(2024, 9, 13))


def test_week_range_rolls_back_to_monday_for_midweek_semester_start():
    week = compute_week_date_range(date(2024, 9, 1), 1)  # a Sunday
    assert week.start == date(2024, 8, 26)
    assert week.end == date(2024, 8, 30)
    assert week.start.isoweekday() == 1


def test_week_range_rejects_week_zero():
    with pytest.raises(ValidationError):
        compute_week_date_range(date(2024, 9, 2), 0)


def test_current_week_number_is_never_below_one():
    start = date(2024, 9, 2)
    assert current_week_number(start, date(2024, 8, 1)) == 1
    assert current_week_number(start, start) == 1
    assert current_week_number(start, date(2024, 9, 9)) == 1
    assert current_week_number(start, date(2024, 9, 10)) == 2
    assert current_week_number(start, date(2024, 9, 18)) == 3


def test_regular_placement_covers_weekdays_and_slots_one_to_eight():
    assert is_valid_placement(REGULAR, 1, 1)
    assert is_valid_placement(REGULAR, 5, 8)
    assert not is_valid_placement(REGULAR, 6, 1)
    assert not is_valid_placement(REGULAR, 0, 1)
    assert not is_valid_placement(REGULAR, 3, SPECIAL_CARE_SLOT)
    assert not is_valid_placement(REGULAR, None, 2)


def test_special_care_only_fits_the_reserved_slot():
    assert is_valid_placement(SPECIAL, 3, SPECIAL_CARE_SLOT)
    assert is_valid_placement(SPECIAL, None, SPECIAL_CARE_SLOT)
    assert not is_valid_placement(SPECIAL, 3, 4)


def test_special_care_weekday_comes_from_its_date():
    saturday = date(2024, 9, 7)
    assert weekday_from_date(saturday) == 6
    assert weekday_from_date(date(2024, 9, 8)) == 7
    assert effective_weekday(SPECIAL, 1, date(2024, 9, 4)) == 3
    assert effective_weekday(REGULAR, 1, date(2024, 9, 4)) == 1
    assert not is_displayed_weekday(6)
    assert is_displayed_weekday(5)


def test_date_for_weekday_in_semester_week():
    assert date_for_weekday(date(2024, 9, 2), 3, 4) == date(2024, 9, 19)


def test_validate_drop_reasons():
    assert validate_drop(REGULAR, (1, 3), (2, 3), target_occupied=False) is None
    assert validate_drop(REGULAR, (1, 3), (1, 3), target_occupied=False) == "Target is the current position"
    assert validate_drop(REGULAR, (1, 3), (2, 3), target_occupied=True) == "Target cell is already occupied"
    assert "special care slot" in validate_drop(REGULAR, (1, 3), (2, SPECIAL_CARE_SLOT), target_occupied=False)
    assert "special care slot" in validate_drop(SPECIAL, (2, SPECIAL_CARE_SLOT), (3, 4), target_occupied=False)
    assert validate_drop(REGULAR, (1, 3), (6, 3), target_occupied=False) == "Target cell is outside the weekly grid"


def test_labels():
    assert format_weekday(1) == "周一"
    assert format_time_slot(1) == "上午1 (8:30-9:10)"
    assert format_time_slot(12) == "第12节"
