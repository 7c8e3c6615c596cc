from datetime import date, time

import pytest

from hospital_backend.services.slots import (
    adjust_to_weekday,
    capacity_for_window,
    compute_time_slot,
    listing_grid,
    next_candidate_date,
    next_queue_number,
    normalize_weekday_name,
    parse_calendar_date,
    parse_time_of_day,
    weekday_name,
)


@pytest.mark.parametrize(
    ('requested', 'expected'),
    [
        (date(2026, 1, 3), date(2026, 1, 5)),  # Saturday
        (date(2026, 1, 4), date(2026, 1, 5)),  # Sunday
        (date(2026, 1, 5), date(2026, 1, 5)),
        (date(2026, 1, 9), date(2026, 1, 9)),
        (date(2025, 12, 27), date(2025, 12, 29)),  # Saturday across a year boundary
    ],
)
def test_adjust_to_weekday_moves_weekends_to_monday(requested: date, expected: date) -> None:
    assert adjust_to_weekday(requested) == expected


def test_next_candidate_date_skips_weekend_after_friday() -> None:
    assert next_candidate_date(date(2026, 1, 9)) == date(2026, 1, 12)
    assert next_candidate_date(date(2026, 1, 5)) == date(2026, 1, 6)


def test_weekday_name_uses_english_day_names() -> None:
    assert weekday_name(date(2026, 1, 5)) == 'Monday'
    assert weekday_name(date(2026, 1, 4)) == 'Sunday'


def test_normalize_weekday_name_accepts_any_case() -> None:
    assert normalize_weekday_name('  tuesday ') == 'Tuesday'


def test_normalize_weekday_name_rejects_unknown_day() -> None:
    with pytest.raises(ValueError):
        normalize_weekday_name('Funday')


def test_parse_calendar_date_accepts_iso_strings() -> None:
    assert parse_calendar_date('2026-03-29') == date(2026, 3, 29)
    assert parse_calendar_date(date(2026, 3, 29)) == date(2026, 3, 29)


def test_parse_time_of_day_accepts_seconds() -> None:
    assert parse_time_of_day('08:30:00') == time(8, 30)


@pytest.mark.parametrize(
    ('start', 'end', 'expected'),
    [
        (time(8, 0), time(16, 0), 19),
        (time(8, 0), time(10, 0), 4),
        (time(9, 0), time(9, 24), 0),
        (time(10, 0), time(10, 0), 0),
        (time(16, 0), time(8, 0), 0),
    ],
)
def test_capacity_for_window(start: time, end: time, expected: int) -> None:
    assert capacity_for_window(start, end) == expected


def test_next_queue_number_starts_at_one() -> None:
    assert next_queue_number(None) == 1
    assert next_queue_number(0) == 1
    assert next_queue_number(4) == 5


def test_compute_time_slot_steps_by_twenty_five_minutes() -> None:
    slots = [compute_time_slot(queue_number, time(8, 0)) for queue_number in range(1, 5)]

    assert slots == ['08:00', '08:25', '08:50', '09:15']


def test_compute_time_slot_follows_shift_start() -> None:
    assert compute_time_slot(3, time(13, 30)) == '14:20'


def test_compute_time_slot_rejects_slots_past_midnight() -> None:
    with pytest.raises(OverflowError):
        compute_time_slot(4, time(23, 0))


def test_compute_time_slot_rejects_queue_number_zero() -> None:
    with pytest.raises(ValueError):
        compute_time_slot(0)


def test_listing_grid_covers_nine_to_five_in_half_hours() -> None:
    grid = listing_grid()

    assert len(grid) == 16
    assert grid[0] == '09:00'
    assert grid[1] == '09:30'
    assert grid[-1] == '16:30'
