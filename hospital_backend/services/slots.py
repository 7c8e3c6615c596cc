"""Calendar and time-slot arithmetic used by the scheduler.

Everything here works on ``datetime.date`` and ``datetime.time`` values only.
Dates are plain calendar days with no time of day or timezone attached, so
weekend checks and day rollover cannot drift across a UTC boundary.
"""

from datetime import date, time, timedelta

SLOT_DURATION_MINUTES = 25
MINUTES_PER_DAY = 24 * 60

DEFAULT_SHIFT_START = time(8, 0)
DEFAULT_SHIFT_END = time(16, 0)

# Grid used by the public "available slots" listing. It predates the
# shift-derived scheduling grid above and does not follow doctor shifts.
LISTING_OPEN_TIME = time(9, 0)
LISTING_CLOSE_TIME = time(17, 0)
LISTING_SLOT_MINUTES = 30

WEEKDAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

SATURDAY = 5
SUNDAY = 6


def weekday_name(on_date: date) -> str:
    return WEEKDAY_NAMES[on_date.weekday()]


def normalize_weekday_name(value: str) -> str:
    normalized = value.strip().capitalize()
    if normalized not in WEEKDAY_NAMES:
        raise ValueError(f'Unknown day of week: {value!r}.')
    return normalized


def parse_calendar_date(value: date | str) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def adjust_to_weekday(on_date: date) -> date:
    """Move a Saturday or Sunday forward to the following Monday."""
    if on_date.weekday() == SATURDAY:
        return on_date + timedelta(days=2)
    if on_date.weekday() == SUNDAY:
        return on_date + timedelta(days=1)
    return on_date


def next_candidate_date(on_date: date) -> date:
    return adjust_to_weekday(on_date + timedelta(days=1))


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def format_minutes(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    return f'{hours:02d}:{minutes:02d}'


def format_time(value: time) -> str:
    return format_minutes(to_minutes(value))


def parse_time_of_day(value: time | str) -> time:
    if isinstance(value, time):
        return value
    hours, minutes = value.strip().split(':')[:2]
    return time(int(hours), int(minutes))


def capacity_for_window(start_time: time, end_time: time) -> int:
    """Number of whole slots in a shift; a reversed or empty window holds none."""
    shift_duration = to_minutes(end_time) - to_minutes(start_time)
    if shift_duration <= 0:
        return 0
    return shift_duration // SLOT_DURATION_MINUTES


def next_queue_number(current_max: int | None) -> int:
    return max(current_max or 0, 0) + 1


def slot_start_minutes(queue_number: int, shift_start: time) -> int:
    if queue_number < 1:
        raise ValueError('Queue numbers start at 1.')
    return to_minutes(shift_start) + (queue_number - 1) * SLOT_DURATION_MINUTES


def compute_time_slot(queue_number: int, shift_start: time = DEFAULT_SHIFT_START) -> str:
    """Start time, as ``HH:MM``, of the given queue position within a shift.

    Raises ``OverflowError`` when the slot would begin at or after midnight.
    """
    total_minutes = slot_start_minutes(queue_number, shift_start)
    if total_minutes >= MINUTES_PER_DAY:
        raise OverflowError(
            f'Queue number {queue_number} from {format_time(shift_start)} runs past midnight.'
        )
    return format_minutes(total_minutes)


def listing_grid() -> list[str]:
    slots: list[str] = []
    current = to_minutes(LISTING_OPEN_TIME)
    close = to_minutes(LISTING_CLOSE_TIME)
    while current < close:
        slots.append(format_minutes(current))
        current += LISTING_SLOT_MINUTES
    return slots
