"""Candidate slot generation and overlap checks for the agenda.

Everything here is pure: times are naive local wall-clock values anchored to
the requested day, and the working-hours configuration is passed in as an
immutable :class:`ScheduleConfig` rather than read from module state.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Iterable

from pydantic import BaseModel, ConfigDict, field_validator

from clinic_agenda.core import config

TIME_OF_DAY_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)$')


class ScheduleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    workday_start: time
    workday_end: time
    lunch_start: time
    lunch_end: time
    slot_interval_minutes: int = 15
    min_gap_minutes: int = 15
    max_gaps: int = 6

    @field_validator('slot_interval_minutes')
    @classmethod
    def validate_slot_interval(cls, value: int) -> int:
        if value <= 0:
            raise ValueError('Slot interval must be a positive number of minutes.')
        return value


DEFAULT_SCHEDULE = ScheduleConfig(
    workday_start=config.AGENDA_WORKDAY_START,
    workday_end=config.AGENDA_WORKDAY_END,
    lunch_start=config.AGENDA_LUNCH_START,
    lunch_end=config.AGENDA_LUNCH_END,
    slot_interval_minutes=config.AGENDA_SLOT_INTERVAL_MINUTES,
    min_gap_minutes=config.AGENDA_MIN_GAP_MINUTES,
    max_gaps=config.AGENDA_MAX_GAPS,
)


class Preferences(BaseModel):
    """Soft scheduling preferences. ``None`` always means "no preference"."""

    model_config = ConfigDict(frozen=True)

    preferred_start: time | None = None
    preferred_end: time | None = None
    exclude_lunch: bool = False
    preferred_professional_id: str | None = None


class CandidateSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime


class AvailableSlot(CandidateSlot):
    """A conflict-free candidate assigned to a professional, not yet scored."""

    professional_id: str
    professional_name: str
    room_id: str | None = None
    room_name: str | None = None


class ScoredSlot(AvailableSlot):
    score: int
    reason: str


def parse_time_of_day(value: str) -> time:
    """Parse a strict ``HH:MM`` 24-hour string."""
    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f'Invalid time of day {value!r}; expected HH:MM.')
    return time(int(match.group(1)), int(match.group(2)))


def minutes_since_midnight(value: time) -> int:
    return value.hour * 60 + value.minute


def at_minutes(day: date, minutes: int) -> datetime:
    start_of_day = datetime(day.year, day.month, day.day)
    return start_of_day + timedelta(minutes=minutes)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    # Half-open intervals: touching endpoints do not overlap.
    return start_a < end_b and end_a > start_b


def is_available(candidate: CandidateSlot, bookings: Iterable) -> bool:
    """True when ``candidate`` overlaps none of ``bookings``.

    Each booking only needs ``start_time`` and ``end_time`` attributes, so both
    ORM rows and :class:`~clinic_agenda.services.calendar.Booking` snapshots work.
    """
    return not any(
        overlaps(candidate.start, candidate.end, booking.start_time, booking.end_time)
        for booking in bookings
    )


def resolve_window(preferences: Preferences | None, schedule: ScheduleConfig) -> tuple[int, int]:
    window_start = schedule.workday_start
    window_end = schedule.workday_end

    if preferences is not None:
        if preferences.preferred_start is not None:
            window_start = preferences.preferred_start
        if preferences.preferred_end is not None:
            window_end = preferences.preferred_end

    return minutes_since_midnight(window_start), minutes_since_midnight(window_end)


def generate_candidate_slots(
    day: date,
    duration_minutes: int,
    preferences: Preferences | None = None,
    schedule: ScheduleConfig = DEFAULT_SCHEDULE,
) -> list[CandidateSlot]:
    if duration_minutes <= 0:
        return []

    window_start, window_end = resolve_window(preferences, schedule)
    exclude_lunch = preferences is not None and preferences.exclude_lunch
    lunch_start = minutes_since_midnight(schedule.lunch_start)
    lunch_end = minutes_since_midnight(schedule.lunch_end)

    candidates: list[CandidateSlot] = []
    offset = window_start

    while offset + duration_minutes <= window_end:
        slot_end = offset + duration_minutes

        if not (exclude_lunch and offset < lunch_end and slot_end > lunch_start):
            candidates.append(
                CandidateSlot(
                    start=at_minutes(day, offset),
                    end=at_minutes(day, slot_end),
                )
            )

        offset += schedule.slot_interval_minutes

    return candidates
