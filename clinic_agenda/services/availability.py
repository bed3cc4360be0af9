"""Availability finder for the clinic agenda.

Reads committed bookings through :mod:`clinic_agenda.services.calendar` and
combines them with the pure slot and scoring helpers in ``clinic_agenda.core``.
Nothing here writes to the store; a returned slot is a candidate, not a
reservation.
"""

import logging
from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from clinic_agenda.core.scoring import score_slot
from clinic_agenda.core.slots import (
    DEFAULT_SCHEDULE,
    AvailableSlot,
    Preferences,
    ScheduleConfig,
    ScoredSlot,
    generate_candidate_slots,
    is_available,
    overlaps,
)
from clinic_agenda.services.calendar import get_room_name, list_active_professionals, list_bookings

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 5


class AvailabilityQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    professional_id: str | None = None
    room_id: str | None = None
    day: date
    duration_minutes: int
    preferences: Preferences | None = None


class OpenGap(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    duration_minutes: int


def find_best_available_slots(
    query: AvailabilityQuery,
    db: Session,
    max_results: int = DEFAULT_MAX_RESULTS,
    schedule: ScheduleConfig = DEFAULT_SCHEDULE,
) -> list[ScoredSlot]:
    """Return up to ``max_results`` free slots, best score first.

    Store errors propagate to the caller untouched. A non-positive duration, a
    window too short for one slot, or an empty professional roster all give an
    empty list.
    """
    if max_results <= 0:
        return []

    professionals = list_active_professionals(db, query.professional_id)
    if not professionals:
        logger.debug('No active professionals match %r', query.professional_id)
        return []

    candidates = generate_candidate_slots(query.day, query.duration_minutes, query.preferences, schedule)
    if not candidates:
        return []

    room_name = get_room_name(db, query.room_id) if query.room_id is not None else None
    bookings_by_professional = {
        professional.id: list_bookings(db, query.day, professional.id, query.room_id)
        for professional in professionals
    }

    scored: list[ScoredSlot] = []
    # Time-major merge: ties end up ordered by start time, then by professional.
    for candidate in candidates:
        for professional in professionals:
            if not is_available(candidate, bookings_by_professional[professional.id]):
                continue

            slot = AvailableSlot(
                start=candidate.start,
                end=candidate.end,
                professional_id=professional.id,
                professional_name=professional.display_name,
                room_id=query.room_id,
                room_name=room_name,
            )
            score, reason = score_slot(slot, query.preferences)
            scored.append(ScoredSlot(**slot.model_dump(), score=score, reason=reason))

    scored.sort(key=lambda slot: slot.score, reverse=True)

    logger.debug(
        'Availability search: %d professionals, %d candidates, %d free slots',
        len(professionals),
        len(candidates),
        len(scored),
    )
    return scored[:max_results]


def is_slot_available(
    db: Session,
    professional_id: str,
    start: datetime,
    end: datetime,
    exclude_booking_id: int | None = None,
) -> bool:
    """Point check used when moving an existing booking.

    ``exclude_booking_id`` is the booking being rescheduled, so it never
    conflicts with its own new time.
    """
    bookings = list_bookings(db, start.date(), professional_id)

    return not any(
        overlaps(start, end, booking.start_time, booking.end_time)
        for booking in bookings
        if booking.id != exclude_booking_id
    )


def _append_gap(gaps: list[OpenGap], start: datetime, end: datetime, schedule: ScheduleConfig) -> None:
    gap_minutes = (end - start).total_seconds() / 60
    if gap_minutes >= schedule.min_gap_minutes:
        gaps.append(OpenGap(start=start, end=end, duration_minutes=round(gap_minutes)))


def find_open_gaps(
    db: Session,
    professional_id: str,
    days: int,
    now: datetime,
    schedule: ScheduleConfig = DEFAULT_SCHEDULE,
) -> list[OpenGap]:
    """Free stretches of a professional's working day, starting from ``now``."""
    gaps: list[OpenGap] = []

    for day_offset in range(days):
        if len(gaps) >= schedule.max_gaps:
            break

        current_day = (now + timedelta(days=day_offset)).date()
        day_start = datetime.combine(current_day, schedule.workday_start)
        day_end = datetime.combine(current_day, schedule.workday_end)
        pointer = max(day_start, now)

        for booking in list_bookings(db, current_day, professional_id):
            if pointer >= day_end:
                break
            if booking.start_time > pointer:
                _append_gap(gaps, pointer, min(booking.start_time, day_end), schedule)
            pointer = max(pointer, booking.end_time)

        if pointer < day_end:
            _append_gap(gaps, pointer, day_end, schedule)

    return gaps[:schedule.max_gaps]
