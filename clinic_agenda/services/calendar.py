from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from clinic_agenda.models.agenda_event import BLOCKING_STATUSES, AgendaEvent
from clinic_agenda.models.professional import Professional
from clinic_agenda.models.room import Room


class Booking(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    professional_id: str
    room_id: str | None = None
    start_time: datetime
    end_time: datetime
    status: str


class ProfessionalSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str


def day_bounds(day: date) -> tuple[datetime, datetime]:
    day_start = datetime(day.year, day.month, day.day)
    return day_start, day_start + timedelta(days=1)


def list_bookings(
    db: Session,
    day: date,
    professional_id: str | None = None,
    room_id: str | None = None,
) -> list[Booking]:
    """Bookings that start on ``day`` and still occupy the agenda."""
    day_start, next_day = day_bounds(day)

    query = db.query(AgendaEvent).filter(
        AgendaEvent.start_time >= day_start,
        AgendaEvent.start_time < next_day,
        AgendaEvent.status.in_(BLOCKING_STATUSES),
    )

    if professional_id is not None:
        query = query.filter(AgendaEvent.professional_id == professional_id)

    if room_id is not None:
        query = query.filter(AgendaEvent.room_id == room_id)

    events = query.order_by(AgendaEvent.start_time.asc(), AgendaEvent.id.asc()).all()
    return [Booking.model_validate(event) for event in events]


def list_active_professionals(db: Session, professional_id: str | None = None) -> list[ProfessionalSummary]:
    query = db.query(Professional).filter(Professional.is_active.is_(True))

    if professional_id is not None:
        query = query.filter(Professional.id == professional_id)

    return [
        ProfessionalSummary(id=professional.id, display_name=professional.display_name)
        for professional in query.order_by(Professional.id.asc()).all()
    ]


def get_room_name(db: Session, room_id: str) -> str | None:
    room = db.query(Room).filter(Room.id == room_id).first()
    return room.name if room else None
