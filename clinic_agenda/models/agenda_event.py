"""Agenda event model definitions."""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, String
from clinic_agenda.database import Base

SCHEDULED_STATUS = "scheduled"
CONFIRMED_STATUS = "confirmed"
CANCELLED_STATUS = "cancelled"
COMPLETED_STATUS = "completed"

# Only these states occupy a professional's calendar.
BLOCKING_STATUSES = (SCHEDULED_STATUS, CONFIRMED_STATUS)


class AgendaEvent(Base):
    """Represents a booked appointment on a professional's agenda."""
    __tablename__ = "agenda_events"

    id = Column(Integer, primary_key=True)
    professional_id = Column(String, ForeignKey("professionals.id"), index=True)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=True)
    start_time = Column(DateTime)
    end_time = Column(DateTime)
    status = Column(String, default=SCHEDULED_STATUS)
    appointment_type = Column(String, nullable=True)
    notes = Column(String, nullable=True)
