"""Professional model definitions."""

from sqlalchemy import Boolean, Column, String
from clinic_agenda.database import Base


class Professional(Base):
    """Represents a clinician whose agenda can be booked."""
    __tablename__ = "professionals"

    id = Column(String, primary_key=True)
    first_name = Column(String)
    last_name = Column(String)
    is_active = Column(Boolean, default=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
