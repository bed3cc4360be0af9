"""Room model definitions."""

from sqlalchemy import Column, String
from clinic_agenda.database import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(String, primary_key=True)
    name = Column(String)
