import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from clinic_agenda.database import Base  # noqa: E402
from clinic_agenda.models.agenda_event import AgendaEvent  # noqa: E402
from clinic_agenda.models.professional import Professional  # noqa: E402
from clinic_agenda.models.room import Room  # noqa: E402
from clinic_agenda.models.user import User  # noqa: E402

AGENDA_TABLES = [User.__table__, Professional.__table__, Room.__table__, AgendaEvent.__table__]


@pytest.fixture
def agenda_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=AGENDA_TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(AGENDA_TABLES)))
