import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic_agenda.db")

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_agenda_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_agenda_schema() -> None:
    global _agenda_schema_checked

    if _agenda_schema_checked:
        return

    with _schema_lock:
        if _agenda_schema_checked:
            return

        inspector = inspect(engine)

        if 'agenda_events' not in inspector.get_table_names():
            _agenda_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('agenda_events')}
        migration_steps = [
            ('room_id', 'ALTER TABLE agenda_events ADD COLUMN room_id VARCHAR'),
            ('appointment_type', 'ALTER TABLE agenda_events ADD COLUMN appointment_type VARCHAR'),
            ('notes', 'ALTER TABLE agenda_events ADD COLUMN notes VARCHAR'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE INDEX IF NOT EXISTS idx_agenda_events_professional_start '
                    'ON agenda_events(professional_id, start_time)'
                )
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_agenda_events_status_start ON agenda_events(status, start_time)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_agenda_events_room_start ON agenda_events(room_id, start_time)')
            )

        _agenda_schema_checked = True
