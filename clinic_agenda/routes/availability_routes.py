import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_agenda.auth.dependencies import require_agenda_access
from clinic_agenda.core.slots import Preferences, ScoredSlot, parse_time_of_day
from clinic_agenda.database import ensure_agenda_schema, get_db
from clinic_agenda.models.user import User
from clinic_agenda.services.availability import (
    DEFAULT_MAX_RESULTS,
    AvailabilityQuery,
    OpenGap,
    find_best_available_slots,
    find_open_gaps,
    is_slot_available,
)

router = APIRouter(tags=['agenda'])

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 180
MAX_RESULTS_LIMIT = 20
DEFAULT_GAP_DAYS = 3
MAX_GAP_DAYS = 7
DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def _as_wall_clock(value: datetime) -> datetime:
    # Bookings are stored as naive local times; offsets are dropped, not converted.
    return value.replace(tzinfo=None)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class PreferencesRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    hora_inicio: str | None = Field(default=None, alias='horaInicio')
    hora_fin: str | None = Field(default=None, alias='horaFin')
    excluir_almuerzo: bool = Field(default=False, alias='excluirAlmuerzo')
    profesional_preferido: str | None = Field(default=None, alias='profesionalPreferido')

    @field_validator('hora_inicio', 'hora_fin')
    @classmethod
    def validate_time_of_day(cls, value: str | None) -> str | None:
        normalized = _blank_to_none(value)
        if normalized is None:
            return None
        parse_time_of_day(normalized)
        return normalized

    @field_validator('profesional_preferido')
    @classmethod
    def normalize_preferred_professional(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @model_validator(mode='after')
    def validate_window(self) -> 'PreferencesRequest':
        if self.hora_inicio and self.hora_fin and self.hora_inicio > self.hora_fin:
            raise ValueError('horaInicio must not be later than horaFin.')
        return self

    def to_preferences(self) -> Preferences:
        return Preferences(
            preferred_start=parse_time_of_day(self.hora_inicio) if self.hora_inicio else None,
            preferred_end=parse_time_of_day(self.hora_fin) if self.hora_fin else None,
            exclude_lunch=self.excluir_almuerzo,
            preferred_professional_id=self.profesional_preferido,
        )


class AvailabilitySearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profesional_id: str | None = Field(default=None, alias='profesionalId')
    sala_id: str | None = Field(default=None, alias='salaId')
    fecha: date
    duracion_minutos: int = Field(alias='duracionMinutos')
    preferencias: PreferencesRequest | None = None

    @field_validator('profesional_id', 'sala_id')
    @classmethod
    def normalize_identifier(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @field_validator('fecha', mode='before')
    @classmethod
    def accept_datetime(cls, value):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and 'T' in value:
            return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
        return value

    @field_validator('duracion_minutos')
    @classmethod
    def validate_duration(cls, value: int) -> int:
        if value < MIN_DURATION_MINUTES or value > MAX_DURATION_MINUTES:
            raise ValueError(
                f'Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes.'
            )
        return value

    def to_query(self) -> AvailabilityQuery:
        return AvailabilityQuery(
            professional_id=self.profesional_id,
            room_id=self.sala_id,
            day=self.fecha,
            duration_minutes=self.duracion_minutos,
            preferences=self.preferencias.to_preferences() if self.preferencias else None,
        )


class SlotResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    inicio: datetime
    fin: datetime
    profesional_id: str = Field(alias='profesionalId')
    profesional_nombre: str = Field(alias='profesionalNombre')
    sala_id: str | None = Field(default=None, alias='salaId')
    sala_nombre: str | None = Field(default=None, alias='salaNombre')
    score: int
    razon: str

    @classmethod
    def from_slot(cls, slot: ScoredSlot) -> 'SlotResponse':
        return cls(
            inicio=slot.start,
            fin=slot.end,
            profesional_id=slot.professional_id,
            profesional_nombre=slot.professional_name,
            sala_id=slot.room_id,
            sala_nombre=slot.room_name,
            score=slot.score,
            razon=slot.reason,
        )


class SlotCheckResponse(BaseModel):
    available: bool


class GapResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: datetime
    end: datetime
    duration_minutes: int = Field(alias='durationMinutes')

    @classmethod
    def from_gap(cls, gap: OpenGap) -> 'GapResponse':
        return cls(start=gap.start, end=gap.end, duration_minutes=gap.duration_minutes)


class GapsResponse(BaseModel):
    slots: list[GapResponse]


def ensure_database_ready() -> None:
    try:
        ensure_agenda_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.post('/availability/search', response_model=list[SlotResponse])
def search_available_slots(
    data: AvailabilitySearchRequest,
    max_results: int = Query(default=DEFAULT_MAX_RESULTS, ge=1, le=MAX_RESULTS_LIMIT),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_agenda_access),
):
    del current_user
    ensure_database_ready()

    try:
        slots = find_best_available_slots(data.to_query(), db, max_results=max_results)
    except SQLAlchemyError as exc:
        logger.exception('[agenda|availability] search failed')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    return [SlotResponse.from_slot(slot) for slot in slots]


@router.get('/availability/check', response_model=SlotCheckResponse)
def check_slot_availability(
    profesional_id: str = Query(..., alias='profesionalId'),
    inicio: datetime = Query(...),
    fin: datetime = Query(...),
    exclude_event_id: int | None = Query(default=None, alias='excludeEventId'),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_agenda_access),
):
    del current_user
    normalized_professional_id = profesional_id.strip()
    if not normalized_professional_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='profesionalId is required.',
        )

    inicio = _as_wall_clock(inicio)
    fin = _as_wall_clock(fin)

    if fin <= inicio:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='fin must be later than inicio.',
        )

    ensure_database_ready()

    try:
        available = is_slot_available(db, normalized_professional_id, inicio, fin, exclude_event_id)
    except SQLAlchemyError as exc:
        logger.exception('[agenda|availability] slot check failed')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    return SlotCheckResponse(available=available)


@router.get('/availability/gaps', response_model=GapsResponse)
def list_open_gaps(
    profesional_id: str = Query(..., alias='profesionalId'),
    days: int = Query(default=DEFAULT_GAP_DAYS, ge=1, le=MAX_GAP_DAYS),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_agenda_access),
):
    del current_user
    normalized_professional_id = profesional_id.strip()
    if not normalized_professional_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='profesionalId is required.',
        )

    ensure_database_ready()

    try:
        gaps = find_open_gaps(db, normalized_professional_id, days, datetime.now())
    except SQLAlchemyError as exc:
        logger.exception('[agenda|disponibilidad] gap lookup failed')
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    return GapsResponse(slots=[GapResponse.from_gap(gap) for gap in gaps])
