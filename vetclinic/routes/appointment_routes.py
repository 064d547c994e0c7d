from datetime import date, datetime
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.auth.dependencies import get_current_user, require_staff
from vetclinic.core import config
from vetclinic.database import get_db
from vetclinic.models.user import User
from vetclinic.routes.errors import database_unavailable, to_http_exception
from vetclinic.routes.reminder_routes import ReminderResponse
from vetclinic.routes.treatment_note_routes import TreatmentNoteResponse
from vetclinic.scheduling import reports
from vetclinic.scheduling.enums import AppointmentStatus
from vetclinic.scheduling.errors import SchedulingError
from vetclinic.scheduling.lifecycle import Actor, AppointmentLifecycle
from vetclinic.scheduling.repository import ScheduleRepository

router = APIRouter(tags=['appointments'])


def _normalize_optional_text(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValueError(f'Text must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

    return normalized


class CreateAppointmentRequest(BaseModel):
    service_id: int
    animal_id: int
    start_time: datetime
    notes: str | None = None
    client_id: int | None = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value)


class ReasonRequest(BaseModel):
    reason: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value)


class RescheduleRequest(BaseModel):
    start_time: datetime


class StatusOverrideRequest(BaseModel):
    status: str


class ClientSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None

    class Config:
        from_attributes = True


class AnimalSummary(BaseModel):
    id: int
    name: str
    breed: str

    class Config:
        from_attributes = True


class ServiceSummary(BaseModel):
    id: int
    title: str
    duration: int
    price: float

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    client_id: int
    animal_id: int
    service_id: int
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    client: ClientSummary
    animal: AnimalSummary
    service: ServiceSummary
    reminders: list[ReminderResponse] = []
    treatment_notes: list[TreatmentNoteResponse] = []

    class Config:
        from_attributes = True

    @field_validator('reminders', mode='before')
    @classmethod
    def keep_pending_reminders(cls, value):
        return [reminder for reminder in value or [] if not reminder.sent]


class AppointmentStatsResponse(BaseModel):
    total: int
    scheduled: int
    confirmed: int
    completed: int
    cancelled: int
    revenue: float
    completion_rate: float
    cancellation_rate: float

    class Config:
        from_attributes = True


def _execute(db: Session, operation: Callable):
    try:
        return operation()
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


def _lifecycle(db: Session) -> AppointmentLifecycle:
    return AppointmentLifecycle(ScheduleRepository(db))


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    repository = ScheduleRepository(db)
    client_id = None if current_user.is_staff else current_user.id
    return _execute(db, lambda: repository.list_appointments(client_id=client_id))


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = Actor.from_user(current_user)
    client_id = data.client_id if data.client_id is not None else current_user.id

    return _execute(
        db,
        lambda: _lifecycle(db).create(
            actor,
            client_id=client_id,
            animal_id=data.animal_id,
            service_id=data.service_id,
            start_time=data.start_time,
            notes=data.notes,
        ),
    )


@router.get('/stats', response_model=AppointmentStatsResponse)
def appointment_stats(
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    if (start is None) != (end is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Provide both start and end, or neither.',
        )
    return _execute(db, lambda: reports.appointment_stats(ScheduleRepository(db), start, end))


@router.get('/upcoming', response_model=list[AppointmentResponse])
def upcoming_appointments(
    days: int = Query(default=7, ge=1, le=90),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return _execute(db, lambda: reports.upcoming_appointments(ScheduleRepository(db), datetime.now(), days))


@router.get('/schedule', response_model=list[AppointmentResponse])
def day_schedule(
    day: date | None = Query(default=None, alias='date'),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    return _execute(db, lambda: reports.day_schedule(ScheduleRepository(db), day or date.today()))


@router.get('/history', response_model=list[AppointmentResponse])
def client_history(
    limit: int = Query(default=10, ge=1, le=100),
    client_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if client_id is not None and client_id != current_user.id and not current_user.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only staff can view another client\'s history.',
        )
    target_client_id = client_id if client_id is not None else current_user.id
    return _execute(db, lambda: ScheduleRepository(db).client_history(target_client_id, limit))


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    appointment = _execute(db, lambda: ScheduleRepository(db).get_appointment(appointment_id))
    if appointment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Appointment not found.')
    if appointment.client_id != current_user.id and not current_user.is_staff:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Not authorized to view this appointment.')
    return appointment


@router.put('/{appointment_id}/confirm', response_model=AppointmentResponse)
def confirm_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = Actor.from_user(current_user)
    return _execute(db, lambda: _lifecycle(db).confirm(appointment_id, actor))


@router.put('/{appointment_id}/complete', response_model=AppointmentResponse)
def complete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = Actor.from_user(current_user)
    return _execute(db, lambda: _lifecycle(db).complete(appointment_id, actor))


@router.put('/{appointment_id}/refuse', response_model=AppointmentResponse)
def refuse_appointment(
    appointment_id: int,
    data: ReasonRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = Actor.from_user(current_user)
    return _execute(db, lambda: _lifecycle(db).refuse(appointment_id, actor, reason=data.reason))


@router.put('/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    data: ReasonRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = Actor.from_user(current_user)
    return _execute(db, lambda: _lifecycle(db).cancel(appointment_id, actor, reason=data.reason))


@router.put('/{appointment_id}/reschedule', response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    data: RescheduleRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    actor = Actor.from_user(current_user)
    return _execute(db, lambda: _lifecycle(db).reschedule(appointment_id, data.start_time, actor))


@router.put('/{appointment_id}/status', response_model=AppointmentResponse)
def override_appointment_status(
    appointment_id: int,
    data: StatusOverrideRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Administrative override: writes any known status without transition checks."""
    actor = Actor.from_user(current_user)
    return _execute(db, lambda: _lifecycle(db).override_status(appointment_id, actor, data.status))
