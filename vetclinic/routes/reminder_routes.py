from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.auth.dependencies import get_current_user
from vetclinic.database import get_db
from vetclinic.models.user import User
from vetclinic.routes.errors import database_unavailable, to_http_exception
from vetclinic.scheduling.enums import ReminderStatus, ReminderType
from vetclinic.scheduling.errors import SchedulingError
from vetclinic.scheduling.lifecycle import Actor
from vetclinic.scheduling.reminders import ReminderManager
from vetclinic.scheduling.repository import ScheduleRepository

router = APIRouter(tags=['reminders'])


class CreateReminderRequest(BaseModel):
    message: str = Field(min_length=1)
    remind_at: datetime
    type: ReminderType = ReminderType.MANUAL
    appointment_id: int | None = None

    @field_validator('remind_at')
    @classmethod
    def validate_remind_at(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value


class ReminderResponse(BaseModel):
    id: int
    type: ReminderType
    message: str
    remind_at: datetime
    appointment_id: int | None = None
    status: ReminderStatus
    sent: bool
    created_at: datetime

    class Config:
        from_attributes = True


def _manager(db: Session) -> ReminderManager:
    return ReminderManager(ScheduleRepository(db))


@router.get('', response_model=list[ReminderResponse])
def list_reminders(
    include_done: bool = Query(default=True),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _manager(db).list(Actor.from_user(current_user), include_done=include_done)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=ReminderResponse, status_code=status.HTTP_201_CREATED)
def create_reminder(
    data: CreateReminderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _manager(db).create(
            Actor.from_user(current_user),
            message=data.message,
            remind_at=data.remind_at,
            reminder_type=data.type,
            appointment_id=data.appointment_id,
        )
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.put('/{reminder_id}/complete', response_model=ReminderResponse)
def complete_reminder(
    reminder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _manager(db).complete(Actor.from_user(current_user), reminder_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{reminder_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_reminder(
    reminder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        _manager(db).delete(Actor.from_user(current_user), reminder_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
