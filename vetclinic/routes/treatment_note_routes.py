from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.auth.dependencies import get_current_user
from vetclinic.database import get_db
from vetclinic.models.user import User
from vetclinic.routes.errors import database_unavailable, to_http_exception
from vetclinic.scheduling.errors import SchedulingError
from vetclinic.scheduling.lifecycle import Actor
from vetclinic.scheduling.repository import ScheduleRepository
from vetclinic.scheduling.treatment_notes import TreatmentNoteManager

router = APIRouter(tags=['treatment-notes'])


class CreateTreatmentNoteRequest(BaseModel):
    appointment_id: int
    animal_id: int
    content: str = Field(min_length=1)
    diagnosis: str | None = None
    treatment: str | None = None
    follow_up: str | None = None


class UpdateTreatmentNoteRequest(BaseModel):
    content: str | None = Field(default=None, min_length=1)
    diagnosis: str | None = None
    treatment: str | None = None
    follow_up: str | None = None


class PractitionerSummary(BaseModel):
    id: int
    first_name: str
    last_name: str

    class Config:
        from_attributes = True


class TreatmentNoteResponse(BaseModel):
    id: int
    appointment_id: int
    animal_id: int
    content: str
    diagnosis: str | None = None
    treatment: str | None = None
    follow_up: str | None = None
    created_at: datetime
    practitioner: PractitionerSummary

    class Config:
        from_attributes = True


def _manager(db: Session) -> TreatmentNoteManager:
    return TreatmentNoteManager(ScheduleRepository(db))


@router.get('', response_model=list[TreatmentNoteResponse])
def list_treatment_notes(
    animal_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _manager(db).list(Actor.from_user(current_user), animal_id=animal_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=TreatmentNoteResponse, status_code=status.HTTP_201_CREATED)
def create_treatment_note(
    data: CreateTreatmentNoteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _manager(db).create(Actor.from_user(current_user), **data.model_dump())
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.put('/{note_id}', response_model=TreatmentNoteResponse)
def update_treatment_note(
    note_id: int,
    data: UpdateTreatmentNoteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _manager(db).update(Actor.from_user(current_user), note_id, **data.model_dump(exclude_unset=True))
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{note_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_treatment_note(
    note_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        _manager(db).delete(Actor.from_user(current_user), note_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
