from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.auth.dependencies import require_staff
from vetclinic.core import config
from vetclinic.database import get_db
from vetclinic.models.appointment import Appointment
from vetclinic.models.service import Service
from vetclinic.models.user import User
from vetclinic.routes.errors import database_unavailable

router = APIRouter(tags=['services'])


class CreateServiceRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = ''
    duration: int = Field(ge=config.MIN_SERVICE_DURATION_MINUTES)
    price: float = Field(ge=0)
    active: bool = True


class UpdateServiceRequest(BaseModel):
    """Partial update: only the fields present in the request body are written."""
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    duration: int | None = Field(default=None, ge=config.MIN_SERVICE_DURATION_MINUTES)
    price: float | None = Field(default=None, ge=0)
    active: bool | None = None


class ServiceResponse(BaseModel):
    id: int
    title: str
    description: str
    duration: int
    price: float
    active: bool

    class Config:
        from_attributes = True


def _get_service_or_404(service_id: int, db: Session) -> Service:
    service = db.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Service not found.')
    return service


@router.get('', response_model=list[ServiceResponse])
def list_services(active: bool = Query(default=False), db: Session = Depends(get_db)):
    try:
        query = db.query(Service)
        if active:
            query = query.filter(Service.active.is_(True))
        return query.order_by(Service.created_at.asc(), Service.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/{service_id}', response_model=ServiceResponse)
def get_service(service_id: int, db: Session = Depends(get_db)):
    try:
        return _get_service_or_404(service_id, db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    data: CreateServiceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    try:
        service = Service(**data.model_dump())
        db.add(service)
        db.commit()
        db.refresh(service)
        return service
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.put('/{service_id}', response_model=ServiceResponse)
def update_service(
    service_id: int,
    data: UpdateServiceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    try:
        service = _get_service_or_404(service_id, db)
        for field_name, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(service, field_name, value)
        db.commit()
        db.refresh(service)
        return service
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{service_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    try:
        service = _get_service_or_404(service_id, db)
        if db.query(Appointment.id).filter(Appointment.service_id == service.id).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='Service has appointments; deactivate it instead.',
            )
        db.delete(service)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
