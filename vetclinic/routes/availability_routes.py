from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.database import get_db
from vetclinic.routes.errors import database_unavailable, to_http_exception
from vetclinic.scheduling.availability import AvailabilityCalculator
from vetclinic.scheduling.errors import SchedulingError
from vetclinic.scheduling.repository import ScheduleRepository

router = APIRouter(tags=['availability'])


class AvailabilitySlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    available: bool

    class Config:
        from_attributes = True


class AvailabilityCheckResponse(BaseModel):
    service_id: int
    start_time: datetime
    available: bool


@router.get('/slots', response_model=list[AvailabilitySlotResponse])
def list_available_slots(
    service_id: int = Query(...),
    day: date = Query(..., alias='date'),
    db: Session = Depends(get_db),
):
    try:
        calculator = AvailabilityCalculator(ScheduleRepository(db))
        return [AvailabilitySlotResponse.model_validate(slot) for slot in calculator.available_slots(service_id, day)]
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/check', response_model=AvailabilityCheckResponse)
def check_availability(
    service_id: int = Query(...),
    start_time: datetime = Query(...),
    db: Session = Depends(get_db),
):
    try:
        calculator = AvailabilityCalculator(ScheduleRepository(db))
        available = calculator.is_available(service_id, start_time)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return AvailabilityCheckResponse(service_id=service_id, start_time=start_time, available=available)
