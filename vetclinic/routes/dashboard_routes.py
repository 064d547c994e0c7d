from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.auth.dependencies import require_staff
from vetclinic.database import get_db
from vetclinic.models.user import User
from vetclinic.routes.errors import database_unavailable
from vetclinic.scheduling import reports
from vetclinic.scheduling.repository import ScheduleRepository

router = APIRouter(tags=['dashboard'])


class DashboardMetricsResponse(BaseModel):
    total_clients: int
    total_animals: int
    total_appointments: int
    upcoming_appointments: int
    monthly_revenue: float

    class Config:
        from_attributes = True


@router.get('/metrics', response_model=DashboardMetricsResponse)
def dashboard_metrics(db: Session = Depends(get_db), current_user: User = Depends(require_staff)):
    try:
        return reports.dashboard_metrics(ScheduleRepository(db), datetime.now())
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
