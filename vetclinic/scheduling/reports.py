from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from vetclinic.scheduling.enums import AppointmentStatus


@dataclass(frozen=True)
class AppointmentStats:
    total: int
    scheduled: int
    confirmed: int
    completed: int
    cancelled: int
    revenue: float
    completion_rate: float
    cancellation_rate: float


def appointment_stats(repository, start: datetime | None = None, end: datetime | None = None) -> AppointmentStats:
    counts = repository.count_by_status(start, end)
    total = sum(counts.values())
    completed = counts.get(AppointmentStatus.COMPLETED, 0)
    cancelled = counts.get(AppointmentStatus.CANCELLED, 0)

    return AppointmentStats(
        total=total,
        scheduled=counts.get(AppointmentStatus.SCHEDULED, 0),
        confirmed=counts.get(AppointmentStatus.CONFIRMED, 0),
        completed=completed,
        cancelled=cancelled,
        revenue=repository.completed_revenue(start, end),
        completion_rate=(completed / total) * 100 if total else 0.0,
        cancellation_rate=(cancelled / total) * 100 if total else 0.0,
    )


def upcoming_appointments(repository, now: datetime, days: int = 7):
    return repository.list_appointments_between(
        now,
        now + timedelta(days=days),
        statuses=[AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED],
    )


def day_schedule(repository, day: date):
    day_start = datetime.combine(day, time(0, 0))
    return repository.list_appointments_between(day_start, day_start + timedelta(days=1))


@dataclass(frozen=True)
class DashboardMetrics:
    total_clients: int
    total_animals: int
    total_appointments: int
    upcoming_appointments: int
    monthly_revenue: float


def dashboard_metrics(repository, now: datetime) -> DashboardMetrics:
    """Clinic-wide counters; revenue covers completed visits since the first of the month."""
    month_start = datetime(now.year, now.month, 1)
    return DashboardMetrics(
        total_clients=repository.count_clients(),
        total_animals=repository.count_animals(),
        total_appointments=repository.count_appointments(),
        upcoming_appointments=repository.count_appointments(now, now + timedelta(days=7)),
        monthly_revenue=repository.completed_revenue(month_start, None),
    )
