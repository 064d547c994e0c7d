"""Bookable slot enumeration for one service on one calendar day."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterator

from vetclinic.core import config
from vetclinic.scheduling.conflicts import has_conflict
from vetclinic.scheduling.errors import NotFound, ValidationFailed


@dataclass(frozen=True)
class BusinessHours:
    open_hour: int
    close_hour: int
    slot_interval_minutes: int

    def __post_init__(self):
        if not 0 <= self.open_hour < self.close_hour <= 24:
            raise ValidationFailed('Business hours must open before they close, within a single day.')
        if self.slot_interval_minutes <= 0:
            raise ValidationFailed('Slot interval must be a positive number of minutes.')

    @classmethod
    def from_config(cls) -> 'BusinessHours':
        return cls(
            open_hour=config.BUSINESS_OPEN_HOUR,
            close_hour=config.BUSINESS_CLOSE_HOUR,
            slot_interval_minutes=config.SLOT_INTERVAL_MINUTES,
        )

    def window(self, day: date) -> tuple[datetime, datetime]:
        day_open = datetime.combine(day, time(self.open_hour, 0))
        if self.close_hour == 24:
            day_close = datetime.combine(day + timedelta(days=1), time(0, 0))
        else:
            day_close = datetime.combine(day, time(self.close_hour, 0))
        return day_open, day_close


@dataclass(frozen=True)
class AvailabilitySlot:
    start_time: datetime
    end_time: datetime
    available: bool = True


def to_business_time(value: datetime) -> datetime:
    """Naive, minute-aligned datetime in the business timezone."""
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value.replace(second=0, microsecond=0)


def iterate_slot_starts(window_start: datetime, window_end: datetime, interval_minutes: int) -> Iterator[datetime]:
    current = window_start
    step = timedelta(minutes=interval_minutes)
    while current < window_end:
        yield current
        current += step


class AvailabilityCalculator:
    """Produces the free slots of a service's duration on a given day.

    Every call re-reads the calendar; nothing is cached between calls.
    """

    def __init__(
        self,
        repository,
        business_hours: BusinessHours | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.repository = repository
        self.business_hours = business_hours or BusinessHours.from_config()
        self.now = now

    def available_slots(self, service_id: int, day: date) -> Iterator[AvailabilitySlot]:
        service = self.repository.get_service(service_id)
        if service is None:
            raise NotFound('Service not found.')
        if not service.active:
            raise ValidationFailed('Service is not available for booking.')

        return self._generate(service.duration, day)

    def _generate(self, duration_minutes: int, day: date) -> Iterator[AvailabilitySlot]:
        day_open, day_close = self.business_hours.window(day)
        duration = timedelta(minutes=duration_minutes)
        current_time = self.now()
        is_today = day == current_time.date()
        busy = self.repository.list_blocking_intervals(day_open, day_close)

        for slot_start in iterate_slot_starts(day_open, day_close, self.business_hours.slot_interval_minutes):
            slot_end = slot_start + duration

            if is_today and slot_start <= current_time:
                continue
            if slot_end > day_close:
                continue
            if has_conflict(busy, slot_start, slot_end):
                continue

            yield AvailabilitySlot(start_time=slot_start, end_time=slot_end)

    def is_available(self, service_id: int, start_time: datetime) -> bool:
        """Check one proposed start time against business hours and the calendar."""
        service = self.repository.get_service(service_id)
        if service is None:
            raise NotFound('Service not found.')
        if not service.active:
            return False

        start_time = to_business_time(start_time)
        end_time = start_time + timedelta(minutes=service.duration)
        day_open, day_close = self.business_hours.window(start_time.date())

        if start_time <= self.now():
            return False
        if start_time < day_open or end_time > day_close:
            return False

        busy = self.repository.list_blocking_intervals(start_time, end_time)
        return not has_conflict(busy, start_time, end_time)
