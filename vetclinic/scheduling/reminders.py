"""Reminder timing rules and staff-facing reminder management."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from vetclinic.core import config
from vetclinic.scheduling.enums import ReminderStatus, ReminderType
from vetclinic.scheduling.errors import NotFound, Unauthorized, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderPlan:
    reminder_type: ReminderType
    message: str
    remind_at: datetime


def remind_at_for(reminder_type: ReminderType, start_time: datetime) -> datetime | None:
    """Fixed offset of each derived reminder type from the appointment start.

    Manual reminders have no offset and return None.
    """
    if reminder_type == ReminderType.CONFIRMATION:
        return start_time - timedelta(hours=config.CONFIRMATION_LEAD_HOURS)
    if reminder_type == ReminderType.REMINDER:
        return start_time - timedelta(hours=config.REMINDER_LEAD_HOURS)
    if reminder_type == ReminderType.FOLLOW_UP:
        return start_time + timedelta(days=config.FOLLOW_UP_DAYS)
    return None


def booking_reminder_plans(appointment) -> list[ReminderPlan]:
    animal_name = appointment.animal.name
    start_time = appointment.start_time
    return [
        ReminderPlan(
            reminder_type=ReminderType.CONFIRMATION,
            message=f"Confirm appointment for {animal_name} on {start_time:%A %d %B %Y at %H:%M}",
            remind_at=remind_at_for(ReminderType.CONFIRMATION, start_time),
        ),
        ReminderPlan(
            reminder_type=ReminderType.REMINDER,
            message=f"Reminder: {animal_name}'s appointment at {start_time:%H:%M}",
            remind_at=remind_at_for(ReminderType.REMINDER, start_time),
        ),
    ]


def cancellation_follow_up_plan(appointment, now: datetime) -> ReminderPlan:
    client = appointment.client
    return ReminderPlan(
        reminder_type=ReminderType.FOLLOW_UP,
        message=(
            f"Follow up on cancelled appointment: {client.first_name} {client.last_name}"
            f" - {appointment.animal.name} ({appointment.service.title})"
        ),
        remind_at=now + timedelta(hours=config.CANCELLATION_FOLLOW_UP_HOURS),
    )


def apply_new_start(reminder, start_time: datetime) -> bool:
    """Move a derived reminder to follow a new start time and make it pending again."""
    remind_at = remind_at_for(reminder.type, start_time)
    if remind_at is None:
        return False
    reminder.remind_at = remind_at
    reminder.status = ReminderStatus.PENDING
    return True


class ReminderManager:
    """Manual reminder operations; restricted to staff."""

    def __init__(self, repository, now: Callable[[], datetime] = datetime.now):
        self.repository = repository
        self.now = now

    @staticmethod
    def _require_staff(actor) -> None:
        if not actor.is_staff:
            raise Unauthorized('Only staff can manage reminders.')

    def list(self, actor, include_done: bool = True):
        self._require_staff(actor)
        return self.repository.list_reminders(include_done=include_done)

    def create(
        self,
        actor,
        message: str,
        remind_at: datetime,
        reminder_type: ReminderType = ReminderType.MANUAL,
        appointment_id: int | None = None,
    ):
        self._require_staff(actor)

        message = message.strip()
        if not message:
            raise ValidationFailed('Message is required.')
        if appointment_id is not None and self.repository.get_appointment(appointment_id) is None:
            raise NotFound('Appointment not found.')

        try:
            reminder = self.repository.add_reminder(
                reminder_type=reminder_type,
                message=message,
                remind_at=remind_at,
                appointment_id=appointment_id,
            )
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise

        logger.info('Reminder %s created by user %s', reminder.id, actor.user_id)
        return reminder

    def complete(self, actor, reminder_id: int):
        self._require_staff(actor)
        reminder = self.repository.get_reminder(reminder_id)
        if reminder is None:
            raise NotFound('Reminder not found.')

        try:
            reminder.status = ReminderStatus.SENT
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise
        return reminder

    def delete(self, actor, reminder_id: int) -> None:
        self._require_staff(actor)
        reminder = self.repository.get_reminder(reminder_id)
        if reminder is None:
            raise NotFound('Reminder not found.')

        try:
            self.repository.delete(reminder)
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise
