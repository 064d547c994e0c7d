"""Appointment lifecycle: booking, transitions and the reminders they derive.

State graph::

    SCHEDULED -> CONFIRMED -> COMPLETED
    SCHEDULED | CONFIRMED -> CANCELLED

COMPLETED and CANCELLED are terminal. ``override_status`` is the one entry
point that ignores the graph; it exists for administrative corrections.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable

from vetclinic.core import config
from vetclinic.scheduling import reminders
from vetclinic.scheduling.availability import to_business_time
from vetclinic.scheduling.conflicts import has_conflict
from vetclinic.scheduling.enums import STAFF_ROLES, TERMINAL_STATUSES, AppointmentStatus, UserRole
from vetclinic.scheduling.errors import (
    AlreadyCompleted,
    CancellationWindowExpired,
    InvalidStatus,
    InvalidTransition,
    NotFound,
    SlotUnavailable,
    Unauthorized,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

# One practitioner calendar, so one lock for every check-then-write.
_calendar_lock = Lock()


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: UserRole

    @classmethod
    def from_user(cls, user) -> 'Actor':
        return cls(user_id=user.id, role=UserRole(user.role))

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


def _append_note(notes: str | None, line: str) -> str:
    if not notes:
        return line
    return f"{notes}\n\n{line}"


class AppointmentLifecycle:
    def __init__(self, repository, now: Callable[[], datetime] = datetime.now):
        self.repository = repository
        self.now = now

    def _get_appointment(self, appointment_id: int, for_update: bool = False):
        appointment = self.repository.get_appointment(appointment_id, for_update=for_update)
        if appointment is None:
            raise NotFound('Appointment not found.')
        return appointment

    @staticmethod
    def _require_staff(actor: Actor, detail: str) -> None:
        if not actor.is_staff:
            raise Unauthorized(detail)

    @staticmethod
    def _require_owner_or_staff(actor: Actor, appointment, detail: str) -> None:
        if appointment.client_id != actor.user_id and not actor.is_staff:
            raise Unauthorized(detail)

    def _ensure_free(self, start_time: datetime, end_time: datetime, exclude_appointment_id: int | None = None) -> None:
        busy = self.repository.list_blocking_intervals(
            start_time,
            end_time,
            exclude_appointment_id=exclude_appointment_id,
        )
        if has_conflict(busy, start_time, end_time):
            raise SlotUnavailable('Time slot is not available.')

    def create(
        self,
        actor: Actor,
        client_id: int,
        animal_id: int,
        service_id: int,
        start_time: datetime,
        notes: str | None = None,
    ):
        """Book an appointment and derive its confirmation and reminder records.

        Reminder derivation runs after the booking is committed; if it fails
        the booking stands and the failure is only logged.
        """
        if not actor.is_staff and client_id != actor.user_id:
            raise Unauthorized('Clients can only book appointments for themselves.')

        service = self.repository.get_service(service_id)
        if service is None:
            raise NotFound('Service not found.')
        if not service.active:
            raise ValidationFailed('Service is not available for booking.')

        animal = self.repository.get_animal(animal_id)
        if animal is None:
            raise NotFound('Animal not found.')
        if animal.owner_id != client_id:
            raise Unauthorized('This animal does not belong to the client.')

        start_time = to_business_time(start_time)
        end_time = start_time + timedelta(minutes=service.duration)
        if end_time <= start_time:
            raise ValidationFailed('Service duration must be positive.')

        with _calendar_lock:
            try:
                self.repository.lock_calendar()
                self._ensure_free(start_time, end_time)

                appointment = self.repository.add_appointment(
                    client_id=client_id,
                    animal_id=animal_id,
                    service_id=service_id,
                    start_time=start_time,
                    end_time=end_time,
                    status=AppointmentStatus.SCHEDULED,
                    notes=notes,
                )
                self.repository.record_audit(
                    actor.user_id,
                    'APPOINTMENT_CREATED',
                    appointment_id=appointment.id,
                    service_id=service_id,
                    animal_id=animal_id,
                    start_time=start_time,
                    end_time=end_time,
                )
                self.repository.commit()
            except Exception:
                self.repository.rollback()
                raise

        logger.info('Appointment %s booked for %s - %s', appointment.id, start_time, end_time)
        self._derive_booking_reminders(appointment)
        return appointment

    def _derive_booking_reminders(self, appointment) -> None:
        try:
            for plan in reminders.booking_reminder_plans(appointment):
                self.repository.add_reminder(
                    reminder_type=plan.reminder_type,
                    message=plan.message,
                    remind_at=plan.remind_at,
                    appointment_id=appointment.id,
                )
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            logger.exception('Failed to create booking reminders for appointment %s', appointment.id)

    def confirm(self, appointment_id: int, actor: Actor):
        self._require_staff(actor, 'Only staff can confirm appointments.')
        appointment = self._get_appointment(appointment_id, for_update=True)

        if appointment.status != AppointmentStatus.SCHEDULED:
            raise InvalidTransition(f'Cannot confirm an appointment that is {appointment.status.value}.')

        return self._transition(appointment, actor, AppointmentStatus.CONFIRMED, 'APPOINTMENT_CONFIRMED')

    def complete(self, appointment_id: int, actor: Actor):
        self._require_staff(actor, 'Only staff can complete appointments.')
        appointment = self._get_appointment(appointment_id, for_update=True)

        if appointment.status != AppointmentStatus.CONFIRMED:
            raise InvalidTransition(f'Cannot complete an appointment that is {appointment.status.value}.')

        return self._transition(appointment, actor, AppointmentStatus.COMPLETED, 'APPOINTMENT_COMPLETED')

    def refuse(self, appointment_id: int, actor: Actor, reason: str | None = None):
        self._require_staff(actor, 'Only staff can refuse appointments.')
        appointment = self._get_appointment(appointment_id, for_update=True)

        if appointment.status in TERMINAL_STATUSES:
            raise InvalidTransition(f'Cannot refuse an appointment that is {appointment.status.value}.')

        if reason:
            appointment.notes = _append_note(appointment.notes, f'Refusal reason: {reason}')

        self._transition(appointment, actor, AppointmentStatus.CANCELLED, 'APPOINTMENT_REFUSED', reason=reason)
        self._neutralize_reminders(appointment)
        return appointment

    def cancel(self, appointment_id: int, actor: Actor, reason: str | None = None):
        appointment = self._get_appointment(appointment_id, for_update=True)
        self._require_owner_or_staff(actor, appointment, 'Not authorized to cancel this appointment.')

        if appointment.status == AppointmentStatus.COMPLETED:
            raise AlreadyCompleted('Cannot cancel completed appointments.')
        if appointment.status == AppointmentStatus.CANCELLED:
            raise InvalidTransition('Appointment is already cancelled.')

        window = timedelta(hours=config.CLIENT_CANCELLATION_WINDOW_HOURS)
        if actor.role == UserRole.CLIENT and appointment.start_time - self.now() < window:
            raise CancellationWindowExpired(
                f'Cannot cancel appointments less than {config.CLIENT_CANCELLATION_WINDOW_HOURS} hours '
                'before the scheduled time.'
            )

        if reason:
            appointment.notes = _append_note(appointment.notes, f'Cancellation reason: {reason}')

        self._transition(
            appointment,
            actor,
            AppointmentStatus.CANCELLED,
            'APPOINTMENT_CANCELLED',
            reason=reason,
            original_start_time=appointment.start_time,
            client_id=appointment.client_id,
            animal_id=appointment.animal_id,
        )
        self._neutralize_reminders(appointment)
        self._create_cancellation_follow_up(appointment)
        return appointment

    def override_status(self, appointment_id: int, actor: Actor, new_status: str):
        """Unchecked administrative status write; skips the transition graph."""
        self._require_staff(actor, 'Only staff can update appointment status.')
        try:
            status = AppointmentStatus(new_status)
        except ValueError as exc:
            raise InvalidStatus(f'Invalid status: {new_status}.') from exc

        appointment = self._get_appointment(appointment_id, for_update=True)
        return self._transition(
            appointment,
            actor,
            status,
            'APPOINTMENT_STATUS_UPDATED',
            old_status=appointment.status,
        )

    def reschedule(self, appointment_id: int, new_start_time: datetime, actor: Actor):
        new_start_time = to_business_time(new_start_time)

        with _calendar_lock:
            try:
                self.repository.lock_calendar()
                # Read under the lock so a concurrent cancel or refuse is seen.
                appointment = self._get_appointment(appointment_id, for_update=True)
                self._require_owner_or_staff(actor, appointment, 'Not authorized to reschedule this appointment.')
                if appointment.status in TERMINAL_STATUSES:
                    raise InvalidTransition(f'Cannot reschedule an appointment that is {appointment.status.value}.')

                new_end_time = new_start_time + timedelta(minutes=appointment.service.duration)
                old_start_time = appointment.start_time
                self._ensure_free(new_start_time, new_end_time, exclude_appointment_id=appointment.id)

                appointment.start_time = new_start_time
                appointment.end_time = new_end_time
                appointment.status = AppointmentStatus.SCHEDULED
                appointment.updated_at = self.now()

                for reminder in self.repository.reminders_for(appointment.id):
                    reminders.apply_new_start(reminder, new_start_time)

                self.repository.record_audit(
                    actor.user_id,
                    'APPOINTMENT_RESCHEDULED',
                    appointment_id=appointment.id,
                    old_start_time=old_start_time,
                    new_start_time=new_start_time,
                )
                self.repository.commit()
            except Exception:
                self.repository.rollback()
                raise

        logger.info('Appointment %s moved from %s to %s', appointment.id, old_start_time, new_start_time)
        return appointment

    def _transition(self, appointment, actor: Actor, status: AppointmentStatus, action: str, **meta):
        previous = appointment.status
        try:
            appointment.status = status
            appointment.updated_at = self.now()
            self.repository.record_audit(
                actor.user_id,
                action,
                appointment_id=appointment.id,
                new_status=status,
                **meta,
            )
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise

        logger.info('Appointment %s: %s -> %s by user %s', appointment.id, previous.value, status.value, actor.user_id)
        return appointment

    def _neutralize_reminders(self, appointment) -> None:
        try:
            self.repository.neutralize_reminders(appointment.id)
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            logger.exception('Failed to neutralize reminders for appointment %s', appointment.id)

    def _create_cancellation_follow_up(self, appointment) -> None:
        try:
            plan = reminders.cancellation_follow_up_plan(appointment, self.now())
            self.repository.add_reminder(
                reminder_type=plan.reminder_type,
                message=plan.message,
                remind_at=plan.remind_at,
                appointment_id=appointment.id,
            )
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            logger.exception('Failed to create follow-up reminder for cancelled appointment %s', appointment.id)
