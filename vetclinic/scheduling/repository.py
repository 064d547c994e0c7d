"""SQLAlchemy implementation of the queries the scheduling engine relies on."""

import enum
from datetime import date, datetime
from typing import Iterable

from sqlalchemy import func, text
from sqlalchemy.orm import Session, joinedload

from vetclinic.models import Animal, Appointment, AuditLog, Reminder, Service, TreatmentNote, User
from vetclinic.scheduling.conflicts import Interval
from vetclinic.scheduling.enums import AppointmentStatus, ReminderStatus, ReminderType, UserRole

# Key for the transaction-scoped advisory lock guarding the practitioner calendar.
CALENDAR_LOCK_KEY = 7341001


def _json_ready(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


def _within(query, window_start: datetime | None, window_end: datetime | None):
    # Either bound may be open.
    if window_start is not None:
        query = query.filter(Appointment.start_time >= window_start)
    if window_end is not None:
        query = query.filter(Appointment.start_time <= window_end)
    return query


class ScheduleRepository:
    """Data access for appointments, reminders and their audit trail.

    Nothing here commits implicitly; the caller decides the transaction
    boundary with :meth:`commit` and :meth:`rollback`.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_service(self, service_id: int) -> Service | None:
        return self.db.get(Service, service_id)

    def get_animal(self, animal_id: int) -> Animal | None:
        return self.db.get(Animal, animal_id)

    def get_user(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def get_appointment(self, appointment_id: int, for_update: bool = False) -> Appointment | None:
        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if for_update:
            # Overwrite identity-map state with the committed row.
            query = query.with_for_update().populate_existing()
        return query.first()

    def lock_calendar(self) -> None:
        """Serialize check-then-write across processes for the rest of the transaction."""
        if self.db.get_bind().dialect.name == 'postgresql':
            self.db.execute(text('SELECT pg_advisory_xact_lock(:key)'), {'key': CALENDAR_LOCK_KEY})

    def list_blocking_intervals(
        self,
        window_start: datetime,
        window_end: datetime,
        exclude_appointment_id: int | None = None,
    ) -> list[Interval]:
        query = self.db.query(Appointment.start_time, Appointment.end_time).filter(
            Appointment.status != AppointmentStatus.CANCELLED,
            Appointment.start_time < window_end,
            Appointment.end_time > window_start,
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return [(start, end) for start, end in query.order_by(Appointment.start_time.asc()).all()]

    def add_appointment(self, **fields) -> Appointment:
        appointment = Appointment(**fields)
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def add_reminder(
        self,
        reminder_type: ReminderType,
        message: str,
        remind_at: datetime,
        appointment_id: int | None = None,
    ) -> Reminder:
        reminder = Reminder(
            type=reminder_type,
            message=message,
            remind_at=remind_at,
            appointment_id=appointment_id,
            status=ReminderStatus.PENDING,
        )
        self.db.add(reminder)
        self.db.flush()
        return reminder

    def get_reminder(self, reminder_id: int) -> Reminder | None:
        return self.db.get(Reminder, reminder_id)

    def reminders_for(self, appointment_id: int) -> list[Reminder]:
        return self.db.query(Reminder).filter(
            Reminder.appointment_id == appointment_id,
        ).order_by(Reminder.remind_at.asc()).all()

    def list_reminders(self, include_done: bool = True) -> list[Reminder]:
        query = self.db.query(Reminder)
        if not include_done:
            query = query.filter(Reminder.status == ReminderStatus.PENDING)
        return query.order_by(Reminder.remind_at.asc()).all()

    def neutralize_reminders(self, appointment_id: int) -> int:
        pending = self.db.query(Reminder).filter(
            Reminder.appointment_id == appointment_id,
            Reminder.status == ReminderStatus.PENDING,
        ).all()
        for reminder in pending:
            reminder.status = ReminderStatus.CANCELLED
        self.db.flush()
        return len(pending)

    def delete(self, instance) -> None:
        self.db.delete(instance)
        self.db.flush()

    def record_audit(self, user_id: int | None, action: str, **meta) -> AuditLog:
        entry = AuditLog(
            user_id=user_id,
            action=action,
            meta={key: _json_ready(value) for key, value in meta.items()},
        )
        self.db.add(entry)
        return entry

    def get_treatment_note(self, note_id: int) -> TreatmentNote | None:
        return self.db.get(TreatmentNote, note_id)

    def add_treatment_note(self, **fields) -> TreatmentNote:
        note = TreatmentNote(**fields)
        self.db.add(note)
        self.db.flush()
        return note

    def list_treatment_notes(self, owner_id: int | None = None, animal_id: int | None = None) -> list[TreatmentNote]:
        query = self.db.query(TreatmentNote).options(
            joinedload(TreatmentNote.animal),
            joinedload(TreatmentNote.practitioner),
        )
        if owner_id is not None:
            query = query.join(Animal, Animal.id == TreatmentNote.animal_id).filter(Animal.owner_id == owner_id)
        if animal_id is not None:
            query = query.filter(TreatmentNote.animal_id == animal_id)
        return query.order_by(TreatmentNote.created_at.desc(), TreatmentNote.id.desc()).all()

    def list_appointments(self, client_id: int | None = None) -> list[Appointment]:
        query = self.db.query(Appointment).options(
            joinedload(Appointment.client),
            joinedload(Appointment.animal),
            joinedload(Appointment.service),
        )
        if client_id is not None:
            query = query.filter(Appointment.client_id == client_id)
        return query.order_by(Appointment.start_time.desc()).all()

    def list_appointments_between(
        self,
        window_start: datetime,
        window_end: datetime,
        statuses: Iterable[AppointmentStatus] | None = None,
    ) -> list[Appointment]:
        query = self.db.query(Appointment).filter(
            Appointment.start_time >= window_start,
            Appointment.start_time < window_end,
        )
        if statuses is not None:
            query = query.filter(Appointment.status.in_(list(statuses)))
        return query.order_by(Appointment.start_time.asc()).all()

    def client_history(self, client_id: int, limit: int) -> list[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.client_id == client_id,
            Appointment.status == AppointmentStatus.COMPLETED,
        ).order_by(Appointment.start_time.desc()).limit(limit).all()

    def count_by_status(self, window_start: datetime | None, window_end: datetime | None) -> dict[AppointmentStatus, int]:
        query = _within(self.db.query(Appointment.status, func.count(Appointment.id)), window_start, window_end)
        return {status: count for status, count in query.group_by(Appointment.status).all()}

    def count_appointments(self, window_start: datetime | None = None, window_end: datetime | None = None) -> int:
        return _within(self.db.query(func.count(Appointment.id)), window_start, window_end).scalar() or 0

    def count_clients(self) -> int:
        return self.db.query(func.count(User.id)).filter(User.role == UserRole.CLIENT).scalar() or 0

    def count_animals(self) -> int:
        return self.db.query(func.count(Animal.id)).scalar() or 0

    def completed_revenue(self, window_start: datetime | None, window_end: datetime | None) -> float:
        query = self.db.query(func.coalesce(func.sum(Service.price), 0)).join(
            Appointment, Appointment.service_id == Service.id,
        ).filter(Appointment.status == AppointmentStatus.COMPLETED)
        return float(_within(query, window_start, window_end).scalar() or 0)

    def refresh(self, instance) -> None:
        self.db.refresh(instance)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
