"""Reminder model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from vetclinic.database import Base
from vetclinic.scheduling.enums import ReminderStatus, ReminderType


class Reminder(Base):
    """A notification due at ``remind_at``, derived from an appointment or created by staff."""
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True)
    type = Column(Enum(ReminderType, name="reminder_type", native_enum=False), nullable=False)
    message = Column(Text, nullable=False)
    remind_at = Column(DateTime, nullable=False)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), index=True)
    status = Column(
        Enum(ReminderStatus, name="reminder_status", native_enum=False),
        nullable=False,
        default=ReminderStatus.PENDING,
    )
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    appointment = relationship("Appointment", back_populates="reminders")

    @property
    def sent(self) -> bool:
        # Delivered and neutralized reminders are both done as far as dispatch is concerned.
        return self.status != ReminderStatus.PENDING
