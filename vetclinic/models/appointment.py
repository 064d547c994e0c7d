"""Appointment model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from vetclinic.database import Base
from vetclinic.scheduling.enums import AppointmentStatus


class Appointment(Base):
    """Represents a booked appointment on the practitioner calendar.

    ``end_time`` is fixed from the service duration when the appointment is
    booked or rescheduled; later edits to the service do not move it.
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    animal_id = Column(Integer, ForeignKey("animals.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(
        Enum(AppointmentStatus, name="appointment_status", native_enum=False),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    client = relationship("User", back_populates="appointments")
    animal = relationship("Animal")
    service = relationship("Service")
    reminders = relationship(
        "Reminder",
        back_populates="appointment",
        cascade="all, delete-orphan",
        order_by="Reminder.remind_at",
    )
    treatment_notes = relationship(
        "TreatmentNote",
        back_populates="appointment",
        cascade="all, delete-orphan",
        order_by="TreatmentNote.created_at.desc()",
    )
