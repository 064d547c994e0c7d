"""Treatment note model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from vetclinic.database import Base


class TreatmentNote(Base):
    """Clinical notes a practitioner writes about an animal seen at an appointment."""
    __tablename__ = "treatment_notes"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False, index=True)
    animal_id = Column(Integer, ForeignKey("animals.id"), nullable=False, index=True)
    practitioner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    diagnosis = Column(Text)
    treatment = Column(Text)
    follow_up = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    appointment = relationship("Appointment", back_populates="treatment_notes")
    animal = relationship("Animal")
    practitioner = relationship("User")
