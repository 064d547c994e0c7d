"""Animal (patient) model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from vetclinic.database import Base
from vetclinic.scheduling.enums import AnimalGender


class Animal(Base):
    """An animal owned by a client."""
    __tablename__ = "animals"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    breed = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    weight = Column(Float)
    gender = Column(Enum(AnimalGender, name="animal_gender", native_enum=False), nullable=False)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    owner = relationship("User", back_populates="animals")
