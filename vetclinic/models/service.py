"""Service catalogue model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text

from vetclinic.database import Base


class Service(Base):
    """A bookable service; its duration sizes every appointment booked for it."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
