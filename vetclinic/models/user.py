"""User model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from vetclinic.database import Base
from vetclinic.scheduling.enums import STAFF_ROLES, UserRole


class User(Base):
    """Represents an application user: a pet owner or a member of staff."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    phone = Column(String)
    role = Column(Enum(UserRole, name="user_role", native_enum=False), nullable=False, default=UserRole.CLIENT)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    animals = relationship("Animal", back_populates="owner")
    appointments = relationship("Appointment", back_populates="client")

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
