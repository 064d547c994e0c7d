"""Enumerations shared by the scheduling engine and the persistence models."""

import enum


class UserRole(str, enum.Enum):
    CLIENT = "CLIENT"
    PRACTITIONER = "PRACTITIONER"
    ADMIN = "ADMIN"


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.PRACTITIONER})


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


class ReminderType(str, enum.Enum):
    CONFIRMATION = "CONFIRMATION"
    REMINDER = "REMINDER"
    FOLLOW_UP = "FOLLOW_UP"
    MANUAL = "MANUAL"


class ReminderStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    CANCELLED = "CANCELLED"


class AnimalGender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"
