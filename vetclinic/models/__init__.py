from vetclinic.models.animal import Animal
from vetclinic.models.appointment import Appointment
from vetclinic.models.audit_log import AuditLog
from vetclinic.models.reminder import Reminder
from vetclinic.models.service import Service
from vetclinic.models.treatment_note import TreatmentNote
from vetclinic.models.user import User

__all__ = ["Animal", "Appointment", "AuditLog", "Reminder", "Service", "TreatmentNote", "User"]
