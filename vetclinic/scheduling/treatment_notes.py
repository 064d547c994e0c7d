"""Practitioner treatment notes attached to appointments."""

import logging

from vetclinic.scheduling.errors import NotFound, Unauthorized, ValidationFailed

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('content', 'diagnosis', 'treatment', 'follow_up')


class TreatmentNoteManager:
    """Staff write notes; clients only read notes about their own animals.

    A note can be changed or removed only by the practitioner who wrote it.
    """

    def __init__(self, repository):
        self.repository = repository

    def list(self, actor, animal_id: int | None = None):
        owner_id = None if actor.is_staff else actor.user_id
        return self.repository.list_treatment_notes(owner_id=owner_id, animal_id=animal_id)

    def create(
        self,
        actor,
        appointment_id: int,
        animal_id: int,
        content: str,
        diagnosis: str | None = None,
        treatment: str | None = None,
        follow_up: str | None = None,
    ):
        if not actor.is_staff:
            raise Unauthorized('Only staff can write treatment notes.')

        content = content.strip()
        if not content:
            raise ValidationFailed('Content is required.')

        appointment = self.repository.get_appointment(appointment_id)
        if appointment is None:
            raise NotFound('Appointment not found.')
        if appointment.animal_id != animal_id:
            raise ValidationFailed('The animal was not seen at this appointment.')

        try:
            note = self.repository.add_treatment_note(
                appointment_id=appointment_id,
                animal_id=animal_id,
                practitioner_id=actor.user_id,
                content=content,
                diagnosis=diagnosis,
                treatment=treatment,
                follow_up=follow_up,
            )
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise

        logger.info('Treatment note %s added to appointment %s by user %s', note.id, appointment_id, actor.user_id)
        return note

    def _get_own_note(self, actor, note_id: int):
        if not actor.is_staff:
            raise Unauthorized('Only staff can change treatment notes.')
        note = self.repository.get_treatment_note(note_id)
        if note is None:
            raise NotFound('Treatment note not found.')
        if note.practitioner_id != actor.user_id:
            raise Unauthorized('Only the author can change a treatment note.')
        return note

    def update(self, actor, note_id: int, **changes):
        note = self._get_own_note(actor, note_id)

        if 'content' in changes and changes['content'] is not None:
            changes['content'] = changes['content'].strip()
            if not changes['content']:
                raise ValidationFailed('Content is required.')

        try:
            for field_name in EDITABLE_FIELDS:
                if changes.get(field_name) is not None:
                    setattr(note, field_name, changes[field_name])
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise
        return note

    def delete(self, actor, note_id: int) -> None:
        note = self._get_own_note(actor, note_id)
        try:
            self.repository.delete(note)
            self.repository.commit()
        except Exception:
            self.repository.rollback()
            raise
