from datetime import datetime

import pytest
from fastapi import HTTPException

from vetclinic.routes.appointment_routes import AppointmentResponse, client_history
from vetclinic.routes.treatment_note_routes import (
    CreateTreatmentNoteRequest,
    TreatmentNoteResponse,
    UpdateTreatmentNoteRequest,
    create_treatment_note,
    delete_treatment_note,
    list_treatment_notes,
    update_treatment_note,
)
from vetclinic.scheduling.enums import AppointmentStatus


@pytest.fixture
def completed_visit(service_60, add_appointment):
    return add_appointment(
        datetime(2025, 1, 2, 9, 0),
        datetime(2025, 1, 2, 10, 0),
        service_60,
        status=AppointmentStatus.COMPLETED,
    )


@pytest.fixture
def written_note(db, admin_user, completed_visit):
    request = CreateTreatmentNoteRequest(
        appointment_id=completed_visit.id,
        animal_id=completed_visit.animal_id,
        content='Vaccinated against rabies',
        follow_up='Booster next year',
    )
    return create_treatment_note(data=request, db=db, current_user=admin_user)


def test_create_treatment_note_returns_author_summary(written_note, admin_user) -> None:
    response = TreatmentNoteResponse.model_validate(written_note)

    assert response.practitioner.id == admin_user.id
    assert response.follow_up == 'Booster next year'


def test_create_treatment_note_by_client_is_forbidden(db, client_user, completed_visit) -> None:
    request = CreateTreatmentNoteRequest(
        appointment_id=completed_visit.id,
        animal_id=completed_visit.animal_id,
        content='Self-diagnosed',
    )

    with pytest.raises(HTTPException) as exception_info:
        create_treatment_note(data=request, db=db, current_user=client_user)

    assert exception_info.value.status_code == 403


def test_list_treatment_notes_is_scoped_to_owner(db, written_note, client_user, other_client_user) -> None:
    assert [note.id for note in list_treatment_notes(animal_id=None, db=db, current_user=client_user)] == [written_note.id]
    assert list_treatment_notes(animal_id=None, db=db, current_user=other_client_user) == []


def test_update_treatment_note_by_another_practitioner_is_forbidden(db, written_note, practitioner_user) -> None:
    with pytest.raises(HTTPException) as exception_info:
        update_treatment_note(
            note_id=written_note.id,
            data=UpdateTreatmentNoteRequest(content='Changed'),
            db=db,
            current_user=practitioner_user,
        )

    assert exception_info.value.status_code == 403


def test_update_and_delete_treatment_note_by_author(db, written_note, admin_user) -> None:
    updated = update_treatment_note(
        note_id=written_note.id,
        data=UpdateTreatmentNoteRequest(treatment='Rabies vaccine'),
        db=db,
        current_user=admin_user,
    )
    assert updated.treatment == 'Rabies vaccine'

    delete_treatment_note(note_id=written_note.id, db=db, current_user=admin_user)

    with pytest.raises(HTTPException) as exception_info:
        delete_treatment_note(note_id=written_note.id, db=db, current_user=admin_user)
    assert exception_info.value.status_code == 404


def test_client_history_embeds_treatment_notes(db, written_note, client_user) -> None:
    history = client_history(limit=10, client_id=None, db=db, current_user=client_user)

    response = AppointmentResponse.model_validate(history[0])
    assert [note.content for note in response.treatment_notes] == ['Vaccinated against rabies']
