from datetime import datetime

import pytest

from vetclinic.models import Animal
from vetclinic.scheduling.enums import AnimalGender
from vetclinic.scheduling.errors import NotFound, Unauthorized, ValidationFailed
from vetclinic.scheduling.lifecycle import Actor
from vetclinic.scheduling.treatment_notes import TreatmentNoteManager


@pytest.fixture
def manager(repository) -> TreatmentNoteManager:
    return TreatmentNoteManager(repository)


@pytest.fixture
def visit(service_60, add_appointment):
    return add_appointment(datetime(2025, 1, 2, 9, 0), datetime(2025, 1, 2, 10, 0), service_60)


@pytest.fixture
def note(manager, admin_actor, visit):
    return manager.create(
        admin_actor,
        appointment_id=visit.id,
        animal_id=visit.animal_id,
        content=' Mild ear infection ',
        diagnosis='Otitis externa',
        treatment='Ear drops twice daily',
    )


def test_create_records_author_and_strips_content(note, admin_actor) -> None:
    assert note.practitioner_id == admin_actor.user_id
    assert note.content == 'Mild ear infection'
    assert note.follow_up is None


def test_create_requires_staff(manager, client_actor, visit) -> None:
    with pytest.raises(Unauthorized):
        manager.create(client_actor, appointment_id=visit.id, animal_id=visit.animal_id, content='Looks fine')


def test_create_rejects_blank_content(manager, admin_actor, visit) -> None:
    with pytest.raises(ValidationFailed):
        manager.create(admin_actor, appointment_id=visit.id, animal_id=visit.animal_id, content='   ')


def test_create_rejects_unknown_appointment(manager, admin_actor, animal) -> None:
    with pytest.raises(NotFound):
        manager.create(admin_actor, appointment_id=999, animal_id=animal.id, content='Looks fine')


def test_create_rejects_animal_not_seen_at_appointment(manager, admin_actor, visit, db, client_user) -> None:
    other_pet = Animal(owner_id=client_user.id, name='Milo', breed='Tabby', age=1, gender=AnimalGender.MALE)
    db.add(other_pet)
    db.commit()

    with pytest.raises(ValidationFailed):
        manager.create(admin_actor, appointment_id=visit.id, animal_id=other_pet.id, content='Looks fine')


def test_clients_only_see_notes_about_their_own_animals(manager, note, client_actor, other_client_user) -> None:
    assert [item.id for item in manager.list(client_actor)] == [note.id]
    assert manager.list(Actor.from_user(other_client_user)) == []


def test_client_animal_filter_cannot_reach_other_owners_animals(manager, note, other_client_user, visit) -> None:
    assert manager.list(Actor.from_user(other_client_user), animal_id=visit.animal_id) == []


def test_staff_see_every_note(manager, note, practitioner_user) -> None:
    assert [item.id for item in manager.list(Actor.from_user(practitioner_user))] == [note.id]


def test_update_changes_only_given_fields(manager, note, admin_actor) -> None:
    updated = manager.update(admin_actor, note.id, follow_up='Recheck in two weeks', diagnosis=None)

    assert updated.follow_up == 'Recheck in two weeks'
    assert updated.diagnosis == 'Otitis externa'


def test_update_and_delete_are_limited_to_the_author(manager, note, practitioner_user) -> None:
    colleague = Actor.from_user(practitioner_user)

    with pytest.raises(Unauthorized):
        manager.update(colleague, note.id, content='Overwritten')
    with pytest.raises(Unauthorized):
        manager.delete(colleague, note.id)


def test_update_rejects_blank_content(manager, note, admin_actor) -> None:
    with pytest.raises(ValidationFailed):
        manager.update(admin_actor, note.id, content='  ')


def test_delete_removes_note(manager, note, admin_actor, repository) -> None:
    manager.delete(admin_actor, note.id)

    assert repository.get_treatment_note(note.id) is None


def test_unknown_note_raises_not_found(manager, admin_actor) -> None:
    with pytest.raises(NotFound):
        manager.update(admin_actor, 999, content='Anything')
