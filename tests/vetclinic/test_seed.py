from vetclinic.auth.passwords import verify_password
from vetclinic.models import Service, User
from vetclinic.scheduling.enums import UserRole
from vetclinic.seed import DEFAULT_SERVICES, seed


def test_seed_creates_admin_and_services(db) -> None:
    admin_created, services_created = seed(db, 'admin@example.com', 'seed-password')

    admin = db.query(User).filter(User.email == 'admin@example.com').one()
    assert admin_created is True
    assert admin.role == UserRole.ADMIN
    assert verify_password('seed-password', admin.hashed_password)
    assert services_created == len(DEFAULT_SERVICES)
    assert db.query(Service).count() == len(DEFAULT_SERVICES)


def test_seed_is_idempotent(db) -> None:
    seed(db, 'admin@example.com', 'seed-password')

    assert seed(db, 'admin@example.com', 'seed-password') == (False, 0)
    assert db.query(User).count() == 1
