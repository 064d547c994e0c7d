import itertools
import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from vetclinic.database import Base  # noqa: E402
from vetclinic.models import Animal, Appointment, Service, User  # noqa: E402
from vetclinic.scheduling.enums import AnimalGender, AppointmentStatus, UserRole  # noqa: E402
from vetclinic.scheduling.lifecycle import Actor  # noqa: E402
from vetclinic.scheduling.repository import ScheduleRepository  # noqa: E402

NOW = datetime(2025, 1, 1, 8, 0)


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def repository(db) -> ScheduleRepository:
    return ScheduleRepository(db)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make_user(role: UserRole = UserRole.CLIENT, email: str | None = None, hashed_password: str = 'not-a-hash') -> User:
        index = next(counter)
        user = User(
            email=email or f'user{index}@example.com',
            hashed_password=hashed_password,
            first_name='Test',
            last_name=f'User{index}',
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def client_user(make_user) -> User:
    return make_user(UserRole.CLIENT)


@pytest.fixture
def other_client_user(make_user) -> User:
    return make_user(UserRole.CLIENT)


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user(UserRole.ADMIN)


@pytest.fixture
def practitioner_user(make_user) -> User:
    return make_user(UserRole.PRACTITIONER)


@pytest.fixture
def client_actor(client_user) -> Actor:
    return Actor.from_user(client_user)


@pytest.fixture
def admin_actor(admin_user) -> Actor:
    return Actor.from_user(admin_user)


@pytest.fixture
def make_service(db):
    def _make_service(duration: int = 60, title: str = 'Consultation', price: float = 50.0) -> Service:
        service = Service(title=title, description='', duration=duration, price=price, active=True)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    return _make_service


@pytest.fixture
def service_60(make_service) -> Service:
    return make_service(duration=60)


@pytest.fixture
def animal(db, client_user) -> Animal:
    pet = Animal(owner_id=client_user.id, name='Rex', breed='Beagle', age=3, gender=AnimalGender.MALE)
    db.add(pet)
    db.commit()
    db.refresh(pet)
    return pet


@pytest.fixture
def add_appointment(db, client_user, animal):
    """Insert an appointment row directly, bypassing the lifecycle checks."""

    def _add_appointment(
        start_time: datetime,
        end_time: datetime,
        service: Service,
        status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    ) -> Appointment:
        appointment = Appointment(
            client_id=client_user.id,
            animal_id=animal.id,
            service_id=service.id,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _add_appointment
