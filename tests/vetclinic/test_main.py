from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vetclinic.auth import jwt_handler
from vetclinic.database import Base, get_db
from vetclinic.main import app
from vetclinic.models import Service, User
from vetclinic.scheduling.enums import UserRole


@pytest.fixture
def api_client():
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = testing_session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def _auth_header(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


def test_root_reports_status(api_client) -> None:
    response = api_client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'Veterinary Clinic API Running'}


def test_protected_route_requires_bearer_token(api_client) -> None:
    response = api_client.get('/appointments')

    assert response.status_code in (401, 403)


def test_client_registers_and_adds_a_pet(api_client) -> None:
    registration = api_client.post(
        '/auth/register',
        json={'email': 'owner@example.com', 'password': 'correct-horse', 'first_name': 'Ada', 'last_name': 'Byron'},
    )
    assert registration.status_code == 201
    headers = _auth_header(registration.json()['access_token'])

    me = api_client.get('/auth/me', headers=headers)
    assert me.json()['email'] == 'owner@example.com'

    services = api_client.get('/services')
    assert services.json() == []

    pet = api_client.post(
        '/animals',
        json={'name': 'Rex', 'breed': 'Beagle', 'age': 3, 'gender': 'MALE'},
        headers=headers,
    )
    assert pet.status_code == 201

    staff_only = api_client.post('/services', json={'title': 'Checkup', 'duration': 30, 'price': 40}, headers=headers)
    assert staff_only.status_code == 403


def test_slot_listing_uses_date_query_parameter(api_client) -> None:
    response = api_client.get('/availability/slots', params={'service_id': 1, 'date': '2099-01-05'})

    assert response.status_code == 404
    assert response.json()['detail'] == 'Service not found.'


def test_booking_flow_with_staff_confirmation(api_client) -> None:
    session = next(app.dependency_overrides[get_db]())
    admin = User(email='admin@example.com', hashed_password='x', first_name='Clinic', last_name='Admin', role=UserRole.ADMIN)
    session.add_all([admin, Service(title='Checkup', description='', duration=30, price=40.0, active=True)])
    session.commit()
    admin_headers = _auth_header(jwt_handler.create_access_token(subject=str(admin.id), role='ADMIN'))
    session.close()

    registration = api_client.post(
        '/auth/register',
        json={'email': 'owner@example.com', 'password': 'correct-horse', 'first_name': 'Ada', 'last_name': 'Byron'},
    )
    headers = _auth_header(registration.json()['access_token'])
    pet_id = api_client.post(
        '/animals',
        json={'name': 'Rex', 'breed': 'Beagle', 'age': 3, 'gender': 'MALE'},
        headers=headers,
    ).json()['id']

    start = datetime(2099, 1, 5, 10, 0).isoformat()
    booked = api_client.post(
        '/appointments',
        json={'service_id': 1, 'animal_id': pet_id, 'start_time': start},
        headers=headers,
    )
    assert booked.status_code == 201
    body = booked.json()
    assert body['status'] == 'SCHEDULED'
    assert body['end_time'] == '2099-01-05T10:30:00'
    assert len(body['reminders']) == 2

    clash = api_client.post(
        '/appointments',
        json={'service_id': 1, 'animal_id': pet_id, 'start_time': datetime(2099, 1, 5, 10, 15).isoformat()},
        headers=headers,
    )
    assert clash.status_code == 409

    confirmed = api_client.put(f"/appointments/{body['id']}/confirm", headers=admin_headers)
    assert confirmed.status_code == 200
    assert confirmed.json()['status'] == 'CONFIRMED'

    again = api_client.put(f"/appointments/{body['id']}/confirm", headers=admin_headers)
    assert again.status_code == 409

    stats = api_client.get('/appointments/stats', headers=admin_headers)
    assert stats.json()['confirmed'] == 1
