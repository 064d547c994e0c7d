import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from vetclinic.core import config
from vetclinic.database import Base, engine, ensure_schema
from vetclinic.routes import (
    animal_routes,
    appointment_routes,
    auth_routes,
    availability_routes,
    dashboard_routes,
    reminder_routes,
    service_routes,
    treatment_note_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

config.validate_runtime_config()

app = FastAPI(title='Veterinary Clinic API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        ensure_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Veterinary Clinic API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(service_routes.router, prefix='/services')
app.include_router(animal_routes.router, prefix='/animals')
app.include_router(availability_routes.router, prefix='/availability')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(reminder_routes.router, prefix='/reminders')
app.include_router(treatment_note_routes.router, prefix='/treatment-notes')
app.include_router(dashboard_routes.router, prefix='/dashboard')
