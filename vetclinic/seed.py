"""Create the tables, an admin account and a starter service catalogue.

Usage:
    python -m vetclinic.seed
"""
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.auth.passwords import hash_password
from vetclinic.core import config
from vetclinic.database import Base, SessionLocal, engine, ensure_schema
from vetclinic.models import Service, User
from vetclinic.scheduling.enums import UserRole

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    {'title': 'General consultation', 'description': 'Health check and examination.', 'duration': 30, 'price': 60},
    {'title': 'Vaccination', 'description': 'Core and non-core vaccines.', 'duration': 15, 'price': 45},
    {'title': 'Dental cleaning', 'description': 'Scaling and polishing under sedation.', 'duration': 60, 'price': 180},
    {'title': 'Surgery consultation', 'description': 'Pre-operative assessment.', 'duration': 45, 'price': 90},
]


def seed(db: Session, admin_email: str, admin_password: str) -> tuple[bool, int]:
    """Insert what is missing; returns (admin_created, services_created)."""
    admin_created = False
    if db.query(User).filter(User.email == admin_email).first() is None:
        db.add(User(
            email=admin_email,
            hashed_password=hash_password(admin_password),
            first_name='Clinic',
            last_name='Admin',
            role=UserRole.ADMIN,
        ))
        admin_created = True

    existing_titles = {title for (title,) in db.query(Service.title).all()}
    new_services = [Service(**fields) for fields in DEFAULT_SERVICES if fields['title'] not in existing_titles]
    db.add_all(new_services)
    db.commit()
    return admin_created, len(new_services)


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL)
    try:
        Base.metadata.create_all(bind=engine)
        ensure_schema()
        db = SessionLocal()
        try:
            admin_created, services_created = seed(db, config.SEED_ADMIN_EMAIL, config.SEED_ADMIN_PASSWORD)
        finally:
            db.close()
    except SQLAlchemyError:
        logger.exception('Seeding failed. Check DATABASE_URL and database credentials.')
        sys.exit(1)

    print(f"Admin created: {admin_created}; services created: {services_created}")


if __name__ == "__main__":
    main()
