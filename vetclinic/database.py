from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from vetclinic.core import config


def build_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(
        database_url,
        echo=config.SQL_ECHO,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False
_reminder_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes TEXT'),
            ('updated_at', 'ALTER TABLE appointments ADD COLUMN updated_at TIMESTAMP'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_time_range ON appointments(start_time, end_time)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_appointments_status_start ON appointments(status, start_time)')
            )

        _appointment_schema_checked = True


def ensure_reminder_schema() -> None:
    """Upgrade reminders tables created before the tri-state status column.

    Older rows only carry the ``sent`` flag, which meant either delivered or
    suppressed. Those rows are backfilled as SENT since the two meanings
    cannot be told apart any more.
    """
    global _reminder_schema_checked

    if _reminder_schema_checked:
        return

    with _schema_lock:
        if _reminder_schema_checked:
            return

        inspector = inspect(engine)

        if 'reminders' not in inspector.get_table_names():
            _reminder_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('reminders')}

        with engine.begin() as connection:
            if 'status' not in existing_columns:
                connection.execute(
                    text("ALTER TABLE reminders ADD COLUMN status VARCHAR(9) NOT NULL DEFAULT 'PENDING'")
                )
                if 'sent' in existing_columns:
                    connection.execute(text("UPDATE reminders SET status = 'SENT' WHERE sent = :sent"), {'sent': True})
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_reminders_status_remind_at ON reminders(status, remind_at)')
            )

        _reminder_schema_checked = True


def ensure_schema() -> None:
    ensure_appointment_schema()
    ensure_reminder_schema()
