from sqlalchemy import create_engine, inspect, text

from vetclinic import database


def _reset_schema_flags(monkeypatch, engine) -> None:
    monkeypatch.setattr(database, 'engine', engine)
    monkeypatch.setattr(database, '_appointment_schema_checked', False)
    monkeypatch.setattr(database, '_reminder_schema_checked', False)


def test_build_engine_disables_same_thread_check_for_sqlite() -> None:
    engine = database.build_engine('sqlite:///:memory:')

    assert engine.dialect.name == 'sqlite'
    engine.dispose()


def test_ensure_schema_is_a_no_op_without_tables(monkeypatch) -> None:
    engine = create_engine('sqlite:///:memory:')
    _reset_schema_flags(monkeypatch, engine)

    database.ensure_schema()

    assert database._appointment_schema_checked is True
    assert database._reminder_schema_checked is True
    assert inspect(engine).get_table_names() == []


def test_ensure_appointment_schema_adds_missing_columns(monkeypatch) -> None:
    engine = create_engine('sqlite:///:memory:')
    with engine.begin() as connection:
        connection.execute(text(
            'CREATE TABLE appointments (id INTEGER PRIMARY KEY, start_time TIMESTAMP, end_time TIMESTAMP, status VARCHAR)'
        ))
    _reset_schema_flags(monkeypatch, engine)

    database.ensure_appointment_schema()

    columns = {column['name'] for column in inspect(engine).get_columns('appointments')}
    indexes = {index['name'] for index in inspect(engine).get_indexes('appointments')}
    assert {'notes', 'updated_at'} <= columns
    assert {'idx_appointments_time_range', 'idx_appointments_status_start'} <= indexes


def test_ensure_reminder_schema_backfills_status_from_sent_flag(monkeypatch) -> None:
    engine = create_engine('sqlite:///:memory:')
    with engine.begin() as connection:
        connection.execute(text('CREATE TABLE reminders (id INTEGER PRIMARY KEY, message TEXT, remind_at TIMESTAMP, sent BOOLEAN)'))
        connection.execute(text("INSERT INTO reminders (id, message, sent) VALUES (1, 'done', 1), (2, 'todo', 0)"))
    _reset_schema_flags(monkeypatch, engine)

    database.ensure_reminder_schema()

    with engine.connect() as connection:
        rows = dict(connection.execute(text('SELECT id, status FROM reminders ORDER BY id')).all())
    assert rows == {1: 'SENT', 2: 'PENDING'}


def test_ensure_reminder_schema_runs_once(monkeypatch) -> None:
    engine = create_engine('sqlite:///:memory:')
    _reset_schema_flags(monkeypatch, engine)
    monkeypatch.setattr(database, '_reminder_schema_checked', True)

    def fail_inspect(_engine):
        raise AssertionError('schema should not be inspected again')

    monkeypatch.setattr(database, 'inspect', fail_inspect)

    database.ensure_reminder_schema()
