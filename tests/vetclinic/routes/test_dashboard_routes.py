from datetime import datetime, timedelta

from vetclinic.routes.dashboard_routes import dashboard_metrics
from vetclinic.scheduling.enums import AppointmentStatus


def test_dashboard_metrics_counts_clients_animals_and_upcoming_visits(
    db, admin_user, client_user, animal, service_60, add_appointment
) -> None:
    soon = datetime.now().replace(second=0, microsecond=0) + timedelta(days=1)
    add_appointment(soon, soon + timedelta(hours=1), service_60)
    add_appointment(soon + timedelta(days=30), soon + timedelta(days=30, hours=1), service_60)
    add_appointment(
        soon - timedelta(days=400),
        soon - timedelta(days=400) + timedelta(hours=1),
        service_60,
        status=AppointmentStatus.COMPLETED,
    )

    metrics = dashboard_metrics(db=db, current_user=admin_user)

    assert metrics.total_clients == 1
    assert metrics.total_animals == 1
    assert metrics.total_appointments == 3
    assert metrics.upcoming_appointments == 1
    assert metrics.monthly_revenue == 0.0
