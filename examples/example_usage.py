"""Example: drive the service layer directly (no Flask).

Registers a hospital at a fixed position, adds a staff member, runs one
shift from 600 m away and prints the resulting report rows.
"""

import importlib
from datetime import datetime, timedelta

from config import get_settings_module

from src.mediguard.mediguard.container import build_container
from src.mediguard.mediguard.geo.location import SubmittedPositionProvider
from src.mediguard.mediguard.geo.model import Coordinate
from src.mediguard.mediguard.storage.kv import InMemoryStore


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings, store=InMemoryStore())

    center = SubmittedPositionProvider(Coordinate(10.7769, 106.7009))
    hospital = container.hospital_service.register(
        name="City General",
        registration_number="REG-001",
        username="citygeneral",
        password="secret1",
        log_view_password="logs1",
        provider=center,
    )
    nurse = container.user_service.create_staff(hospital_id=hospital.id, name="Lan", pin="4321", username="lan")

    start = datetime.now().astimezone().replace(hour=8, minute=20, second=0, microsecond=0)
    far_away = SubmittedPositionProvider(Coordinate(10.7823, 106.7009))
    shift = container.attendance_service.check_in(nurse, hospital, far_away, now=start)
    print("check-in:", shift.warning or "inside geofence")

    done = container.attendance_service.check_out(shift.record, nurse, center, now=start + timedelta(hours=8))
    print("check-out duration:", done.record.duration_minutes, "min")

    for row in container.report_service.build_report(hospital.id).rows:
        print(row.to_dict())


if __name__ == "__main__":
    main()
