"""Example: use the service layer directly (no Flask).

Controllers stay thin; the attendance rules live in the services.
"""

import importlib

from config import get_settings_module

from src.kiosk_attendance.kiosk_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    student, action = container.attendance_service.next_action_for("1001")
    print(f"{student.display_name}: next action is {action.value}")

    print(container.reconciliation_service.system_check_stats(days=7).to_dict())


if __name__ == "__main__":
    main()
