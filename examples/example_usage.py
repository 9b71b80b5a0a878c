"""Example: drive the check-in flow through the service layer (no Flask).

Needs a database prepared with scripts/init_db.py and scripts/seed_db.py.
With MAIL_SERVER unset the code is only written to the log.
"""

import importlib
import logging

from config import get_settings_module

from src.attendance_otc.attendance_otc.container import build_container


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    active = container.session_registry.get_active_session()
    if not active:
        active = container.session_registry.open_session("Example session", None, opener_id=1)
    print("active session:", active)

    result = container.verification_service.request_code("CS101")
    print("code expires at:", result.expires_at)

    code = input("code from the log: ")
    print(container.verification_service.verify_code("CS101", code))


if __name__ == "__main__":
    main()
