from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_otc.attendance_otc.database.bootstrap import apply_sql_file, ensure_demo_staff


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    # Demo members first, then staff accounts with real password hashes
    apply_sql_file(db_config, sql_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_staff(db_config)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    print("    staff logins: admin/admin123, staff/staff123")


if __name__ == "__main__":
    main()
