from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.college_attendance.college_attendance.database.bootstrap import ensure_demo_staff
from src.college_attendance.college_attendance.database.connection import DBConfig


def main() -> None:
    logging.basicConfig(level="INFO", format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_staff(db_config)
    print(f"OK: Demo staff seeded -> {DBConfig.from_dict(db_config).describe()}")


if __name__ == "__main__":
    main()
