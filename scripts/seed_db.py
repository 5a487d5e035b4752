from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.geosales.geosales.common.log import configure_logging
from src.geosales.geosales.core.settings import engine_settings_from
from src.geosales.geosales.database.bootstrap import ensure_demo_users


def main() -> None:
    configure_logging()
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    engine = engine_settings_from(settings)

    added = ensure_demo_users(db_config, radius_meters=engine.territory_radius_meters)
    print(
        "OK: Seeded demo users -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(added={added})"
    )


if __name__ == "__main__":
    main()
