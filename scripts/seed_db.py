from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.guild_attendance.guild_attendance.database.bootstrap import seed_defaults


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    owner_username = getattr(settings, "OWNER_USERNAME", None)
    owner_password = getattr(settings, "OWNER_PASSWORD", None)
    if not owner_username or not owner_password:
        print("WARN: OWNER_USERNAME / OWNER_PASSWORD not set, only mains will be seeded", file=sys.stderr)

    added = seed_defaults(
        db_config,
        owner_username=owner_username,
        owner_password=owner_password,
        owner_email=getattr(settings, "OWNER_EMAIL", None),
    )
    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(new mains={added})"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
