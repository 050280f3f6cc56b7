"""Example: use the service layer directly, without Flask.

Controllers stay thin; the rules (windows, scoping, scoring) live in services.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.guild_attendance.guild_attendance.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, options=vars(settings))

    for main_event in container.main_service.list_mains():
        print(f"{main_event['mainID']:>3}  {main_event['name']}")

    owner = container.auth_service.authenticate(settings.OWNER_USERNAME, settings.OWNER_PASSWORD)
    for row in container.shift_report_service.stats(owner):
        print(f"{row.username or '-':<20} entries={row.total_entries} score={row.cumulative_score}")


if __name__ == "__main__":
    main()
