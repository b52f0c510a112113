from __future__ import annotations

import argparse
import importlib
import logging

from dotenv import load_dotenv

from event_attendance.config import get_settings_module
from event_attendance.database.bootstrap import ensure_admin

logger = logging.getLogger("seed_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    parser = argparse.ArgumentParser(description="Create or promote the admin organizer account.")
    parser.add_argument("--email", default=getattr(settings, "ADMIN_EMAIL", ""))
    parser.add_argument("--name", default="Administrator")
    args = parser.parse_args()

    if not args.email:
        parser.error("--email is required (or set ADMIN_EMAIL)")

    db_config = dict(settings.DB_CONFIG)
    ensure_admin(db_config, email=args.email.strip().lower(), full_name=args.name)
    logger.info("Seeded admin %s -> %s/%s", args.email, db_config.get("host"), db_config.get("database"))


if __name__ == "__main__":
    main()
