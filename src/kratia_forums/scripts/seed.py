"""Create the Agora forum, its category and the constitution if they are missing."""
from __future__ import annotations

import argparse
import logging

from kratia_forums.core.settings import settings
from kratia_forums.db.session import SessionLocal, create_tables
from kratia_forums.services.bootstrap import seed_defaults


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the governance defaults")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables from the models first (development databases only).",
    )
    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level.upper())

    if args.create_tables:
        create_tables()
    with SessionLocal() as session:
        created = seed_defaults(session)
    print(f"[seed] created: {', '.join(created) or 'nothing, already seeded'}")


if __name__ == "__main__":
    main()
