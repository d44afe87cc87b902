"""Close every votation whose deadline has passed.

Votations normally close when someone reads them; this sweep covers the ones
nobody visits. It goes through the same guarded closure as readers, so it is
safe to run while the API is serving.
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from kratia_forums.core.errors import InfrastructureError
from kratia_forums.core.settings import settings
from kratia_forums.db.session import SessionLocal
from kratia_forums.db.time import as_utc, utcnow
from kratia_forums.services.closure import close_due_votations
from kratia_forums.services.ledger import AtomicStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Close overdue votations")
    parser.add_argument(
        "--now",
        default=None,
        help="ISO timestamp to treat as the current time (defaults to the clock)",
    )
    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level.upper())

    now = as_utc(datetime.fromisoformat(args.now)) if args.now else utcnow()
    with SessionLocal() as session:
        try:
            closed = close_due_votations(AtomicStore(session), now=now)
        except InfrastructureError as exc:
            print(f"[close_due] ERROR: {exc.detail}", file=sys.stderr)
            sys.exit(1)
    print(f"[close_due] examined {len(closed)} overdue votation(s)")


if __name__ == "__main__":
    main()
