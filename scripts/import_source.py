"""Import the events published at a calendar URL from the command line."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from contextlib import suppress

from eventhub.db import database
from eventhub.services.importer import import_source


logger = logging.getLogger("eventhub.scripts.import_source")


# Access SessionLocal dynamically so test fixtures that rebind the
# sessionmaker are respected.
SessionLocal = lambda: database.SessionLocal()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import events from an iCalendar or hCalendar URL")
    parser.add_argument("url", help="Source URL to fetch")
    parser.add_argument(
        "--include-past",
        action="store_true",
        help="Also import events that ended before today",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and parse the source without saving anything",
    )
    return parser.parse_args(argv)


def run(url: str, *, include_past: bool = False, dry_run: bool = False) -> int:
    database._ensure_sqlite_schema()
    session = SessionLocal()
    try:
        started = time.perf_counter()
        logger.info("Source import starting", extra={"source_url": url, "dry_run": dry_run})
        result = import_source(session, url, skip_old=not include_past, dry_run=dry_run)
        print(result.message, file=sys.stdout if result.ok else sys.stderr)
        logger.info(
            "Source import finished",
            extra={
                "source_url": url,
                "status": result.status,
                "event_count": len(result.events),
                "duration_seconds": round(time.perf_counter() - started, 3),
            },
        )
        return 0 if result.ok else 1
    finally:
        with suppress(Exception):
            session.close()


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    return run(args.url, include_past=args.include_past, dry_run=args.dry_run)


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
