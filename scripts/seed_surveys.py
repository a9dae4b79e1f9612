#!/usr/bin/env python3
"""Load survey YAML definitions into the database.

Each survey is created, or overwritten when its id already exists (its
questions are replaced and its version is bumped).  The status in the
YAML file is kept unless ``--status`` overrides it.

Usage::

    # Seed every survey under surveys/
    python scripts/seed_surveys.py

    # Seed one survey as a draft
    python scripts/seed_surveys.py -s customer-pulse --status draft

    # Use a different database
    DATABASE_URL=postgresql://survey:survey@db:5432/survey python scripts/seed_surveys.py
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from survey_db.engine import dispose_engine, session_scope
from survey_runtime.constants import SURVEY_STATUSES
from survey_runtime.responses import ResponseService
from survey_runtime.store import SurveyStore


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load survey YAML definitions into the database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--survey-dir",
        default=None,
        help="Directory of survey YAML files (default: surveys/ in the repo root)",
    )
    parser.add_argument(
        "-s", "--survey",
        type=str, default=None,
        help="Only seed these surveys (comma-separated ids)",
    )
    parser.add_argument(
        "--status",
        choices=SURVEY_STATUSES,
        default=None,
        help="Override the status of every seeded survey",
    )
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    console = Console()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    store = SurveyStore(survey_dir=args.survey_dir)
    store.load()

    survey_ids = sorted(store.surveys)
    if args.survey:
        survey_ids = [s.strip() for s in args.survey.split(",")]
        for sid in survey_ids:
            if sid not in store.surveys:
                console.print(f"[red]Unknown survey:[/] '{sid}'")
                console.print(f"Available: {', '.join(sorted(store.surveys))}")
                return 1

    service = ResponseService()
    table = Table(title="Seeded surveys")
    table.add_column("Id", style="cyan")
    table.add_column("Status")
    table.add_column("Questions", justify="right")

    try:
        async with session_scope() as db:
            for sid in survey_ids:
                status = args.status or store.statuses[sid]
                await service.save_definition(db, store.get(sid), status)
                table.add_row(sid, status, str(len(store.get(sid).questions)))
    finally:
        await dispose_engine()

    console.print(table)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
