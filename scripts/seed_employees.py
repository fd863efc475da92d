#!/usr/bin/env python3
"""Seed the Cosmos DB employees container from a JSON file.

Run from the repository root:

    python3 scripts/seed_employees.py employees.json [--dry-run] [--verbose]

The file holds a JSON array of employee objects using either snake_case
(``hire_date``) or document keys (``hireDate``). Rows that fail validation or
whose email already exists are skipped and counted; nothing is overwritten.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from pydantic import ValidationError  # noqa: E402

from employee_manager.core.config import Settings  # noqa: E402
from employee_manager.core.errors import ConflictError, TransportError  # noqa: E402
from employee_manager.models.employee import EmployeeCreate  # noqa: E402
from employee_manager.services.employee_store import EmployeeStore  # noqa: E402

logger = logging.getLogger(__name__)

_DOCUMENT_KEYS = {"hireDate": "hire_date"}


def parse_employee(row: dict[str, Any]) -> EmployeeCreate:
    data = {_DOCUMENT_KEYS.get(key, key): value for key, value in row.items() if key != "id"}
    return EmployeeCreate(**data)


def load_rows(path: str) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8") as fh:
        rows = json.load(fh)
    if not isinstance(rows, list):
        raise ValueError(f"{path}: expected a JSON array of employees")
    return [row for row in rows if isinstance(row, dict)]


async def seed_rows(
    store: EmployeeStore,
    rows: list[dict[str, Any]],
    *,
    dry_run: bool = False,
) -> dict[str, int]:
    counts = {"created": 0, "duplicate": 0, "invalid": 0, "failed": 0}
    # Emails accepted so far during a dry run, which never writes to the store.
    planned_emails: set[str] = set()

    for index, row in enumerate(rows, start=1):
        try:
            employee = parse_employee(row)
        except ValidationError as err:
            logger.warning("Row %d is invalid: %s", index, err.errors()[0]["msg"])
            counts["invalid"] += 1
            continue

        if dry_run:
            if employee.email in planned_emails:
                logger.info("Row %d skipped: %s already seen in this file", index, employee.email)
                counts["duplicate"] += 1
            else:
                planned_emails.add(employee.email)
                counts["created"] += 1
            continue

        try:
            employee_id = await store.insert(employee)
        except ConflictError:
            logger.info("Row %d skipped: %s already exists", index, employee.email)
            counts["duplicate"] += 1
        except TransportError:
            logger.exception("Row %d failed — continuing...", index)
            counts["failed"] += 1
        else:
            logger.debug("Row %d created as %s", index, employee_id)
            counts["created"] += 1

    return counts


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed employees into Cosmos DB from a JSON file")
    parser.add_argument("path", help="JSON file containing an array of employees")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate rows without writing to Cosmos DB",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


async def seed(args: argparse.Namespace) -> dict[str, int]:
    settings = Settings()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    rows = load_rows(args.path)
    logger.info("Loaded %d rows from %s", len(rows), args.path)

    store = EmployeeStore()
    if not args.dry_run:
        await store.initialize(settings)
        if not store.initialized:
            logger.error("Cosmos DB is not configured. Set COSMOS_DB_ENDPOINT and COSMOS_DB_KEY.")
            return {}

    try:
        counts = await seed_rows(store, rows, dry_run=args.dry_run)
    finally:
        await store.close()

    logger.info("=" * 50)
    logger.info("Seeding complete!")
    for key, value in counts.items():
        logger.info("%s: %d", key.capitalize(), value)
    if args.dry_run:
        logger.info("[DRY RUN] No employees were actually written.")
    return counts


def main() -> None:
    args = parse_args()
    asyncio.run(seed(args))


if __name__ == "__main__":
    main()
