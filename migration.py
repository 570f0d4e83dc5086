"""
Project migration: upserts a catalog of projects keyed by their external id.

Running the same catalog twice never duplicates a project. Each record is
handled on its own; a record that fails validation or hits a write error is
counted as skipped and the rest of the catalog still runs.

Usage:
    python migration.py                      # built-in catalog
    python migration.py --file projects.json # JSON list of projects
"""

import argparse
import json
import sys
from typing import Any, Dict, Iterable, List, Optional

from fastapi import Depends

from catalog import PROJECT_CATALOG
from config import get_settings
from database import Database
from errors import PortfolioError
from logging_config import get_logger, setup_logging
from services import ProjectService, get_project_service

logger = get_logger("migration")


class MigrationRunner:
    def __init__(self, projects: ProjectService):
        self.projects = projects

    def run(self, catalog: Iterable[Dict[str, Any]]) -> Dict[str, int]:
        self.projects.require_connection()
        added = updated = skipped = total = 0
        for seed in catalog:
            total += 1
            label = f"\"{seed.get('title')}\" (id={seed.get('id')})" if isinstance(seed, dict) else repr(seed)
            try:
                if self.projects.upsert(seed):
                    added += 1
                    logger.info("Added project %s", label)
                else:
                    updated += 1
                    logger.info("Updated project %s", label)
            except PortfolioError as exc:
                skipped += 1
                logger.warning("Skipped project %s: %s", label, exc.message)
        logger.info("Migration finished: added=%d updated=%d skipped=%d total=%d", added, updated, skipped, total)
        return {"added": added, "updated": updated, "skipped": skipped, "total": total}


def get_migration_runner(projects: ProjectService = Depends(get_project_service)) -> MigrationRunner:
    return MigrationRunner(projects)


def load_catalog(path: Optional[str]) -> List[Dict[str, Any]]:
    if not path:
        return list(PROJECT_CATALOG)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of projects")
    return data


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Upsert portfolio projects into MongoDB")
    parser.add_argument("--file", help="JSON file with a list of projects (default: built-in catalog)")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(settings)

    try:
        catalog = load_catalog(args.file)
    except (OSError, ValueError) as exc:
        logger.error("Cannot load catalog: %s", exc)
        return 1

    database = Database(
        settings.mongodb_uri,
        settings.mongodb_database,
        timeout_ms=settings.mongodb_timeout_ms,
    )
    if not database.connect():
        logger.error("MongoDB is not reachable at the configured MONGODB_URI")
        return 1
    try:
        MigrationRunner(ProjectService(database)).run(catalog)
    finally:
        database.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
