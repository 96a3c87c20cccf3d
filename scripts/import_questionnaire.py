#!/usr/bin/env python
"""Import questionnaire definition files into the database.

Usage:
    python scripts/import_questionnaire.py path/to/definition.yaml
    python scripts/import_questionnaire.py --bundled      # every bundled definition
    python scripts/import_questionnaire.py def.yaml --keep-previous

Each file becomes a new, immutable questionnaire version. Importing a
code and version that already exist is refused.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from aaprp.core.exceptions import AssessmentError
from aaprp.core.logging import setup_logging
from aaprp.db.init_db import seed_questionnaires
from aaprp.db.session import AsyncSessionLocal
from aaprp.questionnaires.loader import load_questionnaire
from aaprp.services.questionnaire import QuestionnaireService


async def import_files(paths: list[Path], keep_previous: bool) -> int:
    """Import each file in its own transaction. Returns the failure count."""
    failures = 0
    async with AsyncSessionLocal() as session:
        service = QuestionnaireService(session)
        for path in paths:
            try:
                definition, definition_hash = load_questionnaire(path)
                questionnaire = await service.import_definition(
                    definition,
                    definition_hash,
                    deactivate_previous=not keep_previous,
                )
            except (AssessmentError, FileNotFoundError) as e:
                await session.rollback()
                print(f"[FAIL] {path}: {e}")
                failures += 1
                continue

            print(
                f"[OK]   {path}: {questionnaire.code} v{questionnaire.version} "
                f"({len(questionnaire.questions)} questions, id={questionnaire.id})"
            )
    return failures


async def import_bundled() -> int:
    async with AsyncSessionLocal() as session:
        imported = await seed_questionnaires(session)
    print(f"Imported {imported} bundled questionnaire(s)")
    return 0


def main() -> None:
    """Entry point for the questionnaire importer."""
    parser = argparse.ArgumentParser(description="Import AAPRP questionnaire definitions")
    parser.add_argument("paths", nargs="*", type=Path, help="Definition YAML files")
    parser.add_argument(
        "--bundled",
        action="store_true",
        help="Import the definitions shipped with the service",
    )
    parser.add_argument(
        "--keep-previous",
        action="store_true",
        help="Leave older versions of the same questionnaire active",
    )

    args = parser.parse_args()
    if not args.paths and not args.bundled:
        parser.error("give at least one definition file, or --bundled")

    setup_logging()

    failures = 0
    if args.bundled:
        failures += asyncio.run(import_bundled())
    if args.paths:
        failures += asyncio.run(import_files(args.paths, args.keep_previous))

    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
