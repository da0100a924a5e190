#!/usr/bin/env python3
"""CLI script to export one digitization process into the repository."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure the project source is importable when running the script directly.
_project_root = Path(__file__).resolve().parent.parent
_src = _project_root / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from arche_export.core.config import Settings  # noqa: E402
from arche_export.core.errors import InputError  # noqa: E402
from arche_export.export import export  # noqa: E402
from arche_export.workflow import load_process_context  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export a digitization process as linked resources into the repository."
    )
    parser.add_argument(
        "--process",
        type=str,
        required=True,
        help="Path to the YAML process descriptor.",
    )
    parser.add_argument(
        "--dump",
        type=str,
        default=None,
        help="Directory to write the generated Turtle files to.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build (and optionally dump) the graphs without contacting the repository.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    # Load settings from environment, then apply command line overrides.
    settings = Settings()
    if args.dump:
        settings.export.dump_folder = args.dump
    if args.dry_run:
        settings.repository.enabled = False

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        context = load_process_context(args.process)
    except InputError as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    print(f"Exporting process {context.title} ...")
    result = export(context, settings)

    for resource in result.resources:
        print(f"  {resource.outcome:<8} {resource.resource_type:<14} {resource.uri}")
    for path in result.dumped:
        print(f"  dumped {path}")

    print(f"Status: {result.status}")
    if result.message:
        print(result.message)

    # Exit code reflects the terminal status.
    sys.exit(0 if result.ok else 1)


if __name__ == "__main__":
    main()
