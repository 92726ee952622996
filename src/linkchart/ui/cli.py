# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from linkchart.app import import_file, load_options, preview_file
from linkchart.config import ConfigurationError, configure_logging
from linkchart.domain.errors import FormatError
from linkchart.domain.field_mapping import ENTITY_ROLES, LINK_ROLES, FieldMapping

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from linkchart.adapters.formats import SourcePreview

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import and canonicalize link-analysis data")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    importer = subparsers.add_parser("import", help="Import a source file")
    importer.add_argument("path", type=Path, help="Entities file (or a whole graph file)")
    importer.add_argument(
        "--links",
        type=Path,
        help="Companion links file for tabular inputs",
    )
    importer.add_argument(
        "--delimiter",
        type=str,
        help="Field delimiter for delimited files (defaults to ',' or tab for .tsv)",
    )
    importer.add_argument("--entities-sheet", type=str, help="Workbook sheet holding entities")
    importer.add_argument("--links-sheet", type=str, help="Workbook sheet holding links")
    importer.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="ROLE=COLUMN",
        help="Assign a column to a role, e.g. id=PersonID or link.source=From (repeatable)",
    )
    importer.add_argument("--source-name", type=str, help="Display name for the data source")
    importer.add_argument(
        "--options",
        type=Path,
        help="JSON file with pipeline options",
    )
    importer.add_argument(
        "--geocode",
        action="store_true",
        help="Geocode location addresses (needs LINKCHART_GEOCODER_CONTACT)",
    )
    importer.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Write the canonical graph as JSON to this file",
    )

    previewer = subparsers.add_parser("preview", help="Show headers and sample rows")
    previewer.add_argument("path", type=Path, help="Delimited or workbook file")
    previewer.add_argument(
        "--rows",
        type=int,
        default=5,
        help="Number of sample rows per sheet (default: %(default)s)",
    )
    previewer.add_argument("--delimiter", type=str, help="Field delimiter for delimited files")

    return parser.parse_args(list(argv))


def _parse_mapping(values: Sequence[str]) -> FieldMapping | None:
    """Turn ``[entity.|link.]ROLE=COLUMN`` arguments into a field mapping."""

    if not values:
        return None
    entity: dict[str, str] = {}
    link: dict[str, str] = {}
    for value in values:
        role, sep, column = value.partition("=")
        role, column = role.strip().lower(), column.strip()
        if not sep or not role or not column:
            raise ValueError(f"Invalid --map value {value!r}; expected ROLE=COLUMN")
        scope, dot, name = role.partition(".")
        if not dot:
            scope, name = "entity", role
        if scope == "entity" and name in ENTITY_ROLES:
            entity[name] = column
        elif scope == "link" and name in LINK_ROLES:
            link[name] = column
        else:
            raise ValueError(f"Unknown role {role!r} in --map {value!r}")
    return FieldMapping(entity=entity, link=link)


def _print_preview(result: SourcePreview) -> None:
    print(f"{result.path.name} ({result.format_name})")
    for sheet in result.sheets:
        print(f"\n[{sheet.name}] {sheet.row_count} row(s)")
        print("  columns: " + ", ".join(sheet.headers))
        for row in sheet.rows:
            print("  " + ", ".join(f"{key}={value!r}" for key, value in row.items()))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        mapping = None
        options = None
        if parsed_args.command == "import":
            mapping = _parse_mapping(parsed_args.map)
            if parsed_args.options is not None:
                options = load_options(parsed_args.options)
        elif parsed_args.rows < 1:
            raise ValueError("--rows must be at least 1")  # noqa: TRY301
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "import":
            outcome = import_file(
                parsed_args.path,
                links_path=parsed_args.links,
                mapping=mapping,
                delimiter=parsed_args.delimiter,
                entities_sheet=parsed_args.entities_sheet,
                links_sheet=parsed_args.links_sheet,
                source_name=parsed_args.source_name,
                options=options,
                geocode=parsed_args.geocode,
                output=parsed_args.output,
            )
            if not outcome.ok:
                sys.exit(1)
        elif parsed_args.command == "preview":
            result = preview_file(
                parsed_args.path, rows=parsed_args.rows, delimiter=parsed_args.delimiter
            )
            _print_preview(result)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except FormatError as exc:
        log.error("Cannot read input: %s", exc.message)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during import")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
