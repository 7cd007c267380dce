"""Command-line entry for calmaker.

Examples:
  python -m calmaker expand schedule.yaml --start 2024-01-01 --end 2024-01-31
  python -m calmaker export schedule.yaml --output schedule.ics
  python -m calmaker export schedule.yaml --individual --title "Spring Term"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional

from . import _init_logging
from .config_loader import Config, load_config, load_yaml_file
from .date_utils import WEEKDAY_NAMES, format_date, format_time_12h, weekday_index
from .exceptions import CalmakerError
from .exporter import export_individual, export_single, write_calendar
from .ics_encoder import CalendarEncoder
from .logging_config import configure_logging
from .occurrences import sort_occurrences
from .recurrence_expander import expand
from .template_store import TemplateStore

logger = logging.getLogger("calmaker.cli")


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the calmaker CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="calmaker",
        description="CalMaker - expand recurring calendar templates and export them as iCalendar",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", metavar="PATH", help="YAML config file (default: ./calmaker.yaml)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    expand_parser = subparsers.add_parser("expand", help="List occurrences inside a date range")
    expand_parser.add_argument("templates", help="YAML or JSON file with a list of templates")
    expand_parser.add_argument("--start", required=True, help="First date (YYYY-MM-DD, inclusive)")
    expand_parser.add_argument("--end", required=True, help="Last date (YYYY-MM-DD, inclusive)")
    expand_parser.add_argument("--json", action="store_true", help="Print occurrences as JSON")

    export_parser = subparsers.add_parser("export", help="Encode templates as iCalendar")
    export_parser.add_argument("templates", help="YAML or JSON file with a list of templates")
    export_parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write a single .ics to PATH ('-' for stdout)",
    )
    export_parser.add_argument(
        "--individual",
        action="store_true",
        help="Write one .ics per course group into a zip archive",
    )
    export_parser.add_argument("--title", default="calendar", help="Title used in generated file names")
    export_parser.add_argument("--dir", metavar="DIR", help="Export directory (default: config export_dir)")
    export_parser.add_argument(
        "--stamp",
        metavar="ISO",
        help="Fixed generation timestamp for DTSTAMP (ISO 8601), for reproducible output",
    )

    return parser


def load_templates(path: str) -> TemplateStore:
    """Load a template file into a new TemplateStore.

    The file holds either a list of template mappings or a mapping with a
    ``templates`` list.

    Raises:
        CalmakerError: If the file is unreadable or has the wrong shape
    """
    raw = load_yaml_file(Path(path))
    if isinstance(raw, dict):
        raw = raw.get("templates", [])
    if not isinstance(raw, list):
        raise CalmakerError(f"{path}: expected a list of templates")
    store = TemplateStore.from_dicts(raw)
    logger.debug("Loaded %d template(s) from %s", len(store), path)
    return store


def _describe_time(start_time: Optional[str], end_time: Optional[str], all_day: bool) -> str:
    if all_day:
        return "All day"
    if start_time and end_time:
        return f"{format_time_12h(start_time)} - {format_time_12h(end_time)}"
    return format_time_12h(start_time)


def _run_expand(args: argparse.Namespace, config: Config) -> int:
    store = load_templates(args.templates)
    instances = sort_occurrences(
        expand(store, args.start, args.end, max_steps=config.max_expansion_steps)
    )

    if args.json:
        print(json.dumps([i.model_dump(mode="json") for i in instances], indent=2))
        return 0

    for instance in instances:
        day = instance.occurrence_date
        when = _describe_time(instance.start_time, instance.end_time, instance.all_day)
        print(f"{format_date(day)} {WEEKDAY_NAMES[weekday_index(day)]}  {when:<20} {instance.title}")
    logger.info("%d occurrence(s) between %s and %s", len(instances), args.start, args.end)
    return 0


def _run_export(args: argparse.Namespace, config: Config) -> int:
    store = load_templates(args.templates)
    encoder = CalendarEncoder.from_config(config)
    generated_at = datetime.fromisoformat(args.stamp) if args.stamp else None

    if args.output == "-":
        sys.stdout.write(encoder.encode(store, generated_at=generated_at))
        sys.stdout.write("\r\n")
        return 0

    if args.output:
        path = write_calendar(store, Path(args.output), encoder=encoder, generated_at=generated_at)
        logger.info("Wrote %s", path)
        return 0

    directory = Path(args.dir or config.export_dir)
    export = export_individual if args.individual else export_single
    path = export(store, directory, args.title, encoder=encoder, generated_at=generated_at)
    if path is None:
        logger.warning("No templates to export")
        return 1
    print(path)
    return 0


def run(argv: Optional[list[str]] = None) -> int:
    """Parse arguments and run a subcommand, returning the exit status."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except CalmakerError as e:
        _init_logging("INFO")
        logger.error("%s", e)
        return 1

    _init_logging("DEBUG" if args.debug else config.log_level)
    configure_logging(debug_mode=args.debug, base_level=config.log_level)

    try:
        if args.command == "expand":
            return _run_expand(args, config)
        return _run_export(args, config)
    except CalmakerError as e:
        logger.error("%s", e)
        return 1
    except ValueError as e:
        # bad --stamp values
        logger.error("Invalid argument: %s", e)
        return 2


def main() -> NoReturn:
    """Run the calmaker CLI."""
    sys.exit(run())


if __name__ == "__main__":
    main()
