"""CLI commands for parsing logs and serving results."""

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

from mafialog.collector.processor import LogsProcessor, parsed_log_name, write_timeline
from mafialog.config.logging import get_logger, setup_logging
from mafialog.config.settings import Settings
from mafialog.core.timeline import Timeline
from mafialog.parser.log_parser import MafiaLogParser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings.from_args(
        logs_dir=getattr(args, "logs_dir", None),
        output_dir=getattr(args, "output", None),
        no_notes=args.no_notes,
        debug=args.debug,
        old_ascension_counting=args.old_ascension_counting,
        natural_turn_iteration=args.natural_turn_iteration,
    )


def _parse_single(args: argparse.Namespace) -> tuple[Settings, Timeline]:
    settings = _settings_from_args(args)
    return settings, MafiaLogParser(Path(args.file), settings).parse()


def print_summary(timeline: Timeline) -> None:
    """Print the totals of a parsed log to console."""
    summary = timeline.summary
    print(f"Log: {timeline.log_name}")
    print(
        f"Class: {timeline.character_class}  Path: {timeline.ascension_path}  "
        f"Mode: {timeline.game_mode}"
    )
    print("-" * 60)
    print(f"  Turns:          {summary.total_turns}")
    print(f"  Free turns:     {summary.free_turns}")
    print(f"  Free runaways:  {summary.runaways}")
    print(f"  Days:           {len(timeline.day_changes)}")
    print(f"  Level reached:  {timeline.last_level.level_number}")
    print(f"  Meat gained:    {summary.meat.total_gained:,}  spent: {summary.meat.spent_meat:,}")
    stats = summary.stat_gain
    print(f"  Substats:       {stats.muscle}/{stats.mysticality}/{stats.moxie}")
    print(f"  Items dropped:  {sum(summary.dropped_items.values())}")

    if summary.turns_per_day:
        print("\nTurns per day:")
        for day, turns in summary.turns_per_day.items():
            print(f"  Day {day}: {turns}")

    if summary.turns_per_area:
        print("\nTop areas:")
        top_areas = sorted(summary.turns_per_area.items(), key=lambda x: x[1], reverse=True)
        for area, turns in top_areas[:10]:
            print(f"  {area[:40]:<40} {turns:>5}")
    print("-" * 60)


def cmd_parse_file(args: argparse.Namespace) -> int:
    """Parse a single log and print its summary."""
    log_path = Path(args.file)
    if not log_path.exists():
        print(f"Error: Log file not found: {log_path}")
        return 1

    print(f"Parsing: {log_path}")
    settings, timeline = _parse_single(args)
    print_summary(timeline)

    if args.output:
        output_dir = settings.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / parsed_log_name(log_path.name)
        write_timeline(timeline, output_path)
        print(f"Wrote {output_path}")
    return 0


def cmd_batch(args: argparse.Namespace) -> int:
    """Parse every log in a directory."""
    settings = _settings_from_args(args)
    errors = settings.validate()
    if errors:
        for error in errors:
            print(f"Error: {error}")
        return 1

    processor = LogsProcessor(settings)
    failed = processor.process(logs_to_parse=args.limit)

    if failed:
        print(f"\n{len(failed)} log(s) could not be parsed:")
        for error in failed:
            print(
                f"  {error.log_name}: stopped at turn {error.last_turn_number} "
                f"({error.last_area_name})"
            )
        return 1

    print(f"Output written to {settings.output_dir}")
    return 0


def cmd_show_turns(args: argparse.Namespace) -> int:
    """List the turns of a log."""
    log_path = Path(args.file)
    if not log_path.exists():
        print(f"Error: Log file not found: {log_path}")
        return 1

    _, timeline = _parse_single(args)
    turns = timeline.turns
    if args.day is not None:
        turns = tuple(t for t in turns if t.day_number == args.day)

    if not turns:
        print("No turns recorded")
        return 0

    print(f"Turns ({len(turns)}):")
    print("-" * 72)
    for turn in turns[: args.limit]:
        free_str = "[free] " if turn.is_free_turn else ""
        print(
            f"  D{turn.day_number} #{turn.turn_number:4} {free_str}"
            f"{turn.area_name[:30]:<30} {turn.encounter_name[:28]}"
        )
    print("-" * 72)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Parse a log and serve it over HTTP."""
    level = logging.DEBUG if args.debug else logging.INFO
    logger = setup_logging(console=True, level=level)

    # Import here to avoid loading uvicorn when not needed
    try:
        import uvicorn
        from mafialog.api.app import create_app
    except ImportError:
        logger.error("Uvicorn is required for the serve command.")
        logger.error("Install with: pip install mafialog[server]")
        return 1

    log_path = Path(args.file)
    if not log_path.exists():
        logger.error(f"Log file not found: {log_path}")
        return 1

    _, timeline = _parse_single(args)
    app = create_app(timeline, log_path=log_path)

    url = f"http://{args.host}:{args.port}/docs"
    if not args.no_browser:
        logger.info(f"Opening browser at {url}")
        webbrowser.open(url)

    logger.info(f"Starting server on port {args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="warning", log_config=None)
    return 0


def _add_parse_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-notes",
        action="store_true",
        help="Ignore mafia log notes",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Write a block dump next to each log",
    )
    parser.add_argument(
        "--old-ascension-counting",
        action="store_true",
        help="Read whole logs instead of stopping at the end of the ascension",
    )
    parser.add_argument(
        "--natural-turn-iteration",
        action="store_true",
        help="Keep duplicate turn numbers where they first appeared",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mafialog",
        description="KoLmafia ascension log parser",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to the console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # parse-file command
    parse_parser = subparsers.add_parser("parse-file", help="Parse a log file")
    parse_parser.add_argument("file", type=str, help="Condensed session log to parse")
    parse_parser.add_argument(
        "--output",
        type=str,
        help="Also write the parsed log as JSON to this directory",
    )
    _add_parse_flags(parse_parser)

    # batch command
    batch_parser = subparsers.add_parser("batch", help="Parse every log in a directory")
    batch_parser.add_argument("logs_dir", type=str, help="Directory with condensed logs")
    batch_parser.add_argument(
        "--output",
        type=str,
        help="Output directory (default: per-user data directory)",
    )
    batch_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Parse at most this many logs",
    )
    _add_parse_flags(batch_parser)

    # show-turns command
    turns_parser = subparsers.add_parser("show-turns", help="List the turns of a log")
    turns_parser.add_argument("file", type=str, help="Condensed session log to parse")
    turns_parser.add_argument(
        "--day",
        type=int,
        default=None,
        help="Only show turns of this day",
    )
    turns_parser.add_argument(
        "--limit",
        type=int,
        default=200,
        help="Number of turns to show (default: 200)",
    )
    _add_parse_flags(turns_parser)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start web server")
    serve_parser.add_argument("file", type=str, help="Condensed session log to serve")
    serve_parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )
    serve_parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't open the API docs in a browser",
    )
    _add_parse_flags(serve_parser)

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command != "serve":
        setup_logging(console=True, level=logging.DEBUG if args.verbose else logging.WARNING)
    get_logger(__name__).debug(f"Running command {args.command}")

    commands = {
        "parse-file": cmd_parse_file,
        "batch": cmd_batch,
        "show-turns": cmd_show_turns,
        "serve": cmd_serve,
    }

    cmd_func = commands.get(args.command)
    if cmd_func is None:
        print(f"Unknown command: {args.command}")
        return 1

    return cmd_func(args)


if __name__ == "__main__":
    sys.exit(main())
