"""
Main entry point for the cue sheet service.

Provides a command line interface to check, reformat and dump CUE sheets.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import structlog
from dotenv import load_dotenv

from .config import ServiceConfig, get_config
from .cue_handler import CueParser, CueParsingError, CueSerializationError, CueSheet, CueSheetSerializer

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_IO_ERROR = 2


# Configure structured logging
def setup_logging(config: ServiceConfig) -> None:
    """Configure structured logging for the service."""
    renderer = structlog.processors.JSONRenderer() if config.log_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, config.log_level.upper()),
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the command line argument parser."""
    parser = argparse.ArgumentParser(prog="cuesheet", description="Tolerant CUE sheet reader and formatter")
    parser.add_argument("--encoding", help="Encoding of the CUE file (default: auto-detect)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Parse a CUE file and report diagnostics")
    check.add_argument("cue_file", type=Path, help="CUE file to check")
    check.add_argument("--strict", action="store_true", help="Treat warnings as failures")

    fmt = subparsers.add_parser("format", help="Rewrite a CUE file in canonical form")
    fmt.add_argument("cue_file", type=Path, help="CUE file to format")
    fmt.add_argument("--indent", help="Indentation per nesting level (default: two spaces)")
    fmt.add_argument("--output", "-o", type=Path, help="Write to this file instead of stdout")

    dump = subparsers.add_parser("dump", help="Print a CUE file as JSON")
    dump.add_argument("cue_file", type=Path, help="CUE file to dump")

    return parser


def _print_diagnostics(cue_sheet: CueSheet) -> None:
    for message in cue_sheet.messages:
        print(message, file=sys.stderr)


def run_check(args: argparse.Namespace, cue_sheet: CueSheet) -> int:
    _print_diagnostics(cue_sheet)
    print(
        f"{args.cue_file}: {cue_sheet.get_track_count()} tracks, "
        f"{len(cue_sheet.warnings)} warnings, {len(cue_sheet.errors)} errors"
    )

    if cue_sheet.errors or (args.strict and cue_sheet.warnings):
        return EXIT_DIAGNOSTICS
    return EXIT_OK


def run_format(args: argparse.Namespace, cue_sheet: CueSheet, config: ServiceConfig) -> int:
    _print_diagnostics(cue_sheet)
    serializer = CueSheetSerializer(indentation=args.indent, config=config.serializer)

    if args.output is not None:
        serializer.write_file(cue_sheet, args.output)
    else:
        sys.stdout.write(serializer.serialize(cue_sheet))
    return EXIT_OK


def run_dump(args: argparse.Namespace, cue_sheet: CueSheet) -> int:
    print(json.dumps(cue_sheet.to_dict(), indent=2, ensure_ascii=False))
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Main function to run the cue sheet command line tool."""
    load_dotenv()
    config = get_config()

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Invalid configuration: {error}", file=sys.stderr)
        return EXIT_IO_ERROR

    setup_logging(config)
    logger = structlog.get_logger(__name__)

    args = build_arg_parser().parse_args(argv)
    parser = CueParser(config=config.parser)

    try:
        cue_sheet = parser.parse_file(args.cue_file, encoding=args.encoding)
    except CueParsingError as e:
        logger.error("Failed to read CUE file", cue_file=str(args.cue_file), error=str(e))
        return EXIT_IO_ERROR

    logger.debug("Parsed CUE file", cue_file=str(args.cue_file), messages=len(cue_sheet.messages))

    if args.command == "check":
        return run_check(args, cue_sheet)
    if args.command == "dump":
        return run_dump(args, cue_sheet)

    try:
        return run_format(args, cue_sheet, config)
    except CueSerializationError as e:
        logger.error("Failed to write CUE file", output=str(args.output), error=str(e))
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
