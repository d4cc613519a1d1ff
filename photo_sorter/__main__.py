"""Entry point for Photo Sorter.

Usage:
    python -m photo_sorter -s SOURCE -t TARGET [options]
"""

import argparse
import logging
import sys
from pathlib import Path

from photo_sorter import __app_name__, __version__

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photo-sorter",
        description="Copy new photos from SOURCE into TARGET/YYYY folders as they arrive",
    )
    parser.add_argument(
        "-s",
        dest="source_folder",
        metavar="SOURCE",
        help="source directory where photos are uploaded",
    )
    parser.add_argument(
        "-t",
        dest="target_folder",
        metavar="TARGET",
        help="target directory in which year directories are created",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON settings file (command-line options take precedence)",
    )
    parser.add_argument("--log-file", help="also log to this rotating log file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="logging level (default INFO)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="same as --log-level DEBUG",
    )
    parser.add_argument(
        "--retry-failed",
        action="store_true",
        default=None,
        help="retry files whose copy failed on the next pass instead of marking them seen",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{__app_name__} {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse the command line, run the sorter and exit with its status."""
    from photo_sorter.app import EXIT_FAILURE, App, setup_logging
    from photo_sorter.config import Config
    from photo_sorter.errors import SorterError

    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = {
        "source_folder": args.source_folder,
        "target_folder": args.target_folder,
        "log_file": args.log_file,
        "log_level": "DEBUG" if args.verbose else args.log_level,
        "retry_failed": args.retry_failed,
    }
    config = Config(args.config, overrides)
    setup_logging(config)

    if not config.is_configured():
        parser.print_usage(sys.stderr)
        logger.error("Source and Target paths must both be provided")
        sys.exit(EXIT_FAILURE)

    try:
        app = App(config)
    except SorterError as exc:
        logger.critical("%s; no cache directory available", exc)
        sys.exit(EXIT_FAILURE)
    sys.exit(app.run())


if __name__ == "__main__":
    main()
