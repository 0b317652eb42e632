"""CLI commands for reading Anki packages."""

import logging
import argparse
import sys
from pathlib import Path
from typing import List, Optional

import toml

from .config import DankiConfig
from .export import save_csv, strip_markup
from .loader import PackageLoader
from .models import BatchResult
from .study import collect_tags, filter_by_tags
from danki.common import setup_logging, ConfigLoader, ConfigurationError

APP_NAME = "danki"


def progress_callback(logger: logging.Logger, current: int, total: int, name: str) -> None:
    """Log loading progress.

    Args:
        logger: Logger instance
        current: Current package number (1-based)
        total: Total number of packages
        name: Name of current package
    """
    if current > total:
        logger.info(f"Loading complete: {total} package(s) processed")
    else:
        percent = (current / total) * 100 if total > 0 else 0
        logger.info(f"Loading package {current}/{total} ({percent:.1f}%): {name}")


def _load(
    logger: logging.Logger,
    files: List[Path],
    row_limit: int
) -> Optional[BatchResult]:
    missing = [path for path in files if not path.is_file()]
    if missing:
        for path in missing:
            logger.error(f"Package file does not exist: {path}")
        return None

    loader = PackageLoader(row_limit=row_limit)
    result = loader.load_paths(
        files,
        progress_callback=lambda c, t, n: progress_callback(logger, c, t, n)
    )

    for failure in result.failures:
        logger.warning(f"Skipped {failure}")

    if not result.ok:
        logger.error(f"Loading failed: {result.error}")
        return None

    return result


def list_command(
    config: DankiConfig,
    files: List[Path],
    show_manifest: bool = False
) -> int:
    """Print the cards of the given packages.

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__package__ or __name__)

    result = _load(logger, files, config.reader.row_limit)
    if result is None:
        return 1

    print(f"Found {len(result.cards)} cards")
    for card in result.cards:
        print()
        print(f"[{card.key}]")
        print(f"Front: {strip_markup(card.front)}")
        print(f"Back:  {strip_markup(card.back)}")
        if card.tags:
            print(f"Tags:  {' '.join(card.tags)}")

    if show_manifest:
        print()
        print("Files in archive:")
        for entry in result.manifest:
            print(f"  {entry}")

    return 0


def tags_command(config: DankiConfig, files: List[Path]) -> int:
    """Print the distinct tags of the given packages.

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__package__ or __name__)

    result = _load(logger, files, config.reader.row_limit)
    if result is None:
        return 1

    tags = collect_tags(result.cards)
    if not tags:
        logger.info("No tags found in these packages")
    for tag in tags:
        print(tag)

    return 0


def export_command(
    config: DankiConfig,
    files: List[Path],
    tags: Optional[List[str]] = None,
    output_dir_override: Optional[Path] = None,
    filename_override: Optional[str] = None
) -> int:
    """Export the cards of the given packages as CSV.

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__package__ or __name__)

    output_dir = output_dir_override if output_dir_override else Path(config.export.output_dir)
    filename = filename_override if filename_override else config.export.filename

    result = _load(logger, files, config.reader.row_limit)
    if result is None:
        return 1

    cards = filter_by_tags(result.cards, tags or [])
    if tags:
        logger.info(f"{len(cards)}/{len(result.cards)} card(s) match tags: {', '.join(tags)}")

    try:
        path = save_csv(cards, output_dir, filename)
    except OSError as e:
        logger.error(f"Cannot write export file: {e}")
        return 1

    print(path)
    return 0


def config_command(loader: ConfigLoader, config: DankiConfig, action: str) -> int:
    """Print the merged configuration or store it as the user config.

    Command line overrides such as ``--row-limit`` are included, so
    ``danki --row-limit 200 config save`` makes the limit permanent.

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__package__ or __name__)

    if action == "show":
        print(toml.dumps(config.model_dump(exclude_none=True)), end="")
        return 0

    try:
        path = loader.save_user_config(config)
    except OSError as e:
        logger.error(f"Cannot write user config: {e}")
        return 1

    logger.info(f"Saved configuration to {path}")
    print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Browse and export Anki .apkg packages"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--row-limit",
        type=int,
        help="Maximum cards read per package (overrides config)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Print cards")
    list_parser.add_argument("files", type=Path, nargs="+", help=".apkg files")
    list_parser.add_argument(
        "--manifest",
        action="store_true",
        help="Also print the files found in each package"
    )

    tags_parser = subparsers.add_parser("tags", help="Print distinct tags")
    tags_parser.add_argument("files", type=Path, nargs="+", help=".apkg files")

    export_parser = subparsers.add_parser("export", help="Export cards to CSV")
    export_parser.add_argument("files", type=Path, nargs="+", help=".apkg files")
    export_parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory to write the CSV file to (overrides config)"
    )
    export_parser.add_argument(
        "--filename",
        help="CSV file name (overrides config)"
    )
    export_parser.add_argument(
        "--tag",
        dest="tags",
        action="append",
        default=[],
        help="Only export cards with this tag (repeatable)"
    )

    config_parser = subparsers.add_parser("config", help="Show or save the effective configuration")
    config_parser.add_argument(
        "action",
        choices=["show", "save"],
        help="show: print as TOML; save: write to the user config file"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the danki command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    loader = ConfigLoader(app_name=APP_NAME, config_class=DankiConfig)
    try:
        config = loader.load(defaults_path=args.config)
    except ConfigurationError as e:
        print(f"{APP_NAME}: {e.message}", file=sys.stderr)
        return 1

    if args.row_limit is not None:
        if args.row_limit < 1:
            parser.error("--row-limit must be positive")
        config.reader.row_limit = args.row_limit

    setup_logging(config.logging)

    if args.command == "config":
        return config_command(loader, config, args.action)
    if args.command == "list":
        return list_command(config, args.files, show_manifest=args.manifest)
    if args.command == "tags":
        return tags_command(config, args.files)
    return export_command(
        config,
        args.files,
        tags=args.tags,
        output_dir_override=args.output_dir,
        filename_override=args.filename,
    )


if __name__ == "__main__":
    sys.exit(main())
