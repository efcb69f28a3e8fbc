# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CLI harness for pkg_summary parsing and loading."""

import argparse
import json
import logging
import lzma
import sys
import zlib
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

from pkgsummary.database import SQLitePersistence
from pkgsummary.errors import InvalidEncodingError, Rejection
from pkgsummary.model import Summary
from pkgsummary.persistence import PersistenceError, PersistRunInput
from pkgsummary.reader import DEFAULT_CHUNK_SIZE, read_summary_file
from pkgsummary.stream import ENCODING_POLICIES, SummaryStream

logger = logging.getLogger(__name__)

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "pkgname": 3,
    "pkgpath": 3,
    "opsys": 1,
    "os_version": 1,
    "machine_arch": 1,
    "size_pkg": 1,
    "comment": 5,
}

UNCATEGORIZED = "(none)"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="pkgsummary")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse")
    _add_input_arguments(parse_parser)
    parse_parser.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format.",
    )
    parse_parser.add_argument(
        "--output",
        required=False,
        help="Optional output file path for raw JSON when --format json is used.",
    )

    load_parser = subparsers.add_parser("load")
    _add_input_arguments(load_parser)
    load_parser.add_argument("--db", required=True, help="SQLite database path.")
    return parser


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--path",
        required=True,
        help="pkg_summary file to read (.gz, .bz2 and .xz are decompressed).",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help="Bytes fed to the parser per write.",
    )
    parser.add_argument(
        "--on-invalid-encoding",
        choices=ENCODING_POLICIES,
        default="halt",
        help="Stop at the first non UTF-8 record, or discard it and continue.",
    )


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.command == "parse":
        return _run_parse(args=args, stdout=stdout, stderr=stderr)
    if args.command == "load":
        return _run_load(args=args, stdout=stdout, stderr=stderr)

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _read_stream(
    args: argparse.Namespace, stderr: TextIO
) -> tuple[SummaryStream, int] | None:
    """Parse the input file named on the command line.

    Args:
        args: Parsed CLI arguments.
        stderr: Standard error stream.

    Returns:
        The populated stream and bytes read, or ``None`` when reading failed.
    """
    source_path = Path(args.path)
    if not source_path.exists():
        logger.warning(f"Path does not exist (path={source_path})")
        stderr.write(f"Path does not exist: {source_path}\n")
        return None
    if args.chunk_size <= 0:
        logger.warning(f"Invalid chunk size (chunk_size={args.chunk_size})")
        stderr.write("chunk-size must be > 0\n")
        return None

    try:
        return read_summary_file(
            source_path,
            chunk_size=args.chunk_size,
            on_invalid_encoding=args.on_invalid_encoding,
        )
    except InvalidEncodingError as exc:
        stderr.write(f"Invalid pkg_summary stream: {exc}\n")
        return None
    except (OSError, EOFError, lzma.LZMAError, zlib.error) as exc:
        logger.warning(f"Failed to read input (path={source_path} error={exc})")
        stderr.write(f"Failed to read input: {source_path}\n")
        return None


def _run_parse(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run parse command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    result = _read_stream(args=args, stderr=stderr)
    if result is None:
        return 2
    stream, _ = result
    summaries = stream.entries_mut()
    rejections = stream.rejections
    _write_rejections(rejections=rejections, stderr=stderr)
    if args.format == "json":
        if args.output:
            try:
                _write_json_file(
                    summaries=summaries,
                    rejections=rejections,
                    output_path=Path(args.output),
                )
            except OSError as exc:
                logger.warning(
                    f"Failed to write JSON output file (output_path={args.output} error={exc})"
                )
                stderr.write(f"Failed to write JSON output file: {args.output}\n")
                return 2
        else:
            _write_json(summaries=summaries, rejections=rejections, stdout=stdout)
    else:
        _write_table(summaries=summaries, stdout=stdout)
    return 0


def _run_load(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run load command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    result = _read_stream(args=args, stderr=stderr)
    if result is None:
        return 2
    stream, bytes_read = result
    _write_rejections(rejections=stream.rejections, stderr=stderr)

    persistence = SQLitePersistence(db_path=Path(args.db))
    try:
        persisted = persistence.persist_run(
            PersistRunInput(
                source_path=str(Path(args.path).resolve()),
                bytes_read=bytes_read,
                rejected_count=stream.records_rejected,
                summaries=stream.take_entries(),
            )
        )
    except PersistenceError as exc:
        stderr.write(f"Failed to persist run: {exc}\n")
        return 2

    logger.info(
        f"Load completed (db={args.db} run_id={persisted.run_id} "
        f"packages={persisted.package_count} rejected={persisted.rejected_count})"
    )
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        f"run_id={persisted.run_id} packages={persisted.package_count} "
        f"rejected={persisted.rejected_count} status={persisted.status}",
        markup=False,
        highlight=False,
    )
    return 0


def _write_rejections(rejections: list[Rejection], stderr: TextIO) -> None:
    """Write rejected fields and records to stderr.

    Args:
        rejections: Rejections recorded while parsing.
        stderr: Standard error stream.
    """
    for rejection in rejections:
        stderr.write(f"rejected: {rejection}\n")


def _build_payload(
    summaries: list[Summary], rejections: list[Rejection]
) -> dict[str, list[dict]]:
    return {
        "records": [summary.to_dict() for summary in summaries],
        "rejections": [asdict(rejection) for rejection in rejections],
    }


def _write_json(
    summaries: list[Summary], rejections: list[Rejection], stdout: TextIO
) -> None:
    """Write summaries and rejections in JSON format.

    Args:
        summaries: Parsed summaries.
        rejections: Rejections recorded while parsing.
        stdout: Standard output stream.
    """
    payload = _build_payload(summaries=summaries, rejections=rejections)
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(
        json.dumps(payload, indent=2, sort_keys=True),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _write_json_file(
    summaries: list[Summary], rejections: list[Rejection], output_path: Path
) -> None:
    """Write raw JSON payload to an output file.

    Args:
        summaries: Parsed summaries.
        rejections: Rejections recorded while parsing.
        output_path: Target file path.

    Raises:
        OSError: If directory creation or file writing fails.
    """
    payload = _build_payload(summaries=summaries, rejections=rejections)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
    )


def _write_table(summaries: list[Summary], stdout: TextIO) -> None:
    """Write summaries as one table per primary category.

    Args:
        summaries: Parsed summaries.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    summaries_by_category: dict[str, list[Summary]] = {}
    for summary in summaries:
        category = summary.categories[0] if summary.categories else UNCATEGORIZED
        summaries_by_category.setdefault(category, []).append(summary)

    for category in sorted(summaries_by_category):
        console.rule(f"{category}", style=Style(color="cyan"), characters="-")
        table = Table(show_header=True, show_lines=True, expand=True)
        for column, ratio in TABLE_COLUMN_RATIOS.items():
            table.add_column(
                column,
                ratio=ratio,
                justify="right" if column == "size_pkg" else "left",
                overflow="fold",
            )
        for summary in summaries_by_category[category]:
            table.add_row(
                *(str(getattr(summary, column)) for column in TABLE_COLUMN_RATIOS)
            )
        console.print(table)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
