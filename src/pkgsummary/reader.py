# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Feed pkg_summary files into a ``SummaryStream``."""

import bz2
import gzip
import logging
import lzma
from pathlib import Path
from typing import BinaryIO

from pkgsummary.stream import EncodingPolicy, SummaryStream

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def open_summary(path: Path) -> BinaryIO:
    """Open a plain or compressed pkg_summary file for binary reading.

    ``.gz``, ``.bz2`` and ``.xz`` files are decompressed transparently.

    Args:
        path: File to open.

    Returns:
        Binary file object; the caller closes it.

    Raises:
        OSError: If the file cannot be opened.
    """
    suffix = path.suffix.lower()
    if suffix == ".gz":
        return gzip.open(path, "rb")
    if suffix == ".bz2":
        return bz2.open(path, "rb")
    if suffix == ".xz":
        return lzma.open(path, "rb")
    return path.open("rb")


def read_into(
    stream: SummaryStream, source: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> int:
    """Copy a binary source into a stream chunk by chunk.

    Args:
        stream: Target stream.
        source: Binary file object to read until EOF.
        chunk_size: Maximum bytes per ``write`` call.

    Returns:
        Total number of bytes read.

    Raises:
        ValueError: If ``chunk_size`` is not greater than zero.
        InvalidEncodingError: If the stream halts on invalid UTF-8.
        OSError: If reading fails.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    total = 0
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        total += stream.write(chunk)
    return total


def read_summary_file(
    path: Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_invalid_encoding: EncodingPolicy = "halt",
) -> tuple[SummaryStream, int]:
    """Parse a whole pkg_summary file.

    Args:
        path: Plain or compressed pkg_summary file.
        chunk_size: Maximum bytes per ``write`` call.
        on_invalid_encoding: Stream policy for records that are not UTF-8.

    Returns:
        The populated stream and the number of (decompressed) bytes read.

    Raises:
        ValueError: If ``chunk_size`` or ``on_invalid_encoding`` is invalid.
        InvalidEncodingError: If the stream halts on invalid UTF-8.
        OSError: If the file cannot be read or decompressed.
        zlib.error: If a gzip member holds a corrupted deflate stream.
    """
    stream = SummaryStream(on_invalid_encoding=on_invalid_encoding)
    with open_summary(path) as source:
        bytes_read = read_into(stream, source, chunk_size=chunk_size)
    if stream.pending_bytes:
        logger.warning(
            f"Ignoring incomplete trailing record (path={path} bytes={stream.pending_bytes})"
        )
    logger.info(
        f"Parsed pkg_summary (path={path} bytes={bytes_read} "
        f"records={len(stream.entries_mut())} rejected={stream.records_rejected})"
    )
    return stream, bytes_read
