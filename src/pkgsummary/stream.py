# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Incremental pkg_summary(5) stream parsing."""

import logging
from typing import Literal

from pkgsummary.errors import (
    FieldError,
    IngestOutcome,
    InvalidEncodingError,
    MalformedLineError,
    Rejection,
    ValidationError,
)
from pkgsummary.fields import parse_entry
from pkgsummary.model import Summary
from pkgsummary.validator import validate_summary

logger = logging.getLogger(__name__)

EncodingPolicy = Literal["halt", "discard"]

RECORD_DELIMITER = b"\n\n"
ENCODING_POLICIES: tuple[EncodingPolicy, ...] = ("halt", "discard")


def parse_record(text: str) -> tuple[Summary, list[tuple[int, FieldError]]]:
    """Build a summary from the text of one record.

    Blank lines are ignored. Each other line is split on its first ``=``.

    Args:
        text: Decoded record text without the trailing blank line.

    Returns:
        The summary and the recoverable field errors with their line numbers.

    Raises:
        MalformedLineError: If a line has no ``=``; the rest of the record is
            not read and the field errors collected so far travel on the
            exception.
    """
    summary = Summary()
    field_errors: list[tuple[int, FieldError]] = []
    for line_no, line in enumerate(text.split("\n"), start=1):
        line = line.removesuffix("\r")
        if not line:
            continue
        key, separator, value = line.partition("=")
        if not separator:
            raise MalformedLineError(
                line=line, line_no=line_no, field_errors=field_errors
            )
        try:
            parse_entry(summary, key, value)
        except FieldError as exc:
            field_errors.append((line_no, exc))
    return summary, field_errors


class SummaryStream:
    """Accumulate byte chunks and parse complete pkg_summary(5) records.

    Chunks may split records, lines or multi-byte characters anywhere; the
    parsed entries are the same as for one write of the concatenated bytes.

    Example::

        stream = SummaryStream()
        with open("pkg_summary", "rb") as source:
            for chunk in iter(lambda: source.read(65536), b""):
                stream.write(chunk)
        packages = stream.entries
    """

    def __init__(self, on_invalid_encoding: EncodingPolicy = "halt") -> None:
        """Initialize an empty stream.

        Args:
            on_invalid_encoding: ``"halt"`` stops this stream at the first
                record that is not valid UTF-8 and raises
                ``InvalidEncodingError``; ``"discard"`` rejects that record
                and keeps going.

        Raises:
            ValueError: If ``on_invalid_encoding`` is not a known policy.
        """
        if on_invalid_encoding not in ENCODING_POLICIES:
            raise ValueError(
                f"on_invalid_encoding must be one of {', '.join(ENCODING_POLICIES)}"
            )
        self._on_invalid_encoding = on_invalid_encoding
        self._buf = bytearray()
        self._start = 0
        self._entries: list[Summary] = []
        self._rejections: list[Rejection] = []
        self._records_seen = 0
        self._records_rejected = 0
        self._failure: InvalidEncodingError | None = None
        self._last_outcome = IngestOutcome(bytes_consumed=0)

    @property
    def entries(self) -> tuple[Summary, ...]:
        """Return a snapshot of the parsed, valid summaries."""
        return tuple(self._entries)

    def entries_mut(self) -> list[Summary]:
        """Return the live list of parsed summaries."""
        return self._entries

    def take_entries(self) -> list[Summary]:
        """Return the parsed summaries and clear them from the stream."""
        entries, self._entries = self._entries, []
        return entries

    @property
    def rejections(self) -> list[Rejection]:
        """Return every rejection recorded since the stream was created."""
        return list(self._rejections)

    @property
    def last_outcome(self) -> IngestOutcome:
        """Return the outcome of the latest ``write`` call."""
        return self._last_outcome

    @property
    def records_seen(self) -> int:
        return self._records_seen

    @property
    def records_rejected(self) -> int:
        return self._records_rejected

    @property
    def pending_bytes(self) -> int:
        """Return the number of buffered bytes not parsed yet."""
        return len(self._buf) - self._start

    @property
    def halted(self) -> bool:
        """Return whether an encoding error stopped this stream."""
        return self._failure is not None

    def write(self, data: bytes) -> int:
        """Buffer ``data`` and parse every record it completes.

        When the stream halts, records after the offending one are left
        unparsed in the buffer and counted by ``pending_bytes``.

        Args:
            data: Next chunk of the pkg_summary byte stream.

        Returns:
            ``len(data)``; rejected fields and records are reported through
            ``last_outcome`` and ``rejections``.

        Raises:
            InvalidEncodingError: If the stream halts on invalid UTF-8, or was
                already halted by an earlier call.
        """
        if self._failure is not None:
            raise self._failure

        previous_end = len(self._buf)
        self._buf += data
        # The retained tail holds no delimiter, only new data can complete one.
        search_from = max(self._start, previous_end - 1)
        last = self._buf.rfind(RECORD_DELIMITER, search_from)
        if last == -1:
            self._last_outcome = IngestOutcome(bytes_consumed=len(data))
            return len(data)

        end = last + len(RECORD_DELIMITER)
        pieces = bytes(self._buf[self._start : end]).split(RECORD_DELIMITER)
        # Trailing piece is empty, or a lone newline from a run of three.
        pieces.pop()

        rejections: list[Rejection] = []
        parsed = accepted = rejected = 0
        offset = self._start
        try:
            for raw in pieces:
                offset += len(raw) + len(RECORD_DELIMITER)
                # Line numbers count from the first non-blank line.
                raw = raw.lstrip(b"\n")
                if not raw.strip(b"\r\n"):
                    continue
                parsed += 1
                try:
                    kept = self._consume_record(raw, rejections)
                except InvalidEncodingError:
                    rejected += 1
                    self._start = offset
                    raise
                if kept:
                    accepted += 1
                else:
                    rejected += 1
        finally:
            self._last_outcome = IngestOutcome(
                bytes_consumed=len(data),
                records_parsed=parsed,
                records_accepted=accepted,
                records_rejected=rejected,
                rejections=tuple(rejections),
            )
        self._start = end
        self._compact()
        return len(data)

    def flush(self) -> None:
        """Do nothing; records are parsed as soon as they are complete."""

    def _consume_record(self, raw: bytes, rejections: list[Rejection]) -> bool:
        """Parse, validate and store one record.

        Args:
            raw: Record bytes without the delimiter.
            rejections: Per-call rejection list to extend.

        Returns:
            True when the record was kept.

        Raises:
            InvalidEncodingError: If the record is not UTF-8 and the policy is
                ``"halt"``.
        """
        record_index = self._records_seen
        self._records_seen += 1

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            error = InvalidEncodingError(
                record_index=record_index, offset=exc.start, reason=exc.reason
            )
            self._reject(
                rejections,
                Rejection(
                    kind=error.kind,
                    record_index=record_index,
                    message=str(error),
                    record_dropped=True,
                ),
            )
            self._records_rejected += 1
            if self._on_invalid_encoding == "halt":
                logger.error(f"Halting pkg_summary stream (record={record_index})")
                self._failure = error
                raise error from exc
            return False

        try:
            summary, field_errors = parse_record(text)
        except MalformedLineError as exc:
            self._reject_fields(rejections, record_index, exc.field_errors, None)
            self._reject(
                rejections,
                Rejection(
                    kind=exc.kind,
                    record_index=record_index,
                    message=str(exc),
                    line_no=exc.line_no,
                    record_dropped=True,
                ),
            )
            self._records_rejected += 1
            return False

        pkgname = summary.pkgname or None
        self._reject_fields(rejections, record_index, field_errors, pkgname)

        try:
            validate_summary(summary)
        except ValidationError as exc:
            self._reject(
                rejections,
                Rejection(
                    kind=exc.kind,
                    record_index=record_index,
                    message=str(exc),
                    key=exc.field,
                    pkgname=pkgname,
                    record_dropped=True,
                ),
            )
            self._records_rejected += 1
            return False

        self._entries.append(summary)
        return True

    def _reject_fields(
        self,
        rejections: list[Rejection],
        record_index: int,
        field_errors: list[tuple[int, FieldError]],
        pkgname: str | None,
    ) -> None:
        for line_no, field_error in field_errors:
            self._reject(
                rejections,
                Rejection(
                    kind=field_error.kind,
                    record_index=record_index,
                    message=str(field_error),
                    line_no=line_no,
                    key=field_error.key,
                    pkgname=pkgname,
                ),
            )

    def _reject(self, rejections: list[Rejection], rejection: Rejection) -> None:
        logger.warning(
            f"Rejected pkg_summary {'record' if rejection.record_dropped else 'field'} "
            f"(record={rejection.record_index} line={rejection.line_no} "
            f"key={rejection.key} pkgname={rejection.pkgname} "
            f"error={rejection.message})"
        )
        rejections.append(rejection)
        self._rejections.append(rejection)

    def _compact(self) -> None:
        """Drop the consumed prefix once it outweighs the retained tail."""
        if self._start and self._start >= len(self._buf) - self._start:
            del self._buf[: self._start]
            self._start = 0
