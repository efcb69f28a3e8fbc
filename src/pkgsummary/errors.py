# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error types and structured diagnostics for pkg_summary parsing."""

from dataclasses import dataclass, field
from typing import Literal

RejectionKind = Literal[
    "unknown_field",
    "invalid_integer",
    "malformed_package_name",
    "malformed_line",
    "invalid_encoding",
    "validation_failure",
]


class SummaryError(ValueError):
    """Represent any pkg_summary data error."""

    kind: RejectionKind


class FieldError(SummaryError):
    """Represent a recoverable failure to apply one ``KEY=VALUE`` pair.

    Attributes:
        key: Field key as read from the input.
        value: Raw field value.
    """

    def __init__(self, key: str, value: str, message: str) -> None:
        super().__init__(message)
        self.key = key
        self.value = value


class UnknownFieldError(FieldError):
    """Represent a key that is not part of the pkg_summary format."""

    kind: RejectionKind = "unknown_field"

    def __init__(self, key: str, value: str) -> None:
        super().__init__(key, value, f"Unhandled key {key!r}")


class InvalidIntegerError(FieldError):
    """Represent a numeric field whose value is not a signed 64-bit integer."""

    kind: RejectionKind = "invalid_integer"

    def __init__(self, key: str, value: str) -> None:
        super().__init__(key, value, f"Invalid integer for {key}: {value!r}")


class MalformedPackageNameError(FieldError):
    """Represent a ``PKGNAME`` value without a base/version separator."""

    kind: RejectionKind = "malformed_package_name"

    def __init__(self, key: str, value: str) -> None:
        super().__init__(
            key, value, f"Package name has no version separator: {value!r}"
        )


class MalformedLineError(SummaryError):
    """Represent a record line that has no ``=`` delimiter.

    Attributes:
        line: Offending line.
        line_no: Line number within the record (1-based).
        field_errors: Field errors collected on earlier lines of the record.
    """

    kind: RejectionKind = "malformed_line"

    def __init__(
        self,
        line: str,
        line_no: int,
        field_errors: list[tuple[int, FieldError]] | None = None,
    ) -> None:
        super().__init__(f"Invalid pkg_summary line {line_no}: {line!r}")
        self.line = line
        self.line_no = line_no
        self.field_errors = field_errors or []


class InvalidEncodingError(SummaryError):
    """Represent record bytes that are not valid UTF-8.

    Attributes:
        record_index: Stream-wide index of the offending record.
        offset: Byte offset of the first invalid byte within the record.
    """

    kind: RejectionKind = "invalid_encoding"

    def __init__(self, record_index: int, offset: int, reason: str) -> None:
        super().__init__(
            f"Invalid pkg_summary stream: record {record_index} is not valid "
            f"UTF-8 at byte {offset} ({reason})"
        )
        self.record_index = record_index
        self.offset = offset


class ValidationError(SummaryError):
    """Represent a completed record that lacks a required field.

    Attributes:
        field: Key of the first missing required field.
    """

    kind: RejectionKind = "validation_failure"

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing {field}")
        self.field = field


@dataclass(frozen=True)
class Rejection:
    """Describe one discarded field or record.

    Attributes:
        kind: Error category.
        record_index: Stream-wide, zero-based index of the affected record.
        message: Human readable reason.
        line_no: Line within the record (1-based); ``None`` for record-level issues.
        key: Offending or missing field key, when known.
        pkgname: ``PKGNAME`` of the record at the time of rejection, when known.
        record_dropped: Whether the whole record was discarded.
    """

    kind: RejectionKind
    record_index: int
    message: str
    line_no: int | None = None
    key: str | None = None
    pkgname: str | None = None
    record_dropped: bool = False


@dataclass(frozen=True)
class IngestOutcome:
    """Summarize one ``SummaryStream.write`` call.

    Attributes:
        bytes_consumed: Number of bytes accepted; always the full input length.
        records_parsed: Complete records found in this call.
        records_accepted: Records that passed validation and were kept.
        records_rejected: Records that were discarded.
        rejections: Every field- and record-level rejection, in input order.
    """

    bytes_consumed: int
    records_parsed: int = 0
    records_accepted: int = 0
    records_rejected: int = 0
    rejections: tuple[Rejection, ...] = field(default_factory=tuple)
