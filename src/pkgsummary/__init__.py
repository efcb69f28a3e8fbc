# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for pkg_summary(5) parsing."""

from pkgsummary.errors import (
    FieldError,
    IngestOutcome,
    InvalidEncodingError,
    InvalidIntegerError,
    MalformedLineError,
    MalformedPackageNameError,
    Rejection,
    SummaryError,
    UnknownFieldError,
    ValidationError,
)
from pkgsummary.fields import FIELD_SPECS, FieldSpec, parse_entry, split_pkgname
from pkgsummary.model import Summary
from pkgsummary.stream import SummaryStream, parse_record
from pkgsummary.validator import is_valid, missing_fields, validate_summary

__all__ = [
    "FIELD_SPECS",
    "FieldError",
    "FieldSpec",
    "IngestOutcome",
    "InvalidEncodingError",
    "InvalidIntegerError",
    "MalformedLineError",
    "MalformedPackageNameError",
    "Rejection",
    "Summary",
    "SummaryError",
    "SummaryStream",
    "UnknownFieldError",
    "ValidationError",
    "is_valid",
    "missing_fields",
    "parse_entry",
    "parse_record",
    "split_pkgname",
    "validate_summary",
]
