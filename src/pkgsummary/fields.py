# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Field table and ``KEY=VALUE`` dispatch for pkg_summary(5) entries."""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from pkgsummary.errors import (
    InvalidIntegerError,
    MalformedPackageNameError,
    UnknownFieldError,
)

if TYPE_CHECKING:
    from pkgsummary.model import Summary

logger = logging.getLogger(__name__)

FieldKind = Literal[
    "string", "string_list", "optional_string", "optional_int", "pkgname"
]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
PKGNAME_SEPARATOR = "-"

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class FieldSpec:
    """Describe how one pkg_summary key maps onto ``Summary``.

    Attributes:
        key: Key as written in pkg_summary(5).
        attribute: ``Summary`` attribute receiving the value.
        kind: Parsing and accumulation rule.
        required: Whether validation requires the field.
    """

    key: str
    attribute: str
    kind: FieldKind
    required: bool = False


FIELD_SPECS: dict[str, FieldSpec] = {
    spec.key: spec
    for spec in (
        FieldSpec("BUILD_DATE", "build_date", "string", required=True),
        FieldSpec("CATEGORIES", "categories", "string_list", required=True),
        FieldSpec("COMMENT", "comment", "string", required=True),
        FieldSpec("CONFLICTS", "conflicts", "string_list"),
        FieldSpec("DEPENDS", "depends", "string_list"),
        FieldSpec("DESCRIPTION", "description", "string_list", required=True),
        FieldSpec("FILE_CKSUM", "file_cksum", "optional_string"),
        FieldSpec("FILE_NAME", "file_name", "optional_string"),
        FieldSpec("FILE_SIZE", "file_size", "optional_int"),
        FieldSpec("HOMEPAGE", "homepage", "optional_string"),
        FieldSpec("LICENSE", "license", "optional_string"),
        FieldSpec("MACHINE_ARCH", "machine_arch", "string", required=True),
        FieldSpec("OPSYS", "opsys", "string", required=True),
        FieldSpec("OS_VERSION", "os_version", "string", required=True),
        FieldSpec("PKG_OPTIONS", "pkg_options", "optional_string"),
        FieldSpec("PKGNAME", "pkgname", "pkgname", required=True),
        FieldSpec("PKGPATH", "pkgpath", "string", required=True),
        FieldSpec("PKGTOOLS_VERSION", "pkgtools_version", "string", required=True),
        FieldSpec("PREV_PKGPATH", "prev_pkgpath", "optional_string"),
        FieldSpec("PROVIDES", "provides", "string_list"),
        FieldSpec("REQUIRES", "requires", "string_list"),
        # SIZE_PKG is required but 0 is valid (meta-packages), see validator.
        FieldSpec("SIZE_PKG", "size_pkg", "optional_int", required=True),
        FieldSpec("SUPERSEDES", "supersedes", "string_list"),
    )
}


def parse_entry(summary: "Summary", key: str, value: str) -> None:
    """Apply one ``KEY=VALUE`` pair to a summary.

    Scalars are overwritten on every occurrence, repeated fields are appended
    in arrival order. On error the summary is left untouched.

    Args:
        summary: Summary being built.
        key: Field key, matched exactly.
        value: Raw field value.

    Raises:
        UnknownFieldError: If ``key`` is not a pkg_summary(5) key.
        InvalidIntegerError: If a numeric field is not a signed 64-bit integer.
        MalformedPackageNameError: If ``PKGNAME`` has no ``-`` separator.
    """
    spec = FIELD_SPECS.get(key)
    if spec is None:
        raise UnknownFieldError(key, value)

    if spec.kind == "string_list":
        getattr(summary, spec.attribute).append(value)
    elif spec.kind == "optional_int":
        setattr(summary, spec.attribute, parse_int64(key, value))
    elif spec.kind == "pkgname":
        pkgbase, pkgversion = split_pkgname(value)
        summary.pkgname = value
        summary.pkgbase = pkgbase
        summary.pkgversion = pkgversion
    else:
        setattr(summary, spec.attribute, value)


def parse_int64(key: str, value: str) -> int:
    """Parse a decimal signed 64-bit integer.

    Args:
        key: Field key, used for error reporting.
        value: Raw value; ASCII digits with an optional sign, no whitespace.

    Returns:
        Parsed integer.

    Raises:
        InvalidIntegerError: If the value is not numeric or out of range.
    """
    if not _INTEGER_RE.fullmatch(value):
        raise InvalidIntegerError(key, value)
    number = int(value)
    if number < INT64_MIN or number > INT64_MAX:
        raise InvalidIntegerError(key, value)
    return number


def split_pkgname(pkgname: str) -> tuple[str, str]:
    """Split a full package name into base name and version.

    The split happens on the last ``-``, so ``foo-bar-2.3.1`` yields
    ``("foo-bar", "2.3.1")``.

    Raises:
        MalformedPackageNameError: If the name contains no ``-``.
    """
    pkgbase, separator, pkgversion = pkgname.rpartition(PKGNAME_SEPARATOR)
    if not separator:
        raise MalformedPackageNameError("PKGNAME", pkgname)
    return pkgbase, pkgversion


def required_keys() -> list[str]:
    """Return required keys in validation order."""
    return [spec.key for spec in FIELD_SPECS.values() if spec.required]
