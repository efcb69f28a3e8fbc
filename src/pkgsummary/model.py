# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain model for one pkg_summary(5) entry."""

from dataclasses import asdict, dataclass, field
from typing import Any

from pkgsummary.fields import parse_entry


@dataclass
class Summary:
    """Represent one package's pkg_summary(5) metadata.

    Required scalars default to ``""`` and are filled in line by line.
    Optional scalars are ``None`` until their key is seen, so ``SIZE_PKG=0``
    and a missing ``SIZE_PKG`` stay distinguishable. Integers are kept within
    the signed 64-bit range so they can be stored as SQLite INTEGER values.

    Attributes:
        build_date: ``BUILD_DATE``.
        categories: ``CATEGORIES`` lines in arrival order.
        comment: ``COMMENT``.
        conflicts: ``CONFLICTS`` lines.
        depends: ``DEPENDS`` lines.
        description: ``DESCRIPTION`` lines, empty lines included.
        file_cksum: ``FILE_CKSUM``.
        file_name: ``FILE_NAME``.
        file_size: ``FILE_SIZE``.
        homepage: ``HOMEPAGE``.
        license: ``LICENSE``.
        machine_arch: ``MACHINE_ARCH``.
        opsys: ``OPSYS``.
        os_version: ``OS_VERSION``.
        pkg_options: ``PKG_OPTIONS``.
        pkgname: ``PKGNAME``, full name including version.
        pkgbase: Name part of ``PKGNAME`` (before the last ``-``).
        pkgversion: Version part of ``PKGNAME`` (after the last ``-``).
        pkgpath: ``PKGPATH``.
        pkgtools_version: ``PKGTOOLS_VERSION``.
        prev_pkgpath: ``PREV_PKGPATH``.
        provides: ``PROVIDES`` lines.
        requires: ``REQUIRES`` lines.
        size_pkg: ``SIZE_PKG``; ``0`` is valid for meta-packages.
        supersedes: ``SUPERSEDES`` lines.
        automatic: ``1`` when pulled in as a dependency, ``0`` otherwise.
            Not part of pkg_summary(5).
    """

    build_date: str = ""
    categories: list[str] = field(default_factory=list)
    comment: str = ""
    conflicts: list[str] = field(default_factory=list)
    depends: list[str] = field(default_factory=list)
    description: list[str] = field(default_factory=list)
    file_cksum: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    homepage: str | None = None
    license: str | None = None
    machine_arch: str = ""
    opsys: str = ""
    os_version: str = ""
    pkg_options: str | None = None
    pkgname: str = ""
    pkgbase: str = ""
    pkgversion: str = ""
    pkgpath: str = ""
    pkgtools_version: str = ""
    prev_pkgpath: str | None = None
    provides: list[str] = field(default_factory=list)
    requires: list[str] = field(default_factory=list)
    size_pkg: int | None = None
    supersedes: list[str] = field(default_factory=list)
    automatic: int = 0

    def parse_entry(self, key: str, value: str) -> None:
        """Apply one ``KEY=VALUE`` pair to this summary.

        Args:
            key: Field key.
            value: Raw field value.

        Raises:
            FieldError: If the key is unknown or the value cannot be parsed.
        """
        parse_entry(self, key, value)

    def set_automatic(self) -> None:
        """Mark the package as automatically installed as a dependency."""
        self.automatic = 1

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of all fields."""
        return asdict(self)
