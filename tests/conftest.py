import sys
from collections.abc import Callable
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

RECORD_DEFAULTS: dict[str, str] = {
    "BUILD_DATE": "2019-08-14 00:00:00 +0000",
    "CATEGORIES": "test",
    "COMMENT": "This is a test",
    "DESCRIPTION": "A test description",
    "MACHINE_ARCH": "x86_64",
    "OPSYS": "Darwin",
    "OS_VERSION": "18.7.0",
    "PKGNAME": "pkgtest-1.0",
    "PKGPATH": "category/pkgtest",
    "PKGTOOLS_VERSION": "20190405",
    "SIZE_PKG": "1234",
}


@pytest.fixture
def make_record() -> Callable[..., str]:
    """Return a builder for one valid pkg_summary record text.

    Keyword overrides replace a field, add an extra ``KEY=VALUE`` line, or
    drop the field when set to ``None``. The text ends with the blank line.
    """

    def _record(**overrides: str | None) -> str:
        fields: dict[str, str | None] = dict(RECORD_DEFAULTS)
        fields.update(overrides)
        lines = [f"{key}={value}" for key, value in fields.items() if value is not None]
        return "\n".join(lines) + "\n\n"

    return _record
