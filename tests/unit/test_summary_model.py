import pytest

from pkgsummary.errors import (
    InvalidIntegerError,
    MalformedPackageNameError,
    UnknownFieldError,
    ValidationError,
)
from pkgsummary.fields import FIELD_SPECS, parse_entry, parse_int64, split_pkgname
from pkgsummary.model import Summary
from pkgsummary.validator import is_valid, missing_fields, validate_summary


def _valid_summary() -> Summary:
    summary = Summary()
    for key, value in [
        ("BUILD_DATE", "2019-08-14 00:00:00 +0000"),
        ("CATEGORIES", "test"),
        ("COMMENT", "This is a test"),
        ("DESCRIPTION", "A test description"),
        ("MACHINE_ARCH", "x86_64"),
        ("OPSYS", "Darwin"),
        ("OS_VERSION", "18.7.0"),
        ("PKGNAME", "pkgtest-1.0"),
        ("PKGPATH", "category/pkgtest"),
        ("PKGTOOLS_VERSION", "20190405"),
        ("SIZE_PKG", "1234"),
    ]:
        summary.parse_entry(key, value)
    return summary


def test_fld_001_field_table_covers_every_pkg_summary_key() -> None:
    assert sorted(FIELD_SPECS) == [
        "BUILD_DATE",
        "CATEGORIES",
        "COMMENT",
        "CONFLICTS",
        "DEPENDS",
        "DESCRIPTION",
        "FILE_CKSUM",
        "FILE_NAME",
        "FILE_SIZE",
        "HOMEPAGE",
        "LICENSE",
        "MACHINE_ARCH",
        "OPSYS",
        "OS_VERSION",
        "PKGNAME",
        "PKGPATH",
        "PKGTOOLS_VERSION",
        "PKG_OPTIONS",
        "PREV_PKGPATH",
        "PROVIDES",
        "REQUIRES",
        "SIZE_PKG",
        "SUPERSEDES",
    ]


@pytest.mark.parametrize(
    ("pkgname", "pkgbase", "pkgversion"),
    [
        ("pkgtest-1.0", "pkgtest", "1.0"),
        ("foo-bar-2.3.1", "foo-bar", "2.3.1"),
        ("py311-setuptools-69.0.3nb1", "py311-setuptools", "69.0.3nb1"),
    ],
)
def test_fld_002_pkgname_splits_on_last_separator(
    pkgname: str, pkgbase: str, pkgversion: str
) -> None:
    summary = Summary()

    parse_entry(summary, "PKGNAME", pkgname)

    assert summary.pkgname == pkgname
    assert summary.pkgbase == pkgbase
    assert summary.pkgversion == pkgversion


def test_fld_003_pkgname_without_separator_leaves_fields_unset() -> None:
    summary = Summary()

    with pytest.raises(MalformedPackageNameError) as excinfo:
        parse_entry(summary, "PKGNAME", "noversion")

    assert excinfo.value.key == "PKGNAME"
    assert excinfo.value.value == "noversion"
    assert (summary.pkgname, summary.pkgbase, summary.pkgversion) == ("", "", "")


def test_fld_004_bad_pkgname_keeps_previous_value() -> None:
    summary = Summary()
    parse_entry(summary, "PKGNAME", "good-1.0")

    with pytest.raises(MalformedPackageNameError):
        parse_entry(summary, "PKGNAME", "bad")

    assert summary.pkgname == "good-1.0"
    assert summary.pkgversion == "1.0"


def test_fld_005_unknown_key_raises_and_leaves_summary_untouched() -> None:
    summary = Summary()

    with pytest.raises(UnknownFieldError) as excinfo:
        parse_entry(summary, "EXTRA_FIELD", "x")

    assert excinfo.value.key == "EXTRA_FIELD"
    assert summary == Summary()


def test_fld_006_keys_match_exactly() -> None:
    summary = Summary()

    with pytest.raises(UnknownFieldError):
        parse_entry(summary, "comment", "lower case")
    with pytest.raises(UnknownFieldError):
        parse_entry(summary, "+REQUIRES", "/usr/lib/libSystem.B.dylib")


@pytest.mark.parametrize("value", ["abc", "", " 12", "12 ", "1_000", "1.5", "0x10"])
def test_fld_007_invalid_integers_are_rejected(value: str) -> None:
    summary = Summary()

    with pytest.raises(InvalidIntegerError):
        parse_entry(summary, "SIZE_PKG", value)

    assert summary.size_pkg is None


def test_fld_008_integer_range_is_signed_64_bit() -> None:
    assert parse_int64("FILE_SIZE", "9223372036854775807") == 2**63 - 1
    assert parse_int64("FILE_SIZE", "-9223372036854775808") == -(2**63)
    assert parse_int64("FILE_SIZE", "+42") == 42
    with pytest.raises(InvalidIntegerError):
        parse_int64("FILE_SIZE", "9223372036854775808")


def test_fld_009_zero_size_is_present_not_absent() -> None:
    summary = Summary()

    parse_entry(summary, "SIZE_PKG", "0")
    parse_entry(summary, "FILE_SIZE", "0")

    assert summary.size_pkg == 0
    assert summary.size_pkg is not None
    assert summary.file_size == 0


def test_fld_010_scalars_use_last_value() -> None:
    summary = Summary()

    parse_entry(summary, "COMMENT", "first")
    parse_entry(summary, "COMMENT", "second")
    parse_entry(summary, "HOMEPAGE", "https://a.example/")
    parse_entry(summary, "HOMEPAGE", "https://b.example/")
    parse_entry(summary, "PKGNAME", "a-1")
    parse_entry(summary, "PKGNAME", "b-2")

    assert summary.comment == "second"
    assert summary.homepage == "https://b.example/"
    assert (summary.pkgname, summary.pkgbase, summary.pkgversion) == ("b-2", "b", "2")


def test_fld_011_repeated_fields_append_in_order_with_duplicates() -> None:
    summary = Summary()

    for value in ["first", "", "first", "last"]:
        parse_entry(summary, "DESCRIPTION", value)
    parse_entry(summary, "DEPENDS", "zlib>=1.2")
    parse_entry(summary, "DEPENDS", "openssl>=3")
    parse_entry(summary, "DEPENDS", "zlib>=1.2")

    assert summary.description == ["first", "", "first", "last"]
    assert summary.depends == ["zlib>=1.2", "openssl>=3", "zlib>=1.2"]


def test_fld_012_optional_strings_distinguish_empty_from_absent() -> None:
    summary = Summary()

    parse_entry(summary, "PKG_OPTIONS", "")

    assert summary.pkg_options == ""
    assert summary.license is None


def test_fld_013_split_pkgname_keeps_parts_verbatim() -> None:
    assert split_pkgname("foo-") == ("foo", "")
    assert split_pkgname("-1.0") == ("", "1.0")


def test_mod_001_automatic_flag_defaults_to_zero() -> None:
    summary = Summary()
    assert summary.automatic == 0

    summary.set_automatic()

    assert summary.automatic == 1


def test_mod_002_to_dict_contains_every_field() -> None:
    payload = _valid_summary().to_dict()

    assert payload["pkgbase"] == "pkgtest"
    assert payload["size_pkg"] == 1234
    assert payload["file_size"] is None
    assert payload["categories"] == ["test"]


def test_val_001_complete_summary_is_valid() -> None:
    summary = _valid_summary()

    validate_summary(summary)

    assert is_valid(summary)
    assert missing_fields(summary) == []


def test_val_002_missing_size_pkg_is_invalid_but_zero_is_valid() -> None:
    summary = _valid_summary()
    summary.size_pkg = None

    with pytest.raises(ValidationError) as excinfo:
        validate_summary(summary)
    assert excinfo.value.field == "SIZE_PKG"

    summary.size_pkg = 0
    assert is_valid(summary)


@pytest.mark.parametrize(
    ("attribute", "empty", "key"),
    [
        ("build_date", "", "BUILD_DATE"),
        ("categories", [], "CATEGORIES"),
        ("comment", "", "COMMENT"),
        ("description", [], "DESCRIPTION"),
        ("machine_arch", "", "MACHINE_ARCH"),
        ("opsys", "", "OPSYS"),
        ("os_version", "", "OS_VERSION"),
        ("pkgname", "", "PKGNAME"),
        ("pkgpath", "", "PKGPATH"),
        ("pkgtools_version", "", "PKGTOOLS_VERSION"),
    ],
)
def test_val_003_each_required_field_is_enforced(
    attribute: str, empty: object, key: str
) -> None:
    summary = _valid_summary()
    setattr(summary, attribute, empty)

    with pytest.raises(ValidationError) as excinfo:
        validate_summary(summary)

    assert excinfo.value.field == key
    assert str(excinfo.value) == f"Missing {key}"


def test_val_004_validation_stops_at_first_missing_field() -> None:
    summary = Summary()

    with pytest.raises(ValidationError) as excinfo:
        validate_summary(summary)

    assert excinfo.value.field == "BUILD_DATE"
    assert missing_fields(summary)[0] == "BUILD_DATE"
    assert missing_fields(summary)[-1] == "SIZE_PKG"
    assert len(missing_fields(summary)) == 11


def test_val_005_description_with_only_empty_line_is_present() -> None:
    summary = _valid_summary()
    summary.description = [""]

    assert is_valid(summary)
