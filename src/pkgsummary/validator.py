# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Required-field validation for completed summaries."""

import logging

from pkgsummary.errors import ValidationError
from pkgsummary.fields import FIELD_SPECS, required_keys
from pkgsummary.model import Summary

logger = logging.getLogger(__name__)


def validate_summary(summary: Summary) -> None:
    """Ensure all fields required by pkg_summary(5) are set.

    Checks stop at the first missing field.

    Args:
        summary: Completed summary.

    Raises:
        ValidationError: If a required field is missing.
    """
    for key in required_keys():
        if _is_missing(summary, key):
            raise ValidationError(key)


def missing_fields(summary: Summary) -> list[str]:
    """Return every missing required key, in validation order."""
    return [key for key in required_keys() if _is_missing(summary, key)]


def is_valid(summary: Summary) -> bool:
    """Return whether the summary passes validation."""
    try:
        validate_summary(summary)
    except ValidationError:
        return False
    return True


def _is_missing(summary: Summary, key: str) -> bool:
    value = getattr(summary, FIELD_SPECS[key].attribute)
    if value is None:
        return True
    if isinstance(value, int):
        # Present integers are never missing, zero included.
        return False
    return len(value) == 0
