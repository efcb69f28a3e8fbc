# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Database backends for pkg_summary runs."""

from pkgsummary.database.sqlite import SQLitePersistence

__all__ = ["SQLitePersistence"]
