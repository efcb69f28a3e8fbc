# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""SQLite persistence for parsed pkg_summary runs."""

import logging
import sqlite3

from datetime import datetime, timezone
from pathlib import Path

from pkgsummary.model import Summary
from pkgsummary.persistence import (
    PersistRunInput,
    PersistRunResult,
    PersistenceError,
    RunStatus,
)

logger = logging.getLogger(__name__)

PACKAGE_COLUMNS: tuple[str, ...] = (
    "pkgname",
    "pkgbase",
    "pkgversion",
    "pkgpath",
    "build_date",
    "comment",
    "machine_arch",
    "opsys",
    "os_version",
    "pkgtools_version",
    "file_cksum",
    "file_name",
    "file_size",
    "homepage",
    "license",
    "pkg_options",
    "prev_pkgpath",
    "size_pkg",
    "automatic",
)

REPEATED_FIELDS: tuple[str, ...] = (
    "categories",
    "conflicts",
    "depends",
    "description",
    "provides",
    "requires",
    "supersedes",
)


class SQLitePersistence:
    """Persist parsed pkg_summary runs to a SQLite database."""

    def __init__(self, db_path: Path) -> None:
        """Initialize persistence backend.

        Args:
            db_path: SQLite database file path.
        """
        self._db_path = db_path

    def persist_run(self, payload: PersistRunInput) -> PersistRunResult:
        """Persist one run and all of its packages atomically.

        Args:
            payload: Run payload to persist.

        Returns:
            Persisted run summary.

        Raises:
            PersistenceError: If schema setup or write operations fail.
        """
        package_count = len(payload.summaries)
        status: RunStatus = (
            "completed_with_errors" if payload.rejected_count > 0 else "completed"
        )
        started_at = datetime.now(tz=timezone.utc).isoformat()

        connection = sqlite3.connect(self._db_path)
        try:
            connection.execute("PRAGMA foreign_keys = ON")
            self._ensure_schema(connection=connection)
            connection.execute("BEGIN")
            run_cursor = connection.execute(
                "INSERT INTO runs ("
                "started_at, finished_at, source_path, bytes_read, status, "
                "rejected_count, package_count"
                ") VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    started_at,
                    started_at,
                    payload.source_path,
                    payload.bytes_read,
                    status,
                    payload.rejected_count,
                    package_count,
                ),
            )
            row_id = run_cursor.lastrowid
            if row_id is None:
                logger.warning(
                    f"SQLite did not return a run id (db_path={self._db_path})"
                )
                raise PersistenceError("SQLite did not return a run id.")
            run_id = int(row_id)
            for summary in payload.summaries:
                self._insert_package(
                    connection=connection, run_id=run_id, summary=summary
                )
            connection.execute(
                "UPDATE runs SET finished_at = ? WHERE id = ?",
                (datetime.now(tz=timezone.utc).isoformat(), run_id),
            )
            connection.commit()
            return PersistRunResult(
                run_id=run_id,
                package_count=package_count,
                rejected_count=payload.rejected_count,
                status=status,
            )
        except sqlite3.DatabaseError as exc:
            connection.rollback()
            logger.warning(
                f"SQLite persistence failed (db_path={self._db_path} error={exc})"
            )
            raise PersistenceError(str(exc)) from exc
        finally:
            connection.close()

    def _insert_package(
        self, connection: sqlite3.Connection, run_id: int, summary: Summary
    ) -> None:
        """Insert one package row and its repeated values.

        Args:
            connection: Open SQLite connection inside a transaction.
            run_id: Owning run id.
            summary: Validated summary.
        """
        placeholders = ", ".join("?" for _ in range(len(PACKAGE_COLUMNS) + 1))
        cursor = connection.execute(
            f"INSERT INTO packages (run_id, {', '.join(PACKAGE_COLUMNS)}) "
            f"VALUES ({placeholders})",
            (run_id, *(getattr(summary, column) for column in PACKAGE_COLUMNS)),
        )
        package_id = cursor.lastrowid
        connection.executemany(
            "INSERT INTO package_values (package_id, field, position, value) "
            "VALUES (?, ?, ?, ?)",
            [
                (package_id, field, position, value)
                for field in REPEATED_FIELDS
                for position, value in enumerate(getattr(summary, field))
            ],
        )

    def _ensure_schema(self, connection: sqlite3.Connection) -> None:
        """Create required tables and indexes when missing.

        Args:
            connection: Open SQLite connection.
        """
        connection.execute(
            "CREATE TABLE IF NOT EXISTS runs ("
            "id INTEGER PRIMARY KEY, "
            "started_at TEXT NOT NULL, "
            "finished_at TEXT NOT NULL, "
            "source_path TEXT NOT NULL, "
            "bytes_read INTEGER NOT NULL, "
            "status TEXT NOT NULL, "
            "rejected_count INTEGER NOT NULL, "
            "package_count INTEGER NOT NULL"
            ")"
        )
        connection.execute(
            "CREATE TABLE IF NOT EXISTS packages ("
            "id INTEGER PRIMARY KEY, "
            "run_id INTEGER NOT NULL REFERENCES runs(id), "
            "pkgname TEXT NOT NULL, "
            "pkgbase TEXT NOT NULL, "
            "pkgversion TEXT NOT NULL, "
            "pkgpath TEXT NOT NULL, "
            "build_date TEXT NOT NULL, "
            "comment TEXT NOT NULL, "
            "machine_arch TEXT NOT NULL, "
            "opsys TEXT NOT NULL, "
            "os_version TEXT NOT NULL, "
            "pkgtools_version TEXT NOT NULL, "
            "file_cksum TEXT, "
            "file_name TEXT, "
            "file_size INTEGER, "
            "homepage TEXT, "
            "license TEXT, "
            "pkg_options TEXT, "
            "prev_pkgpath TEXT, "
            "size_pkg INTEGER NOT NULL, "
            "automatic INTEGER NOT NULL"
            ")"
        )
        connection.execute(
            "CREATE TABLE IF NOT EXISTS package_values ("
            "id INTEGER PRIMARY KEY, "
            "package_id INTEGER NOT NULL REFERENCES packages(id), "
            "field TEXT NOT NULL, "
            "position INTEGER NOT NULL, "
            "value TEXT NOT NULL"
            ")"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_packages_run_id ON packages(run_id)"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_packages_pkgbase ON packages(pkgbase)"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_packages_pkgpath ON packages(pkgpath)"
        )
        connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_package_values_package_id "
            "ON package_values(package_id)"
        )
