# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Persistence contracts."""

import logging

from dataclasses import dataclass
from typing import Literal, Protocol

from pkgsummary.model import Summary

logger = logging.getLogger(__name__)

RunStatus = Literal["completed", "completed_with_errors"]


class PersistenceError(RuntimeError):
    """Represent a fatal persistence operation failure."""


@dataclass(frozen=True)
class PersistRunInput:
    """Describe all values needed to persist one parse run.

    Attributes:
        source_path: pkg_summary file the run was parsed from.
        bytes_read: Number of (decompressed) bytes fed to the stream.
        rejected_count: Number of records discarded while parsing.
        summaries: Valid summaries to persist.
    """

    source_path: str
    bytes_read: int
    rejected_count: int
    summaries: list[Summary]


@dataclass(frozen=True)
class PersistRunResult:
    """Represent the persisted run summary."""

    run_id: int
    package_count: int
    rejected_count: int
    status: RunStatus


class Persistence(Protocol):
    """Define the contract for persisting one parse run."""

    def persist_run(self, payload: PersistRunInput) -> PersistRunResult:
        """Persist one complete run."""
