"""
Cleanup component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

# --- Report ---


@dataclass(frozen=True)
class RoomAgeReport:
    """Age assessment (and outcome) for one stored room."""

    room_name: str
    last_modified: datetime | None
    age_days: int | None
    stale: bool
    deleted: bool = False
    uploads_deleted: bool = False
    reason: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CleanupInput:
    """Input for a cleanup pass."""

    dry_run: bool = False
    max_age_days: int | None = None  # None: use configured value


@dataclass(frozen=True)
class ListRoomAgesInput:
    """Input for listing every stored room with its age."""


# --- Output Models ---


@dataclass
class CleanupOutput:
    """Output of a cleanup pass."""

    reports: list[RoomAgeReport] = field(default_factory=list)
    success: bool = True

    @property
    def deleted(self) -> list[str]:
        return [r.room_name for r in self.reports if r.deleted]

    @property
    def stale(self) -> list[str]:
        return [r.room_name for r in self.reports if r.stale]
