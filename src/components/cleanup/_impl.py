"""
CleanupService - removal of abandoned rooms.

Key behaviors:
- A room's age is measured from lastModified, falling back to timestamp
- Rooms older than max_age_days are stale
- Stale rooms lose their document and their uploads directory
- Rooms with connected members are left alone
- Unreadable documents are reported, never deleted
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import timedelta

from src.domain.documents import last_modified_of

from .models import RoomAgeReport
from .ports import ActivityPort, RoomRepoPort, TimePort, UploadStorePort

logger = logging.getLogger(__name__)


# --- Configuration ---


@dataclass(frozen=True)
class CleanupConfig:
    """Cleanup configuration from rules."""

    max_age_days: int = 30
    skip_active_rooms: bool = True


DEFAULT_CONFIG = CleanupConfig()


class CleanupService:
    """Finds and deletes stale rooms."""

    def __init__(
        self,
        repo: RoomRepoPort,
        uploads: UploadStorePort,
        time_port: TimePort,
        activity: ActivityPort | None = None,
        config: CleanupConfig | None = None,
    ) -> None:
        self._repo = repo
        self._uploads = uploads
        self._time = time_port
        self._activity = activity
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> CleanupConfig:
        return self._config

    def assess(self, max_age_days: int | None = None) -> list[RoomAgeReport]:
        """Report every stored room's age and whether it is stale."""
        now = self._time.now_utc()
        max_age = timedelta(days=max_age_days if max_age_days is not None else self._config.max_age_days)
        reports: list[RoomAgeReport] = []

        for name in self._repo.list_names():
            try:
                doc = self._repo.read_raw(name)
            except (FileNotFoundError, ValueError) as e:
                logger.warning("Skipping room %s: %s", name, e)
                reports.append(
                    RoomAgeReport(
                        room_name=name, last_modified=None, age_days=None, stale=False, reason="unreadable"
                    )
                )
                continue

            last_modified = last_modified_of(doc)
            if last_modified is None:
                reports.append(
                    RoomAgeReport(
                        room_name=name, last_modified=None, age_days=None, stale=False, reason="no timestamp"
                    )
                )
                continue

            age = now - last_modified
            reports.append(
                RoomAgeReport(
                    room_name=name,
                    last_modified=last_modified,
                    age_days=age // timedelta(days=1),
                    stale=age > max_age,
                )
            )

        return reports

    def find_stale_rooms(self, max_age_days: int | None = None) -> list[RoomAgeReport]:
        return [r for r in self.assess(max_age_days) if r.stale]

    def cleanup(self, dry_run: bool = False, max_age_days: int | None = None) -> list[RoomAgeReport]:
        """Delete stale rooms. Returns the assessment with outcomes filled in."""
        results: list[RoomAgeReport] = []

        for report in self.assess(max_age_days):
            if not report.stale:
                results.append(report)
                continue

            if self._config.skip_active_rooms and self._activity and self._activity.is_active(report.room_name):
                results.append(replace(report, reason="active"))
                continue

            if dry_run:
                logger.info("Would delete room %s (%s days old)", report.room_name, report.age_days)
                results.append(replace(report, reason="dry run"))
                continue

            deleted = self._repo.delete(report.room_name)
            uploads_deleted = self._uploads.delete_tree(report.room_name)
            logger.info(
                "Deleted room %s (%s days old, uploads %s)",
                report.room_name,
                report.age_days,
                "removed" if uploads_deleted else "none",
            )
            results.append(replace(report, deleted=deleted, uploads_deleted=uploads_deleted))

        return results
