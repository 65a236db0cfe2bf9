"""
Cleanup component - deletes rooms nobody has touched for a while.

Invariants:
- I1: Only rooms older than the configured age are deleted
- I2: A room's uploads go with it
- I3: Rooms with connected members are never deleted
- I4: A dry run changes nothing
"""

from __future__ import annotations

from ._impl import CleanupConfig, CleanupService
from .models import CleanupInput, CleanupOutput, ListRoomAgesInput
from .ports import ActivityPort, RoomRepoPort, RulesPort, TimePort, UploadStorePort


def _build_config(rules: RulesPort | None) -> CleanupConfig:
    if rules is None:
        return CleanupConfig()
    return CleanupConfig(
        max_age_days=rules.get_max_age_days(),
        skip_active_rooms=rules.get_skip_active_rooms(),
    )


def create_cleanup_service(
    repo: RoomRepoPort,
    uploads: UploadStorePort,
    time: TimePort,
    activity: ActivityPort | None = None,
    rules: RulesPort | None = None,
) -> CleanupService:
    return CleanupService(
        repo=repo,
        uploads=uploads,
        time_port=time,
        activity=activity,
        config=_build_config(rules),
    )


def run_cleanup(
    inp: CleanupInput,
    *,
    repo: RoomRepoPort,
    uploads: UploadStorePort,
    time: TimePort,
    activity: ActivityPort | None = None,
    rules: RulesPort | None = None,
) -> CleanupOutput:
    service = create_cleanup_service(repo, uploads, time, activity, rules)
    return CleanupOutput(reports=service.cleanup(dry_run=inp.dry_run, max_age_days=inp.max_age_days))


def run_list(
    inp: ListRoomAgesInput,
    *,
    repo: RoomRepoPort,
    uploads: UploadStorePort,
    time: TimePort,
    rules: RulesPort | None = None,
) -> CleanupOutput:
    service = create_cleanup_service(repo, uploads, time, rules=rules)
    return CleanupOutput(reports=service.assess())
