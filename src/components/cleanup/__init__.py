"""
Cleanup component - stale room detection and removal.
"""

from ._impl import CleanupConfig, CleanupService
from .component import create_cleanup_service, run_cleanup, run_list
from .models import CleanupInput, CleanupOutput, ListRoomAgesInput, RoomAgeReport
from .ports import ActivityPort, RoomRepoPort, RulesPort, TimePort, UploadStorePort

__all__ = [
    # Entry points
    "run_cleanup",
    "run_list",
    "create_cleanup_service",
    # Service
    "CleanupConfig",
    "CleanupService",
    # Models
    "CleanupInput",
    "CleanupOutput",
    "ListRoomAgesInput",
    "RoomAgeReport",
    # Ports
    "ActivityPort",
    "RoomRepoPort",
    "RulesPort",
    "TimePort",
    "UploadStorePort",
]
