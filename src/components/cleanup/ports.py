"""
Cleanup component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol


class RoomRepoPort(Protocol):
    def list_names(self) -> list[str]: ...

    def read_raw(self, name: str) -> dict[str, Any]:
        """Raises FileNotFoundError or ValueError for missing/corrupt documents."""
        ...

    def delete(self, name: str) -> bool: ...


class UploadStorePort(Protocol):
    def delete_tree(self, path: str) -> bool: ...


class ActivityPort(Protocol):
    """Tells whether a room currently has connected members."""

    def is_active(self, room_name: str) -> bool: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...


class RulesPort(Protocol):
    def get_max_age_days(self) -> int: ...

    def get_skip_active_rooms(self) -> bool: ...
