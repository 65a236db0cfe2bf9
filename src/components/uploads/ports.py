"""
Uploads component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class StoragePort(Protocol):
    """File storage for uploaded blobs."""

    def save(self, name: str, data: bytes) -> str: ...

    def get(self, path: str) -> bytes:
        """Raises FileNotFoundError when missing, ValueError on path traversal."""
        ...


class RulesPort(Protocol):
    """Upload limits from rules."""

    def get_max_upload_bytes(self) -> int: ...

    def get_allowed_mime_types(self) -> list[str]: ...


class NamingPolicyPort(Protocol):
    def is_valid_room_name(self, name: object) -> bool: ...


class TimePort(Protocol):
    def now_utc(self) -> datetime: ...
