from datetime import datetime
from typing import Protocol

from src.domain.entities import RoomRecord


class RoomRepoPort(Protocol):
    def get(self, name: str) -> RoomRecord | None: ...
    def save(self, room: RoomRecord) -> RoomRecord: ...
    def exists(self, name: str) -> bool: ...


class PasswordHasherPort(Protocol):
    def hash_password(self, password: str) -> str: ...
    def verify_password(self, plain: str, hashed: str) -> bool: ...


class NamingPolicyPort(Protocol):
    def is_valid_room_name(self, name: object) -> bool: ...


class RulesPort(Protocol):
    def get_adjectives(self) -> list[str]: ...
    def get_nouns(self) -> list[str]: ...
    def get_max_number(self) -> int: ...
    def get_max_attempts(self) -> int: ...
    def get_password_max_length(self) -> int: ...


class RandomPort(Protocol):
    def choice(self, seq: list[str]) -> str: ...
    def randint(self, a: int, b: int) -> int: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
