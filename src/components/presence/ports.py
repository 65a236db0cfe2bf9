from typing import Protocol

from src.domain.entities import Member


class PresenceStorePort(Protocol):
    def get(self, room_name: str, connection_id: str) -> Member | None: ...
    def remove(self, room_name: str, connection_id: str) -> Member | None: ...
    def user_count(self, room_name: str) -> int: ...


class RulesPort(Protocol):
    def get_palette(self) -> list[str]: ...
    def get_unknown_user_name(self) -> str: ...
