from typing import Protocol

from src.domain.entities import RoomRecord


class RoomRepoPort(Protocol):
    def get(self, name: str) -> RoomRecord | None:
        """Load a room document. Returns None if it was never saved."""
        ...

    def save(self, room: RoomRecord) -> RoomRecord:
        ...

    def exists(self, name: str) -> bool:
        ...

    def delete(self, name: str) -> bool:
        ...

    def list_names(self) -> list[str]:
        ...

    def read_raw(self, name: str) -> dict:
        """Read the stored document without normalisation. Raises FileNotFoundError/ValueError."""
        ...
