import json
import logging
import os
from pathlib import Path
from typing import Any

from src.domain.documents import document_from_record, record_from_document
from src.domain.entities import RoomRecord
from src.ports.auth import PasswordHasherPort
from src.ports.clock import ClockPort

logger = logging.getLogger(__name__)


class JsonRoomRepo:
    """Stores one JSON document per room under ``<base_path>/<room>.json``."""

    def __init__(self, base_path: str | Path, hasher: PasswordHasherPort, clock: ClockPort):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.hasher = hasher
        self.clock = clock

    def _path(self, name: str) -> Path:
        target = (self.base_path / f"{name}.json").resolve()
        if target.parent != self.base_path:
            raise ValueError(f"Path traversal attempt detected: {name}")
        return target

    def read_raw(self, name: str) -> dict[str, Any]:
        target = self._path(name)
        if not target.exists():
            raise FileNotFoundError(f"Room not found: {name}")
        with open(target, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Corrupt room document {name}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Corrupt room document {name}: expected an object")
        return data

    def get(self, name: str) -> RoomRecord | None:
        try:
            doc = self.read_raw(name)
        except FileNotFoundError:
            return None

        room = record_from_document(name, doc, self.hasher, self.clock.now_utc())
        logger.info(
            "Loaded room %s with %d elements and %d layers",
            name,
            len(room.state.elements),
            len(room.state.layers),
        )
        return room

    def save(self, room: RoomRecord) -> RoomRecord:
        target = self._path(room.name)
        tmp = target.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(document_from_record(room), f, indent=2)
        os.replace(tmp, target)
        return room

    def exists(self, name: str) -> bool:
        return self._path(name).exists()

    def delete(self, name: str) -> bool:
        target = self._path(name)
        if not target.exists():
            return False
        target.unlink()
        return True

    def list_names(self) -> list[str]:
        return sorted(p.stem for p in self.base_path.glob("*.json"))
