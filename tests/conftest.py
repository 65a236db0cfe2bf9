from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from src.api.deps import (
    CanvasRulesAdapter,
    PresenceRulesAdapter,
    RoomRulesAdapter,
    UploadRulesAdapter,
)
from src.domain.documents import document_from_record, record_from_document
from src.domain.entities import RoomRecord
from src.domain.policy import PolicyEngine
from src.rules.loader import load_rules
from src.rules.models import Rules
from src.shell.realtime.hub import RoomHub

RULES_PATH = Path(__file__).resolve().parents[1] / "rules.yaml"


# --- Mocks ---


class MockTimePort:
    """Mock time provider."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._now

    def set_now(self, now: datetime) -> None:
        self._now = now

    def advance(self, seconds: int) -> None:
        self._now += timedelta(seconds=seconds)


class PlainHasher:
    """Reversible stand-in for the argon2 hasher; keeps tests fast."""

    def hash_password(self, password: str) -> str:
        return f"plain${password}"

    def verify_password(self, plain: str, hashed: str) -> bool:
        return hashed == f"plain${plain}"


class InMemoryRoomRepo:
    """In-memory room repository storing the same documents the JSON repo writes."""

    def __init__(self, hasher: PlainHasher, time_port: MockTimePort) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.hasher = hasher
        self.time_port = time_port
        self.save_count = 0

    def get(self, name: str) -> RoomRecord | None:
        doc = self.docs.get(name)
        if doc is None:
            return None
        return record_from_document(name, doc, self.hasher, self.time_port.now_utc())

    def save(self, room: RoomRecord) -> RoomRecord:
        self.docs[room.name] = document_from_record(room)
        self.save_count += 1
        return room

    def exists(self, name: str) -> bool:
        return name in self.docs

    def delete(self, name: str) -> bool:
        return self.docs.pop(name, None) is not None

    def list_names(self) -> list[str]:
        return sorted(self.docs)

    def read_raw(self, name: str) -> dict[str, Any]:
        if name not in self.docs:
            raise FileNotFoundError(name)
        return self.docs[name]


class FakeSocket:
    """Collects everything the hub sends to one connection."""

    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send_text(self, data: str) -> None:
        self.sent.append(data)

    def messages(self) -> list[dict[str, Any]]:
        return [json.loads(s) for s in self.sent]

    def last(self) -> dict[str, Any]:
        return self.messages()[-1]

    def types(self) -> list[str]:
        return [m["type"] for m in self.messages()]


# --- Fixtures ---


@pytest.fixture
def rules() -> Rules:
    """Rules from the project's rules.yaml."""
    return load_rules(RULES_PATH)


@pytest.fixture
def policy(rules: Rules) -> PolicyEngine:
    return PolicyEngine(rules)


@pytest.fixture
def time_port() -> MockTimePort:
    return MockTimePort()


@pytest.fixture
def hasher() -> PlainHasher:
    return PlainHasher()


@pytest.fixture
def room_repo(hasher: PlainHasher, time_port: MockTimePort) -> InMemoryRoomRepo:
    return InMemoryRoomRepo(hasher, time_port)


@pytest.fixture
def room_rules(rules: Rules) -> RoomRulesAdapter:
    return RoomRulesAdapter(rules)


@pytest.fixture
def upload_rules(rules: Rules) -> UploadRulesAdapter:
    return UploadRulesAdapter(rules)


@pytest.fixture
def hub(
    room_repo: InMemoryRoomRepo,
    hasher: PlainHasher,
    policy: PolicyEngine,
    time_port: MockTimePort,
    rules: Rules,
) -> RoomHub:
    return RoomHub(
        repo=room_repo,
        hasher=hasher,
        policy=policy,
        clock=time_port,
        canvas_rules=CanvasRulesAdapter(rules),
        room_rules=RoomRulesAdapter(rules),
        presence_rules=PresenceRulesAdapter(rules),
        max_message_bytes=rules.realtime.max_message_bytes,
    )


@pytest.fixture
def new_socket() -> type[FakeSocket]:
    """Factory for fake websocket connections."""
    return FakeSocket
