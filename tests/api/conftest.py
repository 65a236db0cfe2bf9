from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from src.adapters.fs.filestore import FileSystemStore
from src.api.deps import (
    get_clock,
    get_hub,
    get_policy,
    get_room_repo,
    get_rules,
    get_upload_store,
)
from src.api.main import app


@pytest.fixture
def upload_store(tmp_path) -> FileSystemStore:
    return FileSystemStore(tmp_path / "uploads")


@pytest.fixture
def client(hub, room_repo, policy, time_port, rules, upload_store) -> Iterator[TestClient]:
    """TestClient wired to in-memory rooms and a temporary upload directory."""
    app.dependency_overrides[get_hub] = lambda: hub
    app.dependency_overrides[get_room_repo] = lambda: room_repo
    app.dependency_overrides[get_policy] = lambda: policy
    app.dependency_overrides[get_clock] = lambda: time_port
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_upload_store] = lambda: upload_store

    yield TestClient(app)

    app.dependency_overrides.clear()
