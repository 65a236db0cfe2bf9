"""
End-to-end collaboration flow over real websocket connections.

Two browsers join a room, identify themselves, draw, and leave; a third
tries to join with a wrong password and as a read-only viewer.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.deps import get_hub
from src.api.routes import realtime
from src.domain.entities import RoomRecord


@pytest.fixture
def client(hub) -> Iterator[TestClient]:
    app = FastAPI()
    app.include_router(realtime.router)
    app.dependency_overrides[get_hub] = lambda: hub
    # One portal for every connection, so all sockets share an event loop
    with TestClient(app) as client:
        yield client


def join(ws, room: str = "team-board", **extra) -> dict:
    ws.send_json({"type": "joinRoom", "data": {"roomName": room, **extra}})
    return ws.receive_json()


def sync(ws) -> None:
    """Wait until the server has handled everything this socket sent."""
    ws.send_json({"type": "ping", "data": {}})
    assert ws.receive_json()["type"] == "error"


class TestCollaborationFlow:
    def test_two_members_draw_together(self, client: TestClient, room_repo) -> None:
        with client.websocket_connect("/") as alice, client.websocket_connect("/ws") as bob:
            init = join(alice)
            assert init["type"] == "init"
            assert init["data"]["role"] == "admin"
            assert init["data"]["elements"] == []

            assert join(bob)["data"]["role"] == "editor"

            alice.send_json({"type": "userInfo", "data": {"userId": "alice-1", "userName": "Alice"}})
            joined = bob.receive_json()
            assert joined["type"] == "userJoined"
            assert joined["data"]["userName"] == "Alice"
            assert joined["data"]["userCount"] == 1
            assert bob.receive_json()["type"] == "userInfo"

            shape = {"id": 1001, "type": "rectangle", "x": 0, "y": 0, "layerId": "layer_0"}
            alice.send_json({"type": "add", "data": shape})
            assert bob.receive_json() == {"type": "add", "data": shape}

            bob.send_json({"type": "update", "data": {"id": 1001, "x": 40}})
            assert alice.receive_json() == {"type": "update", "data": {"id": 1001, "x": 40}}

            alice.send_json({"type": "cursor", "data": {"x": 3, "y": 4, "userId": "alice-1"}})
            assert bob.receive_json()["type"] == "cursor"

        stored = room_repo.docs["team-board"]
        assert stored["elements"] == [{"id": 1001, "type": "rectangle", "x": 40, "y": 0, "layerId": "layer_0"}]
        assert stored["layers"][0]["elements"] == [1001]

    def test_leave_is_announced(self, client: TestClient) -> None:
        with client.websocket_connect("/ws") as bob:
            join(bob)
            bob.send_json({"type": "userInfo", "data": {"userId": "bob-1", "userName": "Bob"}})
            sync(bob)

            with client.websocket_connect("/ws") as alice:
                join(alice)
                alice.send_json({"type": "userInfo", "data": {"userId": "alice-1", "userName": "Alice"}})
                assert bob.receive_json()["type"] == "userJoined"
                assert bob.receive_json()["type"] == "userInfo"

            left = bob.receive_json()
            assert left == {"type": "userLeft", "data": {"userId": "alice-1", "userName": "Alice", "userCount": 1}}

    def test_late_joiner_gets_current_state(self, client: TestClient) -> None:
        with client.websocket_connect("/ws") as alice:
            join(alice)
            alice.send_json({"type": "add", "data": {"id": "a1", "type": "text", "text": "hello"}})
            alice.send_json({"type": "camera", "data": {"x": 10, "y": 20, "zoom": 2}})
            sync(alice)

            with client.websocket_connect("/ws") as carol:
                init = join(carol)

        assert init["data"]["elements"] == [{"id": "a1", "type": "text", "text": "hello"}]
        assert init["data"]["camera"] == {"x": 10, "y": 20, "zoom": 2}

    def test_password_and_read_only(self, client: TestClient, room_repo, hasher) -> None:
        room_repo.save(RoomRecord(name="locked-board", password_hash=hasher.hash_password("open-sesame")))

        with client.websocket_connect("/ws") as mallory:
            reply = join(mallory, room="locked-board", password="guess")
            assert reply == {"type": "error", "data": {"message": "Invalid password"}}

            mallory.send_json({"type": "add", "data": {"id": "x"}})
            assert mallory.receive_json()["data"]["message"] == "Join a room first"

        with client.websocket_connect("/ws") as viewer:
            init = join(viewer, room="locked-board", password="open-sesame", readOnly=True)
            assert init["data"]["role"] == "readonly"
            assert init["data"]["isPasswordProtected"] is True

            viewer.send_json({"type": "clear", "data": {}})
            assert viewer.receive_json()["data"]["message"] == "Read-only members cannot modify the canvas"

    def test_bad_frames_keep_connection_open(self, client: TestClient) -> None:
        with client.websocket_connect("/ws") as ws:
            ws.send_text("this is not json")
            assert ws.receive_json()["data"]["message"] == "Malformed message"

            assert join(ws)["type"] == "init"

    def test_binary_frames_are_read_as_json(self, client: TestClient) -> None:
        with client.websocket_connect("/ws") as ws:
            ws.send_bytes(b'{"type": "joinRoom", "data": {"roomName": "team-board"}}')
            assert ws.receive_json()["type"] == "init"

            ws.send_bytes(b"\xff\xfe not utf-8")
            assert ws.receive_json() == {"type": "error", "data": {"message": "Malformed message"}}

            ws.send_bytes(b'{"type": "joinRoom"}')
            assert ws.receive_json()["type"] == "error"

            sync(ws)
