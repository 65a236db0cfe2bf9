"""
Tests for the rooms component: name generation, checks, joins, loads and passwords.
"""

from __future__ import annotations

import pytest

from src.components.rooms import (
    CheckRoomInput,
    GenerateNameInput,
    JoinRoomInput,
    LoadRoomInput,
    SetPasswordInput,
    run,
    run_check,
    run_generate_name,
    run_join,
    run_load,
    run_set_password,
)
from src.domain.entities import RoomRecord


class ScriptedRandom:
    """Returns pre-set picks so generated names are predictable."""

    def __init__(self, numbers: list[int]) -> None:
        self._numbers = list(numbers)

    def choice(self, seq: list[str]) -> str:
        return seq[0]

    def randint(self, a: int, b: int) -> int:
        return self._numbers.pop(0)


class TestGenerateName:
    def test_name_shape(self, room_repo, room_rules, policy) -> None:
        out = run_generate_name(GenerateNameInput(), room_repo, room_rules)

        assert out.success
        assert out.room_name is not None
        adjective, noun, number = out.room_name.split("-")
        assert adjective in room_rules.get_adjectives()
        assert noun in room_rules.get_nouns()
        assert 0 <= int(number) <= 999
        assert policy.is_valid_room_name(out.room_name)

    def test_skips_taken_names(self, room_repo, room_rules) -> None:
        room_repo.save(RoomRecord(name="happy-canvas-1"))

        out = run_generate_name(GenerateNameInput(), room_repo, room_rules, rng=ScriptedRandom([1, 2]))

        assert out.room_name == "happy-canvas-2"

    def test_gives_up_after_max_attempts(self, room_repo, room_rules) -> None:
        room_repo.save(RoomRecord(name="happy-canvas-7"))

        out = run_generate_name(GenerateNameInput(), room_repo, room_rules, rng=ScriptedRandom([7] * 20))

        assert not out.success
        assert out.errors[0].code == "exhausted"


class TestCheck:
    def test_missing_room(self, room_repo, policy) -> None:
        out = run_check(CheckRoomInput(room_name="fresh-room"), room_repo, policy)

        assert out.success
        assert not out.exists
        assert not out.requires_password

    def test_protected_room(self, room_repo, policy, hasher) -> None:
        room_repo.save(RoomRecord(name="secret-room", password_hash=hasher.hash_password("pw")))

        out = run_check(CheckRoomInput(room_name="secret-room"), room_repo, policy)

        assert out.exists
        assert out.requires_password

    @pytest.mark.parametrize("name", ["ab", "has space", "under_score", "x" * 51, "../etc"])
    def test_invalid_names(self, room_repo, policy, name: str) -> None:
        out = run_check(CheckRoomInput(room_name=name), room_repo, policy)

        assert not out.success
        assert out.errors[0].code == "invalid_name"


class TestJoin:
    def test_first_joiner_creates_room_as_admin(self, room_repo, hasher, policy, time_port) -> None:
        out = run_join(JoinRoomInput(room_name="new-room"), room_repo, hasher, policy, time_port)

        assert out.success
        assert out.created
        assert out.role == "admin"
        assert room_repo.exists("new-room")
        assert room_repo.docs["new-room"]["lastModified"] == "2025-03-01T12:00:00Z"

    def test_later_joiner_is_editor(self, room_repo, hasher, policy, time_port) -> None:
        run_join(JoinRoomInput(room_name="new-room"), room_repo, hasher, policy, time_port)
        out = run_join(JoinRoomInput(room_name="new-room"), room_repo, hasher, policy, time_port)

        assert not out.created
        assert out.role == "editor"

    def test_read_only_request(self, room_repo, hasher, policy, time_port) -> None:
        out = run_join(JoinRoomInput(room_name="new-room", read_only=True), room_repo, hasher, policy, time_port)
        assert out.role == "readonly"

    def test_password_required(self, room_repo, hasher, policy, time_port) -> None:
        room_repo.save(RoomRecord(name="secret-room", password_hash=hasher.hash_password("pw")))

        missing = run_join(JoinRoomInput(room_name="secret-room"), room_repo, hasher, policy, time_port)
        wrong = run_join(
            JoinRoomInput(room_name="secret-room", password="nope"), room_repo, hasher, policy, time_port
        )
        right = run_join(
            JoinRoomInput(room_name="secret-room", password="pw"), room_repo, hasher, policy, time_port
        )

        assert missing.errors[0].code == "invalid_password"
        assert wrong.errors[0].code == "invalid_password"
        assert right.success

    def test_prefers_live_room(self, room_repo, hasher, policy, time_port) -> None:
        live = RoomRecord(name="live-room")
        live.state.elements.append({"id": "only-in-memory"})

        out = run_join(JoinRoomInput(room_name="live-room", live_room=live), room_repo, hasher, policy, time_port)

        assert out.room is live
        assert not room_repo.exists("live-room")

    def test_invalid_name(self, room_repo, hasher, policy, time_port) -> None:
        out = run_join(JoinRoomInput(room_name="no"), room_repo, hasher, policy, time_port)
        assert out.errors[0].code == "invalid_name"
        assert room_repo.docs == {}


class TestLoad:
    def test_not_found(self, room_repo, hasher, policy) -> None:
        out = run_load(LoadRoomInput(room_name="missing-room"), room_repo, hasher, policy)
        assert out.errors[0].code == "not_found"

    def test_open_room(self, room_repo, hasher, policy) -> None:
        room_repo.save(RoomRecord(name="open-room"))
        out = run_load(LoadRoomInput(room_name="open-room"), room_repo, hasher, policy)

        assert out.success
        assert out.room is not None
        assert out.room.name == "open-room"

    def test_protected_room(self, room_repo, hasher, policy) -> None:
        room_repo.save(RoomRecord(name="secret-room", password_hash=hasher.hash_password("pw")))

        denied = run_load(LoadRoomInput(room_name="secret-room", password="bad"), room_repo, hasher, policy)
        allowed = run_load(LoadRoomInput(room_name="secret-room", password="pw"), room_repo, hasher, policy)

        assert denied.errors[0].code == "invalid_password"
        assert allowed.success


class TestSetPassword:
    def test_sets_hash(self, room_repo, hasher, policy, room_rules, time_port) -> None:
        out = run_set_password(
            SetPasswordInput(room_name="a-room", password="s3cret"),
            room_repo,
            hasher,
            policy,
            room_rules,
            time_port,
        )

        assert out.success
        assert out.room is not None
        assert out.room.is_password_protected
        doc = room_repo.docs["a-room"]
        assert doc["passwordHash"] == "plain$s3cret"
        assert doc["isPasswordProtected"] is True
        assert "password" not in doc

    @pytest.mark.parametrize("password", ["", "   "])
    def test_blank_password_removes_protection(
        self, room_repo, hasher, policy, room_rules, time_port, password: str
    ) -> None:
        room_repo.save(RoomRecord(name="a-room", password_hash=hasher.hash_password("pw")))

        out = run_set_password(
            SetPasswordInput(room_name="a-room", password=password),
            room_repo,
            hasher,
            policy,
            room_rules,
            time_port,
        )

        assert out.room is not None
        assert not out.room.is_password_protected
        assert room_repo.docs["a-room"]["passwordHash"] is None

    def test_too_long(self, room_repo, hasher, policy, room_rules, time_port) -> None:
        out = run_set_password(
            SetPasswordInput(room_name="a-room", password="x" * 129),
            room_repo,
            hasher,
            policy,
            room_rules,
            time_port,
        )

        assert out.errors[0].code == "password_too_long"
        assert not room_repo.exists("a-room")

    def test_updates_live_room(self, room_repo, hasher, policy, room_rules, time_port) -> None:
        live = RoomRecord(name="live-room")
        live.state.elements.append({"id": "e1"})

        run_set_password(
            SetPasswordInput(room_name="live-room", password="pw", live_room=live),
            room_repo,
            hasher,
            policy,
            room_rules,
            time_port,
        )

        assert live.is_password_protected
        assert room_repo.docs["live-room"]["elements"] == [{"id": "e1"}]


class TestDispatch:
    def test_run_routes_inputs(self, room_repo, hasher, policy, room_rules, time_port) -> None:
        joined = run(
            JoinRoomInput(room_name="some-room"),
            repo=room_repo,
            hasher=hasher,
            policy=policy,
            time=time_port,
        )
        checked = run(CheckRoomInput(room_name="some-room"), repo=room_repo, policy=policy)

        assert joined.success
        assert checked.exists

    def test_run_rejects_unknown_input(self, room_repo) -> None:
        with pytest.raises(ValueError):
            run("bogus", repo=room_repo)  # type: ignore[arg-type]
