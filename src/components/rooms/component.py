"""
Rooms component - named canvases with optional password protection.

Invariants:
- I1: Room names match the configured pattern and length limits
- I2: Passwords are only ever stored hashed
- I3: A protected room's state is never handed out without the password
- I4: The member who creates a room becomes its admin
"""

from __future__ import annotations

import logging
import random

from src.domain.entities import MemberRole, RoomRecord

from .models import (
    CheckRoomInput,
    GeneratedNameOutput,
    GenerateNameInput,
    JoinRoomInput,
    JoinRoomOutput,
    LoadRoomInput,
    RoomCheckOutput,
    RoomOutput,
    RoomValidationError,
    SetPasswordInput,
)
from .ports import (
    NamingPolicyPort,
    PasswordHasherPort,
    RandomPort,
    RoomRepoPort,
    RulesPort,
    TimePort,
)

logger = logging.getLogger(__name__)

INVALID_NAME = RoomValidationError(code="invalid_name", message="Invalid room name")
INVALID_PASSWORD = RoomValidationError(code="invalid_password", message="Invalid password")
NOT_FOUND = RoomValidationError(code="not_found", message="Room not found")


def _password_ok(room: RoomRecord, password: str | None, hasher: PasswordHasherPort) -> bool:
    if not room.is_password_protected:
        return True
    if not password:
        return False
    assert room.password_hash is not None
    return hasher.verify_password(password, room.password_hash)


def save_room(room: RoomRecord, repo: RoomRepoPort, time: TimePort) -> RoomRecord:
    """Stamp the room as modified now and write it out."""
    room.last_modified = time.now_utc()
    return repo.save(room)


def run_generate_name(
    inp: GenerateNameInput,
    repo: RoomRepoPort,
    rules: RulesPort,
    rng: RandomPort | None = None,
) -> GeneratedNameOutput:
    rng = rng or random.SystemRandom()
    adjectives = rules.get_adjectives()
    nouns = rules.get_nouns()

    for _ in range(max(1, rules.get_max_attempts())):
        name = f"{rng.choice(adjectives)}-{rng.choice(nouns)}-{rng.randint(0, rules.get_max_number())}"
        if not repo.exists(name):
            return GeneratedNameOutput(room_name=name, success=True)

    return GeneratedNameOutput(
        success=False,
        errors=[RoomValidationError(code="exhausted", message="Could not find a free room name")],
    )


def run_check(
    inp: CheckRoomInput,
    repo: RoomRepoPort,
    policy: NamingPolicyPort,
) -> RoomCheckOutput:
    if not policy.is_valid_room_name(inp.room_name):
        return RoomCheckOutput(room_name=inp.room_name, errors=[INVALID_NAME])

    room = repo.get(inp.room_name)
    return RoomCheckOutput(
        room_name=inp.room_name,
        exists=room is not None,
        requires_password=room is not None and room.is_password_protected,
        success=True,
    )


def run_join(
    inp: JoinRoomInput,
    repo: RoomRepoPort,
    hasher: PasswordHasherPort,
    policy: NamingPolicyPort,
    time: TimePort,
) -> JoinRoomOutput:
    if not policy.is_valid_room_name(inp.room_name):
        return JoinRoomOutput(errors=[INVALID_NAME])

    created = False
    room = inp.live_room or repo.get(inp.room_name)
    if room is None:
        room = RoomRecord(name=inp.room_name)
        save_room(room, repo, time)
        created = True
        logger.info("Created room %s", inp.room_name)

    if not _password_ok(room, inp.password, hasher):
        logger.info("Rejected join for room %s: bad password", inp.room_name)
        return JoinRoomOutput(errors=[INVALID_PASSWORD])

    role: MemberRole = "editor"
    if inp.read_only:
        role = "readonly"
    elif created:
        role = "admin"

    return JoinRoomOutput(room=room, created=created, role=role, success=True)


def run_load(
    inp: LoadRoomInput,
    repo: RoomRepoPort,
    hasher: PasswordHasherPort,
    policy: NamingPolicyPort,
) -> RoomOutput:
    if not policy.is_valid_room_name(inp.room_name):
        return RoomOutput(errors=[INVALID_NAME])

    room = inp.live_room or repo.get(inp.room_name)
    if room is None:
        return RoomOutput(errors=[NOT_FOUND])

    if not _password_ok(room, inp.password, hasher):
        return RoomOutput(errors=[INVALID_PASSWORD])

    return RoomOutput(room=room, success=True)


def run_set_password(
    inp: SetPasswordInput,
    repo: RoomRepoPort,
    hasher: PasswordHasherPort,
    policy: NamingPolicyPort,
    rules: RulesPort,
    time: TimePort,
) -> RoomOutput:
    """Set the room password; an empty password removes protection."""
    if not policy.is_valid_room_name(inp.room_name):
        return RoomOutput(errors=[INVALID_NAME])

    password = (inp.password or "").strip()
    if len(password) > rules.get_password_max_length():
        return RoomOutput(
            errors=[RoomValidationError(code="password_too_long", message="Password is too long")]
        )

    room = inp.live_room or repo.get(inp.room_name)
    if room is None:
        room = RoomRecord(name=inp.room_name)

    room.password_hash = hasher.hash_password(password) if password else None
    save_room(room, repo, time)
    logger.info(
        "Password protection %s for room %s",
        "enabled" if room.is_password_protected else "disabled",
        inp.room_name,
    )
    return RoomOutput(room=room, success=True)


def run(
    inp: GenerateNameInput | CheckRoomInput | JoinRoomInput | LoadRoomInput | SetPasswordInput,
    *,
    repo: RoomRepoPort,
    hasher: PasswordHasherPort | None = None,
    policy: NamingPolicyPort | None = None,
    rules: RulesPort | None = None,
    time: TimePort | None = None,
) -> GeneratedNameOutput | RoomCheckOutput | JoinRoomOutput | RoomOutput:
    if isinstance(inp, GenerateNameInput):
        assert rules
        return run_generate_name(inp, repo, rules)

    elif isinstance(inp, CheckRoomInput):
        assert policy
        return run_check(inp, repo, policy)

    elif isinstance(inp, JoinRoomInput):
        assert hasher and policy and time
        return run_join(inp, repo, hasher, policy, time)

    elif isinstance(inp, LoadRoomInput):
        assert hasher and policy
        return run_load(inp, repo, hasher, policy)

    elif isinstance(inp, SetPasswordInput):
        assert hasher and policy and rules and time
        return run_set_password(inp, repo, hasher, policy, rules, time)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
