"""
Presence component - join/leave notices, user counts and cursor colors.

Invariants:
- I1: userJoined counts the newcomer; userLeft counts the remaining users
- I2: Members that never identified themselves leave silently
- I3: A user's color is the same on every connection and every server
"""

from __future__ import annotations

import logging

from ._impl import DEFAULT_PALETTE, user_color
from .models import IdentifyInput, LeaveInput, PresenceOutput, PresenceValidationError
from .ports import PresenceStorePort, RulesPort

logger = logging.getLogger(__name__)


def run_identify(
    inp: IdentifyInput,
    store: PresenceStorePort,
    rules: RulesPort | None = None,
) -> PresenceOutput:
    member = store.get(inp.room_name, inp.connection_id)
    if member is None:
        return PresenceOutput(
            errors=[PresenceValidationError(code="not_member", message="Join a room first")]
        )

    if inp.user_id is None or inp.user_id == "":
        return PresenceOutput(
            errors=[PresenceValidationError(code="missing_user_id", message="userInfo requires a userId")]
        )

    palette = rules.get_palette() if rules else list(DEFAULT_PALETTE)
    member.user_id = str(inp.user_id)
    member.user_name = str(inp.user_name) if inp.user_name is not None else None
    member.color = user_color(member.user_id, palette)

    count = store.user_count(inp.room_name)
    logger.info("User %s (%s) joined room %s", member.user_name, member.user_id, inp.room_name)

    notice = {
        "type": "userJoined",
        "data": {
            "userId": member.user_id,
            "userName": member.user_name,
            "userCount": count,
            "color": member.color,
        },
    }
    return PresenceOutput(member=member, user_count=count, notice=notice, success=True)


def run_leave(
    inp: LeaveInput,
    store: PresenceStorePort,
    rules: RulesPort | None = None,
) -> PresenceOutput:
    member = store.remove(inp.room_name, inp.connection_id)
    if member is None:
        return PresenceOutput(success=True)

    count = store.user_count(inp.room_name)
    if not member.is_identified:
        return PresenceOutput(member=member, user_count=count, success=True)

    unknown = rules.get_unknown_user_name() if rules else "Unknown"
    logger.info("User %s left room %s", member.user_id, inp.room_name)
    notice = {
        "type": "userLeft",
        "data": {
            "userId": member.user_id,
            "userName": member.user_name or unknown,
            "userCount": count,
        },
    }
    return PresenceOutput(member=member, user_count=count, notice=notice, success=True)


def run(
    inp: IdentifyInput | LeaveInput,
    *,
    store: PresenceStorePort,
    rules: RulesPort | None = None,
) -> PresenceOutput:
    if isinstance(inp, IdentifyInput):
        return run_identify(inp, store, rules)
    elif isinstance(inp, LeaveInput):
        return run_leave(inp, store, rules)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
