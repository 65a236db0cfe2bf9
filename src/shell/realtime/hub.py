"""
Realtime room hub.

Owns the live state of every room that has connected members and relays
updates between them.

Key behaviors:
- A client joins exactly one room per connection; messages before joining are refused
- Updates are applied, saved if persistent, then relayed to the *other* members
- One lock per room serialises apply/save/relay, so all members see one order
- Rooms never see each other's traffic
- A room's live state is dropped when its last member leaves (the document stays on disk)
- Bad messages produce an ``error`` reply; the connection stays open
"""

from __future__ import annotations

import asyncio
import json
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Protocol

from src.components.canvas import ApplyUpdateInput, run_apply
from src.components.canvas import RulesPort as CanvasRulesPort
from src.components.presence import (
    IdentifyInput,
    LeaveInput,
    PresenceRegistry,
    run_identify,
    run_leave,
)
from src.components.presence import RulesPort as PresenceRulesPort
from src.components.rooms import (
    JoinRoomInput,
    LoadRoomInput,
    RoomOutput,
    SetPasswordInput,
    run_join,
    run_load,
    run_set_password,
    save_room,
)
from src.components.rooms import RulesPort as RoomRulesPort
from src.domain.documents import public_state
from src.domain.entities import Member, RoomRecord
from src.domain.policy import PolicyEngine
from src.ports.auth import PasswordHasherPort
from src.ports.clock import ClockPort
from src.ports.repo import RoomRepoPort

logger = logging.getLogger(__name__)

READONLY_MESSAGE = "Read-only members cannot modify the canvas"
ADMIN_ONLY_MESSAGE = "Only the room admin can clear the canvas"


class SocketPort(Protocol):
    async def send_text(self, data: str) -> None: ...


@dataclass
class ClientSession:
    """One websocket connection and the room it is in."""

    connection_id: str
    socket: SocketPort
    room_name: str | None = None


@dataclass(frozen=True)
class HubStats:
    connected_clients: int
    rooms: int
    elements: int


def error_message(message: str) -> dict[str, Any]:
    return {"type": "error", "data": {"message": message}}


class RoomHub:
    def __init__(
        self,
        repo: RoomRepoPort,
        hasher: PasswordHasherPort,
        policy: PolicyEngine,
        clock: ClockPort,
        canvas_rules: CanvasRulesPort | None = None,
        room_rules: RoomRulesPort | None = None,
        presence_rules: PresenceRulesPort | None = None,
        max_message_bytes: int = 1_048_576,
    ) -> None:
        self.repo = repo
        self.hasher = hasher
        self.policy = policy
        self.clock = clock
        self.canvas_rules = canvas_rules
        self.room_rules = room_rules
        self.presence_rules = presence_rules
        self.max_message_bytes = max_message_bytes

        self.presence = PresenceRegistry()
        self._rooms: dict[str, RoomRecord] = {}
        self._sockets: dict[str, dict[str, SocketPort]] = {}
        # Locks live only while someone holds them
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    # --- Introspection ---

    def live_room(self, room_name: str) -> RoomRecord | None:
        return self._rooms.get(room_name)

    def is_active(self, room_name: str) -> bool:
        return self.presence.is_active(room_name)

    def stats(self) -> HubStats:
        return HubStats(
            connected_clients=self.presence.connection_count(),
            rooms=len(self._rooms),
            elements=sum(len(room.state.elements) for room in list(self._rooms.values())),
        )

    def _lock(self, room_name: str) -> asyncio.Lock:
        lock = self._locks.get(room_name)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[room_name] = lock
        return lock

    # --- Sending ---

    async def send(self, session: ClientSession, message: dict[str, Any]) -> None:
        await session.socket.send_text(json.dumps(message))

    async def broadcast(
        self,
        room_name: str,
        message: dict[str, Any],
        exclude: str | None = None,
    ) -> None:
        text = json.dumps(message)
        for connection_id, socket in list(self._sockets.get(room_name, {}).items()):
            if connection_id == exclude:
                continue
            try:
                await socket.send_text(text)
            except Exception as e:
                # The receiving side's own loop handles the disconnect
                logger.warning("Dropping message to %s in room %s: %s", connection_id, room_name, e)

    # --- Membership ---

    async def join(self, session: ClientSession, data: Any) -> None:
        if not isinstance(data, dict):
            await self.send(session, error_message("Invalid room name"))
            return

        if session.room_name is not None:
            await self.leave(session)

        room_name = data.get("roomName")
        if not self.policy.is_valid_room_name(room_name):
            await self.send(session, error_message("Invalid room name"))
            return

        async with self._lock(room_name):
            inp = JoinRoomInput(
                room_name=room_name,
                password=data.get("password") if isinstance(data.get("password"), str) else None,
                read_only=bool(data.get("readOnly")),
                live_room=self._rooms.get(room_name),
            )
            try:
                out = await asyncio.to_thread(
                    run_join, inp, self.repo, self.hasher, self.policy, self.clock
                )
            except ValueError:
                logger.exception("Error loading room %s", room_name)
                await self.send(session, error_message("Room could not be loaded"))
                return

            if not out.success or out.room is None:
                await self.send(session, error_message(out.errors[0].message))
                return

            self._rooms[room_name] = out.room
            self.presence.add(room_name, Member(connection_id=session.connection_id, role=out.role))
            self._sockets.setdefault(room_name, {})[session.connection_id] = session.socket
            session.room_name = room_name

            init = public_state(out.room)
            init.update(
                roomName=room_name,
                role=out.role,
                userCount=self.presence.user_count(room_name),
            )
            await self.send(session, {"type": "init", "data": init})

        logger.info("Connection %s joined room %s as %s", session.connection_id, room_name, out.role)

    async def leave(self, session: ClientSession) -> None:
        room_name = session.room_name
        if room_name is None:
            return

        async with self._lock(room_name):
            session.room_name = None
            sockets = self._sockets.get(room_name, {})
            sockets.pop(session.connection_id, None)
            if not sockets:
                self._sockets.pop(room_name, None)

            out = run_leave(
                LeaveInput(room_name=room_name, connection_id=session.connection_id),
                self.presence,
                self.presence_rules,
            )
            if out.notice:
                await self.broadcast(room_name, out.notice)

            if not self.presence.is_active(room_name):
                self._rooms.pop(room_name, None)
                logger.info("Room %s is empty; unloaded", room_name)

    # --- Messages ---

    async def handle_message(self, session: ClientSession, raw: str) -> None:
        if len(raw.encode("utf-8")) > self.max_message_bytes:
            await self.send(session, error_message("Message too large"))
            return

        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            await self.send(session, error_message("Malformed message"))
            return

        if not isinstance(message, dict) or not isinstance(message.get("type"), str):
            await self.send(session, error_message("Malformed message"))
            return

        update_type: str = message["type"]
        data = message.get("data")

        if update_type == "joinRoom":
            await self.join(session, data)
            return

        room_name = session.room_name
        if room_name is None:
            await self.send(session, error_message("Join a room first"))
            return

        member = self.presence.get(room_name, session.connection_id)
        if member is None:
            await self.send(session, error_message("Join a room first"))
            return

        if not self.policy.can_send(member, update_type):
            reason = READONLY_MESSAGE if member.role == "readonly" else ADMIN_ONLY_MESSAGE
            await self.send(session, error_message(reason))
            return

        async with self._lock(room_name):
            room = self._rooms.get(room_name)
            if room is None:
                await self.send(session, error_message("Join a room first"))
                return

            if update_type == "userInfo":
                accepted = await self._identify(session, room_name, data)
            else:
                accepted = await self._apply(session, room, update_type, data)
            if not accepted:
                return

            await self.broadcast(room_name, {"type": update_type, "data": data}, exclude=session.connection_id)

    async def _identify(self, session: ClientSession, room_name: str, data: Any) -> bool:
        data = data if isinstance(data, dict) else {}
        out = run_identify(
            IdentifyInput(
                room_name=room_name,
                connection_id=session.connection_id,
                user_id=data.get("userId"),
                user_name=data.get("userName"),
            ),
            self.presence,
            self.presence_rules,
        )
        if not out.success:
            await self.send(session, error_message(out.errors[0].message))
            return False
        if out.notice:
            await self.broadcast(room_name, out.notice, exclude=session.connection_id)
        return True

    async def _apply(self, session: ClientSession, room: RoomRecord, update_type: str, data: Any) -> bool:
        result = run_apply(
            ApplyUpdateInput(state=room.state, update_type=update_type, data=data, now=self.clock.now_utc()),
            rules=self.canvas_rules,
        )
        if not result.success:
            await self.send(session, error_message(result.errors[0].message))
            return False

        if result.persist:
            try:
                await asyncio.to_thread(save_room, room, self.repo, self.clock)
            except OSError:
                logger.exception("Error saving room %s", room.name)
                await self.send(session, error_message("Failed to save room state"))
        return True

    # --- REST entry points ---

    async def load_room(self, room_name: str, password: str | None) -> RoomOutput:
        async with self._lock(room_name):
            inp = LoadRoomInput(room_name=room_name, password=password, live_room=self._rooms.get(room_name))
            return await asyncio.to_thread(run_load, inp, self.repo, self.hasher, self.policy)

    async def set_password(self, room_name: str, password: str) -> RoomOutput:
        if self.room_rules is None:
            raise RuntimeError("RoomHub needs room rules to set passwords")

        async with self._lock(room_name):
            inp = SetPasswordInput(room_name=room_name, password=password, live_room=self._rooms.get(room_name))
            out = await asyncio.to_thread(
                run_set_password, inp, self.repo, self.hasher, self.policy, self.room_rules, self.clock
            )
            if out.success and out.room is not None and room_name in self._sockets:
                await self.broadcast(
                    room_name,
                    {
                        "type": "roomPasswordChanged",
                        "data": {"isPasswordProtected": out.room.is_password_protected},
                    },
                )
            return out
