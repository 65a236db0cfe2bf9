from dataclasses import dataclass, field

from src.domain.entities import MemberRole, RoomRecord


@dataclass(frozen=True)
class RoomValidationError:
    code: str
    message: str


@dataclass
class GenerateNameInput:
    pass


@dataclass
class CheckRoomInput:
    room_name: str


@dataclass
class JoinRoomInput:
    room_name: str
    password: str | None = None
    read_only: bool = False
    # Room already held in memory by the realtime hub, if any
    live_room: RoomRecord | None = None


@dataclass
class LoadRoomInput:
    room_name: str
    password: str | None = None
    live_room: RoomRecord | None = None


@dataclass
class SetPasswordInput:
    room_name: str
    password: str
    live_room: RoomRecord | None = None


@dataclass
class GeneratedNameOutput:
    room_name: str | None = None
    success: bool = False
    errors: list[RoomValidationError] = field(default_factory=list)


@dataclass
class RoomCheckOutput:
    room_name: str
    exists: bool = False
    requires_password: bool = False
    success: bool = False
    errors: list[RoomValidationError] = field(default_factory=list)


@dataclass
class JoinRoomOutput:
    room: RoomRecord | None = None
    created: bool = False
    role: MemberRole = "editor"
    success: bool = False
    errors: list[RoomValidationError] = field(default_factory=list)


@dataclass
class RoomOutput:
    room: RoomRecord | None = None
    success: bool = False
    errors: list[RoomValidationError] = field(default_factory=list)
