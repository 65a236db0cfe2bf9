from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import Member


@dataclass(frozen=True)
class PresenceValidationError:
    code: str
    message: str


@dataclass
class IdentifyInput:
    room_name: str
    connection_id: str
    user_id: Any
    user_name: Any


@dataclass
class LeaveInput:
    room_name: str
    connection_id: str


@dataclass
class PresenceOutput:
    """
    Outcome of a presence change.

    ``notice`` is the message to relay to the other members of the room
    (``userJoined`` / ``userLeft``), or None when nobody needs telling.
    """

    member: Member | None = None
    user_count: int = 0
    notice: dict[str, Any] | None = None
    success: bool = False
    errors: list[PresenceValidationError] = field(default_factory=list)
