"""
PresenceRegistry - who is connected to which room.

Key behaviors:
- Membership is tracked per room and per connection
- A member counts towards the room's user count once it has identified itself
- Several connections sharing one user id count as one user
- Cursor colors are derived from the user id, matching the browser client
"""

from __future__ import annotations

from src.domain.entities import Member

DEFAULT_PALETTE = (
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#96CEB4",
    "#FECA57",
    "#FF9FF3",
    "#54A0FF",
    "#5F27CD",
    "#00D2D3",
    "#FF9F43",
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def user_color(user_id: str, palette: tuple[str, ...] | list[str] = DEFAULT_PALETTE) -> str:
    """Stable color for a user id: 32-bit ``h = h * 31 + code`` hash over the id."""
    h = 0
    for ch in user_id:
        h = _to_int32((h << 5) - h + ord(ch))
    return palette[abs(h) % len(palette)]


class PresenceRegistry:
    """In-memory member registry - suitable for single-process deployments."""

    def __init__(self) -> None:
        self._rooms: dict[str, dict[str, Member]] = {}

    def add(self, room_name: str, member: Member) -> Member:
        self._rooms.setdefault(room_name, {})[member.connection_id] = member
        return member

    def get(self, room_name: str, connection_id: str) -> Member | None:
        return self._rooms.get(room_name, {}).get(connection_id)

    def remove(self, room_name: str, connection_id: str) -> Member | None:
        members = self._rooms.get(room_name)
        if members is None:
            return None
        member = members.pop(connection_id, None)
        if not members:
            del self._rooms[room_name]
        return member

    def members(self, room_name: str) -> list[Member]:
        return list(self._rooms.get(room_name, {}).values())

    def user_count(self, room_name: str) -> int:
        return len({m.user_id for m in self.members(room_name) if m.is_identified})

    def is_active(self, room_name: str) -> bool:
        return room_name in self._rooms

    def rooms(self) -> list[str]:
        return list(self._rooms)

    def connection_count(self) -> int:
        return sum(len(members) for members in self._rooms.values())

    def clear(self) -> None:
        """Clear all rooms - useful for testing."""
        self._rooms.clear()
