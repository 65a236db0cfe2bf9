import re

from src.domain.entities import Member
from src.rules.models import Rules


class PolicyEngine:
    """Room naming and member permission checks driven by rules."""

    def __init__(self, rules: Rules):
        self.rules = rules
        self._name_re = re.compile(rules.rooms.name.pattern)

    def is_valid_room_name(self, name: object) -> bool:
        if not name or not isinstance(name, str):
            return False
        limits = self.rules.rooms.name
        if not (limits.min <= len(name) <= limits.max):
            return False
        return self._name_re.fullmatch(name) is not None

    def can_send(self, member: Member, update_type: str) -> bool:
        """
        Check whether a member may send the given update type.

        Read-only members may only send the configured allowlist (cursor moves
        and identity by default). Clearing the canvas can be restricted to admins.
        """
        if member.role == "readonly":
            return update_type in self.rules.permissions.readonly_allowed_updates

        if update_type == "clear" and self.rules.permissions.clear_requires_admin:
            return member.role == "admin"

        return True
