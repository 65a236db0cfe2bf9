"""
Tests for room naming and member permission policy.
"""

from __future__ import annotations

import pytest

from src.domain.entities import Member
from src.domain.policy import PolicyEngine


class TestRoomNames:
    @pytest.mark.parametrize("name", ["abc", "happy-canvas-42", "ABC-def-123", "x" * 50])
    def test_valid(self, policy: PolicyEngine, name: str) -> None:
        assert policy.is_valid_room_name(name)

    @pytest.mark.parametrize(
        "name",
        ["", "ab", "x" * 51, "with space", "dots.here", "slash/room", "émoji", None, 123],
    )
    def test_invalid(self, policy: PolicyEngine, name: object) -> None:
        assert not policy.is_valid_room_name(name)

    def test_trailing_newline_rejected(self, policy: PolicyEngine) -> None:
        assert not policy.is_valid_room_name("room\n")


class TestPermissions:
    def test_readonly_limited_to_allowlist(self, policy: PolicyEngine) -> None:
        viewer = Member(connection_id="c1", role="readonly")

        assert policy.can_send(viewer, "cursor")
        assert policy.can_send(viewer, "userInfo")
        assert not policy.can_send(viewer, "add")
        assert not policy.can_send(viewer, "clear")
        assert not policy.can_send(viewer, "move")

    def test_editor_can_clear_by_default(self, policy: PolicyEngine) -> None:
        assert policy.can_send(Member(connection_id="c1", role="editor"), "clear")

    def test_clear_requires_admin_when_configured(self, rules) -> None:
        rules.permissions.clear_requires_admin = True
        policy = PolicyEngine(rules)

        assert not policy.can_send(Member(connection_id="c1", role="editor"), "clear")
        assert policy.can_send(Member(connection_id="c2", role="admin"), "clear")
        assert policy.can_send(Member(connection_id="c1", role="editor"), "add")
