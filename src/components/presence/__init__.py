"""
Presence component - who is in which room, and how they are shown to others.
"""

from ._impl import DEFAULT_PALETTE, PresenceRegistry, user_color
from .component import run, run_identify, run_leave
from .models import IdentifyInput, LeaveInput, PresenceOutput, PresenceValidationError
from .ports import PresenceStorePort, RulesPort

__all__ = [
    # Entry points
    "run",
    "run_identify",
    "run_leave",
    # Registry
    "DEFAULT_PALETTE",
    "PresenceRegistry",
    "user_color",
    # Models
    "IdentifyInput",
    "LeaveInput",
    "PresenceOutput",
    "PresenceValidationError",
    # Ports
    "PresenceStorePort",
    "RulesPort",
]
