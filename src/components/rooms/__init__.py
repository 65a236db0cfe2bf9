"""
Rooms component - room naming, joining and password protection.
"""

from .component import (
    INVALID_NAME,
    INVALID_PASSWORD,
    run,
    run_check,
    run_generate_name,
    run_join,
    run_load,
    run_set_password,
    save_room,
)
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

__all__ = [
    # Entry points
    "run",
    "run_check",
    "run_generate_name",
    "run_join",
    "run_load",
    "run_set_password",
    "save_room",
    # Errors
    "INVALID_NAME",
    "INVALID_PASSWORD",
    "RoomValidationError",
    # Input models
    "CheckRoomInput",
    "GenerateNameInput",
    "JoinRoomInput",
    "LoadRoomInput",
    "SetPasswordInput",
    # Output models
    "GeneratedNameOutput",
    "JoinRoomOutput",
    "RoomCheckOutput",
    "RoomOutput",
    # Ports
    "NamingPolicyPort",
    "PasswordHasherPort",
    "RandomPort",
    "RoomRepoPort",
    "RulesPort",
    "TimePort",
]
