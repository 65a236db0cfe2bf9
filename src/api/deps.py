import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.auth.crypto import PasslibPasswordHasher
from src.adapters.clock import SystemClock
from src.adapters.fs.filestore import FileSystemStore
from src.adapters.fs.room_store import JsonRoomRepo
from src.domain.policy import PolicyEngine
from src.rules.loader import load_rules
from src.rules.models import Rules
from src.shell.realtime.hub import RoomHub


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CANVAS_DATA_DIR", "./data"))
        self.rules_path = Path(os.environ.get("CANVAS_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.static_dir = Path(os.environ.get("CANVAS_STATIC_DIR", "./public"))
        self.host = os.environ.get("CANVAS_HOST", "0.0.0.0")
        self.port = int(os.environ.get("CANVAS_PORT", "3001"))

    def uploads_dir(self, rules: Rules) -> Path:
        return self.data_dir / rules.uploads.subdir


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


class CanvasRulesAdapter:
    """Adapter to map generic Rules to Canvas component RulesPort."""

    def __init__(self, rules: Rules):
        self._rules = rules.realtime

    def get_transient_update_types(self) -> list[str]:
        return self._rules.transient_update_types


class RoomRulesAdapter:
    """Adapter to map generic Rules to Rooms component RulesPort."""

    def __init__(self, rules: Rules):
        self._rules = rules.rooms

    def get_adjectives(self) -> list[str]:
        return self._rules.generator.adjectives

    def get_nouns(self) -> list[str]:
        return self._rules.generator.nouns

    def get_max_number(self) -> int:
        return self._rules.generator.max_number

    def get_max_attempts(self) -> int:
        return self._rules.generator.max_attempts

    def get_password_max_length(self) -> int:
        return self._rules.password_max_length


class PresenceRulesAdapter:
    """Adapter to map generic Rules to Presence component RulesPort."""

    def __init__(self, rules: Rules):
        self._rules = rules.presence

    def get_palette(self) -> list[str]:
        return self._rules.palette

    def get_unknown_user_name(self) -> str:
        return self._rules.unknown_user_name


class UploadRulesAdapter:
    """Adapter to map generic Rules to Uploads component RulesPort."""

    def __init__(self, rules: Rules):
        self._rules = rules.uploads

    def get_max_upload_bytes(self) -> int:
        return self._rules.max_upload_bytes

    def get_allowed_mime_types(self) -> list[str]:
        return self._rules.allowlist_mime_types


class CleanupRulesAdapter:
    """Adapter to map generic Rules to Cleanup component RulesPort."""

    def __init__(self, rules: Rules):
        self._rules = rules.cleanup

    def get_max_age_days(self) -> int:
        return self._rules.max_age_days

    def get_skip_active_rooms(self) -> bool:
        return self._rules.skip_active_rooms


def get_room_rules(rules: Rules = Depends(get_rules)) -> RoomRulesAdapter:
    return RoomRulesAdapter(rules)


def get_upload_rules(rules: Rules = Depends(get_rules)) -> UploadRulesAdapter:
    return UploadRulesAdapter(rules)


# --- Services ---
def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


@lru_cache
def hasher_for(algorithm: str) -> PasslibPasswordHasher:
    return PasslibPasswordHasher([algorithm])


def get_hasher(rules: Rules = Depends(get_rules)) -> PasslibPasswordHasher:
    return hasher_for(rules.password_hashing.algorithm)


# --- Repos / Stores ---
def get_room_repo(
    settings: Settings = Depends(get_settings),
    hasher: PasslibPasswordHasher = Depends(get_hasher),
    clock: SystemClock = Depends(get_clock),
) -> JsonRoomRepo:
    return JsonRoomRepo(settings.data_dir, hasher, clock)


def get_upload_store(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> FileSystemStore:
    return FileSystemStore(settings.uploads_dir(rules))


# --- Realtime hub ---
def build_hub(settings: Settings, rules: Rules) -> RoomHub:
    clock = get_clock()
    hasher = hasher_for(rules.password_hashing.algorithm)
    return RoomHub(
        repo=JsonRoomRepo(settings.data_dir, hasher, clock),
        hasher=hasher,
        policy=PolicyEngine(rules),
        clock=clock,
        canvas_rules=CanvasRulesAdapter(rules),
        room_rules=RoomRulesAdapter(rules),
        presence_rules=PresenceRulesAdapter(rules),
        max_message_bytes=rules.realtime.max_message_bytes,
    )


# Hub singleton: all connections of this process share one hub
_hub_instance: RoomHub | None = None


def get_hub(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> RoomHub:
    global _hub_instance
    if _hub_instance is None:
        _hub_instance = build_hub(settings, rules)
    return _hub_instance


def reset_hub() -> None:
    """Drop the hub singleton - useful for testing."""
    global _hub_instance
    _hub_instance = None
