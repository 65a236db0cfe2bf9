from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class RangeRule(BaseModel):
    min: int
    max: int

class RegexRule(RangeRule):
    pattern: str

class RoomNameGeneratorRules(BaseModel):
    adjectives: list[str]
    nouns: list[str]
    max_number: int = 999
    max_attempts: int = 20

class RoomsRules(BaseModel):
    name: RegexRule
    generator: RoomNameGeneratorRules
    password_max_length: int = 128

class PasswordHashingRules(BaseModel):
    algorithm: str = "argon2"

class RealtimeRules(BaseModel):
    max_message_bytes: int = 1_048_576
    # Update types that are relayed but never written to disk
    transient_update_types: list[str]

class PermissionsRules(BaseModel):
    clear_requires_admin: bool = False
    readonly_allowed_updates: list[str] = Field(default_factory=lambda: ["cursor", "userInfo"])

class PresenceRules(BaseModel):
    palette: list[str]
    unknown_user_name: str = "Unknown"

class UploadsRules(BaseModel):
    max_upload_bytes: int
    allowlist_mime_types: list[str]
    subdir: str = "uploads"

class CleanupRules(BaseModel):
    enabled: bool = True
    max_age_days: int = 30
    interval_hours: float = 24.0
    skip_active_rooms: bool = True

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str] = Field(default_factory=list)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

class Rules(BaseModel):
    project: ProjectRules
    rooms: RoomsRules
    password_hashing: PasswordHashingRules = Field(default_factory=PasswordHashingRules)
    realtime: RealtimeRules
    permissions: PermissionsRules = Field(default_factory=PermissionsRules)
    presence: PresenceRules
    uploads: UploadsRules
    cleanup: CleanupRules = Field(default_factory=CleanupRules)
    ops: OpsRules
