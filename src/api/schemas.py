from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use the browser client's camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Rooms ---
class GeneratedRoomResponse(CamelModel):
    room_name: str


class RoomCheckResponse(CamelModel):
    room_name: str
    exists: bool
    requires_password: bool


class SetPasswordRequest(BaseModel):
    password: str = ""


class SetPasswordResponse(CamelModel):
    room_name: str
    is_password_protected: bool
    message: str


# --- Status ---
class StatusResponse(CamelModel):
    status: str
    timestamp: str
    connected_clients: int
    rooms: int
    elements: int


# --- Uploads ---
class UploadResponse(CamelModel):
    filename: str
    original_name: str
    size: int
    mime_type: str
    url: str


# --- Canvas state ---
class CanvasStateResponse(CamelModel):
    """Room state as served over REST; shape records pass through untouched."""

    elements: list[dict[str, Any]] = Field(default_factory=list)
    camera: dict[str, Any] = Field(default_factory=dict)
    layers: list[dict[str, Any]] = Field(default_factory=list)
    timestamp: str
    is_password_protected: bool = False
