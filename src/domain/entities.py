from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Enums / Literals ---
MemberRole = Literal["admin", "editor", "readonly"]

# Browser clients mint ids as Date.now() + Math.random(), so most ids are fractional
ElementId = str | int | float

DEFAULT_LAYER_ID = "layer_0"
DEFAULT_LAYER_NAME = "Layer 1"


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


# --- Canvas ---

class Camera(BaseModel):
    x: float = 0
    y: float = 0
    zoom: float = 1

    model_config = ConfigDict(extra="allow")

class Layer(BaseModel):
    id: str
    name: str = DEFAULT_LAYER_NAME
    visible: bool = True
    locked: bool = False
    elements: list[ElementId] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


def default_layer() -> Layer:
    return Layer(id=DEFAULT_LAYER_ID, name=DEFAULT_LAYER_NAME)


class CanvasState(BaseModel):
    # Elements are free-form shape records keyed by "id"
    elements: list[dict[str, Any]] = Field(default_factory=list)
    camera: Camera = Field(default_factory=Camera)
    layers: list[Layer] = Field(default_factory=lambda: [default_layer()])
    timestamp: str = Field(default_factory=utc_now_iso)

    def find_element(self, element_id: ElementId) -> int:
        for i, el in enumerate(self.elements):
            if el.get("id") == element_id:
                return i
        return -1

    def find_layer(self, layer_id: str) -> int:
        for i, layer in enumerate(self.layers):
            if layer.id == layer_id:
                return i
        return -1

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

# --- Rooms ---

class RoomRecord(BaseModel):
    name: str
    state: CanvasState = Field(default_factory=CanvasState)
    password_hash: str | None = None
    last_modified: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_password_protected(self) -> bool:
        return bool(self.password_hash)

# --- Presence ---

class Member(BaseModel):
    connection_id: str
    role: MemberRole = "editor"
    user_id: str | None = None
    user_name: str | None = None
    color: str | None = None

    @property
    def is_identified(self) -> bool:
        return self.user_id is not None
