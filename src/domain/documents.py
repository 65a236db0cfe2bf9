"""
Room document (de)serialisation.

Room documents are plain JSON objects. Older documents predate layers and
stored the room password in plaintext; both are normalised on load so the
rest of the code only ever sees a well-formed RoomRecord.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from src.domain.entities import (
    DEFAULT_LAYER_ID,
    DEFAULT_LAYER_NAME,
    Camera,
    CanvasState,
    Layer,
    RoomRecord,
    default_layer,
)
from src.ports.auth import PasswordHasherPort

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (with optional trailing Z). Naive values are taken as UTC."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def last_modified_of(doc: dict[str, Any]) -> datetime | None:
    return parse_timestamp(doc.get("lastModified")) or parse_timestamp(doc.get("timestamp"))


def unique_elements(elements: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep the first element for each id; elements without a usable id are dropped."""
    seen: set[Any] = set()
    unique: list[dict[str, Any]] = []
    for el in elements:
        element_id = el.get("id")
        if not isinstance(element_id, (str, int, float)) or element_id in seen:
            continue
        seen.add(element_id)
        unique.append(dict(el))
    return unique


def _normalise_layers(raw_layers: Any, elements: list[dict[str, Any]]) -> list[Layer]:
    if not isinstance(raw_layers, list):
        ids = [el["id"] for el in elements]
        return [Layer(id=DEFAULT_LAYER_ID, name=DEFAULT_LAYER_NAME, elements=ids)]

    layers: list[Layer] = []
    for raw in raw_layers:
        if not isinstance(raw, dict):
            continue
        try:
            layers.append(Layer.model_validate(raw))
        except ValidationError:
            logger.warning("Dropping malformed layer %r", raw.get("id"))

    return layers or [default_layer()]


def record_from_document(
    name: str,
    doc: dict[str, Any],
    hasher: PasswordHasherPort,
    now: datetime,
) -> RoomRecord:
    raw_elements = doc.get("elements")
    elements = (
        unique_elements([el for el in raw_elements if isinstance(el, dict)]) if isinstance(raw_elements, list) else []
    )

    raw_camera = doc.get("camera")
    try:
        camera = Camera.model_validate(raw_camera) if isinstance(raw_camera, dict) else Camera()
    except ValidationError:
        camera = Camera()

    state = CanvasState(
        elements=elements,
        camera=camera,
        layers=_normalise_layers(doc.get("layers"), elements),
        timestamp=doc.get("timestamp") if isinstance(doc.get("timestamp"), str) else format_timestamp(now),
    )

    password_hash = doc.get("passwordHash") or None
    legacy_password = doc.get("password")
    if not password_hash and isinstance(legacy_password, str) and legacy_password:
        logger.info("Re-hashing legacy plaintext password for room %s", name)
        password_hash = hasher.hash_password(legacy_password)

    return RoomRecord(
        name=name,
        state=state,
        password_hash=password_hash,
        last_modified=last_modified_of(doc) or now,
    )


def document_from_record(room: RoomRecord) -> dict[str, Any]:
    doc = room.state.to_wire()
    doc["passwordHash"] = room.password_hash
    doc["isPasswordProtected"] = room.is_password_protected
    doc["lastModified"] = format_timestamp(room.last_modified)
    return doc


def public_state(room: RoomRecord) -> dict[str, Any]:
    """State as sent to clients: never includes password material."""
    doc = room.state.to_wire()
    doc["isPasswordProtected"] = room.is_password_protected
    return doc
