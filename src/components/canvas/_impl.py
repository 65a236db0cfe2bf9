"""
Canvas update reducer.

Applies one incremental client update to a room's CanvasState in place.

Key behaviors:
- Layers are always present before an update is applied
- Element ids are unique; a repeated ``add`` is ignored and a full sync keeps
  the first element per id, dropping elements that have no id
- Deleting an element removes it from every layer
- Deleting a layer removes the elements it lists
- Transient updates (cursor, move, selection) never touch stored state
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from src.domain.documents import format_timestamp, unique_elements
from src.domain.entities import Camera, CanvasState, Layer, default_layer

from .models import ApplyResult, ApplyUpdateInput, CanvasValidationError

logger = logging.getLogger(__name__)

# Keys the client stamps on every update for attribution; not part of shape data
CLIENT_KEYS = ("userId", "userName")

TRANSIENT_TYPES = frozenset(
    {"move", "cursor", "shapeSelect", "shapeRelease", "userInfo", "roomPasswordChanged"}
)

ID_REQUIRED_TYPES = frozenset(
    {"add", "update", "delete", "addLayer", "deleteLayer", "updateLayer"}
)


def strip_client_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in CLIENT_KEYS}


def ensure_layers(state: CanvasState) -> None:
    if not state.layers:
        state.layers = [default_layer()]
        logger.info("Initialized default layers array")


# --- Handlers ---
# Each handler returns True when the state was modified.


def _add(state: CanvasState, data: dict[str, Any]) -> bool:
    element = strip_client_keys(data)
    if not isinstance(element["id"], (str, int, float)):
        raise ValueError("id must be a string or a number")
    if state.find_element(element["id"]) != -1:
        return False

    state.elements.append(element)

    layer_id = element.get("layerId")
    if layer_id is not None:
        idx = state.find_layer(layer_id)
        if idx != -1 and element["id"] not in state.layers[idx].elements:
            state.layers[idx].elements.append(element["id"])
    return True


def _update(state: CanvasState, data: dict[str, Any]) -> bool:
    idx = state.find_element(data["id"])
    if idx == -1:
        return False
    state.elements[idx] = {**state.elements[idx], **strip_client_keys(data)}
    return True


def _delete(state: CanvasState, data: dict[str, Any]) -> bool:
    element_id = data["id"]
    before = len(state.elements)
    state.elements = [el for el in state.elements if el.get("id") != element_id]

    removed_from_layer = False
    for layer in state.layers:
        if element_id in layer.elements:
            layer.elements = [e for e in layer.elements if e != element_id]
            removed_from_layer = True

    return removed_from_layer or len(state.elements) != before


def _clear(state: CanvasState, data: dict[str, Any]) -> bool:
    state.elements = []
    for layer in state.layers:
        layer.elements = []
    return True


def _full_sync(state: CanvasState, data: dict[str, Any]) -> bool:
    elements = data.get("elements")
    layers = data.get("layers")

    if elements is not None:
        if not isinstance(elements, list) or not all(isinstance(el, dict) for el in elements):
            raise ValueError("elements must be a list of objects")
    if layers is not None:
        if not isinstance(layers, list):
            raise ValueError("layers must be a list")
        parsed = [Layer.model_validate(strip_client_keys(raw)) for raw in layers]

    changed = False
    if elements is not None:
        state.elements = unique_elements(elements)
        changed = True
    if layers is not None:
        state.layers = parsed or [default_layer()]
        changed = True
        logger.info(
            "Full sync: %d layers, %s elements",
            len(state.layers),
            len(elements) if elements is not None else "unchanged",
        )
    return changed


def _add_layer(state: CanvasState, data: dict[str, Any]) -> bool:
    layer = Layer.model_validate(strip_client_keys(data))
    if state.find_layer(layer.id) != -1:
        return False
    state.layers.append(layer)
    logger.info("Added layer: %s (%s)", layer.name, layer.id)
    return True


def _delete_layer(state: CanvasState, data: dict[str, Any]) -> bool:
    idx = state.find_layer(data["id"])
    if idx == -1:
        return False

    layer = state.layers.pop(idx)
    logger.info("Deleting layer: %s with %d elements", layer.name, len(layer.elements))

    doomed = set(layer.elements)
    state.elements = [el for el in state.elements if el.get("id") not in doomed]

    # The client always needs at least one layer to draw into
    ensure_layers(state)
    return True


def _update_layer(state: CanvasState, data: dict[str, Any]) -> bool:
    idx = state.find_layer(data["id"])
    if idx == -1:
        return False

    merged = {**state.layers[idx].model_dump(), **strip_client_keys(data)}
    state.layers[idx] = Layer.model_validate(merged)
    logger.info("Updated layer: %s", state.layers[idx].name)
    return True


def _camera(state: CanvasState, data: dict[str, Any]) -> bool:
    state.camera = Camera.model_validate(strip_client_keys(data))
    return True


HANDLERS: dict[str, Callable[[CanvasState, dict[str, Any]], bool]] = {
    "add": _add,
    "update": _update,
    "delete": _delete,
    "clear": _clear,
    "fullSync": _full_sync,
    "addLayer": _add_layer,
    "deleteLayer": _delete_layer,
    "updateLayer": _update_layer,
    "camera": _camera,
}

KNOWN_TYPES = frozenset(HANDLERS) | TRANSIENT_TYPES


def _error(code: str, message: str, field: str | None = None) -> ApplyResult:
    return ApplyResult(
        success=False,
        errors=[CanvasValidationError(code=code, message=message, field=field)],
    )


def apply_update(
    inp: ApplyUpdateInput,
    transient_types: frozenset[str] = TRANSIENT_TYPES,
) -> ApplyResult:
    """Apply one update to ``inp.state``. Never raises for bad client input."""
    update_type = inp.update_type

    if update_type not in KNOWN_TYPES:
        return _error("unknown_type", f"Unknown update type: {update_type}", "type")

    data = inp.data if inp.data is not None else {}
    if not isinstance(data, dict):
        return _error("invalid_data", "Update data must be an object", "data")

    if update_type in ID_REQUIRED_TYPES and data.get("id") is None:
        return _error("missing_id", f"{update_type} requires an id", "data.id")

    ensure_layers(inp.state)

    handler = HANDLERS.get(update_type)
    if handler is None or update_type in transient_types:
        return ApplyResult(success=True, changed=False, persist=False)

    try:
        changed = handler(inp.state, data)
    except (ValidationError, ValueError) as e:
        logger.warning("Rejected %s update: %s", update_type, e)
        return _error("invalid_data", f"Invalid {update_type} data", "data")

    if changed:
        inp.state.timestamp = format_timestamp(inp.now)

    return ApplyResult(success=True, changed=changed, persist=changed)
