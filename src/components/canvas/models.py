"""
Canvas component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.domain.entities import CanvasState

# --- Validation Error ---


@dataclass(frozen=True)
class CanvasValidationError:
    """Canvas update validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass
class ApplyUpdateInput:
    """Input for applying one client update to a room's canvas state."""

    state: CanvasState
    update_type: str
    data: Any
    now: datetime


# --- Output Models ---


@dataclass
class ApplyResult:
    """
    Result of applying an update.

    ``changed`` is True when the stored state was modified. ``persist`` is True
    when the change must be written to disk (transient updates never persist).
    """

    success: bool = True
    changed: bool = False
    persist: bool = False
    errors: list[CanvasValidationError] = field(default_factory=list)
