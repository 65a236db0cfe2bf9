"""
Canvas component - shared drawing state for a room.

Applies add/update/delete/clear, layer and camera updates from collaborators.
"""

from ._impl import CLIENT_KEYS, TRANSIENT_TYPES, ensure_layers, strip_client_keys
from .component import is_known_type, run, run_apply
from .models import ApplyResult, ApplyUpdateInput, CanvasValidationError
from .ports import RulesPort

__all__ = [
    # Entry points
    "run",
    "run_apply",
    "is_known_type",
    # Helpers
    "CLIENT_KEYS",
    "TRANSIENT_TYPES",
    "ensure_layers",
    "strip_client_keys",
    # Models
    "ApplyUpdateInput",
    "ApplyResult",
    "CanvasValidationError",
    # Ports
    "RulesPort",
]
