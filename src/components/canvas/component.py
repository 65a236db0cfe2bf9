"""
Canvas component - applies realtime updates to a room's drawing state.

Invariants:
- I1: Every stored element has an id, and each id appears at most once
- I2: A layer only lists ids it was given; deleting an element unlists it everywhere
- I3: The state always has at least one layer
- I4: Transient updates leave the stored state untouched
"""

from __future__ import annotations

from ._impl import KNOWN_TYPES, TRANSIENT_TYPES, apply_update
from .models import ApplyResult, ApplyUpdateInput
from .ports import RulesPort


def run_apply(inp: ApplyUpdateInput, *, rules: RulesPort | None = None) -> ApplyResult:
    transient = TRANSIENT_TYPES
    if rules is not None:
        transient = frozenset(rules.get_transient_update_types()) | TRANSIENT_TYPES
    return apply_update(inp, transient_types=transient)


def is_known_type(update_type: str) -> bool:
    return update_type in KNOWN_TYPES


def run(inp: ApplyUpdateInput, *, rules: RulesPort | None = None) -> ApplyResult:
    if isinstance(inp, ApplyUpdateInput):
        return run_apply(inp, rules=rules)
    raise ValueError(f"Unknown input type: {type(inp)}")
