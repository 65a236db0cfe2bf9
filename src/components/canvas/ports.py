from typing import Protocol


class RulesPort(Protocol):
    """Rules access for the canvas reducer."""

    def get_transient_update_types(self) -> list[str]:
        """Update types that are relayed but never stored."""
        ...
