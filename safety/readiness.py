"""
Readiness of components: may the layer below a component be worked on?

A component is ready when no member has a non-empty component directly
above it. The check is universal over the component: a single blocked
column defers the whole connected group.
"""

from collections.abc import Set

from localtypes import Position

from .registry import ComponentRegistry


class ReadinessEvaluator:
    """Pure reads over a ComponentRegistry."""

    def __init__(self, registry: ComponentRegistry) -> None:
        self.registry = registry

    def is_position_ready(self, pos: Position) -> bool:
        """Readiness of a single column."""
        above = self.registry.component_at(pos.above)
        return not above

    def is_ready(self, component: Set[Position]) -> bool:
        return all(self.is_position_ready(pos) for pos in component)

    def blockers(self, component: Set[Position]) -> frozenset[Position]:
        """Members whose column is blocked from above."""
        return frozenset(
            pos for pos in component if not self.is_position_ready(pos)
        )
