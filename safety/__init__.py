"""
Channel safety core.

This package decides when channel (deep excavation) work may proceed:

**Registry** (registry.py)
    Slot-addressed connected components of channel designations, one layer
    at a time, under 8-connectivity.

**Readiness** (readiness.py)
    A component is ready when nothing directly above any member is still
    tracked.

**Task index** (task_index.py)
    Position -> pending task snapshot, used to cancel deferred work.

**Controller** (controller.py)
    Full management cycles and the per-event incremental path.

The grid, the task list and the event loop belong to the host (see host/).
"""

from .connectivity import KING_OFFSETS, in_bounds, layer_neighbors
from .controller import ComponentSummary, CycleReport, SafetyController
from .readiness import ReadinessEvaluator
from .registry import ComponentRegistry
from .task_index import TaskIndex

__all__ = [
    # Connectivity
    "KING_OFFSETS",
    "in_bounds",
    "layer_neighbors",
    # Registry
    "ComponentRegistry",
    # Readiness
    "ReadinessEvaluator",
    # Task index
    "TaskIndex",
    # Controller
    "SafetyController",
    "CycleReport",
    "ComponentSummary",
]
