"""
Safety controller: gates channel work on the readiness of the layer above.

Two paths drive the controller:

**Full cycle** (manage)
    Rebuild the component registry and the task index, then walk every
    component. Readiness is decided per component, the resulting action per
    tile:
        - ready:     clear the unsafe mark, flag the block as designated
        - not ready: set the unsafe mark, cancel the live task if there is one
    Dig designations directly under an unfinished channel are held the same
    way, one tile at a time, and released once the channel above is gone.

**Event path** (on_task_started, on_task_completed)
    Touches one column and its 8 neighbouring columns only, so that task
    events never pay for a rebuild.

Tiles without priority metadata, or with a priority at or above the
reserved threshold, are never touched by either path.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from constants import RESERVED_PRIORITY
from localtypes import (
    GridStore,
    Position,
    Task,
    TaskKind,
    TaskSystem,
    TileState,
    TileStatus,
)

from .connectivity import layer_neighbors
from .readiness import ReadinessEvaluator
from .registry import ComponentRegistry, Slot
from .task_index import TaskIndex

logger = logging.getLogger(__name__)


@dataclass
class CycleReport:
    """Outcome of one full management cycle."""

    components: int = 0
    ready: int = 0
    deferred: int = 0
    unmanaged: int = 0
    held_digs: int = 0
    cancelled: list[Task] = field(default_factory=list)
    restored: int = 0


@dataclass(frozen=True, slots=True)
class ComponentSummary:
    """Diagnostic view of one component."""

    slot: Slot
    z: int
    members: frozenset[Position]
    ready: bool
    blockers: frozenset[Position]
    with_task: frozenset[Position]


class SafetyController:
    def __init__(
        self,
        grid: GridStore,
        task_system: TaskSystem,
        reserved_priority: int = RESERVED_PRIORITY,
    ) -> None:
        self.grid = grid
        self.task_system = task_system
        self.reserved_priority = reserved_priority
        self.registry = ComponentRegistry(grid.dimensions)
        self.evaluator = ReadinessEvaluator(self.registry)
        self.task_index = TaskIndex(task_system)
        # Channel tasks pulled because their tile was not ready yet
        self.deferred: dict[Position, Task] = {}

    def reset(self) -> None:
        self.registry.clear()
        self.task_index.clear()
        self.deferred.clear()

    def is_eligible(self, pos: Position) -> bool:
        """Missing or reserved priority means the user manages the tile."""
        priority = self.grid.priority(pos)
        return priority is not None and priority < self.reserved_priority

    # Full cycle
    def manage(self) -> CycleReport:
        self.registry.build(self.grid)
        self.task_index.refresh()
        report = self.evaluate_all()
        logger.info(
            f"Managed {report.components} component(s): {report.ready} ready, "
            f"{report.deferred} deferred, {report.unmanaged} unmanaged tile(s), "
            f"{report.held_digs} dig(s) held, {len(report.cancelled)} task(s) cancelled"
        )
        return report

    def evaluate_all(self) -> CycleReport:
        report = CycleReport()
        for _, component in self.registry.components():
            report.components += 1
            ready = self.evaluator.is_ready(component)
            for pos in sorted(component, key=Position.sort_key):
                if not self.is_eligible(pos):
                    report.unmanaged += 1
                elif ready:
                    report.ready += 1
                    if self._allow(pos):
                        report.restored += 1
                else:
                    report.deferred += 1
                    task = self._defer(pos)
                    if task is not None:
                        report.cancelled.append(task)
        self._hold_digs(report)
        return report

    def _hold_digs(self, report: CycleReport) -> None:
        """Dig designations wait for the channel directly above them."""
        _, _, depth = self.grid.dimensions
        for z in range(depth):
            layer = self.grid.layer_states(z)
            for x, y in np.argwhere(layer == TileState.PENDING_DIG.value):
                pos = Position(int(x), int(y), z)
                if not self.is_eligible(pos):
                    continue
                if self.evaluator.is_position_ready(pos):
                    self.grid.set_unsafe(pos, False)
                    continue
                report.held_digs += 1
                self.grid.set_unsafe(pos, True)
                task = self.task_index.cancel_at(pos)
                if task is not None:
                    report.cancelled.append(task)

    def _allow(self, pos: Position) -> bool:
        """Returns True when pos had a deferred task waiting on it."""
        self.grid.set_unsafe(pos, False)
        self.grid.block_at(pos).designated = True
        task = self.deferred.pop(pos, None)
        if task is not None:
            logger.debug(f"{pos} is ready again, {task.kind.value} work may resume")
        return task is not None

    def _defer(self, pos: Position) -> Task | None:
        self.grid.set_unsafe(pos, True)
        task = self.task_index.cancel_at(pos)
        if task is not None:
            self.deferred[pos] = task
        return task

    # Event path
    def on_task_started(self, task: Task) -> bool:
        """
        Cancel a task started below an unfinished channel.

        Returns True when the task was cancelled.
        """
        if not self.grid.contains(task.pos) or not self.is_eligible(task.pos):
            return False
        if self.task_system.get_task(task.handle) is None:
            return False

        above = task.pos.above
        if self.grid.contains(above) and self.grid.tile_state(above).is_target:
            self.task_index.cancel(task)
            # Held until the channel above completes
            self.grid.set_unsafe(task.pos, True)
            if task.kind is TaskKind.CHANNEL:
                self.deferred[task.pos] = task
            if self.is_eligible(above):
                self.grid.set_unsafe(above, True)
            logger.debug(f"Cancelled {task.kind.value} at {task.pos}: {above} unfinished")
            return True

        self.task_index.track(task)
        return False

    def on_task_completed(self, task: Task) -> None:
        pos = task.pos
        self.registry.remove(pos)
        self.task_index.untrack(pos)
        self.deferred.pop(pos, None)
        if not self.grid.contains(pos):
            return

        self._check_column(pos)
        for neighbor in layer_neighbors(pos, self.grid.dimensions):
            self._check_column(neighbor)

    def _check_column(self, pos: Position) -> None:
        """Above pos becomes unsafe, below pos may become safe."""
        above = pos.above
        if (
            self.grid.contains(above)
            and self.grid.tile_state(above).is_target
            and self.is_eligible(above)
        ):
            self.grid.set_unsafe(above, True)

        below = pos.below
        if (
            self.grid.contains(below)
            and self.grid.tile_state(below).is_designated
            and self.is_eligible(below)
            and self.evaluator.is_position_ready(below)
        ):
            self.grid.set_unsafe(below, False)

    # Queries
    def status(self, pos: Position) -> TileStatus:
        if not self.grid.tile_state(pos).is_target or not self.is_eligible(pos):
            return TileStatus.UNMANAGED
        component = self.registry.component_at(pos)
        if component is None:
            ready = self.evaluator.is_position_ready(pos)
        else:
            ready = self.evaluator.is_ready(component)
        return TileStatus.READY if ready else TileStatus.DEFERRED

    def summaries(self) -> list[ComponentSummary]:
        summaries = []
        for slot, component in self.registry.components():
            members = frozenset(component)
            blockers = self.evaluator.blockers(component)
            summaries.append(
                ComponentSummary(
                    slot=slot,
                    z=next(iter(members)).z,
                    members=members,
                    ready=not blockers,
                    blockers=blockers,
                    with_task=frozenset(
                        pos for pos in members if self.task_index.has_task(pos)
                    ),
                )
            )
        return summaries
