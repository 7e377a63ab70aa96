"""
Connected component registry for channel designations.

Components are maximal sets of target tiles (channel designations) in one
layer, connected through 8-adjacency. They are addressed by slot index: when
components merge, the donor slots are emptied and returned to a free pool so
that later allocations reuse them before the slot list grows.

Algorithm overview:
    build() scans the whole grid once, layer by layer, and calls add() on
    every target tile in scan order. add() looks at the already indexed
    neighbours of the new tile:
        - none:      allocate a slot (smallest free one, else a new one)
        - one slot:  join it
        - several:   the first slot met is the host, the others are merged
                     into it and freed

    The host choice depends on scan order, the resulting membership does not.
    A full rebuild is O(volume) and is the only way components are created;
    there is no incremental diffing.
"""

import logging
from collections.abc import Iterator, Set

import numpy as np

from localtypes import TARGET_STATE_VALUES, Dimensions, GridStore, Position

from .connectivity import layer_neighbors

logger = logging.getLogger(__name__)

Slot = int
Component = set[Position]


class ComponentRegistry:
    """
    Slot-addressed components of target tiles.

    Invariants:
        - a free slot holds an empty component
        - a non-empty component's slot is never free
        - every indexed position points at the slot that holds it
    """

    def __init__(self, dimensions: Dimensions | None = None) -> None:
        self.dimensions = dimensions
        self._components: list[Component] = []
        self._slot_of: dict[Position, Slot] = {}
        self._free: set[Slot] = set()

    def clear(self) -> None:
        self._components.clear()
        self._slot_of.clear()
        self._free.clear()

    def build(self, grid: GridStore) -> None:
        """Discard every component and rescan the entire grid."""
        self.clear()
        self.dimensions = grid.dimensions
        _, _, depth = grid.dimensions

        for z in range(depth):
            states = grid.layer_states(z)
            # argwhere returns indices in row-major order: column x, then y
            for x, y in np.argwhere(np.isin(states, TARGET_STATE_VALUES)):
                self.add(Position(int(x), int(y), z))

        logger.debug(
            f"Built {len(self)} component(s) over {len(self._slot_of)} target tile(s)"
        )

    def add(self, pos: Position) -> Slot:
        """
        Index a target tile, merging the components it bridges.

        Returns the slot now holding the position. Adding an indexed
        position again changes nothing.
        """
        if pos in self._slot_of:
            return self._slot_of[pos]

        # Distinct neighbour slots, in encounter order
        neighbor_slots: list[Slot] = []
        for neighbor in self._neighbors(pos):
            slot = self._slot_of.get(neighbor)
            if slot is not None and slot not in neighbor_slots:
                neighbor_slots.append(slot)

        match neighbor_slots:
            case []:
                host = self._allocate()
            case [host]:
                pass
            case [host, *donors]:
                for donor in donors:
                    self._merge(host, donor)

        self._components[host].add(pos)
        self._slot_of[pos] = host
        return host

    def remove(self, pos: Position) -> None:
        """
        Stop tracking a resolved tile.

        The component is not split: exact connectivity is restored by the
        next rebuild. A component left empty has its slot freed.
        """
        slot = self._slot_of.pop(pos, None)
        if slot is None:
            return
        component = self._components[slot]
        assert pos in component, (
            f"Registry corruption: {pos} indexed at slot {slot} which does not hold it"
        )
        component.discard(pos)
        if not component:
            self._free.add(slot)

    def _neighbors(self, pos: Position) -> Iterator[Position]:
        if self.dimensions is None:
            yield from (
                Position(pos.x + dx, pos.y + dy, pos.z)
                for dx in (-1, 0, 1)
                for dy in (-1, 0, 1)
                if dx or dy
            )
        else:
            yield from layer_neighbors(pos, self.dimensions)

    def _allocate(self) -> Slot:
        if self._free:
            slot = min(self._free)
            self._free.remove(slot)
            assert not self._components[slot], (
                f"Registry corruption: free slot {slot} is not empty"
            )
            return slot
        self._components.append(set())
        return len(self._components) - 1

    def _merge(self, host: Slot, donor: Slot) -> None:
        """Move every member of donor into host and free donor."""
        members = self._components[donor]
        for member in members:
            assert self._slot_of[member] == donor, (
                f"Registry corruption: {member} held by slot {donor} "
                f"but indexed at slot {self._slot_of[member]}"
            )
            self._slot_of[member] = host
        self._components[host] |= members
        self._components[donor] = set()
        self._free.add(donor)
        logger.debug(f"Merged slot {donor} into slot {host} ({len(members)} tile(s))")

    # Queries
    def slot_of(self, pos: Position) -> Slot | None:
        return self._slot_of.get(pos)

    def component(self, slot: Slot) -> Set[Position]:
        return self._components[slot]

    def component_at(self, pos: Position) -> Set[Position] | None:
        """The component holding pos, or None when pos is not tracked."""
        slot = self._slot_of.get(pos)
        if slot is None:
            return None
        component = self._components[slot]
        assert pos in component, (
            f"Registry corruption: {pos} indexed at slot {slot} which does not hold it"
        )
        return component

    def components(self) -> Iterator[tuple[Slot, Set[Position]]]:
        """Non-empty components with their slots, lowest slot first."""
        for slot, component in enumerate(self._components):
            if component:
                yield slot, component

    @property
    def free_slots(self) -> frozenset[Slot]:
        return frozenset(self._free)

    @property
    def slot_count(self) -> int:
        return len(self._components)

    def __contains__(self, pos: object) -> bool:
        return pos in self._slot_of

    def __len__(self) -> int:
        return sum(1 for component in self._components if component)
