"""
Independent cross-check of the component registry.

scipy.ndimage.label computes the 8-connected components of every layer
from scratch. Comparing its partition with the registry's catches merge
bookkeeping errors without relying on the registry's own invariants.
"""

import numpy as np
from scipy import ndimage

from localtypes import TARGET_STATE_VALUES, GridStore, Position
from safety import ComponentRegistry

# 3x3 structuring element: 8-connectivity within a layer
KING_STRUCTURE = np.ones((3, 3), dtype=bool)


def label_layer(grid: GridStore, z: int) -> set[frozenset[Position]]:
    """Connected components of the target tiles of one layer."""
    mask = np.isin(grid.layer_states(z), TARGET_STATE_VALUES)
    labels, count = ndimage.label(mask, structure=KING_STRUCTURE)
    components: set[frozenset[Position]] = set()
    for label in range(1, count + 1):
        components.add(
            frozenset(
                Position(int(x), int(y), z) for x, y in np.argwhere(labels == label)
            )
        )
    return components


def label_grid(grid: GridStore) -> set[frozenset[Position]]:
    _, _, depth = grid.dimensions
    return set().union(*(label_layer(grid, z) for z in range(depth)))


def partition_errors(registry: ComponentRegistry, grid: GridStore) -> list[str]:
    """
    Differences between the registry and a fresh labelling of the grid.

    An empty list means the registry partitions the target tiles exactly.
    """
    errors = []
    registered = {frozenset(component) for _, component in registry.components()}
    expected = label_grid(grid)

    for component in registered - expected:
        errors.append(f"Unexpected component of {len(component)} tile(s): {sorted(component)}")
    for component in expected - registered:
        errors.append(f"Missing component of {len(component)} tile(s): {sorted(component)}")

    for slot in registry.free_slots:
        if registry.component(slot):
            errors.append(f"Free slot {slot} is not empty")
    for slot, component in registry.components():
        if slot in registry.free_slots:
            errors.append(f"Slot {slot} is in use but marked free")
        for pos in component:
            if registry.slot_of(pos) != slot:
                errors.append(f"{pos} held by slot {slot} but indexed at {registry.slot_of(pos)}")
    return errors
