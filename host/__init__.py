"""
In-memory host: the collaborators the safety core runs against.

    grid        VoxelGrid, numpy-backed tile storage (GridStore)
    tasks       TaskList, pending excavation tasks (TaskSystem)
    events      EventManager, synchronous notifications
    simulation  Simulation, the loop tying them together
"""

from .events import EventManager, EventType
from .grid import NO_PRIORITY, GridBlock, VoxelGrid
from .simulation import Simulation
from .tasks import TaskList

__all__ = [
    "EventManager",
    "EventType",
    "GridBlock",
    "NO_PRIORITY",
    "Simulation",
    "TaskList",
    "VoxelGrid",
]
