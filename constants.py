"""
Global constants used throughout the project
"""

from typing import Final

# Grid substructure: blocks are BLOCK_SIZE x BLOCK_SIZE columns of one layer
BLOCK_SIZE: Final[int] = 16

# Full management cycles run at most once every TICK_INTERVAL ticks
TICK_INTERVAL: Final[int] = 100

# Tiles at or above this priority are left alone (user reserved)
RESERVED_PRIORITY: Final[int] = 7
DEFAULT_PRIORITY: Final[int] = 4

# Simulation: ticks a task needs before it completes
WORK_TICKS: Final[int] = 10
