import os

from localtypes import TileState

# Constants

RESET = "\033[0m"

# Tile palette (RGB), shared by the terminal display and the explorer
TILE_COLORS: dict[TileState, tuple[int, int, int]] = {
    TileState.UNTRACKED: (40, 40, 40),  # dark grey
    TileState.PENDING_DIG: (153, 153, 153),  # light grey
    TileState.PENDING_CHANNEL: (30, 147, 255),  # blue
    TileState.ACTIVE_CHANNEL: (79, 204, 48),  # green
}
UNSAFE_COLOR = (249, 60, 49)  # red

FALLBACK_BG = {
    TileState.UNTRACKED: "\033[40m",  # black
    TileState.PENDING_DIG: "\033[47m",  # white (gray)
    TileState.PENDING_CHANNEL: "\033[44m",  # blue
    TileState.ACTIVE_CHANNEL: "\033[42m",  # green
}
FALLBACK_UNSAFE = "\033[101m"  # red


def supports_true_color() -> bool:
    """
    Return True if the terminal claims to support 24-bit (true-color).
    We check COLORTERM and TERM for the usual markers.
    """
    # 1) Check COLORTERM
    ct = os.getenv("COLORTERM", "")
    if "truecolor" in ct.lower() or "24bit" in ct.lower():
        return True

    # 2) Check TERM
    term = os.getenv("TERM", "")
    if "truecolor" in term.lower() or "24bit" in term.lower():
        return True

    return False


def bg_color_24b(red: int, green: int, blue: int) -> str:
    return f"\033[48;2;{red};{green};{blue}m"


def tile_background(state: TileState, unsafe: bool) -> str:
    """ANSI background for a tile, 24-bit when the terminal allows it."""
    if supports_true_color():
        return bg_color_24b(*(UNSAFE_COLOR if unsafe else TILE_COLORS[state]))
    return FALLBACK_UNSAFE if unsafe else FALLBACK_BG[state]
