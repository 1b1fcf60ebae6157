"""
Tile module for the minefield engine.

Represents a single grid cell: whether it is mined, how many mines
surround it, and whether the player has revealed or marked it.
"""
from enum import Enum, auto
from dataclasses import dataclass


# ============================================================================
# Constants
# ============================================================================

class DisplayState(Enum):
    """Mutually exclusive states a tile can be shown in."""

    HIDDEN = auto()
    FLAGGED = auto()
    MINE = auto()
    COUNT = auto()


@dataclass(frozen=True)
class TileDisplay:
    """
    What a player is allowed to see of a tile.

    Attributes:
        state: Display state of the tile.
        count: Adjacent mine count, only meaningful for COUNT.
    """

    state: DisplayState
    count: int = 0

    def __str__(self) -> str:
        if self.state == DisplayState.HIDDEN:
            return "[ ]"
        if self.state == DisplayState.FLAGGED:
            return "[?]"
        if self.state == DisplayState.MINE:
            return " * "
        return f" {self.count} "


HIDDEN = TileDisplay(DisplayState.HIDDEN)
FLAGGED = TileDisplay(DisplayState.FLAGGED)
MINE = TileDisplay(DisplayState.MINE)


# ============================================================================
# Tile Data Class
# ============================================================================

@dataclass
class Tile:
    """
    A single tile of the minefield.

    Attributes:
        mined: Whether this tile holds a mine.
        adjacent_mines: Count of mines in the 8 neighbouring tiles.
        revealed: Whether the player has uncovered this tile.
        marked: Whether the player has flagged this tile as a suspected mine.
    """

    mined: bool = False
    adjacent_mines: int = 0
    revealed: bool = False
    marked: bool = False

    def set_mined(self, value: bool) -> None:
        """Set the mined flag. Only used while placing mines."""
        self.mined = value

    def increment_adjacent_mines(self) -> None:
        """Record one more mined neighbour."""
        self.adjacent_mines += 1

    def reveal(self) -> None:
        """Uncover this tile, dropping any mark on it."""
        self.marked = False
        self.revealed = True

    def toggle_mark(self) -> None:
        """
        Flip the mark on this tile.

        The board checks that the tile is still hidden before calling this.
        """
        self.marked = not self.marked

    def is_correctly_flagged(self) -> bool:
        """Check if the tile is marked and actually mined."""
        return self.marked and self.mined

    def display_state(self) -> TileDisplay:
        """
        Derive what the player sees for this tile.

        Returns:
            HIDDEN or FLAGGED while unrevealed, MINE for a revealed mine,
            otherwise COUNT carrying the adjacent mine count (possibly 0).
        """
        if not self.revealed:
            return FLAGGED if self.marked else HIDDEN
        if self.mined:
            return MINE
        return TileDisplay(DisplayState.COUNT, self.adjacent_mines)

    def to_observation(self) -> int:
        """
        Convert tile to observation value for agents.

        Returns:
            -1: Hidden tile
            -2: Marked tile
            0-8: Revealed tile with adjacent mine count
            9: Revealed mine
        """
        display = self.display_state()
        if display.state == DisplayState.HIDDEN:
            return -1
        if display.state == DisplayState.FLAGGED:
            return -2
        if display.state == DisplayState.MINE:
            return 9
        return display.count

    def __str__(self) -> str:
        return str(self.display_state())
