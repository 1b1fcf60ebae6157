"""
Board module for the minefield engine.

Implements the grid of tiles with mine placement, flood-fill revealing,
marking, win/loss detection, game time and scoring.
"""
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .tile import Tile, TileDisplay


# ============================================================================
# Constants
# ============================================================================

DEFAULT_ROWS = 10
DEFAULT_COLUMNS = 10
SAFE_TILE = (0, 0)
SCORE_MULTIPLIER = 20


class GameState(Enum):
    """Possible states of the game."""

    ONGOING = auto()
    WON = auto()
    LOST = auto()


class StepResult(Enum):
    """Outcome of stepping on a tile."""

    CONTINUE = auto()
    LOST = auto()
    INVALID_COORDINATE = auto()
    GAME_OVER = auto()


class MarkResult(Enum):
    """Outcome of toggling a mark."""

    OK = auto()
    INVALID_COORDINATE = auto()
    ALREADY_REVEALED = auto()
    GAME_OVER = auto()


@dataclass
class BoardConfig:
    """
    Validated construction parameters for a board.

    Invalid values are not rejected: they are replaced with defaults and
    the substitution is recorded in ``dimensions_adjusted`` and
    ``mines_adjusted`` so callers can tell the player.

    Attributes:
        rows: Number of rows.
        columns: Number of columns.
        num_mines: Number of mines to place.
    """

    rows: int = DEFAULT_ROWS
    columns: int = DEFAULT_COLUMNS
    num_mines: int = DEFAULT_ROWS * DEFAULT_COLUMNS // 4
    dimensions_adjusted: bool = field(default=False, init=False)
    mines_adjusted: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        """Apply fallbacks after initialization."""
        self._apply_fallbacks()

    def _apply_fallbacks(self) -> None:
        """Replace invalid values, dimensions first."""
        if self.rows < 1 or self.columns < 1:
            self.rows = DEFAULT_ROWS
            self.columns = DEFAULT_COLUMNS
            self.dimensions_adjusted = True

        # Mine count is checked against the dimensions actually used.
        total = self.rows * self.columns
        if self.num_mines <= 0 or self.num_mines > total:
            self.num_mines = total // 4
            self.mines_adjusted = True
        elif self.num_mines == total:
            # (0, 0) can never hold a mine.
            self.num_mines = total - 1
            self.mines_adjusted = True

    @property
    def adjusted(self) -> bool:
        """Check if any fallback was applied."""
        return self.dimensions_adjusted or self.mines_adjusted


# ============================================================================
# Board Class
# ============================================================================

class Board:
    """
    Minefield game board.

    Owns the grid of tiles and the game/session state. All operations are
    synchronous; a re-entrant lock serializes them with the clock thread
    that advances the game time.
    """

    def __init__(
        self,
        rows: int = DEFAULT_ROWS,
        columns: int = DEFAULT_COLUMNS,
        mine_count: int = 0,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Create an empty board. Call ``populate`` before playing.

        Args:
            rows: Number of rows (falls back to 10x10 when invalid).
            columns: Number of columns.
            mine_count: Requested mines (falls back to a quarter of the
                tiles when invalid).
            rng: Random source used for mine placement.
        """
        self.config = BoardConfig(rows, columns, mine_count)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._lock = threading.RLock()
        self._grid: List[List[Tile]] = []
        self._mines_placed = 0
        self._game_time = 0
        self._game_state = GameState.ONGOING
        self._init_grid()

    @classmethod
    def from_config(
        cls,
        config: BoardConfig,
        rng: Optional[np.random.Generator] = None,
    ) -> "Board":
        """Create an empty board from an existing configuration."""
        return cls(config.rows, config.columns, config.num_mines, rng)

    @classmethod
    def from_tiles(
        cls,
        grid: List[List[Tile]],
        max_mines: int,
        mines_placed: int,
        game_time: int,
        game_state: GameState,
    ) -> "Board":
        """
        Rebuild a board from previously captured state.

        The grid is used as-is; no fallbacks are applied to ``max_mines``.
        """
        board = cls(len(grid), len(grid[0]), 1)
        board.config.num_mines = max_mines
        board.config.mines_adjusted = False
        board._grid = grid
        board._mines_placed = mines_placed
        board._game_time = game_time
        board._game_state = game_state
        return board

    # ========================================================================
    # Grid Utilities (Low-level)
    # ========================================================================

    def _init_grid(self) -> None:
        """Create empty grid of tiles."""
        self._grid = [
            [Tile() for _ in range(self.config.columns)]
            for _ in range(self.config.rows)
        ]

    def _is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.config.rows and 0 <= col < self.config.columns

    def _get_neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """
        Get in-bounds positions of the 8 surrounding tiles.

        Args:
            row: Row index of center tile.
            col: Column index of center tile.

        Returns:
            List of (row, col) tuples for valid neighbors.
        """
        neighbors = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if self._is_valid_position(new_row, new_col):
                    neighbors.append((new_row, new_col))
        return neighbors

    def _tiles(self) -> Iterator[Tile]:
        """Iterate over every tile in row-major order."""
        for row in self._grid:
            yield from row

    # ========================================================================
    # Mine Placement
    # ========================================================================

    def place_mine(self, row: int, col: int) -> bool:
        """
        Place a mine and update the counts of its neighbours.

        Args:
            row: Row index to mine.
            col: Column index to mine.

        Returns:
            True if the mine was placed, False if the position is out of
            bounds, is (0, 0), is already mined, or all mines are placed.
        """
        with self._lock:
            if not self._is_valid_position(row, col):
                return False
            if self._mines_placed >= self.config.num_mines:
                return False
            if (row, col) == SAFE_TILE:
                return False
            tile = self._grid[row][col]
            if tile.mined:
                return False

            tile.set_mined(True)
            self._mines_placed += 1
            for neighbor_row, neighbor_col in self._get_neighbors(row, col):
                self._grid[neighbor_row][neighbor_col].increment_adjacent_mines()
            return True

    def populate(self) -> None:
        """Place the configured number of mines at random positions."""
        with self._lock:
            while self._mines_placed < self.config.num_mines:
                row = int(self._rng.integers(self.config.rows))
                col = int(self._rng.integers(self.config.columns))
                self.place_mine(row, col)

    # ========================================================================
    # Game Actions
    # ========================================================================

    def step(self, row: int, col: int) -> StepResult:
        """
        Step on a tile.

        Stepping on a mine reveals every mine and loses the game. Stepping
        on a tile with no mined neighbours reveals its whole zero-count
        region plus the numbered tiles bordering it.

        Args:
            row: Row index to step on.
            col: Column index to step on.

        Returns:
            CONTINUE, LOST, INVALID_COORDINATE, or GAME_OVER when the game
            has already finished.
        """
        with self._lock:
            if not self._is_valid_position(row, col):
                return StepResult.INVALID_COORDINATE
            if self._game_state != GameState.ONGOING:
                return StepResult.GAME_OVER

            if self._grid[row][col].mined:
                self._reveal_all_mines()
                self._game_state = GameState.LOST
                return StepResult.LOST

            self._grid[row][col].reveal()
            if self._grid[row][col].adjacent_mines == 0:
                self._flood_reveal(row, col)
            return StepResult.CONTINUE

    def _reveal_all_mines(self) -> None:
        """Uncover every mined tile."""
        for tile in self._tiles():
            if tile.mined:
                tile.reveal()

    def _flood_reveal(self, row: int, col: int) -> None:
        """Reveal outward from a zero-count tile using a work list."""
        pending = [(row, col)]
        while pending:
            current_row, current_col = pending.pop()
            for neighbor_row, neighbor_col in self._get_neighbors(
                current_row, current_col
            ):
                neighbor = self._grid[neighbor_row][neighbor_col]
                if neighbor.revealed:
                    continue
                neighbor.reveal()
                if neighbor.adjacent_mines == 0:
                    pending.append((neighbor_row, neighbor_col))

    def toggle_mark(self, row: int, col: int) -> MarkResult:
        """
        Toggle the mark on a hidden tile.

        Args:
            row: Row index.
            col: Column index.

        Returns:
            OK if the mark was flipped, otherwise the reason it was not.
        """
        with self._lock:
            if not self._is_valid_position(row, col):
                return MarkResult.INVALID_COORDINATE
            if self._game_state != GameState.ONGOING:
                return MarkResult.GAME_OVER
            tile = self._grid[row][col]
            if tile.revealed:
                return MarkResult.ALREADY_REVEALED
            tile.toggle_mark()
            return MarkResult.OK

    def check_all_mines_marked(self) -> bool:
        """
        Check if the marked tiles are exactly the mined tiles.

        Sets the game state to WON when they are.

        Returns:
            True if the game is won.
        """
        with self._lock:
            if self._game_state != GameState.ONGOING:
                return self._game_state == GameState.WON
            for tile in self._tiles():
                if tile.marked != tile.mined:
                    return False
            self._game_state = GameState.WON
            return True

    def score(self) -> int:
        """
        Score the game: mine density bonus minus seconds played.

        Returns:
            (rows * columns // max_mines) * 20 - game_time, which may be
            negative.
        """
        with self._lock:
            difficulty = 0
            if self.config.num_mines > 0:
                difficulty = (
                    self.config.rows * self.config.columns
                ) // self.config.num_mines
            return difficulty * SCORE_MULTIPLIER - self._game_time

    # ========================================================================
    # Game Time
    # ========================================================================

    def increment_game_time(self) -> None:
        """Advance the game time by one second."""
        with self._lock:
            self._game_time += 1

    def reset_game_time(self) -> None:
        """Set the game time back to zero."""
        with self._lock:
            self._game_time = 0

    # ========================================================================
    # State Accessors
    # ========================================================================

    @property
    def rows(self) -> int:
        return self.config.rows

    @property
    def columns(self) -> int:
        return self.config.columns

    @property
    def max_mines(self) -> int:
        return self.config.num_mines

    @property
    def mines_placed(self) -> int:
        return self._mines_placed

    @property
    def game_time(self) -> int:
        return self._game_time

    @property
    def game_state(self) -> GameState:
        """Get current game state."""
        return self._game_state

    @property
    def is_playing(self) -> bool:
        """Check if game is still in progress."""
        return self._game_state == GameState.ONGOING

    @property
    def remaining_marks(self) -> int:
        """Mines left to mark, as shown on a mine counter."""
        with self._lock:
            marked = sum(1 for tile in self._tiles() if tile.marked)
            return self.config.num_mines - marked

    def get_tile(self, row: int, col: int) -> Optional[Tile]:
        """Get tile at position, or None if invalid."""
        if not self._is_valid_position(row, col):
            return None
        return self._grid[row][col]

    def display_grid(self) -> List[List[TileDisplay]]:
        """Get what the player sees of every tile."""
        with self._lock:
            return [[tile.display_state() for tile in row] for row in self._grid]

    def get_observation(self) -> np.ndarray:
        """
        Get board state as numpy array for agents.

        Returns:
            2D int8 array where:
                -1 = hidden
                -2 = marked
                0-8 = revealed with adjacent count
                9 = revealed mine
        """
        with self._lock:
            obs = np.zeros((self.config.rows, self.config.columns), dtype=np.int8)
            for row in range(self.config.rows):
                for col in range(self.config.columns):
                    obs[row, col] = self._grid[row][col].to_observation()
            return obs

    def render(self, reveal_all: bool = False) -> str:
        """
        Render the board as text, one line per row.

        Args:
            reveal_all: Show every tile as if revealed, without changing
                the board.
        """
        with self._lock:
            lines = []
            for row in self._grid:
                if reveal_all:
                    line = "".join(
                        str(Tile(tile.mined, tile.adjacent_mines, revealed=True))
                        for tile in row
                    )
                else:
                    line = "".join(str(tile) for tile in row)
                lines.append(line)
            return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.render()

    def serialize(self) -> bytes:
        """Capture the whole board as snapshot bytes."""
        from .persistence import serialize

        return serialize(self)

    @classmethod
    def deserialize(cls, data: bytes) -> "Board":
        """Rebuild a board from snapshot bytes."""
        from .persistence import deserialize

        return deserialize(data)
