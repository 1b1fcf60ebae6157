"""
Persistence module for the minefield engine.

Boards are captured as a versioned plain-data snapshot, encoded as JSON
bytes, and optionally written to a save file whose location is chosen by
the caller.
"""
import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from .board import Board, GameState
from .errors import PersistenceError, SaveNotFoundError
from .tile import Tile


# ============================================================================
# Constants
# ============================================================================

SNAPSHOT_VERSION = 1
DEFAULT_SAVE_FILE = "minefield_save.json"


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_int(value: Any) -> bool:
    """Check for a JSON integer; booleans do not count."""
    return isinstance(value, int) and not isinstance(value, bool)


# ============================================================================
# Snapshot
# ============================================================================

@dataclass
class BoardSnapshot:
    """
    Plain-data copy of everything needed to resume a game.

    Tile attributes are stored as separate row-major grids.
    """

    version: int
    rows: int
    columns: int
    max_mines: int
    mines_placed: int
    game_time: int
    game_state: str
    mined: List[List[bool]]
    adjacent_mines: List[List[int]]
    revealed: List[List[bool]]
    marked: List[List[bool]]

    @classmethod
    def capture(cls, board: Board) -> "BoardSnapshot":
        """Copy the state of a board."""
        grid = [
            [board.get_tile(row, col) for col in range(board.columns)]
            for row in range(board.rows)
        ]
        return cls(
            version=SNAPSHOT_VERSION,
            rows=board.rows,
            columns=board.columns,
            max_mines=board.max_mines,
            mines_placed=board.mines_placed,
            game_time=board.game_time,
            game_state=board.game_state.name,
            mined=[[tile.mined for tile in row] for row in grid],
            adjacent_mines=[[tile.adjacent_mines for tile in row] for row in grid],
            revealed=[[tile.revealed for tile in row] for row in grid],
            marked=[[tile.marked for tile in row] for row in grid],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardSnapshot":
        """Build a snapshot from decoded JSON, checking its shape."""
        if not isinstance(data, dict):
            raise PersistenceError("Snapshot must be a JSON object")
        version = data.get("version")
        if not _is_int(version) or version != SNAPSHOT_VERSION:
            raise PersistenceError(f"Unsupported snapshot version: {version!r}")
        snapshot = cls(**data)
        snapshot._validate()
        return snapshot

    def _validate(self) -> None:
        """Ensure the snapshot describes a board that play could reach."""
        for name in ("rows", "columns", "max_mines", "mines_placed", "game_time"):
            if not _is_int(getattr(self, name)):
                raise PersistenceError(f"Snapshot field '{name}' must be an integer")
        if self.rows < 1 or self.columns < 1:
            raise PersistenceError("Snapshot dimensions must be positive")
        if not 0 <= self.mines_placed <= self.max_mines:
            raise PersistenceError("Snapshot mine counts are inconsistent")
        if self.game_time < 0:
            raise PersistenceError("Snapshot game time cannot be negative")
        if not isinstance(self.game_state, str) or (
            self.game_state not in GameState.__members__
        ):
            raise PersistenceError(f"Unknown game state: {self.game_state!r}")

        self._validate_grid("mined", _is_bool)
        self._validate_grid("revealed", _is_bool)
        self._validate_grid("marked", _is_bool)
        self._validate_grid("adjacent_mines", _is_int)
        self._validate_tiles()

    def _validate_grid(self, name: str, is_valid: Callable[[Any], bool]) -> None:
        """Check a tile grid's shape and value types."""
        grid = getattr(self, name)
        if (
            not isinstance(grid, list)
            or len(grid) != self.rows
            or any(
                not isinstance(row, list) or len(row) != self.columns
                for row in grid
            )
        ):
            raise PersistenceError(f"Snapshot grid '{name}' has wrong shape")
        if not all(is_valid(value) for row in grid for value in row):
            raise PersistenceError(f"Snapshot grid '{name}' has invalid values")

    def _validate_tiles(self) -> None:
        """Check the tiles agree with each other and with the counters."""
        if self.mined[0][0]:
            raise PersistenceError("Snapshot has a mine on the safe tile")

        mine_total = 0
        for row in range(self.rows):
            for col in range(self.columns):
                if self.marked[row][col] and self.revealed[row][col]:
                    raise PersistenceError(
                        f"Snapshot tile ({row}, {col}) is marked and revealed"
                    )
                if self.mined[row][col]:
                    mine_total += 1
                if self.adjacent_mines[row][col] != self._count_mined_neighbors(
                    row, col
                ):
                    raise PersistenceError(
                        f"Snapshot tile ({row}, {col}) has a wrong mine count"
                    )

        if mine_total != self.mines_placed:
            raise PersistenceError("Snapshot mine counts are inconsistent")

    def _count_mined_neighbors(self, row: int, col: int) -> int:
        count = 0
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                new_row = row + delta_row
                new_col = col + delta_col
                if (
                    0 <= new_row < self.rows
                    and 0 <= new_col < self.columns
                    and self.mined[new_row][new_col]
                ):
                    count += 1
        return count

    def to_board(self) -> Board:
        """Rebuild the board this snapshot describes."""
        grid = [
            [
                Tile(
                    mined=self.mined[row][col],
                    adjacent_mines=self.adjacent_mines[row][col],
                    revealed=self.revealed[row][col],
                    marked=self.marked[row][col],
                )
                for col in range(self.columns)
            ]
            for row in range(self.rows)
        ]
        return Board.from_tiles(
            grid,
            max_mines=self.max_mines,
            mines_placed=self.mines_placed,
            game_time=self.game_time,
            game_state=GameState[self.game_state],
        )


# ============================================================================
# Byte Encoding
# ============================================================================

def serialize(board: Board) -> bytes:
    """Encode a board as snapshot bytes."""
    snapshot = BoardSnapshot.capture(board)
    return json.dumps(asdict(snapshot)).encode("utf-8")


def deserialize(data: bytes) -> Board:
    """
    Decode snapshot bytes back into a board.

    Raises:
        PersistenceError: If the bytes are not a valid snapshot.
    """
    try:
        decoded = json.loads(data.decode("utf-8"))
        return BoardSnapshot.from_dict(decoded).to_board()
    except PersistenceError:
        raise
    except (UnicodeDecodeError, ValueError, TypeError, KeyError) as exc:
        raise PersistenceError(f"Corrupt snapshot: {exc}") from exc


# ============================================================================
# Save Store
# ============================================================================

class SaveStore:
    """
    File-backed store holding a single saved game.

    Attributes:
        path: Location of the save file.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_SAVE_FILE) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if a saved game is present."""
        return self.path.is_file()

    def save(self, board: Board) -> None:
        """
        Write a board to the save file, replacing any previous save.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        data = serialize(board)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "wb") as f:
                f.write(data)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {self.path}: {exc}") from exc

    def load(self) -> Board:
        """
        Read the saved board.

        Raises:
            SaveNotFoundError: If there is no save file.
            PersistenceError: If the file cannot be read or is corrupt.
        """
        try:
            with open(self.path, "rb") as f:
                data = f.read()
        except FileNotFoundError as exc:
            raise SaveNotFoundError(f"No save found at {self.path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Failed to read {self.path}: {exc}") from exc
        return deserialize(data)

    def delete(self) -> None:
        """Remove the save file if present."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceError(f"Failed to delete {self.path}: {exc}") from exc
