"""
Unit tests for board persistence.

Tests snapshot round trips, corrupt data handling and the save store.
"""
import json

import pytest
from minefield import (
    Board,
    BoardSnapshot,
    GameState,
    PersistenceError,
    SaveNotFoundError,
    SaveStore,
    deserialize,
    serialize,
)


def assert_same_board(first: Board, second: Board) -> None:
    """Check two boards are observably identical."""
    assert (first.rows, first.columns) == (second.rows, second.columns)
    assert first.max_mines == second.max_mines
    assert first.mines_placed == second.mines_placed
    assert first.game_time == second.game_time
    assert first.game_state == second.game_state
    for row in range(first.rows):
        for col in range(first.columns):
            assert first.get_tile(row, col) == second.get_tile(row, col)


# ============================================================================
# Round Trip Tests
# ============================================================================

class TestRoundTrip:
    """Test serialize/deserialize fidelity."""

    def test_fresh_board(self, default_board: Board) -> None:
        """A freshly populated board should survive a round trip."""
        assert_same_board(default_board, deserialize(serialize(default_board)))

    def test_game_in_progress(self, default_board: Board) -> None:
        """Reveals, marks and game time should all be restored."""
        default_board.step(0, 0)
        mine = next(
            (row, col)
            for row in range(default_board.rows)
            for col in range(default_board.columns)
            if default_board.get_tile(row, col).mined
        )
        default_board.toggle_mark(*mine)
        for _ in range(42):
            default_board.increment_game_time()

        restored = Board.deserialize(default_board.serialize())
        assert_same_board(default_board, restored)
        assert restored.display_grid() == default_board.display_grid()

    def test_lost_game(self, corner_mine_board: Board) -> None:
        """A lost game should load as lost with its mines revealed."""
        corner_mine_board.step(2, 2)
        restored = deserialize(serialize(corner_mine_board))
        assert restored.game_state == GameState.LOST
        assert_same_board(corner_mine_board, restored)

    def test_won_game(self, corner_mine_board: Board) -> None:
        """A won game should load as won."""
        corner_mine_board.toggle_mark(2, 2)
        corner_mine_board.check_all_mines_marked()
        restored = deserialize(serialize(corner_mine_board))
        assert restored.game_state == GameState.WON

    def test_restored_board_keeps_playing(
        self, corner_mine_board: Board
    ) -> None:
        """A loaded board is independent of the board it was saved from."""
        restored = deserialize(serialize(corner_mine_board))
        restored.toggle_mark(2, 2)
        assert restored.check_all_mines_marked() is True
        assert corner_mine_board.game_state == GameState.ONGOING

    def test_capped_mine_count_survives(self) -> None:
        """A board with no room for mines keeps max_mines of 0."""
        board = Board(1, 1, 1)
        restored = deserialize(serialize(board))
        assert restored.max_mines == 0
        assert restored.config.adjusted is False

    def test_snapshot_is_plain_data(self, corner_mine_board: Board) -> None:
        """Snapshots should hold plain JSON-friendly values."""
        snapshot = BoardSnapshot.capture(corner_mine_board)
        assert snapshot.version == 1
        assert snapshot.game_state == "ONGOING"
        assert snapshot.mined[2][2] is True
        assert snapshot.adjacent_mines[1][1] == 1


# ============================================================================
# Corrupt Data Tests
# ============================================================================

class TestCorruptData:
    """Test rejection of bad snapshots."""

    def snapshot_dict(self, board: Board) -> dict:
        return json.loads(serialize(board).decode("utf-8"))

    def load(self, data: dict) -> Board:
        return deserialize(json.dumps(data).encode("utf-8"))

    def test_not_json(self) -> None:
        """Bytes that are not JSON should be rejected."""
        with pytest.raises(PersistenceError):
            deserialize(b"\x00\xffnot json")

    def test_not_an_object(self) -> None:
        """A JSON value other than an object should be rejected."""
        with pytest.raises(PersistenceError):
            deserialize(b"[1, 2, 3]")

    def test_wrong_version(self, corner_mine_board: Board) -> None:
        """Unknown snapshot versions should be rejected."""
        data = self.snapshot_dict(corner_mine_board)
        data["version"] = 99
        with pytest.raises(PersistenceError, match="version"):
            self.load(data)

    def test_missing_field(self, corner_mine_board: Board) -> None:
        """A snapshot missing a grid should be rejected."""
        data = self.snapshot_dict(corner_mine_board)
        del data["marked"]
        with pytest.raises(PersistenceError):
            self.load(data)

    def test_wrong_grid_shape(self, corner_mine_board: Board) -> None:
        """Grids must match the snapshot dimensions."""
        data = self.snapshot_dict(corner_mine_board)
        data["revealed"] = data["revealed"][:2]
        with pytest.raises(PersistenceError, match="shape"):
            self.load(data)

    def test_unknown_game_state(self, corner_mine_board: Board) -> None:
        """Game state must name a known state."""
        data = self.snapshot_dict(corner_mine_board)
        data["game_state"] = "PAUSED"
        with pytest.raises(PersistenceError, match="game state"):
            self.load(data)

    def test_marked_and_revealed_tile(self, corner_mine_board: Board) -> None:
        """No tile may be both marked and revealed."""
        data = self.snapshot_dict(corner_mine_board)
        data["revealed"][1][1] = True
        data["marked"][1][1] = True
        with pytest.raises(PersistenceError, match="marked and revealed"):
            self.load(data)

    def test_mined_safe_tile(self, corner_mine_board: Board) -> None:
        """The (0, 0) tile can never hold a mine."""
        data = self.snapshot_dict(corner_mine_board)
        data["mined"][0][0] = True
        data["adjacent_mines"][0][0] = 7
        with pytest.raises(PersistenceError, match="safe tile"):
            self.load(data)

    def test_mines_placed_mismatch(self, corner_mine_board: Board) -> None:
        """mines_placed must equal the number of mined tiles."""
        data = self.snapshot_dict(corner_mine_board)
        data["mines_placed"] = 0
        with pytest.raises(PersistenceError, match="mine counts"):
            self.load(data)

    def test_wrong_adjacent_count(self, corner_mine_board: Board) -> None:
        """Adjacent counts must match the mined neighbours."""
        data = self.snapshot_dict(corner_mine_board)
        data["adjacent_mines"][0][1] = 3
        with pytest.raises(PersistenceError, match="wrong mine count"):
            self.load(data)

    def test_string_flag_is_not_coerced(self, corner_mine_board: Board) -> None:
        """A string such as "false" is not a valid tile flag."""
        data = self.snapshot_dict(corner_mine_board)
        data["mined"][1][1] = "false"
        with pytest.raises(PersistenceError, match="invalid values"):
            self.load(data)

    def test_boolean_count_is_rejected(self, corner_mine_board: Board) -> None:
        """Adjacent counts must be integers, not booleans."""
        data = self.snapshot_dict(corner_mine_board)
        data["adjacent_mines"][1][1] = True
        with pytest.raises(PersistenceError, match="invalid values"):
            self.load(data)

    @pytest.mark.parametrize(
        "field, value",
        [("game_time", 3.7), ("max_mines", "1"), ("rows", True)],
    )
    def test_non_integer_field(
        self, corner_mine_board: Board, field: str, value
    ) -> None:
        """Scalar fields must be real integers."""
        data = self.snapshot_dict(corner_mine_board)
        data[field] = value
        with pytest.raises(PersistenceError, match="must be an integer"):
            self.load(data)


# ============================================================================
# Save Store Tests
# ============================================================================

class TestSaveStore:
    """Test the file-backed save store."""

    def test_save_and_load(
        self, save_store: SaveStore, default_board: Board
    ) -> None:
        """A saved board should load back unchanged."""
        default_board.step(0, 0)
        save_store.save(default_board)
        assert save_store.exists() is True
        assert_same_board(default_board, save_store.load())

    def test_load_missing_save(self, save_store: SaveStore) -> None:
        """Loading without a save should raise SaveNotFoundError."""
        assert save_store.exists() is False
        with pytest.raises(SaveNotFoundError):
            save_store.load()

    def test_missing_save_is_persistence_error(
        self, save_store: SaveStore
    ) -> None:
        """SaveNotFoundError should be catchable as PersistenceError."""
        with pytest.raises(PersistenceError):
            save_store.load()

    def test_corrupt_save(self, save_store: SaveStore) -> None:
        """A corrupt file is a generic failure, not a missing save."""
        save_store.path.parent.mkdir(parents=True)
        save_store.path.write_bytes(b"{broken")
        with pytest.raises(PersistenceError) as excinfo:
            save_store.load()
        assert not isinstance(excinfo.value, SaveNotFoundError)

    def test_save_replaces_previous(
        self, save_store: SaveStore, corner_mine_board: Board
    ) -> None:
        """Only the most recent save should be kept."""
        save_store.save(Board(4, 4, 2))
        save_store.save(corner_mine_board)
        assert save_store.load().rows == 3

    def test_delete(
        self, save_store: SaveStore, corner_mine_board: Board
    ) -> None:
        """Deleting removes the save and is safe to repeat."""
        save_store.save(corner_mine_board)
        save_store.delete()
        assert save_store.exists() is False
        save_store.delete()

    def test_unwritable_location(self, tmp_path, corner_mine_board: Board) -> None:
        """Write failures should raise PersistenceError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = SaveStore(blocker / "game.json")
        with pytest.raises(PersistenceError):
            store.save(corner_mine_board)
