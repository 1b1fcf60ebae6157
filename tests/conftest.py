"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path

import numpy as np

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import Board, Tile, SaveStore


# ============================================================================
# Board Fixtures
# ============================================================================

@pytest.fixture
def default_board() -> Board:
    """Create a seeded 10x10 board with 20 mines, populated."""
    board = Board(10, 10, 20, rng=np.random.default_rng(1234))
    board.populate()
    return board


@pytest.fixture
def corner_mine_board() -> Board:
    """Create a 3x3 board with a single mine at (2, 2)."""
    board = Board(3, 3, 1)
    board.place_mine(2, 2)
    return board


@pytest.fixture
def wall_board() -> Board:
    """
    Create a 5x5 board with a wall of mines down column 2.

    Columns 0-1 and 3-4 are separate safe regions.
    """
    board = Board(5, 5, 5)
    for row in range(5):
        board.place_mine(row, 2)
    return board


@pytest.fixture
def empty_board() -> Board:
    """Create a 4x4 board with no mines placed for cascade testing."""
    return Board(4, 4, 1)


# ============================================================================
# Tile Fixtures
# ============================================================================

@pytest.fixture
def hidden_tile() -> Tile:
    """Create a hidden tile."""
    return Tile()


@pytest.fixture
def mine_tile() -> Tile:
    """Create a tile containing a mine."""
    return Tile(mined=True)


# ============================================================================
# Persistence Fixtures
# ============================================================================

@pytest.fixture
def save_store(tmp_path: Path) -> SaveStore:
    """Create a save store inside a temporary directory."""
    return SaveStore(tmp_path / "saves" / "game.json")
