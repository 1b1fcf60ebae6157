"""
Minefield rules engine.

Provides board and tile state, mine placement, reveal, marking,
win/loss detection, persistence and a game clock.
"""
from .tile import Tile, TileDisplay, DisplayState
from .board import Board, BoardConfig, GameState, StepResult, MarkResult
from .errors import PersistenceError, SaveNotFoundError
from .persistence import BoardSnapshot, SaveStore, serialize, deserialize
from .clock import GameClock
from .session import GameSession, SessionConfig
from .environment import MinesweeperEnv

__all__ = [
    "Tile",
    "TileDisplay",
    "DisplayState",
    "Board",
    "BoardConfig",
    "GameState",
    "StepResult",
    "MarkResult",
    "PersistenceError",
    "SaveNotFoundError",
    "BoardSnapshot",
    "SaveStore",
    "serialize",
    "deserialize",
    "GameClock",
    "GameSession",
    "SessionConfig",
    "MinesweeperEnv",
]
