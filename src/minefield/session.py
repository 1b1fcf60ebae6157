"""
Game session for the minefield engine.

Ties a board to its clock and save store, the way a front end drives a
game: new game, actions, save and load.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .board import Board, BoardConfig, GameState, MarkResult, StepResult
from .clock import GameClock
from .persistence import DEFAULT_SAVE_FILE, SaveStore


# ============================================================================
# Session Configuration
# ============================================================================

@dataclass
class SessionConfig:
    """
    Configuration for a game session.

    Attributes:
        rows: Number of rows for new games.
        columns: Number of columns for new games.
        num_mines: Requested mines for new games.
        save_file: Path of the save file.
        seed: Random seed for mine placement (None for random).
        tick_interval: Seconds per game clock tick.
    """

    rows: int = 10
    columns: int = 10
    num_mines: int = 25
    save_file: str = DEFAULT_SAVE_FILE
    seed: Optional[int] = None
    tick_interval: float = 1.0

    def board_config(self) -> BoardConfig:
        """Get the validated board configuration for new games."""
        return BoardConfig(self.rows, self.columns, self.num_mines)


# ============================================================================
# Game Session
# ============================================================================

class GameSession:
    """
    A single player's running game.

    The clock starts on the first accepted action and stops as soon as
    the game is won or lost.
    """

    def __init__(self, config: Optional[SessionConfig] = None) -> None:
        self.config = config or SessionConfig()
        self.store = SaveStore(self.config.save_file)
        self._rng = np.random.default_rng(self.config.seed)
        self.board = self._new_board()
        self.clock = GameClock(self.board, self.config.tick_interval)

    def _new_board(self) -> Board:
        board = Board.from_config(self.config.board_config(), rng=self._rng)
        board.populate()
        return board

    def _replace_board(self, board: Board) -> None:
        self.clock.stop()
        self.board = board
        self.clock = GameClock(self.board, self.config.tick_interval)

    def new_game(self) -> Board:
        """Discard the current game and start a new one."""
        self._replace_board(self._new_board())
        return self.board

    def step(self, row: int, col: int) -> StepResult:
        """Step on a tile, managing the clock around it."""
        result = self.board.step(row, col)
        self._after_action(result == StepResult.CONTINUE)
        return result

    def toggle_mark(self, row: int, col: int) -> MarkResult:
        """Toggle a mark, then check whether the game is won."""
        result = self.board.toggle_mark(row, col)
        if result == MarkResult.OK:
            self.board.check_all_mines_marked()
        self._after_action(result == MarkResult.OK)
        return result

    def _after_action(self, accepted: bool) -> None:
        if not self.board.is_playing:
            self.clock.stop()
        elif accepted:
            self.clock.start()

    def save(self) -> None:
        """
        Save the current game.

        Raises:
            PersistenceError: If the save cannot be written.
        """
        self.store.save(self.board)

    def load(self) -> Board:
        """
        Resume the saved game, replacing the current one.

        The current game is kept if loading fails.

        Raises:
            SaveNotFoundError: If there is no save.
            PersistenceError: If the save cannot be read.
        """
        board = self.store.load()
        self._replace_board(board)
        return self.board

    def stop(self) -> None:
        """Stop the clock for teardown."""
        self.clock.stop()

    @property
    def game_state(self) -> GameState:
        return self.board.game_state

    def score_report(self) -> str:
        """Describe the final outcome of the game."""
        if self.board.game_state == GameState.WON:
            return (
                f"You won in {self.board.game_time}s! "
                f"Score: {self.board.score()}"
            )
        if self.board.game_state == GameState.LOST:
            return f"Boom! You lost after {self.board.game_time}s."
        return (
            f"Time: {self.board.game_time}s | "
            f"Mines left: {self.board.remaining_marks}"
        )
