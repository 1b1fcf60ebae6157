"""
Gymnasium environment wrapper for the minefield engine.

Provides a standard RL interface for driving games programmatically.
"""
from typing import Any, Dict, Optional, Tuple, SupportsFloat

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from .board import Board, BoardConfig, GameState, MarkResult, StepResult


# ============================================================================
# Rewards
# ============================================================================

REWARD_SAFE_STEP = 1.0
REWARD_WIN = 10.0
REWARD_MINE = -10.0
REWARD_MARK = 0.0
REWARD_INVALID = -0.1


# ============================================================================
# Minesweeper Environment
# ============================================================================

class MinesweeperEnv(gym.Env):
    """
    Gymnasium environment for the minefield.

    Observation:
        2D array where:
        - -1 = hidden tile
        - -2 = marked tile
        - 0-8 = revealed tile with adjacent mine count
        - 9 = revealed mine

    Actions:
        Discrete action space of size 2 * rows * columns.
        Action i < cells steps on tile (i // columns, i % columns).
        Action i >= cells toggles the mark on tile i - cells and then
        checks whether every mine is marked.

    Rewards:
        - +1 for stepping on a safe tile
        - +10 for winning the game
        - -10 for hitting a mine
        - 0 for toggling a mark without winning
        - -0.1 for invalid action (already revealed)
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        render_mode: Optional[str] = None,
    ) -> None:
        """
        Initialize the environment.

        Args:
            config: Board configuration (default: 10x10 with 25 mines).
            render_mode: How to render the environment.
        """
        super().__init__()

        self.config = config or BoardConfig()
        self.board = Board.from_config(self.config)
        self.render_mode = render_mode

        self._cells = self.config.rows * self.config.columns

        self.observation_space = spaces.Box(
            low=-2,
            high=9,
            shape=(self.config.rows, self.config.columns),
            dtype=np.int8,
        )

        # One step action and one mark action per tile
        self.action_space = spaces.Discrete(2 * self._cells)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Start a new game on a freshly populated board.

        Args:
            seed: Random seed for reproducible mine placement.
            options: Additional options (unused).

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        self.board = Board.from_config(self.config, rng=self.np_random)
        self.board.populate()
        self._steps = 0

        return self.board.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Execute one action in the environment.

        Args:
            action: Tile index to step on, or tile index plus
                rows * columns to toggle a mark.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        self._steps += 1

        if action < self._cells:
            reward = self._step_reward(*self._action_to_position(action))
        else:
            reward = self._mark_reward(
                *self._action_to_position(action - self._cells)
            )

        observation = self.board.get_observation()
        terminated = not self.board.is_playing

        return observation, reward, terminated, False, self._get_info()

    def _action_to_position(self, action: int) -> Tuple[int, int]:
        """Convert flat tile index to (row, col) position."""
        return action // self.config.columns, action % self.config.columns

    def _step_reward(self, row: int, col: int) -> float:
        """Step on a tile and score the outcome."""
        tile = self.board.get_tile(row, col)
        if tile is None or tile.revealed:
            return REWARD_INVALID

        result = self.board.step(row, col)
        if result == StepResult.LOST:
            return REWARD_MINE
        if result == StepResult.CONTINUE:
            return REWARD_SAFE_STEP
        return REWARD_INVALID

    def _mark_reward(self, row: int, col: int) -> float:
        """Toggle a mark, check for a win and score the outcome."""
        if self.board.toggle_mark(row, col) != MarkResult.OK:
            return REWARD_INVALID
        if self.board.check_all_mines_marked():
            return REWARD_WIN
        return REWARD_MARK

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        obs = self.board.get_observation()
        return {
            "steps": self._steps,
            "revealed": int(np.count_nonzero(obs >= 0)),
            "remaining_marks": self.board.remaining_marks,
            "game_state": self.board.game_state.name,
        }

    def render(self) -> Optional[str]:
        """Render the current board state."""
        if self.render_mode == "ansi":
            return self.board.render()
        if self.render_mode == "human":
            print(self.board.render())
        return None

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of valid actions.

        Returns:
            Boolean array where True = valid action. Hidden tiles can be
            stepped on or marked; marked tiles can only be unmarked.
        """
        mask = np.zeros(self.action_space.n, dtype=bool)
        if self.board.game_state != GameState.ONGOING:
            return mask
        obs = self.board.get_observation().flatten()
        mask[: self._cells] = obs == -1
        mask[self._cells:] = (obs == -1) | (obs == -2)
        return mask
