"""
Game clock for the minefield engine.

Advances a board's game time once per interval on a background thread.
"""
import threading
from typing import Optional

from .board import Board


class GameClock:
    """
    Background ticker driving ``Board.increment_game_time``.

    A clock runs at most once; create a new clock for a new game.
    """

    def __init__(self, board: Board, interval: float = 1.0) -> None:
        """
        Initialize the clock.

        Args:
            board: Board whose game time is advanced.
            interval: Seconds between ticks.
        """
        self.board = board
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        """Check if the clock thread is ticking."""
        return self._thread is not None and not self._stop_event.is_set()

    def start(self) -> None:
        """Start ticking. Does nothing if already started or stopped."""
        if self._thread is not None or self._stop_event.is_set():
            return
        self._thread = threading.Thread(
            target=self._run, name="minefield-clock", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop ticking. Safe to call any number of times."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.board.increment_game_time()
