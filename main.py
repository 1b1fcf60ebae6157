#!/usr/bin/env python3
"""
Minefield - Main entry point.

Usage:
    python main.py play [--rows R] [--columns C] [--mines M] [--save-file F]
    python main.py show [--save-file F] [--reveal]
"""
import argparse
from typing import List, Optional, Tuple

from src.minefield import (
    GameSession,
    MarkResult,
    PersistenceError,
    SaveNotFoundError,
    SaveStore,
    SessionConfig,
    StepResult,
)
from src.minefield.persistence import DEFAULT_SAVE_FILE


HELP_TEXT = """Commands:
  s ROW COL   step on a tile
  m ROW COL   mark or unmark a tile
  new         start a new game
  save        save the current game
  load        load the saved game
  quit        leave the game"""


def print_board(session: GameSession) -> None:
    """Print the board with column and row headers."""
    board = session.board
    header = "    " + "".join(f"{col:^3}" for col in range(board.columns))
    print(header)
    for row, line in enumerate(board.render().splitlines()):
        print(f"{row:>3} {line}")
    print(session.score_report())


def parse_coordinates(args: List[str]) -> Optional[Tuple[int, int]]:
    """Parse 'ROW COL' arguments, or None if malformed."""
    if len(args) != 2:
        return None
    try:
        return int(args[0]), int(args[1])
    except ValueError:
        return None


def report_fallback(session: GameSession) -> None:
    """Tell the player when invalid settings were replaced."""
    config = session.board.config
    if config.dimensions_adjusted:
        print(f"Invalid board size, using {config.rows}x{config.columns}.")
    if config.mines_adjusted:
        print(f"Invalid mine count, using {config.num_mines} mines.")


def handle_action(session: GameSession, command: str, args: List[str]) -> None:
    """Run a step or mark command and print its outcome."""
    position = parse_coordinates(args)
    if position is None:
        print("Expected: ROW COL")
        return

    if command == "s":
        result = session.step(*position)
        if result == StepResult.INVALID_COORDINATE:
            print("[ERROR] Failed to step on tile: off the board.")
        elif result == StepResult.GAME_OVER:
            print("The game is over. Type 'new' to play again.")
    else:
        result = session.toggle_mark(*position)
        if result == MarkResult.INVALID_COORDINATE:
            print("[ERROR] Failed to mark tile: off the board.")
        elif result == MarkResult.ALREADY_REVEALED:
            print("[ERROR] Failed to mark tile: already revealed.")
        elif result == MarkResult.GAME_OVER:
            print("The game is over. Type 'new' to play again.")


def play(args: argparse.Namespace) -> None:
    """Play an interactive game in the terminal."""
    config = SessionConfig(
        rows=args.rows,
        columns=args.columns,
        num_mines=args.mines,
        save_file=args.save_file,
        seed=args.seed,
    )
    session = GameSession(config)
    report_fallback(session)
    print(HELP_TEXT)

    try:
        while True:
            print()
            print_board(session)
            try:
                line = input("> ").split()
            except EOFError:
                break
            if not line:
                continue

            command, rest = line[0].lower(), line[1:]
            if command in ("q", "quit"):
                break
            if command in ("s", "m"):
                handle_action(session, command, rest)
            elif command == "new":
                session.new_game()
                report_fallback(session)
            elif command == "save":
                try:
                    session.save()
                    print(f"Game saved to {session.store.path}.")
                except PersistenceError as exc:
                    print(f"Failed to save: {exc}")
            elif command == "load":
                try:
                    session.load()
                    print("Game loaded.")
                except SaveNotFoundError:
                    print("Failed to load save - no save found.")
                except PersistenceError as exc:
                    print(f"Failed to load save: {exc}")
            else:
                print(HELP_TEXT)
    finally:
        session.stop()


def show(args: argparse.Namespace) -> None:
    """Print a saved game."""
    store = SaveStore(args.save_file)
    try:
        board = store.load()
    except SaveNotFoundError:
        print(f"No save found at {store.path}")
        return
    except PersistenceError as exc:
        print(f"Failed to load save: {exc}")
        return

    print(f"Board: {board.rows}x{board.columns} with {board.max_mines} mines")
    print(f"State: {board.game_state.name} | Time: {board.game_time}s")
    print(board.render(reveal_all=args.reveal))


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Minefield - play and inspect mine-detection puzzles"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--rows", type=int, default=10, help="Board rows")
    play_parser.add_argument(
        "--columns", type=int, default=10, help="Board columns"
    )
    play_parser.add_argument(
        "--mines", type=int, default=25, help="Number of mines"
    )
    play_parser.add_argument(
        "--save-file", default=DEFAULT_SAVE_FILE, help="Save file location"
    )
    play_parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for mine placement"
    )

    # Show command
    show_parser = subparsers.add_parser("show", help="Print a saved game")
    show_parser.add_argument(
        "--save-file", default=DEFAULT_SAVE_FILE, help="Save file location"
    )
    show_parser.add_argument(
        "--reveal", action="store_true", help="Show every tile"
    )

    args = parser.parse_args()

    if args.command == "play":
        play(args)
    elif args.command == "show":
        show(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
