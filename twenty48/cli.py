"""
Twenty48 CLI - Command-line interface for the engine.

Usage:
    twenty48 play [--seed N]          Play in the terminal
    twenty48 simulate [--games K]     Play random games headlessly
    twenty48 serve [--port P]         Run the HTTP API
"""

import argparse
from dataclasses import replace
import random
import sys

from .engine_core import Direction, ScoringPolicy, WonPolicy, available_moves
from .session import Session, SessionConfig, FileBestScoreStore, InMemoryBestScoreStore


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Twenty48 - 2048 Board Engine",
        prog="twenty48",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    add_session_arguments(play_parser)
    play_parser.add_argument("--best-score-file", help="JSON file for the best score")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play random games")
    add_session_arguments(simulate_parser)
    simulate_parser.add_argument("--games", type=int, default=1, help="Number of games")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def add_session_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--scoring",
        choices=[p.value for p in ScoringPolicy],
        default=ScoringPolicy.SUM_OF_MERGES.value,
        help="Scoring policy",
    )
    parser.add_argument(
        "--sticky-win", action="store_true", help="Stay won once 2048 is reached",
    )


def session_config(args) -> SessionConfig:
    return SessionConfig(
        scoring_policy=ScoringPolicy(args.scoring),
        won_policy=WonPolicy.STICKY if args.sticky_win else WonPolicy.RECOMPUTED,
        seed=args.seed,
    )


def print_state(session: Session):
    state = session.state
    print()
    print(state.board.render())
    print(f"Score: {state.score}  Best: {state.best_score}  Moves: {state.moves}")


def cmd_play(args):
    """Interactive terminal game."""
    store = (
        FileBestScoreStore(args.best_score_file)
        if args.best_score_file
        else InMemoryBestScoreStore()
    )
    session = Session(session_config(args), store=store)

    print("Welcome to 2048!")
    print("Commands: w/a/s/d or up/left/down/right to move, r to restart, q to quit")
    print_state(session)
    announced_win = False

    while True:
        try:
            command = input("\nMove: ").strip()
        except EOFError:
            break

        if command.lower() == "q":
            break
        if command.lower() == "r":
            session.reset()
            announced_win = False
            print_state(session)
            continue

        try:
            direction = Direction.parse(command)
        except ValueError:
            print("Invalid command! Use w/a/s/d, r or q.")
            continue

        before = session.state
        state = session.apply_move(direction)
        if state is before:
            print("Nothing moved. Try another direction.")
            continue
        print_state(session)

        if state.won and not announced_win:
            print(f"\nCongratulations! You reached 2048. (Score: {state.score})")
            announced_win = True
        if state.game_over:
            print(f"\nGame Over! Final Score: {state.score}")
            print("Press r to play again or q to quit.")

    print(f"Thanks for playing! Best score: {session.state.best_score}")


def simulate(config: SessionConfig, games: int, chooser: random.Random):
    """
    Play uniformly random legal moves until each game ends.

    Yields the final state of every game. Each game after the first
    uses the next seed; every other setting is kept.
    """
    for _ in range(games):
        session = Session(config)
        while session.state.can_move:
            moves = available_moves(session.board)
            if not moves:
                break
            session.apply_move(chooser.choice(moves))
        yield session.state
        config = replace(config, seed=None if config.seed is None else config.seed + 1)


def cmd_simulate(args):
    """Print a summary line per simulated game."""
    games = simulate(session_config(args), args.games, random.Random(args.seed))
    for game, state in enumerate(games, start=1):
        print(
            f"Game {game}: score={state.score} max_tile={state.board.max_value()} "
            f"moves={state.moves} won={state.won}"
        )


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("twenty48.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
