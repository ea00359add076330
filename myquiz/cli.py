"""
MyQuiz CLI - Command-line interface for the engine.

Usage:
    myquiz check <csv_file>                 Validate a question set
    myquiz play <csv_file> [--mode MODE]    Play in the terminal
    myquiz play --sample                    Play the bundled demo set
    myquiz serve [--host H] [--port P]      Run the HTTP API
"""

import argparse
import logging
import os
import sys
import time

from .engine_core import Mode, QuizConfig, get_policy
from .engine_core.state import TEAM_COUNT_RANGE, SECONDS_RANGE, LIVES_RANGE


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="MyQuiz - Multiple-choice quiz engine",
        prog="myquiz",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Check command
    check_parser = subparsers.add_parser("check", help="Validate a CSV question set")
    check_parser.add_argument("csv_file", help="Path to CSV file")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a quiz in the terminal")
    play_parser.add_argument("csv_file", nargs="?", help="Path to CSV file")
    play_parser.add_argument("--sample", action="store_true", help="Use the bundled demo set")
    play_parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=Mode.CLASSIC.value,
        help="Play mode",
    )
    play_parser.add_argument(
        "--teams", type=int, default=2,
        help="Team count for team/cerdas (%d-%d)" % TEAM_COUNT_RANGE,
    )
    play_parser.add_argument(
        "--seconds", type=int, default=30,
        help="Seconds per question for countdown (%d-%d)" % SECONDS_RANGE,
    )
    play_parser.add_argument(
        "--lives", type=int, default=1,
        help="Lives for survival (%d-%d)" % LIVES_RANGE,
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()

    level = "DEBUG" if args.verbose else os.getenv("MYQUIZ_LOG_LEVEL", "WARNING")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "check":
        cmd_check(args)
    elif args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load(path: str):
    """Load a bank, exiting with a message on failure."""
    from .bank import load_bank, BankParseError, NoValidQuestionsError

    try:
        with open(path, "rb") as f:
            return load_bank(f, source_name=os.path.basename(path))
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)
    except NoValidQuestionsError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except BankParseError as e:
        print("Error: Could not read the CSV. Make sure it is a valid .csv file delimited by commas (,).")
        print(f"  {e}")
        sys.exit(1)


def cmd_check(args):
    """Validate a CSV question set."""
    bank = _load(args.csv_file)
    categories = sorted({q.category for q in bank})

    print(f"Valid questions: {len(bank)}")
    print(f"Categories: {', '.join(categories)}")


def cmd_play(args):
    """Play a quiz in the terminal."""
    from .bank import load_sample_bank
    from .session import SessionManager, GameLoop, LoopState

    if args.sample:
        bank = load_sample_bank()
    elif args.csv_file:
        bank = _load(args.csv_file)
    else:
        print("Error: give a CSV file or --sample")
        sys.exit(1)

    mode = Mode(args.mode)
    config = QuizConfig.clamped(
        team_count=args.teams,
        seconds_per_question=args.seconds,
        lives=args.lives,
    )

    manager = SessionManager()
    entry = manager.register_bank(bank, source_name=args.csv_file or "sample")
    playthrough = manager.create_playthrough(entry.bank_id, mode=mode, config=config)
    loop = GameLoop(playthrough)
    timed = get_policy(mode).timed

    print(f"{get_policy(mode).title}: {len(bank)} question(s)")
    if timed:
        print(f"{config.seconds_per_question}s per question. Late answers count as no answer.")

    try:
        while loop.state != LoopState.FINISHED:
            _show_question(loop)

            started = time.monotonic()
            choice = _prompt_choice()
            if timed:
                loop.tick(time.monotonic() - started)

            result = loop.answer(choice)
            answer = result.answer
            if answer.timed_out:
                print(f"  Time is up! Answer: {answer.answer_key}")
            elif answer.correct:
                print("  Correct!")
            else:
                print(f"  Wrong. Answer: {answer.answer_key}")

            input("  [Enter] next ")
            for change in loop.next().changes:
                print(f"  {change}")
    except (KeyboardInterrupt, EOFError):
        print("\nStopped.")

    _show_review(loop)


def _show_question(loop):
    session = loop.playthrough.session
    question = loop.current_question()

    badges = [f"Question {session.current_index + 1}/{session.total}"]
    if loop.timer:
        badges.append(f"{loop.playthrough.config.seconds_per_question}s")
    if session.lives is not None:
        badges.append(f"Lives {session.lives}")
    if session.team_scores is not None:
        badges.append(f"Team {session.turn_team + 1} of {len(session.team_scores)}")
    if session.cerdas_phase is not None:
        badges.append(f"Round {session.cerdas_phase}")

    print()
    print(" | ".join(badges) + f" | {question.category}")
    print(question.prompt)
    for option in question.options:
        print(f"  {option.key}. {option.text}")


def _prompt_choice() -> str:
    while True:
        choice = input("Answer (A-D): ").strip().upper()
        if choice in ("A", "B", "C", "D"):
            return choice


def _show_review(loop):
    summary = loop.review()

    print()
    print(f"Correct: {summary.correct_count} | Wrong: {summary.wrong_count} | Total: {summary.total}")
    if summary.team_scores is not None:
        for team, score in enumerate(summary.team_scores):
            marker = " *" if team in summary.leading_teams else ""
            print(f"  Team {team + 1}: {score}{marker}")

    for item in summary.items:
        mark = "OK " if item.correct else "X  "
        chosen = item.chosen or "-"
        print(f"{mark}{item.number}. {item.prompt} (yours: {chosen}, key: {item.answer_key})")


def cmd_serve(args):
    """Run the HTTP API."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install 'myquiz[api]'")
        sys.exit(1)

    from .api import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
