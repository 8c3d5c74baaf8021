"""Gunud CLI entry point.

Provides subcommands for running the puzzle API server and for generating or
checking puzzles from the terminal. Accepts configuration via flags and
environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()


def _load_version() -> str:
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def _color_enabled() -> bool:
    return sys.stdout.isatty()


def _paint(text, color) -> str:
    return f"{color}{text}{Style.RESET_ALL}" if _color_enabled() else str(text)


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Gunud daily puzzle engine

    Run the puzzle API server, or generate and check puzzles for given dates.
    Configuration can be provided via CLI flags or environment variables. If
    both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                     Bind address for the web server (default: 0.0.0.0)
          PORT                     Port for the web server (default: 5000)
          GUNUD_INCLUDE_HAZARD     Place a dragon room (default: 1)
          GUNUD_PAR_BUFFER         Moves added to the shortest path for par (default: 1)
          GUNUD_STRICT_GENERATION  Reject degraded puzzles (default: 0)

        Examples:
          # Run the server on the default host and port
          python run.py server

          # Print today's-style summary for a date
          python run.py generate 2026-02-05

          # Full JSON for a date
          python run.py generate 2026-02-05 --json

          # Exit non-zero if any of the dates produces a degraded puzzle
          python run.py check 2026-02-05 2026-02-06
        """
    )

    parser = argparse.ArgumentParser(
        prog="Gunud",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Gunud Puzzle Engine {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser(
        "server",
        help="Run the puzzle API server",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    gen_parser = subparsers.add_parser(
        "generate",
        help="Generate the puzzle for a date (or any seed string)",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    gen_parser.add_argument("date", help="Date string, e.g. 2026-02-05")
    gen_parser.add_argument("--json", action="store_true", help="Print the full puzzle as JSON")
    gen_parser.set_defaults(command="generate")

    check_parser = subparsers.add_parser(
        "check",
        help="Report whether puzzles for the given dates are fully compliant",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    check_parser.add_argument("dates", nargs="+", help="Date strings to check")
    check_parser.set_defaults(command="check")

    # If no subcommand provided, default to server
    if len(argv) == 0:
        argv = ["server"]

    return parser.parse_args(argv)


def _summary_lines(puzzle) -> list[str]:
    d = puzzle.dungeon
    divider = _paint("=" * 40, Fore.MAGENTA)

    def label(text: str) -> str:
        return _paint(text, Fore.YELLOW)

    def value(val) -> str:
        return _paint(val, Fore.GREEN if puzzle.status == "ok" else Fore.RED)

    return [
        divider,
        f"  {_paint('Gunud puzzle ' + d.date_string, Fore.CYAN + Style.BRIGHT)}",
        divider,
        f"  {label('Seed:'):12} {value(d.seed)}",
        f"  {label('Rooms:'):12} {value(d.room_count)}",
        f"  {label('Entrance:'):12} {value(d.entrance_id)}",
        f"  {label('Treasure:'):12} {value(d.treasure_id)}",
        f"  {label('Dragon:'):12} {value(d.dragon_id if d.dragon_id is not None else '-')}",
        f"  {label('Par:'):12} {value(puzzle.par)}",
        f"  {label('Clues:'):12} {value(len(puzzle.clues))}",
        f"  {label('Status:'):12} {value(puzzle.status.upper())}",
        f"  {label('Fallbacks:'):12} {value(', '.join(puzzle.fallbacks) or 'none')}",
        divider,
    ]


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    mode = (getattr(args, "command", None) or "server").lower()

    if mode == "server":
        host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
        port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
        from gunud.logging_utils import get_logger
        from gunud.server import start_server

        get_logger("gunud.cli").info("startup", mode=mode, host=host, port=port, version=__version__)
        start_server(host=host, port=port, debug=getattr(args, "debug", False))
        return 0

    from gunud.dungeon import DegradedPuzzleError, generate_puzzle

    if mode == "generate":
        try:
            puzzle = generate_puzzle(args.date)
        except DegradedPuzzleError as exc:
            print(f"[ERROR] {exc}", file=sys.stderr)
            return 1
        if args.json:
            print(json.dumps(puzzle.to_dict(), indent=2, ensure_ascii=False))
        else:
            print("\n".join(_summary_lines(puzzle)))
        return 0

    if mode == "check":
        failures = 0
        for date in args.dates:
            try:
                puzzle = generate_puzzle(date)
                reasons = puzzle.fallbacks
            except DegradedPuzzleError as exc:
                reasons = exc.reasons
            if reasons:
                failures += 1
                print(f"{date}: {_paint('DEGRADED', Fore.RED)} ({', '.join(reasons)})")
            else:
                print(f"{date}: {_paint('OK', Fore.GREEN)}")
        return 1 if failures else 0

    print(f"[ERROR] Unknown command: {mode}", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
