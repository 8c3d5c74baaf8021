"""
project: Gunud
module: puzzle_api.py
License: MIT

Daily puzzle API routes.

Serves generated puzzles as JSON for the renderer and play-state tracker.
Generation is deterministic per seed string, so puzzles are cached in-process
and never stored.
"""

import os
import threading
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from gunud.dungeon import DegradedPuzzleError, generate_puzzle, practice_seed, resolve_config
from gunud.logging_utils import get_logger

log = get_logger("gunud.api")

bp_puzzle = Blueprint("puzzle", __name__)

MAX_SEED_LENGTH = 64

# Simple in-process cache (seed string, config) -> Puzzle. Locked because the
# threaded dev server may serve concurrent requests.
_puzzle_cache = {}
_puzzle_cache_lock = threading.Lock()
_PUZZLE_CACHE_MAX = 16  # small LRU-ish manual cap


def get_cached_puzzle(seed_string: str):
    cfg = resolve_config()
    if os.environ.get("GUNUD_DISABLE_CACHE") == "1":
        return generate_puzzle(seed_string, cfg)
    key = (seed_string, cfg)
    with _puzzle_cache_lock:
        puzzle = _puzzle_cache.get(key)
        if puzzle is not None:
            return puzzle
    puzzle = generate_puzzle(seed_string, cfg)
    with _puzzle_cache_lock:
        _puzzle_cache[key] = puzzle
        if len(_puzzle_cache) > _PUZZLE_CACHE_MAX:
            first_key = next(iter(_puzzle_cache.keys()))
            if first_key != key:
                _puzzle_cache.pop(first_key, None)
    return puzzle


def clear_puzzle_cache():
    with _puzzle_cache_lock:
        _puzzle_cache.clear()


def today_date_string() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def _validate_seed(seed_string):
    """Return an error message for an unusable seed string, else None."""
    if not isinstance(seed_string, str) or not seed_string.strip():
        return "seed must be a non-empty string"
    if len(seed_string) > MAX_SEED_LENGTH:
        return f"seed must be at most {MAX_SEED_LENGTH} characters"
    if not seed_string.isprintable():
        return "seed must be printable"
    return None


def _puzzle_response(seed_string: str):
    error = _validate_seed(seed_string)
    if error:
        return jsonify({"error": error}), 400
    try:
        puzzle = get_cached_puzzle(seed_string)
    except DegradedPuzzleError as exc:
        log.warn("puzzle_rejected", date=seed_string, reasons=",".join(exc.reasons))
        return jsonify({"error": "puzzle degraded", "reasons": list(exc.reasons)}), 422
    return jsonify(puzzle.to_dict())


@bp_puzzle.route("/api/puzzle/today")
def puzzle_today():
    """Return today's (UTC) puzzle."""
    return _puzzle_response(today_date_string())


@bp_puzzle.route("/api/puzzle/<date_string>")
def puzzle_for_date(date_string):
    """
    Return the puzzle for a date (or any seed string).
    Response: { 'date', 'seed', 'rooms', 'entrance_id', 'treasure_id', 'dragon_id',
                'par', 'clues': {room_id: {...}}, 'status', 'fallbacks' }
    """
    return _puzzle_response(date_string)


@bp_puzzle.route("/api/puzzle/<date_string>/metrics")
def puzzle_metrics(date_string):
    """Return generation metrics for a seed string."""
    error = _validate_seed(date_string)
    if error:
        return jsonify({"error": error}), 400
    try:
        puzzle = get_cached_puzzle(date_string)
    except DegradedPuzzleError as exc:
        return jsonify({"error": "puzzle degraded", "reasons": list(exc.reasons)}), 422
    metrics = dict(puzzle.dungeon.metrics)
    metrics["clue_attempts"] = puzzle.clue_attempts
    return jsonify({"date": date_string, "seed": puzzle.dungeon.seed, "status": puzzle.status, "metrics": metrics})


@bp_puzzle.route("/api/puzzle/<date_string>/check")
def puzzle_check(date_string):
    """Check whether ``?room=<id>`` is the goal room. Response: { 'room', 'correct' }"""
    room_id = request.args.get("room", type=int)
    if room_id is None:
        return jsonify({"error": "room query parameter (int) required"}), 400
    error = _validate_seed(date_string)
    if error:
        return jsonify({"error": error}), 400
    try:
        puzzle = get_cached_puzzle(date_string)
    except DegradedPuzzleError as exc:
        return jsonify({"error": "puzzle degraded", "reasons": list(exc.reasons)}), 422
    if not 0 <= room_id < puzzle.dungeon.room_count:
        return jsonify({"error": f"unknown room {room_id}"}), 404
    return jsonify({"room": room_id, "correct": room_id == puzzle.dungeon.treasure_id})


@bp_puzzle.route("/api/puzzle/practice", methods=["POST"])
def puzzle_practice():
    """Generate an off-calendar puzzle.

    Body JSON (optional): { "seed": <str|null> }
    - Seed omitted or null => a fresh random practice seed.
    """
    data = request.get_json(silent=True) or {}
    seed_string = data.get("seed")
    if seed_string is None:
        seed_string = practice_seed()
    return _puzzle_response(seed_string)
