#!/usr/bin/env python3
"""Puzzle compliance diagnostics over a run of dates.

Usage:
  python scripts/diagnose_seeds.py 2026-02-05 30
  python scripts/diagnose_seeds.py 2026-02-05 7 --hazard 0

Arguments are a start date and a day count (default 14). Prints a JSON report
with per-date structural checks and exits non-zero if any check fails.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import replace
from datetime import date, timedelta
from typing import List

# Ensure project root on path if executed directly
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from gunud.dungeon import DungeonConfig, bfs_distances, generate_puzzle, grid_adjacent  # noqa: E402
from gunud.dungeon.clues import candidate_rooms  # noqa: E402
from gunud.dungeon.placement import is_bypassable  # noqa: E402


def analyze(puzzle, config: DungeonConfig) -> dict:
    d = puzzle.dungeon
    rooms = d.rooms
    distances = bfs_distances(rooms, d.entrance_id)
    lo, hi = config.band
    issues = {
        "unreachable_rooms": sum(1 for r in rooms if r.id not in distances),
        "non_adjacent_links": sum(1 for r in rooms for n in r.connections if not grid_adjacent(r, rooms[n])),
        "asymmetric_links": sum(1 for r in rooms for n in r.connections if r.id not in rooms[n].connections),
        "goal_out_of_band": int(not lo <= distances.get(d.treasure_id, -1) <= hi),
        "hazard_blocks_goal": int(
            d.dragon_id is not None and not is_bypassable(rooms, d.entrance_id, d.treasure_id, d.dragon_id)
        ),
        "ambiguous_clues": int(candidate_rooms(puzzle.clues, rooms) != [d.treasure_id]),
    }
    return {
        "date": d.date_string,
        "rooms": d.room_count,
        "par": puzzle.par,
        "clue_attempts": puzzle.clue_attempts,
        "fallbacks": list(puzzle.fallbacks),
        "issues": issues,
        "ok": all(v == 0 for v in issues.values()),
    }


def main(argv: List[str]) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("start", nargs="?", default="2026-02-05", help="First date (YYYY-MM-DD)")
    parser.add_argument("days", nargs="?", type=int, default=14, help="Number of consecutive days")
    parser.add_argument("--hazard", type=int, choices=(0, 1), default=1, help="Place a dragon room")
    args = parser.parse_args(argv)

    config = replace(DungeonConfig(), include_hazard=bool(args.hazard))
    first = date.fromisoformat(args.start)
    results = []
    for offset in range(args.days):
        day = (first + timedelta(days=offset)).isoformat()
        results.append(analyze(generate_puzzle(day, config), config))
    ok = sum(1 for r in results if r["ok"])
    print(json.dumps({"checked": len(results), "ok": ok, "results": results}, indent=2))
    return 0 if ok == len(results) else 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
