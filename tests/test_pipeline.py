"""Pipeline entry points: par, config layering, fallbacks and strict mode."""

import json

import pytest

from gunud.dungeon import (
    DegradedPuzzleError,
    Dungeon,
    DungeonConfig,
    Puzzle,
    calculate_par,
    generate_clues,
    generate_dungeon,
    generate_puzzle,
    resolve_config,
)
from gunud.dungeon.clues import is_solvable
from gunud.dungeon.graph import bfs_distances
from gunud.dungeon.pipeline import CLUES_AMBIGUOUS, GOAL_OUT_OF_BAND

from dungeon_test_utils import chain

# Band far beyond what a dungeon this size can reach, with no attempts to fix it.
UNREACHABLE_BAND = dict(min_distance=30, max_distance=40, band_attempts=0)


def test_par_is_shortest_path_plus_buffer():
    d = Dungeon(rooms=chain(6), entrance_id=0, treasure_id=5)
    assert calculate_par(d, 1) == 6
    assert calculate_par(d, 0) == 5
    assert calculate_par(d, 3) == 8


def test_par_buffer_defaults_to_one():
    d = Dungeon(rooms=chain(4), entrance_id=0, treasure_id=2)
    assert calculate_par(d) == 3


def test_puzzle_par_follows_config():
    p = generate_puzzle("2026-02-05", DungeonConfig(par_buffer=0))
    assert p.par == bfs_distances(p.dungeon.rooms, 0)[p.dungeon.treasure_id]


def test_hazard_can_be_disabled():
    p = generate_puzzle("2026-02-05", DungeonConfig(include_hazard=False))
    assert p.dungeon.dragon_id is None
    assert p.dungeon.metrics['hazard_tier'] == "none"
    assert len(p.clues) == p.dungeon.room_count - 1


def test_puzzle_to_dict_shape():
    data = generate_puzzle("2026-02-05", DungeonConfig()).to_dict()
    for key in ("date", "seed", "rooms", "entrance_id", "treasure_id", "dragon_id", "par", "clues", "status", "fallbacks"):
        assert key in data
    assert all(isinstance(k, str) for k in data["clues"])
    assert data["status"] in ("ok", "degraded")
    json.dumps(data)


def test_metrics_recorded():
    d = generate_dungeon("2026-02-05", DungeonConfig())
    m = d.metrics
    assert m['rooms_placed'] == m['rooms_targeted']
    assert m['runtime_ms'] >= 0
    assert set(m['phase_ms']) == {'grow', 'redundant_edges', 'loops', 'entrance', 'distance_band', 'goal', 'dead_ends', 'hazard'}
    assert m['band_met'] is True
    assert m['hazard_tier'] in ("near", "bypassable", "any")


def test_unmet_band_degrades_the_puzzle():
    p = generate_puzzle("2026-02-05", DungeonConfig(**UNREACHABLE_BAND))
    assert GOAL_OUT_OF_BAND in p.fallbacks
    assert p.status == "degraded"
    assert p.to_dict()["fallbacks"] == list(p.fallbacks)


def test_strict_mode_raises_on_degraded_puzzle():
    with pytest.raises(DegradedPuzzleError) as err:
        generate_puzzle("2026-02-05", DungeonConfig(strict=True, **UNREACHABLE_BAND))
    assert GOAL_OUT_OF_BAND in err.value.reasons
    assert "2026-02-05" in str(err.value)


def test_fallbacks_are_logged(capsys):
    generate_puzzle("2026-02-05", DungeonConfig(**UNREACHABLE_BAND))
    out = capsys.readouterr().out
    assert "event=generation_fallback" in out
    assert f"reason={GOAL_OUT_OF_BAND}" in out


def test_single_clue_attempt_is_reported():
    p = generate_puzzle("2026-02-05", DungeonConfig(clue_attempts=1))
    assert p.clue_attempts == 1
    assert (CLUES_AMBIGUOUS in p.fallbacks) == (not is_solvable(p.clues, p.dungeon.rooms, p.dungeon.treasure_id))


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(min_rooms=1),
        dict(min_rooms=10, max_rooms=5),
        dict(min_distance=8, max_distance=7),
        dict(min_dead_ends=4, max_dead_ends=2),
        dict(clue_attempts=0),
    ],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        DungeonConfig(**kwargs)


def test_resolve_config_reads_environment(monkeypatch):
    monkeypatch.setenv("GUNUD_PAR_BUFFER", "2")
    monkeypatch.setenv("GUNUD_INCLUDE_HAZARD", "0")
    cfg = resolve_config()
    assert cfg.par_buffer == 2
    assert cfg.include_hazard is False
    assert cfg.strict is False


def test_resolve_config_prefers_flask_config(monkeypatch, test_app, app_config):
    monkeypatch.setenv("GUNUD_PAR_BUFFER", "2")
    app_config["GUNUD_PAR_BUFFER"] = 4
    app_config["GUNUD_STRICT_GENERATION"] = True
    with test_app.app_context():
        cfg = resolve_config()
    assert cfg.par_buffer == 4
    assert cfg.strict is True


def test_resolve_config_keeps_base_fields():
    base = DungeonConfig(min_rooms=20, max_rooms=24)
    assert resolve_config(base) == base


def test_clue_map_is_read_only():
    p = generate_puzzle("2026-02-05", DungeonConfig())
    room_id = next(iter(p.clues))
    with pytest.raises(TypeError):
        p.clues[room_id] = None
    with pytest.raises(TypeError):
        del p.clues[room_id]
    clues = generate_clues(p.dungeon, "2026-02-05", DungeonConfig())
    assert dict(clues) == dict(p.clues)
    with pytest.raises(TypeError):
        clues[room_id] = None


def test_puzzle_copies_the_clue_map():
    d = Dungeon(rooms=chain(3), entrance_id=0, treasure_id=2)
    source = {}
    p = Puzzle(d, source, 3)
    source[0] = "changed later"
    assert dict(p.clues) == {}
