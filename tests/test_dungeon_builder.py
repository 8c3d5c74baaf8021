"""Builder phases, run one at a time on seeded and hand-built graphs."""

import pytest

from gunud.dungeon.builder import DungeonBuilder
from gunud.dungeon.config import DungeonConfig
from gunud.dungeon.graph import bfs_distances, count_loops, grid_adjacent, max_distance
from gunud.dungeon.rooms import RoomGraph
from gunud.dungeon.seeding import SeededRandom

from dungeon_test_utils import SAMPLE_SEEDS, reachable_ids


def builder_for(seed_string, **overrides):
    return DungeonBuilder(DungeonConfig(**overrides), SeededRandom.from_string(seed_string))


def graph_from(cells, links):
    g = RoomGraph()
    for x, y in cells:
        g.add_room(x, y)
    for a, b in links:
        g.connect(a, b)
    return g


def links_of(graph):
    return {tuple(sorted((r.id, n))) for r in graph for n in r.connections}


@pytest.mark.parametrize("seed", SAMPLE_SEEDS[:6])
def test_grow_builds_a_spanning_tree(seed):
    b = builder_for(seed)
    b.grow()
    g = b.graph
    assert 12 <= len(g) <= 16
    assert b.metrics['rooms_placed'] == len(g) == b.metrics['rooms_targeted']
    assert b.metrics['rooms_dropped'] == 0
    assert (g[0].x, g[0].y) == (0, 0)
    assert len(links_of(g)) == len(g) - 1
    assert reachable_ids(g) == set(range(len(g)))
    for a, c in links_of(g):
        # Growth only ever uses cardinal cells.
        assert abs(g[a].x - g[c].x) + abs(g[a].y - g[c].y) == 1


@pytest.mark.parametrize("seed", SAMPLE_SEEDS[:6])
def test_redundant_edges_stay_grid_adjacent(seed):
    b = builder_for(seed)
    b.grow()
    before = len(links_of(b.graph))
    b.add_redundant_edges()
    after = links_of(b.graph)
    assert len(after) == before + b.metrics['extra_edges_added']
    assert b.metrics['extra_edges_added'] <= 6
    for a, c in after:
        assert grid_adjacent(b.graph[a], b.graph[c])


@pytest.mark.parametrize("seed", SAMPLE_SEEDS[:6])
def test_full_build_invariants(seed):
    b = builder_for(seed)
    g = b.build()
    assert reachable_ids(g) == set(range(len(g)))
    assert len(g[0].connections) >= 3
    assert b.metrics['band_met'] == (5 <= max_distance(g, 0) <= 7)
    for room in g:
        assert room.id not in room.connections
        assert len(set(room.connections)) == len(room.connections)
        for nid in room.connections:
            assert room.id in g[nid].connections


def test_add_room_rejects_occupied_cell():
    g = RoomGraph()
    g.add_room(0, 0)
    with pytest.raises(ValueError):
        g.add_room(0, 0)


def test_connect_ignores_self_and_duplicate_links():
    g = graph_from([(0, 0), (1, 0)], [(0, 1)])
    g.connect(0, 1)
    g.connect(1, 0)
    g.connect(0, 0)
    assert g[0].connections == [1]
    assert g[1].connections == [0]


def test_inject_loops_stops_when_no_triangle_is_left():
    b = builder_for("loops")
    # L shape: (0,0)-(1,0)-(1,1); the only closable triangle is 0-2.
    b.graph = graph_from([(0, 0), (1, 0), (1, 1)], [(0, 1), (1, 2)])
    b.inject_loops()
    assert b.graph.connected(0, 2)
    assert count_loops(b.graph) == 1
    assert b.metrics['loops_added'] == 1


def test_entrance_links_existing_neighbours_first():
    b = builder_for("entrance")
    b.graph = graph_from([(0, 0), (1, 0), (1, 1), (0, 1)], [(0, 1), (1, 2), (2, 3)])
    b.ensure_entrance_connections()
    assert sorted(b.graph[0].connections) == [1, 2, 3]
    assert b.metrics['entrance_links_added'] == 2
    assert b.metrics['entrance_rooms_added'] == 0


def test_entrance_grows_rooms_when_neighbours_run_out():
    b = builder_for("entrance")
    b.graph = graph_from([(0, 0), (1, 0)], [(0, 1)])
    b.ensure_entrance_connections()
    assert len(b.graph[0].connections) == 3
    assert b.metrics['entrance_rooms_added'] >= 1
    for nid in b.graph[0].connections:
        assert grid_adjacent(b.graph[0], b.graph[nid])


def test_short_dungeon_is_extended_to_the_band():
    b = builder_for("short")
    b.graph = graph_from([(0, 0), (1, 0), (2, 0)], [(0, 1), (1, 2)])
    assert b.enforce_distance_band()
    assert max_distance(b.graph, 0) == 5
    assert b.metrics['frontier_rooms_added'] == 3
    assert b.metrics['shortcut_edges_removed'] == 0


def test_long_dungeon_gets_a_shortcut():
    # A U-shaped corridor twelve rooms long.
    cells = [(x, 0) for x in range(6)] + [(x, 1) for x in range(5, -1, -1)]
    links = [(i, i + 1) for i in range(len(cells) - 1)]
    b = builder_for("long")
    b.graph = graph_from(cells, links)
    assert max_distance(b.graph, 0) == 11
    assert b.enforce_distance_band()
    assert 5 <= max_distance(b.graph, 0) <= 7
    assert b.metrics['shortcut_edges_added'] >= 1
    for a, c in links_of(b.graph):
        assert grid_adjacent(b.graph[a], b.graph[c])


def test_shortcut_removal_keeps_entrance_edges_and_connectivity():
    # Square plus a diagonal: the widest gap edge not touching the entrance goes.
    b = builder_for("remove")
    b.graph = graph_from(
        [(0, 0), (1, 0), (1, 1), (0, 1), (2, 1)],
        [(0, 1), (0, 3), (1, 2), (2, 3), (1, 4), (2, 4)],
    )
    before = links_of(b.graph)
    assert b._remove_shortcut()
    removed = before - links_of(b.graph)
    assert len(removed) == 1
    (a, c), = removed
    assert 0 not in (a, c)
    assert reachable_ids(b.graph) == set(range(len(b.graph)))
    assert b.metrics['shortcut_edges_removed'] == 1


def test_band_failure_is_reported_not_raised():
    b = builder_for("unreachable-band", min_distance=40, max_distance=45, band_attempts=2)
    b.grow()
    assert b.enforce_distance_band() is False
    assert b.metrics['band_met'] is False


def test_dead_ends_hang_off_the_route():
    b = builder_for("2026-02-05")
    g = b.build()
    distances = bfs_distances(g, 0)
    goal = max(distances, key=distances.get)
    before = len(g)
    added = b.add_dead_ends(goal)
    assert 0 <= added <= 5
    assert b.metrics['dead_ends_added'] == added
    assert len(g) == before + added
    for room in list(g)[before:]:
        assert len(room.connections) == 1
        parent = g[room.connections[0]]
        assert abs(parent.x - room.x) + abs(parent.y - room.y) == 1
    # Leaves do not change the goal's distance.
    assert bfs_distances(g, 0)[goal] == distances[goal]


@pytest.mark.parametrize("seed", SAMPLE_SEEDS[:6])
def test_inject_loops_reaches_minimum_when_possible(seed):
    b = builder_for(seed)
    b.grow()
    b.add_redundant_edges()
    b.inject_loops()
    assert count_loops(b.graph) >= 2 or b._find_triangle() is None


def test_frontier_extension_has_its_own_attempts():
    # One removable edge, then three rooms of growth, with only three attempts
    # per loop.
    b = builder_for("square", band_attempts=3)
    b.graph = graph_from([(0, 0), (1, 0), (1, 1), (0, 1)], [(0, 1), (1, 2), (2, 3), (3, 0)])
    assert b.enforce_distance_band()
    assert max_distance(b.graph, 0) == 5
    assert b.metrics['shortcut_edges_removed'] == 1
    assert b.metrics['frontier_rooms_added'] == 3
    assert reachable_ids(b.graph) == set(range(len(b.graph)))
