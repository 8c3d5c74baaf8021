"""Room-graph construction phases.

The builder grows a connected grid graph from a single room at the origin and
then reshapes it in strictly ordered phases, each relying on the invariants
left by the one before:

1. ``grow``                        - tree growth on free cardinal cells
2. ``add_redundant_edges``         - alternate routes between grid neighbours
3. ``inject_loops``                - close triangles until enough cycles exist
4. ``ensure_entrance_connections`` - give the entrance a minimum fan-out
5. ``enforce_distance_band``       - pull the farthest room into the band
6. ``add_dead_ends``               - misleading leaves near the optimal path

Phase 6 needs the goal room, so the pipeline runs it after goal selection.
Every random draw comes from the one ``SeededRandom`` handed in, in a fixed
order, which is what makes a dungeon reproducible per date.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .config import DungeonConfig
from .graph import bfs_distances, count_loops, grid_adjacent, max_distance, still_connected_without_edge
from .metrics import init_metrics
from .rooms import CARDINAL_OFFSETS, DraftRoom, RoomGraph
from .seeding import SeededRandom

# Eight cells around a room, scanned for grid-adjacent partners.
_NEIGHBOUR_CELLS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]


class DungeonBuilder:
    def __init__(self, config: DungeonConfig, rng: SeededRandom, metrics: Optional[Dict] = None):
        self.config = config
        self.rng = rng
        self.metrics = metrics if metrics is not None else init_metrics()
        self.graph = RoomGraph()
        self.entrance_id = 0

    def build(self) -> RoomGraph:
        """Run phases 1-5."""
        self.grow()
        self.add_redundant_edges()
        self.inject_loops()
        self.ensure_entrance_connections()
        self.enforce_distance_band()
        return self.graph

    # -- helpers ---------------------------------------------------------
    def _adjacent_rooms(self, room: DraftRoom) -> List[DraftRoom]:
        """Grid-adjacent rooms around ``room`` in id order."""
        g = self.graph
        found = []
        for dx, dy in _NEIGHBOUR_CELLS:
            other = g.room_at(room.x + dx, room.y + dy)
            if other is not None and grid_adjacent(room, other):
                found.append(other)
        found.sort(key=lambda r: r.id)
        return found

    # -- phase 1 ---------------------------------------------------------
    def grow(self) -> None:
        g, rng, cfg = self.graph, self.rng, self.config
        target = rng.randint(cfg.min_rooms, cfg.max_rooms)
        self.metrics['rooms_targeted'] = target
        g.add_room(0, 0)
        for _ in range(1, target):
            placed = None
            for _attempt in range(cfg.growth_attempts):
                parent = rng.choice(g.rooms)
                placed = g.grow_from(parent, rng.shuffled(CARDINAL_OFFSETS))
                if placed is not None:
                    break
            if placed is None:
                # Exhaustive scan: first free cardinal cell around any room.
                for parent in list(g.rooms):
                    placed = g.grow_from(parent, CARDINAL_OFFSETS)
                    if placed is not None:
                        break
            if placed is None:
                self.metrics['rooms_dropped'] += 1
        self.metrics['rooms_placed'] = len(g)

    # -- phase 2 ---------------------------------------------------------
    def add_redundant_edges(self) -> None:
        g, rng, cfg = self.graph, self.rng, self.config
        count = rng.randint(cfg.min_extra_edges, cfg.max_extra_edges)
        for _ in range(count):
            src = rng.choice(g.rooms)
            candidates = [r for r in self._adjacent_rooms(src) if not g.connected(src.id, r.id)]
            if candidates:
                dst = rng.choice(candidates)
                g.connect(src.id, dst.id)
                self.metrics['extra_edges_added'] += 1

    # -- phase 3 ---------------------------------------------------------
    def _find_triangle(self) -> Optional[Tuple[int, int]]:
        g = self.graph
        for room in g:
            for nid in room.connections:
                for cid in g[nid].connections:
                    if cid == room.id or g.connected(room.id, cid):
                        continue
                    if grid_adjacent(room, g[cid]):
                        return room.id, cid
        return None

    def inject_loops(self) -> None:
        g = self.graph
        while count_loops(g) < self.config.min_loops:
            pair = self._find_triangle()
            if pair is None:
                break
            g.connect(*pair)
            self.metrics['loops_added'] += 1

    # -- phase 4 ---------------------------------------------------------
    def ensure_entrance_connections(self) -> None:
        g = self.graph
        entrance = g[self.entrance_id]
        while len(entrance.connections) < self.config.entrance_min_connections:
            partner = next((r for r in self._adjacent_rooms(entrance) if not g.connected(entrance.id, r.id)), None)
            if partner is not None:
                g.connect(entrance.id, partner.id)
                self.metrics['entrance_links_added'] += 1
                continue
            if g.grow_from(entrance, CARDINAL_OFFSETS) is None:
                break
            self.metrics['entrance_rooms_added'] += 1

    # -- phase 5 ---------------------------------------------------------
    def _remove_shortcut(self) -> bool:
        """Drop the widest-gap edge whose removal keeps the graph connected.

        Entrance edges and edges into single-exit rooms are never candidates.
        """
        g, entrance_id = self.graph, self.entrance_id
        distances = bfs_distances(g, entrance_id)
        edges = []
        for room in g:
            if room.id == entrance_id or len(room.connections) <= 1:
                continue
            for nid in room.connections:
                if nid <= room.id or nid == entrance_id or len(g[nid].connections) <= 1:
                    continue
                gap = abs(distances.get(room.id, 0) - distances.get(nid, 0))
                edges.append((gap, room.id, nid))
        edges.sort(key=lambda e: -e[0])
        for _gap, a, b in edges:
            if still_connected_without_edge(g, a, b):
                g.disconnect(a, b)
                self.metrics['shortcut_edges_removed'] += 1
                return True
        return False

    def _extend_frontier(self) -> bool:
        g = self.graph
        distances = bfs_distances(g, self.entrance_id)
        farthest = max(distances.values())
        for room in list(g.rooms):
            if distances.get(room.id) != farthest:
                continue
            if g.grow_from(room, CARDINAL_OFFSETS) is not None:
                self.metrics['frontier_rooms_added'] += 1
                return True
        return False

    def _add_shortcut(self) -> bool:
        g = self.graph
        lo, hi = self.config.band
        distances = bfs_distances(g, self.entrance_id)
        for far in g:
            far_dist = distances.get(far.id, 0)
            if far_dist <= hi:
                continue
            for room in self._adjacent_rooms(far):
                if g.connected(far.id, room.id):
                    continue
                room_dist = distances.get(room.id, 0)
                if lo - 2 <= room_dist < far_dist - 1:
                    g.connect(far.id, room.id)
                    self.metrics['shortcut_edges_added'] += 1
                    return True
        return False

    def enforce_distance_band(self) -> bool:
        """Bring the entrance's farthest BFS distance into the configured band.

        Returns whether the band holds afterwards; an unmet band is accepted.
        """
        g, cfg = self.graph, self.config
        lo, hi = cfg.band
        attempts = 0
        while max_distance(g, self.entrance_id) < lo and attempts < cfg.band_attempts:
            attempts += 1
            if not self._remove_shortcut():
                break
        # Removal stalled or ran out: grow outward from the farthest rooms.
        attempts = 0
        while max_distance(g, self.entrance_id) < lo and attempts < cfg.band_attempts:
            attempts += 1
            if not self._extend_frontier():
                break
        attempts = 0
        while max_distance(g, self.entrance_id) > hi and attempts < cfg.band_attempts:
            attempts += 1
            if not self._add_shortcut():
                break
        reach = max_distance(g, self.entrance_id)
        self.metrics['band_met'] = lo <= reach <= hi
        return self.metrics['band_met']

    # -- phase 6 ---------------------------------------------------------
    def add_dead_ends(self, goal_id: int) -> int:
        """Graft single-exit rooms onto rooms on or next to a shortest route."""
        g, rng, cfg = self.graph, self.rng, self.config
        count = rng.randint(cfg.min_dead_ends, cfg.max_dead_ends)
        from_entrance = bfs_distances(g, self.entrance_id)
        to_goal = bfs_distances(g, goal_id)
        shortest = from_entrance.get(goal_id, 0)
        on_route = [r for r in g if from_entrance.get(r.id, 0) + to_goal.get(r.id, 0) <= shortest + 1]
        middle = [r for r in on_route if 1 <= from_entrance.get(r.id, 0) < shortest - 1]
        parents = middle or on_route
        added = 0
        for _ in range(count):
            if not parents:
                break
            parent = rng.choice(parents)
            if g.grow_from(parent, rng.shuffled(CARDINAL_OFFSETS)) is not None:
                added += 1
        self.metrics['dead_ends_added'] = added
        return added


__all__ = ["DungeonBuilder"]
