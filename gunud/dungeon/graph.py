"""Graph metrics over a room collection.

Every helper takes ``rooms`` as any sequence indexed by room id whose items
expose ``id``, ``x``, ``y`` and ``connections`` (frozen :class:`Room` tuples
and the builder's :class:`RoomGraph` both qualify). Nothing here mutates its
input.
"""
from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, Optional


def bfs_distances(rooms, source_id: int) -> Dict[int, int]:
    """Return hop counts from ``source_id``; unreachable rooms are absent."""
    distances = {source_id: 0}
    q = deque([source_id])
    while q:
        current = q.popleft()
        d = distances[current] + 1
        for neighbor in rooms[current].connections:
            if neighbor not in distances:
                distances[neighbor] = d
                q.append(neighbor)
    return distances


def grid_adjacent(a, b) -> bool:
    """Cardinal neighbours, or diagonal neighbours (both deltas exactly 1).

    Two cells apart on one axis is rejected: the link would pass through the
    cell in between.
    """
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return dx + dy == 1 or (dx == 1 and dy == 1)


def still_connected_without_edge(rooms, a_id: int, b_id: int) -> bool:
    """True if every room stays reachable from room 0 once ``a<->b`` is gone.

    The edge is skipped during traversal rather than removed. A missing edge
    trivially keeps the graph as connected as it was.
    """
    if len(rooms) == 0:
        return True
    if b_id not in rooms[a_id].connections:
        return True
    blocked = {(a_id, b_id), (b_id, a_id)}
    start = rooms[0].id
    seen = {start}
    q = deque([start])
    while q:
        current = q.popleft()
        for neighbor in rooms[current].connections:
            if neighbor in seen or (current, neighbor) in blocked:
                continue
            seen.add(neighbor)
            q.append(neighbor)
    return len(seen) == len(rooms)


def count_loops(rooms) -> int:
    """Count independent cycles reachable from room 0.

    Depth-first with an explicit stack; every non-parent edge into an already
    visited room is a back edge and each cycle is met from both ends.
    """
    if len(rooms) == 0:
        return 0
    start = rooms[0].id
    visited = {start}
    back_edges = 0
    stack = [(start, -1, iter(rooms[start].connections))]
    while stack:
        room_id, parent_id, neighbors = stack[-1]
        for neighbor in neighbors:
            if neighbor not in visited:
                visited.add(neighbor)
                stack.append((neighbor, room_id, iter(rooms[neighbor].connections)))
                break
            if neighbor != parent_id:
                back_edges += 1
        else:
            stack.pop()
    return back_edges // 2


def max_distance(rooms, source_id: int) -> int:
    return max(bfs_distances(rooms, source_id).values())


def reachable_avoiding(rooms, start_id: int, goal_id: int, excluded: Optional[Iterable[int]] = None) -> bool:
    """BFS from ``start_id`` to ``goal_id`` never entering ``excluded`` rooms."""
    seen = set(excluded or ())
    if start_id in seen:
        return False
    seen.add(start_id)
    q = deque([start_id])
    while q:
        current = q.popleft()
        if current == goal_id:
            return True
        for neighbor in rooms[current].connections:
            if neighbor not in seen:
                seen.add(neighbor)
                q.append(neighbor)
    return False


__all__ = [
    "bfs_distances",
    "grid_adjacent",
    "still_connected_without_edge",
    "count_loops",
    "max_distance",
    "reachable_avoiding",
]
