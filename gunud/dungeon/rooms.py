"""Room records and the id-indexed arena used while a dungeon is being built."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

Coord2D = Tuple[int, int]

# Cardinal offsets in their canonical order; shuffled copies drive growth.
CARDINAL_OFFSETS: Tuple[Coord2D, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))


@dataclass(frozen=True)
class Room:
    id: int
    x: int
    y: int
    connections: Tuple[int, ...] = ()

    @property
    def pos(self) -> Coord2D:
        return (self.x, self.y)

    @property
    def exits(self) -> int:
        return len(self.connections)

    def to_dict(self):
        return {"id": self.id, "x": self.x, "y": self.y, "connections": list(self.connections)}


@dataclass
class DraftRoom:
    """Mutable room used only inside :class:`RoomGraph`."""

    id: int
    x: int
    y: int
    connections: List[int] = field(default_factory=list)

    def freeze(self) -> Room:
        return Room(self.id, self.x, self.y, tuple(self.connections))


class RoomGraph:
    """Dense arena of draft rooms keyed by id, plus an occupied-cell index.

    Room ids are list indices, so ``graph[room_id]`` is O(1) and graph helpers
    accept the arena wherever they accept a sequence of frozen rooms.
    """

    def __init__(self):
        self.rooms: List[DraftRoom] = []
        self._occupied: Dict[Coord2D, int] = {}

    def __len__(self) -> int:
        return len(self.rooms)

    def __getitem__(self, room_id: int) -> DraftRoom:
        return self.rooms[room_id]

    def __iter__(self) -> Iterator[DraftRoom]:
        return iter(self.rooms)

    def is_free(self, x: int, y: int) -> bool:
        return (x, y) not in self._occupied

    def room_at(self, x: int, y: int) -> Optional[DraftRoom]:
        rid = self._occupied.get((x, y))
        return None if rid is None else self.rooms[rid]

    def add_room(self, x: int, y: int, parent_id: Optional[int] = None) -> DraftRoom:
        if not self.is_free(x, y):
            raise ValueError(f"Cell {(x, y)} already holds room {self._occupied[(x, y)]}")
        room = DraftRoom(len(self.rooms), x, y)
        self.rooms.append(room)
        self._occupied[(x, y)] = room.id
        if parent_id is not None:
            self.connect(parent_id, room.id)
        return room

    def grow_from(self, parent: DraftRoom, offsets) -> Optional[DraftRoom]:
        """Place a room in the first free cell around ``parent``, linked to it."""
        for dx, dy in offsets:
            nx, ny = parent.x + dx, parent.y + dy
            if self.is_free(nx, ny):
                return self.add_room(nx, ny, parent_id=parent.id)
        return None

    def connected(self, a: int, b: int) -> bool:
        return b in self.rooms[a].connections

    def connect(self, a: int, b: int) -> None:
        if a == b or self.connected(a, b):
            return
        self.rooms[a].connections.append(b)
        self.rooms[b].connections.append(a)

    def disconnect(self, a: int, b: int) -> None:
        self.rooms[a].connections.remove(b)
        self.rooms[b].connections.remove(a)

    def freeze(self) -> Tuple[Room, ...]:
        return tuple(r.freeze() for r in self.rooms)


__all__ = ["Room", "DraftRoom", "RoomGraph", "CARDINAL_OFFSETS", "Coord2D"]
