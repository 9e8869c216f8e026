"""Cellular-automaton cave generation and flood-fill helpers on a grid."""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Set, Tuple

SPACE = 0
WALL = 1

_ORTHOGONAL = ((-1, 0), (0, -1), (0, 1), (1, 0))
_MOORE = tuple((i, j) for i in (-1, 0, 1) for j in (-1, 0, 1) if i != 0 or j != 0)


class RoomGenerator:
    """A column-major grid of cells: 0 is open space, 1 is wall."""

    def __init__(self, grid_width: int, grid_height: int) -> None:
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.grid: List[int] = [SPACE] * (grid_width * grid_height)

    def get_index(self, x: int, y: int) -> int:
        return y + self.grid_height * x

    def get_position(self, index: int) -> Tuple[int, int]:
        return divmod(index, self.grid_height)

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.grid_width and 0 <= y < self.grid_height

    def set(self, x: int, y: int, value: int) -> None:
        """Set a cell; positions outside the grid are ignored."""
        if self._in_bounds(x, y):
            self.grid[self.get_index(x, y)] = value

    def get(self, x: int, y: int) -> int:
        """Return a cell; positions outside the grid read as wall."""
        if not self._in_bounds(x, y):
            return WALL
        return self.grid[self.get_index(x, y)]

    def count_neighbors(self, index: int, cell_type: int) -> int:
        """Count cells of ``cell_type`` in the 3x3 block centred on ``index``."""
        x, y = self.get_position(index)
        return sum(
            1
            for i in (-1, 0, 1)
            for j in (-1, 0, 1)
            if self.get(x + i, y + j) == cell_type
        )

    def update(self) -> None:
        """Advance the automaton: a cell becomes wall with five or more walls around it."""
        self.grid = [
            WALL if self.count_neighbors(i, WALL) >= 5 else SPACE
            for i in range(len(self.grid))
        ]

    def _orthogonal(self, index: int) -> Iterable[int]:
        x, y = self.get_position(index)
        for i, j in _ORTHOGONAL:
            if self._in_bounds(x + i, y + j):
                yield self.get_index(x + i, y + j)

    def build_room(self, index: int) -> Set[int]:
        """Flood-fill the open cells reachable from ``index``.

        The start cell is included only when it can be reached back from a neighbour.
        """
        if not 0 <= index < len(self.grid):
            raise IndexError(f"cell {index} is outside the grid")

        room: Set[int] = set()
        if self.grid[index] != SPACE:
            return room

        pending = deque([index])
        while pending:
            current = pending.popleft()
            if self.grid[current] != SPACE:
                continue
            for neighbor in self._orthogonal(current):
                if neighbor not in room and self.grid[neighbor] == SPACE:
                    pending.append(neighbor)
                    room.add(neighbor)
        return room

    def find_path(self, src: int, dst: int) -> List[int]:
        """Return a shortest orthogonal path of open cells from ``src`` to ``dst``.

        An empty list means no path exists.
        """
        if self.grid[src] != SPACE:
            return []

        expanded = [src]
        parents = [-1]
        covered: Set[int] = set()
        found = -1

        for search_index, current in enumerate(expanded):
            if current == dst:
                found = search_index
                break
            for neighbor in self._orthogonal(current):
                if neighbor not in covered and self.grid[neighbor] == SPACE:
                    expanded.append(neighbor)
                    parents.append(search_index)
                    covered.add(neighbor)

        if found < 0:
            return []

        path: List[int] = []
        while found >= 0:
            path.append(expanded[found])
            found = parents[found]
        path.reverse()
        return path

    def find_best_room(self) -> Set[int]:
        """Return the largest connected room; the first one wins ties."""
        seen: Set[int] = set()
        best: Set[int] = set()
        best_size = -1

        for i, cell in enumerate(self.grid):
            if cell == SPACE and i not in seen:
                room = self.build_room(i)
                seen |= room
                if len(room) > best_size:
                    best_size = len(room)
                    best = room
        return best

    def expand_room(self, cells: Iterable[int], n: int) -> Set[int]:
        """Grow ``cells`` ``n`` times into neighbouring open cells (8-connected)."""
        result = set(cells)
        frontier = set(result)

        for _ in range(n):
            grown: Set[int] = set()
            for current in frontier:
                if self.grid[current] != SPACE:
                    continue
                x, y = self.get_position(current)
                for i, j in _MOORE:
                    if not self._in_bounds(x + i, y + j):
                        continue
                    neighbor = self.get_index(x + i, y + j)
                    if neighbor not in result and self.grid[neighbor] == SPACE:
                        result.add(neighbor)
                        grown.add(neighbor)
            frontier = grown
        return result