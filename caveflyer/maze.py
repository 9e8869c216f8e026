"""Randomised-Kruskal maze generation on a wall-padded grid."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Set, Tuple

SPACE = 0
WALL = 1

_MAZE_OFFSET = 1


@dataclass(frozen=True)
class _Wall:
    x1: int
    y1: int
    x2: int
    y2: int


class MazeGenerator:
    """Builds mazes in a column-major grid with a one-cell wall border."""

    def __init__(self) -> None:
        self.maze_width = 0
        self.maze_height = 0
        self.array_width = 0
        self.array_height = 0
        self.grid: List[int] = []
        self.cell_sets: List[Set[int]] = []
        self.cell_sets_indices: List[int] = []
        self.free_cell_set: Set[int] = set()
        self.free_cells: List[int] = []

    @property
    def num_free_cells(self) -> int:
        return len(self.free_cells)

    def get_index(self, x: int, y: int) -> int:
        return y + self.array_height * x

    def get_position(self, index: int) -> Tuple[int, int]:
        return divmod(index, self.array_height)

    def get(self, x: int, y: int) -> int:
        """Return a grid cell; positions outside the grid read as wall."""
        if x < 0 or y < 0 or x >= self.array_width or y >= self.array_height:
            return WALL
        return self.grid[self.get_index(x, y)]

    def get_neighbor_indices(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Indices of the left, right, lower and upper neighbours of ``(x, y)``."""
        return (
            self.get_index(x - 1, y),
            self.get_index(x + 1, y),
            self.get_index(x, y - 1),
            self.get_index(x, y + 1),
        )

    def set_free_cell(self, x: int, y: int) -> None:
        """Open maze cell ``(x, y)`` and record it as free."""
        self.grid[self.get_index(x + _MAZE_OFFSET, y + _MAZE_OFFSET)] = SPACE
        cell_index = y + self.maze_height * x
        if cell_index not in self.free_cell_set:
            self.free_cells.append(cell_index)
            self.free_cell_set.add(cell_index)

    def generate_maze(self, maze_width: int, maze_height: int, rng: random.Random) -> None:
        """Carve a new maze of the given size."""
        self.maze_width = maze_width
        self.maze_height = maze_height
        self.array_width = maze_width + 2
        self.array_height = maze_height + 2
        array_size = self.array_width * self.array_height

        self.grid = [WALL] * array_size
        self.grid[self.get_index(_MAZE_OFFSET, _MAZE_OFFSET)] = SPACE

        self.free_cells = []
        self.free_cell_set = set()

        maze_size = maze_width * maze_height
        self.cell_sets = [{i} if i < maze_size else set() for i in range(max(array_size, maze_size))]
        self.cell_sets_indices = [i if i < maze_size else 0 for i in range(max(array_size, maze_size))]
        if maze_size == 0:
            self.cell_sets[0] = {0}

        walls: List[_Wall] = [
            _Wall(i - 1, j, i + 1, j)
            for i in range(1, maze_width, 2)
            for j in range(0, maze_height, 2)
            if 0 < i < maze_width - 1
        ]
        walls += [
            _Wall(i, j - 1, i, j + 1)
            for i in range(0, maze_width, 2)
            for j in range(1, maze_height, 2)
            if 0 < j < maze_height - 1
        ]

        while walls:
            n = rng.randint(0, len(walls) - 1)
            wall = walls[n]

            s0_index = self.cell_sets_indices[wall.y1 + maze_height * wall.x1]
            # Slot 0 is reused as the working copy of the first cell's set.
            self.cell_sets[0] = set(self.cell_sets[s0_index])
            s0 = self.cell_sets[0]
            s1_index = self.cell_sets_indices[wall.y2 + maze_height * wall.x2]
            s1 = self.cell_sets[s1_index]

            x0 = (wall.x1 + wall.x2) // 2
            y0 = (wall.y1 + wall.y2) // 2
            center = y0 + maze_height * x0

            blocked = self.grid[self.get_index(x0 + _MAZE_OFFSET, y0 + _MAZE_OFFSET)] == WALL
            if blocked and s0_index != s1_index:
                self.set_free_cell(wall.x1, wall.y1)
                self.set_free_cell(x0, y0)
                self.set_free_cell(wall.x2, wall.y2)

                s1 |= s0
                s1.add(center)
                for cell in s1:
                    self.cell_sets_indices[cell] = s1_index

            del walls[n]

    def generate_maze_no_dead_ends(self, maze_width: int, maze_height: int, rng: random.Random) -> None:
        """Carve a maze, then open a wall next to most dead ends."""
        self.generate_maze(maze_width, maze_height, rng)

        for i in range(self.array_width * self.array_height):
            if self.grid[i] != SPACE:
                continue
            neighbors = self.get_neighbor_indices(*self.get_position(i))

            num_spaces = sum(1 for n in neighbors if self.grid[n] == SPACE)
            num_walls = sum(1 for n in neighbors if self.grid[n] == WALL)

            if num_spaces == 1 and num_walls > 0:
                n_select = rng.randint(0, num_walls - 1)
                for n in range(len(neighbors)):
                    cell = neighbors[(n_select + n) % num_walls]
                    x, y = self.get_position(cell)
                    interior = 1 <= x < self.array_width - 1 and 1 <= y < self.array_height - 1
                    if interior and self.grid[cell] == WALL:
                        self.grid[cell] = SPACE
                        break