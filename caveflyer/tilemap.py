"""Tile map: procedural cave generation, tile storage, drawing and collision."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Dict, List, Tuple

from caveflyer.assets import AssetManager, Texture
from caveflyer.components import (
    Agent,
    Collision,
    Dynamics,
    Goal,
    Hazard,
    MobAI,
    Particle,
    Particles,
    Sprite,
    Transform,
)
from caveflyer.ecs import Coordinator, System
from caveflyer.geometry import (
    PIXELS_TO_UNIT,
    UNIT_TO_PIXELS,
    Rectangle,
    Vector2,
    get_collision_overlap,
)
from caveflyer.renderer import Renderer
from caveflyer.rooms import WALL as ROOM_WALL
from caveflyer.rooms import RoomGenerator

WALL_TEXTURE = "assets/misc_assets/groundA.png"
GOAL_TEXTURE = "assets/misc_assets/ufoGreen2.png"
TARGET_TEXTURE = "assets/misc_assets/ufoRed2.png"
OBSTACLE_TEXTURE = "assets/misc_assets/meteorBrown_big1.png"
ENEMY_TEXTURE = "assets/misc_assets/enemyShipBlue4.png"
BULLET_TEXTURE = "assets/misc_assets/laserBlue02.png"


class DistributionMode(Enum):
    """Difficulty setting that controls map size and pruning."""

    EASY = "easy"
    HARD = "hard"
    MEMORY = "memory"


class TileId(IntEnum):
    """Kinds of tile stored in the map."""

    OUT_OF_BOUNDS = -1
    EMPTY = 0
    WALL = 1
    MARKER = 2


NUM_TILE_IDS = 3


class CollisionType(IntEnum):
    """How a tile takes part in collision."""

    NONE = 0
    FULL = 1


@dataclass
class TilemapConfig:
    """Settings for map generation."""

    mode: DistributionMode = DistributionMode.HARD


@dataclass
class TilemapInfo:
    """Facts about the last generated map."""

    goal_pos: Vector2 = field(default_factory=Vector2)


def check_neighbors(p0: Vector2, p1: Vector2) -> int:
    """Classify how two positions line up.

    Returns 1 when they share a column within reach, 2 when they share a row
    within reach, and 0 otherwise.
    """
    neighborhood = 2.0
    epsilon = 0.001

    if abs(p0.x - p1.x) <= epsilon and abs(p0.y - p1.y) <= neighborhood:
        return 1
    if abs(p0.x - p1.x) <= neighborhood and abs(p0.y - p1.y) <= epsilon:
        return 2
    return 0


class TilemapSystem(System):
    """Owns the tile grid and spawns the entities of each new level."""

    def __init__(self, coordinator: Coordinator, renderer: Renderer, textures: AssetManager) -> None:
        super().__init__()
        self._coordinator = coordinator
        self._renderer = renderer
        self._textures = textures
        self.map_width = 0
        self.map_height = 0
        self._tiles: List[TileId] = []
        self._id_to_textures: Dict[TileId, List[Texture]] = {}
        self.info = TilemapInfo()

    @property
    def width(self) -> int:
        return self.map_width

    @property
    def height(self) -> int:
        return self.map_height

    def load_assets(self) -> None:
        """Load tile textures and preload the textures used by spawned entities."""
        self._id_to_textures = {TileId.WALL: [self._textures.get(WALL_TEXTURE)]}
        for name in (GOAL_TEXTURE, TARGET_TEXTURE, OBSTACLE_TEXTURE, ENEMY_TEXTURE, BULLET_TEXTURE):
            self._textures.get(name)

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.map_width and 0 <= y < self.map_height

    def set(self, x: int, y: int, tile_id: TileId) -> None:
        """Set one tile; positions outside the map are ignored."""
        if self._in_bounds(x, y):
            self._tiles[y + x * self.map_height] = TileId(tile_id)

    def set_area(self, x: int, y: int, width: int, height: int, tile_id: TileId) -> None:
        """Fill a block whose corner is at ``(x, y)``."""
        for dx in range(width):
            for dy in range(height):
                self.set(x + dx, y + dy, tile_id)

    def set_area_with_top(
        self, x: int, y: int, width: int, height: int, mid_id: TileId, top_id: TileId
    ) -> None:
        """Fill a block with ``mid_id`` and its last row with ``top_id``."""
        self.set_area(x, y, width, height - 1, mid_id)
        self.set_area(x, y + height - 1, width, 1, top_id)

    def get(self, x: int, y: int) -> TileId:
        """Return a tile; positions outside the map read as wall."""
        if not self._in_bounds(x, y):
            return TileId.WALL
        return self._tiles[y + x * self.map_height]

    def _cell_position(self, cell: int) -> Vector2:
        x, y = divmod(cell, self.map_height)
        return Vector2(x + 0.5, self.map_height - 1 - y + 0.5)

    def _add_marker_sprite(self, entity: int, texture_name: str) -> None:
        self._coordinator.add_component(
            entity,
            Sprite(
                position=Vector2(-0.4, -0.4),
                scale=0.8,
                z=1.0,
                texture=self._textures.get(texture_name),
            ),
        )

    def _spawn_obstacle(self, cell: int) -> None:
        c = self._coordinator
        e = c.create_entity()
        c.add_component(e, Transform(position=self._cell_position(cell)))
        self._add_marker_sprite(e, OBSTACLE_TEXTURE)
        c.add_component(e, Hazard(destroyable=False))
        c.add_component(e, Collision(bounds=Rectangle(-0.25, -0.25, 0.5, 0.5)))

    def _spawn_target(self, cell: int) -> None:
        c = self._coordinator
        e = c.create_entity()
        c.add_component(e, Transform(position=self._cell_position(cell)))
        self._add_marker_sprite(e, TARGET_TEXTURE)
        c.add_component(e, Hazard(destroyable=True))
        c.add_component(e, Collision(bounds=Rectangle(-0.25, -0.25, 0.5, 0.5)))

    def _spawn_enemy(self, cell: int, agent_pos: Vector2, rng: random.Random) -> None:
        c = self._coordinator
        e = c.create_entity()
        pos = self._cell_position(cell)

        speed = 0.1 * rng.random() + 0.1
        vel_component = speed * (1.0 if rng.random() < 0.5 else -1.0)

        alignment = check_neighbors(pos, agent_pos)
        vel = Vector2(0.0, 0.0)
        if alignment == 0:
            if rng.random() < 0.5:
                vel.x = vel_component
            else:
                vel.y = vel_component
        elif alignment == 1:
            vel.x = vel_component
        else:
            vel.y = vel_component

        c.add_component(e, Transform(position=pos))
        c.add_component(e, Dynamics(velocity=vel))
        self._add_marker_sprite(e, ENEMY_TEXTURE)
        c.add_component(e, Hazard(destroyable=False))
        c.add_component(e, Collision(bounds=Rectangle(-0.4, -0.4, 0.8, 0.8)))
        c.add_component(e, MobAI())

    def regenerate(self, rng: random.Random, config: TilemapConfig) -> None:
        """Generate a new cave and spawn the goal, agent and hazards into it."""
        if config.mode is DistributionMode.HARD:
            dim = 40
        elif config.mode is DistributionMode.MEMORY:
            dim = 45
        else:
            dim = 20

        self.map_width = dim
        self.map_height = dim
        size = dim * dim

        rooms = RoomGenerator(dim, dim)
        rooms.grid = [ROOM_WALL if rng.random() < 0.5 else 0 for _ in range(size)]
        for _ in range(2):
            rooms.update()

        best_room = rooms.find_best_room()
        if not best_room:
            raise RuntimeError("map generation produced no open room")

        tiles = [TileId.WALL if cell == ROOM_WALL else TileId.EMPTY for cell in rooms.grid]
        free_cells = sorted(best_room)
        for i in free_cells:
            tiles[i] = TileId.EMPTY

        goal_index = rng.randint(0, len(free_cells) - 1)
        agent_index = rng.randint(0, len(free_cells) - 1)
        if agent_index == goal_index:
            agent_index = (agent_index + 1) % len(free_cells)

        goal_cell = free_cells[goal_index]
        agent_cell = free_cells[agent_index]

        c = self._coordinator

        goal_pos = self._cell_position(goal_cell)
        goal = c.create_entity()
        c.add_component(goal, Transform(position=Vector2(goal_pos.x, goal_pos.y)))
        self._add_marker_sprite(goal, GOAL_TEXTURE)
        c.add_component(goal, Goal())
        c.add_component(goal, Collision(bounds=Rectangle(-0.4, -0.4, 0.8, 0.8)))
        self.info = TilemapInfo(goal_pos=goal_pos)

        agent_x, agent_y = divmod(agent_cell, dim)
        agent_pos = Vector2(agent_x + 0.5, float(dim - 1 - agent_y))

        agent = c.create_entity()
        c.add_component(agent, Transform(position=Vector2(agent_pos.x, agent_pos.y)))
        c.add_component(agent, Collision(bounds=Rectangle(-0.4, -0.4, 0.8, 0.8)))
        c.add_component(agent, Dynamics())
        c.add_component(agent, Agent())
        c.add_component(
            agent,
            Particles(particles=[Particle() for _ in range(10)], offset=Vector2(0.0, 0.3)),
        )

        goal_path = rooms.find_path(agent_cell, goal_cell)

        if config.mode is not DistributionMode.MEMORY:
            wide_path = rooms.expand_room(goal_path, 4)
            tiles = [TileId.WALL] * size
            for i in wide_path:
                tiles[i] = TileId.EMPTY

        for _ in range(4):
            rooms.update()
            for i in goal_path:
                tiles[i] = TileId.EMPTY

        for i in goal_path:
            tiles[i] = TileId.MARKER

        self._tiles = tiles

        free_cells = [i for i, tile in enumerate(tiles) if tile is TileId.EMPTY]
        chunk_size = len(free_cells) // 80
        num_objects = 3 * chunk_size

        chosen: List[int] = []
        for i in range(num_objects):
            index = rng.randint(0, len(free_cells) - 1)
            while index in chosen:
                index = (index + 1) % len(free_cells)
            chosen.append(index)

            cell = free_cells[index]
            if i < chunk_size:
                self._spawn_obstacle(cell)
            elif i < 2 * chunk_size:
                self._spawn_target(cell)
            else:
                self._spawn_enemy(cell, agent_pos, rng)

        self._tiles = [TileId.EMPTY if t is TileId.MARKER else t for t in tiles]

    def render(self, theme: int) -> None:
        """Draw the tiles visible to the renderer's camera."""
        r = self._renderer
        left = (r.camera_position.x - r.camera_size.x * 0.5 / r.camera_scale) * PIXELS_TO_UNIT
        top = (r.camera_position.y - r.camera_size.y * 0.5 / r.camera_scale) * PIXELS_TO_UNIT
        span_x = r.camera_size.x * PIXELS_TO_UNIT / r.camera_scale
        span_y = r.camera_size.y * PIXELS_TO_UNIT / r.camera_scale

        for y in range(math.floor(top), math.ceil(top + span_y) + 1):
            for x in range(math.floor(left), math.ceil(left + span_x) + 1):
                tile_id = self.get(x, self.map_height - 1 - y)
                if tile_id is TileId.EMPTY:
                    continue
                textures = self._id_to_textures.get(tile_id)
                if not textures:
                    continue
                texture = textures[theme]
                r.render_texture(
                    texture,
                    Vector2(x * UNIT_TO_PIXELS, y * UNIT_TO_PIXELS),
                    UNIT_TO_PIXELS / texture.width,
                )

    def get_collision(
        self,
        rectangle: Rectangle,
        collision_id_func: Callable[[TileId], CollisionType],
    ) -> Tuple[Vector2, bool]:
        """Push ``rectangle`` out of solid tiles.

        Returns the corrected top-left corner and whether any tile was hit.
        """
        rect = Rectangle(rectangle.x, rectangle.y, rectangle.width, rectangle.height)

        lower_x = math.floor(rect.x)
        lower_y = math.floor(rect.y)
        upper_x = math.ceil(rect.x + rect.width)
        upper_y = math.ceil(rect.y + rect.height)

        center_x = rect.x + rect.width * 0.5
        center_y = rect.y + rect.height * 0.5

        collided = False

        for vertical in (True, False):
            for y in range(lower_y, upper_y + 1):
                for x in range(lower_x, upper_x + 1):
                    tile_id = self.get(x, self.map_height - 1 - y)
                    if collision_id_func(tile_id) == CollisionType.NONE:
                        continue

                    tile = Rectangle(float(x), float(y), 1.0, 1.0)
                    overlap = get_collision_overlap(rect, tile)
                    if overlap.width == 0.0 and overlap.height == 0.0:
                        continue

                    overlap_cx = overlap.x + overlap.width * 0.5
                    overlap_cy = overlap.y + overlap.height * 0.5

                    if vertical and overlap.width > overlap.height:
                        rect.y = tile.y - rect.height if overlap_cy > center_y else tile.y + tile.height
                        collided = True
                    elif not vertical and overlap.width <= overlap.height:
                        rect.x = tile.x - rect.width if overlap_cx > center_x else tile.x + tile.width
                        collided = True

        return Vector2(rect.x, rect.y), collided