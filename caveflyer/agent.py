"""The player's ship: steering, shooting, collisions and drawing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional

from caveflyer.assets import AssetError, AssetManager, Texture
from caveflyer.components import Agent, Collision, Dynamics, Hazard, Particles, Transform
from caveflyer.ecs import Coordinator, EcsError, System
from caveflyer.geometry import UNIT_TO_PIXELS, Rectangle, Vector2, check_collision
from caveflyer.renderer import Renderer
from caveflyer.sprites import GoalSystem, HazardSystem
from caveflyer.tilemap import CollisionType, TileId, TilemapSystem

SHIP_TEXTURE = "assets/misc_assets/playerShip1_red.png"
BULLET_TEXTURE = "assets/misc_assets/laserBlue02.png"
EXPLOSION_TEXTURES = tuple(f"assets/misc_assets/explosion{i}.png" for i in range(1, 6))

MAX_BULLETS = 32

ACCEL = 0.05
SPIN_RATE = 0.05
VEL_DECAY = 0.1
REVERSE_MUL = 0.5
BULLET_TIME = 0.5
BULLET_SPEED = 1.0
EXPLOSION_RATE = 0.5

_DEAD = -1.0


def _walls_solid(tile_id: TileId) -> CollisionType:
    return CollisionType.FULL if tile_id == TileId.WALL else CollisionType.NONE


def _world_rect(transform: Transform, collision: Collision) -> Rectangle:
    return Rectangle(
        transform.position.x + collision.bounds.x,
        transform.position.y + collision.bounds.y,
        collision.bounds.width,
        collision.bounds.height,
    )


@dataclass
class Bullet:
    """A shot; ``frame`` 0 is in flight, 1 to 5 is exploding, -1 is unused."""

    pos: Vector2 = field(default_factory=Vector2)
    vel: Vector2 = field(default_factory=Vector2)
    rotation: float = 0.0
    frame: float = _DEAD


class StepOutcome(NamedTuple):
    """What happened to the agent during one update."""

    alive: bool
    achieved_goal: bool
    targets_destroyed: int


class AgentSystem(System):
    """Controls the single player entity and its bullets."""

    def __init__(self, coordinator: Coordinator, renderer: Renderer, textures: AssetManager) -> None:
        super().__init__()
        self._coordinator = coordinator
        self._renderer = renderer
        self._textures = textures
        self._bullets: List[Bullet] = [Bullet() for _ in range(MAX_BULLETS)]
        self._next_bullet = 0
        self._num_bullets = 0
        self._bullet_timer = 0.0
        self._ship: Optional[Texture] = None
        self._bullet_texture: Optional[Texture] = None
        self._explosions: List[Texture] = []

    @property
    def num_bullets(self) -> int:
        """Number of bullets in flight or exploding."""
        return self._num_bullets

    def load_assets(self) -> None:
        self._ship = self._textures.get(SHIP_TEXTURE)
        self._bullet_texture = self._textures.get(BULLET_TEXTURE)
        self._explosions = [self._textures.get(name) for name in EXPLOSION_TEXTURES]

    def _only_entity(self) -> int:
        if len(self.entities) != 1:
            raise EcsError(f"expected exactly one agent, found {len(self.entities)}")
        return next(iter(self.entities))

    def _newest_first(self) -> Iterator[Bullet]:
        count = len(self._bullets)
        for i in range(self._num_bullets):
            yield self._bullets[(count + self._next_bullet - 1 - i) % count]

    def _fire(self, transform: Transform, dir_x: float, dir_y: float) -> None:
        bullet = self._bullets[self._next_bullet]
        bullet.rotation = transform.rotation
        bullet.vel = Vector2(dir_x * BULLET_SPEED, dir_y * BULLET_SPEED)
        bullet.pos = Vector2(transform.position.x, transform.position.y)
        bullet.frame = 0.0
        self._next_bullet = (self._next_bullet + 1) % len(self._bullets)
        self._num_bullets += 1

    def update(self, dt: float, hazard: HazardSystem, goal: GoalSystem, action: int) -> StepOutcome:
        """Apply ``action`` for one sub-step and report the agent's fate."""
        c = self._coordinator
        tilemap = c.get_system(TilemapSystem)
        e = self._only_entity()

        agent = c.get_component(e, Agent)
        agent.action = action

        transform = c.get_component(e, Transform)
        dynamics = c.get_component(e, Dynamics)
        collision = c.get_component(e, Collision)

        movement_x = float((action in (6, 7, 8)) - (action in (0, 1, 2)))
        movement_y = float((action in (2, 5, 8)) - (action in (0, 3, 6)))
        fire = action == 9

        if movement_y < 0.0:
            movement_y *= REVERSE_MUL

        transform.rotation += movement_x * SPIN_RATE * dt
        dir_x = math.cos(transform.rotation)
        dir_y = math.sin(transform.rotation)

        if fire:
            if self._bullet_timer == 0.0 and self._num_bullets < len(self._bullets):
                self._bullet_timer = BULLET_TIME
                self._fire(transform, dir_x, dir_y)
            else:
                self._bullet_timer = max(0.0, self._bullet_timer - dt)

        dynamics.velocity.x += (dir_x * movement_y * ACCEL - dynamics.velocity.x * VEL_DECAY) * dt
        dynamics.velocity.y += (dir_y * movement_y * ACCEL - dynamics.velocity.y * VEL_DECAY) * dt

        transform.position.x += dynamics.velocity.x * dt
        transform.position.y += dynamics.velocity.y * dt

        world = _world_rect(transform, collision)
        corrected, _ = tilemap.get_collision(world, _walls_solid)
        delta_x = corrected.x - world.x
        delta_y = corrected.y - world.y

        transform.position.x = corrected.x - collision.bounds.x
        transform.position.y = corrected.y - collision.bounds.y
        world = _world_rect(transform, collision)

        if delta_x != 0.0:
            dynamics.velocity.x = 0.0
        if delta_y != 0.0:
            dynamics.velocity.y = 0.0

        alive = not any(
            check_collision(
                world,
                _world_rect(c.get_component(h, Transform), c.get_component(h, Collision)),
            )
            for h in hazard.entities
        )
        achieved_goal = any(
            check_collision(
                world,
                _world_rect(c.get_component(g, Transform), c.get_component(g, Collision)),
            )
            for g in goal.entities
        )

        self._renderer.camera_position.x = transform.position.x * UNIT_TO_PIXELS
        self._renderer.camera_position.y = transform.position.y * UNIT_TO_PIXELS

        targets_destroyed = self._update_bullets(dt, hazard, tilemap)

        c.get_component(e, Particles).enabled = movement_y > 0.0

        return StepOutcome(alive, achieved_goal, targets_destroyed)

    def _update_bullets(self, dt: float, hazard: HazardSystem, tilemap: TilemapSystem) -> int:
        c = self._coordinator
        destroyed = 0
        count = len(self._bullets)

        # The bound shrinks as bullets are retired during the pass.
        i = 0
        while i < self._num_bullets:
            bullet = self._bullets[(count + self._next_bullet - 1 - i) % count]
            i += 1

            if bullet.frame == _DEAD:
                continue

            if bullet.frame == 0.0:
                rect = Rectangle(bullet.pos.x - 0.01, bullet.pos.y - 0.01, 0.02, 0.02)

                _, hit_wall = tilemap.get_collision(rect, _walls_solid)
                if hit_wall:
                    bullet.vel = Vector2(0.0, 0.0)
                    bullet.frame = 1.0

                for h in list(hazard.entities):
                    hazard_rect = _world_rect(c.get_component(h, Transform), c.get_component(h, Collision))
                    if check_collision(rect, hazard_rect):
                        bullet.vel = Vector2(0.0, 0.0)
                        bullet.frame = 1.0
                        if c.get_component(h, Hazard).destroyable:
                            c.destroy_entity(h)
                            destroyed += 1
                        break

            bullet.pos.x += bullet.vel.x * dt
            bullet.pos.y += bullet.vel.y * dt

            if bullet.frame >= 5.0:
                self._num_bullets -= 1
                bullet.frame = _DEAD
            elif bullet.frame >= 1.0:
                bullet.frame += EXPLOSION_RATE * dt

        return destroyed

    def render(self) -> None:
        """Draw bullets, explosions and the ship."""
        if self._ship is None or self._bullet_texture is None:
            raise AssetError("agent textures are not loaded")
        e = self._only_entity()
        transform = self._coordinator.get_component(e, Transform)

        for bullet in self._newest_first():
            if bullet.frame == _DEAD:
                continue
            if bullet.frame == 0.0:
                texture = self._bullet_texture
            else:
                texture = self._explosions[int(bullet.frame - 1.0)]
            size = 0.1
            self._renderer.render_texture_rotated(
                texture,
                Vector2(
                    bullet.pos.x * UNIT_TO_PIXELS - size * texture.width * 0.5,
                    bullet.pos.y * UNIT_TO_PIXELS - size * texture.height * 0.5,
                ),
                bullet.rotation + math.pi * 0.5,
                size,
            )

        size = 0.15
        self._renderer.render_texture_rotated(
            self._ship,
            Vector2(
                transform.position.x * UNIT_TO_PIXELS - size * self._ship.width * 0.5,
                transform.position.y * UNIT_TO_PIXELS - size * self._ship.height * 0.5,
            ),
            transform.rotation + math.pi * 0.5,
            size,
        )

    def reset(self) -> None:
        """Forget all bullets and the firing cooldown."""
        self._next_bullet = 0
        self._num_bullets = 0
        self._bullet_timer = 0.0