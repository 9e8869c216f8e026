"""Enemy movement and exhaust particle systems."""

from __future__ import annotations

import math
from typing import Optional

from caveflyer.assets import AssetError, AssetManager, Texture
from caveflyer.components import Collision, Dynamics, Particles, Transform
from caveflyer.ecs import Coordinator, System
from caveflyer.geometry import UNIT_TO_PIXELS, Rectangle, Vector2
from caveflyer.renderer import Renderer
from caveflyer.tilemap import CollisionType, TileId, TilemapSystem

PARTICLE_TEXTURE = "assets/misc_assets/towerDefense_tile295.png"


def _walls_solid(tile_id: TileId) -> CollisionType:
    return CollisionType.FULL if tile_id == TileId.WALL else CollisionType.NONE


class MobAISystem(System):
    """Moves enemies in a straight line, turning them round at walls."""

    def __init__(self, coordinator: Coordinator) -> None:
        super().__init__()
        self._coordinator = coordinator

    def update(self, dt: float) -> None:
        c = self._coordinator
        tilemap = c.get_system(TilemapSystem)

        for e in self.entities:
            transform = c.get_component(e, Transform)
            dynamics = c.get_component(e, Dynamics)
            collision = c.get_component(e, Collision)

            transform.position.x += dynamics.velocity.x * dt
            transform.position.y += dynamics.velocity.y * dt

            world = Rectangle(
                transform.position.x + collision.bounds.x,
                transform.position.y + collision.bounds.y,
                collision.bounds.width,
                collision.bounds.height,
            )
            _, hit = tilemap.get_collision(world, _walls_solid)
            if hit:
                dynamics.velocity = Vector2(-dynamics.velocity.x, -dynamics.velocity.y)


class ParticlesSystem(System):
    """Emits and draws fading exhaust particles behind entities."""

    def __init__(self, coordinator: Coordinator, renderer: Renderer, textures: AssetManager) -> None:
        super().__init__()
        self._coordinator = coordinator
        self._renderer = renderer
        self._textures = textures
        self._texture: Optional[Texture] = None

    def load_assets(self) -> None:
        self._texture = self._textures.get(PARTICLE_TEXTURE)

    def update(self, dt: float) -> None:
        """Age particles and reuse a dead one when the spawn timer allows."""
        c = self._coordinator
        for e in self.entities:
            transform = c.get_component(e, Transform)
            emitter = c.get_component(e, Particles)

            dead_index = -1
            for i, p in enumerate(emitter.particles):
                p.life -= dt
                if p.life <= 0.0:
                    dead_index = i

            emitter.spawn_timer += dt

            if dead_index != -1 and emitter.spawn_timer >= emitter.spawn_time and emitter.enabled:
                emitter.spawn_timer = math.fmod(emitter.spawn_timer, emitter.spawn_time)

                p = emitter.particles[dead_index]
                p.life = emitter.lifespan
                p.rotation = transform.rotation + math.pi * 0.5

                cos_r = math.cos(p.rotation)
                sin_r = math.sin(p.rotation)
                p.dir = Vector2(-math.cos(transform.rotation), -math.sin(transform.rotation))

                off = emitter.offset
                p.position = Vector2(
                    transform.position.x + cos_r * off.x - sin_r * off.y,
                    transform.position.y + sin_r * off.x + cos_r * off.y,
                )

    def render(self) -> None:
        """Draw live particles, growing and fading as they age."""
        if self._texture is None:
            raise AssetError("particle texture is not loaded")
        texture = self._texture
        base_alpha = 0.5
        base_scale = 1.0

        for e in self.entities:
            emitter = self._coordinator.get_component(e, Particles)
            for p in emitter.particles:
                if p.life <= 0.0:
                    continue
                life_ratio = (emitter.lifespan - p.life) / emitter.lifespan
                alpha = base_alpha * (1.0 - life_ratio)
                scale = base_scale * (0.4 * life_ratio + 0.6)
                shift = life_ratio * 2.0
                size = scale * UNIT_TO_PIXELS / texture.width

                position = Vector2(
                    (p.position.x + p.dir.x * shift) * UNIT_TO_PIXELS - size * texture.width * 0.5,
                    (p.position.y + p.dir.y * shift) * UNIT_TO_PIXELS - size * texture.height * 0.5,
                )
                self._renderer.render_texture_rotated(texture, position, p.rotation, size, alpha)