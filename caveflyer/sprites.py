"""Sprite drawing ordered by depth, and marker systems for hazards and goals."""

from __future__ import annotations

from enum import Enum
from typing import List, Tuple

from caveflyer.components import Sprite, Transform
from caveflyer.ecs import Coordinator, System
from caveflyer.geometry import UNIT_TO_PIXELS, Vector2
from caveflyer.renderer import Renderer


class SpriteRenderMode(Enum):
    """Which sprites to draw relative to the tile map layer."""

    ALL = "all"
    POSITIVE_Z = "positive_z"
    NEGATIVE_Z = "negative_z"


class SpriteRenderSystem(System):
    """Draws every entity with a sprite, sorted by its ``z`` value."""

    def __init__(self, coordinator: Coordinator, renderer: Renderer) -> None:
        super().__init__()
        self._coordinator = coordinator
        self._renderer = renderer
        self._render_order: List[int] = []

    @property
    def render_order(self) -> Tuple[int, ...]:
        """Entities in the order they are drawn."""
        return tuple(self._render_order)

    def update(self, dt: float) -> None:
        """Re-sort the sprites by depth."""
        keyed = [
            (self._coordinator.get_component(e, Sprite).z, e) for e in self.entities
        ]
        keyed.sort(key=lambda pair: pair[0])
        self._render_order = [e for _, e in keyed]

    def render(self, mode: SpriteRenderMode) -> None:
        """Draw sprites; negative ``z`` lies behind the map, the rest in front."""
        for e in self._render_order:
            sprite = self._coordinator.get_component(e, Sprite)
            transform = self._coordinator.get_component(e, Transform)

            if sprite.texture is None:
                continue

            if mode is SpriteRenderMode.POSITIVE_Z and sprite.z < 0.0:
                continue
            if mode is SpriteRenderMode.NEGATIVE_Z and sprite.z >= 0.0:
                break

            scale = transform.scale * sprite.scale
            position = Vector2(
                (transform.position.x + sprite.position.x) * UNIT_TO_PIXELS,
                (transform.position.y + sprite.position.y) * UNIT_TO_PIXELS,
            )
            self._renderer.render_texture(
                sprite.texture,
                position,
                scale * UNIT_TO_PIXELS / sprite.texture.width,
                1.0,
                sprite.flip_x,
            )

    def clear_render(self) -> None:
        """Forget the draw order until the next update."""
        self._render_order.clear()


class HazardSystem(System):
    """Collects entities that carry a hazard component."""


class GoalSystem(System):
    """Collects entities that carry a goal component."""