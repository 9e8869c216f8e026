"""Component data attached to entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from caveflyer.assets import Texture
from caveflyer.geometry import Color, Rectangle, Vector2


@dataclass
class Transform:
    """World position, rotation in radians and uniform scale."""

    position: Vector2 = field(default_factory=Vector2)
    rotation: float = 0.0
    scale: float = 1.0


@dataclass
class Collision:
    """Collision bounds relative to the transform's position."""

    bounds: Rectangle = field(default_factory=lambda: Rectangle(-0.5, -0.5, 1.0, 1.0))


@dataclass
class Dynamics:
    """Velocity in world units per step."""

    velocity: Vector2 = field(default_factory=Vector2)


@dataclass
class Sprite:
    """A textured quad drawn relative to the transform; ``z`` orders drawing."""

    position: Vector2 = field(default_factory=Vector2)
    rotation: float = 0.0
    scale: float = 1.0
    flip_x: bool = False
    tint: Color = field(default_factory=lambda: Color(255, 255, 255, 255))
    z: float = 0.0
    texture: Optional[Texture] = None


@dataclass
class MobAI:
    """Marks an entity as a moving enemy."""


@dataclass
class Hazard:
    """Touching this entity ends the episode; destroyable ones can be shot."""

    destroyable: bool = False


@dataclass
class Goal:
    """Touching this entity completes the episode."""


@dataclass
class Agent:
    """The player, with the action chosen for the current step."""

    action: int = 0


@dataclass
class Particle:
    """One exhaust particle; it is dead once ``life`` drops to zero."""

    position: Vector2 = field(default_factory=Vector2)
    dir: Vector2 = field(default_factory=Vector2)
    rotation: float = 0.0
    life: float = 0.0


@dataclass
class Particles:
    """A fixed pool of particles emitted from an offset on the entity."""

    particles: List[Particle] = field(default_factory=list)
    offset: Vector2 = field(default_factory=Vector2)
    lifespan: float = 3.0
    spawn_timer: float = 0.0
    spawn_time: float = 0.3
    enabled: bool = True