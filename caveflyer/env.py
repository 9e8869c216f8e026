"""The cave flyer environment: build the world, step it and draw frames."""

from __future__ import annotations

import random
import time
from typing import List, NamedTuple, Optional

import numpy as np

from caveflyer.agent import AgentSystem
from caveflyer.assets import AssetManager, Texture
from caveflyer.components import (
    Agent,
    Collision,
    Dynamics,
    Goal,
    Hazard,
    MobAI,
    Particles,
    Sprite,
    Transform,
)
from caveflyer.ecs import Coordinator
from caveflyer.effects import MobAISystem, ParticlesSystem
from caveflyer.geometry import UNIT_TO_PIXELS, Color, Vector2
from caveflyer.renderer import Renderer
from caveflyer.sprites import (
    GoalSystem,
    HazardSystem,
    SpriteRenderMode,
    SpriteRenderSystem,
)
from caveflyer.tilemap import DistributionMode, TilemapConfig, TilemapSystem

VERSION = 100

OBS_WIDTH = 64
OBS_HEIGHT = 64
NUM_ACTIONS = 15

GAME_ZOOM = 0.5
SUB_STEPS = 4
DT = 1.0 / SUB_STEPS

BACKGROUND_NAMES = (
    "assets/space_backgrounds/deep_space_01.png",
    "assets/space_backgrounds/spacegen_01.png",
    "assets/space_backgrounds/milky_way_01.png",
    "assets/space_backgrounds/ez_space_lite_01.png",
    "assets/space_backgrounds/meyespace_v1_01.png",
    "assets/space_backgrounds/eye_nebula_01.png",
    "assets/space_backgrounds/deep_sky_01.png",
    "assets/space_backgrounds/space_nebula_01.png",
    "assets/space_backgrounds/Background-1.png",
    "assets/space_backgrounds/Background-2.png",
    "assets/space_backgrounds/Background-3.png",
    "assets/space_backgrounds/Background-4.png",
    "assets/space_backgrounds/parallax-space-backgound.png",
)


class StepResult(NamedTuple):
    """What one call to :meth:`CaveFlyerEnv.step` produced."""

    observation: np.ndarray
    reward: float
    terminated: bool
    truncated: bool


class CaveFlyerEnv:
    """Fly a ship through a generated cave to the goal, shooting targets.

    Observations are ``(64, 64, 3)`` RGB arrays; actions are integers below 15.
    """

    version = VERSION
    num_actions = NUM_ACTIONS
    observation_bounds = (0.0, 255.0)

    def __init__(
        self,
        seed: Optional[int] = None,
        width: int = 512,
        height: int = 512,
        mode: DistributionMode = DistributionMode.HARD,
        textures: Optional[AssetManager] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("window width and height must be positive")

        self.window_width = width
        self.window_height = height
        self.config = TilemapConfig(mode=mode)
        self.rng = random.Random(int(time.time()) if seed is None else seed)
        self._closed = False

        self.textures = textures if textures is not None else AssetManager()
        self.renderer = Renderer(width, height, OBS_WIDTH, OBS_HEIGHT)
        self.coordinator = c = Coordinator()

        for component in (
            Transform,
            Collision,
            Dynamics,
            Sprite,
            MobAI,
            Hazard,
            Goal,
            Agent,
            Particles,
        ):
            c.register_component(component)

        self.sprite_render = c.register_system(SpriteRenderSystem(c, self.renderer))
        c.set_system_signature(SpriteRenderSystem, self._bit(Sprite))

        self.tilemap = c.register_system(TilemapSystem(c, self.renderer, self.textures))
        c.set_system_signature(TilemapSystem, 0)
        self.tilemap.load_assets()

        self.hazard = c.register_system(HazardSystem())
        c.set_system_signature(HazardSystem, self._bit(Hazard))

        self.mob_ai = c.register_system(MobAISystem(c))
        c.set_system_signature(MobAISystem, self._bit(MobAI))

        self.goal = c.register_system(GoalSystem())
        c.set_system_signature(GoalSystem, self._bit(Goal))

        self.agent = c.register_system(AgentSystem(c, self.renderer, self.textures))
        c.set_system_signature(AgentSystem, self._bit(Agent))
        self.agent.load_assets()

        self.particles = c.register_system(ParticlesSystem(c, self.renderer, self.textures))
        c.set_system_signature(ParticlesSystem, self._bit(Particles))
        self.particles.load_assets()

        self._backgrounds: List[Texture] = [self.textures.get(name) for name in BACKGROUND_NAMES]
        self.background_index = 0
        self.background_offset_x = 0.0

        self._new_episode()

    def __enter__(self) -> "CaveFlyerEnv":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _bit(self, component_type: type) -> int:
        return 1 << self.coordinator.get_component_type(component_type)

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("environment is closed")

    def _new_episode(self) -> None:
        self.coordinator.clear_entities()
        self.tilemap.regenerate(self.rng, self.config)

        self.background_index = self.rng.randint(0, len(self._backgrounds) - 1)
        self.background_offset_x = self.rng.random()

        self.sprite_render.clear_render()
        self.agent.reset()

    def _draw(self, is_obs: bool) -> np.ndarray:
        r = self.renderer
        r.rendering_obs = is_obs
        r.clear(Color(0, 0, 0, 255))

        width = OBS_WIDTH if is_obs else self.window_width
        height = OBS_HEIGHT if is_obs else self.window_height
        r.camera_scale = GAME_ZOOM * width / OBS_WIDTH
        r.camera_size = Vector2(float(width), float(height))

        background = self._backgrounds[self.background_index]
        extra_width = background.width / background.height - 1.0
        r.render_texture(
            background,
            Vector2(-self.background_offset_x * extra_width, 0.0),
            64.0 * UNIT_TO_PIXELS / background.height,
        )

        self.sprite_render.render(SpriteRenderMode.NEGATIVE_Z)
        self.tilemap.render(0)
        self.particles.render()
        self.sprite_render.render(SpriteRenderMode.POSITIVE_Z)
        self.agent.render()

        return r.pixels()

    def reset(self, seed: Optional[int] = None) -> np.ndarray:
        """Start a new level, reseeding first if ``seed`` is given; return the observation."""
        self._check_open()
        if seed is not None:
            self.rng.seed(seed)
        self._new_episode()
        return self._draw(True)

    def step(self, action: int = 0) -> StepResult:
        """Advance the game by one step of several physics sub-steps."""
        self._check_open()
        if isinstance(action, bool) or not isinstance(action, (int, np.integer)):
            raise TypeError("action must be an integer")
        action = int(action)

        reward = 0.0
        terminated = False
        for _ in range(SUB_STEPS):
            outcome = self.agent.update(DT, self.hazard, self.goal, action)
            self.mob_ai.update(DT)
            self.particles.update(DT)
            self.sprite_render.update(DT)

            reward = outcome.achieved_goal * 10.0 + outcome.targets_destroyed * 3.0
            terminated = not outcome.alive or outcome.achieved_goal
            if terminated:
                break

        return StepResult(self._draw(True), reward, terminated, False)

    def render(self) -> np.ndarray:
        """Draw the full-size window frame and return it as ``(height, width, 3)``."""
        self._check_open()
        return self._draw(False)

    def close(self) -> None:
        """Release textures; the environment cannot be used afterwards."""
        if self._closed:
            return
        self._backgrounds.clear()
        self.textures.clear()
        self._closed = True