import random
from dataclasses import dataclass

import numpy as np
import pytest

from caveflyer.agent import AgentSystem, Bullet, StepOutcome
from caveflyer.assets import AssetError, AssetManager, Texture
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
from caveflyer.ecs import Coordinator
from caveflyer.geometry import UNIT_TO_PIXELS, Rectangle, Vector2
from caveflyer.renderer import Renderer
from caveflyer.sprites import GoalSystem, HazardSystem
from caveflyer.tilemap import DistributionMode, TileId, TilemapConfig, TilemapSystem


class _StubTexture(Texture):
    def load(self, name):
        self.pixels = np.full((64, 64, 4), 255, dtype=np.uint8)
        self.height, self.width = 64, 64


@dataclass
class World:
    coordinator: Coordinator
    renderer: Renderer
    tilemap: TilemapSystem
    hazard: HazardSystem
    goal: GoalSystem
    agent: AgentSystem
    player: int


def _bit(c, component_type):
    return 1 << c.get_component_type(component_type)


def _make_world(x=10.0, y=10.0, velocity=None):
    c = Coordinator()
    renderer = Renderer(window_width=64, window_height=64)
    textures = AssetManager(factory=_StubTexture)
    for t in (Transform, Collision, Dynamics, Sprite, MobAI, Hazard, Goal, Agent, Particles):
        c.register_component(t)

    tilemap = c.register_system(TilemapSystem(c, renderer, textures))
    c.set_system_signature(TilemapSystem, 0)
    hazard = c.register_system(HazardSystem())
    c.set_system_signature(HazardSystem, _bit(c, Hazard))
    goal = c.register_system(GoalSystem())
    c.set_system_signature(GoalSystem, _bit(c, Goal))
    agent = c.register_system(AgentSystem(c, renderer, textures))
    c.set_system_signature(AgentSystem, _bit(c, Agent))

    tilemap.regenerate(random.Random(0), TilemapConfig(DistributionMode.EASY))
    c.clear_entities()
    tilemap.set_area(0, 0, tilemap.width, tilemap.height, TileId.EMPTY)

    player = c.create_entity()
    c.add_component(player, Transform(position=Vector2(x, y)))
    c.add_component(player, Collision(bounds=Rectangle(-0.4, -0.4, 0.8, 0.8)))
    c.add_component(player, Dynamics(velocity=velocity or Vector2()))
    c.add_component(player, Agent())
    c.add_component(player, Particles(particles=[Particle() for _ in range(10)]))
    return World(c, renderer, tilemap, hazard, goal, agent, player)


def _place_hazard(world, x, y, destroyable):
    c = world.coordinator
    e = c.create_entity()
    c.add_component(e, Transform(position=Vector2(x, y)))
    c.add_component(e, Hazard(destroyable=destroyable))
    c.add_component(e, Collision(bounds=Rectangle(-0.25, -0.25, 0.5, 0.5)))
    return e


def _step(world, action, dt=1.0):
    return world.agent.update(dt, world.hazard, world.goal, action)


def test_idle_action_keeps_agent_still():
    world = _make_world()
    outcome = _step(world, 4)
    transform = world.coordinator.get_component(world.player, Transform)
    assert outcome == StepOutcome(True, False, 0)
    assert transform.position == Vector2(10.0, 10.0)


def test_thrust_moves_along_heading_and_enables_particles():
    world = _make_world()
    _step(world, 5)
    transform = world.coordinator.get_component(world.player, Transform)
    dynamics = world.coordinator.get_component(world.player, Dynamics)
    assert dynamics.velocity.x > 0.0
    assert transform.position.x > 10.0
    assert transform.position.y == pytest.approx(10.0)
    assert world.coordinator.get_component(world.player, Particles).enabled is True


def test_reverse_moves_backwards_and_disables_particles():
    world = _make_world()
    _step(world, 3)
    transform = world.coordinator.get_component(world.player, Transform)
    assert transform.position.x < 10.0
    assert world.coordinator.get_component(world.player, Particles).enabled is False


def test_reverse_is_weaker_than_thrust():
    forward = _make_world()
    backward = _make_world()
    _step(forward, 5)
    _step(backward, 3)
    fx = forward.coordinator.get_component(forward.player, Dynamics).velocity.x
    bx = backward.coordinator.get_component(backward.player, Dynamics).velocity.x
    assert abs(bx) < abs(fx)


def test_turning_left_and_right_are_symmetric():
    left = _make_world()
    right = _make_world()
    _step(left, 1, dt=0.25)
    _step(right, 7, dt=0.25)
    rl = left.coordinator.get_component(left.player, Transform).rotation
    rr = right.coordinator.get_component(right.player, Transform).rotation
    assert rl < 0.0
    assert rl == pytest.approx(-rr)


def test_action_is_recorded_on_component():
    world = _make_world()
    _step(world, 8)
    assert world.coordinator.get_component(world.player, Agent).action == 8


def test_touching_hazard_kills_agent():
    world = _make_world()
    _place_hazard(world, 10.0, 10.0, destroyable=False)
    outcome = _step(world, 4)
    assert outcome.alive is False


def test_touching_goal_completes():
    world = _make_world()
    c = world.coordinator
    g = c.create_entity()
    c.add_component(g, Transform(position=Vector2(10.0, 10.0)))
    c.add_component(g, Goal())
    c.add_component(g, Collision(bounds=Rectangle(-0.4, -0.4, 0.8, 0.8)))
    outcome = _step(world, 4)
    assert outcome.achieved_goal is True
    assert outcome.alive is True


def test_camera_follows_agent():
    world = _make_world()
    _step(world, 4)
    assert world.renderer.camera_position == Vector2(10.0 * UNIT_TO_PIXELS, 10.0 * UNIT_TO_PIXELS)


def test_shooting_destroyable_target_counts_and_removes_it():
    world = _make_world()
    target = _place_hazard(world, 11.0, 10.0, destroyable=True)
    first = _step(world, 9)
    assert first.targets_destroyed == 0
    second = _step(world, 4)
    assert second.targets_destroyed == 1
    assert target not in world.hazard.entities
    assert world.coordinator.entity_manager.in_use(target) is False


def test_shooting_solid_hazard_leaves_it():
    world = _make_world()
    rock = _place_hazard(world, 11.0, 10.0, destroyable=False)
    _step(world, 9)
    outcome = _step(world, 4)
    assert outcome.targets_destroyed == 0
    assert rock in world.hazard.entities


def test_fire_cooldown_limits_rate():
    world = _make_world()
    _step(world, 9)
    assert world.agent.num_bullets == 1
    _step(world, 9)
    assert world.agent.num_bullets == 1
    _step(world, 9)
    assert world.agent.num_bullets == 2


def test_bullet_expires_after_hitting_wall():
    world = _make_world()
    _step(world, 9)
    assert world.agent.num_bullets == 1
    for _ in range(40):
        _step(world, 4)
    assert world.agent.num_bullets == 0


def test_reset_clears_bullets():
    world = _make_world()
    _step(world, 9)
    world.agent.reset()
    assert world.agent.num_bullets == 0


def test_wall_pushes_agent_back_and_stops_it():
    world = _make_world(x=0.3, velocity=Vector2(-0.1, 0.0))
    _step(world, 4)
    transform = world.coordinator.get_component(world.player, Transform)
    dynamics = world.coordinator.get_component(world.player, Dynamics)
    assert transform.position.x == pytest.approx(0.4)
    assert dynamics.velocity.x == 0.0


def test_render_requires_assets():
    world = _make_world()
    with pytest.raises(AssetError):
        world.agent.render()


def test_render_draws_ship_at_screen_centre():
    world = _make_world()
    world.agent.load_assets()
    _step(world, 4)
    world.renderer.clear()
    world.agent.render()
    pixels = world.renderer.pixels()
    assert pixels[32, 32].tolist() == [255, 255, 255]
    assert pixels[0, 0].tolist() == [0, 0, 0]


def test_new_bullet_is_unused():
    assert Bullet().frame == -1.0