from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np
import pytest

from caveflyer.env import (
    BACKGROUND_NAMES,
    NUM_ACTIONS,
    OBS_HEIGHT,
    OBS_WIDTH,
    CaveFlyerEnv,
    StepResult,
)
from caveflyer.tilemap import DistributionMode


@dataclass
class _FakeTexture:
    width: int
    height: int
    pixels: Optional[np.ndarray]


class _FakeTextures:
    """In-memory texture source with a distinct solid colour per name."""

    def __init__(self) -> None:
        self._cache: Dict[str, _FakeTexture] = {}
        self.cleared = False

    def get(self, name: str) -> _FakeTexture:
        if name not in self._cache:
            shade = (len(self._cache) * 37 + 40) % 256
            pixels = np.full((4, 4, 4), 255, dtype=np.uint8)
            pixels[..., 0] = shade
            pixels[..., 1] = 255 - shade
            self._cache[name] = _FakeTexture(4, 4, pixels)
        return self._cache[name]

    def exists(self, name: str) -> bool:
        return name in self._cache

    def clear(self) -> None:
        self._cache.clear()
        self.cleared = True


def _make(seed=7, **kwargs):
    kwargs.setdefault("width", 96)
    kwargs.setdefault("height", 80)
    return CaveFlyerEnv(seed=seed, textures=_FakeTextures(), **kwargs)


def test_constants_match_interface():
    env = _make()
    assert env.version == 100
    assert env.num_actions == NUM_ACTIONS == 15
    assert env.observation_bounds == (0.0, 255.0)


def test_reset_observation_shape():
    env = _make()
    obs = env.reset()
    assert obs.shape == (OBS_HEIGHT, OBS_WIDTH, 3)
    assert obs.dtype == np.uint8


def test_render_uses_window_size():
    env = _make(width=96, height=80)
    frame = env.render()
    assert frame.shape == (80, 96, 3)


def test_reset_with_seed_is_repeatable():
    env = _make()
    first = env.reset(seed=11)
    second = env.reset(seed=11)
    assert np.array_equal(first, second)


def test_same_seed_gives_same_trajectory():
    a = _make(seed=3)
    b = _make(seed=3)
    for action in (4, 5, 9, 6, 9, 2):
        ra = a.step(action)
        rb = b.step(action)
        assert np.array_equal(ra.observation, rb.observation)
        assert ra.reward == rb.reward
        assert ra.terminated == rb.terminated


def test_step_result_invariants():
    env = _make()
    result = env.step(5)
    assert isinstance(result, StepResult)
    assert result.observation.shape == (OBS_HEIGHT, OBS_WIDTH, 3)
    assert result.truncated is False
    assert result.reward >= 0.0


def test_each_level_has_one_agent_and_one_goal():
    env = _make()
    for seed in (1, 2, 3):
        env.reset(seed=seed)
        assert len(env.agent.entities) == 1
        assert len(env.goal.entities) == 1


def test_map_size_follows_mode():
    hard = _make(mode=DistributionMode.HARD)
    easy = _make(mode=DistributionMode.EASY)
    assert hard.tilemap.width == 40
    assert easy.tilemap.width == 20


def test_background_index_in_range():
    env = _make()
    for seed in range(5):
        env.reset(seed=seed)
        assert 0 <= env.background_index < len(BACKGROUND_NAMES)
        assert 0.0 <= env.background_offset_x < 1.0


def test_fire_action_spawns_bullet():
    env = _make()
    env.reset(seed=21)
    assert env.agent.num_bullets == 0
    env.step(9)
    assert env.agent.num_bullets >= 1


def test_reset_clears_bullets():
    env = _make()
    env.step(9)
    env.reset()
    assert env.agent.num_bullets == 0


def test_non_integer_action_rejected():
    env = _make()
    with pytest.raises(TypeError):
        env.step("up")


def test_invalid_window_size_rejected():
    with pytest.raises(ValueError):
        CaveFlyerEnv(seed=1, width=0, textures=_FakeTextures())


def test_close_releases_textures_and_blocks_use():
    textures = _FakeTextures()
    env = CaveFlyerEnv(seed=1, width=64, height=64, textures=textures)
    env.close()
    assert textures.cleared is True
    with pytest.raises(RuntimeError):
        env.step(0)
    with pytest.raises(RuntimeError):
        env.reset()


def test_context_manager_closes():
    textures = _FakeTextures()
    with CaveFlyerEnv(seed=2, width=64, height=64, textures=textures) as env:
        obs = env.reset()
        assert obs.shape == (OBS_HEIGHT, OBS_WIDTH, 3)
    assert textures.cleared is True
    with pytest.raises(RuntimeError):
        env.render()