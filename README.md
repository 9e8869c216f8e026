# caveflyer

A procedurally generated cave-flying environment for reinforcement learning.

The agent pilots a small ship through a cave carved out by a cellular
automaton. It must reach the goal while avoiding meteors and patrolling
enemy ships, and it may shoot targets for extra reward. Every episode builds
a new cave from the environment's random generator, so a seed fully
determines the layout.

## Observations, actions and rewards

- **Observation**: a `(64, 64, 3)` `uint8` RGB array (`CaveFlyerEnv.observation_bounds`
  is `(0.0, 255.0)`).
- **Actions**: integers; `CaveFlyerEnv.num_actions` is 15. Actions 0–8 form a
  3 × 3 grid: `action // 3` picks the turn (0 turns one way, 1 does not turn,
  2 turns the other way) and `action % 3` picks the thrust (0 reverse at half
  strength, 1 none, 2 forward). Action 9 fires the laser (with a short
  cooldown); every other value does nothing. Actions are not range-checked,
  but a non-integer action raises `TypeError`.
- **Reward**: 10 for reaching the goal plus 3 for each target destroyed, as
  counted in the last physics sub-step that ran.
- **Termination**: the episode ends when the ship touches a hazard or reaches
  the goal. `truncated` is always `False`.

Each call to `step` runs up to four physics sub-steps, stopping early when
the episode ends.

## Usage

```python
from caveflyer.env import CaveFlyerEnv

with CaveFlyerEnv(seed=1) as env:
    observation = env.reset(seed=42)

    result = env.step(9)          # fire
    print(result.reward, result.terminated)

    frame = env.render()          # (height, width, 3) RGB frame, 512 × 512 by default
```

`step` returns a `StepResult` named tuple of `observation`, `reward`,
`terminated` and `truncated`. `reset(seed=None)` reseeds the generator when a
seed is given and returns the first observation of a new level. After
`close()` (called on leaving the `with` block) the environment raises
`RuntimeError` when used.

`CaveFlyerEnv` also takes `width` and `height` for the render frame,
`mode` (a `caveflyer.tilemap.DistributionMode`: `EASY` gives a 20 × 20 cave,
`HARD` — the default — 40 × 40, `MEMORY` 45 × 45 without narrowing the cave
around the route to the goal) and `textures`, an `AssetManager` to load
images through.

## Assets

Textures are PNG files loaded with Pillow from paths such as
`assets/misc_assets/playerShip1_red.png` and
`assets/space_backgrounds/deep_space_01.png`, relative to the working
directory by default. To load them from elsewhere, pass
`textures=AssetManager(root="/path/to/game")` from `caveflyer.assets`. A
missing or unreadable file raises `caveflyer.assets.AssetError`.

## Building blocks

- `caveflyer.ecs` — a compact entity-component-system: `Coordinator`,
  `EntityManager`, `ComponentManager`, `ComponentArray`, `SystemManager`,
  `System`, raising `EcsError` on misuse.
- `caveflyer.geometry` — `Vector2`, `Rectangle`, `Color` and the helpers
  `check_collision`, `get_collision_overlap`, `rotated_scaled_aabb` and
  `to_lower`.
- `caveflyer.components` — the component dataclasses (`Transform`,
  `Collision`, `Dynamics`, `Sprite`, `Hazard`, `Goal`, `Agent`, `Particles`, …).
- `caveflyer.rooms` — `RoomGenerator`, a cellular-automaton cave generator
  with flood fill, shortest-path search and room expansion.
- `caveflyer.maze` — `MazeGenerator`, a randomised Kruskal maze generator
  (with an option to remove most dead ends).
- `caveflyer.tilemap` — `TilemapSystem`, which builds levels, spawns entities
  and pushes rectangles out of wall tiles.
- `caveflyer.agent`, `caveflyer.effects`, `caveflyer.sprites` — the systems
  for the player ship, enemies and exhaust particles, and depth-sorted
  sprites.
- `caveflyer.renderer` — `Renderer`, a NumPy software renderer producing RGB
  pixel arrays.

## What it does not do

The package has no command-line program and opens no window: frames are only
returned as arrays. It ships no image files, and it does not register itself
with any reinforcement-learning framework. `MazeGenerator` is available on its
own but the environment does not use it.