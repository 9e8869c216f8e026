"""Software renderer that draws textures onto window and observation canvases."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from caveflyer.assets import Texture
from caveflyer.geometry import Color, Vector2


def _alpha_mod(alpha: float) -> float:
    return min(255, max(0, int(255 * alpha))) / 255.0


def _blend(region: np.ndarray, src: np.ndarray, alpha: float, mask: Optional[np.ndarray] = None) -> None:
    """Alpha-blend ``src`` (RGBA) over ``region`` (RGB) in place."""
    a = src[..., 3].astype(np.float32) * (_alpha_mod(alpha) / 255.0)
    if mask is not None:
        a = np.where(mask, a, 0.0)
    a = a[..., None]
    out = src[..., :3].astype(np.float32) * a + region.astype(np.float32) * (1.0 - a)
    region[...] = np.clip(np.rint(out), 0, 255).astype(np.uint8)


def _require_pixels(texture: Texture) -> np.ndarray:
    if texture.pixels is None:
        raise ValueError("texture has no pixel data")
    return texture.pixels


class Renderer:
    """Draws textures through a 2D camera onto one of two RGB canvases.

    ``rendering_obs`` selects the observation canvas instead of the window one.
    """

    def __init__(
        self,
        window_width: int = 512,
        window_height: int = 512,
        obs_width: int = 64,
        obs_height: int = 64,
    ) -> None:
        self.rendering_obs = False
        self.camera_position = Vector2(0.0, 0.0)
        self.camera_size = Vector2(64.0, 64.0)
        self.camera_scale = 1.0
        self._window = np.zeros((window_height, window_width, 3), dtype=np.uint8)
        self._obs = np.zeros((obs_height, obs_width, 3), dtype=np.uint8)

    @property
    def target(self) -> np.ndarray:
        """The canvas currently drawn to."""
        return self._obs if self.rendering_obs else self._window

    def clear(self, color: Color = Color(0, 0, 0, 255)) -> None:
        """Fill the current canvas with ``color``."""
        self.target[...] = (color.r, color.g, color.b)

    def pixels(self) -> np.ndarray:
        """Return a copy of the current canvas as a ``(height, width, 3)`` array."""
        return self.target.copy()

    def _dst_rect(self, texture: Texture, position: Vector2, scale: float) -> tuple[float, float, float, float]:
        cs = self.camera_scale
        dst_x = (position.x - self.camera_position.x) * cs + self.camera_size.x * 0.5
        dst_y = (position.y - self.camera_position.y) * cs + self.camera_size.y * 0.5
        return dst_x, dst_y, texture.width * scale * cs, texture.height * scale * cs

    def render_texture(
        self,
        texture: Texture,
        position: Vector2,
        scale: float = 1.0,
        alpha: float = 1.0,
        flip_horizontal: bool = False,
        flip_vertical: bool = False,
    ) -> None:
        """Draw ``texture`` with its top-left corner at ``position`` in world pixels."""
        src_pixels = _require_pixels(texture)
        dst_x, dst_y, dst_w, dst_h = self._dst_rect(texture, position, scale)

        if (
            dst_x > self.camera_size.x
            or dst_y >= self.camera_size.y
            or dst_x + dst_w < 0
            or dst_y + dst_h < 0
        ):
            return
        if dst_w <= 0 or dst_h <= 0:
            return

        target = self.target
        height, width = target.shape[:2]
        x0 = max(0, math.ceil(dst_x - 0.5))
        x1 = min(width, math.ceil(dst_x + dst_w - 0.5))
        y0 = max(0, math.ceil(dst_y - 0.5))
        y1 = min(height, math.ceil(dst_y + dst_h - 0.5))
        if x0 >= x1 or y0 >= y1:
            return

        cols = np.arange(x0, x1, dtype=np.float64) + 0.5
        rows = np.arange(y0, y1, dtype=np.float64) + 0.5
        u = np.clip(np.floor((cols - dst_x) / dst_w * texture.width), 0, texture.width - 1).astype(np.intp)
        v = np.clip(np.floor((rows - dst_y) / dst_h * texture.height), 0, texture.height - 1).astype(np.intp)

        if flip_horizontal:
            u = texture.width - 1 - u
        elif flip_vertical:
            v = texture.height - 1 - v

        src = src_pixels[v[:, None], u[None, :]]
        _blend(target[y0:y1, x0:x1], src, alpha)

    def render_texture_rotated(
        self,
        texture: Texture,
        position: Vector2,
        rotation: float,
        scale: float = 1.0,
        alpha: float = 1.0,
    ) -> None:
        """Draw ``texture`` rotated by ``rotation`` radians about its centre."""
        src_pixels = _require_pixels(texture)
        dst_x, dst_y, dst_w, dst_h = self._dst_rect(texture, position, scale)
        if dst_w <= 0 or dst_h <= 0:
            return

        target = self.target
        height, width = target.shape[:2]
        cx = dst_x + dst_w * 0.5
        cy = dst_y + dst_h * 0.5
        radius = math.hypot(dst_w, dst_h) * 0.5

        x0 = max(0, math.floor(cx - radius))
        x1 = min(width, math.ceil(cx + radius))
        y0 = max(0, math.floor(cy - radius))
        y1 = min(height, math.ceil(cy + radius))
        if x0 >= x1 or y0 >= y1:
            return

        ys, xs = np.mgrid[y0:y1, x0:x1].astype(np.float64)
        dx = xs + 0.5 - cx
        dy = ys + 0.5 - cy
        cos_r = math.cos(rotation)
        sin_r = math.sin(rotation)
        local_x = cos_r * dx + sin_r * dy
        local_y = -sin_r * dx + cos_r * dy

        u = (local_x / dst_w + 0.5) * texture.width
        v = (local_y / dst_h + 0.5) * texture.height
        mask = (u >= 0) & (u < texture.width) & (v >= 0) & (v < texture.height)
        if not mask.any():
            return

        ui = np.clip(np.floor(u), 0, texture.width - 1).astype(np.intp)
        vi = np.clip(np.floor(v), 0, texture.height - 1).astype(np.intp)
        _blend(target[y0:y1, x0:x1], src_pixels[vi, ui], alpha, mask)