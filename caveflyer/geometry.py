"""Plain geometry types and rectangle helpers used by the game world."""

from __future__ import annotations

import math
from dataclasses import dataclass

UNIT_TO_PIXELS = 16.0
PIXELS_TO_UNIT = 1.0 / UNIT_TO_PIXELS


@dataclass
class Vector2:
    """A 2D point or direction."""

    x: float = 0.0
    y: float = 0.0


@dataclass
class Rectangle:
    """An axis-aligned rectangle given by its top-left corner and size."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Color:
    """An RGBA colour with 8-bit channels."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 255


def rotated_scaled_aabb(rectangle: Rectangle, rotation: float, scale: float) -> Rectangle:
    """Return the bounding box of ``rectangle`` rotated and scaled about its centre."""
    half_w = rectangle.width * 0.5
    half_h = rectangle.height * 0.5
    cx = rectangle.x + half_w
    cy = rectangle.y + half_h

    cos_rot = math.cos(rotation)
    sin_rot = math.sin(rotation)

    xs = [cx]
    ys = [cy]
    for sx in (-1, 1):
        for sy in (-1, 1):
            corner_x = half_w * sx * scale
            corner_y = half_h * sy * scale
            xs.append(cx + cos_rot * corner_x - sin_rot * corner_y)
            ys.append(cy + sin_rot * corner_x + cos_rot * corner_y)

    lower_x, upper_x = min(xs), max(xs)
    lower_y, upper_y = min(ys), max(ys)
    return Rectangle(lower_x, lower_y, upper_x - lower_x, upper_y - lower_y)


def check_collision(r1: Rectangle, r2: Rectangle) -> bool:
    """Return True when the two rectangles overlap (touching edges do not count)."""
    return (
        r1.x < r2.x + r2.width
        and r1.x + r1.width > r2.x
        and r1.y < r2.y + r2.height
        and r1.y + r1.height > r2.y
    )


def get_collision_overlap(r1: Rectangle, r2: Rectangle) -> Rectangle:
    """Return the overlapping region of two rectangles, or an empty rectangle."""
    if not check_collision(r1, r2):
        return Rectangle()

    dxx = abs(r1.x - r2.x)
    dyy = abs(r1.y - r2.y)

    if r1.x <= r2.x:
        x = r2.x
        width = r1.width - dxx
    else:
        x = r1.x
        width = r2.width - dxx

    if r1.y <= r2.y:
        y = r2.y
        height = r1.height - dyy
    else:
        y = r1.y
        height = r2.height - dyy

    narrow_width = r2.width if r1.width > r2.width else r1.width
    if width >= narrow_width:
        width = narrow_width

    narrow_height = r2.height if r1.height > r2.height else r1.height
    if height >= narrow_height:
        height = narrow_height

    return Rectangle(x, y, width, height)


def to_lower(s: str) -> str:
    """Lower-case the ASCII letters of ``s``, leaving other characters alone."""
    return "".join(ch.lower() if "A" <= ch <= "Z" else ch for ch in s)