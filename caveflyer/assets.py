"""Texture loading and a cache that loads each named asset once."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Generic, Optional, Protocol, TypeVar, Union

import numpy as np
from PIL import Image


class AssetError(RuntimeError):
    """Raised when an asset cannot be loaded or is not known."""


@dataclass
class Texture:
    """An RGBA image held as a ``(height, width, 4)`` array of bytes."""

    width: int = 0
    height: int = 0
    pixels: Optional[np.ndarray] = None

    def load(self, name: Union[str, Path]) -> None:
        """Load the image at ``name``, replacing any previous contents."""
        try:
            with Image.open(name) as image:
                rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8).copy()
        except OSError as exc:
            raise AssetError(f'Could not load surface "{name}"!') from exc
        self.pixels = rgba
        self.height, self.width = rgba.shape[:2]


class _Loadable(Protocol):
    def load(self, name: str) -> None: ...


A = TypeVar("A", bound=_Loadable)


class AssetManager(Generic[A]):
    """Loads assets by name on first use and returns the cached copy afterwards."""

    def __init__(self, factory: Callable[[], A] = Texture, root: Union[str, Path, None] = None) -> None:  # type: ignore[assignment]
        self._factory = factory
        self._root = Path(root) if root is not None else None
        self._assets: Dict[str, A] = {}

    def get(self, name: str) -> A:
        asset = self._assets.get(name)
        if asset is None:
            asset = self._factory()
            path = str(self._root / name) if self._root is not None else name
            asset.load(path)
            self._assets[name] = asset
        return asset

    def exists(self, name: str) -> bool:
        return name in self._assets

    def remove(self, name: str) -> None:
        try:
            del self._assets[name]
        except KeyError:
            raise AssetError(f'Asset "{name}" is not loaded') from None

    def clear(self) -> None:
        self._assets.clear()