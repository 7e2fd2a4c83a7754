"""Plain data types shared across the library: rectangles, frames, sprites and atlases."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True)
class Rect:
    """An axis-aligned integer rectangle given by its top-left corner and size."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    def is_null(self) -> bool:
        """Return True when both the width and the height are zero."""
        return self.width == 0 and self.height == 0

    def moved_to(self, x: int, y: int) -> Rect:
        """Return a rectangle of the same size with its top-left corner at (x, y)."""
        return replace(self, x=x, y=y)

    @property
    def top_left(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass
class Frame:
    """Where a sprite lives inside a texture and where it sits within its own image."""

    texture_rect: Rect = field(default_factory=Rect)
    sprite_rect: Rect = field(default_factory=Rect)
    name: str = ""
    is_rotated: bool = False


@dataclass
class Sprite:
    """A single source image to be packed."""

    path: str = ""
    name: str = ""
    image: Image.Image | None = None


@dataclass
class Texture:
    """An image together with the path it came from."""

    path: str = ""
    image: Image.Image | None = None


@dataclass
class Atlas:
    """A texture path and the frames cut out of it."""

    texture: str = ""
    frames: list[Frame] = field(default_factory=list)