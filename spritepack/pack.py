"""Textures cut into frames: packs described by an atlas or by a regular grid."""

from __future__ import annotations

import abc
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass, fields, replace
from pathlib import Path

from PIL import Image

from .errors import FileOpenError, ImageLoadingError, OpenMode
from .model import Atlas, Frame, Rect

_UNPACK_SUFFIX = ".png"
_DEFAULT_SPRITE_NAME = "sprite"


def _base_name(path: str) -> str:
    """File name without any of its suffixes."""
    return os.path.basename(str(path)).split(".", 1)[0]


class Pack(abc.ABC):
    """A texture image together with the frames that can be cut out of it."""

    def __init__(self, texture_filename: str) -> None:
        self.texture_filename = str(texture_filename)
        self._texture: Image.Image | None = None

    def texture(self) -> Image.Image:
        """Return the texture image, loading it from disk on first use."""
        if self._texture is None:
            try:
                with Image.open(self.texture_filename) as image:
                    image.load()
                    self._texture = image.convert("RGBA")
            except (OSError, ValueError) as exc:
                raise ImageLoadingError(self.texture_filename) from exc
        return self._texture

    @abc.abstractmethod
    def frame_count(self) -> int:
        """Number of frames in the pack."""

    @abc.abstractmethod
    def frames(self) -> Iterator[Frame]:
        """Iterate over the frames of the pack."""

    def unpack(self, output_dir: str | os.PathLike[str]) -> list[str]:
        """Write every frame as a separate PNG file; return the written paths."""
        texture = self.texture()
        directory = Path(output_dir)
        written = []
        for frame in self.frames():
            image = self._render_frame(texture, frame)
            filename = self._unpack_filename(directory, frame)
            if image is None:
                raise FileOpenError(filename, OpenMode.WRITE)
            try:
                image.save(filename, format="PNG")
            except (OSError, ValueError) as exc:
                raise FileOpenError(filename, OpenMode.WRITE) from exc
            written.append(filename)
        return written

    @staticmethod
    def _render_frame(texture: Image.Image, frame: Frame) -> Image.Image | None:
        sprite, source = frame.sprite_rect, frame.texture_rect
        if sprite.width <= 0 or sprite.height <= 0:
            return None
        image = Image.new("RGBA", (sprite.width, sprite.height), (0, 0, 0, 0))
        if source.width <= 0 or source.height <= 0:
            return image
        region = texture.crop(
            (source.x, source.y, source.x + source.width, source.y + source.height)
        )
        if frame.is_rotated:
            # A quarter turn about the origin maps (x, y) to (-y, x).
            region = region.transpose(Image.Transpose.ROTATE_270)
            offset = (-sprite.y - source.height, sprite.x)
        else:
            offset = (sprite.x, sprite.y)
        image.paste(region, offset)
        return image

    @staticmethod
    def _unpack_filename(directory: Path, frame: Frame) -> str:
        base = _base_name(frame.name) if frame.name else _DEFAULT_SPRITE_NAME
        candidate = directory / f"{base}{_UNPACK_SUFFIX}"
        counter = 1
        while candidate.exists():
            candidate = directory / f"{base} ({counter}){_UNPACK_SUFFIX}"
            counter += 1
        return os.path.abspath(candidate)


class AtlasPack(Pack):
    """A pack whose frames come from an atlas description."""

    def __init__(self, atlas: Atlas) -> None:
        super().__init__(atlas.texture)
        self.atlas = Atlas(texture=atlas.texture, frames=[replace(f) for f in atlas.frames])

    def frame_count(self) -> int:
        return len(self.atlas.frames)

    def frames(self) -> Iterator[Frame]:
        return iter(self.atlas.frames)


@dataclass
class GridOptions:
    """Layout of equally sized sprites on a texture."""

    column_count: int = 0
    row_count: int = 0
    sprite_width: int = 0
    sprite_height: int = 0
    margin_top: int = 0
    margin_left: int = 0
    horizontal_spacing: int = 0
    vertical_spacing: int = 0


_GRID_FIELDS = frozenset(f.name for f in fields(GridOptions))


class GridPack(Pack):
    """A pack whose frames lie on a regular grid."""

    def __init__(self, texture_filename: str) -> None:
        super().__init__(texture_filename)
        self._options = GridOptions()
        self._is_valid = False
        self._subscribers: list[Callable[[], None]] = []

    @property
    def options(self) -> GridOptions:
        return replace(self._options)

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    def frame_count(self) -> int:
        if not self._is_valid:
            return 0
        return self._options.column_count * self._options.row_count

    def reconfigure(self, options: GridOptions) -> None:
        """Replace every option at once."""
        self._options = replace(options)
        self._recalculate()

    def update(self, **kwargs: int) -> None:
        """Change some options by name, e.g. ``update(row_count=3)``."""
        unknown = set(kwargs) - _GRID_FIELDS
        if unknown:
            raise TypeError(f"unknown grid option(s): {', '.join(sorted(unknown))}")
        self._options = replace(self._options, **kwargs)
        self._recalculate()

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call ``callback`` whenever the frames change; return a function that unsubscribes."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _recalculate(self) -> None:
        opts = self._options
        opts.margin_left = max(opts.margin_left, 0)
        opts.margin_top = max(opts.margin_top, 0)
        opts.horizontal_spacing = max(opts.horizontal_spacing, 0)
        opts.vertical_spacing = max(opts.vertical_spacing, 0)
        if (
            opts.row_count <= 0
            or opts.column_count <= 0
            or opts.sprite_width <= 0
            or opts.sprite_height <= 0
        ):
            has_changes = self._is_valid
            self._is_valid = False
        else:
            self._is_valid = True
            has_changes = True
        if has_changes:
            for callback in list(self._subscribers):
                callback()

    def frames(self) -> Iterator[Frame]:
        if not self._is_valid:
            return iter(())
        return self._generate_frames(replace(self._options))

    def _generate_frames(self, opts: GridOptions) -> Iterator[Frame]:
        prefix = _base_name(self.texture_filename)
        size_rect = Rect(0, 0, opts.sprite_width, opts.sprite_height)
        index = 0
        for row in range(opts.row_count):
            y = opts.margin_top + row * (opts.sprite_height + opts.vertical_spacing)
            for col in range(opts.column_count):
                x = opts.margin_left + col * (opts.sprite_width + opts.horizontal_spacing)
                index += 1
                yield Frame(
                    texture_rect=size_rect.moved_to(x, y),
                    sprite_rect=size_rect,
                    name=f"{prefix}_{index:04d}",
                    is_rotated=False,
                )