"""Packing sprites into atlas textures and saving the result."""

from __future__ import annotations

import abc
import hashlib
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace

from PIL import Image

from .errors import ImageSavingError
from .model import Atlas, Frame, Rect, Sprite
from .serializer import Sol2dAtlasSerializer


class AtlasPackerAlgorithm(abc.ABC):
    """Places rectangles into a bin of fixed size."""

    @abc.abstractmethod
    def insert(self, width: int, height: int) -> Rect:
        """Place a rectangle; return where it went, or a null rectangle if it does not fit."""

    @abc.abstractmethod
    def reset_bin(self) -> None:
        """Empty the bin so that packing can start over."""


@dataclass
class AtlasPackerOptions:
    """Settings that control how sprites are packed."""

    max_atlas_size: tuple[int, int] = (1024, 1024)
    detect_duplicates: bool = False
    crop: bool = False
    remove_file_extensions: bool = True


@dataclass
class RawAtlas:
    """A rendered atlas image with the frames placed on it."""

    image: Image.Image
    frames: list[Frame] = field(default_factory=list)


class RawAtlasPack:
    """An ordered collection of rendered atlases."""

    def __init__(self) -> None:
        self._atlases: list[RawAtlas] = []

    def add(self, atlas: RawAtlas) -> None:
        self._atlases.append(atlas)

    def __len__(self) -> int:
        return len(self._atlases)

    def __iter__(self) -> Iterator[RawAtlas]:
        return iter(self._atlases)

    def save(
        self,
        directory: str | os.PathLike[str],
        atlas_name: str,
        image_format: str,
        remove_file_ext: bool,
    ) -> None:
        """Write each atlas image and its XML description into ``directory``."""
        if not self._atlases:
            return
        serializer = Sol2dAtlasSerializer()
        directory = os.path.abspath(os.fspath(directory))
        numbered = len(self._atlases) > 1
        for index, raw in enumerate(self._atlases, start=1):
            name = f"{atlas_name}-{index}" if numbered else atlas_name
            base_filename = os.path.join(directory, name)
            texture = f"{base_filename}.{image_format}"
            _save_image(raw.image, texture)
            frames = [
                replace(frame, name=_frame_file_name(frame.name, remove_file_ext))
                for frame in raw.frames
            ]
            serializer.serialize(
                Atlas(texture=texture, frames=frames),
                f"{base_filename}.{serializer.default_file_extension}",
            )


def _frame_file_name(name: str, remove_file_ext: bool) -> str:
    file_name = os.path.basename(name)
    return file_name.split(".", 1)[0] if remove_file_ext else file_name


def _save_image(image: Image.Image, filename: str) -> None:
    if image is None or image.width == 0 or image.height == 0:
        raise ImageSavingError(filename)
    try:
        image.save(filename)
    except (OSError, ValueError, KeyError) as exc:
        raise ImageSavingError(filename) from exc


@dataclass
class _Item:
    image: Image.Image | None
    name: str
    source_rect: Rect
    destination_rect: Rect
    is_rotated: bool
    hash_sum: bytes | None = None


def crop_rect(image: Image.Image) -> Rect:
    """Bounding rectangle of the non-transparent pixels of an image."""
    width, height = image.size
    alpha = image.convert("RGBA").getchannel("A").load()

    def row_opaque(y: int) -> bool:
        return any(alpha[x, y] != 0 for x in range(width))

    top = next((n for n, y in enumerate(range(height)) if row_opaque(y)), height)
    bottom = next(
        (n for n, y in enumerate(range(height - 1, -1, -1)) if row_opaque(y)), height
    )
    column_rows = range(height - bottom - 1, top, -1)

    def column_opaque(x: int) -> bool:
        return any(alpha[x, y] != 0 for y in column_rows)

    left = next((n for n, x in enumerate(range(width)) if column_opaque(x)), width)
    right = next(
        (n for n, x in enumerate(range(width - 1, -1, -1)) if column_opaque(x)), width
    )
    return Rect(left, top, width - left - right, height - top - bottom)


def render_items(items: Iterable) -> Image.Image:
    """Draw placed items onto a transparent canvas just large enough to hold them."""
    items = list(items)
    max_x = max((i.destination_rect.x + i.destination_rect.width for i in items), default=0)
    max_y = max((i.destination_rect.y + i.destination_rect.height for i in items), default=0)
    canvas = Image.new("RGBA", (max(max_x, 0), max(max_y, 0)), (0, 0, 0, 0))
    for item in items:
        if item.image is None:
            continue
        source = item.image.convert("RGBA")
        rect = item.source_rect
        if item.is_rotated:
            source = source.transpose(Image.Transpose.ROTATE_270)
            rect = Rect(rect.y, rect.x, rect.height, rect.width)
        dx, dy = item.destination_rect.top_left
        width = min(rect.width, canvas.width - dx)
        height = min(rect.height, canvas.height - dy)
        if width <= 0 or height <= 0 or dx < 0 or dy < 0:
            continue
        region = source.crop((rect.x, rect.y, rect.x + width, rect.y + height))
        canvas.alpha_composite(region, dest=(dx, dy))
    return canvas


def _to_raw_atlas(items: list[_Item]) -> RawAtlas:
    frames = [
        Frame(
            texture_rect=item.destination_rect,
            sprite_rect=item.source_rect,
            name=item.name,
            is_rotated=item.is_rotated,
        )
        for item in items
    ]
    return RawAtlas(image=render_items(items), frames=frames)


class AtlasPacker(abc.ABC):
    """Packs sprites into one or more atlases using a placement algorithm."""

    def __init__(self) -> None:
        self.max_atlas_size: tuple[int, int] = (1024, 1024)

    @abc.abstractmethod
    def create_algorithm(self, max_atlas_size: tuple[int, int]) -> AtlasPackerAlgorithm:
        """Return a fresh placement algorithm for bins of the given size."""

    def pack(
        self, sprites: Iterable[Sprite], options: AtlasPackerOptions | None = None
    ) -> RawAtlasPack:
        """Place every sprite, starting a new atlas whenever the current one is full."""
        options = options or AtlasPackerOptions()
        result = RawAtlasPack()
        algorithm = self.create_algorithm(options.max_atlas_size)
        items: list[_Item] = []
        for sprite in sprites:
            digest = None
            if options.detect_duplicates:
                digest = hashlib.md5(sprite.image.tobytes()).digest()
                duplicate = next((i for i in items if i.hash_sum == digest), None)
                if duplicate is not None:
                    items.append(replace(duplicate, image=None, name=sprite.name))
                    continue
            sprite_rect = (
                crop_rect(sprite.image) if options.crop else Rect(0, 0, *sprite.image.size)
            )
            dest_rect = algorithm.insert(sprite_rect.width, sprite_rect.height)
            if dest_rect.is_null() and items:
                result.add(_to_raw_atlas(items))
                items = []
                algorithm.reset_bin()
                dest_rect = algorithm.insert(sprite_rect.width, sprite_rect.height)
            items.append(
                _Item(
                    image=sprite.image,
                    name=sprite.name,
                    source_rect=sprite_rect,
                    destination_rect=dest_rect,
                    is_rotated=dest_rect.width == sprite_rect.height,
                    hash_sum=digest,
                )
            )
        if items:
            result.add(_to_raw_atlas(items))
        return result