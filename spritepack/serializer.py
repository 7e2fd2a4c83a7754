"""Reading and writing atlas description files."""

from __future__ import annotations

import abc
import os
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from .errors import FileOpenError, InvalidFileFormatError, InvalidXmlError, OpenMode
from .model import Atlas, Frame, Rect

_TAG_ATLAS = "atlas"
_TAG_FRAME = "frame"
_ATTR_TEXTURE = "texture"
_ATTR_NAME = "name"
_ATTR_ROTATED = "rotated"
_TEXTURE_RECT_ATTRS = ("tx", "ty", "tw", "th")
_SPRITE_RECT_ATTRS = ("sx", "sy", "sw", "sh")

_INTEGER = re.compile(r"\s*[+-]?\d+\s*")
_INDENT = "    "


def _base_name(path: str) -> str:
    """File name without any of its suffixes."""
    return os.path.basename(path).split(".", 1)[0]


def _suffix(path: str) -> str:
    """Text after the last dot of the file name, or an empty string."""
    name = os.path.basename(path)
    return name.rsplit(".", 1)[1] if "." in name else ""


def _directory_of(path: str) -> str:
    return os.path.abspath(os.path.dirname(str(path)) or ".")


def make_default_frame_name(atlas: Atlas, index: int) -> str:
    """Name for an unnamed frame, built from the texture's file name and the index."""
    texture = str(atlas.texture)
    return f"{_base_name(texture)}_{index:04d}.{_suffix(texture)}"


def make_texture_relative_path(atlas: Atlas, data_file_path: str) -> str:
    """Path of the atlas texture relative to the directory of the data file."""
    directory = _directory_of(data_file_path)
    texture = str(atlas.texture)
    target = texture if os.path.isabs(texture) else os.path.join(directory, texture)
    try:
        relative = os.path.relpath(target, directory)
    except ValueError:
        return os.path.normpath(target)
    return Path(relative).as_posix() if os.sep == "\\" else relative


def _escape_attribute(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("\n", "&#10;")
        .replace("\r", "&#13;")
        .replace("\t", "&#9;")
    )


def _element(tag: str, attributes: list[tuple[str, str]], indent: str) -> str:
    attrs = "".join(f' {key}="{_escape_attribute(value)}"' for key, value in attributes)
    return f"{indent}<{tag}{attrs}/>"


class AtlasSerializer(abc.ABC):
    """Stores atlases in a data file and reads them back."""

    default_file_extension: str = ""

    @abc.abstractmethod
    def serialize(self, atlas: Atlas, file: str) -> None:
        """Write the atlas description to a file."""

    @abc.abstractmethod
    def deserialize(self, file: str) -> Atlas:
        """Read an atlas description from a file."""


class Sol2dAtlasSerializer(AtlasSerializer):
    """XML atlas format with one ``frame`` element per sprite."""

    default_file_extension = "xml"

    def serialize(self, atlas: Atlas, file: str) -> None:
        file = str(file)
        lines = ['<?xml version="1.0" encoding="UTF-8"?>']
        root_attrs = [(_ATTR_TEXTURE, make_texture_relative_path(atlas, file))]
        if atlas.frames:
            attrs = "".join(f' {k}="{_escape_attribute(v)}"' for k, v in root_attrs)
            lines.append(f"<{_TAG_ATLAS}{attrs}>")
            for index, frame in enumerate(atlas.frames, start=1):
                lines.append(_element(_TAG_FRAME, self._frame_attributes(atlas, frame, index), _INDENT))
            lines.append(f"</{_TAG_ATLAS}>")
        else:
            lines.append(_element(_TAG_ATLAS, root_attrs, ""))
        try:
            with open(file, "w", encoding="utf-8", newline="") as stream:
                stream.write("\n".join(lines) + "\n")
        except OSError as exc:
            raise FileOpenError(file, OpenMode.WRITE) from exc

    @staticmethod
    def _frame_attributes(atlas: Atlas, frame: Frame, index: int) -> list[tuple[str, str]]:
        name = frame.name or make_default_frame_name(atlas, index)
        texture_rect, sprite_rect = frame.texture_rect, frame.sprite_rect
        attributes = [(_ATTR_NAME, name)]
        attributes += zip(
            _TEXTURE_RECT_ATTRS,
            map(str, (texture_rect.x, texture_rect.y, texture_rect.width, texture_rect.height)),
        )
        attributes += zip(
            _SPRITE_RECT_ATTRS,
            map(str, (sprite_rect.x, sprite_rect.y, sprite_rect.width, sprite_rect.height)),
        )
        if frame.is_rotated:
            attributes.append((_ATTR_ROTATED, "true"))
        return attributes

    def deserialize(self, file: str) -> Atlas:
        file = str(file)
        try:
            with open(file, "rb") as stream:
                content = stream.read()
        except OSError as exc:
            raise FileOpenError(file, OpenMode.READ) from exc
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            raise InvalidXmlError(file) from exc
        if root.tag != _TAG_ATLAS:
            raise InvalidFileFormatError(file, f'The XML root element must be "{_TAG_ATLAS}"')

        texture = root.get(_ATTR_TEXTURE, "")
        if not os.path.isabs(texture):
            directory = _directory_of(file)
            texture = os.path.join(directory, texture) if texture else directory

        frames = []
        for position, element in enumerate(root.iter_children(_TAG_FRAME) if False else root.findall(_TAG_FRAME), start=1):
            texture_values = [_int_attribute(file, element, a, position) for a in _TEXTURE_RECT_ATTRS]
            sprite_values = [_int_attribute(file, element, a, position) for a in _SPRITE_RECT_ATTRS]
            frames.append(
                Frame(
                    texture_rect=Rect(*texture_values),
                    sprite_rect=Rect(*sprite_values),
                    name=element.get(_ATTR_NAME, ""),
                    is_rotated=element.get(_ATTR_ROTATED, "").lower() == "true",
                )
            )
        return Atlas(texture=texture, frames=frames)


def _int_attribute(file: str, element: ET.Element, name: str, position: int) -> int:
    value = element.get(name)
    if value is None:
        raise InvalidFileFormatError(
            file,
            f'XML element "{_TAG_FRAME}" at position {position} must contain attribute "{name}"',
        )
    if not _INTEGER.fullmatch(value):
        raise InvalidFileFormatError(
            file,
            f'The XML attribute "{name}" of element "{_TAG_FRAME}" at position {position} '
            "must be of type integer.",
        )
    number = int(value)
    return ((number + 2**31) % 2**32) - 2**31