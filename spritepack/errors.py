"""Exceptions raised by the sprite packing library."""

from __future__ import annotations

import enum


class OpenMode(enum.Enum):
    """Why a file was being opened."""

    READ = "reading"
    WRITE = "writing"


class PackerError(Exception):
    """Base class of every error the library raises."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class PackerIOError(PackerError):
    """A file or image could not be read or written."""


class FileOpenError(PackerIOError):
    """A file could not be opened in the requested mode."""

    def __init__(self, filename: str, mode: OpenMode) -> None:
        self.filename = str(filename)
        self.mode = OpenMode(mode)
        super().__init__(f'Unable to open file "{self.filename}" for {self.mode.value}')


class InvalidXmlError(PackerError):
    """A file does not hold well-formed XML."""

    def __init__(self, filename: str) -> None:
        self.filename = str(filename)
        super().__init__(f'File "{self.filename}" is not valid XML')


class InvalidFileFormatError(PackerError):
    """A file is readable but its contents do not follow the expected format."""

    def __init__(self, filename: str, additional_message: str = "") -> None:
        self.filename = str(filename)
        self.additional_message = additional_message
        message = f'File "{self.filename}" has invalid format'
        if additional_message:
            message = f"{message}.\n{additional_message}"
        super().__init__(message)


class ImageLoadingError(PackerIOError):
    """An image could not be loaded from a file."""

    def __init__(self, filename: str) -> None:
        self.filename = str(filename)
        super().__init__(f'Unable to load image from file "{self.filename}"')


class ImageSavingError(PackerIOError):
    """An image could not be saved to a file."""

    def __init__(self, filename: str) -> None:
        self.filename = str(filename)
        super().__init__(f'Unable to save image to file "{self.filename}"')