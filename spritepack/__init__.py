"""Sprite atlas packing, XML atlas descriptions and unpacking of atlases and grids."""

__version__ = "0.1.0"
__all__ = ["errors", "model", "serializer", "pack", "packer"]