"""
errors.py - Exceptions raised while compiling a sprite tree.

Every error aborts the whole build. The CLIs catch SpriteError and print it in
compiler style ("path: error: message").
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

PathLike = Union[str, Path]


class SpriteError(Exception):
    def __init__(self, message: str, path: Optional[PathLike] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def with_path(self, path: PathLike) -> "SpriteError":
        if self.path is None:
            self.path = Path(path)
        return self

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


class PaletteTooLarge(SpriteError):
    def __init__(self, size: int, path: Optional[PathLike] = None):
        super().__init__(f"palette has {size} colors, at most 4 are supported", path)
        self.size = size


class UnsupportedColorType(SpriteError):
    def __init__(self, mode: str, path: Optional[PathLike] = None):
        super().__init__(f"image is not indexed-color (mode {mode})", path)
        self.mode = mode


class PixelIndexOutOfRange(SpriteError):
    def __init__(
        self,
        value: int,
        bit_depth: int,
        path: Optional[PathLike] = None,
        palette_size: Optional[int] = None,
    ):
        if palette_size is not None:
            message = f"pixel index {value} is outside the {palette_size}-color palette"
        else:
            limit = (1 << bit_depth) - 1
            message = f"pixel index {value} does not fit in {bit_depth} bpp (max {limit})"
        super().__init__(message, path)
        self.value = value
        self.bit_depth = bit_depth
        self.palette_size = palette_size


class EmptyIdentifier(SpriteError):
    def __init__(self, name: str, path: Optional[PathLike] = None):
        super().__init__(f"name {name!r} does not produce an identifier", path)
        self.name = name


class DuplicateIdentifier(SpriteError):
    def __init__(self, name: str, paths: Iterable[PathLike] = (), path: Optional[PathLike] = None):
        self.paths = [Path(p) for p in paths]
        message = f"duplicate identifier {name!r}"
        if self.paths:
            message += " (" + ", ".join(str(p) for p in self.paths) + ")"
        super().__init__(message, path)
        self.name = name


class ReservedIdentifier(SpriteError):
    def __init__(self, name: str, dialect: str, path: Optional[PathLike] = None):
        super().__init__(f"identifier {name!r} is a reserved word in {dialect}", path)
        self.name = name
        self.dialect = dialect


class ImageDecodeError(SpriteError):
    pass


class SpriteIOError(SpriteError):
    pass


class ConfigError(SpriteError):
    pass
