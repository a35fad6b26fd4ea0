"""
sprite.py - Indexed image -> packed 1bpp/2bpp sprite blob.

Packed layout (WASM-4 BLIT_1BPP / BLIT_2BPP):
  - rows top to bottom, pixels left to right
  - 8/bpp pixels per byte, first pixel in the highest bits
  - every row starts on a new byte; a partial last byte is zero padded
  - size = height * ceil(width * bpp / 8)
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import List, Tuple

import numpy as np
from PIL import Image

from .errors import (
    ImageDecodeError,
    PaletteTooLarge,
    PixelIndexOutOfRange,
    SpriteError,
    SpriteIOError,
    UnsupportedColorType,
)

Color = Tuple[int, int, int]


class Flags(IntEnum):
    BLIT_1BPP = 0
    BLIT_2BPP = 1

    @classmethod
    def for_depth(cls, bit_depth: int) -> "Flags":
        if bit_depth == 1:
            return cls.BLIT_1BPP
        if bit_depth == 2:
            return cls.BLIT_2BPP
        raise ValueError(f"Unsupported bit depth: {bit_depth}")


@dataclass
class RasterImage:
    width: int
    height: int
    palette: List[Color]
    pixels: np.ndarray = field(repr=False)  # (height, width) palette indices

    @classmethod
    def from_indices(cls, width: int, height: int, palette: List[Color], indices) -> "RasterImage":
        pixels = np.asarray(indices, dtype=np.int64).reshape(height, width)
        return cls(width=width, height=height, palette=list(palette), pixels=pixels)

    def validate(self) -> None:
        if len(self.palette) > 256:
            raise PaletteTooLarge(len(self.palette))
        if not self.palette or self.pixels.size == 0:
            return
        bad = self.pixels[(self.pixels < 0) | (self.pixels >= len(self.palette))]
        if bad.size:
            size = len(self.palette)
            raise PixelIndexOutOfRange(int(bad[0]), bits_for_palette(size), palette_size=size)


@dataclass(frozen=True)
class Sprite:
    width: int
    height: int
    bit_depth: int
    data: bytes

    @property
    def flags(self) -> Flags:
        return Flags.for_depth(self.bit_depth)

    @property
    def row_bytes(self) -> int:
        return row_stride(self.width, self.bit_depth)


def bits_for_palette(size: int) -> int:
    n = 1
    while (1 << n) < size:
        n += 1
    return n


def row_stride(width: int, bit_depth: int) -> int:
    return (width * bit_depth + 7) // 8


def select_bit_depth(image: RasterImage) -> int:
    size = len(image.palette)
    if size <= 2:
        return 1
    if size <= 4:
        return 2
    raise PaletteTooLarge(size)


def _shifts(bit_depth: int) -> np.ndarray:
    per_byte = 8 // bit_depth
    return (np.arange(per_byte - 1, -1, -1) * bit_depth).astype(np.uint8)


def pack_pixels(image: RasterImage, bit_depth: int) -> bytes:
    if bit_depth not in (1, 2):
        raise ValueError(f"Unsupported bit depth: {bit_depth}")
    pixels = np.asarray(image.pixels).reshape(image.height, image.width)
    limit = (1 << bit_depth) - 1
    bad = pixels[(pixels < 0) | (pixels > limit)]
    if bad.size:
        raise PixelIndexOutOfRange(int(bad[0]), bit_depth)

    per_byte = 8 // bit_depth
    stride = row_stride(image.width, bit_depth)
    padded = np.zeros((image.height, stride * per_byte), dtype=np.uint8)
    padded[:, : image.width] = pixels
    groups = padded.reshape(image.height, stride, per_byte)
    packed = np.bitwise_or.reduce(groups << _shifts(bit_depth), axis=2)
    return packed.astype(np.uint8).tobytes()


def unpack_pixels(data: bytes, width: int, height: int, bit_depth: int) -> np.ndarray:
    stride = row_stride(width, bit_depth)
    if len(data) != stride * height:
        raise ValueError(f"Expected {stride * height} bytes for {width}x{height}@{bit_depth}bpp, got {len(data)}")
    raw = np.frombuffer(data, dtype=np.uint8).reshape(height, stride)
    limit = (1 << bit_depth) - 1
    groups = (raw[:, :, None] >> _shifts(bit_depth)) & limit
    return groups.reshape(height, -1)[:, :width]


def convert_image(image: RasterImage) -> Sprite:
    image.validate()
    bit_depth = select_bit_depth(image)
    data = pack_pixels(image, bit_depth)
    return Sprite(width=image.width, height=image.height, bit_depth=bit_depth, data=data)


def load_raster(path: Path) -> RasterImage:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise SpriteIOError(f"cannot read image: {e.strerror or e}", path) from e

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            mode = img.mode
            if mode == "P":
                flat = img.getpalette() or []
                pixels = np.asarray(img, dtype=np.uint8)
            elif mode == "1":
                # black/white BMPs and 1-bit grayscale PNGs open as mode "1"
                flat = [0, 0, 0, 255, 255, 255]
                pixels = (np.asarray(img) != 0).astype(np.uint8)
    except (OSError, ValueError, SyntaxError) as e:
        raise ImageDecodeError(f"cannot decode image: {e}", path) from e

    if mode not in ("P", "1"):
        raise UnsupportedColorType(mode, path)

    palette = [tuple(flat[i : i + 3]) for i in range(0, len(flat) - 2, 3)]
    height, width = pixels.shape
    return RasterImage(width=width, height=height, palette=palette, pixels=pixels)


def convert_file(path: Path) -> Sprite:
    try:
        return convert_image(load_raster(path))
    except SpriteError as e:
        raise e.with_path(path)
