"""Indexed images -> packed 1bpp/2bpp sprite constants."""

from .emit import render_source, render_sprite
from .errors import (
    ConfigError,
    DuplicateIdentifier,
    EmptyIdentifier,
    ImageDecodeError,
    PaletteTooLarge,
    PixelIndexOutOfRange,
    ReservedIdentifier,
    SpriteError,
    SpriteIOError,
    UnsupportedColorType,
)
from .names import Case, sanitize
from .sprite import Flags, RasterImage, Sprite, convert_image, pack_pixels, select_bit_depth, unpack_pixels
from .tree import Leaf, Namespace, build_tree, flatten
from .watchlist import render_watch_list

__version__ = "0.1.0"
