#!/usr/bin/env python3
"""
convert.py - Print the sprite declarations for individual images.

Usage:
  sprite2src assets/player.png
  sprite2src --lang cpp --binary assets/*.png
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .build import report
from .emit import DIALECTS, render_sprite
from .errors import SpriteError
from .names import constant_name
from .sprite import convert_file


def convert_one(path: Path, lang: str = "rust", binary: bool = False) -> str:
    try:
        ident = constant_name(path.stem)
    except SpriteError as e:
        raise e.with_path(path)
    return render_sprite(ident, convert_file(path), dialect=lang, binary=binary)


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="sprite2src", description="Convert indexed images to sprite constants.")
    ap.add_argument("images", nargs="+", help="Indexed PNG/GIF/BMP images")
    ap.add_argument("--lang", choices=sorted(DIALECTS), default="rust", help="Output language")
    ap.add_argument("--binary", action="store_true", help="Write bytes as 0b literals instead of hex")
    args = ap.parse_args(argv)

    chunks = []
    for image in args.images:
        try:
            chunks.append(convert_one(Path(image), args.lang, args.binary))
        except SpriteError as e:
            report(e)
            sys.exit(1)
    sys.stdout.write("\n".join(chunks))


if __name__ == "__main__":
    main()
