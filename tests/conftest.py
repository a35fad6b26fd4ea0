from pathlib import Path
from typing import Callable

import pytest

from tests.sprite_utils import FOUR_COLORS, SAMPLE_INDICES, SPRITE_TREE, write_indexed_image


@pytest.fixture
def make_png() -> Callable[..., Path]:
    def _make(path: Path, width: int = 4, height: int = 4, indices=None, colors=FOUR_COLORS) -> Path:
        if indices is None:
            indices = SAMPLE_INDICES if (width, height) == (4, 4) else [0] * (width * height)
        return write_indexed_image(path, width, height, indices, colors)

    return _make


@pytest.fixture
def sprite_dir(tmp_path: Path, make_png) -> Path:
    """Nested characters/tiles layout, every image is the 4x4 sample sprite."""
    root = tmp_path / "sprites"
    for rel in SPRITE_TREE:
        make_png(root / rel)
    return root
