"""
watchlist.py - Source images a build has to watch.

The order is the emission order of emit.render_source, so two builds of the
same tree always produce the same list.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from .tree import Namespace


def render_watch_list(tree: Namespace) -> List[Path]:
    return [leaf.source_path for leaf in tree.leaves()]


def _posix(path: Union[str, Path]) -> str:
    return str(path).replace("\\", "/")


def format_plain(paths: Iterable[Path]) -> str:
    return "".join(f"{_posix(p)}\n" for p in paths)


def format_cargo(paths: Iterable[Path]) -> str:
    """Instructions for a cargo build script to rerun when an image changes."""
    return "".join(f"cargo:rerun-if-changed={_posix(p)}\n" for p in paths)


def _escape_make(path: Union[str, Path]) -> str:
    return _posix(path).replace(" ", "\\ ").replace("#", "\\#")


def format_depfile(target: Union[str, Path], paths: Iterable[Path]) -> str:
    """Make-style depfile: "target: dep1 dep2" (ninja reads the same format)."""
    deps = " ".join(_escape_make(p) for p in paths)
    return f"{_escape_make(target)}: {deps}\n"
