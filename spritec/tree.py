"""
tree.py - Sprite directory -> module tree.

  sprites/
    fonts/letters.png      Namespace("")
    tiles/tiles.png   ->     Namespace("fonts") -> Leaf("LETTERS")
                             Namespace("tiles") -> Leaf("TILES")

Directories become namespaces, images become leaves. Children are sorted by
their sanitized key so the output does not depend on directory enumeration
order. Directories without any image (at any depth) are dropped.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import DuplicateIdentifier, SpriteError, SpriteIOError
from .names import constant_name, namespace_name
from .sprite import Sprite, convert_file

IMAGE_SUFFIXES = (".png", ".gif", ".bmp")


@dataclass(frozen=True)
class Leaf:
    identifier: str           # CONSTANT_CASE, from the file stem
    key: str                  # namespace-case, used for ordering/collisions
    sprite: Sprite
    source_path: Path


@dataclass(frozen=True)
class Namespace:
    name: str                 # "" for the root
    source_name: str
    children: Tuple["ModuleNode", ...] = ()
    source_path: Optional[Path] = None

    @property
    def key(self) -> str:
        return self.name

    def child(self, source_name: str) -> "ModuleNode":
        for node in self.children:
            if _source_name(node) == source_name:
                return node
        raise KeyError(source_name)

    def namespaces(self) -> List["Namespace"]:
        return [c for c in self.children if isinstance(c, Namespace)]

    def leaves(self) -> Iterator[Leaf]:
        for node in self.children:
            if isinstance(node, Leaf):
                yield node
            else:
                yield from node.leaves()


ModuleNode = Union[Namespace, Leaf]


def _source_name(node: ModuleNode) -> str:
    if isinstance(node, Leaf):
        return node.source_path.name
    return node.source_name


@dataclass
class _DirScan:
    path: Path
    name: str
    files: Dict[str, Tuple[str, Path]] = field(default_factory=dict)  # key -> (IDENT, path)
    subdirs: Dict[str, "_DirScan"] = field(default_factory=dict)      # key -> scan

    def image_paths(self) -> Iterator[Path]:
        for _ident, path in self.files.values():
            yield path
        for sub in self.subdirs.values():
            yield from sub.image_paths()


def _is_image(path: Path, suffixes: Sequence[str]) -> bool:
    return path.suffix.lower() in suffixes


def _list_dir(path: Path) -> List[Path]:
    try:
        return sorted(path.iterdir())
    except OSError as e:
        raise SpriteIOError(f"cannot list directory: {e.strerror or e}", path) from e


def _claim(taken: Dict[str, Path], key: str, path: Path, parent: Path) -> None:
    if key in taken:
        raise DuplicateIdentifier(key, [taken[key], path], path=parent)
    taken[key] = path


def _scan(path: Path, suffixes: Sequence[str]) -> Optional[_DirScan]:
    scan = _DirScan(path=path, name=path.name)
    taken: Dict[str, Path] = {}
    for entry in _list_dir(path):
        if entry.name.startswith("."):
            continue
        try:
            if entry.is_dir():
                sub = _scan(entry, suffixes)
                if sub is None:
                    continue
                key = namespace_name(entry.name)
                _claim(taken, key, entry, path)
                scan.subdirs[key] = sub
            elif entry.is_file() and _is_image(entry, suffixes):
                key = namespace_name(entry.stem)
                _claim(taken, key, entry, path)
                scan.files[key] = (constant_name(entry.stem), entry)
        except SpriteError as e:
            raise e.with_path(entry)
    if not scan.files and not scan.subdirs:
        return None
    return scan


def convert_all(paths: Sequence[Path], jobs: Optional[int] = None) -> Dict[Path, Sprite]:
    """Decode and pack every image, keyed by path. Stops at the first error."""
    if jobs == 1 or len(paths) <= 1:
        return {p: convert_file(p) for p in paths}

    results: Dict[Path, Sprite] = {}
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        pending: Dict[Future, Path] = {executor.submit(convert_file, p): p for p in paths}
        try:
            for future in as_completed(pending):
                results[pending[future]] = future.result()
        except BaseException:
            for future in pending:
                future.cancel()
            raise
    return results


def _assemble(scan: _DirScan, sprites: Dict[Path, Sprite], name: str) -> Namespace:
    children: List[Tuple[str, ModuleNode]] = []
    for key, (ident, path) in scan.files.items():
        children.append((key, Leaf(identifier=ident, key=key, sprite=sprites[path], source_path=path)))
    for key, sub in scan.subdirs.items():
        children.append((key, _assemble(sub, sprites, key)))
    children.sort(key=lambda kv: kv[0])
    return Namespace(
        name=name,
        source_name=scan.name,
        children=tuple(node for _key, node in children),
        source_path=scan.path,
    )


def build_tree(
    root: Union[str, Path],
    jobs: Optional[int] = None,
    suffixes: Sequence[str] = IMAGE_SUFFIXES,
) -> Namespace:
    root = Path(root)
    if not root.is_dir():
        raise SpriteIOError("sprite directory not found", root)
    suffixes = tuple(s.lower() for s in suffixes)

    scan = _scan(root, suffixes)
    if scan is None:
        return Namespace(name="", source_name=root.name, source_path=root)

    sprites = convert_all(list(scan.image_paths()), jobs=jobs)
    return _assemble(scan, sprites, name="")


def flatten(tree: Namespace) -> Namespace:
    """Move every leaf into the root namespace."""
    taken: Dict[str, Path] = {}
    leaves = []
    for leaf in tree.leaves():
        _claim(taken, leaf.key, leaf.source_path, tree.source_path or Path(tree.source_name))
        leaves.append(leaf)
    leaves.sort(key=lambda leaf: leaf.key)
    return Namespace(
        name=tree.name,
        source_name=tree.source_name,
        children=tuple(leaves),
        source_path=tree.source_path,
    )


def count_sprites(tree: Namespace) -> int:
    return sum(1 for _ in tree.leaves())
