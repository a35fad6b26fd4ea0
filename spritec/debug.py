"""
debug.py - Human-readable (.sym) and JSON dumps of a compiled sprite tree.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .sprite import unpack_pixels
from .tree import Leaf, Namespace

PREVIEW_CHARS = ".#+@"
PREVIEW_MAX = 64


def preview_lines(leaf: Leaf) -> List[str]:
    s = leaf.sprite
    pixels = unpack_pixels(s.data, s.width, s.height, s.bit_depth)
    return ["".join(PREVIEW_CHARS[int(v)] for v in row) for row in pixels]


def _sym_namespace(ns: Namespace, depth: int, out: List[str]) -> None:
    pad = "  " * depth
    for node in ns.children:
        if isinstance(node, Namespace):
            out.append(f"{pad}NS {node.name} src={node.source_path}\n")
            _sym_namespace(node, depth + 1, out)
            continue
        s = node.sprite
        out.append(
            f"{pad}SPRITE {node.identifier} size={s.width}x{s.height} bpp={s.bit_depth} "
            f"flags={s.flags.name} bytes={len(s.data)} src={node.source_path}\n"
        )
        if s.width <= PREVIEW_MAX and s.height <= PREVIEW_MAX:
            for row in preview_lines(node):
                out.append(f"{pad}  |{row}|\n")


def render_sym(tree: Namespace) -> str:
    leaves = list(tree.leaves())
    total = sum(len(leaf.sprite.data) for leaf in leaves)
    out = [f'SPRITES root="{tree.source_name}" count={len(leaves)} bytes={total}\n\n']
    _sym_namespace(tree, 0, out)
    return "".join(out)


def tree_to_dict(ns: Namespace) -> Dict[str, Any]:
    children = []
    for node in ns.children:
        if isinstance(node, Namespace):
            children.append(tree_to_dict(node))
        else:
            s = node.sprite
            children.append(
                {
                    "kind": "sprite",
                    "identifier": node.identifier,
                    "source": str(node.source_path),
                    "width": s.width,
                    "height": s.height,
                    "bpp": s.bit_depth,
                    "flags": int(s.flags),
                    "size": len(s.data),
                }
            )
    return {
        "kind": "namespace",
        "name": ns.name,
        "source": str(ns.source_path) if ns.source_path is not None else ns.source_name,
        "children": children,
    }
