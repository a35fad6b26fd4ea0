"""
emit.py - Module tree -> source text.

Per sprite four declarations are written, prefixed with the sprite identifier:

  pub const LETTERS_WIDTH: u32 = 320;
  pub const LETTERS_HEIGHT: u32 = 32;
  pub const LETTERS_FLAGS: u32 = 0; // BLIT_1BPP
  pub const LETTERS: [u8; 1280] = [0x00, ...];

Directories become nested namespace blocks (Rust "pub mod", C++ "namespace").
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

from .errors import DuplicateIdentifier, SpriteError
from .names import KEYWORD_POLICIES, escape_keyword, namespace_name
from .sprite import Sprite
from .tree import Leaf, Namespace

INDENT = "    "

RUST_KEYWORDS = frozenset(
    """
    as async await break const continue crate dyn else enum extern false fn for
    if impl in let loop match mod move mut pub ref return self Self static struct
    super trait true type unsafe use where while abstract become box do final gen
    macro override priv try typeof unsized virtual yield _
    """.split()
)

CPP_KEYWORDS = frozenset(
    """
    alignas alignof and and_eq asm auto bitand bitor bool break case catch char
    char8_t char16_t char32_t class compl concept const consteval constexpr
    constinit const_cast continue co_await co_return co_yield decltype default
    delete do double dynamic_cast else enum explicit export extern false float
    for friend goto if inline int long mutable namespace new noexcept not not_eq
    nullptr operator or or_eq private protected public register
    reinterpret_cast requires return short signed sizeof static static_assert
    static_cast struct switch template this thread_local throw true try typedef
    typeid typename union unsigned using virtual void volatile wchar_t while xor
    xor_eq NULL EOF
    """.split()
)


@dataclass(frozen=True)
class Dialect(ABC):
    name: str
    suffix: str
    keywords: FrozenSet[str]
    hex_format: str
    separator: str
    bytes_per_line: Optional[int]
    preamble: str = ""

    @abstractmethod
    def open_block(self, name: str) -> str:
        ...

    @abstractmethod
    def close_block(self, name: str) -> str:
        ...

    @abstractmethod
    def const_u32(self, name: str, value: int, public: bool) -> str:
        ...

    @abstractmethod
    def array_open(self, name: str, size: int, public: bool) -> str:
        ...

    @abstractmethod
    def array_close(self) -> str:
        ...


class RustDialect(Dialect):
    def open_block(self, name: str) -> str:
        return f"pub mod {name} {{"

    def close_block(self, name: str) -> str:
        return "}"

    def const_u32(self, name: str, value: int, public: bool) -> str:
        vis = "pub " if public else ""
        return f"{vis}const {name}: u32 = {value};"

    def array_open(self, name: str, size: int, public: bool) -> str:
        vis = "pub " if public else ""
        return f"{vis}const {name}: [u8; {size}] = ["

    def array_close(self) -> str:
        return "];"


class CppDialect(Dialect):
    def open_block(self, name: str) -> str:
        return f"namespace {name} {{"

    def close_block(self, name: str) -> str:
        return f"}}  // namespace {name}"

    def const_u32(self, name: str, value: int, public: bool) -> str:
        return f"constexpr uint32_t {name} = {value};"

    def array_open(self, name: str, size: int, public: bool) -> str:
        return f"constexpr uint8_t {name}[{size}] = {{"

    def array_close(self) -> str:
        return "};"


DIALECTS: Dict[str, Dialect] = {
    "rust": RustDialect(
        name="rust",
        suffix=".rs",
        keywords=RUST_KEYWORDS,
        hex_format="0x{:02x}",
        separator=", ",
        bytes_per_line=None,
    ),
    "cpp": CppDialect(
        name="cpp",
        suffix=".hpp",
        keywords=CPP_KEYWORDS,
        hex_format="0x{:02X}",
        separator=",",
        bytes_per_line=12,
        preamble="// Auto-generated by spritec\n#pragma once\n#include <stdint.h>\n\n",
    ),
}


def get_dialect(name: str) -> Dialect:
    try:
        return DIALECTS[name]
    except KeyError:
        raise ValueError(f"Unknown output language: {name} (expected one of {', '.join(DIALECTS)})") from None


def format_byte(value: int, dialect: Dialect, binary: bool = False) -> str:
    if binary:
        return f"0b{value:08b}"
    return dialect.hex_format.format(value)


def sprite_lines(
    ident: str,
    sprite: Sprite,
    dialect: Dialect,
    binary: bool = False,
    public: bool = True,
    bytes_per_line: Optional[int] = None,
) -> List[str]:
    """Declarations for one sprite, unindented, one entry per line."""
    flags = sprite.flags
    lines = [
        dialect.const_u32(f"{ident}_WIDTH", sprite.width, public),
        dialect.const_u32(f"{ident}_HEIGHT", sprite.height, public),
        dialect.const_u32(f"{ident}_FLAGS", int(flags), public) + f" // {flags.name}",
    ]
    values = [format_byte(b, dialect, binary) for b in sprite.data]
    head = dialect.array_open(ident, len(sprite.data), public)
    if not bytes_per_line or not values:
        lines.append(head + dialect.separator.join(values) + dialect.array_close())
        return lines
    lines.append(head)
    for i in range(0, len(values), bytes_per_line):
        chunk = values[i : i + bytes_per_line]
        lines.append(INDENT + dialect.separator.join(chunk) + ",")
    lines.append(dialect.array_close())
    return lines


def render_sprite(ident: str, sprite: Sprite, dialect: str = "rust", binary: bool = False) -> str:
    d = get_dialect(dialect)
    return "\n".join(sprite_lines(ident, sprite, d, binary=binary, public=False, bytes_per_line=d.bytes_per_line)) + "\n"


class _Renderer:
    def __init__(self, dialect: Dialect, binary: bool, keyword_policy: str, bytes_per_line: Optional[int]):
        if keyword_policy not in KEYWORD_POLICIES:
            raise ValueError(f"Unknown keyword policy: {keyword_policy}")
        self.dialect = dialect
        self.binary = binary
        self.keyword_policy = keyword_policy
        self.bytes_per_line = bytes_per_line
        self.out: List[str] = []

    def escape(self, ident: str, path: Optional[Path]) -> str:
        try:
            return escape_keyword(ident, self.dialect.keywords, self.keyword_policy, self.dialect.name)
        except SpriteError as e:
            if path is not None:
                e.with_path(path)
            raise

    def emit(self, level: int, line: str) -> None:
        self.out.append(f"{INDENT * level}{line}\n" if line else "\n")

    def block(self, name: str, body: Namespace, level: int) -> None:
        self.emit(level, self.dialect.open_block(name))
        self.namespace_body(body, level + 1)
        self.emit(level, self.dialect.close_block(name))
        self.emit(level, "")

    def namespace_body(self, ns: Namespace, level: int) -> None:
        taken: Dict[str, Path] = {}

        def claim(name: str, path: Path) -> None:
            if name in taken:
                raise DuplicateIdentifier(name, [taken[name], path], path=ns.source_path)
            taken[name] = path

        for node in ns.children:
            if isinstance(node, Leaf):
                self.leaf(node, level, claim)
            else:
                name = self.escape(node.name, node.source_path)
                claim(name, node.source_path)
                self.block(name, node, level)

    def leaf(self, leaf: Leaf, level: int, claim) -> None:
        ident = self.escape(leaf.identifier, leaf.source_path)
        for name in (ident, f"{ident}_WIDTH", f"{ident}_HEIGHT", f"{ident}_FLAGS"):
            claim(name, leaf.source_path)
        for line in sprite_lines(ident, leaf.sprite, self.dialect, self.binary, True, self.bytes_per_line):
            self.emit(level, line)
        self.emit(level, "")


def render_source(
    tree: Namespace,
    dialect: str = "rust",
    module: Optional[str] = None,
    binary: bool = False,
    keyword_policy: str = "suffix",
    bytes_per_line: Optional[int] = None,
) -> str:
    """Render the tree. `module` wraps everything in one extra namespace."""
    d = get_dialect(dialect)
    if bytes_per_line is None:
        bytes_per_line = d.bytes_per_line
    r = _Renderer(d, binary, keyword_policy, bytes_per_line)
    r.out.append(d.preamble)
    if module:
        name = r.escape(namespace_name(module), tree.source_path)
        r.block(name, tree, 0)
    else:
        r.namespace_body(tree, 0)
    return "".join(r.out)
