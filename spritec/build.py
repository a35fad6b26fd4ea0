#!/usr/bin/env python3
"""
build.py - Compile a directory of indexed sprites into generated source.

Outputs:
  - .rs/.hpp   Nested modules with *_WIDTH/*_HEIGHT/*_FLAGS and the packed bytes
  - .d         Optional make/ninja depfile listing every source image
  - .txt       Optional plain watch list (one image per line)
  - .sym/.json Optional debug dumps

Usage:
  spritec assets/sprites -o src/sprites.rs --module sprites
  spritec assets/sprites --lang cpp -o gen/include/sprites.hpp --depfile build/sprites.d
  spritec assets/sprites -o src/sprites.rs --cargo        # from a cargo build script

Nothing is written unless every image converts cleanly.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import BuildConfig, load_config
from .debug import render_sym, tree_to_dict
from .emit import DIALECTS, get_dialect, render_source
from .errors import SpriteError, SpriteIOError
from .gen_paths import DEFAULT_BASENAME, GEN_ROOT
from .names import KEYWORD_POLICIES
from .tree import Namespace, build_tree, count_sprites, flatten
from .watchlist import format_cargo, format_depfile, format_plain, render_watch_list

STDOUT = "-"


@dataclass
class BuildResult:
    tree: Namespace
    source: str
    watch: List[Path]


def compile_sprites(root: Path, config: BuildConfig) -> BuildResult:
    tree = build_tree(root, jobs=config.jobs, suffixes=config.suffixes)
    if config.flatten:
        tree = flatten(tree)
    source = render_source(
        tree,
        dialect=config.lang,
        module=config.module,
        binary=config.binary,
        keyword_policy=config.keywords,
        bytes_per_line=config.bytes_per_line,
    )
    return BuildResult(tree=tree, source=source, watch=render_watch_list(tree))


def default_output(config: BuildConfig) -> str:
    suffix = get_dialect(config.lang).suffix
    return os.path.join(GEN_ROOT, "src", f"{DEFAULT_BASENAME}{suffix}")


def write_if_changed(path: Path, text: str) -> bool:
    try:
        if path.is_file() and path.read_text(encoding="utf-8") == text:
            return False
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise SpriteIOError(f"cannot write output: {e.strerror or e}", path) from e
    return True


def _write(path: Path, text: str, what: str = "") -> None:
    if write_if_changed(path, text):
        suffix = f" ({what})" if what else ""
        print(f"Wrote {path}{suffix}")
    else:
        print(f"Unchanged {path}")


def write_outputs(result: BuildResult, config: BuildConfig) -> None:
    output = config.output or default_output(config)
    if output == STDOUT:
        sys.stdout.write(result.source)
    else:
        _write(Path(output), result.source, f"{count_sprites(result.tree)} sprites")

    if config.depfile:
        target = output if output != STDOUT else DEFAULT_BASENAME
        _write(Path(config.depfile), format_depfile(target, result.watch))
    if config.watch_list:
        _write(Path(config.watch_list), format_plain(result.watch))
    if config.sym:
        _write(Path(config.sym), render_sym(result.tree))
    if config.json:
        _write(Path(config.json), json.dumps(tree_to_dict(result.tree), indent=2) + "\n")
    if config.cargo:
        sys.stdout.write(format_cargo(result.watch))


def add_build_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("root", help="Directory containing the sprite images")
    ap.add_argument("-o", "--output", default=None, help=f"Output source file, '-' for stdout (default: {GEN_ROOT}/src/{DEFAULT_BASENAME}.rs)")
    ap.add_argument("--config", default=None, help="JSON file with build options (flags override it)")
    ap.add_argument("--lang", choices=sorted(DIALECTS), default=None, help="Output language (default: rust)")
    ap.add_argument("--module", default=None, help="Wrap everything in one top-level module")
    ap.add_argument("--flatten", action="store_true", default=None, help="Put every sprite in the top-level module")
    ap.add_argument("--binary", action="store_true", default=None, help="Write bytes as 0b literals instead of hex")
    ap.add_argument("--keywords", choices=KEYWORD_POLICIES, default=None, help="Reserved word handling (default: suffix)")
    ap.add_argument("--bytes-per-line", type=int, default=None, help="Wrap byte arrays (0 = one line)")
    ap.add_argument("-j", "--jobs", type=int, default=None, help="Worker threads for decoding (default: CPU based)")
    ap.add_argument("--depfile", default=None, help="Write a make/ninja depfile")
    ap.add_argument("--watch-list", default=None, help="Write the watched image paths, one per line")
    ap.add_argument("--cargo", action="store_true", default=None, help="Print cargo:rerun-if-changed lines")
    ap.add_argument("--sym", default=None, help="Write a human-readable sprite map")
    ap.add_argument("--json", default=None, help="Write a debug JSON dump")


def config_from_args(args: argparse.Namespace) -> BuildConfig:
    config = load_config(Path(args.config)) if args.config else BuildConfig()
    return config.override(
        lang=args.lang,
        module=args.module,
        flatten=args.flatten,
        binary=args.binary,
        keywords=args.keywords,
        bytes_per_line=args.bytes_per_line,
        jobs=args.jobs,
        output=args.output,
        depfile=args.depfile,
        watch_list=args.watch_list,
        cargo=args.cargo,
        sym=args.sym,
        json=args.json,
    )


def report(e: SpriteError) -> None:
    path = os.path.abspath(e.path) if e.path is not None else "spritec"
    print(f"{path}: error: {e.message}", file=sys.stderr)


def run_build(root: Path, config: BuildConfig) -> bool:
    try:
        result = compile_sprites(root, config)
        write_outputs(result, config)
    except SpriteError as e:
        report(e)
        return False
    return True


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="spritec", description="Compile indexed sprites into source constants.")
    add_build_args(ap)
    args = ap.parse_args(argv)

    try:
        config = config_from_args(args)
    except SpriteError as e:
        report(e)
        sys.exit(1)

    if not run_build(Path(args.root), config):
        sys.exit(1)


if __name__ == "__main__":
    main()
