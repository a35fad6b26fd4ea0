#!/usr/bin/env python3
"""
watch.py - Rebuild the sprite source whenever an image under ROOT changes.

Usage:
  spritec-watch assets/sprites -o src/sprites.rs --module sprites
  spritec-watch assets/sprites --once -o src/sprites.rs
"""

from __future__ import annotations

import argparse
import os
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .build import add_build_args, config_from_args, report, run_build
from .config import BuildConfig
from .errors import SpriteError


class SpriteEventHandler(FileSystemEventHandler):
    """Calls on_change for events touching an image (or a whole directory)."""

    def __init__(self, suffixes: Sequence[str], on_change: Callable[[str], None]):
        super().__init__()
        self.suffixes = tuple(s.lower() for s in suffixes)
        self.on_change = on_change

    def _relevant(self, path: str) -> bool:
        name = os.path.basename(path)
        if not name or name.startswith("."):
            return False
        return os.path.splitext(name)[1].lower() in self.suffixes

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in ("created", "modified", "deleted", "moved"):
            return
        paths = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(os.fsdecode(dest))
        for path in paths:
            if event.is_directory:
                if event.event_type == "modified" or os.path.basename(path).startswith("."):
                    continue
            elif not self._relevant(path):
                continue
            self.on_change(path)
            return


def run_cycle(root: Path, config: BuildConfig) -> bool:
    print("SPRITEGEN START")
    ok = run_build(root, config)
    print("SPRITEGEN END")
    sys.stdout.flush()
    return ok


def watch(root: Path, config: BuildConfig, interval: float = 0.5) -> None:
    changed = threading.Event()
    handler = SpriteEventHandler(config.suffixes, lambda _path: changed.set())

    observer = Observer()
    observer.schedule(handler, str(root), recursive=True)
    observer.start()

    run_cycle(root, config)

    try:
        while True:
            time.sleep(interval)
            if changed.is_set():
                changed.clear()
                run_cycle(root, config)
    except KeyboardInterrupt:
        observer.stop()
    observer.join()


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="spritec-watch", description="Rebuild sprite source on image changes.")
    add_build_args(ap)
    ap.add_argument("--interval", type=float, default=0.5, help="Polling interval in seconds")
    ap.add_argument("--once", action="store_true", help="Run a single build and exit")
    args = ap.parse_args(argv)

    try:
        config = config_from_args(args)
    except SpriteError as e:
        report(e)
        sys.exit(1)

    root = Path(args.root)
    if not root.is_dir():
        print(f"{os.path.abspath(root)}: error: sprite directory not found", file=sys.stderr)
        sys.exit(1)

    if args.once:
        if not run_build(root, config):
            sys.exit(1)
        return

    watch(root, config, args.interval)


if __name__ == "__main__":
    main()
