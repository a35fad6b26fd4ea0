"""
config.py - Build options, from an optional JSON file and the command line.

Example sprites.json:
  {
    "lang": "rust",
    "module": "sprites",
    "flatten": false,
    "output": "src/sprites.rs",
    "depfile": "build/sprites.d"
  }

Command line flags win over the file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .emit import DIALECTS
from .errors import ConfigError
from .names import KEYWORD_POLICIES
from .tree import IMAGE_SUFFIXES


@dataclass(frozen=True)
class BuildConfig:
    lang: str = "rust"
    module: Optional[str] = None
    flatten: bool = False
    binary: bool = False
    keywords: str = "suffix"
    jobs: Optional[int] = None
    bytes_per_line: Optional[int] = None
    suffixes: Tuple[str, ...] = IMAGE_SUFFIXES
    output: Optional[str] = None
    depfile: Optional[str] = None
    watch_list: Optional[str] = None
    cargo: bool = False
    sym: Optional[str] = None
    json: Optional[str] = None

    def validate(self) -> "BuildConfig":
        if self.lang not in DIALECTS:
            raise ConfigError(f"lang must be one of {', '.join(DIALECTS)}, got {self.lang!r}")
        if self.keywords not in KEYWORD_POLICIES:
            raise ConfigError(f"keywords must be one of {', '.join(KEYWORD_POLICIES)}, got {self.keywords!r}")
        if self.jobs is not None and self.jobs < 1:
            raise ConfigError(f"jobs must be >= 1, got {self.jobs}")
        if self.bytes_per_line is not None and self.bytes_per_line < 0:
            raise ConfigError(f"bytes_per_line must be >= 0, got {self.bytes_per_line}")
        return self

    def override(self, **values: Any) -> "BuildConfig":
        """Replace the options that were actually given (None means not given)."""
        given = {k: v for k, v in values.items() if v is not None}
        return replace(self, **given).validate()


_TYPES: Dict[str, tuple] = {
    "lang": (str,),
    "module": (str,),
    "flatten": (bool,),
    "binary": (bool,),
    "keywords": (str,),
    "jobs": (int,),
    "bytes_per_line": (int,),
    "suffixes": (list,),
    "output": (str,),
    "depfile": (str,),
    "watch_list": (str,),
    "cargo": (bool,),
    "sym": (str,),
    "json": (str,),
}


def config_from_dict(data: Dict[str, Any], path: Optional[Path] = None) -> BuildConfig:
    if not isinstance(data, dict):
        raise ConfigError("config must be a JSON object", path)
    known = {f.name for f in fields(BuildConfig)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"unknown config key {key!r}", path)
        if value is None:
            continue
        types = _TYPES[key]
        if isinstance(value, bool) and bool not in types:
            raise ConfigError(f"config key {key!r} must be {types[0].__name__}", path)
        if not isinstance(value, types):
            raise ConfigError(f"config key {key!r} must be {types[0].__name__}", path)
        if key == "suffixes":
            if not all(isinstance(s, str) and s for s in value):
                raise ConfigError("config key 'suffixes' must be a list of file extensions", path)
            value = tuple(s.lower() if s.startswith(".") else f".{s.lower()}" for s in value)
        values[key] = value
    try:
        return BuildConfig(**values).validate()
    except ConfigError as e:
        raise e.with_path(path) if path is not None else e


def load_config(path: Path) -> BuildConfig:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read config: {e.strerror or e}", path) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON at line {e.lineno} column {e.colno}: {e.msg}", path) from e
    return config_from_dict(data, path)
