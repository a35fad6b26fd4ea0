"""
names.py - Filesystem names -> identifiers.

  sanitize("level-1 tiles", Case.CONSTANT)  -> "LEVEL_1_TILES"
  sanitize("8x8 font", Case.NAMESPACE)      -> "_8x8_font"
"""

from __future__ import annotations

import re
from enum import Enum
from typing import AbstractSet

from .errors import EmptyIdentifier, ReservedIdentifier

INVALID_CHARS = re.compile(r"[^A-Za-z0-9_]")

KEYWORD_POLICIES = ("suffix", "error", "keep")


class Case(Enum):
    NAMESPACE = "namespace"
    CONSTANT = "constant"


def sanitize(name: str, case: Case) -> str:
    ident = INVALID_CHARS.sub("_", name)
    if ident[:1].isdigit():
        ident = "_" + ident
    if not ident:
        raise EmptyIdentifier(name)
    if case is Case.CONSTANT:
        return ident.upper()
    return ident.lower()


def namespace_name(name: str) -> str:
    return sanitize(name, Case.NAMESPACE)


def constant_name(name: str) -> str:
    return sanitize(name, Case.CONSTANT)


def escape_keyword(ident: str, keywords: AbstractSet[str], policy: str = "suffix", dialect: str = "") -> str:
    """Apply the reserved-word policy to an already sanitized identifier.

    suffix: append "_" until the name is free ("type" -> "type_")
    error:  raise ReservedIdentifier
    keep:   leave it alone
    """
    if policy not in KEYWORD_POLICIES:
        raise ValueError(f"Unknown keyword policy: {policy}")
    if ident not in keywords or policy == "keep":
        return ident
    if policy == "error":
        raise ReservedIdentifier(ident, dialect or "target language")
    while ident in keywords:
        ident += "_"
    return ident
