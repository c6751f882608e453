"""Identifier normalisation for emitted Haxe declarations.

Host names are rarely valid Haxe identifiers as-is: type names carry arity
markers and parameter lists, member names may collide with Haxe keywords and
compiler generated types use characters no scripting language accepts.  This
module keeps all of those rules in one place so that the type mapper, the
member emitter and the orchestrator agree on every name they mint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Set

from .typeexpr import ARITY_MARKER, simple_name

__all__ = [
    "DEFAULT_TYPE_NAME",
    "HAXE_KEYWORDS",
    "COMPILER_GENERATED_MARKERS",
    "sanitize_type_name",
    "sanitize_member_name",
    "is_compiler_generated_name",
    "ParameterNameAllocator",
]


DEFAULT_TYPE_NAME = "Type"


HAXE_KEYWORDS = frozenset(
    {
        "abstract",
        "break",
        "case",
        "cast",
        "catch",
        "class",
        "continue",
        "default",
        "do",
        "dynamic",
        "else",
        "enum",
        "extends",
        "extern",
        "false",
        "final",
        "for",
        "function",
        "if",
        "implements",
        "import",
        "in",
        "inline",
        "interface",
        "macro",
        "new",
        "null",
        "operator",
        "overload",
        "override",
        "package",
        "private",
        "public",
        "return",
        "static",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typedef",
        "untyped",
        "using",
        "var",
        "while",
    }
)


# Closure classes, iterator state machines and anonymous types.
COMPILER_GENERATED_MARKERS = ("$", ".<", "+<", "\\u003C", "\\u003E")
_COMPILER_GENERATED_FRAGMENTS = ("DisplayClass", "AnonStorey")


def is_compiler_generated_name(full_name: str) -> bool:
    """Return ``True`` for host names that have no stable public surface."""

    if full_name.startswith("<"):
        return True
    if any(marker in full_name for marker in COMPILER_GENERATED_MARKERS):
        return True
    name = simple_name(full_name.split("<", 1)[0])
    return any(fragment in name for fragment in _COMPILER_GENERATED_FRAGMENTS)


def sanitize_type_name(name: str, default: str = DEFAULT_TYPE_NAME) -> str:
    """Return a Haxe type identifier derived from ``name``.

    The generic parameter list and arity marker are dropped, every character
    other than ASCII letters, digits and ``_`` is removed, an empty result
    becomes ``default`` and a leading digit gains an underscore prefix.
    """

    lt = name.find("<")
    if lt >= 0:
        name = name[:lt]
    tick = name.find(ARITY_MARKER)
    if tick >= 0:
        name = name[:tick]
    identifier = "".join(ch for ch in name if ch.isascii() and (ch.isalnum() or ch == "_"))
    if not identifier:
        identifier = default
    if identifier[0].isdigit():
        identifier = "_" + identifier
    return identifier


def sanitize_member_name(name: str) -> str:
    """Prefix Haxe keywords with an underscore; other names pass through."""

    if name in HAXE_KEYWORDS:
        return "_" + name
    return name


@dataclass
class ParameterNameAllocator:
    """Hand out unique parameter names within one signature.

    The first request for ``value`` returns it unchanged, later requests get
    ``value2``, ``value3`` and so on.  Missing names fall back to
    ``arg<index>``.
    """

    _used: Set[str] = field(default_factory=set)
    _counters: Dict[str, int] = field(default_factory=dict)

    def allocate(self, raw: str | None, index: int) -> str:
        raw = (raw or "").strip()
        base = sanitize_member_name(raw or f"arg{index}")
        candidate = base
        suffix = self._counters.get(base, 2)
        while candidate in self._used:
            candidate = f"{base}{suffix}"
            suffix += 1
        self._counters[base] = suffix
        self._used.add(candidate)
        return candidate
