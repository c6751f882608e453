"""Customisation knobs shared by every stage of extern generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet


@dataclass(frozen=True)
class ExternOptions:
    """Describe the host namespace being exported and the target vocabulary.

    The defaults describe the s&box runtime (``Sandbox.*`` host types emitted
    into the ``sbox`` Haxe package).  The instance is immutable and handed to
    every component explicitly so that a generation run never consults global
    state.
    """

    root_namespace: str = "Sandbox"
    root_package: str = "sbox"
    extension: str = "hx"
    dynamic_type: str = "Dynamic"
    int64_type: str = "haxe.Int64"
    default_type_name: str = "Type"
    indent: str = "  "

    @property
    def target_keywords(self) -> FrozenSet[str]:
        """Type names the mapper itself produces and passes through untouched."""

        return frozenset(
            {
                self.dynamic_type,
                "Void",
                "Int",
                "UInt",
                "Float",
                "Bool",
                "String",
                self.int64_type,
            }
        )


DEFAULT_OPTIONS = ExternOptions()


__all__ = ["ExternOptions", "DEFAULT_OPTIONS"]
