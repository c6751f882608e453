"""Helpers for laying out Haxe extern source text.

The emitter decides *what* is declared; this module decides how the lines
look: indentation, blank lines, doc comments and escaping of string literals.
Keeping those rules here means every generated file has exactly the same
shape, which in turn keeps repeated runs byte-identical.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Sequence

__all__ = ["HaxeWriter", "escape_haxe_string", "format_doc_comment"]


def escape_haxe_string(text: str) -> str:
    """Escape backslashes and double quotes for a ``"..."`` literal."""

    return (text or "").replace("\\", "\\\\").replace('"', '\\"')


def format_doc_comment(text: str) -> str:
    """Render ``text`` as a single-line ``/** ... */`` comment.

    Line breaks collapse into spaces and a ``*/`` inside the text is broken
    up so it cannot terminate the comment early.
    """

    flattened = (text or "").replace("\r", " ").replace("\n", " ")
    return f"/** {flattened.replace('*/', '* /')} */"


class HaxeWriter:
    """Incremental line writer with indentation support.

    Callers emit lines with :meth:`write_line` and nest blocks with
    :meth:`indented`; the writer keeps track of the current indentation level.
    """

    def __init__(self, indent: str = "  ") -> None:
        self._indent = 0
        self._indent_unit = indent
        self._lines: List[str] = []

    def write_line(self, text: str = "") -> None:
        if not text:
            self._lines.append("")
            return
        self._lines.append(f"{self._indent_unit * self._indent}{text}")

    def write_lines(self, lines: Sequence[str]) -> None:
        for line in lines:
            self.write_line(line)

    def write_doc(self, text: str) -> None:
        """Emit a doc comment unless ``text`` is blank."""

        if text and text.strip():
            self.write_line(format_doc_comment(text.strip()))

    @contextmanager
    def indented(self) -> Iterator[None]:
        self.indent()
        try:
            yield
        finally:
            self.dedent()

    def indent(self) -> None:
        self._indent += 1

    def dedent(self) -> None:
        if self._indent == 0:
            raise ValueError("indentation underflow")
        self._indent -= 1

    def render(self) -> str:
        return "\n".join(self._lines) + "\n"
