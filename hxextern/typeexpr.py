"""Parsing of canonical schema strings into type-expression trees.

Every type occurrence the generator sees is a *schema string*::

    Sandbox.Collections.Map`2<System.String,System.Collections.Generic.List`1<T>>[]

The helpers below split such strings at top-level commas only, classify the
pieces and build a small tree of frozen dataclasses.  The mapper, the token
extraction used for generic parameter detection and the generic upgrade all
walk that tree instead of re-scanning the raw text.

Parsing is total: malformed bracket sequences never raise, they simply degrade
to a named type whose name is the full input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, NamedTuple, Tuple, Union

__all__ = [
    "ARRAY_SUFFIX",
    "NULLABLE_BASE",
    "OBJECT_BASE",
    "MAX_TYPE_DEPTH",
    "GenericSplit",
    "TypeExpr",
    "PrimitiveType",
    "ArrayType",
    "NullableType",
    "NamedType",
    "GenericParameterType",
    "split_generic_type",
    "parse_type_expr",
    "format_schema",
    "extract_type_tokens",
    "is_generic_param_name",
    "simple_name",
    "strip_namespace_and_arity",
    "split_arity",
]


ARRAY_SUFFIX = "[]"
NULLABLE_BASE = "System.Nullable`1"
OBJECT_BASE = "System.Object"
ARITY_MARKER = "`"

# Nesting levels kept by the parser; deeper levels erase to the object type.
MAX_TYPE_DEPTH = 64


class GenericSplit(NamedTuple):
    base: str
    args: Tuple[str, ...]


def split_generic_type(text: str) -> GenericSplit:
    """Split ``text`` into its base name and top-level generic arguments.

    The base is everything before the first ``<``; the arguments are the
    contents between that bracket and the final ``>`` split at commas that sit
    at bracket depth zero.  A string with a ``<`` that does not end with the
    matching ``>`` is malformed and is returned whole as an argument-less base.
    """

    text = (text or "").strip()
    lt = text.find("<")
    if lt < 0:
        return GenericSplit(text, ())
    gt = text.rfind(">")
    if gt <= lt or gt != len(text) - 1:
        return GenericSplit(text, ())
    return GenericSplit(text[:lt].strip(), tuple(_split_top_level(text[lt + 1 : gt])))


def _split_top_level(inner: str) -> List[str]:
    parts: List[str] = []
    buffer: List[str] = []
    depth = 0
    for ch in inner:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(buffer).strip())
            buffer.clear()
            continue
        buffer.append(ch)
    last = "".join(buffer).strip()
    if last:
        parts.append(last)
    return parts


def is_generic_param_name(token: str) -> bool:
    """Return ``True`` when ``token`` looks like a generic parameter name.

    Single upper-case letters and ``T`` followed by ASCII letters or digits
    qualify (``T``, ``U``, ``TKey``, ``T2``).  This is a naming convention, not
    metadata: a concrete type that happens to be called ``TLight`` or
    ``Transform`` is classified as a parameter as well.
    """

    if token is None:
        return False
    token = token.strip()
    if len(token) == 1:
        return "A" <= token <= "Z"
    if len(token) >= 2 and token[0] == "T":
        return all(ch.isascii() and ch.isalnum() for ch in token[1:])
    return False


def simple_name(full: str) -> str:
    """Return the part of ``full`` after its last dot."""

    dot = full.rfind(".")
    return full[dot + 1 :] if dot >= 0 else full


def strip_namespace_and_arity(text: str) -> str:
    name = simple_name((text or "").strip())
    tick = name.find(ARITY_MARKER)
    return name[:tick] if tick >= 0 else name


def split_arity(name: str) -> Tuple[str, int | None]:
    """Split ``Foo`2`` into ``("Foo", 2)``; names without a marker give ``None``."""

    tick = name.find(ARITY_MARKER)
    if tick < 0:
        return name, None
    digits = name[tick + 1 :]
    return name[:tick], int(digits) if digits.isdigit() else None


# ---------------------------------------------------------------------------
# Type expression tree


@dataclass(frozen=True)
class TypeExpr:
    """Base class for parsed type expressions."""


@dataclass(frozen=True)
class PrimitiveType(TypeExpr):
    """A name already in the target vocabulary (``Int``, ``Dynamic``...)."""

    keyword: str


@dataclass(frozen=True)
class ArrayType(TypeExpr):
    element: TypeExpr


@dataclass(frozen=True)
class NullableType(TypeExpr):
    inner: TypeExpr


@dataclass(frozen=True)
class NamedType(TypeExpr):
    """A host type, possibly carrying an arity marker and type arguments."""

    name: str
    arguments: Tuple[TypeExpr, ...] = ()

    @property
    def has_arity_marker(self) -> bool:
        return ARITY_MARKER in self.name

    @property
    def namespace(self) -> str:
        dot = self.name.rfind(".")
        return self.name[:dot] if dot >= 0 else ""

    @property
    def simple_name(self) -> str:
        return simple_name(self.name)


@dataclass(frozen=True)
class GenericParameterType(TypeExpr):
    """A name classified as a generic parameter by :func:`is_generic_param_name`.

    ``name`` keeps the text exactly as it appeared (possibly namespace
    qualified) so that the tree can be formatted back without loss.
    """

    name: str

    @property
    def identifier(self) -> str:
        if is_generic_param_name(self.name):
            return self.name
        return simple_name(self.name)


TypeSource = Union[str, TypeExpr]

_OBJECT = NamedType(OBJECT_BASE)


def parse_type_expr(text: str, keywords: FrozenSet[str] = frozenset()) -> TypeExpr:
    """Parse a schema string into a :class:`TypeExpr` tree.

    ``keywords`` is the target vocabulary; names in it are kept as
    :class:`PrimitiveType` so that already mapped strings survive another pass.
    An empty string denotes the root object type, and so does anything nested
    deeper than :data:`MAX_TYPE_DEPTH` array or generic levels.
    """

    return _parse(text, keywords, 0)


def _parse(text: str, keywords: FrozenSet[str], depth: int) -> TypeExpr:
    text = (text or "").strip()
    if not text or depth > MAX_TYPE_DEPTH:
        return _OBJECT
    if text in keywords:
        return PrimitiveType(text)
    if text.endswith(ARRAY_SUFFIX):
        return ArrayType(_parse(text[: -len(ARRAY_SUFFIX)], keywords, depth + 1))

    base, args = split_generic_type(text)
    if is_generic_param_name(base) or is_generic_param_name(simple_name(base)):
        return GenericParameterType(base)
    if base == NULLABLE_BASE and base != text:
        inner = args[0] if args else OBJECT_BASE
        return NullableType(_parse(inner, keywords, depth + 1))
    return NamedType(base, tuple(_parse(arg, keywords, depth + 1) for arg in args))


def format_schema(expr: TypeExpr) -> str:
    """Render ``expr`` back into its canonical schema string."""

    if isinstance(expr, PrimitiveType):
        return expr.keyword
    if isinstance(expr, ArrayType):
        return format_schema(expr.element) + ARRAY_SUFFIX
    if isinstance(expr, NullableType):
        return f"{NULLABLE_BASE}<{format_schema(expr.inner)}>"
    if isinstance(expr, GenericParameterType):
        return expr.name
    if isinstance(expr, NamedType):
        if not expr.arguments:
            return expr.name
        return f"{expr.name}<{','.join(format_schema(arg) for arg in expr.arguments)}>"
    raise TypeError(f"unsupported type expression: {expr!r}")


def extract_type_tokens(source: TypeSource) -> List[str]:
    """Return the identifier tokens mentioned by a type.

    Arrays contribute the tokens of their element type.  Named types
    contribute their namespace- and arity-stripped identifier followed by the
    tokens of every argument.  The nullable wrapper contributes ``Nullable``
    and the tokens of its inner type.
    """

    if isinstance(source, str):
        if not source.strip():
            return []
        source = parse_type_expr(source)
    return list(_iter_tokens(source))


def _iter_tokens(expr: TypeExpr) -> Iterable[str]:
    if isinstance(expr, ArrayType):
        yield from _iter_tokens(expr.element)
    elif isinstance(expr, NullableType):
        yield strip_namespace_and_arity(NULLABLE_BASE)
        yield from _iter_tokens(expr.inner)
    elif isinstance(expr, GenericParameterType):
        yield strip_namespace_and_arity(expr.name)
    elif isinstance(expr, PrimitiveType):
        yield expr.keyword
    elif isinstance(expr, NamedType):
        yield strip_namespace_and_arity(expr.name)
        for arg in expr.arguments:
            yield from _iter_tokens(arg)
