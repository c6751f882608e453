"""Generic arity bookkeeping and the bare-name "upgrade" heuristic.

Some metadata sources report an occurrence of a generic type without its
instantiation, e.g. ``Sandbox.Pool`` where the catalog only defines
``Sandbox.Pool`1``.  The :class:`GenericArityIndex` records which arities each
base name is defined with and :func:`upgrade_to_known_generic` uses it to
repair such occurrences.  The repair is a best-effort guess: argument slots
are filled from the enclosing method's own generic parameters and padded with
the erased placeholder.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Sequence, Set, Tuple

from .model import TypeDescriptor
from .typeexpr import (
    ArrayType,
    GenericParameterType,
    NamedType,
    PrimitiveType,
    TypeExpr,
    format_schema,
    parse_type_expr,
    split_arity,
)

__all__ = ["GenericArityIndex", "upgrade_to_known_generic", "upgrade_type_expr"]


class GenericArityIndex:
    """Read-only map from unsuffixed base names to their known arities."""

    def __init__(self, arities: Optional[Mapping[str, Iterable[int]]] = None) -> None:
        self._arities: Dict[str, Tuple[int, ...]] = {
            base: tuple(sorted(set(values)))
            for base, values in (arities or {}).items()
            if values
        }

    @classmethod
    def from_types(cls, types: Iterable[TypeDescriptor]) -> "GenericArityIndex":
        """Build the index from the generic *definitions* among ``types``."""

        collected: Dict[str, Set[int]] = {}
        for descriptor in types:
            if not descriptor.is_generic_definition:
                continue
            base, _ = split_arity(descriptor.base_name)
            if not base:
                continue
            collected.setdefault(base, set()).add(len(descriptor.generic_parameters))
        return cls(collected)

    def __contains__(self, base: object) -> bool:
        return base in self._arities

    def __len__(self) -> int:
        return len(self._arities)

    def arities(self, base: str) -> Tuple[int, ...]:
        return self._arities.get(base, ())

    def choose_arity(self, base: str, method_generic_count: int = 0) -> Optional[int]:
        """Pick the arity used when upgrading a bare ``base`` occurrence.

        The method's own generic parameter count wins when it is one of the
        known arities; otherwise the smallest known arity is used.
        """

        known = self.arities(base)
        if not known:
            return None
        if method_generic_count > 0 and method_generic_count in known:
            return method_generic_count
        return known[0]

    def instantiation_arity(self, name: str) -> Optional[int]:
        """Return how many arguments an argument-less occurrence of ``name`` needs.

        ``name`` may carry an arity marker (``Foo`2``), in which case the marker
        must match a recorded arity.  A bare name resolves to its smallest
        recorded arity.
        """

        base, marker = split_arity(name)
        known = self.arities(base)
        if not known:
            return None
        if marker is None:
            return known[0]
        return marker if marker in known else None


def upgrade_type_expr(
    expr: TypeExpr,
    index: GenericArityIndex,
    method_generic_params: Sequence[str] = (),
    placeholder: str = "Dynamic",
) -> TypeExpr:
    if isinstance(expr, ArrayType):
        element = upgrade_type_expr(expr.element, index, method_generic_params, placeholder)
        return expr if element is expr.element else ArrayType(element)
    if isinstance(expr, NamedType):
        if expr.arguments or expr.has_arity_marker:
            return expr
        name = expr.name
    elif isinstance(expr, GenericParameterType):
        name = expr.name
    else:
        # Nullable wrappers and primitives are fully specified already.
        return expr

    arity = index.choose_arity(name, len(method_generic_params))
    if arity is None:
        return expr
    arguments = []
    for slot in range(arity):
        if slot < len(method_generic_params):
            arguments.append(GenericParameterType(method_generic_params[slot]))
        else:
            arguments.append(PrimitiveType(placeholder))
    return NamedType(f"{name}`{arity}", tuple(arguments))


def upgrade_to_known_generic(
    type_str: str,
    index: GenericArityIndex,
    method_generic_params: Sequence[str] = (),
    placeholder: str = "Dynamic",
) -> str:
    """Rewrite a bare generic base name into an instantiation.

    ``Sandbox.Pool`` with ``Sandbox.Pool`1`` known and no method generics
    becomes ``Sandbox.Pool`1<Dynamic>``; inside ``Get<T>()`` it becomes
    ``Sandbox.Pool`1<T>``.  Arrays are upgraded element-wise.  Strings that
    already carry arguments or an arity marker are returned unchanged.
    """

    type_str = (type_str or "").strip()
    if not type_str:
        return type_str
    expr = parse_type_expr(type_str, frozenset({placeholder}))
    upgraded = upgrade_type_expr(expr, index, method_generic_params, placeholder)
    if upgraded is expr:
        return type_str
    return format_schema(upgraded)
