"""Translate schema strings into Haxe type syntax."""

from __future__ import annotations

from typing import Dict, Optional

from .generics import GenericArityIndex
from .naming import sanitize_type_name
from .options import DEFAULT_OPTIONS, ExternOptions
from .packages import PackageMapper
from .typeexpr import (
    ArrayType,
    GenericParameterType,
    NamedType,
    NullableType,
    PrimitiveType,
    TypeExpr,
    parse_type_expr,
)

__all__ = ["HOST_PRIMITIVES", "TypeMapper", "normalize_key_type"]


HOST_PRIMITIVES: Dict[str, str] = {
    "System.Void": "Void",
    "System.Boolean": "Bool",
    "System.String": "String",
    "System.Single": "Float",
    "System.Double": "Float",
    "System.Decimal": "Float",
    "System.Int16": "Int",
    "System.UInt16": "Int",
    "System.Int32": "Int",
    "System.Byte": "Int",
    "System.SByte": "Int",
    "System.UInt32": "UInt",
}

_INT64 = "System.Int64"
_OBJECT = "System.Object"


def normalize_key_type(mapped: str) -> str:
    """Strip a ``Null<...>`` wrapper so nullable and plain shapes compare equal."""

    mapped = mapped.strip()
    if mapped.startswith("Null<") and mapped.endswith(">"):
        return mapped[5:-1].strip()
    return mapped


class TypeMapper:
    """Total, side-effect free mapping from schema strings to Haxe types.

    Host primitives map onto Haxe's core types, arrays and the nullable value
    wrapper onto ``Array<T>`` and ``Null<T>``, names that look like generic
    parameters are kept verbatim and user types below the root namespace are
    rewritten into their Haxe package.  Anything else is erased to the dynamic
    placeholder; a generic instantiation whose base is erased is erased as a
    whole.
    """

    def __init__(
        self,
        index: Optional[GenericArityIndex] = None,
        options: ExternOptions = DEFAULT_OPTIONS,
        packages: Optional[PackageMapper] = None,
    ) -> None:
        self.index = index or GenericArityIndex()
        self.options = options
        self.packages = packages or PackageMapper(options)
        self._keywords = options.target_keywords
        self._cache: Dict[str, str] = {}

    def parse(self, type_str: str) -> TypeExpr:
        return parse_type_expr(type_str, self._keywords)

    def map(self, type_str: str) -> str:
        type_str = (type_str or "").strip()
        cached = self._cache.get(type_str)
        if cached is None:
            cached = self.map_expr(self.parse(type_str))
            self._cache[type_str] = cached
        return cached

    def map_key(self, type_str: str) -> str:
        """Mapped type as used inside deduplication keys."""

        return normalize_key_type(self.map(type_str))

    def map_expr(self, expr: TypeExpr) -> str:
        dynamic = self.options.dynamic_type
        if isinstance(expr, PrimitiveType):
            return expr.keyword
        if isinstance(expr, GenericParameterType):
            return expr.identifier
        if isinstance(expr, ArrayType):
            return f"Array<{self.map_expr(expr.element)}>"
        if isinstance(expr, NullableType):
            return f"Null<{self.map_expr(expr.inner)}>"
        if isinstance(expr, NamedType):
            return self._map_named(expr)
        return dynamic

    def _map_named(self, expr: NamedType) -> str:
        dynamic = self.options.dynamic_type
        name = expr.name
        arguments = expr.arguments
        if not arguments:
            arity = self.index.instantiation_arity(name)
            if arity:
                arguments = (PrimitiveType(dynamic),) * arity

        primitive = HOST_PRIMITIVES.get(name)
        if primitive is not None:
            return primitive
        if name == _INT64:
            return self.options.int64_type
        if name == _OBJECT:
            return dynamic

        mapped_base = self._map_user_type(expr)
        if not arguments:
            return mapped_base
        if mapped_base == dynamic:
            return dynamic
        return f"{mapped_base}<{','.join(self.map_expr(arg) for arg in arguments)}>"

    def _map_user_type(self, expr: NamedType) -> str:
        package = self.packages.package_for_reference(expr.namespace)
        if package is None:
            return self.options.dynamic_type
        type_name = sanitize_type_name(expr.simple_name, self.options.default_type_name)
        return f"{package}.{type_name}"
