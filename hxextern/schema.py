"""Convert reflected runtime types into canonical schema descriptors."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .model import (
    ConstructorDescriptor,
    MethodDescriptor,
    Parameter,
    PropertyDescriptor,
    TypeDescriptor,
)
from .reflection import (
    RuntimeMethod,
    RuntimeParameter,
    RuntimeProperty,
    RuntimeType,
    TypeRef,
)
from .typeexpr import NULLABLE_BASE, OBJECT_BASE

__all__ = [
    "PUBLIC",
    "PROTECTED",
    "SchemaBuilder",
    "normalize_nested",
    "type_to_schema_name",
]


logger = logging.getLogger(__name__)


PUBLIC = frozenset({"public"})
PROTECTED = frozenset({"protected", "protected_internal"})
VOID_BASE = "System.Void"


def normalize_nested(name: str) -> str:
    """Replace the host's nested-type separator with a dot."""

    return name.replace("+", ".")


def type_to_schema_name(ref: Optional[TypeRef]) -> str:
    """Render a runtime type reference as a schema string.

    Arrays append ``[]`` to their element, generic parameters keep their bare
    name, constructed generics repeat their definition name (with its arity
    marker) followed by the bracketed argument list.  A missing reference is
    the root object type.
    """

    if ref is None:
        return OBJECT_BASE
    if ref.kind == "array":
        return type_to_schema_name(ref.element) + "[]"
    if ref.kind == "pointer":
        return type_to_schema_name(ref.element)
    if ref.kind == "generic_parameter":
        return ref.name or OBJECT_BASE
    name = normalize_nested(ref.name) or OBJECT_BASE
    if not ref.arguments:
        return name
    if name == NULLABLE_BASE:
        return f"{NULLABLE_BASE}<{type_to_schema_name(ref.arguments[0])}>"
    return f"{name}<{','.join(type_to_schema_name(arg) for arg in ref.arguments)}>"


class SchemaBuilder:
    """Build :class:`TypeDescriptor` objects from :class:`RuntimeType` entries.

    Only members a scripting language can reach survive: public instance
    constructors, properties with at least one public accessor and public or
    protected methods declared directly on the type.  Compiler synthesised
    accessor methods (``get_X``/``set_X``/``op_*`` special names) are dropped
    because the properties and operators they implement are described
    separately.
    """

    def build(self, runtime_type: RuntimeType) -> TypeDescriptor:
        full_name = normalize_nested(runtime_type.full_name)
        if runtime_type.generic_parameters:
            full_name = f"{full_name}<{','.join(runtime_type.generic_parameters)}>"

        constructors = tuple(
            ConstructorDescriptor(self._parameters(ctor.parameters))
            for ctor in runtime_type.constructors
            if ctor.visibility in PUBLIC and not ctor.is_static
        )
        properties = tuple(
            descriptor
            for descriptor in (self._property(prop) for prop in runtime_type.properties)
            if descriptor is not None
        )
        methods = tuple(
            descriptor
            for descriptor in (
                self._method(method, runtime_type.full_name) for method in runtime_type.methods
            )
            if descriptor is not None
        )
        return TypeDescriptor(
            full_name=full_name,
            name=runtime_type.name,
            constructors=constructors,
            properties=properties,
            methods=methods,
            generic_parameters=runtime_type.generic_parameters,
        )

    def build_all(self, runtime_types: Iterable[RuntimeType]) -> List[TypeDescriptor]:
        descriptors: List[TypeDescriptor] = []
        for runtime_type in runtime_types:
            try:
                descriptor = self.build(runtime_type)
            except ValueError as exc:
                logger.warning("skipping type %s: %s", runtime_type.full_name, exc)
                continue
            if descriptor.full_name.strip():
                descriptors.append(descriptor)
        return descriptors

    # ------------------------------------------------------------------
    # members
    # ------------------------------------------------------------------
    @staticmethod
    def _parameters(parameters: Iterable[RuntimeParameter]) -> tuple:
        return tuple(
            Parameter(param.name.strip() or f"arg{index}", type_to_schema_name(param.type))
            for index, param in enumerate(parameters)
        )

    @staticmethod
    def _accessor_visible(visibility: Optional[str]) -> bool:
        return visibility is not None and (visibility in PUBLIC or visibility in PROTECTED)

    def _property(self, prop: RuntimeProperty) -> Optional[PropertyDescriptor]:
        if prop.getter not in PUBLIC and prop.setter not in PUBLIC:
            return None
        return PropertyDescriptor(
            name=prop.name,
            type=type_to_schema_name(prop.type),
            has_get=self._accessor_visible(prop.getter),
            has_set=self._accessor_visible(prop.setter),
            summary=prop.summary,
        )

    def _method(self, method: RuntimeMethod, owner: str) -> Optional[MethodDescriptor]:
        if method.is_special_name:
            return None
        if method.declaring_type is not None and normalize_nested(
            method.declaring_type
        ) != normalize_nested(owner):
            return None
        is_public = method.visibility in PUBLIC
        is_protected = method.visibility in PROTECTED
        if not is_public and not is_protected:
            return None
        return_type = VOID_BASE if method.return_type is None else type_to_schema_name(
            method.return_type
        )
        return MethodDescriptor(
            name=method.name,
            return_type=return_type,
            is_static=method.is_static,
            is_protected=is_protected,
            generic_parameters=method.generic_parameters,
            parameters=self._parameters(method.parameters),
            summary=method.summary,
        )
