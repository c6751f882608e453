"""Dataclasses describing host types in their canonical schema form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .typeexpr import split_generic_type


@dataclass(frozen=True)
class Parameter:
    """A named parameter; ``type`` is a schema string."""

    name: str
    type: str


@dataclass(frozen=True)
class ConstructorDescriptor:
    parameters: Tuple[Parameter, ...] = ()
    is_public: bool = True


@dataclass(frozen=True)
class PropertyDescriptor:
    """A property with its visible accessors.

    ``has_get``/``has_set`` are ``True`` only when the accessor exists and is
    visible to the scripting side.
    """

    name: str
    type: str
    has_get: bool = True
    has_set: bool = True
    summary: Optional[str] = None


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    return_type: str
    is_static: bool = False
    is_protected: bool = False
    generic_parameters: Tuple[str, ...] = ()
    parameters: Tuple[Parameter, ...] = ()
    summary: Optional[str] = None


@dataclass(frozen=True)
class TypeDescriptor:
    """Everything the emitter needs to know about one host type.

    ``full_name`` is the canonical schema name: nested separators are already
    normalised to dots and open generic definitions carry both their arity
    marker and their parameter list (``Sandbox.Pool`1<T>``).
    """

    full_name: str
    name: str
    constructors: Tuple[ConstructorDescriptor, ...] = ()
    properties: Tuple[PropertyDescriptor, ...] = ()
    methods: Tuple[MethodDescriptor, ...] = ()
    generic_parameters: Tuple[str, ...] = field(default=())

    @property
    def is_generic_definition(self) -> bool:
        return bool(self.generic_parameters)

    @property
    def base_name(self) -> str:
        """The schema name without its generic parameter list."""

        return split_generic_type(self.full_name).base

    @property
    def namespace(self) -> str:
        base = self.base_name
        dot = base.rfind(".")
        return base[:dot] if dot >= 0 else ""

    def type_parameters(self) -> Tuple[str, ...]:
        """Parameter names declared in the schema name's bracket list."""

        return tuple(arg for arg in split_generic_type(self.full_name).args if arg)


__all__ = [
    "Parameter",
    "ConstructorDescriptor",
    "PropertyDescriptor",
    "MethodDescriptor",
    "TypeDescriptor",
]
