"""Deduplicate, order and render the members of one host type.

Host APIs routinely expose overload sets that collapse once their parameter
types are mapped (``int``/``short`` both become ``Int``, ``T?`` and ``T``
differ only by ``Null<>``).  Haxe rejects duplicate overloads, so every member
kind is reduced to one declaration per *canonical signature key* before it is
rendered.  The surviving members are ordered by parameter count and then by
key which makes the output independent of the order the host enumerated them
in.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .generics import GenericArityIndex, upgrade_to_known_generic
from .hx_formatter import HaxeWriter, escape_haxe_string
from .model import (
    ConstructorDescriptor,
    MethodDescriptor,
    Parameter,
    PropertyDescriptor,
    TypeDescriptor,
)
from .naming import ParameterNameAllocator, sanitize_member_name, sanitize_type_name
from .packages import PackageInfo
from .type_mapper import TypeMapper
from .typeexpr import extract_type_tokens, is_generic_param_name, simple_name

__all__ = [
    "MemberGroup",
    "MemberEmitter",
    "accessor_mode",
    "collect_generic_params",
    "extern_type_name",
    "render_extern",
]


@dataclass(frozen=True)
class MemberGroup:
    """Declarations emitted together under one optional doc comment."""

    name: str
    lines: Tuple[str, ...]
    summary: Optional[str] = None
    overloaded: bool = False

    def __len__(self) -> int:
        return len(self.lines)


def accessor_mode(has_get: bool, has_set: bool) -> Optional[str]:
    """Return the Haxe accessor pair for a property.

    ``None`` means the property is declared as a plain ``var`` without an
    accessor list.
    """

    if has_get and has_set:
        return "get,set"
    if has_get:
        return "get,never"
    if has_set:
        return "never,set"
    return None


def collect_generic_params(method: MethodDescriptor) -> List[str]:
    """Generic parameter names used by the method's return and parameter types."""

    found = set()
    for type_str in (method.return_type, *(param.type for param in method.parameters)):
        for token in extract_type_tokens(type_str):
            if is_generic_param_name(token):
                found.add(token.strip())
    return sorted(found)


class MemberEmitter:
    """Render constructors, properties and methods of a :class:`TypeDescriptor`."""

    def __init__(self, mapper: TypeMapper) -> None:
        self.mapper = mapper

    @property
    def index(self) -> GenericArityIndex:
        return self.mapper.index

    # ------------------------------------------------------------------
    # parameters
    # ------------------------------------------------------------------
    def format_parameters(self, parameters: Sequence[Parameter]) -> str:
        allocator = ParameterNameAllocator()
        rendered = []
        for index, param in enumerate(parameters):
            name = allocator.allocate(param.name, index)
            rendered.append(f"{name}:{self.mapper.map(param.type)}")
        return ", ".join(rendered)

    def _parameter_key(self, parameters: Sequence[Parameter]) -> str:
        return ",".join(self.mapper.map_key(param.type) for param in parameters)

    # ------------------------------------------------------------------
    # constructors
    # ------------------------------------------------------------------
    def constructors(self, constructors: Iterable[ConstructorDescriptor]) -> MemberGroup:
        unique: Dict[str, ConstructorDescriptor] = {}
        for ctor in constructors:
            if not ctor.is_public:
                continue
            key = f"new({self._parameter_key(ctor.parameters)})"
            unique.setdefault(key, ctor)

        ordered = sorted(unique.items(), key=lambda item: item[0])
        overloaded = len(ordered) > 1
        prefix = "overload " if overloaded else ""
        lines = tuple(
            f"{prefix}function new({self.format_parameters(ctor.parameters)}):Void;"
            for _, ctor in ordered
        )
        return MemberGroup("new", lines, overloaded=overloaded)

    # ------------------------------------------------------------------
    # properties
    # ------------------------------------------------------------------
    def property(self, prop: PropertyDescriptor) -> Optional[MemberGroup]:
        name = (prop.name or "").strip()
        if not name:
            return None
        type_str = prop.type or "System.Object"
        mapped = self.mapper.map(type_str)
        mode = accessor_mode(prop.has_get, prop.has_set)
        member = sanitize_member_name(name)
        if mode is None:
            line = f"var {member}:{mapped};"
        else:
            line = f"var {member}({mode}):{mapped};"
        return MemberGroup(name, (line,), summary=_clean_summary(prop.summary))

    # ------------------------------------------------------------------
    # methods
    # ------------------------------------------------------------------
    def prepare_method(self, method: MethodDescriptor) -> MethodDescriptor:
        """Apply the generic upgrade to the method's return and parameter types."""

        generics = method.generic_parameters
        placeholder = self.mapper.options.dynamic_type
        return_type = upgrade_to_known_generic(
            method.return_type or "System.Void", self.index, generics, placeholder
        )
        parameters = tuple(
            dataclasses.replace(
                param,
                type=upgrade_to_known_generic(param.type, self.index, generics, placeholder),
            )
            for param in method.parameters
        )
        return dataclasses.replace(method, return_type=return_type, parameters=parameters)

    def signature_key(self, method: MethodDescriptor, generics: Sequence[str]) -> str:
        staticness = "S" if method.is_static else "I"
        protection = "P" if method.is_protected else "U"
        return (
            f"{staticness}{protection}|{method.name}|<{','.join(generics)}>|"
            f"{self.mapper.map(method.return_type)}|({self._parameter_key(method.parameters)})"
        )

    def method_groups(self, methods: Iterable[MethodDescriptor]) -> List[MemberGroup]:
        by_name: Dict[str, List[MethodDescriptor]] = {}
        for method in methods:
            name = (method.name or "").strip()
            if not name:
                continue
            by_name.setdefault(name, []).append(self.prepare_method(method))

        groups: List[MemberGroup] = []
        for name in sorted(by_name):
            group = self.method_group(name, by_name[name])
            if group is not None:
                groups.append(group)
        return groups

    def method_group(
        self, name: str, methods: Sequence[MethodDescriptor]
    ) -> Optional[MemberGroup]:
        unique: Dict[str, Tuple[MethodDescriptor, List[str]]] = {}
        for method in methods:
            generics = collect_generic_params(method)
            key = self.signature_key(method, generics)
            unique.setdefault(key, (method, generics))
        if not unique:
            return None

        ordered = sorted(
            unique.items(), key=lambda item: (len(item[1][0].parameters), item[0])
        )
        overloaded = len(ordered) > 1
        lines = tuple(
            self._method_line(method, generics, overloaded)
            for _, (method, generics) in ordered
        )
        summary = next(
            (text for text in (_clean_summary(m.summary) for m in methods) if text), None
        )
        return MemberGroup(name, lines, summary=summary, overloaded=overloaded)

    def _method_line(
        self, method: MethodDescriptor, generics: Sequence[str], overloaded: bool
    ) -> str:
        parts = []
        if method.is_protected:
            parts.append("@:protected ")
        if method.is_static:
            parts.append("static ")
        if overloaded:
            parts.append("overload ")
        generic_part = f"<{','.join(generics)}>" if generics else ""
        parts.append(
            f"function {sanitize_member_name(method.name)}{generic_part}"
            f"({self.format_parameters(method.parameters)}):"
            f"{self.mapper.map(method.return_type)};"
        )
        return "".join(parts)

    # ------------------------------------------------------------------
    # whole type
    # ------------------------------------------------------------------
    def member_groups(self, descriptor: TypeDescriptor) -> List[MemberGroup]:
        groups: List[MemberGroup] = []
        ctor_group = self.constructors(descriptor.constructors)
        if ctor_group.lines:
            groups.append(ctor_group)
        for prop in descriptor.properties:
            group = self.property(prop)
            if group is not None:
                groups.append(group)
        groups.extend(self.method_groups(descriptor.methods))
        return groups


def _clean_summary(summary: Optional[str]) -> Optional[str]:
    if summary is None:
        return None
    summary = summary.strip()
    return summary or None


def extern_type_name(descriptor: TypeDescriptor, default: str = "Type") -> str:
    """Sanitized Haxe class name for ``descriptor``."""

    return sanitize_type_name(simple_name(descriptor.base_name or descriptor.name), default)


def render_extern(
    descriptor: TypeDescriptor,
    package: PackageInfo,
    groups: Sequence[MemberGroup],
    *,
    indent: str = "  ",
    default_type_name: str = "Type",
) -> str:
    """Assemble the complete extern file for ``descriptor``."""

    type_name = extern_type_name(descriptor, default_type_name)
    params = descriptor.type_parameters()
    type_params = f"<{','.join(params)}>" if params else ""

    writer = HaxeWriter(indent)
    writer.write_line(f"package {package.package};")
    writer.write_line()
    writer.write_line(f'@:native("{escape_haxe_string(descriptor.full_name or descriptor.name)}")')
    writer.write_line(f"extern class {type_name}{type_params} {{")
    with writer.indented():
        for group in groups:
            writer.write_doc(group.summary or "")
            writer.write_lines(group.lines)
    writer.write_line("}")
    return writer.render()
