"""Loader for host reflection dumps and selection of exportable types.

The host runtime writes its reflected type catalog into a JSON document::

    {"assemblies": [{"name": "Sandbox.Engine", "types": [...]}, ...]}

Enumerating an assembly can fail on the host side (missing dependencies are
the usual culprit).  Such assemblies carry an ``error`` message and whatever
types could still be listed; the loader reports them and carries on so that a
partial catalog still produces output.  Only a document that is not a dump at
all aborts the load.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .naming import is_compiler_generated_name

__all__ = [
    "CatalogFormatError",
    "TypeRef",
    "RuntimeParameter",
    "RuntimeConstructor",
    "RuntimeProperty",
    "RuntimeMethod",
    "RuntimeType",
    "RuntimeAssembly",
    "ReflectionDump",
    "collect_types",
    "is_compiler_generated_type",
]


logger = logging.getLogger(__name__)


class CatalogFormatError(ValueError):
    """Raised when a reflection dump cannot be interpreted at all."""


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


@dataclass(frozen=True)
class TypeRef:
    """Reference to a host type as it appears in a member signature.

    ``kind`` is one of ``named``, ``array``, ``generic_parameter`` or
    ``pointer``.  Named references may carry type arguments; a named reference
    given as plain text in the dump is kept verbatim as its ``name``.
    """

    kind: str
    name: str = ""
    arguments: Tuple["TypeRef", ...] = ()
    element: Optional["TypeRef"] = None

    @classmethod
    def from_json(cls, entry: Any) -> Optional["TypeRef"]:
        if entry is None:
            return None
        if isinstance(entry, str):
            return cls("named", entry.strip()) if entry.strip() else None
        if not isinstance(entry, Mapping):
            raise ValueError(f"unsupported type reference: {entry!r}")

        kind = _str(entry.get("kind")) or "named"
        if kind in {"array", "pointer"}:
            return cls(kind, element=cls.from_json(entry.get("element")))
        if kind == "generic_parameter":
            return cls(kind, _str(entry.get("name")))
        if kind != "named":
            raise ValueError(f"unknown type reference kind: {kind}")
        arguments = tuple(
            arg
            for arg in (cls.from_json(item) for item in _list(entry.get("arguments")))
            if arg is not None
        )
        return cls("named", _str(entry.get("full_name")) or _str(entry.get("name")), arguments)


@dataclass(frozen=True)
class RuntimeParameter:
    name: str
    type: Optional[TypeRef]

    @classmethod
    def from_json(cls, entry: Mapping[str, Any]) -> "RuntimeParameter":
        return cls(_str(entry.get("name")), TypeRef.from_json(entry.get("type")))


def _parameters(entry: Mapping[str, Any]) -> Tuple[RuntimeParameter, ...]:
    return tuple(
        RuntimeParameter.from_json(item)
        for item in _list(entry.get("parameters"))
        if isinstance(item, Mapping)
    )


@dataclass(frozen=True)
class RuntimeConstructor:
    visibility: str
    is_static: bool = False
    parameters: Tuple[RuntimeParameter, ...] = ()

    @classmethod
    def from_json(cls, entry: Mapping[str, Any]) -> "RuntimeConstructor":
        return cls(
            visibility=_str(entry.get("visibility")) or "public",
            is_static=bool(entry.get("is_static", False)),
            parameters=_parameters(entry),
        )


@dataclass(frozen=True)
class RuntimeProperty:
    """A property with the visibility of each accessor (``None`` if absent)."""

    name: str
    type: Optional[TypeRef]
    getter: Optional[str] = None
    setter: Optional[str] = None
    summary: Optional[str] = None

    @classmethod
    def from_json(cls, entry: Mapping[str, Any]) -> "RuntimeProperty":
        return cls(
            name=_str(entry.get("name")),
            type=TypeRef.from_json(entry.get("type")),
            getter=_optional_str(entry.get("getter")),
            setter=_optional_str(entry.get("setter")),
            summary=_optional_str(entry.get("summary")),
        )


@dataclass(frozen=True)
class RuntimeMethod:
    name: str
    return_type: Optional[TypeRef]
    visibility: str = "public"
    is_static: bool = False
    is_special_name: bool = False
    declaring_type: Optional[str] = None
    generic_parameters: Tuple[str, ...] = ()
    parameters: Tuple[RuntimeParameter, ...] = ()
    summary: Optional[str] = None

    @classmethod
    def from_json(cls, entry: Mapping[str, Any]) -> "RuntimeMethod":
        return cls(
            name=_str(entry.get("name")),
            return_type=TypeRef.from_json(entry.get("return_type")),
            visibility=_str(entry.get("visibility")) or "public",
            is_static=bool(entry.get("is_static", False)),
            is_special_name=bool(entry.get("is_special_name", False)),
            declaring_type=_optional_str(entry.get("declaring_type")),
            generic_parameters=tuple(
                _str(name) for name in _list(entry.get("generic_parameters")) if _str(name)
            ),
            parameters=_parameters(entry),
            summary=_optional_str(entry.get("summary")),
        )


@dataclass(frozen=True)
class RuntimeType:
    """One reflected host type, before conversion into schema form."""

    full_name: str
    name: str
    namespace: str
    visibility: str = "public"
    is_pointer: bool = False
    compiler_generated: bool = False
    generic_parameters: Tuple[str, ...] = ()
    constructors: Tuple[RuntimeConstructor, ...] = ()
    properties: Tuple[RuntimeProperty, ...] = ()
    methods: Tuple[RuntimeMethod, ...] = ()
    assembly: str = ""

    @classmethod
    def from_json(cls, entry: Mapping[str, Any], assembly: str = "") -> "RuntimeType":
        full_name = _str(entry.get("full_name")).strip()
        if not full_name:
            raise ValueError("type entry without full_name")
        name = _str(entry.get("name")) or full_name.replace("+", ".").rsplit(".", 1)[-1]
        namespace = entry.get("namespace")
        if not isinstance(namespace, str):
            namespace = _derive_namespace(full_name)
        return cls(
            full_name=full_name,
            name=name,
            namespace=namespace,
            visibility=_str(entry.get("visibility")) or "public",
            is_pointer=bool(entry.get("is_pointer", False)),
            compiler_generated=bool(entry.get("compiler_generated", False)),
            generic_parameters=tuple(
                _str(param) for param in _list(entry.get("generic_parameters")) if _str(param)
            ),
            constructors=_members(entry, "constructors", RuntimeConstructor.from_json, full_name),
            properties=_members(entry, "properties", RuntimeProperty.from_json, full_name),
            methods=_members(entry, "methods", RuntimeMethod.from_json, full_name),
            assembly=assembly,
        )


def _derive_namespace(full_name: str) -> str:
    outer = full_name.split("+", 1)[0]
    dot = outer.rfind(".")
    return outer[:dot] if dot >= 0 else ""


def _members(entry: Mapping[str, Any], key: str, factory, owner: str) -> Tuple[Any, ...]:
    members = []
    for item in _list(entry.get(key)):
        if not isinstance(item, Mapping):
            logger.warning("skipping malformed %s entry on %s", key, owner)
            continue
        try:
            members.append(factory(item))
        except ValueError as exc:
            logger.warning("skipping %s entry on %s: %s", key, owner, exc)
    return tuple(members)


@dataclass(frozen=True)
class RuntimeAssembly:
    name: str
    types: Tuple[RuntimeType, ...] = ()
    error: Optional[str] = None


class ReflectionDump:
    """All assemblies recorded in one reflection dump."""

    def __init__(self, assemblies: Sequence[RuntimeAssembly], path: Optional[Path] = None) -> None:
        self.assemblies: Tuple[RuntimeAssembly, ...] = tuple(assemblies)
        self.path = path

    @classmethod
    def load(cls, path: Path) -> "ReflectionDump":
        try:
            data = json.loads(path.read_text("utf-8"))
        except json.JSONDecodeError as exc:
            raise CatalogFormatError(f"{path}: not a JSON document ({exc})") from exc
        dump = cls.from_json(data)
        dump.path = path
        return dump

    @classmethod
    def from_json(cls, data: Any) -> "ReflectionDump":
        if not isinstance(data, Mapping) or not isinstance(data.get("assemblies"), list):
            raise CatalogFormatError("reflection dump must contain an 'assemblies' list")

        assemblies: List[RuntimeAssembly] = []
        for raw in data["assemblies"]:
            if not isinstance(raw, Mapping):
                logger.warning("skipping malformed assembly entry")
                continue
            name = _str(raw.get("name"))
            error = _optional_str(raw.get("error"))
            if error is not None:
                logger.warning("assembly %s was only partially enumerated: %s", name, error)
            assemblies.append(RuntimeAssembly(name, _load_types(raw, name), error))
        return cls(assemblies)

    def iter_types(self) -> Iterable[RuntimeType]:
        for assembly in self.assemblies:
            yield from assembly.types


def _load_types(raw: Mapping[str, Any], assembly: str) -> Tuple[RuntimeType, ...]:
    types: List[RuntimeType] = []
    for entry in _list(raw.get("types")):
        if not isinstance(entry, Mapping):
            logger.warning("skipping malformed type entry in %s", assembly)
            continue
        try:
            types.append(RuntimeType.from_json(entry, assembly))
        except ValueError as exc:
            logger.warning("skipping type entry in %s: %s", assembly, exc)
    return tuple(types)


def is_compiler_generated_type(runtime_type: RuntimeType) -> bool:
    if runtime_type.compiler_generated:
        return True
    return is_compiler_generated_name(runtime_type.name) or is_compiler_generated_name(
        runtime_type.full_name
    )


_VISIBLE_TYPES = {"public", "nested_public"}


def collect_types(dump: ReflectionDump, root_namespace: str) -> List[RuntimeType]:
    """Select the exportable types of ``dump``, deduplicated by full name.

    Only assemblies named ``<root>.*`` are enumerated.  A type qualifies when
    it is public (or nested public), is not a pointer, is not compiler
    generated and lives in the root namespace, below it or in no namespace.
    """

    prefix = (root_namespace + ".").lower()
    selected: Dict[str, RuntimeType] = {}
    for assembly in dump.assemblies:
        if not assembly.name.lower().startswith(prefix):
            continue
        for runtime_type in assembly.types:
            if runtime_type.is_pointer or runtime_type.visibility not in _VISIBLE_TYPES:
                continue
            if is_compiler_generated_type(runtime_type):
                logger.debug("skipping compiler generated type %s", runtime_type.full_name)
                continue
            namespace = runtime_type.namespace
            if namespace and namespace != root_namespace and not namespace.startswith(
                root_namespace + "."
            ):
                continue
            selected.setdefault(runtime_type.full_name, runtime_type)
    return list(selected.values())
