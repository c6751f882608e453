"""Public package exports for the Haxe extern generator."""

from .emitter import MemberEmitter, MemberGroup, render_extern
from .generator import (
    ExternGenerator,
    GenerationContext,
    GenerationSummary,
    generate_from_dump,
)
from .generics import GenericArityIndex, upgrade_to_known_generic
from .model import (
    ConstructorDescriptor,
    MethodDescriptor,
    Parameter,
    PropertyDescriptor,
    TypeDescriptor,
)
from .naming import is_compiler_generated_name, sanitize_member_name, sanitize_type_name
from .options import ExternOptions
from .packages import PackageInfo, PackageMapper
from .reflection import CatalogFormatError, ReflectionDump, collect_types
from .schema import SchemaBuilder, type_to_schema_name
from .type_mapper import TypeMapper
from .typeexpr import (
    extract_type_tokens,
    is_generic_param_name,
    parse_type_expr,
    split_generic_type,
)

__all__ = [
    "ExternOptions",
    "ReflectionDump",
    "CatalogFormatError",
    "collect_types",
    "SchemaBuilder",
    "type_to_schema_name",
    "TypeDescriptor",
    "ConstructorDescriptor",
    "PropertyDescriptor",
    "MethodDescriptor",
    "Parameter",
    "GenericArityIndex",
    "upgrade_to_known_generic",
    "split_generic_type",
    "parse_type_expr",
    "extract_type_tokens",
    "is_generic_param_name",
    "TypeMapper",
    "MemberEmitter",
    "MemberGroup",
    "render_extern",
    "PackageInfo",
    "PackageMapper",
    "sanitize_type_name",
    "sanitize_member_name",
    "is_compiler_generated_name",
    "ExternGenerator",
    "GenerationContext",
    "GenerationSummary",
    "generate_from_dump",
]
