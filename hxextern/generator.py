"""End-to-end generation of Haxe extern files.

The generator runs in three phases:

1. reflected runtime types are converted into schema descriptors,
2. the generic arity index is built once from the generic definitions among
   them and frozen into a :class:`GenerationContext`,
3. every descriptor is rendered independently against that context and the
   resulting text is written below the output root.

Phase three only reads the shared context, so rendering order has no effect
on the produced text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .emitter import MemberEmitter, extern_type_name, render_extern
from .generics import GenericArityIndex
from .model import TypeDescriptor
from .naming import is_compiler_generated_name
from .options import DEFAULT_OPTIONS, ExternOptions
from .packages import PackageInfo, PackageMapper
from .reflection import ReflectionDump, RuntimeType, collect_types
from .schema import SchemaBuilder
from .type_mapper import TypeMapper

__all__ = [
    "GenerationContext",
    "GenerationSummary",
    "RenderedExtern",
    "ExternGenerator",
    "generate_from_dump",
]


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationContext:
    """Read-only state shared by every per-type rendering step of one run."""

    options: ExternOptions
    index: GenericArityIndex
    packages: PackageMapper
    mapper: TypeMapper
    emitter: MemberEmitter

    @classmethod
    def build(
        cls, descriptors: Iterable[TypeDescriptor], options: ExternOptions = DEFAULT_OPTIONS
    ) -> "GenerationContext":
        index = GenericArityIndex.from_types(descriptors)
        packages = PackageMapper(options)
        mapper = TypeMapper(index, options, packages)
        return cls(options, index, packages, mapper, MemberEmitter(mapper))


@dataclass(frozen=True)
class RenderedExtern:
    """The text of one extern file and where it belongs."""

    native_name: str
    type_name: str
    package: PackageInfo
    text: str
    member_count: int

    def output_path(self, out_root: Path, extension: str) -> Path:
        return self.package.output_dir(out_root) / f"{self.type_name}.{extension}"


@dataclass(frozen=True)
class GenerationSummary:
    out_root: Path
    type_count: int
    member_count: int
    written: Tuple[Path, ...] = ()

    def describe(self) -> str:
        return f"Done. Types: {self.type_count}, Members: {self.member_count}\n{self.out_root}"

    def __str__(self) -> str:
        return self.describe()


class ExternGenerator:
    """Render and write one extern file per exportable host type."""

    def __init__(self, options: ExternOptions = DEFAULT_OPTIONS) -> None:
        self.options = options
        self.schema = SchemaBuilder()

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    def render(
        self, descriptor: TypeDescriptor, context: GenerationContext
    ) -> Optional[RenderedExtern]:
        """Render ``descriptor`` or return ``None`` when it has to be skipped."""

        native_name = descriptor.full_name.strip() or (descriptor.name or "").strip()
        if not native_name:
            return None
        if is_compiler_generated_name(native_name):
            logger.debug("skipping compiler generated type %s", native_name)
            return None

        try:
            groups = context.emitter.member_groups(descriptor)
            package = context.packages.package_for_type(descriptor.namespace)
            text = render_extern(
                descriptor,
                package,
                groups,
                indent=self.options.indent,
                default_type_name=self.options.default_type_name,
            )
        except (ValueError, RecursionError) as exc:
            logger.warning("skipping type %s: %s", native_name, exc)
            return None

        type_name = extern_type_name(descriptor, self.options.default_type_name)
        member_count = sum(len(group) for group in groups)
        logger.debug("%s: %d members", native_name, member_count)
        return RenderedExtern(native_name, type_name, package, text, member_count)

    def render_all(
        self, descriptors: Sequence[TypeDescriptor], context: Optional[GenerationContext] = None
    ) -> List[RenderedExtern]:
        context = context or GenerationContext.build(descriptors, self.options)
        rendered = []
        for descriptor in descriptors:
            extern = self.render(descriptor, context)
            if extern is not None:
                rendered.append(extern)
        return rendered

    # ------------------------------------------------------------------
    # writing
    # ------------------------------------------------------------------
    def generate(self, descriptors: Sequence[TypeDescriptor], out_root: Path) -> GenerationSummary:
        """Write externs for ``descriptors`` below ``out_root``.

        I/O errors propagate and abort the run; files written before the
        failure are left in place.
        """

        if not str(out_root).strip():
            raise ValueError("output root must not be empty")
        out_root = Path(out_root)
        out_root.mkdir(parents=True, exist_ok=True)

        owners: Dict[Path, str] = {}
        type_count = 0
        member_count = 0
        for extern in self.render_all(descriptors):
            path = extern.output_path(out_root, self.options.extension)
            previous = owners.get(path)
            if previous is not None:
                logger.warning(
                    "%s overwrites the extern generated for %s at %s",
                    extern.native_name,
                    previous,
                    path,
                )
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(extern.text, "utf-8")
            owners[path] = extern.native_name
            type_count += 1
            member_count += extern.member_count

        summary = GenerationSummary(out_root, type_count, member_count, tuple(owners))
        logger.info("generated %d externs with %d members", type_count, member_count)
        return summary

    def generate_from_runtime(
        self, runtime_types: Iterable[RuntimeType], out_root: Path
    ) -> GenerationSummary:
        descriptors = self.schema.build_all(runtime_types)
        return self.generate(descriptors, out_root)


def generate_from_dump(
    dump_path: Path, out_root: Path, options: ExternOptions = DEFAULT_OPTIONS
) -> GenerationSummary:
    """Load a reflection dump and generate externs for its exportable types."""

    dump = ReflectionDump.load(dump_path)
    runtime_types = collect_types(dump, options.root_namespace)
    logger.info("%s: %d exportable types", dump_path, len(runtime_types))
    return ExternGenerator(options).generate_from_runtime(runtime_types, out_root)
