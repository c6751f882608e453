"""Derive Haxe packages and output directories from host namespaces."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .options import DEFAULT_OPTIONS, ExternOptions

__all__ = ["PackageInfo", "PackageMapper"]


@dataclass(frozen=True)
class PackageInfo:
    package: str
    relative_dir: str = ""

    def output_dir(self, root: Path) -> Path:
        return root / self.relative_dir if self.relative_dir else root


class PackageMapper:
    """Map namespaces below the accepted root onto lower-cased packages.

    ``Sandbox`` becomes the bare ``sbox`` package, ``Sandbox.UI.Controls``
    becomes ``sbox.ui.controls`` stored under ``ui/controls``.
    """

    def __init__(self, options: ExternOptions = DEFAULT_OPTIONS) -> None:
        self.options = options

    @property
    def root(self) -> PackageInfo:
        return PackageInfo(self.options.root_package)

    def resolve(self, namespace: str) -> Optional[PackageInfo]:
        """Return the package for ``namespace`` or ``None`` when it is foreign."""

        root = self.options.root_namespace
        if namespace == root:
            return self.root
        if not namespace.startswith(root + "."):
            return None
        segments = [segment.lower() for segment in namespace[len(root) + 1 :].split(".")]
        return PackageInfo(
            ".".join([self.options.root_package, *segments]),
            "/".join(segments),
        )

    def package_for_type(self, namespace: str) -> PackageInfo:
        """Like :meth:`resolve` but foreign namespaces fall back to the root."""

        return self.resolve(namespace) or self.root

    def package_for_reference(self, namespace: str) -> Optional[str]:
        """Package name used when a member refers to a type in ``namespace``.

        Types without a namespace live in the root package; foreign namespaces
        yield ``None`` so the caller can erase the reference.
        """

        if not namespace:
            return self.options.root_package
        info = self.resolve(namespace)
        return info.package if info is not None else None
