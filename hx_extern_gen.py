#!/usr/bin/env python3
"""Command-line interface that turns a host reflection dump into Haxe externs."""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Optional, Sequence

from hxextern import CatalogFormatError, ExternOptions, generate_from_dump


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("dump", type=Path, help="Reflection dump written by the host runtime")
    parser.add_argument(
        "--out",
        type=Path,
        default=Path(".haxe/extern/sbox"),
        help="Root directory that receives the generated extern tree",
    )
    parser.add_argument(
        "--root-namespace",
        default=ExternOptions.root_namespace,
        help="Host namespace whose types are exported",
    )
    parser.add_argument(
        "--root-package",
        default=ExternOptions.root_package,
        help="Haxe package that mirrors the root namespace",
    )
    parser.add_argument(
        "--extension",
        default=ExternOptions.extension,
        help="File extension used for generated externs",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every skipped entry and per-type member counts",
    )
    return parser.parse_args(argv)


def validate_inputs(dump_path: Path) -> None:
    if not dump_path.exists():
        raise SystemExit(f"missing input file: {dump_path}")


def build_options(args: argparse.Namespace) -> ExternOptions:
    return ExternOptions(
        root_namespace=args.root_namespace,
        root_package=args.root_package,
        extension=args.extension.lstrip("."),
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    start_time = time.perf_counter()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    validate_inputs(args.dump)

    try:
        summary = generate_from_dump(args.dump, args.out, build_options(args))
    except CatalogFormatError as exc:
        raise SystemExit(f"invalid reflection dump: {exc}") from exc
    print(summary.describe())

    total_time = time.perf_counter() - start_time
    print(f"total execution time: {total_time:.2f}s")


if __name__ == "__main__":
    main()
