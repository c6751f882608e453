from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from hxextern.reflection import (
    CatalogFormatError,
    ReflectionDump,
    TypeRef,
    collect_types,
    is_compiler_generated_type,
)


def _type(full_name: str, **extra) -> dict:
    entry = {"full_name": full_name}
    entry.update(extra)
    return entry


def _dump(*assemblies: dict) -> ReflectionDump:
    return ReflectionDump.from_json({"assemblies": list(assemblies)})


def test_type_ref_from_json() -> None:
    assert TypeRef.from_json("System.Int32") == TypeRef("named", "System.Int32")
    assert TypeRef.from_json("") is None
    assert TypeRef.from_json({"kind": "generic_parameter", "name": "T"}) == TypeRef(
        "generic_parameter", "T"
    )

    ref = TypeRef.from_json(
        {
            "kind": "array",
            "element": {
                "full_name": "Sandbox.Pool`1",
                "arguments": ["System.String", {"kind": "generic_parameter", "name": "T"}],
            },
        }
    )
    assert ref is not None and ref.kind == "array"
    assert ref.element == TypeRef(
        "named",
        "Sandbox.Pool`1",
        (TypeRef("named", "System.String"), TypeRef("generic_parameter", "T")),
    )


def test_type_ref_rejects_unknown_kinds() -> None:
    with pytest.raises(ValueError):
        TypeRef.from_json({"kind": "function_pointer"})
    with pytest.raises(ValueError):
        TypeRef.from_json(42)


def test_runtime_type_derives_namespace_and_members() -> None:
    dump = _dump(
        {
            "name": "Sandbox.Engine",
            "types": [
                _type(
                    "Sandbox.Scene+Settings",
                    properties=[{"name": "Gravity", "type": "System.Single", "getter": "public"}],
                    methods=[{"name": "Apply", "return_type": None}],
                    constructors=[{"parameters": [{"name": "scene", "type": "Sandbox.Scene"}]}],
                )
            ],
        }
    )

    (runtime_type,) = dump.iter_types()
    assert runtime_type.namespace == "Sandbox"
    assert runtime_type.name == "Settings"
    assert runtime_type.assembly == "Sandbox.Engine"
    assert runtime_type.properties[0].getter == "public"
    assert runtime_type.properties[0].setter is None
    assert runtime_type.methods[0].return_type is None
    assert runtime_type.constructors[0].visibility == "public"


def test_partial_assemblies_are_reported_and_kept(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="hxextern.reflection"):
        dump = _dump(
            {
                "name": "Sandbox.Tools",
                "error": "Could not load file or assembly 'Editor'",
                "types": [_type("Sandbox.Tools.Gizmo"), "garbage", {"name": "NoFullName"}],
            }
        )

    assert [t.full_name for t in dump.iter_types()] == ["Sandbox.Tools.Gizmo"]
    assert dump.assemblies[0].error is not None
    messages = [record.getMessage() for record in caplog.records]
    assert any("partially enumerated" in message for message in messages)
    assert any("malformed type entry" in message for message in messages)
    assert any("without full_name" in message for message in messages)


def test_malformed_members_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="hxextern.reflection"):
        dump = _dump(
            {
                "name": "Sandbox.Engine",
                "types": [
                    _type(
                        "Sandbox.GameObject",
                        methods=[
                            {"name": "Bad", "return_type": {"kind": "unknown"}},
                            {"name": "Good", "return_type": "System.Void"},
                            7,
                        ],
                    )
                ],
            }
        )

    (runtime_type,) = dump.iter_types()
    assert [method.name for method in runtime_type.methods] == ["Good"]
    assert len(caplog.records) == 2


@pytest.mark.parametrize("data", [[], {"types": []}, {"assemblies": {}}, "assemblies"])
def test_non_dump_documents_are_rejected(data: object) -> None:
    with pytest.raises(CatalogFormatError):
        ReflectionDump.from_json(data)


def test_load_reads_json_file(tmp_path: Path) -> None:
    path = tmp_path / "dump.json"
    path.write_text(
        json.dumps({"assemblies": [{"name": "Sandbox.Engine", "types": [_type("Sandbox.GameObject")]}]}),
        "utf-8",
    )

    dump = ReflectionDump.load(path)

    assert dump.path == path
    assert [t.full_name for t in dump.iter_types()] == ["Sandbox.GameObject"]


def test_load_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "dump.json"
    path.write_text("{not json", "utf-8")

    with pytest.raises(CatalogFormatError):
        ReflectionDump.load(path)


def test_load_propagates_missing_file(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        ReflectionDump.load(tmp_path / "missing.json")


def test_collect_types_filters_the_catalog() -> None:
    dump = _dump(
        {
            "name": "Sandbox.Engine",
            "types": [
                _type("Sandbox.GameObject"),
                _type("Sandbox.UI.Panel"),
                _type("Bare", namespace=""),
                _type("Sandbox.Hidden", visibility="internal"),
                _type("Sandbox.Scene+Settings", visibility="nested_public"),
                _type("Sandbox.Ptr", is_pointer=True),
                _type("Sandbox.Scene+<>c"),
                _type("Sandbox.Lambda", compiler_generated=True),
                _type("System.String"),
                _type("SandboxExtras.Widget"),
            ],
        },
        {"name": "sandbox.game", "types": [_type("Sandbox.GameObject"), _type("Sandbox.Player")]},
        {"name": "System.Private.CoreLib", "types": [_type("Sandbox.Leaked")]},
        {"name": "Sandbox", "types": [_type("Sandbox.Unlisted")]},
    )

    selected = [t.full_name for t in collect_types(dump, "Sandbox")]

    assert selected == [
        "Sandbox.GameObject",
        "Sandbox.UI.Panel",
        "Bare",
        "Sandbox.Scene+Settings",
        "Sandbox.Player",
    ]


def test_compiler_generated_flag_or_name() -> None:
    (plain, flagged, closure) = _dump(
        {
            "name": "Sandbox.Engine",
            "types": [
                _type("Sandbox.GameObject"),
                _type("Sandbox.Lambda", compiler_generated=True),
                _type("Sandbox.Scene+<>c__DisplayClass4_0"),
            ],
        }
    ).iter_types()

    assert not is_compiler_generated_type(plain)
    assert is_compiler_generated_type(flagged)
    assert is_compiler_generated_type(closure)
