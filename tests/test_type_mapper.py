import pytest

from hxextern.generics import GenericArityIndex, upgrade_to_known_generic
from hxextern.options import ExternOptions
from hxextern.type_mapper import TypeMapper, normalize_key_type
from hxextern.typeexpr import MAX_TYPE_DEPTH, extract_type_tokens


@pytest.fixture
def mapper() -> TypeMapper:
    return TypeMapper(GenericArityIndex({"Sandbox.Pool": [1], "Sandbox.Map": [2]}))


@pytest.mark.parametrize(
    "schema,expected",
    [
        ("System.Boolean", "Bool"),
        ("System.Byte", "Int"),
        ("System.SByte", "Int"),
        ("System.Int16", "Int"),
        ("System.UInt16", "Int"),
        ("System.Int32", "Int"),
        ("System.UInt32", "UInt"),
        ("System.Int64", "haxe.Int64"),
        ("System.Single", "Float"),
        ("System.Double", "Float"),
        ("System.Decimal", "Float"),
        ("System.String", "String"),
        ("System.Void", "Void"),
        ("System.Object", "Dynamic"),
    ],
)
def test_primitives(mapper: TypeMapper, schema: str, expected: str) -> None:
    assert mapper.map(schema) == expected


@pytest.mark.parametrize("keyword", ["Dynamic", "Void", "Int", "UInt", "Float", "Bool", "String"])
def test_target_keywords_pass_through(mapper: TypeMapper, keyword: str) -> None:
    assert mapper.map(keyword) == keyword
    assert mapper.map(mapper.map(keyword)) == keyword


def test_empty_input_erases(mapper: TypeMapper) -> None:
    assert mapper.map("") == "Dynamic"


def test_arrays_and_nullables(mapper: TypeMapper) -> None:
    assert mapper.map("System.Int32[]") == "Array<Int>"
    assert mapper.map("System.String[][]") == "Array<Array<String>>"
    assert mapper.map("System.Nullable`1<System.Single>") == "Null<Float>"
    assert mapper.map("System.Nullable`1<System.Int32>[]") == "Array<Null<Int>>"


@pytest.mark.parametrize(
    "schema",
    [
        "System.Int32",
        "Sandbox.GameObject",
        "Sandbox.Map`2<System.String,Sandbox.Pool`1<T>>",
        "System.IO.Stream",
        "TKey",
        "",
    ],
)
def test_array_mapping_wraps_element_mapping(mapper: TypeMapper, schema: str) -> None:
    assert mapper.map(schema + "[]") == f"Array<{mapper.map(schema)}>"


def test_user_types_follow_namespace(mapper: TypeMapper) -> None:
    assert mapper.map("Sandbox.GameObject") == "sbox.GameObject"
    assert mapper.map("Sandbox.UI.Panel") == "sbox.ui.Panel"
    assert mapper.map("Sandbox.UI.Panel.Style") == "sbox.ui.panel.Style"
    assert mapper.map("Bare") == "sbox.Bare"


def test_foreign_types_are_erased(mapper: TypeMapper) -> None:
    assert mapper.map("System.IO.Stream") == "Dynamic"
    assert mapper.map("System.Collections.Generic.List`1<System.Int32>") == "Dynamic"
    assert mapper.map("SandboxTools.Widget") == "Dynamic"


def test_generic_instantiations(mapper: TypeMapper) -> None:
    assert mapper.map("Sandbox.Pool`1<Sandbox.GameObject>") == "sbox.Pool<sbox.GameObject>"
    assert (
        mapper.map("Sandbox.Map`2<System.String,System.Collections.Generic.List`1<T>>")
        == "sbox.Map<String,Dynamic>"
    )


def test_known_generic_without_arguments_is_reinstantiated(mapper: TypeMapper) -> None:
    assert mapper.map("Sandbox.Pool`1") == "sbox.Pool<Dynamic>"
    assert mapper.map("Sandbox.Map") == "sbox.Map<Dynamic,Dynamic>"
    assert mapper.map("Sandbox.Unknown`1") == "sbox.Unknown"


def test_generic_parameter_names_are_kept(mapper: TypeMapper) -> None:
    assert mapper.map("T") == "T"
    assert mapper.map("TValue[]") == "Array<TValue>"
    # Naming-convention heuristic: a concrete type shaped like a parameter.
    assert mapper.map("Sandbox.TLight") == "TLight"


@pytest.mark.parametrize(
    "schema",
    [
        "<",
        ">",
        "[]",
        ",,,",
        "Foo<",
        "Foo<<Bar>",
        "A<B,C",
        "Sandbox.X<>",
        "System.Nullable`1<>",
        "Sandbox.Pool`1<" * 40 + "System.Int32" + ">" * 40,
        "Sandbox.Pool`1<" * 1000 + "System.Int32" + ">" * 1000,
        "System.Int32" + "[]" * 2000,
        "System.Nullable`1<" * 1000 + "System.Int32" + ">" * 1000,
    ],
)
def test_mapping_is_total(mapper: TypeMapper, schema: str) -> None:
    result = mapper.map(schema)

    assert isinstance(result, str)
    assert result


def test_nesting_within_limit_is_kept() -> None:
    schema = "Sandbox.Pool`1<" * 40 + "System.Int32" + ">" * 40

    assert TypeMapper().map(schema) == "sbox.Pool<" * 40 + "Int" + ">" * 40


def test_nesting_beyond_limit_is_erased() -> None:
    levels = MAX_TYPE_DEPTH + 1
    mapper = TypeMapper()

    assert mapper.map("Sandbox.Pool`1<" * 1000 + "System.Int32" + ">" * 1000) == (
        "sbox.Pool<" * levels + "Dynamic" + ">" * levels
    )
    assert mapper.map("System.Int32" + "[]" * 2000) == "Array<" * levels + "Dynamic" + ">" * levels


def test_deep_strings_survive_upgrade_and_token_extraction() -> None:
    schema = "Sandbox.Pool`1<" * 1000 + "T" + ">" * 1000
    index = GenericArityIndex({"Sandbox.Pool": [1]})

    assert upgrade_to_known_generic(schema, index, ("T",)) == schema
    assert upgrade_to_known_generic("System.Int32" + "[]" * 2000, index) == "System.Int32" + "[]" * 2000
    assert extract_type_tokens(schema) == ["Pool"] * (MAX_TYPE_DEPTH + 1) + ["Object"]


def test_custom_root_namespace() -> None:
    options = ExternOptions(root_namespace="Game", root_package="game", int64_type="Int64")
    mapper = TypeMapper(options=options)

    assert mapper.map("Game.Player") == "game.Player"
    assert mapper.map("Sandbox.GameObject") == "Dynamic"
    assert mapper.map("System.Int64") == "Int64"


def test_key_normalisation_strips_null_wrapper() -> None:
    assert normalize_key_type("Null<Int>") == "Int"
    assert normalize_key_type("Array<Null<Int>>") == "Array<Null<Int>>"
