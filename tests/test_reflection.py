"""Tests for Tree-sitter based C# reflection."""

from pathlib import Path

import pytest

from inspector_cli.classifier import classify
from inspector_cli.models import Accessibility, TypeKind
from inspector_cli.reflection import CSharpReflectionProvider, normalize_attribute


def _fields_by_name(provider, type_ref):
    return {f.name: f for f in provider.get_fields(type_ref)}


def test_resolve_type_uses_file_stem(provider: CSharpReflectionProvider, player_script: Path):
    type_ref = provider.resolve_type(player_script)

    assert type_ref is not None
    assert type_ref.name == "Player"
    assert type_ref.namespace == "Game"
    assert type_ref.full_name == "Game.Player"
    assert type_ref.kind == TypeKind.ENGINE_OBJECT


def test_resolve_type_by_explicit_name(provider: CSharpReflectionProvider, scripts_dir: Path):
    type_ref = provider.resolve_type(scripts_dir / "Stats.cs", "Inventory")

    assert type_ref is not None
    assert type_ref.name == "Inventory"
    assert type_ref.kind == TypeKind.OTHER


def test_resolve_missing_type_name(provider: CSharpReflectionProvider, player_script: Path):
    assert provider.resolve_type(player_script, "Nope") is None


def test_resolve_type_with_syntax_errors_is_none(provider: CSharpReflectionProvider, scripts_dir: Path):
    assert provider.resolve_type(scripts_dir / "Broken.cs") is None


def test_get_fields_in_declaration_order_with_inherited_last(provider, player_script: Path):
    type_ref = provider.resolve_type(player_script)

    names = [f.name for f in provider.get_fields(type_ref)]

    assert names == [
        "speed", "items", "cachedScore", "hiddenCounter", "state", "stats", "inventory",
        "bags", "spawnPoints", "displayName", "bonus", "cachedTransform",
        # inherited from Character; its private fields are not visible
        "health", "title",
    ]


def test_field_accessibility_and_attributes(provider, player_script: Path):
    fields = _fields_by_name(provider, provider.resolve_type(player_script))

    assert fields["speed"].accessibility == Accessibility.PUBLIC
    assert fields["items"].accessibility == Accessibility.NON_PUBLIC
    assert fields["items"].attributes == ("SerializeField",)
    assert fields["cachedTransform"].attributes == ("NonSerialized",)
    assert fields["state"].accessibility == Accessibility.NON_PUBLIC


def test_field_type_kinds(provider, player_script: Path):
    fields = _fields_by_name(provider, provider.resolve_type(player_script))

    assert fields["speed"].declared_type.kind == TypeKind.VALUE
    assert fields["state"].declared_type.kind == TypeKind.ENUM
    assert fields["stats"].declared_type.kind == TypeKind.VALUE
    assert fields["inventory"].declared_type.kind == TypeKind.OTHER
    assert fields["displayName"].declared_type.kind == TypeKind.STRING
    assert fields["bonus"].declared_type.kind == TypeKind.VALUE

    items = fields["items"].declared_type
    assert items.kind == TypeKind.CONTAINER
    assert items.element.name == "Item"
    assert items.element.kind == TypeKind.ENGINE_OBJECT

    spawn_points = fields["spawnPoints"].declared_type
    assert spawn_points.kind == TypeKind.CONTAINER
    assert spawn_points.element.kind == TypeKind.ENGINE_OBJECT


def test_classify_player(provider, player_script: Path):
    fields = classify(provider.resolve_type(player_script), provider)

    assert [f.name for f in fields] == [
        "speed", "items", "state", "stats", "spawnPoints", "displayName", "bonus", "health",
    ]
    collections = {f.name for f in fields if f.is_collection}
    assert collections == {"items", "spawnPoints"}


def test_global_namespace_script(provider, scripts_dir: Path):
    type_ref = provider.resolve_type(scripts_dir / "Door.cs")
    fields = classify(type_ref, provider)

    assert type_ref.namespace == ""
    # `hinge` has no modifier, so it is private and unmarked.
    assert [f.name for f in fields] == ["locked", "sounds"]
    assert fields[1].is_collection


def test_file_scoped_namespace(provider, scripts_dir: Path):
    type_ref = provider.resolve_type(scripts_dir / "Data" / "GameSettings.cs")
    fields = classify(type_ref, provider)

    assert type_ref.full_name == "Game.Data.GameSettings"
    assert type_ref.kind == TypeKind.ENGINE_OBJECT
    assert [f.name for f in fields] == ["levels", "tint", "grid"]
    assert all(f.is_collection for f in (fields[0], fields[2]))


def test_fields_inside_conditional_blocks(provider, scripts_dir: Path):
    type_ref = provider.resolve_type(scripts_dir / "Lamp.cs")
    fields = classify(type_ref, provider)

    assert type_ref.kind == TypeKind.ENGINE_OBJECT
    assert [f.name for f in fields] == ["intensity", "preview", "gizmoColor", "flicker"]
    # PreviewMode is itself declared inside `#if UNITY_EDITOR`.
    assert fields[1].declared_type.kind == TypeKind.ENUM


def test_multiple_declarators_and_qualified_generics(temp_dir: Path):
    script = temp_dir / "Multi.cs"
    script.write_text(
        "public class Multi : UnityEngine.MonoBehaviour\n"
        "{\n"
        "    public int a, b;\n"
        "    public System.Collections.Generic.List<int> numbers;\n"
        "    public System.Collections.Generic.Dictionary<string, int> lookup;\n"
        "    public UnityEngine.Object anything;\n"
        "    [UnityEngine.SerializeFieldAttribute] private int[,] grid;\n"
        "}\n",
        encoding="utf-8",
    )
    provider = CSharpReflectionProvider(temp_dir)

    type_ref = provider.resolve_type(script)
    fields = classify(type_ref, provider)

    assert type_ref.kind == TypeKind.ENGINE_OBJECT
    assert [f.name for f in fields] == ["a", "b", "numbers", "grid"]
    assert [f.is_collection for f in fields] == [False, False, True, True]


def test_edits_are_picked_up_on_resolve(temp_dir: Path):
    script = temp_dir / "Live.cs"
    script.write_text("public class Live : MonoBehaviour { public int one; }", encoding="utf-8")
    provider = CSharpReflectionProvider(temp_dir)
    assert [f.name for f in provider.get_fields(provider.resolve_type(script))] == ["one"]

    script.write_text("public class Live : MonoBehaviour { public int one; public int two; }", encoding="utf-8")

    assert [f.name for f in provider.get_fields(provider.resolve_type(script))] == ["one", "two"]


def test_configured_engine_objects(temp_dir: Path):
    script = temp_dir / "Spawner.cs"
    script.write_text("public class Spawner : MonoBehaviour { public VisualEffect effect; }", encoding="utf-8")

    plain = CSharpReflectionProvider(temp_dir)
    extended = CSharpReflectionProvider(temp_dir, extra_engine_objects=["VisualEffect"])

    assert classify(plain.resolve_type(script), plain) == []
    assert [f.name for f in classify(extended.resolve_type(script), extended)] == ["effect"]


def test_index_project_skips_library(temp_dir: Path):
    (temp_dir / "Library").mkdir()
    (temp_dir / "Library" / "Cached.cs").write_text("public enum Cached { A }", encoding="utf-8")
    (temp_dir / "Mode.cs").write_text("public enum Mode { A }", encoding="utf-8")
    provider = CSharpReflectionProvider(temp_dir)

    assert provider.index_project() == 1


def test_list_types(provider, scripts_dir: Path):
    names = [t.name for t in provider.list_types(scripts_dir / "Stats.cs")]
    assert names == ["Stats", "Inventory"]


@pytest.mark.parametrize("raw,expected", [
    ("SerializeField", "SerializeField"),
    ("SerializeFieldAttribute", "SerializeField"),
    ("System.NonSerialized", "NonSerialized"),
    ("global::System.NonSerializedAttribute", "NonSerialized"),
    ("Attribute", "Attribute"),
])
def test_normalize_attribute(raw, expected):
    assert normalize_attribute(raw) == expected
