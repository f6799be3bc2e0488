"""Tests for editor script generation."""

import pytest

from conftest import ENGINE
from inspector_cli.generator import SourceBuilder, generate, target_field_name, to_top_lower
from inspector_cli.models import Accessibility, FieldDescriptor, GenerationRequest, TypeKind, TypeRef

PLAYER = TypeRef("Player", "Game", TypeKind.ENGINE_OBJECT)
DOOR = TypeRef("Door", kind=TypeKind.ENGINE_OBJECT)


def descriptor(name, is_collection=False):
    declared = TypeRef(f"{name}Type", kind=TypeKind.CONTAINER if is_collection else TypeKind.VALUE,
                       element=ENGINE if is_collection else None)
    return FieldDescriptor(name=name, declared_type=declared, is_collection=is_collection,
                           accessibility=Accessibility.PUBLIC)


def test_player_editor_matches_expected_text():
    request = GenerationRequest(
        type=PLAYER,
        selected_fields=[descriptor("speed"), descriptor("items", is_collection=True)],
        include_target_reference=True,
    )

    expected = "\n".join([
        "using UnityEditor;",
        "",
        "namespace Game",
        "{",
        "\t[CustomEditor(typeof(Player))]",
        "\tpublic class PlayerEditor : Editor",
        "\t{",
        "\t\tprivate Player _player;",
        "\t\t",
        "\t\tprivate SerializedProperty speed;",
        "\t\tprivate SerializedProperty items;",
        "\t\tprivate SerializedProperty _script;",
        "\t\t",
        "\t\tprivate void OnEnable()",
        "\t\t{",
        '\t\t\t_script = serializedObject.FindProperty("m_Script");',
        '\t\t\tspeed = serializedObject.FindProperty("speed");',
        '\t\t\titems = serializedObject.FindProperty("items");',
        "\t\t\t_player = target as Player;",
        "\t\t}",
        "\t\t",
        "\t\tpublic override void OnInspectorGUI()",
        "\t\t{",
        "\t\t\tusing (new EditorGUI.DisabledScope(true))",
        "\t\t\t{",
        "\t\t\t\tEditorGUILayout.PropertyField(_script);",
        "\t\t\t}",
        "\t\t\tEditorGUILayout.PropertyField(speed);",
        "\t\t\tEditorGUILayout.PropertyField(items, true);",
        "\t\t}",
        "\t}",
        "}",
    ]) + "\n"

    assert generate(request) == expected


def test_empty_selection_falls_back_to_base_drawing():
    text = generate(GenerationRequest(type=DOOR))

    assert "base.OnInspectorGUI();" in text
    assert "EditorGUILayout.PropertyField(_script);" in text
    declarations = [line.strip() for line in text.splitlines() if line.strip().startswith("private SerializedProperty")]
    assert declarations == ["private SerializedProperty _script;"]
    assert "target as" not in text


def test_field_emission_and_fallback_are_exclusive():
    text = generate(GenerationRequest(type=DOOR, selected_fields=[descriptor("locked")]))

    assert "base.OnInspectorGUI();" not in text
    assert "EditorGUILayout.PropertyField(locked);" in text


def test_no_namespace_block_for_global_types():
    text = generate(GenerationRequest(type=DOOR, selected_fields=[descriptor("locked")]))

    assert text.startswith("using UnityEditor;\n\n[CustomEditor(typeof(Door))]\npublic class DoorEditor : Editor\n{\n")
    assert "namespace" not in text
    assert text.endswith("\t}\n}\n")


def test_target_reference_precedes_field_handles():
    text = generate(GenerationRequest(type=DOOR, selected_fields=[descriptor("locked")],
                                      include_target_reference=True))
    lines = [line.strip() for line in text.splitlines()]

    assert lines.index("private Door _door;") < lines.index("private SerializedProperty locked;")
    assert "_door = target as Door;" in lines


def test_braces_are_balanced_and_indentation_consistent():
    text = generate(GenerationRequest(type=PLAYER, selected_fields=[descriptor("a"), descriptor("b", True)],
                                      include_target_reference=True))

    depth = 0
    for line in text.splitlines():
        stripped = line.lstrip("\t")
        if stripped == "}":
            depth -= 1
        if line:
            assert line == "\t" * depth + stripped
        if stripped == "{":
            depth += 1
    assert depth == 0


def test_request_without_type_is_rejected():
    with pytest.raises(ValueError):
        GenerationRequest(type=None)


def test_request_freezes_selected_fields():
    request = GenerationRequest(type=DOOR, selected_fields=[descriptor("locked")])
    assert isinstance(request.selected_fields, tuple)


@pytest.mark.parametrize("value,expected", [("Player", "player"), ("HUDView", "hUDView"), ("x", "x"), ("", "")])
def test_to_top_lower(value, expected):
    assert to_top_lower(value) == expected


def test_target_field_name():
    assert target_field_name("Player") == "_player"


def test_source_builder_rebalances_on_error():
    builder = SourceBuilder()
    with pytest.raises(RuntimeError):
        with builder.block("class A"):
            raise RuntimeError("boom")
    assert builder.depth == 0
    assert builder.text() == "class A\n{\n}\n"
