"""C# source emission for Unity ``CustomEditor`` classes."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List

from .models import GenerationRequest

EDITOR_IMPORT = "using UnityEditor;"
SCRIPT_PROPERTY = "_script"
SCRIPT_BACKING_FIELD = "m_Script"


class SourceBuilder:
    """Accumulates lines, each prefixed with one tab per nesting level."""

    def __init__(self, indent: str = "\t") -> None:
        self.indent = indent
        self.depth = 0
        self._lines: List[str] = []

    def line(self, text: str = "") -> None:
        self._lines.append(self.indent * self.depth + text)

    @contextmanager
    def block(self, header: str = "") -> Iterator["SourceBuilder"]:
        """Emit *header* and a brace-delimited block one level deeper."""
        if header:
            self.line(header)
        self.line("{")
        self.depth += 1
        try:
            yield self
        finally:
            self.depth -= 1
            self.line("}")

    def text(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)


def to_top_lower(value: str) -> str:
    """Lower-case the first character: ``Player`` -> ``player``."""
    if not value:
        return ""
    return value[0].lower() + value[1:]


def editor_class_name(type_name: str) -> str:
    return f"{type_name}Editor"


def target_field_name(type_name: str) -> str:
    return "_" + to_top_lower(type_name)


def generate(request: GenerationRequest) -> str:
    """Render the full editor script for *request*."""
    builder = SourceBuilder()
    builder.line(EDITOR_IMPORT)
    builder.line()

    namespace = request.type.namespace
    if namespace:
        with builder.block(f"namespace {namespace}"):
            _emit_editor_class(builder, request)
    else:
        _emit_editor_class(builder, request)
    return builder.text()


def _emit_editor_class(builder: SourceBuilder, request: GenerationRequest) -> None:
    type_name = request.type.name
    fields = request.selected_fields
    target = target_field_name(type_name)

    builder.line(f"[CustomEditor(typeof({type_name}))]")
    with builder.block(f"public class {editor_class_name(type_name)} : Editor"):
        if request.include_target_reference:
            builder.line(f"private {type_name} {target};")
            builder.line()

        for field in fields:
            builder.line(f"private SerializedProperty {field.name};")
        builder.line(f"private SerializedProperty {SCRIPT_PROPERTY};")
        builder.line()

        with builder.block("private void OnEnable()"):
            builder.line(f'{SCRIPT_PROPERTY} = serializedObject.FindProperty("{SCRIPT_BACKING_FIELD}");')
            for field in fields:
                builder.line(f'{field.name} = serializedObject.FindProperty("{field.name}");')
            if request.include_target_reference:
                builder.line(f"{target} = target as {type_name};")
        builder.line()

        with builder.block("public override void OnInspectorGUI()"):
            with builder.block("using (new EditorGUI.DisabledScope(true))"):
                builder.line(f"EditorGUILayout.PropertyField({SCRIPT_PROPERTY});")

            if not fields:
                builder.line("base.OnInspectorGUI();")
            for field in fields:
                if field.is_collection:
                    builder.line(f"EditorGUILayout.PropertyField({field.name}, true);")
                else:
                    builder.line(f"EditorGUILayout.PropertyField({field.name});")
