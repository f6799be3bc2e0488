"""Editor-generation session: the state a host UI keeps between actions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from . import config
from .classifier import classify
from .generator import editor_class_name, generate
from .models import FieldDescriptor, GenerationRequest, TypeRef, WriteResult
from .reflection import ReflectionProvider
from .writer import preview_write, write

logger = logging.getLogger(__name__)


class InspectorSession:
    """Holds the loaded script, its eligible fields and the user's selection.

    Loading a script always discards the previous selection and starts
    over with every field selected.
    """

    def __init__(
        self,
        provider: ReflectionProvider,
        include_target: bool = False,
        editor_dir: str = "",
    ) -> None:
        self.provider = provider
        self.include_target = include_target
        self.editor_dir = editor_dir
        self.script: Optional[Path] = None
        self.type_ref: Optional[TypeRef] = None
        self.fields: List[FieldDescriptor] = []
        self.selection: List[bool] = []

    # ------------------------------------------------------------------
    # Type changes
    # ------------------------------------------------------------------

    def load(self, script: Path, type_name: Optional[str] = None) -> List[FieldDescriptor]:
        self.script = script
        self.type_ref = self.provider.resolve_type(script, type_name)
        self.fields = classify(self.type_ref, self.provider)
        self.selection = [True] * len(self.fields)
        return self.fields

    @property
    def resolved(self) -> bool:
        return self.type_ref is not None

    @property
    def target_type(self) -> TypeRef:
        """The type the editor is generated for.

        An unresolvable script still names its class after the file, so the
        fallback editor (base drawing only) can be generated for it.
        """
        if self.type_ref is not None:
            return self.type_ref
        if self.script is None:
            raise ValueError("No script loaded")
        return TypeRef(name=self.script.stem)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle(self, index: int) -> bool:
        self.selection[index] = not self.selection[index]
        return self.selection[index]

    def select_all(self, value: bool = True) -> None:
        self.selection = [value] * len(self.fields)

    def select_only(self, names: Iterable[str]) -> None:
        wanted = self._checked_names(names)
        self.selection = [f.name in wanted for f in self.fields]

    def exclude(self, names: Iterable[str]) -> None:
        unwanted = self._checked_names(names)
        self.selection = [selected and f.name not in unwanted for f, selected in zip(self.fields, self.selection)]

    def _checked_names(self, names: Iterable[str]) -> set:
        requested = set(names)
        unknown = requested - {f.name for f in self.fields}
        if unknown:
            raise ValueError(f"Not an eligible field: {', '.join(sorted(unknown))}")
        return requested

    @property
    def selected_fields(self) -> List[FieldDescriptor]:
        return [f for f, selected in zip(self.fields, self.selection) if selected]

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def build_request(self) -> GenerationRequest:
        if len(self.selection) != len(self.fields):
            raise ValueError("Selection does not match the loaded fields")
        return GenerationRequest(
            type=self.target_type,
            selected_fields=self.selected_fields,
            include_target_reference=self.include_target,
        )

    def render(self) -> str:
        return generate(self.build_request())

    def default_save_path(self) -> Path:
        """``<script dir>[/<editor_dir>]/<Type>Editor.cs``"""
        if self.script is None:
            raise ValueError("No script loaded")
        directory = self.script.parent
        if self.editor_dir:
            directory = directory / self.editor_dir
        return directory / f"{editor_class_name(self.target_type.name)}{config.SCRIPT_EXTENSION}"

    def preview(self, path: Path) -> str:
        return preview_write(path, self.render())

    def create(self, path: Path) -> WriteResult:
        text = self.render()
        path.parent.mkdir(parents=True, exist_ok=True)
        result = write(path, text)
        logger.debug(
            "Generated %s with %d field(s) into %s",
            editor_class_name(self.target_type.name), len(self.selected_fields), path,
        )
        return result
