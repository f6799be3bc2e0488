"""Core data models shared by reflection, classification and generation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class TypeKind(str, Enum):
    """Structural kind of a declared type, as far as serialization cares."""

    ENGINE_OBJECT = "engine_object"
    ENUM = "enum"
    VALUE = "value"
    STRING = "string"
    CONTAINER = "container"
    OTHER = "other"


class Accessibility(str, Enum):
    PUBLIC = "public"
    NON_PUBLIC = "non_public"


@dataclass(frozen=True)
class TypeRef:
    """Handle for a declared type: simple name, namespace and kind.

    ``element`` is only set for ``CONTAINER`` types (arrays and ``List<T>``).
    """

    name: str
    namespace: str = ""
    kind: TypeKind = TypeKind.OTHER
    element: Optional["TypeRef"] = None

    @property
    def full_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class FieldMetadata:
    """Raw field information as produced by a reflection provider."""

    name: str
    declared_type: TypeRef
    accessibility: Accessibility
    attributes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldDescriptor:
    """A field that passed the eligibility check."""

    name: str
    declared_type: TypeRef
    is_collection: bool
    accessibility: Accessibility
    has_non_serialized_marker: bool = False
    has_explicit_serialize_marker: bool = False


@dataclass(frozen=True)
class GenerationRequest:
    type: TypeRef
    selected_fields: Tuple[FieldDescriptor, ...] = ()
    include_target_reference: bool = False

    def __post_init__(self):
        """Reject requests that cannot describe an editor class."""
        if self.type is None or not self.type.name:
            raise ValueError("GenerationRequest requires a named type")
        # Accept any sequence from callers, keep the request immutable.
        object.__setattr__(self, "selected_fields", tuple(self.selected_fields))


@dataclass
class WriteResult:
    """Outcome of writing a generated editor script to disk."""
    path: Path
    merged: bool = False
    import_inserted: bool = False

