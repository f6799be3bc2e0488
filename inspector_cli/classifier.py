"""Field eligibility rules for Unity's serializer."""

from __future__ import annotations

import logging
from typing import List, Optional

from .models import Accessibility, FieldDescriptor, FieldMetadata, TypeKind, TypeRef
from .reflection import ReflectionProvider

logger = logging.getLogger(__name__)

NON_SERIALIZED_MARKER = "NonSerialized"
SERIALIZE_MARKER = "SerializeField"

SERIALIZABLE_KINDS = frozenset({
    TypeKind.ENGINE_OBJECT,
    TypeKind.ENUM,
    TypeKind.VALUE,
    TypeKind.STRING,
})


def collection_element(type_ref: TypeRef) -> Optional[TypeRef]:
    """Element type of an array or ``List<T>``, None for anything else."""
    if type_ref.kind == TypeKind.CONTAINER:
        return type_ref.element
    return None


def is_type_serializable(type_ref: TypeRef) -> bool:
    if type_ref.kind in SERIALIZABLE_KINDS:
        return True
    element = collection_element(type_ref)
    if element is not None:
        return is_type_serializable(element)
    return False


def is_field_serializable(field: FieldMetadata) -> bool:
    """True when Unity would serialize *field* and show it in the inspector.

    The NonSerialized check runs first and on its own, so a public field
    carrying it is excluded even though public fields skip the
    SerializeField requirement.
    """
    if NON_SERIALIZED_MARKER in field.attributes:
        return False
    if field.accessibility != Accessibility.PUBLIC and SERIALIZE_MARKER not in field.attributes:
        return False
    return is_type_serializable(field.declared_type)


def describe(field: FieldMetadata) -> FieldDescriptor:
    return FieldDescriptor(
        name=field.name,
        declared_type=field.declared_type,
        is_collection=collection_element(field.declared_type) is not None,
        accessibility=field.accessibility,
        has_non_serialized_marker=NON_SERIALIZED_MARKER in field.attributes,
        has_explicit_serialize_marker=SERIALIZE_MARKER in field.attributes,
    )


def classify(type_ref: Optional[TypeRef], provider: ReflectionProvider) -> List[FieldDescriptor]:
    """Return the eligible fields of *type_ref* in declaration order.

    An unresolved type (None) yields an empty list rather than an error.
    """
    if type_ref is None:
        return []
    fields = provider.get_fields(type_ref)
    eligible = [describe(f) for f in fields if is_field_serializable(f)]
    logger.debug("%s: %d of %d field(s) eligible", type_ref, len(eligible), len(fields))
    return eligible
