"""Built-in knowledge about C# and Unity types.

The reflection provider only sees source text, so anything not declared in
the scanned project is looked up here by simple name.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Optional

from .models import TypeKind

# ---------------------------------------------------------------------------
# C# keywords and their System aliases
# ---------------------------------------------------------------------------
STRING_TYPES: FrozenSet[str] = frozenset({"string", "String"})

PREDEFINED_VALUE_TYPES: FrozenSet[str] = frozenset({
    "bool", "byte", "sbyte", "char", "decimal", "double", "float",
    "int", "uint", "nint", "nuint", "long", "ulong", "short", "ushort",
    "Boolean", "Byte", "SByte", "Char", "Decimal", "Double", "Single",
    "Int16", "Int32", "Int64", "UInt16", "UInt32", "UInt64",
    "IntPtr", "UIntPtr", "DateTime", "TimeSpan", "Guid",
})

REFERENCE_KEYWORDS: FrozenSet[str] = frozenset({"object", "dynamic", "Object"})

# ---------------------------------------------------------------------------
# Unity value types (structs)
# ---------------------------------------------------------------------------
UNITY_VALUE_TYPES: FrozenSet[str] = frozenset({
    "Vector2", "Vector3", "Vector4", "Vector2Int", "Vector3Int",
    "Quaternion", "Matrix4x4", "Color", "Color32",
    "Rect", "RectInt", "RectOffset", "Bounds", "BoundsInt",
    "LayerMask", "Hash128", "RangeInt", "Ray", "Ray2D", "Plane",
    "Keyframe", "GradientColorKey", "GradientAlphaKey",
    "SphericalHarmonicsL2", "Resolution",
})

# ---------------------------------------------------------------------------
# Unity engine object types (subclasses of UnityEngine.Object)
# ---------------------------------------------------------------------------
UNITY_ENGINE_OBJECTS: FrozenSet[str] = frozenset({
    # Scene objects
    "GameObject", "Component", "Behaviour", "MonoBehaviour", "Transform",
    "RectTransform", "Camera", "Light", "Animator", "Animation",
    "AudioSource", "AudioListener", "Rigidbody", "Rigidbody2D",
    "Collider", "Collider2D", "BoxCollider", "SphereCollider",
    "CapsuleCollider", "MeshCollider", "CharacterController",
    "BoxCollider2D", "CircleCollider2D", "PolygonCollider2D",
    "Renderer", "MeshRenderer", "SkinnedMeshRenderer", "SpriteRenderer",
    "LineRenderer", "TrailRenderer", "ParticleSystem", "MeshFilter",
    "Canvas", "CanvasGroup", "CanvasRenderer", "Terrain", "Joint",
    "HingeJoint", "FixedJoint", "SpringJoint",
    # Assets
    "ScriptableObject", "Texture", "Texture2D", "Texture3D",
    "RenderTexture", "Cubemap", "Sprite", "Material", "Shader",
    "Mesh", "AudioClip", "AnimationClip", "RuntimeAnimatorController",
    "AnimatorOverrideController", "Avatar", "Font", "TextAsset",
    "PhysicMaterial", "PhysicsMaterial", "PhysicsMaterial2D",
    "ComputeShader", "TerrainData", "LightingSettings", "Motion",
    # UI
    "Image", "RawImage", "Text", "Button", "Toggle", "Slider",
    "Scrollbar", "ScrollRect", "Dropdown", "InputField", "Selectable",
    "Graphic", "MaskableGraphic", "LayoutGroup", "TMP_Text",
    "TextMeshPro", "TextMeshProUGUI", "TMP_FontAsset",
})

# The root itself is not a subclass of itself, so fields typed exactly as
# UnityEngine.Object fall through to OTHER. Subclassing it directly counts.
ENGINE_OBJECT_ROOTS: FrozenSet[str] = frozenset({"Object"})

LIST_CONTAINERS: FrozenSet[str] = frozenset({"List"})


class TypeCatalog:
    """Lookup of well-known type names, extendable from configuration."""

    def __init__(
        self,
        extra_engine_objects: Iterable[str] = (),
        extra_value_types: Iterable[str] = (),
    ) -> None:
        self.engine_objects = UNITY_ENGINE_OBJECTS | frozenset(extra_engine_objects)
        self.value_types = PREDEFINED_VALUE_TYPES | UNITY_VALUE_TYPES | frozenset(extra_value_types)
        self._cache: Dict[str, Optional[TypeKind]] = {}

    def kind_of(self, name: str) -> Optional[TypeKind]:
        """Return the kind of a well-known type, or None when unknown."""
        if name in self._cache:
            return self._cache[name]
        kind: Optional[TypeKind] = None
        if name in STRING_TYPES:
            kind = TypeKind.STRING
        elif name in self.value_types:
            kind = TypeKind.VALUE
        elif name in self.engine_objects:
            kind = TypeKind.ENGINE_OBJECT
        elif name in REFERENCE_KEYWORDS:
            kind = TypeKind.OTHER
        self._cache[name] = kind
        return kind

    def is_engine_base(self, name: str) -> bool:
        """True when deriving from *name* makes a class an engine object."""
        return name in self.engine_objects or name in ENGINE_OBJECT_ROOTS

    @staticmethod
    def is_list_container(name: str) -> bool:
        return name in LIST_CONTAINERS
