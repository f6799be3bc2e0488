"""Source-level type reflection for Unity C# scripts using Tree-sitter.

Unity hands its editor tools a compiled ``System.Type``; outside the editor
the closest thing is the script source.  This module parses C# with
Tree-sitter and rebuilds the pieces of reflection the classifier needs:

- the class a script declares (``MonoScript.GetClass`` equivalent)
- its instance fields, in declaration order, with modifiers and attributes
- a structural kind for every declared field type

Types declared elsewhere in the project (enums, structs, ``MonoBehaviour``
subclasses) are indexed so that their kind can be resolved by name.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

import tree_sitter_c_sharp
from tree_sitter import Language, Parser as TSParser

from .models import Accessibility, FieldMetadata, TypeKind, TypeRef
from .type_catalog import TypeCatalog

logger = logging.getLogger(__name__)

SKIP_DIRS: Set[str] = {
    "Library", "Temp", "Logs", "obj", "Build", "Builds", "UserSettings",
    ".git", ".vs", ".idea", "node_modules", "Packages",
}

TYPE_DECLARATIONS: Dict[str, str] = {
    "class_declaration": "class",
    "struct_declaration": "struct",
    "record_declaration": "class",
    "record_struct_declaration": "struct",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
}

# Members that are not per-instance state never reach the serializer.
NON_INSTANCE_MODIFIERS: FrozenSet[str] = frozenset({"static", "const"})

# Conditional blocks are read as if every symbol were defined; Unity's
# editor assembly compiles with UNITY_EDITOR.
PREPROC_CONTAINERS: FrozenSet[str] = frozenset({"preproc_if", "preproc_elif", "preproc_else"})


# ===================================================================
# Syntax-level records
# ===================================================================

@dataclass(frozen=True)
class TypeSyntax:
    """A type as written in source, before it is resolved to a kind."""
    name: str
    text: str
    arguments: Tuple["TypeSyntax", ...] = ()
    array_of: Optional["TypeSyntax"] = None
    nullable_of: Optional["TypeSyntax"] = None


@dataclass
class FieldDecl:
    name: str
    type_syntax: TypeSyntax
    modifiers: FrozenSet[str]
    attributes: Tuple[str, ...]

    @property
    def accessibility(self) -> Accessibility:
        if "public" in self.modifiers:
            return Accessibility.PUBLIC
        return Accessibility.NON_PUBLIC

    @property
    def is_instance(self) -> bool:
        return not (self.modifiers & NON_INSTANCE_MODIFIERS)

    @property
    def is_private(self) -> bool:
        # No access modifier means private in C#.
        return not (self.modifiers & {"public", "protected", "internal"})


@dataclass
class TypeDecl:
    name: str
    namespace: str
    category: str
    file_path: Path
    base_names: Tuple[str, ...] = ()
    fields: List[FieldDecl] = field(default_factory=list)


def normalize_attribute(name: str) -> str:
    """``System.NonSerializedAttribute`` -> ``NonSerialized``."""
    short = name.split("::")[-1].split(".")[-1].strip()
    if short.endswith("Attribute") and short != "Attribute":
        short = short[: -len("Attribute")]
    return short


def _text(node: Any) -> str:
    return node.text.decode("utf-8")


def _field_or_child(node: Any, field_name: str, index: int = 0) -> Any:
    """Child by field name, falling back to a positional named child."""
    child = node.child_by_field_name(field_name)
    if child is None:
        child = node.named_children[index]
    return child


def _members(node: Any) -> Iterator[Any]:
    """Named children of *node*, with ``#if``/``#elif``/``#else`` blocks flattened."""
    for child in node.named_children:
        if child.type in PREPROC_CONTAINERS:
            yield from _members(child)
        else:
            yield child


# ===================================================================
# Abstract provider interface
# ===================================================================

class ReflectionProvider(ABC):
    """Produces type handles and field metadata for the classifier."""

    @abstractmethod
    def resolve_type(self, script: Path, type_name: Optional[str] = None) -> Optional[TypeRef]:
        """Return the type declared by *script*, or None if it cannot be resolved."""
        ...

    @abstractmethod
    def get_fields(self, type_ref: TypeRef) -> List[FieldMetadata]:
        """Return the instance fields of *type_ref* in declaration order."""
        ...


# ===================================================================
# C# provider
# ===================================================================

class CSharpReflectionProvider(ReflectionProvider):
    """Reflection over C# sources parsed with ``tree-sitter-c-sharp``.

    *project_root* is scanned once, lazily, for type declarations so that
    field types declared in other scripts resolve to the right kind.  The
    script passed to :meth:`resolve_type` is always re-parsed, so edits
    between calls are picked up.
    """

    def __init__(
        self,
        project_root: Optional[Path] = None,
        extra_engine_objects: Iterable[str] = (),
        extra_value_types: Iterable[str] = (),
    ) -> None:
        self.project_root = project_root
        self.catalog = TypeCatalog(extra_engine_objects, extra_value_types)
        self._parser = TSParser(Language(tree_sitter_c_sharp.language()))
        self._files: Dict[Path, List[TypeDecl]] = {}
        self._project_indexed = False

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_source(self, source: str, file_path: Path) -> Tuple[List[TypeDecl], bool]:
        """Parse C# *source* into type declarations.

        Returns the declarations and whether the syntax tree contains errors.
        """
        tree = self._parser.parse(source.encode("utf-8"))
        decls: List[TypeDecl] = []
        self._walk(tree.root_node, "", file_path, decls)
        return decls, tree.root_node.has_error

    def index_file(self, file_path: Path) -> Tuple[List[TypeDecl], bool]:
        source = file_path.read_text(encoding="utf-8-sig", errors="ignore")
        decls, has_errors = self.parse_source(source, file_path)
        self._files[file_path.resolve()] = decls
        logger.debug("Indexed %d type(s) from %s", len(decls), file_path)
        return decls, has_errors

    def index_project(self) -> int:
        """Index every ``.cs`` file under the project root. Returns the file count."""
        self._project_indexed = True
        if self.project_root is None:
            return 0
        count = 0
        for file_path in sorted(self.project_root.rglob("*.cs")):
            if any(part in SKIP_DIRS for part in file_path.relative_to(self.project_root).parts):
                continue
            try:
                _, has_errors = self.index_file(file_path)
            except OSError as exc:
                logger.warning("Failed to read %s: %s", file_path, exc)
                continue
            if has_errors:
                logger.warning("Syntax errors in %s; declarations indexed best-effort", file_path)
            count += 1
        logger.debug("Indexed %d C# file(s) under %s", count, self.project_root)
        return count

    def _walk(self, ts_node: Any, namespace: str, file_path: Path, out: List[TypeDecl]) -> None:
        """Collect type declarations below *ts_node*, tracking namespaces."""
        for child in _members(ts_node):
            if child.type == "namespace_declaration":
                name_node = child.child_by_field_name("name")
                inner = _text(name_node) if name_node is not None else ""
                body = child.child_by_field_name("body")
                if body is not None:
                    self._walk(body, _join_namespace(namespace, inner), file_path, out)
            elif child.type == "file_scoped_namespace_declaration":
                name_node = child.child_by_field_name("name")
                # Everything after `namespace X;` lives in X.
                namespace = _join_namespace(namespace, _text(name_node) if name_node is not None else "")
                self._walk(child, namespace, file_path, out)
            elif child.type in TYPE_DECLARATIONS:
                self._process_type(child, namespace, file_path, out)
            elif child.type == "declaration_list":
                self._walk(child, namespace, file_path, out)

    def _process_type(self, type_node: Any, namespace: str, file_path: Path, out: List[TypeDecl]) -> None:
        name_node = type_node.child_by_field_name("name")
        if name_node is None:
            return
        category = TYPE_DECLARATIONS[type_node.type]
        if type_node.type == "record_declaration" and any(c.type == "struct" for c in type_node.children):
            category = "struct"

        decl = TypeDecl(
            name=_text(name_node),
            namespace=namespace,
            category=category,
            file_path=file_path,
            base_names=self._base_names(type_node),
        )
        out.append(decl)

        body = type_node.child_by_field_name("body")
        if body is None or category == "enum":
            return
        for member in _members(body):
            if member.type == "field_declaration":
                decl.fields.extend(self._field_decls(member))
        # Nested enums/structs/classes
        self._walk(body, namespace, file_path, out)

    def _base_names(self, type_node: Any) -> Tuple[str, ...]:
        names: List[str] = []
        for child in type_node.named_children:
            if child.type != "base_list":
                continue
            for base in child.named_children:
                if base.type == "primary_constructor_base_type":
                    base = _field_or_child(base, "type")
                names.append(self._type_syntax(base).name)
        return tuple(names)

    def _field_decls(self, field_node: Any) -> Iterator[FieldDecl]:
        attributes: List[str] = []
        modifiers: Set[str] = set()
        variable_decl = None
        for child in field_node.named_children:
            if child.type == "attribute_list":
                for attr in child.named_children:
                    if attr.type != "attribute":
                        continue
                    name_node = _field_or_child(attr, "name")
                    attributes.append(normalize_attribute(_text(name_node)))
            elif child.type == "modifier":
                modifiers.add(_text(child))
            elif child.type == "variable_declaration":
                variable_decl = child

        if variable_decl is None:
            return
        type_node = variable_decl.child_by_field_name("type")
        if type_node is None:
            return
        type_syntax = self._type_syntax(type_node)
        for declarator in variable_decl.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is None:
                name_node = next((c for c in declarator.named_children if c.type == "identifier"), None)
            if name_node is None:
                continue
            yield FieldDecl(
                name=_text(name_node),
                type_syntax=type_syntax,
                modifiers=frozenset(modifiers),
                attributes=tuple(attributes),
            )

    def _type_syntax(self, node: Any) -> TypeSyntax:
        text = _text(node)
        if node.type in ("qualified_name", "alias_qualified_name"):
            name_node = _field_or_child(node, "name", -1)
            inner = self._type_syntax(name_node)
            return TypeSyntax(name=inner.name, text=text, arguments=inner.arguments)
        if node.type == "generic_name":
            name = text.split("<", 1)[0].strip()
            arguments: Tuple[TypeSyntax, ...] = ()
            for child in node.named_children:
                if child.type == "identifier":
                    name = _text(child)
                elif child.type == "type_argument_list":
                    arguments = tuple(self._type_syntax(a) for a in child.named_children)
            return TypeSyntax(name=name, text=text, arguments=arguments)
        if node.type == "array_type":
            element = _field_or_child(node, "type")
            return TypeSyntax(name=text, text=text, array_of=self._type_syntax(element))
        if node.type == "nullable_type":
            inner = _field_or_child(node, "type")
            return TypeSyntax(name=text, text=text, nullable_of=self._type_syntax(inner))
        return TypeSyntax(name=text, text=text)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _ensure_indexed(self) -> None:
        if not self._project_indexed:
            self.index_project()

    def _declarations(self) -> Iterator[TypeDecl]:
        for decls in self._files.values():
            yield from decls

    def _find(self, name: str, namespace: Optional[str] = None) -> Optional[TypeDecl]:
        fallback: Optional[TypeDecl] = None
        for decl in self._declarations():
            if decl.name != name:
                continue
            if namespace is None or decl.namespace == namespace:
                return decl
            if fallback is None:
                fallback = decl
        return fallback

    def list_types(self, script: Path) -> List[TypeRef]:
        """Return the classes and structs declared in *script*."""
        self._ensure_indexed()
        decls, _ = self.index_file(script)
        return [self._ref_for_decl(d) for d in decls if d.category in ("class", "struct")]

    def resolve_type(self, script: Path, type_name: Optional[str] = None) -> Optional[TypeRef]:
        self._ensure_indexed()
        decls, has_errors = self.index_file(script)
        if has_errors:
            logger.warning("%s has syntax errors; type cannot be resolved", script)
            return None

        candidates = [d for d in decls if d.category in ("class", "struct")]
        if type_name:
            chosen = next((d for d in candidates if d.name == type_name), None)
        else:
            chosen = next((d for d in candidates if d.name == script.stem), None)
            if chosen is None and candidates:
                chosen = candidates[0]

        if chosen is None:
            logger.debug("No type %r declared in %s", type_name or script.stem, script)
            return None
        return self._ref_for_decl(chosen)

    def get_fields(self, type_ref: TypeRef) -> List[FieldMetadata]:
        self._ensure_indexed()
        decl = self._find(type_ref.name, type_ref.namespace)
        if decl is None:
            logger.debug("Type %s is not declared in the indexed sources", type_ref)
            return []

        fields = [self._field_metadata(f, decl.namespace) for f in decl.fields if f.is_instance]

        # Inherited fields follow, nearest base first; base privates are invisible.
        visited = {(decl.namespace, decl.name)}
        base = self._project_base(decl)
        while base is not None and (base.namespace, base.name) not in visited:
            visited.add((base.namespace, base.name))
            fields.extend(
                self._field_metadata(f, base.namespace)
                for f in base.fields
                if f.is_instance and not f.is_private
            )
            base = self._project_base(base)
        return fields

    def _project_base(self, decl: TypeDecl) -> Optional[TypeDecl]:
        for base_name in decl.base_names:
            base = self._find(base_name, decl.namespace)
            if base is not None and base.category == "class":
                return base
        return None

    def _field_metadata(self, field_decl: FieldDecl, namespace: str) -> FieldMetadata:
        return FieldMetadata(
            name=field_decl.name,
            declared_type=self.resolve_syntax(field_decl.type_syntax, namespace),
            accessibility=field_decl.accessibility,
            attributes=field_decl.attributes,
        )

    # ------------------------------------------------------------------
    # Kind resolution
    # ------------------------------------------------------------------

    def _ref_for_decl(self, decl: TypeDecl) -> TypeRef:
        return TypeRef(name=decl.name, namespace=decl.namespace, kind=self._kind_for_decl(decl))

    def resolve_syntax(self, syntax: TypeSyntax, namespace: str = "") -> TypeRef:
        """Turn a written type into a :class:`TypeRef` with a structural kind."""
        if syntax.array_of is not None:
            element = self.resolve_syntax(syntax.array_of, namespace)
            return TypeRef(name=syntax.text, kind=TypeKind.CONTAINER, element=element)

        if syntax.nullable_of is not None:
            # int? is Nullable<int>, a struct; string? is just string.
            inner = self.resolve_syntax(syntax.nullable_of, namespace)
            kind = TypeKind.VALUE if inner.kind in (TypeKind.VALUE, TypeKind.ENUM) else inner.kind
            return TypeRef(name=syntax.text, namespace=inner.namespace, kind=kind, element=inner.element)

        if len(syntax.arguments) == 1 and self.catalog.is_list_container(syntax.name) \
                and self._find(syntax.name, namespace) is None:
            element = self.resolve_syntax(syntax.arguments[0], namespace)
            return TypeRef(name=syntax.text, kind=TypeKind.CONTAINER, element=element)

        decl = self._find(syntax.name, namespace)
        if decl is not None:
            return TypeRef(name=syntax.text, namespace=decl.namespace, kind=self._kind_for_decl(decl))

        return TypeRef(name=syntax.text, kind=self.catalog.kind_of(syntax.name) or TypeKind.OTHER)

    def _kind_for_decl(self, decl: TypeDecl) -> TypeKind:
        if decl.category == "enum":
            return TypeKind.ENUM
        if decl.category == "struct":
            return TypeKind.VALUE
        if decl.category == "class" and self._derives_from_engine(decl, set()):
            return TypeKind.ENGINE_OBJECT
        return TypeKind.OTHER

    def _derives_from_engine(self, decl: TypeDecl, visited: Set[Tuple[str, str]]) -> bool:
        visited.add((decl.namespace, decl.name))
        for base_name in decl.base_names:
            base = self._find(base_name, decl.namespace)
            if base is not None:
                if (base.namespace, base.name) in visited:
                    continue
                if base.category == "class" and self._derives_from_engine(base, visited):
                    return True
            elif self.catalog.is_engine_base(base_name):
                return True
        return False


def _join_namespace(outer: str, inner: str) -> str:
    if outer and inner:
        return f"{outer}.{inner}"
    return outer or inner
