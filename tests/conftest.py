"""Pytest configuration and fixtures for inspector-cli tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional

import pytest

from inspector_cli.models import (
    Accessibility,
    FieldMetadata,
    TypeKind,
    TypeRef,
)
from inspector_cli.reflection import CSharpReflectionProvider, ReflectionProvider


class StaticProvider(ReflectionProvider):
    """Reflection provider backed by an explicit declaration list."""

    def __init__(self, types: Dict[TypeRef, List[FieldMetadata]]):
        self.types = types
        self.calls = 0

    def resolve_type(self, script: Path, type_name: Optional[str] = None) -> Optional[TypeRef]:
        wanted = type_name or script.stem
        return next((t for t in self.types if t.name == wanted), None)

    def get_fields(self, type_ref: TypeRef) -> List[FieldMetadata]:
        self.calls += 1
        return list(self.types.get(type_ref, []))


ENGINE = TypeRef("GameObject", "UnityEngine", TypeKind.ENGINE_OBJECT)
FLOAT = TypeRef("float", kind=TypeKind.VALUE)
STRING = TypeRef("string", kind=TypeKind.STRING)
UNRELATED = TypeRef("Inventory", "Game", TypeKind.OTHER)


def list_of(element: TypeRef) -> TypeRef:
    return TypeRef(f"List<{element.name}>", kind=TypeKind.CONTAINER, element=element)


def make_field(
    name: str,
    declared_type: TypeRef = FLOAT,
    public: bool = True,
    attributes=(),
) -> FieldMetadata:
    return FieldMetadata(
        name=name,
        declared_type=declared_type,
        accessibility=Accessibility.PUBLIC if public else Accessibility.NON_PUBLIC,
        attributes=tuple(attributes),
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch) -> Path:
    """Point the config file at a temporary home so user settings never leak in."""
    home = tmp_path / "inspector_home"
    monkeypatch.setattr("inspector_cli.config.BASE_DIR", home)
    monkeypatch.setattr("inspector_cli.config.CONFIG_FILE", home / "config.toml")
    return home / "config.toml"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def unity_project(temp_dir: Path) -> Path:
    """A writable copy of the sample Unity project; returns its Assets folder."""
    source = Path(__file__).parent / "fixtures" / "unity_project"
    target = temp_dir / "unity_project"
    shutil.copytree(source, target)
    return target / "Assets"


@pytest.fixture
def scripts_dir(unity_project: Path) -> Path:
    return unity_project / "Scripts"


@pytest.fixture
def player_script(scripts_dir: Path) -> Path:
    return scripts_dir / "Player.cs"


@pytest.fixture
def provider(unity_project: Path) -> CSharpReflectionProvider:
    return CSharpReflectionProvider(unity_project)
