"""Writing generated editor scripts, appending to files that already exist."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from .generator import EDITOR_IMPORT
from .models import WriteResult

logger = logging.getLogger(__name__)

GUARDED_EDITOR_IMPORT = f"#if UNITY_EDITOR\n{EDITOR_IMPORT}\n#endif\n"
DECLARATION_PREFIXES = ("namespace", "public", "internal")
# Any UnityEditor using, including sub-namespaces, counts as present.
EDITOR_IMPORT_PREFIX = "using UnityEditor"
SOURCE_ENCODING = "utf-8-sig"


def find_import_insertion(lines: List[str]) -> Optional[int]:
    """Index of the line the editor import should go before.

    None when the import is already present or no declaration line exists.
    """
    if any(line.startswith(EDITOR_IMPORT_PREFIX) for line in lines):
        return None
    for index, line in enumerate(lines):
        if line.startswith(DECLARATION_PREFIXES):
            return index
    return None


def merge_into(existing: str, generated: str) -> Tuple[str, bool]:
    """Append *generated* to *existing* source.

    Returns the merged text and whether the guarded import was inserted.
    Nothing in *existing* is parsed or deduplicated; only the import line
    may be added in front of the first declaration.
    """
    lines = existing.split("\n")
    index = find_import_insertion(lines)
    if index is not None:
        lines[index] = GUARDED_EDITOR_IMPORT + lines[index]
    return "\n".join(lines) + "\n" + generated, index is not None


def write(path: Path, text: str) -> WriteResult:
    """Write *text* to *path*, merging into the file if it exists.

    I/O errors propagate to the caller.
    """
    if not path.exists():
        path.write_text(text, encoding="utf-8")
        logger.info("Created %s", path)
        return WriteResult(path=path)

    # A byte-order mark is dropped on read, as .NET's File.ReadAllText does.
    merged, inserted = merge_into(path.read_text(encoding=SOURCE_ENCODING), text)
    path.write_text(merged, encoding="utf-8")
    logger.info("Appended editor class to %s%s", path, " (added UnityEditor import)" if inserted else "")
    return WriteResult(path=path, merged=True, import_inserted=inserted)


def preview_write(path: Path, text: str) -> str:
    """Unified diff of what :func:`write` would do to *path*."""
    original = path.read_text(encoding=SOURCE_ENCODING) if path.exists() else ""
    modified = merge_into(original, text)[0] if path.exists() else text

    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        modified.splitlines(keepends=True),
        fromfile=f"a/{path.name}",
        tofile=f"b/{path.name}",
    )
    return "".join(diff)
