"""Configuration paths and defaults for inspector-cli."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("INSPECTOR_CLI_HOME", str(Path.home() / ".inspector_cli"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
SCRIPT_EXTENSION = ".cs"


def ensure_base_dir() -> None:
    """Create the configuration directory if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
