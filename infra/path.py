# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "CostLedgerLite"


def _platform_data_root() -> Path:
    if sys.platform.startswith("win"):
        return Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    return Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def user_data_dir() -> Path:
    """Per-user directory for log files; CM_DATA_DIR replaces it when set."""
    override = (os.getenv("CM_DATA_DIR") or "").strip()
    path = Path(override) if override else _platform_data_root() / APP_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path
