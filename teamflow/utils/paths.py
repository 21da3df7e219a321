# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Follows the XDG Base Directory layout
- DB lives under $XDG_DATA_HOME/teamflow/teamflow.db unless overridden
- Logs/state/config remain under XDG dirs
- Migrations ship inside the package
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "teamflow"


XDG_DATA_HOME = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
XDG_STATE_HOME = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


DATA_DIR = XDG_DATA_HOME / APP_NAME
STATE_DIR = XDG_STATE_HOME / APP_NAME
LOGS_DIR = STATE_DIR / "logs"
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME


# Package-relative locations
PACKAGE_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = (PACKAGE_ROOT / "migrations").resolve()


DB_PATH = DATA_DIR / "teamflow.db"
