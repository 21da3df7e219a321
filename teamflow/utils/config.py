# teamflow/utils/config.py
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional
from .paths import CONFIG_DIR, DB_PATH

SETTINGS_FILE = CONFIG_DIR / "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "database": {
        "path": None,
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in base.items()}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = {**out[key], **value}
        else:
            out[key] = value
    return out


def load_settings(path: Path = SETTINGS_FILE) -> Dict[str, Any]:
    if path.exists():
        try:
            return _merge(_DEFAULTS, json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError):
            return _merge(_DEFAULTS, {})
    return _merge(_DEFAULTS, {})


def save_settings(data: Dict[str, Any], path: Path = SETTINGS_FILE) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def resolve_db_path(explicit: Optional[str | Path] = None, settings: Optional[Dict[str, Any]] = None) -> Path:
    """Explicit argument, then TEAMFLOW_DB, then settings.json, then the XDG default."""
    if explicit:
        return Path(explicit)
    env = os.environ.get("TEAMFLOW_DB")
    if env:
        return Path(env)
    settings = settings if settings is not None else load_settings()
    configured = (settings.get("database") or {}).get("path")
    if configured:
        return Path(configured).expanduser()
    return DB_PATH
