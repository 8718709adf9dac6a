"""Global configuration stored as JSON under ~/.config/commit-resume/."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable


def global_config_dir() -> Path:
    config = Path.home() / ".config" / "commit-resume"
    config.mkdir(parents=True, exist_ok=True)
    return config


def load_global_config() -> dict:
    path = global_config_dir() / "config.json"
    if path.exists():
        return json.loads(path.read_text())
    return {}


def save_global_config(config: dict) -> None:
    path = global_config_dir() / "config.json"
    path.write_text(json.dumps(config, indent=2))


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise ValueError("must be at least 1")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise ValueError("must be greater than 0")
    return number


def _non_empty(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


# key -> (parser for CLI input, default)
VALID_KEYS: dict[str, tuple[Callable[[str], Any], Any]] = {
    "generation_concurrency": (_positive_int, 3),
    "clone_timeout": (_positive_float, 120.0),
    "log_timeout": (_positive_float, 60.0),
    "claude_path": (_non_empty, None),
    "resume_language": (_non_empty, "English"),
}


def parse_value(key: str, value: str) -> Any:
    """Validate and convert a raw CLI value for ``key``. Raises ValueError."""
    if key not in VALID_KEYS:
        raise KeyError(key)
    parser, _ = VALID_KEYS[key]
    return parser(value)


def get_setting(key: str, config: dict | None = None) -> Any:
    """Return the configured value for ``key`` or its default."""
    if config is None:
        config = load_global_config()
    _, default = VALID_KEYS[key]
    return config.get(key, default)
