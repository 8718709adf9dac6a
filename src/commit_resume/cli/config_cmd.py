"""Config subcommands: get, set, list for global commit-resume settings."""

from __future__ import annotations

from typing import Optional

import typer

from commit_resume.cli._shared import FORMAT_OPTION
from commit_resume.utils.config import (
    VALID_KEYS,
    get_setting,
    load_global_config,
    parse_value,
    save_global_config,
)
from commit_resume.utils.output import error, info, output, output_table, success

config_app = typer.Typer(no_args_is_help=True)


def _check_key(key: str) -> None:
    if key not in VALID_KEYS:
        error(f"Unknown key: {key}. Valid keys: {', '.join(sorted(VALID_KEYS))}")
        raise typer.Exit(1)


@config_app.command("get")
def config_get(
    key: str = typer.Argument(..., help="Configuration key"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Get a configuration value (falls back to the default)."""
    _check_key(key)
    config = load_global_config()
    value = get_setting(key, config)
    if fmt == "json":
        output({"key": key, "value": value, "default": key not in config}, fmt="json")
    elif value is None:
        info(f"{key}: (not set)")
    else:
        suffix = " (default)" if key not in config else ""
        info(f"{key}: {value}{suffix}")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key"),
    value: str = typer.Argument(..., help="Value to set"),
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """Set a configuration value."""
    _check_key(key)
    try:
        parsed = parse_value(key, value)
    except ValueError as e:
        error(f"Invalid value for {key}: {value} ({e})")
        raise typer.Exit(1)

    config = load_global_config()
    config[key] = parsed
    save_global_config(config)

    if fmt == "json":
        output({"key": key, "value": parsed}, fmt="json")
    else:
        success(f"{key} = {parsed}")


@config_app.command("unset")
def config_unset(
    key: str = typer.Argument(..., help="Configuration key"),
) -> None:
    """Remove a configuration value so the default applies again."""
    _check_key(key)
    config = load_global_config()
    if config.pop(key, None) is None:
        info(f"{key} was not set")
        return
    save_global_config(config)
    success(f"{key} reset to default")


@config_app.command("list")
def config_list(
    fmt: Optional[str] = FORMAT_OPTION,
) -> None:
    """List all configuration values, including defaults."""
    config = load_global_config()
    values = {key: get_setting(key, config) for key in sorted(VALID_KEYS)}
    if fmt == "json":
        output(values, fmt="json")
        return
    rows = [
        {
            "key": key,
            "value": "" if value is None else str(value),
            "source": "config" if key in config else "default",
        }
        for key, value in values.items()
    ]
    output_table(rows, ["key", "value", "source"])
