"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    IdleSettings,
    RuntimeSettings,
    ScheduleSettings,
    UIServerSettings,
)

_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        schedule=_parse_schedule_settings(_section(raw, "schedule")),
        idle=_parse_idle_settings(_section(raw, "idle")),
        runtime=_parse_runtime_settings(_section(raw, "runtime"), base_dir=base_dir),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server")),
        source_file=source_file,
    )


def _parse_schedule_settings(section: Mapping[str, Any]) -> ScheduleSettings:
    return ScheduleSettings(
        short_interval_minutes=_as_float(
            section.get("short_interval_minutes", 15.0),
            "schedule.short_interval_minutes",
        ),
        short_duration_seconds=_as_float(
            section.get("short_duration_seconds", 15.0),
            "schedule.short_duration_seconds",
        ),
        short_enabled=_as_bool(
            section.get("short_enabled", True),
            "schedule.short_enabled",
        ),
        long_interval_minutes=_as_float(
            section.get("long_interval_minutes", 50.0),
            "schedule.long_interval_minutes",
        ),
        long_duration_minutes=_as_float(
            section.get("long_duration_minutes", 5.0),
            "schedule.long_duration_minutes",
        ),
        long_enabled=_as_bool(
            section.get("long_enabled", True),
            "schedule.long_enabled",
        ),
        strict_mode=_as_bool(section.get("strict_mode", False), "schedule.strict_mode"),
    )


def _parse_idle_settings(section: Mapping[str, Any]) -> IdleSettings:
    return IdleSettings(
        enabled=_as_bool(section.get("enabled", True), "idle.enabled"),
        reset_after_minutes=_as_float(
            section.get("reset_after_minutes", 5.0),
            "idle.reset_after_minutes",
        ),
        check_interval_seconds=_as_float(
            section.get("check_interval_seconds", 5.0),
            "idle.check_interval_seconds",
        ),
    )


def _parse_runtime_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> RuntimeSettings:
    journal_file = _as_str(section.get("journal_file", ""), "runtime.journal_file")
    return RuntimeSettings(
        tick_interval_seconds=_as_float(
            section.get("tick_interval_seconds", 1.0),
            "runtime.tick_interval_seconds",
        ),
        journal_file=_resolve_path(base_dir, journal_file),
        log_level=_as_log_level(section.get("log_level", "INFO"), "runtime.log_level"),
    )


def _parse_ui_server_settings(section: Mapping[str, Any]) -> UIServerSettings:
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a number.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a number.") from error
    raise AppConfigurationError(f"{field} must be a number.")


def _as_log_level(value: Any, field: str) -> str:
    level = _as_str(value, field).upper() or "INFO"
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"{field} must be one of: {allowed}.")
    return level


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
