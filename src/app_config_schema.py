"""Immutable settings dataclasses parsed from config.toml."""

from __future__ import annotations

from dataclasses import dataclass, field


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class ScheduleSettings:
    short_interval_minutes: float = 15.0
    short_duration_seconds: float = 15.0
    short_enabled: bool = True
    long_interval_minutes: float = 50.0
    long_duration_minutes: float = 5.0
    long_enabled: bool = True
    strict_mode: bool = False


@dataclass(frozen=True)
class IdleSettings:
    enabled: bool = True
    reset_after_minutes: float = 5.0
    check_interval_seconds: float = 5.0


@dataclass(frozen=True)
class RuntimeSettings:
    tick_interval_seconds: float = 1.0
    journal_file: str = ""
    log_level: str = "INFO"


@dataclass(frozen=True)
class UIServerSettings:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class AppConfig:
    schedule: ScheduleSettings = field(default_factory=ScheduleSettings)
    idle: IdleSettings = field(default_factory=IdleSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)
    ui_server: UIServerSettings = field(default_factory=UIServerSettings)
    source_file: str = ""
