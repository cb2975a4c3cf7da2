"""Schedule configuration model consumed by the break scheduler."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .constants import (
    DEFAULT_IDLE_CHECK_INTERVAL_SECONDS,
    DEFAULT_IDLE_RESET_AFTER_SECONDS,
    DEFAULT_LONG_DURATION_SECONDS,
    DEFAULT_LONG_INTERVAL_SECONDS,
    DEFAULT_SHORT_DURATION_SECONDS,
    DEFAULT_SHORT_INTERVAL_SECONDS,
)


@dataclass(frozen=True)
class BreakSchedule:
    """Recurring break definition: work interval before it fires and its length."""
    interval_seconds: float = DEFAULT_SHORT_INTERVAL_SECONDS
    duration_seconds: float = DEFAULT_SHORT_DURATION_SECONDS
    enabled: bool = True


@dataclass(frozen=True)
class LongBreakSchedule(BreakSchedule):
    """Long break definition; strict mode tells consumers the break cannot be skipped."""
    interval_seconds: float = DEFAULT_LONG_INTERVAL_SECONDS
    duration_seconds: float = DEFAULT_LONG_DURATION_SECONDS
    strict_mode: bool = False


@dataclass(frozen=True)
class IdleResetPolicy:
    enabled: bool = True
    reset_after_seconds: float = DEFAULT_IDLE_RESET_AFTER_SECONDS
    check_interval_seconds: float = DEFAULT_IDLE_CHECK_INTERVAL_SECONDS


@dataclass(frozen=True)
class ScheduleConfig:
    """Complete scheduler configuration, replaced wholesale on update."""
    short: BreakSchedule = field(default_factory=BreakSchedule)
    long: LongBreakSchedule = field(default_factory=LongBreakSchedule)
    idle: IdleResetPolicy = field(default_factory=IdleResetPolicy)

    def normalized(self) -> "ScheduleConfig":
        """Return a copy with non-positive values clamped to safe defaults."""
        short = replace(
            self.short,
            interval_seconds=_positive_or(
                self.short.interval_seconds,
                DEFAULT_SHORT_INTERVAL_SECONDS,
            ),
            duration_seconds=max(0.0, float(self.short.duration_seconds)),
        )
        long = replace(
            self.long,
            interval_seconds=_positive_or(
                self.long.interval_seconds,
                DEFAULT_LONG_INTERVAL_SECONDS,
            ),
            duration_seconds=max(0.0, float(self.long.duration_seconds)),
        )
        idle = replace(
            self.idle,
            reset_after_seconds=max(0.0, float(self.idle.reset_after_seconds)),
            check_interval_seconds=_positive_or(
                self.idle.check_interval_seconds,
                DEFAULT_IDLE_CHECK_INTERVAL_SECONDS,
            ),
        )
        return ScheduleConfig(short=short, long=long, idle=idle)

    def without_idle_reset(self) -> "ScheduleConfig":
        return replace(self, idle=replace(self.idle, enabled=False))

    @classmethod
    def from_settings(cls, schedule, idle) -> "ScheduleConfig":
        """Build the scheduler config from parsed ``[schedule]`` and ``[idle]`` settings."""
        return cls(
            short=BreakSchedule(
                interval_seconds=float(schedule.short_interval_minutes) * 60.0,
                duration_seconds=float(schedule.short_duration_seconds),
                enabled=bool(schedule.short_enabled),
            ),
            long=LongBreakSchedule(
                interval_seconds=float(schedule.long_interval_minutes) * 60.0,
                duration_seconds=float(schedule.long_duration_minutes) * 60.0,
                enabled=bool(schedule.long_enabled),
                strict_mode=bool(schedule.strict_mode),
            ),
            idle=IdleResetPolicy(
                enabled=bool(idle.enabled),
                reset_after_seconds=float(idle.reset_after_minutes) * 60.0,
                check_interval_seconds=float(idle.check_interval_seconds),
            ),
        ).normalized()


def _positive_or(value: float, default: float) -> float:
    value = float(value)
    return value if value > 0 else default
