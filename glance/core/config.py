"""
Configuration management system for the Glance gesture engine.

This module provides Pydantic models for type-safe configuration with validation
and environment variable integration. Each section reads its own prefixed
variables (e.g. GLANCE_TIMER_SHORT_MS) and an optional .env file.
"""

from typing import Any
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Sampling rates the accelerometer hardware can be driven at
SUPPORTED_RATES_HZ = (10, 25, 50, 100)
MAX_BATCH_SIZE = 25


class LogLevel(str, Enum):
    """Log levels for the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseConfig(BaseSettings):
    """
    Base configuration class with common settings for all components.

    All other configuration classes should inherit from this class.
    """
    model_config = SettingsConfigDict(env_prefix="GLANCE_", env_file=".env", extra="ignore")

    debug: bool = False
    log_level: LogLevel = LogLevel.INFO


class AxisRange(BaseModel):
    """Inclusive bounds on one accelerometer axis, in milli-g."""
    model_config = ConfigDict(frozen=True)

    min: int
    max: int

    @model_validator(mode="after")
    def validate_bounds(self):
        """Validate the range is not inverted."""
        if self.min > self.max:
            raise ValueError(f"Axis range min ({self.min}) must not exceed max ({self.max})")
        return self

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max


class ZoneBox(BaseModel):
    """A 3D box in accelerometer space made of one range per axis."""
    model_config = ConfigDict(frozen=True)

    x: AxisRange
    y: AxisRange
    z: AxisRange

    def contains(self, sample: Any) -> bool:
        """
        Check whether a sample lies inside the box.

        Args:
            sample: Any object exposing integer x, y and z attributes

        Returns:
            True if every axis is within its range
        """
        return (self.x.contains(sample.x)
                and self.y.contains(sample.y)
                and self.z.contains(sample.z))


def _box(x, y, z) -> ZoneBox:
    return ZoneBox(
        x=AxisRange(min=x[0], max=x[1]),
        y=AxisRange(min=y[0], max=y[1]),
        z=AxisRange(min=z[0], max=z[1]),
    )


class ZoneConfig(BaseConfig):
    """Configuration for the zone classifier boxes."""
    model_config = SettingsConfigDict(env_prefix="GLANCE_ZONE_", env_file=".env", extra="ignore")

    # Watch tilted towards user, screen pointed toward user
    active: ZoneBox = Field(default_factory=lambda: _box((-500, 500), (-900, 200), (-1100, 0)))
    # Arm hanging downward, select button pointing toward ground
    inactive: ZoneBox = Field(default_factory=lambda: _box((800, 1000), (-500, 500), (-800, 800)))
    # Arm horizontal, screen facing away from user.
    # Lower Y bound widened from 850 so the zone is reachable at low sample rates.
    roll: ZoneBox = Field(default_factory=lambda: _box((-600, 600), (600, 1200), (-500, 500)))


class TimerConfig(BaseConfig):
    """Configuration for the gesture timers, all in milliseconds."""
    model_config = SettingsConfigDict(env_prefix="GLANCE_TIMER_", env_file=".env", extra="ignore")

    activation_ms: int = 500    # Min time in active zone before triggering
    short_ms: int = 5000        # Time to sit in active zone with light on and fast polling
    long_ms: int = 15000        # Time to linger in active zone with nothing happening
    roll_ms: int = 1000         # Time allowed to return from roll

    @field_validator("activation_ms", "short_ms", "long_ms", "roll_ms")
    @classmethod
    def validate_duration(cls, v):
        """Validate durations are positive."""
        if v <= 0:
            raise ValueError("Timer durations must be positive")
        return v


class SamplingConfig(BaseConfig):
    """Configuration for the slow (idle) and fast (active) sampling modes."""
    model_config = SettingsConfigDict(env_prefix="GLANCE_SAMPLING_", env_file=".env", extra="ignore")

    slow_rate_hz: int = 10
    slow_batch_size: int = 7    # ~0.7 s between deliveries
    fast_rate_hz: int = 25
    fast_batch_size: int = 5    # ~0.2 s between deliveries
    switch_delay_ms: int = 10

    @field_validator("slow_rate_hz", "fast_rate_hz")
    @classmethod
    def validate_rate(cls, v):
        """Validate the rate is one the sensor supports."""
        if v not in SUPPORTED_RATES_HZ:
            raise ValueError(f"Sampling rate must be one of {SUPPORTED_RATES_HZ}")
        return v

    @field_validator("slow_batch_size", "fast_batch_size")
    @classmethod
    def validate_batch_size(cls, v):
        """Validate batch size is within the sensor's buffer."""
        if not 1 <= v <= MAX_BATCH_SIZE:
            raise ValueError(f"Batch size must be between 1 and {MAX_BATCH_SIZE}")
        return v

    @field_validator("switch_delay_ms")
    @classmethod
    def validate_switch_delay(cls, v):
        if v < 0:
            raise ValueError("Switch delay must not be negative")
        return v

    @model_validator(mode="after")
    def validate_ordering(self):
        """Validate fast mode is not slower than slow mode."""
        if self.fast_rate_hz < self.slow_rate_hz:
            raise ValueError("fast_rate_hz must not be lower than slow_rate_hz")
        return self


class BacklightConfig(BaseConfig):
    """Configuration for backlight takeover."""
    model_config = SettingsConfigDict(env_prefix="GLANCE_BACKLIGHT_", env_file=".env", extra="ignore")

    control_backlight: bool = True
    legacy_flick_to_light: bool = False
    fade_interval_ms: int = 500     # Duration of one interaction hold

    @field_validator("fade_interval_ms")
    @classmethod
    def validate_fade_interval(cls, v):
        if v <= 0:
            raise ValueError("Fade interval must be positive")
        return v


class EventConfig(BaseConfig):
    """Configuration for the event system."""
    model_config = SettingsConfigDict(env_prefix="GLANCE_EVENT_", env_file=".env", extra="ignore")

    max_trace_events: int = 1000
    tracing_enabled: bool = True


class GlanceSettings(BaseModel):
    """
    User-facing settings as sent by the companion configuration page.

    Field aliases match the message keys of the settings page, so a received
    dictionary can be validated directly with ``GlanceSettings(**message)``.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    backlight: bool = Field(default=True, alias="CfgBacklight")
    flick_backlight: bool = Field(default=True, alias="CfgFlickBacklight")
    light_time_s: int = Field(default=5, ge=1, le=30, alias="CfgLightTime")
    active_time_s: int = Field(default=30, ge=1, le=60, alias="CfgActiveTime")
    roll_time_ms: int = Field(default=1000, ge=300, le=5000, alias="CfgRollTime")


class ApplicationConfig(BaseConfig):
    """
    Main application configuration that combines all component configurations.

    This is the top-level configuration class that should be used by the application.
    """
    model_config = SettingsConfigDict(
        env_prefix="GLANCE_", env_file=".env", env_nested_delimiter="__", extra="ignore"
    )

    zone: ZoneConfig = Field(default_factory=ZoneConfig)
    timer: TimerConfig = Field(default_factory=TimerConfig)
    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    backlight: BacklightConfig = Field(default_factory=BacklightConfig)
    event: EventConfig = Field(default_factory=EventConfig)


def get_config() -> ApplicationConfig:
    """
    Get the application configuration.

    Returns:
        The validated ApplicationConfig instance
    """
    return ApplicationConfig()
