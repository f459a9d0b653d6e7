"""Editor configuration.

All tunables that are not correctness-relevant live here (tick period, zoom
limits, skip distance). Values default to what the editor UI expects and may
be overridden through ``CLIPLOOM_*`` environment variables:

    CLIPLOOM_TICK_INTERVAL      playback tick period in seconds (default 0.1)
    CLIPLOOM_SKIP_SECONDS       skip back/forward distance (default 10)
    CLIPLOOM_SEEK_TOLERANCE     decoder drift tolerated before resync (default 0.2)
    CLIPLOOM_DEFAULT_QUALITY    480p | 720p | 1080p (default 1080p)
    CLIPLOOM_LOG_LEVEL          logging level name (default WARNING)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class QualityPreset:
    width: int
    height: int
    bitrate: str

    @property
    def bitrate_kbps(self) -> int:
        return int(self.bitrate.rstrip("k"))


# Export presets; their names are the only valid ``quality`` values.
QUALITY_SETTINGS: Dict[str, QualityPreset] = {
    "480p": QualityPreset(854, 480, "1000k"),
    "720p": QualityPreset(1280, 720, "2500k"),
    "1080p": QualityPreset(1920, 1080, "5000k"),
}

QUALITY_PRESETS = tuple(QUALITY_SETTINGS)

_ENV_PREFIX = "CLIPLOOM_"


@dataclass(frozen=True)
class EditorSettings:
    tick_interval: float = 0.1
    skip_seconds: float = 10.0
    seek_tolerance: float = 0.2
    base_pixels_per_second: float = 50.0
    zoom_min: float = 0.1
    zoom_max: float = 5.0
    zoom_step: float = 1.5
    default_quality: str = "1080p"
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if self.skip_seconds < 0:
            raise ValueError("skip_seconds must not be negative")
        if not 0 < self.zoom_min <= self.zoom_max:
            raise ValueError("zoom range must satisfy 0 < zoom_min <= zoom_max")
        if self.zoom_step <= 1.0:
            raise ValueError("zoom_step must be greater than 1")
        if self.default_quality not in QUALITY_PRESETS:
            raise ValueError(f"unknown quality preset {self.default_quality!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EditorSettings":
        """Build settings from ``CLIPLOOM_*`` variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = env.get(_ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            if f.type in ("float", float):
                try:
                    overrides[f.name] = float(raw)
                except ValueError:
                    raise ValueError(
                        f"{_ENV_PREFIX}{f.name.upper()} must be a number, got {raw!r}"
                    ) from None
            else:
                overrides[f.name] = raw.strip()
        if "log_level" in overrides:
            overrides["log_level"] = overrides["log_level"].upper()
        return cls(**overrides)


_settings: Optional[EditorSettings] = None


def settings() -> EditorSettings:
    """Return the process-wide settings, reading the environment on first use."""
    global _settings
    if _settings is None:
        _settings = EditorSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next ``settings()`` call re-reads the environment."""
    global _settings
    _settings = None


__all__ = [
    "EditorSettings",
    "QUALITY_PRESETS",
    "QUALITY_SETTINGS",
    "QualityPreset",
    "settings",
    "reset_settings",
]
