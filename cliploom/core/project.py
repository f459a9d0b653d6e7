"""Project model: the editing session that owns an ordered list of clips.

A ``Project`` is created once per editing session and passed explicitly to
the components that work on it (``ClipStore``, ``SelectionTracker``,
``PlaybackClock``). Only ``ClipStore`` mutates ``clips``; the other fields
here are presentation state (zoom, playhead, export quality) with their own
clamping setters.

``duration`` is never stored: it is derived from the clips every time.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from ..config import QUALITY_PRESETS, EditorSettings, settings
from ..utils.timefmt import format_ruler
from .clip import Clip, clamp
from .errors import ClipNotFoundError


def _session_id() -> str:
    return str(int(time.time() * 1000))


@dataclass
class Project:
    name: str = "Untitled"
    clips: List[Clip] = field(default_factory=list)
    zoom: float = 1.0
    playback_time: float = 0.0
    quality: str = ""
    selected_clip_id: Optional[str] = None
    id: str = field(default_factory=_session_id)
    settings: EditorSettings = field(default_factory=settings, repr=False)

    def __post_init__(self):
        if not self.quality:
            self.quality = self.settings.default_quality
        self.zoom = clamp(self.zoom, self.settings.zoom_min, self.settings.zoom_max)

    # --- Derived state ---
    @property
    def duration(self) -> float:
        return max((c.timeline_end for c in self.clips), default=0.0)

    @property
    def is_empty(self) -> bool:
        return not self.clips

    # --- Lookup ---
    def find_clip(self, clip_id: Optional[str]) -> Optional[Clip]:
        if clip_id is None:
            return None
        for c in self.clips:
            if c.id == clip_id:
                return c
        return None

    def get_clip(self, clip_id: str) -> Clip:
        clip = self.find_clip(clip_id)
        if clip is None:
            raise ClipNotFoundError(clip_id)
        return clip

    def has_clip(self, clip_id: Optional[str]) -> bool:
        return self.find_clip(clip_id) is not None

    def index_of(self, clip_id: str) -> int:
        for index, c in enumerate(self.clips):
            if c.id == clip_id:
                return index
        raise ClipNotFoundError(clip_id)

    # --- Zoom (presentation scale only) ---
    def set_zoom(self, zoom: float) -> float:
        self.zoom = clamp(float(zoom), self.settings.zoom_min, self.settings.zoom_max)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom * self.settings.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom / self.settings.zoom_step)

    @property
    def pixels_per_second(self) -> float:
        return self.settings.base_pixels_per_second * self.zoom

    def pixel_at_time(self, t: float) -> float:
        return t * self.pixels_per_second

    def time_at_pixel(self, x: float) -> float:
        """Timeline time under pixel ``x``, clamped to ``[0, duration]``."""
        return clamp(x / self.pixels_per_second, 0.0, self.duration)

    def ruler_ticks(self) -> List[Tuple[float, str]]:
        """One ``(x, label)`` mark per whole second, through the end of the timeline."""
        return [
            (self.pixel_at_time(s), format_ruler(s))
            for s in range(math.ceil(self.duration) + 1)
        ]

    # --- Export quality ---
    def set_quality(self, quality: str) -> None:
        if quality not in QUALITY_PRESETS:
            raise ValueError(
                f"unknown quality {quality!r}; expected one of {', '.join(QUALITY_PRESETS)}"
            )
        self.quality = quality

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "clips": [c.to_dict() for c in self.clips],
            "duration": self.duration,
            "zoom": self.zoom,
            "playback_time": self.playback_time,
            "quality": self.quality,
            "selected_clip_id": self.selected_clip_id,
        }


__all__ = ["Project"]
