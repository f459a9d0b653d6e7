"""Clip entity: a trimmed reference to a source asset placed on the timeline.

A clip never opens its source; ``source_ref`` is an opaque handle (usually a
file path) owned by whoever supplied it. Timing is in float seconds:

    source_in / source_out   trimmed region inside the source
    timeline_position        start offset on the project timeline

``clip_duration`` is always derived from the trimmed region. Appearance and
audio values are stored already clamped to their ranges; use
:func:`clamp_field` before assigning user input.
"""

from __future__ import annotations

import math
import os
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..utils.timefmt import format_clip_length

# Editable numeric fields and their inclusive ranges.
FIELD_RANGES: Dict[str, Tuple[float, float]] = {
    "volume": (0.0, 2.0),
    "brightness": (0.0, 200.0),
    "contrast": (0.0, 200.0),
    "saturation": (0.0, 200.0),
    "fade_in": (0.0, 5.0),
    "fade_out": (0.0, 5.0),
}

EDITABLE_FIELDS = frozenset(FIELD_RANGES) | {"muted", "name"}

NEUTRAL_VISUALS = {"brightness": 100.0, "contrast": 100.0, "saturation": 100.0}


def new_clip_id() -> str:
    return uuid.uuid4().hex


def clamp(value: float, lo: float, hi: float) -> float:
    """Bound ``value`` to ``[lo, hi]``; NaN raises ``ValueError``."""
    if math.isnan(value):
        raise ValueError("cannot clamp NaN")
    return max(lo, min(hi, value))


def clamp_field(name: str, value: Any) -> Any:
    """Coerce ``value`` for field ``name`` into its declared range.

    ``muted`` is coerced to bool and ``name`` to str; numeric fields are
    clamped. Unknown names raise ``ValueError``.
    """
    if name == "muted":
        return bool(value)
    if name == "name":
        return str(value)
    try:
        lo, hi = FIELD_RANGES[name]
    except KeyError:
        raise ValueError(f"{name!r} is not an editable clip field") from None
    return clamp(float(value), lo, hi)


def default_name(source_ref: Any) -> str:
    if isinstance(source_ref, (str, os.PathLike)):
        return os.path.basename(os.fspath(source_ref))
    return str(source_ref)


@dataclass
class Clip:
    source_ref: Any
    source_in: float
    source_out: float
    timeline_position: float = 0.0
    source_duration: float = 0.0
    name: str = ""
    volume: float = 1.0
    muted: bool = False
    brightness: float = 100.0
    contrast: float = 100.0
    saturation: float = 100.0
    fade_in: float = 0.0
    fade_out: float = 0.0
    id: str = field(default_factory=new_clip_id)

    def __post_init__(self):
        if not self.name:
            self.name = default_name(self.source_ref)
        if self.source_duration <= 0:
            self.source_duration = self.source_out

    @property
    def clip_duration(self) -> float:
        return self.source_out - self.source_in

    @property
    def timeline_end(self) -> float:
        return self.timeline_position + self.clip_duration

    @property
    def length_label(self) -> str:
        return format_clip_length(self.clip_duration)

    @property
    def effective_volume(self) -> float:
        return 0.0 if self.muted else self.volume

    def contains(self, time: float) -> bool:
        """True if timeline ``time`` lies in ``[timeline_position, timeline_end)``."""
        return self.timeline_position <= time < self.timeline_end

    def appearance(self) -> Dict[str, Any]:
        """Audio, visual and fade settings; what a split copies to both halves."""
        return {
            "volume": self.volume,
            "muted": self.muted,
            "brightness": self.brightness,
            "contrast": self.contrast,
            "saturation": self.saturation,
            "fade_in": self.fade_in,
            "fade_out": self.fade_out,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "source_ref": self.source_ref,
            "source_in": float(self.source_in),
            "source_out": float(self.source_out),
            "source_duration": float(self.source_duration),
            "timeline_position": float(self.timeline_position),
            "clip_duration": float(self.clip_duration),
        }
        data.update(self.appearance())
        return data


__all__ = [
    "Clip",
    "FIELD_RANGES",
    "EDITABLE_FIELDS",
    "NEUTRAL_VISUALS",
    "clamp",
    "clamp_field",
    "default_name",
    "new_clip_id",
]
