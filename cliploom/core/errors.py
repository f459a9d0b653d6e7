"""Error kinds raised by the timeline engine.

All of them are recoverable: callers check and either ignore the failure or
surface a transient notice. None of them leaves the project half-modified.
"""

from __future__ import annotations


class TimelineError(Exception):
    """Base class for editing errors."""


class ClipNotFoundError(TimelineError, KeyError):
    """An operation referenced a clip id that is not in the project."""

    def __init__(self, clip_id: str):
        super().__init__(clip_id)
        self.clip_id = clip_id

    def __str__(self) -> str:
        return f"clip {self.clip_id!r} not found"


class InvalidSplitPointError(TimelineError, ValueError):
    """Split time does not fall strictly inside the clip's timeline span."""

    def __init__(self, clip_id: str, at_time: float, start: float, end: float):
        super().__init__(
            f"split at {at_time:.3f}s is outside clip {clip_id!r} "
            f"interior ({start:.3f}s, {end:.3f}s)"
        )
        self.clip_id = clip_id
        self.at_time = at_time


class InvalidClipError(TimelineError, ValueError):
    """Clip parameters would violate a timeline invariant."""


class EmptyProjectPlaybackError(TimelineError):
    """Playback was requested on a project without clips."""

    def __init__(self, message: str = "Add some video clips to the timeline first."):
        super().__init__(message)


class EmptyProjectExportError(TimelineError):
    """Export was requested on a project without clips."""


class AssetProbeError(TimelineError):
    """A media asset could not be probed for its duration."""


__all__ = [
    "TimelineError",
    "ClipNotFoundError",
    "InvalidSplitPointError",
    "InvalidClipError",
    "EmptyProjectPlaybackError",
    "EmptyProjectExportError",
    "AssetProbeError",
]
