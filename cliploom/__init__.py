"""Top-level package exports.

Public API surface (keep minimal):
 - EditingSession (wires everything for one editor window)
 - Project, Clip, ClipStore, SelectionTracker (timeline model)
 - PlaybackClock, PreviewAdapter, PreviewBridge (playback + rendering contract)
 - error kinds

Subsystems stay importable from their modules (``cliploom.media.assets``,
``cliploom.services.export``, ``cliploom.utils.timefmt``).
"""

from .core.clip import Clip  # noqa: F401
from .core.errors import (  # noqa: F401
    ClipNotFoundError,
    EmptyProjectPlaybackError,
    InvalidSplitPointError,
    TimelineError,
)
from .core.project import Project  # noqa: F401
from .core.selection import SelectionTracker  # noqa: F401
from .core.store import ClipStore  # noqa: F401
from .media.playback import PlaybackClock  # noqa: F401
from .media.presentation import PreviewAdapter, PreviewBridge  # noqa: F401
from .session import EditingSession  # noqa: F401

__all__ = [
    "Clip",
    "ClipNotFoundError",
    "ClipStore",
    "EditingSession",
    "EmptyProjectPlaybackError",
    "InvalidSplitPointError",
    "PlaybackClock",
    "PreviewAdapter",
    "PreviewBridge",
    "Project",
    "SelectionTracker",
    "TimelineError",
]

__version__ = "0.1.0"
