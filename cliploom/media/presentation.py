"""Presentation adapter: what a rendering surface should show at a given time.

The core never touches pixels or audio samples. A renderer (video widget,
export pipeline, test double) pulls a ``FrameParameters`` bundle for a
timeline time and applies it itself: seek its decoder for ``source_ref`` to
``source_time``, set output volume, apply brightness/contrast/saturation and
multiply by ``fade_gain``.

``PreviewBridge`` pushes those bundles to attached surfaces whenever the
playback clock moves or the clips are edited, and tells them separately when
the active clip changes so they can swap decoder sources only then.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from PySide6.QtCore import QObject, Signal

from ..core.clip import Clip
from ..core.project import Project
from ..core.store import ClipStore
from .playback import PlaybackClock, active_clip_at, effective_source_time

log = logging.getLogger(__name__)


def fade_envelope(t: float, duration: float, fade_in: float, fade_out: float) -> float:
    """Linear fade gain (0.0-1.0) at local time ``t`` of a clip."""
    if duration <= 0:
        return 1.0
    f = 1.0
    if fade_in > 0 and t < fade_in:
        f = min(f, t / fade_in)
    if fade_out > 0 and t > duration - fade_out:
        f = min(f, (duration - t) / fade_out)
    return max(0.0, min(1.0, f))


@dataclass(frozen=True)
class FrameParameters:
    clip_id: str
    source_ref: Any
    source_time: float
    volume: float
    muted: bool
    brightness: float
    contrast: float
    saturation: float
    fade_gain: float

    @classmethod
    def for_clip(cls, clip: Clip, time: float) -> "FrameParameters":
        local = time - clip.timeline_position
        return cls(
            clip_id=clip.id,
            source_ref=clip.source_ref,
            source_time=effective_source_time(clip, time),
            volume=clip.effective_volume,
            muted=clip.muted,
            brightness=clip.brightness,
            contrast=clip.contrast,
            saturation=clip.saturation,
            fade_gain=fade_envelope(local, clip.clip_duration, clip.fade_in, clip.fade_out),
        )

    def filters(self) -> Dict[str, float]:
        """Visual adjustments as multipliers (1.0 = neutral)."""
        return {
            "brightness": self.brightness / 100.0,
            "contrast": self.contrast / 100.0,
            "saturation": self.saturation / 100.0,
        }

    def css_filter(self) -> str:
        return (
            f"brightness({self.brightness:g}%) "
            f"contrast({self.contrast:g}%) "
            f"saturate({self.saturation:g}%)"
        )


@runtime_checkable
class RenderSurface(Protocol):
    def present(self, frame: Optional[FrameParameters]) -> None: ...


class PreviewAdapter:
    """Read-only view of a project for renderers."""

    def __init__(self, project: Project):
        self._project = project

    def active_clip_at(self, time: float) -> Optional[Clip]:
        return active_clip_at(self._project.clips, time)

    def effective_source_time(self, clip: Clip, time: float) -> float:
        return effective_source_time(clip, time)

    def frame_at(self, time: float) -> Optional[FrameParameters]:
        clip = self.active_clip_at(time)
        if clip is None:
            return None
        return FrameParameters.for_clip(clip, time)


def needs_resync(decoder_time: float, frame: FrameParameters, tolerance: float) -> bool:
    """True if a decoder at ``decoder_time`` has drifted too far from the frame."""
    return abs(decoder_time - frame.source_time) > tolerance


class PreviewBridge(QObject):
    """Drives render surfaces from a playback clock.

    Signals:
        frameChanged(object)        FrameParameters or None (gap / empty timeline)
        activeClipChanged(object)   new active clip id, or None
    """

    frameChanged = Signal(object)
    activeClipChanged = Signal(object)

    def __init__(
        self,
        project: Project,
        clock: PlaybackClock,
        store: Optional[ClipStore] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._project = project
        self._adapter = PreviewAdapter(project)
        self._active_id: Optional[str] = None
        self._last_frame: Optional[FrameParameters] = None
        self._surfaces: List[RenderSurface] = []
        clock.positionChanged.connect(self._onPosition)
        if store is not None:
            store.clipsChanged.connect(self.refresh)

    @property
    def adapter(self) -> PreviewAdapter:
        return self._adapter

    @property
    def active_clip_id(self) -> Optional[str]:
        return self._active_id

    @property
    def last_frame(self) -> Optional[FrameParameters]:
        return self._last_frame

    @property
    def seek_tolerance(self) -> float:
        return self._project.settings.seek_tolerance

    def attach(self, surface: RenderSurface) -> None:
        if surface in self._surfaces:
            return
        self._surfaces.append(surface)
        self.frameChanged.connect(surface.present)
        surface.present(self._last_frame)

    def detach(self, surface: RenderSurface) -> None:
        if surface not in self._surfaces:
            return
        self._surfaces.remove(surface)
        self.frameChanged.disconnect(surface.present)

    def needs_resync(self, decoder_time: float) -> bool:
        if self._last_frame is None:
            return False
        return needs_resync(decoder_time, self._last_frame, self.seek_tolerance)

    def refresh(self) -> None:
        """Re-evaluate the frame at the current playhead (after an edit)."""
        self._onPosition(self._project.playback_time)

    def _onPosition(self, t: float):
        frame = self._adapter.frame_at(t)
        clip_id = frame.clip_id if frame is not None else None
        self._last_frame = frame
        if clip_id != self._active_id:
            self._active_id = clip_id
            log.debug("active clip at %.3fs is now %s", t, clip_id)
            self.activeClipChanged.emit(clip_id)
        self.frameChanged.emit(frame)


__all__ = [
    "FrameParameters",
    "PreviewAdapter",
    "PreviewBridge",
    "RenderSurface",
    "fade_envelope",
    "needs_resync",
]
