"""Playback clock for the project timeline.

The clock owns the playhead (``project.playback_time``) and advances it on a
fixed QTimer tick while playing. It does not decode anything: a renderer asks
``active_clip_at(t)`` / ``effective_source_time(clip, t)`` (or goes through
``PreviewAdapter``) to decide what to show.

States:
    stopped -> playing    play(); rejected with a warning if the project has no clips
    playing -> stopped    pause(), stop(), or reaching the end of the timeline

Reaching the end stops the clock and rewinds the playhead to 0.

Threading: the tick is a QTimer callback on the thread that owns the clock,
which is also where ClipStore mutations are made (the GUI thread). Qt runs
them one after the other, so a tick never observes a half-applied edit.
Call ``tick()`` directly to step the clock deterministically (tests, export
previews).

Signals:
    positionChanged(float)   playhead moved (tick, seek, rewind, clamp)
    stateChanged(str)        'stopped' | 'playing'
    playbackRejected(str)    play() refused; message is user-facing
    finished()               auto-stop at the end of the timeline
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from PySide6.QtCore import QObject, Qt, QTimer, Signal

from ..core.clip import Clip, clamp
from ..core.errors import EmptyProjectPlaybackError
from ..core.project import Project
from ..core.store import ClipStore
from ..utils.timefmt import format_time

log = logging.getLogger(__name__)

STOPPED = "stopped"
PLAYING = "playing"


def active_clip_at(clips: Iterable[Clip], time: float) -> Optional[Clip]:
    """First clip in stored order whose span ``[start, end)`` contains ``time``.

    Overlapping clips resolve to the earlier one in the list, never to the
    most recently added.
    """
    for c in clips:
        if c.contains(time):
            return c
    return None


def effective_source_time(clip: Clip, time: float) -> float:
    """Source-asset time a decoder should seek to for timeline ``time``."""
    return clip.source_in + (time - clip.timeline_position)


class PlaybackClock(QObject):
    positionChanged = Signal(float)
    stateChanged = Signal(str)
    playbackRejected = Signal(str)
    finished = Signal()

    def __init__(
        self,
        project: Project,
        store: Optional[ClipStore] = None,
        parent: Optional[QObject] = None,
        *,
        tick_interval: Optional[float] = None,
    ):
        super().__init__(parent)
        self._project = project
        self._state = STOPPED
        interval = tick_interval if tick_interval is not None else project.settings.tick_interval
        if interval <= 0:
            raise ValueError("tick_interval must be positive")
        self._tick_interval = float(interval)
        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(max(1, int(round(self._tick_interval * 1000))))
        self._timer.timeout.connect(self.tick)
        if store is not None:
            if store.project is not project:
                raise ValueError("store belongs to a different project")
            store.durationChanged.connect(self._onDurationChanged)

    # --- State ---
    @property
    def state(self) -> str:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state == PLAYING

    @property
    def tick_interval(self) -> float:
        return self._tick_interval

    def position(self) -> float:
        return self._project.playback_time

    # --- Transport ---
    def play(self) -> bool:
        """Start advancing the playhead. Returns False if there is nothing to play."""
        if self._project.is_empty:
            error = EmptyProjectPlaybackError()
            log.warning("play rejected: %s", error)
            self.playbackRejected.emit(str(error))
            return False
        if self._state == PLAYING:
            return True
        self._state = PLAYING
        self._timer.start()
        log.debug("playing from %s", format_time(self._project.playback_time))
        self.stateChanged.emit(PLAYING)
        return True

    def pause(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
        if self._state == STOPPED:
            return
        self._state = STOPPED
        log.debug("paused at %s", format_time(self._project.playback_time))
        self.stateChanged.emit(STOPPED)

    def toggle(self) -> bool:
        """Play/pause button behaviour. Returns True if the clock is now playing."""
        if self._state == PLAYING:
            self.pause()
            return False
        return self.play()

    def stop(self) -> None:
        self.pause()
        self.seek(0.0)

    def seek(self, time: float) -> float:
        """Move the playhead, clamped to ``[0, duration]``. Play state is unchanged."""
        t = clamp(float(time), 0.0, self._project.duration)
        self._project.playback_time = t
        self.positionChanged.emit(t)
        return t

    def skip_back(self, seconds: Optional[float] = None) -> float:
        step = self._project.settings.skip_seconds if seconds is None else seconds
        return self.seek(self._project.playback_time - step)

    def skip_forward(self, seconds: Optional[float] = None) -> float:
        step = self._project.settings.skip_seconds if seconds is None else seconds
        return self.seek(self._project.playback_time + step)

    def tick(self) -> None:
        """Advance one tick; at or past the end, stop and rewind to 0."""
        if self._state != PLAYING:
            return
        next_time = self._project.playback_time + self._tick_interval
        if next_time >= self._project.duration:
            self._timer.stop()
            self._state = STOPPED
            self._project.playback_time = 0.0
            log.debug("reached end of timeline, rewinding")
            self.positionChanged.emit(0.0)
            self.stateChanged.emit(STOPPED)
            self.finished.emit()
            return
        self._project.playback_time = next_time
        self.positionChanged.emit(next_time)

    # --- Queries for renderers ---
    def active_clip_at(self, time: Optional[float] = None) -> Optional[Clip]:
        t = self._project.playback_time if time is None else time
        return active_clip_at(self._project.clips, t)

    def effective_source_time(self, clip: Clip, time: Optional[float] = None) -> float:
        t = self._project.playback_time if time is None else time
        return effective_source_time(clip, t)

    # --- Internal ---
    def _onDurationChanged(self, duration: float):
        if self._project.is_empty and self._state == PLAYING:
            log.info("timeline emptied during playback, stopping")
            self.pause()
        if self._project.playback_time > duration:
            self._project.playback_time = duration
            self.positionChanged.emit(duration)


__all__ = [
    "PlaybackClock",
    "PLAYING",
    "STOPPED",
    "active_clip_at",
    "effective_source_time",
]
