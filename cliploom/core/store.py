"""Clip store: the only code that mutates a project's clip list.

Every public method validates first and mutates second, so a call that raises
leaves the project exactly as it was. After each successful mutation the
clip list is re-sorted by timeline position (stable, so clips sharing a
position keep their relative order), and observers are notified through Qt
signals once the new state is fully consistent:

    clipsChanged()                  any change to the clip list or a clip
    clipAdded(str)                  id of the new clip
    clipRemoved(str)                id of the deleted clip
    clipUpdated(str)                id of the moved or edited clip
    clipSplit(str, str, str)        original id, first part id, second part id
    durationChanged(float)          derived duration changed
    selectionChanged(object)        selection id (or None) changed as a side effect

Overlapping clips are allowed; the playback clock resolves them by stored
order.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from .clip import EDITABLE_FIELDS, NEUTRAL_VISUALS, Clip, clamp_field
from .errors import ClipNotFoundError, InvalidClipError, InvalidSplitPointError
from .project import Project

log = logging.getLogger(__name__)


def _checked_position(position: float) -> float:
    """Timeline start clamped at 0; NaN and infinities are rejected."""
    position = float(position)
    if not math.isfinite(position):
        raise InvalidClipError(f"timeline position must be finite, got {position!r}")
    return max(0.0, position)


class ClipStore(QObject):
    clipsChanged = Signal()
    clipAdded = Signal(str)
    clipRemoved = Signal(str)
    clipUpdated = Signal(str)
    clipSplit = Signal(str, str, str)
    durationChanged = Signal(float)
    selectionChanged = Signal(object)

    def __init__(self, project: Project, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._project = project
        self._last_duration = project.duration
        self._sort()

    @property
    def project(self) -> Project:
        return self._project

    @property
    def clips(self) -> Tuple[Clip, ...]:
        return tuple(self._project.clips)

    @property
    def duration(self) -> float:
        return self._project.duration

    def get_clip(self, clip_id: str) -> Clip:
        return self._project.get_clip(clip_id)

    # --- Mutations ---
    def add_clip(
        self,
        source_ref: Any,
        source_duration: float,
        position: float,
        name: Optional[str] = None,
    ) -> Clip:
        """Place the whole of a source asset on the timeline at ``position``.

        Negative positions are clamped to 0. ``source_duration`` must be a
        positive finite number of seconds (probe the asset first).
        """
        source_duration = float(source_duration)
        if not math.isfinite(source_duration) or source_duration <= 0:
            raise InvalidClipError(
                f"source duration must be positive, got {source_duration!r}"
            )
        clip = Clip(
            source_ref=source_ref,
            source_in=0.0,
            source_out=source_duration,
            timeline_position=_checked_position(position),
            source_duration=source_duration,
            name=name or "",
        )
        self._project.clips.append(clip)
        self._sort()
        log.debug(
            "added clip %s (%s) at %.3fs, %.3fs long",
            clip.id,
            clip.name,
            clip.timeline_position,
            clip.clip_duration,
        )
        self.clipAdded.emit(clip.id)
        self._changed()
        return clip

    def add_asset(self, asset, position: float) -> Clip:
        """Second phase of placing media: add a clip for an already probed asset."""
        return self.add_clip(asset.source_ref, asset.duration, position, name=asset.name)

    def move_clip(self, clip_id: str, new_position: float) -> Clip:
        clip = self._project.get_clip(clip_id)
        clip.timeline_position = _checked_position(new_position)
        self._sort()
        log.debug("moved clip %s to %.3fs", clip_id, clip.timeline_position)
        self.clipUpdated.emit(clip_id)
        self._changed()
        return clip

    def update_clip(self, clip_id: str, **fields: Any) -> Clip:
        """Merge ``fields`` into the clip, clamping numeric values to their ranges.

        Only appearance, audio and fade settings (plus ``name``) are editable
        here; timing goes through ``move_clip`` and ``split_clip``.
        """
        clip = self._project.get_clip(clip_id)
        unknown = sorted(set(fields) - EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"not editable clip field(s): {', '.join(unknown)}")
        values = {name: clamp_field(name, value) for name, value in fields.items()}
        for name, value in values.items():
            setattr(clip, name, value)
        if values:
            log.debug("updated clip %s: %s", clip_id, values)
            self.clipUpdated.emit(clip_id)
            self._changed()
        return clip

    def reset_visuals(self, clip_id: str) -> Clip:
        return self.update_clip(clip_id, **NEUTRAL_VISUALS)

    def toggle_mute(self, clip_id: str) -> Clip:
        clip = self._project.get_clip(clip_id)
        return self.update_clip(clip_id, muted=not clip.muted)

    def delete_clip(self, clip_id: str) -> Clip:
        """Remove a clip; clears the selection in the same step if it pointed here."""
        index = self._project.index_of(clip_id)
        clip = self._project.clips.pop(index)
        selection_cleared = self._project.selected_clip_id == clip_id
        if selection_cleared:
            self._project.selected_clip_id = None
        log.debug("deleted clip %s", clip_id)
        self.clipRemoved.emit(clip_id)
        if selection_cleared:
            self.selectionChanged.emit(None)
        self._changed()
        return clip

    def split_clip(self, clip_id: str, at_time: float) -> Tuple[Clip, Clip]:
        """Cut a clip at timeline time ``at_time`` into two contiguous clips.

        ``at_time`` must fall strictly inside the clip; an edge or outside
        point raises ``InvalidSplitPointError`` and nothing changes. The
        original is replaced by two new clips (new ids) that share its source
        and copy its audio/visual/fade settings. A selection on the original
        moves to the first part.
        """
        index = self._project.index_of(clip_id)
        original = self._project.clips[index]
        relative = float(at_time) - original.timeline_position
        if relative <= 0 or relative >= original.clip_duration:
            log.info("rejected split of %s at %.3fs", clip_id, at_time)
            raise InvalidSplitPointError(
                clip_id, float(at_time), original.timeline_position, original.timeline_end
            )
        cut = original.source_in + relative
        if not original.source_in < cut < original.source_out:
            # relative was inside the clip but rounds onto an edge in source time
            raise InvalidSplitPointError(
                clip_id, float(at_time), original.timeline_position, original.timeline_end
            )
        shared = original.appearance()
        first = Clip(
            source_ref=original.source_ref,
            source_in=original.source_in,
            source_out=cut,
            timeline_position=original.timeline_position,
            source_duration=original.source_duration,
            name=original.name,
            **shared,
        )
        second = Clip(
            source_ref=original.source_ref,
            source_in=cut,
            source_out=original.source_out,
            timeline_position=original.timeline_position + relative,
            source_duration=original.source_duration,
            name=original.name,
            **shared,
        )
        self._project.clips[index : index + 1] = [first, second]
        self._sort()
        selection_moved = self._project.selected_clip_id == clip_id
        if selection_moved:
            self._project.selected_clip_id = first.id
        log.debug(
            "split clip %s at %.3fs into %s and %s", clip_id, at_time, first.id, second.id
        )
        self.clipSplit.emit(clip_id, first.id, second.id)
        if selection_moved:
            self.selectionChanged.emit(first.id)
        self._changed()
        return first, second

    def clear(self) -> None:
        if not self._project.clips:
            return
        removed = [c.id for c in self._project.clips]
        self._project.clips.clear()
        had_selection = self._project.selected_clip_id is not None
        self._project.selected_clip_id = None
        for clip_id in removed:
            self.clipRemoved.emit(clip_id)
        if had_selection:
            self.selectionChanged.emit(None)
        self._changed()

    # --- Internal ---
    def _sort(self) -> None:
        self._project.clips.sort(key=lambda c: c.timeline_position)

    def _changed(self) -> None:
        self.clipsChanged.emit()
        duration = self._project.duration
        if duration != self._last_duration:
            self._last_duration = duration
            self.durationChanged.emit(duration)


__all__ = ["ClipStore"]
