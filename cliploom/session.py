"""Editing session: one project plus the components that work on it.

The session is the object an editor window owns and passes around instead of
reaching for global state. It wires the pieces together the same way for
every front end:

    store.durationChanged  -> clock re-clamps the playhead
    store.selectionChanged -> selection.selectionChanged
    clock.positionChanged  -> preview.frameChanged / activeClipChanged
    store.clipsChanged     -> preview refresh

Toolbar-level actions (split or delete the selected clip at the playhead,
place media at the playhead) live here because they combine components.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from PySide6.QtCore import QObject

from .config import EditorSettings, settings
from .core.clip import Clip
from .core.project import Project
from .core.selection import SelectionTracker
from .core.store import ClipStore
from .media.assets import AssetProbe, MediaAsset, MediaLibrary
from .media.playback import PlaybackClock
from .media.presentation import PreviewBridge
from .services.export import ExportMonitor, ExportSnapshot, build_snapshot
from .utils.timefmt import format_clock

log = logging.getLogger(__name__)


class EditingSession(QObject):
    def __init__(
        self,
        name: str = "New Video Project",
        *,
        config: Optional[EditorSettings] = None,
        probe: Optional[AssetProbe] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.project = Project(name=name, settings=config or settings())
        self.store = ClipStore(self.project, self)
        self.selection = SelectionTracker(self.project, self.store, self)
        self.clock = PlaybackClock(self.project, self.store, self)
        self.preview = PreviewBridge(self.project, self.clock, self.store, self)
        self.library = MediaLibrary(probe, self)
        self.export_monitor = ExportMonitor(self)
        log.debug("session %s (%s) ready", self.project.id, name)

    # --- Media placement ---
    def place_asset(self, asset: MediaAsset, position: Optional[float] = None) -> Clip:
        """Put an already probed asset on the timeline (at the playhead by default)."""
        if position is None:
            position = self.project.playback_time
        return self.store.add_asset(asset, position)

    def import_and_place(self, source: Any, position: Optional[float] = None) -> Clip:
        """Probe ``source`` synchronously, add it to the library, then place it."""
        asset = self.library.find(source) or self.library.import_source(source)
        return self.place_asset(asset, position)

    # --- Toolbar actions ---
    def split_selected(self) -> Optional[Tuple[Clip, Clip]]:
        """Split the selected clip at the playhead. Returns None without a selection."""
        clip_id = self.selection.selected_id
        if clip_id is None:
            return None
        return self.store.split_clip(clip_id, self.project.playback_time)

    def delete_selected(self) -> Optional[Clip]:
        clip_id = self.selection.selected_id
        if clip_id is None:
            return None
        return self.store.delete_clip(clip_id)

    def click_clip(self, clip_id: str) -> Optional[str]:
        return self.selection.toggle(clip_id)

    # --- Export ---
    def export_snapshot(self, quality: Optional[str] = None) -> ExportSnapshot:
        """Snapshot for an export; a chosen quality is remembered only if it succeeds."""
        snapshot = build_snapshot(self.project, quality)
        self.project.set_quality(snapshot.quality)
        return snapshot

    def transport_label(self) -> str:
        """Current / total time readout, e.g. ``00:04 / 01:30``."""
        return f"{format_clock(self.project.playback_time)} / {format_clock(self.project.duration)}"

    def close(self) -> None:
        self.clock.pause()
        self.library.shutdown()


__all__ = ["EditingSession"]
