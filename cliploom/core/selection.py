"""Selection tracker: at most one selected clip, held by id.

Selecting an id that is not in the project is not an error; it just leaves
nothing selected. Deletions are handled by ``ClipStore``, which clears the
project's selection as part of the delete itself; the tracker re-emits the
store's ``selectionChanged`` so observers only need to listen here.
"""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from .clip import Clip
from .project import Project
from .store import ClipStore

log = logging.getLogger(__name__)


class SelectionTracker(QObject):
    selectionChanged = Signal(object)  # clip id or None

    def __init__(
        self,
        project: Project,
        store: Optional[ClipStore] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._project = project
        if store is not None:
            if store.project is not project:
                raise ValueError("store belongs to a different project")
            store.selectionChanged.connect(self.selectionChanged.emit)

    @property
    def selected_id(self) -> Optional[str]:
        return self._project.selected_clip_id

    @property
    def selected_clip(self) -> Optional[Clip]:
        return self._project.find_clip(self._project.selected_clip_id)

    def select(self, clip_id: Optional[str]) -> Optional[str]:
        """Select ``clip_id`` if it is in the project, otherwise clear the selection."""
        new_id = clip_id if self._project.has_clip(clip_id) else None
        if clip_id is not None and new_id is None:
            log.debug("select(%s): no such clip, clearing selection", clip_id)
        self._set(new_id)
        return new_id

    def toggle(self, clip_id: str) -> Optional[str]:
        """Click behaviour: clicking the selected clip again deselects it."""
        if clip_id == self._project.selected_clip_id:
            return self.select(None)
        return self.select(clip_id)

    def clear(self) -> None:
        self._set(None)

    def is_selected(self, clip_id: str) -> bool:
        return clip_id is not None and clip_id == self._project.selected_clip_id

    def _set(self, clip_id: Optional[str]) -> None:
        if clip_id == self._project.selected_clip_id:
            return
        self._project.selected_clip_id = clip_id
        self.selectionChanged.emit(clip_id)


__all__ = ["SelectionTracker"]
