"""Export collaborator contract and progress display.

Rendering is done elsewhere (an ``Exporter`` implementation: ffmpeg, a
cloud job, ...). The core hands it a read-only ``ExportSnapshot`` of the
timeline and shows whatever progress it reports back:

    monitor.begin(snapshot)
    exporter.export(snapshot, output, monitor.report_progress)
    monitor.report_success(result)   # or monitor.report_failure(message)

The monitor never interprets the result; it only exposes it for display.
Progress is an integer percentage 0-100 that never goes backwards within a
run.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from PySide6.QtCore import QObject, Signal

from ..config import QUALITY_SETTINGS, QualityPreset
from ..core.clip import Clip, clamp
from ..core.errors import EmptyProjectExportError
from ..core.project import Project
from ..utils.timefmt import format_clock

log = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]  # 0 - 100


@dataclass(frozen=True)
class ExportSnapshot:
    clips: Tuple[Dict[str, Any], ...]
    duration: float
    quality: str
    project_name: str = "Untitled"

    @property
    def preset(self) -> QualityPreset:
        return QUALITY_SETTINGS[self.quality]

    @property
    def estimated_size_bytes(self) -> float:
        """Rough output size from duration and the preset's bitrate."""
        return self.duration * self.preset.bitrate_kbps * 1000 / 8

    @property
    def estimated_size_label(self) -> str:
        return f"{self.estimated_size_bytes / (1024 * 1024):.1f} MB"

    @property
    def duration_label(self) -> str:
        return format_clock(self.duration)

    def output_name(self, fmt: str = "mp4") -> str:
        """Suggested file name, e.g. ``Holiday_720p.mp4``."""
        return f"{self.project_name}_{self.quality}.{fmt.lstrip('.')}"


def build_snapshot(project: Project, quality: Optional[str] = None) -> ExportSnapshot:
    """Freeze the project's clips for an exporter.

    Clips are copied to plain dicts, so later edits do not leak into a running
    export. Raises ``EmptyProjectExportError`` if there is nothing to render.
    """
    if project.is_empty:
        raise EmptyProjectExportError("Add some video clips to the timeline before exporting.")
    quality = quality or project.quality
    if quality not in QUALITY_SETTINGS:
        raise ValueError(f"unknown quality {quality!r}")
    clips: Tuple[Clip, ...] = tuple(project.clips)
    return ExportSnapshot(
        clips=tuple(c.to_dict() for c in clips),
        duration=project.duration,
        quality=quality,
        project_name=project.name,
    )


class Exporter(Protocol):
    def export(
        self, snapshot: ExportSnapshot, output: Any, progress: ProgressCallback
    ) -> Any: ...


class ExportMonitor(QObject):
    """Displays the state of one export at a time.

    Signals:
        progressChanged(int)     0-100
        exportingChanged(bool)
        succeeded(object)        exporter's result, untouched
        failed(str)
    """

    progressChanged = Signal(int)
    exportingChanged = Signal(bool)
    succeeded = Signal(object)
    failed = Signal(str)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._progress = 0
        self._exporting = False
        self._snapshot: Optional[ExportSnapshot] = None
        self._result: Any = None
        self._error: Optional[str] = None

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def exporting(self) -> bool:
        return self._exporting

    @property
    def snapshot(self) -> Optional[ExportSnapshot]:
        return self._snapshot

    @property
    def result(self) -> Any:
        return self._result

    @property
    def error(self) -> Optional[str]:
        return self._error

    def begin(self, snapshot: ExportSnapshot) -> None:
        if self._exporting:
            raise RuntimeError("an export is already running")
        self._snapshot = snapshot
        self._result = None
        self._error = None
        self._set_progress(0)
        self._set_exporting(True)
        log.info(
            "export started: %d clip(s), %.2fs at %s",
            len(snapshot.clips),
            snapshot.duration,
            snapshot.quality,
        )

    def report_progress(self, percent: float) -> None:
        if not self._exporting:
            log.debug("ignoring progress %.1f outside an export", percent)
            return
        percent = float(percent)
        if math.isnan(percent):
            log.debug("ignoring NaN progress report")
            return
        value = int(clamp(percent, 0.0, 100.0))
        if value > self._progress:
            self._set_progress(value)

    def report_success(self, result: Any = None) -> None:
        if not self._exporting:
            return
        self._result = result
        self._set_progress(100)
        self._set_exporting(False)
        log.info("export finished")
        self.succeeded.emit(result)

    def report_failure(self, message: str) -> None:
        if not self._exporting:
            return
        self._error = message
        self._set_exporting(False)
        log.warning("export failed: %s", message)
        self.failed.emit(message)

    def run(self, exporter: Exporter, snapshot: ExportSnapshot, output: Any) -> Any:
        """Run a synchronous exporter, routing its progress and outcome here.

        Exceptions from the exporter are reported as a failure and re-raised.
        """
        self.begin(snapshot)
        try:
            result = exporter.export(snapshot, output, self.report_progress)
        except Exception as e:
            self.report_failure(str(e) or e.__class__.__name__)
            raise
        self.report_success(result)
        return result

    def reset(self) -> None:
        """Return to idle once the outcome has been shown (dialog closed)."""
        if self._exporting:
            raise RuntimeError("cannot reset while an export is running")
        self._snapshot = None
        self._result = None
        self._error = None
        if self._progress:
            self._set_progress(0)

    def _set_progress(self, value: int) -> None:
        self._progress = value
        self.progressChanged.emit(value)

    def _set_exporting(self, exporting: bool) -> None:
        if exporting == self._exporting:
            return
        self._exporting = exporting
        self.exportingChanged.emit(exporting)


__all__ = [
    "ExportMonitor",
    "ExportSnapshot",
    "Exporter",
    "ProgressCallback",
    "QUALITY_SETTINGS",
    "QualityPreset",
    "build_snapshot",
]
