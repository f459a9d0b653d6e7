"""Media assets: probing source files before they are placed on the timeline.

Placing media is a two-phase protocol:

1. probe the source for its duration (may be slow; can run on a worker thread)
2. hand the resulting ``MediaAsset`` to ``ClipStore.add_asset`` on the GUI thread

The store itself never touches media. ``MoviePyProbe`` is the default probe
and opens the file with MoviePy only long enough to read its duration.

``ProbeWorker`` follows the QObject-worker + QThread pattern: the worker is
moved to a thread, ``run`` executes there, and the ``finished``/``failed``
signals are delivered back to the receiver's thread by queued connection.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple

from PySide6.QtCore import QObject, QThread, Signal

from ..core.clip import default_name
from ..core.errors import AssetProbeError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaAsset:
    source_ref: Any
    duration: float
    name: str = ""


class AssetProbe(Protocol):
    def probe(self, source: Any) -> MediaAsset: ...


def checked_asset(source: Any, duration: Any, name: Optional[str] = None) -> MediaAsset:
    """Validate a probed duration and wrap it; raises ``AssetProbeError`` if unusable."""
    try:
        seconds = float(duration)
    except (TypeError, ValueError):
        raise AssetProbeError(f"{source!r}: duration {duration!r} is not a number") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise AssetProbeError(f"{source!r}: non-positive duration {seconds!r}")
    return MediaAsset(source_ref=source, duration=seconds, name=name or default_name(source))


class MoviePyProbe:
    """Read a media file's duration with MoviePy's ``VideoFileClip``."""

    def probe(self, source: Any) -> MediaAsset:
        from moviepy import VideoFileClip

        path = os.fspath(source)
        try:
            clip = VideoFileClip(path, audio=False)
        except Exception as e:
            raise AssetProbeError(f"cannot open {path!r}: {e}") from e
        try:
            duration = clip.duration
        finally:
            clip.close()
        log.debug("probed %s: %ss", path, duration)
        return checked_asset(source, duration)


class ProbeWorker(QObject):
    finished = Signal(object)  # MediaAsset
    failed = Signal(object, str)  # source, reason

    def __init__(self, probe: AssetProbe, source: Any):
        super().__init__()
        self._probe = probe
        self._source = source

    @property
    def source(self) -> Any:
        return self._source

    def run(self):  # executed in thread
        try:
            asset = self._probe.probe(self._source)
        except AssetProbeError as e:
            log.warning("probe failed for %r: %s", self._source, e)
            self.failed.emit(self._source, str(e))
            return
        except Exception as e:
            log.exception("probe crashed for %r", self._source)
            self.failed.emit(self._source, f"probe error: {e}")
            return
        self.finished.emit(asset)


class MediaLibrary(QObject):
    """Assets imported into the session, in import order.

    Signals:
        assetAdded(object)          MediaAsset
        assetRemoved(object)        source_ref
        importFailed(object, str)   source, reason
    """

    assetAdded = Signal(object)
    assetRemoved = Signal(object)
    importFailed = Signal(object, str)

    def __init__(self, probe: Optional[AssetProbe] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._probe = probe or MoviePyProbe()
        self._assets: List[MediaAsset] = []
        self._pending: Dict[int, Tuple[QThread, ProbeWorker]] = {}
        self._next_job = 0
        self._closed = False

    @property
    def assets(self) -> Tuple[MediaAsset, ...]:
        return tuple(self._assets)

    def find(self, source_ref: Any) -> Optional[MediaAsset]:
        for a in self._assets:
            if a.source_ref == source_ref:
                return a
        return None

    def import_source(self, source: Any) -> MediaAsset:
        """Probe ``source`` on the calling thread and add it to the library."""
        asset = self._probe.probe(source)
        self._add(asset)
        return asset

    def import_async(self, source: Any) -> ProbeWorker:
        """Probe ``source`` on a worker thread; the result arrives via ``assetAdded``.

        The library keeps each thread until its ``finished`` signal has been
        delivered back here, so a slow probe outlives ``shutdown`` safely.
        """
        job = self._next_job
        self._next_job += 1
        worker = ProbeWorker(self._probe, source)
        thread = QThread()
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.finished.connect(self._onProbed)
        worker.failed.connect(self.importFailed)
        worker.finished.connect(lambda *_: thread.quit())
        worker.failed.connect(lambda *_: thread.quit())
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(self._reap)
        self._pending[job] = (thread, worker)
        thread.start()
        return worker

    @property
    def busy(self) -> bool:
        return bool(self._pending)

    def remove(self, source_ref: Any) -> MediaAsset:
        asset = self.find(source_ref)
        if asset is None:
            raise KeyError(source_ref)
        self._assets.remove(asset)
        self.assetRemoved.emit(source_ref)
        return asset

    def shutdown(self, timeout_ms: int = 200) -> None:
        """Stop pending probe threads, e.g. when the editor window closes.

        Threads that are still busy after ``timeout_ms`` stay tracked until
        they finish; their results are dropped.
        """
        self._closed = True
        for thread, _ in list(self._pending.values()):
            if thread.isRunning():
                thread.requestInterruption()
                thread.quit()
                if not thread.wait(timeout_ms):
                    log.info("probe thread still running after %d ms", timeout_ms)

    def _add(self, asset: MediaAsset):
        self._assets.append(asset)
        log.debug("library: added %s (%.3fs)", asset.name, asset.duration)
        self.assetAdded.emit(asset)

    def _onProbed(self, asset: MediaAsset):
        if self._closed:
            log.debug("library closed, dropping %s", asset.name)
            return
        self._add(asset)

    def _reap(self):
        thread = self.sender()
        for job, (pending, _) in list(self._pending.items()):
            if pending is thread:
                del self._pending[job]
                pending.wait()
                break


__all__ = [
    "AssetProbe",
    "MediaAsset",
    "MediaLibrary",
    "MoviePyProbe",
    "ProbeWorker",
    "checked_asset",
]
