import time

import pytest
from PySide6.QtCore import QEventLoop, QTimer

from cliploom.core.errors import AssetProbeError
from cliploom.media.assets import MediaLibrary, MoviePyProbe, ProbeWorker, checked_asset

from conftest import FakeProbe, Recorder


def test_checked_asset_validation():
    asset = checked_asset("/media/clip.mp4", "2.5")
    assert asset.duration == 2.5
    assert asset.name == "clip.mp4"
    for bad in (0, -1, None, "abc", float("nan")):
        with pytest.raises(AssetProbeError):
            checked_asset("x.mp4", bad)


def test_probe_worker_run_inline():
    worker = ProbeWorker(FakeProbe({"a.mp4": 3.0}), "a.mp4")
    done = Recorder()
    worker.finished.connect(done)
    worker.run()
    assert done.last.duration == 3.0

    bad = ProbeWorker(FakeProbe(), "missing.mp4")
    failed = Recorder()
    bad.failed.connect(failed)
    bad.run()
    assert failed.last[0] == "missing.mp4"


def test_library_import_sync():
    probe = FakeProbe({"a.mp4": 3.0, "b.mp4": 1.0})
    library = MediaLibrary(probe)
    added = Recorder()
    library.assetAdded.connect(added)
    library.import_source("a.mp4")
    library.import_source("b.mp4")
    assert [a.source_ref for a in library.assets] == ["a.mp4", "b.mp4"]
    assert len(added.calls) == 2
    with pytest.raises(AssetProbeError):
        library.import_source("c.mp4")
    assert len(library.assets) == 2
    library.remove("a.mp4")
    assert library.find("a.mp4") is None
    with pytest.raises(KeyError):
        library.remove("a.mp4")


def test_library_import_async():
    library = MediaLibrary(FakeProbe({"a.mp4": 4.0}))
    loop = QEventLoop()
    added = Recorder()
    failed = Recorder()
    library.assetAdded.connect(added)
    library.importFailed.connect(failed)
    library.assetAdded.connect(lambda *_: loop.quit())
    library.import_async("a.mp4")
    QTimer.singleShot(2000, loop.quit)
    loop.exec()
    assert added.last.duration == 4.0
    assert failed.calls == []
    wait_until_idle(library)
    assert not library.busy


def test_moviepy_probe(tmp_path):
    from moviepy import ColorClip

    path = tmp_path / "probe.mp4"
    clip = ColorClip(size=(32, 32), color=(0, 255, 0), duration=0.5)
    clip.write_videofile(str(path), fps=24, logger=None)
    clip.close()
    asset = MoviePyProbe().probe(path)
    assert asset.duration == pytest.approx(0.5, abs=0.05)
    assert asset.name == "probe.mp4"


def test_moviepy_probe_missing_file(tmp_path):
    with pytest.raises(AssetProbeError):
        MoviePyProbe().probe(tmp_path / "missing.mp4")


class SlowProbe(FakeProbe):
    def probe(self, source):
        time.sleep(0.5)
        return super().probe(source)


class CrashingProbe:
    def probe(self, source):
        raise RuntimeError("decoder exploded")


def wait_until_idle(library, timeout_ms=3000):
    loop = QEventLoop()
    poll = QTimer()
    poll.timeout.connect(lambda: loop.quit() if not library.busy else None)
    poll.start(10)
    QTimer.singleShot(timeout_ms, loop.quit)
    loop.exec()
    poll.stop()


def test_probe_worker_reports_unexpected_errors():
    worker = ProbeWorker(CrashingProbe(), "a.mp4")
    failed = Recorder()
    worker.failed.connect(failed)
    worker.run()
    assert failed.last[0] == "a.mp4"
    assert "decoder exploded" in failed.last[1]


def test_library_async_crash_releases_thread():
    library = MediaLibrary(CrashingProbe())
    failed = Recorder()
    library.importFailed.connect(failed)
    library.import_async("a.mp4")
    wait_until_idle(library)
    assert not library.busy
    assert failed.last[0] == "a.mp4"
    assert library.assets == ()


def test_shutdown_keeps_slow_probe_thread_alive():
    library = MediaLibrary(SlowProbe({"a.mp4": 4.0}))
    library.import_async("a.mp4")
    library.shutdown(timeout_ms=20)
    assert library.busy
    wait_until_idle(library)
    assert not library.busy
    # results arriving after shutdown are dropped
    assert library.assets == ()
