import pytest

from cliploom.config import QUALITY_PRESETS
from cliploom.core.errors import EmptyProjectExportError
from cliploom.services.export import QUALITY_SETTINGS, ExportMonitor, build_snapshot

from conftest import Recorder


class StepExporter:
    def __init__(self, fail=False):
        self.fail = fail
        self.seen = None

    def export(self, snapshot, output, progress):
        self.seen = snapshot
        for pct in (10, 40, 30, 90):
            progress(pct)
        if self.fail:
            raise RuntimeError("encoder crashed")
        return output


def test_snapshot_empty_project_rejected(project):
    with pytest.raises(EmptyProjectExportError):
        build_snapshot(project)


def test_snapshot_is_detached_from_later_edits(store, project):
    clip = store.add_clip("a.mp4", 4.0, 1.0)
    snap = build_snapshot(project, "720p")
    store.update_clip(clip.id, brightness=10)
    store.move_clip(clip.id, 9.0)
    assert snap.duration == 5.0
    assert snap.clips[0]["brightness"] == 100.0
    assert snap.clips[0]["timeline_position"] == 1.0
    assert snap.preset == QUALITY_SETTINGS["720p"]
    assert snap.preset.width == 1280


def test_snapshot_unknown_quality(store, project):
    store.add_clip("a.mp4", 4.0, 0.0)
    with pytest.raises(ValueError):
        build_snapshot(project, "4k")


def test_monitor_success(store, project):
    store.add_clip("a.mp4", 4.0, 0.0)
    monitor = ExportMonitor()
    progress, exporting, done = Recorder(), Recorder(), Recorder()
    monitor.progressChanged.connect(progress)
    monitor.exportingChanged.connect(exporting)
    monitor.succeeded.connect(done)
    result = monitor.run(StepExporter(), build_snapshot(project), "out.mp4")
    assert result == "out.mp4"
    assert progress.calls == [0, 10, 40, 90, 100]
    assert exporting.calls == [True, False]
    assert done.calls == ["out.mp4"]
    assert monitor.progress == 100
    assert not monitor.exporting


def test_monitor_failure(store, project):
    store.add_clip("a.mp4", 4.0, 0.0)
    monitor = ExportMonitor()
    failed = Recorder()
    monitor.failed.connect(failed)
    with pytest.raises(RuntimeError):
        monitor.run(StepExporter(fail=True), build_snapshot(project), "out.mp4")
    assert failed.calls == ["encoder crashed"]
    assert monitor.error == "encoder crashed"
    assert monitor.progress == 90
    assert not monitor.exporting


def test_monitor_clamps_and_ignores_stray_reports(store, project):
    store.add_clip("a.mp4", 4.0, 0.0)
    monitor = ExportMonitor()
    monitor.report_progress(50)
    assert monitor.progress == 0
    monitor.begin(build_snapshot(project))
    with pytest.raises(RuntimeError):
        monitor.begin(build_snapshot(project))
    monitor.report_progress(250)
    assert monitor.progress == 100
    monitor.report_failure("cancelled")
    monitor.report_success("late")
    assert monitor.result is None
    assert monitor.error == "cancelled"


def test_quality_names_share_one_table():
    assert QUALITY_PRESETS == tuple(QUALITY_SETTINGS)
    assert QUALITY_SETTINGS["1080p"].bitrate_kbps == 5000


def test_snapshot_size_estimate_and_output_name(store, project):
    store.add_clip("a.mp4", 60.0, 0.0)
    project.name = "Holiday"
    snap = build_snapshot(project, "720p")
    # 60 s at 2500 kbit/s
    assert snap.estimated_size_bytes == 18_750_000
    assert snap.estimated_size_label == "17.9 MB"
    assert snap.duration_label == "01:00"
    assert snap.output_name() == "Holiday_720p.mp4"
    assert snap.output_name(".webm") == "Holiday_720p.webm"


def test_monitor_ignores_nan_progress(store, project):
    store.add_clip("a.mp4", 4.0, 0.0)
    monitor = ExportMonitor()
    monitor.begin(build_snapshot(project))
    monitor.report_progress(30)
    monitor.report_progress(float("nan"))
    assert monitor.progress == 30


def test_monitor_reset_after_outcome(store, project):
    store.add_clip("a.mp4", 4.0, 0.0)
    monitor = ExportMonitor()
    progress = Recorder()
    monitor.progressChanged.connect(progress)
    monitor.begin(build_snapshot(project))
    with pytest.raises(RuntimeError):
        monitor.reset()
    monitor.report_success("out.mp4")
    monitor.reset()
    assert monitor.progress == 0
    assert monitor.result is None
    assert monitor.snapshot is None
    assert progress.calls == [0, 100, 0]
