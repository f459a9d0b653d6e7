"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest
from PySide6.QtCore import QCoreApplication

from cliploom.config import EditorSettings
from cliploom.core.errors import AssetProbeError
from cliploom.core.project import Project
from cliploom.core.store import ClipStore
from cliploom.media.assets import MediaAsset, checked_asset


@pytest.fixture(scope="session", autouse=True)
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def config() -> EditorSettings:
    return EditorSettings()


@pytest.fixture
def project(config) -> Project:
    return Project(name="Test", settings=config)


@pytest.fixture
def store(project) -> ClipStore:
    return ClipStore(project)


@dataclass
class FakeProbe:
    """Probe returning canned durations; unknown sources fail."""

    durations: dict = field(default_factory=dict)
    calls: list = field(default_factory=list)

    def probe(self, source) -> MediaAsset:
        self.calls.append(source)
        if source not in self.durations:
            raise AssetProbeError(f"cannot open {source!r}")
        return checked_asset(source, self.durations[source])


class Recorder:
    """Collects signal emissions: ``signal.connect(recorder)``."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args if len(args) != 1 else args[0])

    @property
    def last(self):
        return self.calls[-1]


def assert_invariants(project: Project) -> None:
    clips = project.clips
    ids = [c.id for c in clips]
    assert len(ids) == len(set(ids)), "clip ids must be unique"
    assert all(c.clip_duration > 0 for c in clips)
    assert all(c.timeline_position >= 0 for c in clips)
    assert all(0 <= c.source_in < c.source_out <= c.source_duration for c in clips)
    positions = [c.timeline_position for c in clips]
    assert positions == sorted(positions), "clips must be ordered by position"
    expected = max((c.timeline_position + c.clip_duration for c in clips), default=0.0)
    assert project.duration == pytest.approx(expected)
    if project.selected_clip_id is not None:
        assert project.selected_clip_id in ids
