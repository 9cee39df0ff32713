"""Pytest configuration — fast-by-default setup.

Tests that load the real face_recognition models are marked ``slow`` and
skipped unless --slow is passed.
Run the full suite:   pytest --slow
Run fast tests only:  pytest          (default)
"""
import math

import pytest

from sketchmatch.core import backend as backend_module
from sketchmatch.services.session import sessions


def pytest_addoption(parser):
    parser.addoption(
        "--slow",
        action="store_true",
        default=False,
        help="Run slow tests that load the face_recognition models",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--slow"):
        return  # run everything
    skip_slow = pytest.mark.skip(reason="slow test skipped — pass --slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def _reset_process_state():
    backend_module.reset_face_backend()
    sessions.clear()
    yield
    backend_module.reset_face_backend()
    sessions.clear()


def _eye(x0, y0, ratio):
    # Horizontal span 10, both vertical spans 10 * ratio
    half = 5 * ratio
    return [
        (x0, y0),
        (x0 + 3, y0 - half),
        (x0 + 7, y0 - half),
        (x0 + 10, y0),
        (x0 + 7, y0 + half),
        (x0 + 3, y0 + half),
    ]


def build_landmarks(eye_ratio=0.3):
    """Synthetic 68-point face, about 100px wide."""
    jaw = [
        (50 - 50 * math.cos(math.pi * i / 16), 60 + 60 * math.sin(math.pi * i / 16))
        for i in range(17)
    ]
    left_brow = [(15, 30), (20, 25), (25, 22), (30, 25), (35, 30)]
    right_brow = [(65, 30), (70, 25), (75, 22), (80, 25), (85, 30)]
    nose_bridge = [(50, 35), (50, 42), (50, 49), (50, 56)]
    nose_tip = [(42, 60), (46, 61), (50, 62), (54, 61), (58, 60)]
    left_eye = _eye(20, 40, eye_ratio)
    right_eye = _eye(60, 40, eye_ratio)
    outer_mouth = [
        (35, 85), (40, 82), (45, 81), (50, 80), (55, 81), (60, 82),
        (65, 85), (60, 89), (55, 91), (50, 92), (45, 91), (40, 89),
    ]
    inner_mouth = [(38, 85), (45, 84), (50, 84), (55, 84), (62, 85), (55, 87), (50, 88), (45, 87)]
    points = (
        jaw + left_brow + right_brow + nose_bridge + nose_tip
        + left_eye + right_eye + outer_mouth + inner_mouth
    )
    assert len(points) == 68
    return [(float(x), float(y)) for x, y in points]


@pytest.fixture
def landmarks_factory():
    return build_landmarks


class FakeBackend:
    """Backend returning canned detections."""

    name = "fake"

    def __init__(self, faces=None, error=None):
        self.faces = faces or []
        self.error = error
        self.calls = 0

    def detect_faces(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.faces


@pytest.fixture
def fake_backend_cls():
    return FakeBackend
