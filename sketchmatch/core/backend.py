"""Face-analysis backends.

A backend turns a decoded image into detected faces with landmarks and a
128-d descriptor. Backends are optional: when none can be loaded the
extractor falls back to its heuristic tiers.
"""

import importlib
import logging
import threading
from typing import List, Optional, Protocol

import cv2
import numpy as np

from .. import config
from ..models.types import DetectedFace, Point

logger = logging.getLogger(__name__)


class BackendUnavailableError(Exception):
    """Exception raised when a backend's library or models cannot be loaded."""
    pass


class FaceAnalysisBackend(Protocol):
    """Interface for face-analysis backends."""

    name: str

    def detect_faces(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in a BGR image, largest first."""


class FaceRecognitionBackend:
    """Backend built on the face_recognition (dlib) models.

    face_recognition reports landmarks as named groups; they are folded
    back into the 68-point ordering the geometry helpers expect. The HOG
    detector has no score, so every detection reports 1.0, and expressions
    and age/gender are not available.
    """

    name = "face_recognition"

    def __init__(self, model: Optional[str] = None):
        try:
            self._fr = importlib.import_module("face_recognition")
        except ImportError as e:
            raise BackendUnavailableError(f"face_recognition is not installed: {e}")
        self.model = model or config.FACE_DETECTION_MODEL

    def detect_faces(self, image: np.ndarray) -> List[DetectedFace]:
        # Convert BGR to RGB (face_recognition uses RGB)
        rgb_image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

        locations = self._fr.face_locations(rgb_image, model=self.model)
        if not locations:
            return []

        landmark_sets = self._fr.face_landmarks(rgb_image, locations, model="large")
        encodings = self._fr.face_encodings(rgb_image, locations)

        results: List[DetectedFace] = []
        for (top, right, bottom, left), groups, encoding in zip(locations, landmark_sets, encodings):
            results.append({
                'box': {
                    'x': int(left),
                    'y': int(top),
                    'width': int(right - left),
                    'height': int(bottom - top),
                },
                'landmarks': landmarks_from_groups(groups),
                'descriptor_vector': [float(v) for v in encoding],
                'detection_score': 1.0,
            })

        # Larger faces are usually more reliable
        results.sort(key=lambda f: f['box']['width'] * f['box']['height'], reverse=True)
        return results


def landmarks_from_groups(groups: dict) -> List[Point]:
    """Rebuild the 68-point list from face_recognition's named groups."""
    top_lip = groups['top_lip']
    bottom_lip = groups['bottom_lip']

    # top_lip = 48..54, 64..60; bottom_lip = 54..59, 48, 60, 67..64
    mouth = (
        list(top_lip[0:7])
        + list(bottom_lip[1:6])
        + [top_lip[11], top_lip[10], top_lip[9], top_lip[8], top_lip[7]]
        + [bottom_lip[10], bottom_lip[9], bottom_lip[8]]
    )

    points = (
        list(groups['chin'])
        + list(groups['left_eyebrow'])
        + list(groups['right_eyebrow'])
        + list(groups['nose_bridge'])
        + list(groups['nose_tip'])
        + list(groups['left_eye'])
        + list(groups['right_eye'])
        + mouth
    )
    return [(float(x), float(y)) for x, y in points]


_BACKENDS = {
    "face_recognition": FaceRecognitionBackend,
}

_lock = threading.Lock()
_loaded = False
_backend: Optional[FaceAnalysisBackend] = None


def get_face_backend(name: Optional[str] = None) -> Optional[FaceAnalysisBackend]:
    """Return the process-wide backend, loading it on first use.

    The load is attempted once; its outcome (a backend or None) is reused
    by every later call.
    """
    global _loaded, _backend

    with _lock:
        if _loaded:
            return _backend

        backend_name = (name or config.FACE_BACKEND).lower()
        factory = _BACKENDS.get(backend_name)
        if factory is None:
            logger.info(f"Face backend '{backend_name}' disabled, using heuristic analysis")
        else:
            try:
                _backend = factory()
                logger.info(f"Face backend '{backend_name}' loaded")
            except BackendUnavailableError as e:
                logger.warning(f"Face backend '{backend_name}' unavailable, using heuristic analysis: {e}")
                _backend = None

        _loaded = True
        return _backend


def backend_status() -> dict:
    """Describe the memoized backend without triggering a load."""
    with _lock:
        return {
            'initialized': _loaded,
            'backend': _backend.name if _backend is not None else None,
            'modelsLoaded': _backend is not None,
        }


def reset_face_backend() -> None:
    """Forget the memoized backend so the next call loads again."""
    global _loaded, _backend

    with _lock:
        _loaded = False
        _backend = None
