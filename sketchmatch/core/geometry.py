"""Facial landmark geometry.

Measurements and shape classifiers over the 68-point landmark layout
(iBUG 300-W ordering: jaw 0-16, brows 17-26, nose 27-35, eyes 36-47,
mouth 48-67).
"""

import math
from typing import Sequence

import numpy as np

from .. import config
from ..models.types import Box, LandmarkMetrics, Point, ShapeClassification

JAW = slice(0, 17)
LEFT_BROW = slice(17, 22)
RIGHT_BROW = slice(22, 27)
NOSE = slice(27, 36)
LEFT_EYE = slice(36, 42)
RIGHT_EYE = slice(42, 48)
MOUTH = slice(48, 68)

LANDMARK_COUNT = 68

EYE_SHAPES = ('round', 'almond', 'narrow')
NOSE_SHAPES = ('narrow', 'medium', 'wide')
MOUTH_SHAPES = ('thin', 'medium', 'full')
FACE_SHAPES = ('oval', 'round', 'square', 'heart')


def distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def arch_ratio(points: Sequence[Point]) -> float:
    """Height of the curve midpoint above its chord, relative to chord length."""
    if len(points) < 3:
        return 0.0

    start, end = points[0], points[-1]
    middle = points[len(points) // 2]

    base = distance(start, end)
    if base == 0:
        return 0.0
    height = abs(middle[1] - (start[1] + end[1]) / 2)
    return height / base


def eyebrow_arch(landmarks: Sequence[Point]) -> float:
    return (arch_ratio(landmarks[LEFT_BROW]) + arch_ratio(landmarks[RIGHT_BROW])) / 2


def turning_angle(p1: Point, p2: Point, p3: Point) -> float:
    """Angle at p2 between the vectors to p1 and p3, in radians."""
    v1 = np.array([p1[0] - p2[0], p1[1] - p2[1]], dtype=float)
    v2 = np.array([p3[0] - p2[0], p3[1] - p2[1]], dtype=float)

    norms = np.linalg.norm(v1) * np.linalg.norm(v2)
    if norms == 0:
        return 0.0
    cosine = float(np.clip(np.dot(v1, v2) / norms, -1.0, 1.0))
    return math.acos(cosine)


def jawline_sharpness(landmarks: Sequence[Point]) -> float:
    """Mean absolute angle across consecutive jaw point triples."""
    jaw = landmarks[JAW]
    if len(jaw) < 3:
        return 0.0

    angles = [
        abs(turning_angle(jaw[i - 1], jaw[i], jaw[i + 1]))
        for i in range(1, len(jaw) - 1)
    ]
    return sum(angles) / len(angles)


def eye_ratio(eye: Sequence[Point]) -> float:
    """Mean vertical span over horizontal span for a 6-point eye."""
    width = distance(eye[0], eye[3])
    if width == 0:
        return 0.0
    height = (distance(eye[1], eye[5]) + distance(eye[2], eye[4])) / 2
    return height / width


def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def classify_eye_shape(landmarks: Sequence[Point]) -> str:
    ratio = (eye_ratio(landmarks[LEFT_EYE]) + eye_ratio(landmarks[RIGHT_EYE])) / 2

    if ratio > 0.35:
        return 'round'
    if ratio > 0.25:
        return 'almond'
    return 'narrow'


def classify_nose_shape(landmarks: Sequence[Point]) -> str:
    nose = landmarks[NOSE]
    ratio = _safe_ratio(distance(nose[4], nose[8]), distance(nose[0], nose[3]))

    if ratio > 0.8:
        return 'wide'
    if ratio > 0.6:
        return 'medium'
    return 'narrow'


def classify_mouth_shape(landmarks: Sequence[Point]) -> str:
    mouth = landmarks[MOUTH]
    ratio = _safe_ratio(distance(mouth[3], mouth[9]), distance(mouth[0], mouth[6]))

    if ratio > 0.4:
        return 'full'
    if ratio > 0.25:
        return 'medium'
    return 'thin'


def classify_face_shape(landmarks: Sequence[Point]) -> str:
    face_width = distance(landmarks[0], landmarks[16])
    face_height = distance(landmarks[19], landmarks[8])
    jaw_width = distance(landmarks[4], landmarks[12])

    ratio = _safe_ratio(face_height, face_width)
    jaw_ratio = _safe_ratio(jaw_width, face_width)

    if ratio > 1.3:
        return 'oval'
    if ratio > 1.1 and jaw_ratio > 0.8:
        return 'square'
    if ratio < 0.9:
        return 'round'
    return 'heart'


def classify_shapes(landmarks: Sequence[Point]) -> ShapeClassification:
    return {
        'eye_shape': classify_eye_shape(landmarks),
        'nose_shape': classify_nose_shape(landmarks),
        'mouth_shape': classify_mouth_shape(landmarks),
        'face_shape': classify_face_shape(landmarks),
    }


def landmark_metrics(landmarks: Sequence[Point]) -> LandmarkMetrics:
    """Named measurements from a 68-point landmark set."""
    if len(landmarks) < LANDMARK_COUNT:
        raise ValueError(f"Expected {LANDMARK_COUNT} landmarks, got {len(landmarks)}")

    return {
        'eye_distance': distance(landmarks[36], landmarks[45]),
        'nose_width': distance(landmarks[31], landmarks[35]),
        'mouth_width': distance(landmarks[48], landmarks[54]),
        'face_width': distance(landmarks[0], landmarks[16]),
        'face_height': distance(landmarks[19], landmarks[8]),
        'eyebrow_arch': eyebrow_arch(landmarks),
        'jawline_sharpness': jawline_sharpness(landmarks),
    }


def detection_quality(detection_score: float, box: Box) -> float:
    """Blend detector confidence with how large the face appears."""
    face_area = box['width'] * box['height']
    size_score = min(face_area / config.QUALITY_FACE_AREA, 1.0)
    return detection_score * 0.7 + size_score * 0.3
