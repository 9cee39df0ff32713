"""Facial feature extraction.

Turns an uploaded sketch into a Descriptor. Extraction never fails; it
degrades through three tiers and tags the result with the tier used:

- advanced: a face-analysis backend found a face; measurements are real.
- basic: no backend or no face; quality comes from pixel statistics and
  the remaining fields are bounded random values.
- fallback: the image could not be decoded; a minimal constant descriptor.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from .. import config
from ..models.types import (
    AgeGender,
    Descriptor,
    DetectedFace,
    DominantExpression,
    LandmarkMetrics,
    Provenance,
    ShapeClassification,
)
from ..utils.image import ImageProcessingError, brightness_quality, decode_image_bytes
from . import geometry
from .backend import FaceAnalysisBackend, get_face_backend

logger = logging.getLogger(__name__)

ImageInput = Union[bytes, bytearray, np.ndarray, None]

BASIC_EXPRESSIONS = {'neutral': 0.8, 'happy': 0.1, 'sad': 0.1}
NEUTRAL_EXPRESSIONS = {'neutral': 1.0}

FALLBACK_QUALITY = 0.6
FALLBACK_CONFIDENCE = 0.5


def dominant_expression(expressions: Dict[str, float]) -> DominantExpression:
    """Return the highest scoring expression (neutral/0.0 when empty)."""
    label, confidence = 'neutral', 0.0
    for name, value in expressions.items():
        if value > confidence:
            label, confidence = name, float(value)
    return {'label': label, 'confidence': confidence}


class FeatureExtractor:
    """Extracts descriptors, choosing the tier per image."""

    def __init__(
        self,
        backend_loader: Callable[[], Optional[FaceAnalysisBackend]] = get_face_backend,
        seed: Optional[int] = None,
        descriptor_length: int = config.DESCRIPTOR_LENGTH,
    ):
        self._backend_loader = backend_loader
        self._backend: Optional[FaceAnalysisBackend] = None
        self._backend_resolved = False
        self.descriptor_length = descriptor_length
        self._rng = np.random.default_rng(config.RANDOM_SEED if seed is None else seed)
        self._lock = threading.Lock()

    @property
    def backend(self) -> Optional[FaceAnalysisBackend]:
        if not self._backend_resolved:
            self._backend = self._backend_loader()
            self._backend_resolved = True
        return self._backend

    def extract(self, image: ImageInput) -> Descriptor:
        """Analyze an encoded image (bytes) or a decoded BGR array."""
        with self._lock:
            return self._extract(image)

    def _extract(self, image: ImageInput) -> Descriptor:
        decoded = self._decode(image)
        if decoded is None:
            logger.info("Using fallback analysis")
            return self._fallback_descriptor()

        face = self._first_face(decoded)
        if face is not None:
            logger.info("Using advanced analysis")
            return self._advanced_descriptor(face)

        logger.info("Using basic analysis")
        return self._basic_descriptor(decoded)

    def _decode(self, image: ImageInput) -> Optional[np.ndarray]:
        if isinstance(image, np.ndarray):
            if image.size == 0 or image.ndim not in (2, 3):
                logger.warning(f"Unusable image array with shape {image.shape}")
                return None
            return image

        if not isinstance(image, (bytes, bytearray)):
            logger.warning(f"Unsupported image input: {type(image).__name__}")
            return None

        try:
            return decode_image_bytes(bytes(image))
        except ImageProcessingError as e:
            logger.warning(f"Image decode failed: {str(e)}")
            return None

    def _first_face(self, image: np.ndarray) -> Optional[DetectedFace]:
        backend = self.backend
        if backend is None:
            return None

        try:
            faces = backend.detect_faces(image)
        except Exception as e:
            logger.warning(f"Face detection failed with {backend.name}: {str(e)}")
            return None

        if not faces:
            logger.info("No faces detected")
            return None

        face = faces[0]
        if len(face['landmarks']) < geometry.LANDMARK_COUNT:
            logger.warning(f"Detected face has {len(face['landmarks'])} landmarks, expected {geometry.LANDMARK_COUNT}")
            return None
        return face

    def _advanced_descriptor(self, face: DetectedFace) -> Descriptor:
        landmarks = face['landmarks']
        expressions = dict(face.get('expressions') or NEUTRAL_EXPRESSIONS)
        detection_score = face.get('detection_score')
        detection_score = config.DEFAULT_DETECTION_SCORE if detection_score is None else float(detection_score)

        if face.get('age') is not None and face.get('gender'):
            age_gender: AgeGender = {
                'age': int(round(face['age'])),
                'gender': face['gender'],
                'gender_probability': float(face.get('gender_probability') or 0.5),
            }
        else:
            age_gender = self._random_age_gender()

        return {
            'confidence': detection_score,
            'descriptor_vector': [float(v) for v in face['descriptor_vector']],
            'landmark_metrics': geometry.landmark_metrics(landmarks),
            'shape_classification': geometry.classify_shapes(landmarks),
            'expression_distribution': expressions,
            'dominant_expression': dominant_expression(expressions),
            'age_gender': age_gender,
            'quality_score': geometry.detection_quality(detection_score, face['box']),
            'provenance': Provenance.ADVANCED,
        }

    def _basic_descriptor(self, image: np.ndarray) -> Descriptor:
        quality = brightness_quality(image)
        expressions = dict(BASIC_EXPRESSIONS)

        return {
            'confidence': 0.6 + quality * 0.3,
            'descriptor_vector': self._random_vector(),
            'landmark_metrics': self._random_landmark_metrics(),
            'shape_classification': self._random_shapes(),
            'expression_distribution': expressions,
            'dominant_expression': dominant_expression(expressions),
            'age_gender': self._random_age_gender(),
            'quality_score': quality,
            'provenance': Provenance.BASIC,
        }

    def _fallback_descriptor(self) -> Descriptor:
        expressions = dict(NEUTRAL_EXPRESSIONS)

        return {
            'confidence': FALLBACK_CONFIDENCE,
            'descriptor_vector': self._random_vector(),
            'landmark_metrics': None,
            'shape_classification': self._random_shapes(),
            'expression_distribution': expressions,
            'dominant_expression': dominant_expression(expressions),
            'age_gender': {'age': 30, 'gender': 'unknown', 'gender_probability': 0.5},
            'quality_score': FALLBACK_QUALITY,
            'provenance': Provenance.FALLBACK,
        }

    def _random_vector(self) -> List[float]:
        return self._rng.uniform(-1.0, 1.0, self.descriptor_length).tolist()

    def _random_landmark_metrics(self) -> LandmarkMetrics:
        uniform = self._rng.uniform
        return {
            'eye_distance': float(uniform(45, 55)),
            'nose_width': float(uniform(20, 28)),
            'mouth_width': float(uniform(35, 45)),
            'face_width': float(uniform(120, 140)),
            'face_height': float(uniform(160, 190)),
            'eyebrow_arch': float(uniform(0.3, 0.7)),
            'jawline_sharpness': float(uniform(0.4, 0.8)),
        }

    def _random_shapes(self) -> ShapeClassification:
        return {
            'eye_shape': str(self._rng.choice(geometry.EYE_SHAPES)),
            'nose_shape': str(self._rng.choice(geometry.NOSE_SHAPES)),
            'mouth_shape': str(self._rng.choice(geometry.MOUTH_SHAPES)),
            'face_shape': str(self._rng.choice(geometry.FACE_SHAPES)),
        }

    def _random_age_gender(self) -> AgeGender:
        return {
            'age': 30 + int(self._rng.integers(0, 20)),
            'gender': 'male' if self._rng.random() > 0.5 else 'female',
            'gender_probability': 0.7 + float(self._rng.random()) * 0.2,
        }


# Create global extractor instance
extractor = FeatureExtractor()


def analyze_sketch(image: ImageInput) -> Descriptor:
    """Extract a descriptor with the shared extractor.

    Args:
        image: Encoded image bytes or a decoded BGR array.

    Returns:
        Descriptor tagged with the tier that produced it.
    """
    return extractor.extract(image)
