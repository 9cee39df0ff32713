"""Data models and type definitions"""
from enum import Enum
from typing import Dict, List, Optional, Tuple
from typing_extensions import NotRequired, TypedDict


class Provenance(str, Enum):
    """Extraction tier that produced a descriptor."""
    ADVANCED = "advanced"
    BASIC = "basic"
    FALLBACK = "fallback"


class ConfidenceTier(str, Enum):
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


Point = Tuple[float, float]


class Box(TypedDict):
    x: int
    y: int
    width: int
    height: int


class LandmarkMetrics(TypedDict):
    eye_distance: float
    nose_width: float
    mouth_width: float
    face_width: float
    face_height: float
    eyebrow_arch: float
    jawline_sharpness: float


class ShapeClassification(TypedDict):
    eye_shape: str
    nose_shape: str
    mouth_shape: str
    face_shape: str


class DominantExpression(TypedDict):
    label: str
    confidence: float


class AgeGender(TypedDict):
    age: int
    gender: str
    gender_probability: float


class Descriptor(TypedDict):
    confidence: float
    descriptor_vector: List[float]
    landmark_metrics: Optional[LandmarkMetrics]
    shape_classification: ShapeClassification
    expression_distribution: Dict[str, float]
    dominant_expression: DominantExpression
    age_gender: AgeGender
    quality_score: float
    provenance: Provenance


class DetectedFace(TypedDict):
    box: Box
    landmarks: List[Point]
    descriptor_vector: List[float]
    detection_score: NotRequired[Optional[float]]
    expressions: NotRequired[Optional[Dict[str, float]]]
    age: NotRequired[Optional[float]]
    gender: NotRequired[Optional[str]]
    gender_probability: NotRequired[Optional[float]]


class CandidateProfile(TypedDict):
    id: int
    name: str
    age: int
    location: str
    last_seen: str
    status: str
    case_number: str
    charges: List[str]
    description: str
    image_url: str
    shape_classification: Optional[ShapeClassification]
    age_gender: Optional[AgeGender]
    descriptor_vector: Optional[List[float]]


class WeightConfiguration(TypedDict, total=False):
    features: Optional[float]
    descriptor: Optional[float]
    age_gender: Optional[float]
    ageGender: Optional[float]


class MatchBreakdown(TypedDict):
    feature_match: Optional[float]
    descriptor_match: Optional[float]
    age_gender_match: Optional[float]


class MatchResult(TypedDict):
    profile: CandidateProfile
    combined_score: float
    confidence_tier: ConfidenceTier
    breakdown: MatchBreakdown


class SketchQuality(TypedDict):
    level: str
    description: str
    factors: List[str]


class Insights(TypedDict):
    sketch_quality: SketchQuality
    matching_strategy: List[str]
    confidence_factors: List[str]
    recommendations: List[str]


class ValidationResult(TypedDict):
    valid: bool
    error: Optional[str]


class IdentifyRequest(TypedDict):
    sketchImage: str
    contentType: NotRequired[Optional[str]]
    weights: NotRequired[Optional[WeightConfiguration]]
    sessionId: NotRequired[Optional[str]]


class ErrorResponse(TypedDict):
    error: str
    traceback: Optional[str]
