"""Data models and type definitions"""
from .types import (
    Provenance,
    ConfidenceTier,
    Point,
    Box,
    LandmarkMetrics,
    ShapeClassification,
    DominantExpression,
    AgeGender,
    Descriptor,
    DetectedFace,
    CandidateProfile,
    WeightConfiguration,
    MatchBreakdown,
    MatchResult,
    SketchQuality,
    Insights,
    ValidationResult,
    IdentifyRequest,
    ErrorResponse,
)

__all__ = [
    'Provenance',
    'ConfidenceTier',
    'Point',
    'Box',
    'LandmarkMetrics',
    'ShapeClassification',
    'DominantExpression',
    'AgeGender',
    'Descriptor',
    'DetectedFace',
    'CandidateProfile',
    'WeightConfiguration',
    'MatchBreakdown',
    'MatchResult',
    'SketchQuality',
    'Insights',
    'ValidationResult',
    'IdentifyRequest',
    'ErrorResponse',
]
