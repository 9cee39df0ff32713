"""Core feature extraction and matching functionality"""
from .extractor import (
    FeatureExtractor,
    analyze_sketch
)
from .scorer import (
    score_candidates,
    compare_descriptors,
    compare_age_gender,
    compare_shapes,
    confidence_tier
)
from .insights import generate_insights

__all__ = [
    'FeatureExtractor',
    'analyze_sketch',
    'score_candidates',
    'compare_descriptors',
    'compare_age_gender',
    'compare_shapes',
    'confidence_tier',
    'generate_insights'
]
