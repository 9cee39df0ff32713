"""Match scoring.

Scores a query descriptor against candidate profiles and ranks them.
Each comparison may be unavailable (None); the combined score averages
only the comparisons that were made, then is damped by sketch quality.
"""

import copy
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from .. import config
from ..models.types import (
    AgeGender,
    CandidateProfile,
    ConfidenceTier,
    Descriptor,
    MatchBreakdown,
    MatchResult,
    Provenance,
    WeightConfiguration,
)

logger = logging.getLogger(__name__)

SHAPE_KEYS = ('eye_shape', 'nose_shape', 'mouth_shape', 'face_shape')

WEIGHT_KEYS = ('features', 'descriptor', 'age_gender')

# camelCase spellings accepted from JSON clients
WEIGHT_ALIASES = {'age_gender': 'ageGender'}


class WeightedScore:
    """Accumulates optional weighted terms.

    Terms whose value is None contribute neither to the total nor to the
    normalizer.
    """

    def __init__(self):
        self.total = 0.0
        self.weight_sum = 0.0

    def add(self, value: Optional[float], weight: float) -> None:
        if value is None:
            return
        self.total += value * weight
        self.weight_sum += weight

    def average(self) -> float:
        if self.weight_sum <= 0:
            return 0.0
        return self.total / self.weight_sum


def resolve_weights(weights: Optional[WeightConfiguration] = None) -> Dict[str, float]:
    """Fill missing weights with defaults and clamp negatives to zero.

    Explicit zeros are kept; only missing or None entries take the default.
    A key may also be given in its camelCase form (ageGender).
    """
    weights = weights or {}
    resolved = {}
    for key in WEIGHT_KEYS:
        value = weights.get(key)
        if value is None and key in WEIGHT_ALIASES:
            value = weights.get(WEIGHT_ALIASES[key])
        if value is None:
            value = config.DEFAULT_WEIGHTS[key]
        value = float(value)
        if math.isnan(value) or value < 0:
            logger.warning(f"Ignoring invalid weight {key}={value}")
            value = 0.0
        resolved[key] = value
    return resolved


def compare_shapes(query: Optional[Mapping[str, str]], candidate: Optional[Mapping[str, str]]) -> Optional[float]:
    """Fraction of shape labels that match exactly, over labels both sides have."""
    if not query or not candidate:
        return None

    compared = [key for key in SHAPE_KEYS if query.get(key) and candidate.get(key)]
    if not compared:
        return None

    matches = sum(1 for key in compared if query[key] == candidate[key])
    return matches / len(compared)


def compare_descriptors(query: Optional[Sequence[float]], candidate: Optional[Sequence[float]]) -> Optional[float]:
    """Similarity from Euclidean distance, clamped at 0.

    Vectors of different length are compared over their common prefix.
    """
    if query is None or candidate is None or len(query) == 0 or len(candidate) == 0:
        return None

    length = min(len(query), len(candidate))
    q = np.asarray(query[:length], dtype=np.float64)
    c = np.asarray(candidate[:length], dtype=np.float64)
    distance = float(np.linalg.norm(q - c))
    return max(0.0, 1.0 - distance)


def compare_age_gender(query: Optional[AgeGender], candidate: Optional[AgeGender]) -> Optional[float]:
    if not query or not candidate:
        return None
    if query.get('age') is None or candidate.get('age') is None:
        return None
    if not query.get('gender') or not candidate.get('gender'):
        return None

    age_diff = abs(query['age'] - candidate['age'])
    age_score = max(0.0, 1.0 - age_diff / config.AGE_TOLERANCE_YEARS)
    gender_score = 1.0 if query.get('gender') == candidate.get('gender') else 0.0

    return age_score * 0.6 + gender_score * 0.4


def confidence_tier(score: float) -> ConfidenceTier:
    if score >= 0.8:
        return ConfidenceTier.VERY_HIGH
    if score >= 0.6:
        return ConfidenceTier.HIGH
    if score >= 0.4:
        return ConfidenceTier.MEDIUM
    if score >= 0.2:
        return ConfidenceTier.LOW
    return ConfidenceTier.VERY_LOW


def score_candidate(query: Descriptor, profile: CandidateProfile, weights: Mapping[str, float]) -> MatchResult:
    """Score one candidate against the query.

    Args:
        query: Descriptor extracted from the sketch.
        profile: Candidate to compare against.
        weights: Resolved relative weights (see resolve_weights).

    Returns:
        Match result with the combined score, tier and per-component breakdown.
    """
    # Fallback vectors are noise and are never compared
    query_vector = query.get('descriptor_vector')
    if query.get('provenance') == Provenance.FALLBACK:
        query_vector = None

    breakdown: MatchBreakdown = {
        'feature_match': compare_shapes(query.get('shape_classification'), profile.get('shape_classification')),
        'descriptor_match': compare_descriptors(query_vector, profile.get('descriptor_vector')),
        'age_gender_match': compare_age_gender(query.get('age_gender'), profile.get('age_gender')),
    }

    accumulator = WeightedScore()
    accumulator.add(breakdown['feature_match'], weights['features'])
    accumulator.add(breakdown['descriptor_match'], weights['descriptor'])
    accumulator.add(breakdown['age_gender_match'], weights['age_gender'])

    quality_factor = min(max(query.get('quality_score') or 0.0, 0.0), 1.0)
    combined = min(max(accumulator.average() * quality_factor, 0.0), 1.0)

    logger.debug(f"Candidate {profile.get('id')}: score={combined:.3f} breakdown={breakdown}")

    return {
        # Each result owns its profile copy
        'profile': copy.deepcopy(profile),
        'combined_score': combined,
        'confidence_tier': confidence_tier(combined),
        'breakdown': breakdown,
    }


def score_candidates(
    query: Descriptor,
    candidates: Sequence[CandidateProfile],
    weights: Optional[WeightConfiguration] = None,
    workers: Optional[int] = None,
) -> List[MatchResult]:
    """Score and rank candidates, best first.

    Candidates are independent and may be scored on a thread pool; results
    are collected in input order so equal scores keep their input order.

    Args:
        query: Descriptor extracted from the sketch.
        candidates: Profiles to rank.
        weights: Relative weights; missing entries use the defaults.
        workers: Thread count, defaults to config.SCORER_WORKERS.

    Returns:
        Match results sorted by combined score, descending.
    """
    resolved = resolve_weights(weights)
    workers = workers or config.SCORER_WORKERS

    if workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda p: score_candidate(query, p, resolved), candidates))
    else:
        results = [score_candidate(query, profile, resolved) for profile in candidates]

    # sorted() is stable, also with reverse=True
    return sorted(results, key=lambda r: r['combined_score'], reverse=True)
