"""Tests for candidate scoring and ranking."""

import numpy as np
import pytest

from sketchmatch.core.scorer import (
    WeightedScore,
    compare_age_gender,
    compare_descriptors,
    compare_shapes,
    confidence_tier,
    resolve_weights,
    score_candidate,
    score_candidates,
)
from sketchmatch.models.types import ConfidenceTier, Provenance


SHAPES = {'eye_shape': 'almond', 'nose_shape': 'medium', 'mouth_shape': 'thin', 'face_shape': 'oval'}


def _query(**overrides):
    query = {
        'confidence': 0.9,
        'descriptor_vector': [0.0] * 128,
        'landmark_metrics': None,
        'shape_classification': dict(SHAPES),
        'expression_distribution': {'neutral': 1.0},
        'dominant_expression': {'label': 'neutral', 'confidence': 1.0},
        'age_gender': {'age': 30, 'gender': 'male', 'gender_probability': 0.9},
        'quality_score': 1.0,
        'provenance': Provenance.ADVANCED,
    }
    query.update(overrides)
    return query


def _profile(pid, **overrides):
    profile = {
        'id': pid,
        'name': f'Candidate {pid}',
        'age': 30,
        'location': 'Nowhere',
        'last_seen': '2024-01-01',
        'status': 'missing',
        'case_number': f'CASE-{pid}',
        'charges': [],
        'description': '',
        'image_url': '',
        'shape_classification': dict(SHAPES),
        'age_gender': {'age': 30, 'gender': 'male', 'gender_probability': 0.9},
        'descriptor_vector': [0.0] * 128,
    }
    profile.update(overrides)
    return profile


# =============================================================================
# Component comparisons
# =============================================================================


class TestCompareDescriptors:
    def test_identical_vectors_score_one(self):
        vec = np.random.default_rng(0).uniform(-1, 1, 128).tolist()
        assert compare_descriptors(vec, vec) == 1.0

    def test_symmetric(self):
        rng = np.random.default_rng(1)
        for _ in range(20):
            a = (rng.uniform(-0.05, 0.05, 128)).tolist()
            b = (rng.uniform(-0.05, 0.05, 128)).tolist()
            assert compare_descriptors(a, b) == compare_descriptors(b, a)

    def test_distance_maps_to_similarity(self):
        assert compare_descriptors([0.0, 0.0], [0.3, 0.4]) == pytest.approx(0.5)

    def test_clamped_at_zero(self):
        assert compare_descriptors([0.0] * 4, [1.0] * 4) == 0.0

    def test_compares_common_prefix(self):
        assert compare_descriptors([0.1, 0.2], [0.1, 0.2, 9.0]) == 1.0

    def test_missing_vectors(self):
        assert compare_descriptors(None, [1.0]) is None
        assert compare_descriptors([1.0], []) is None

    def test_accepts_numpy_arrays(self):
        assert compare_descriptors(np.zeros(3), np.zeros(3)) == 1.0


class TestCompareShapes:
    def test_fraction_of_matches(self):
        other = dict(SHAPES, eye_shape='round')
        assert compare_shapes(SHAPES, other) == pytest.approx(0.75)

    def test_only_keys_present_on_both_sides(self):
        partial = {'eye_shape': 'almond', 'nose_shape': 'wide'}
        assert compare_shapes(SHAPES, partial) == pytest.approx(0.5)

    def test_no_shape_data(self):
        assert compare_shapes(None, SHAPES) is None
        assert compare_shapes({}, {}) is None
        assert compare_shapes({'eye_shape': 'round'}, {'nose_shape': 'wide'}) is None


class TestCompareAgeGender:
    def test_same_age_and_gender(self):
        a = {'age': 30, 'gender': 'male', 'gender_probability': 0.9}
        assert compare_age_gender(a, dict(a)) == pytest.approx(1.0)

    def test_age_floor_and_gender_mismatch(self):
        a = {'age': 30, 'gender': 'male', 'gender_probability': 0.9}
        b = {'age': 80, 'gender': 'female', 'gender_probability': 0.9}
        assert compare_age_gender(a, b) == 0.0

    def test_partial_age_difference(self):
        a = {'age': 30, 'gender': 'male', 'gender_probability': 0.9}
        b = {'age': 55, 'gender': 'male', 'gender_probability': 0.9}
        assert compare_age_gender(a, b) == pytest.approx(0.6 * 0.5 + 0.4)

    def test_missing_side(self):
        assert compare_age_gender(None, {'age': 1, 'gender': 'male', 'gender_probability': 1.0}) is None

    def test_missing_gender(self):
        a = {'age': 30, 'gender': None, 'gender_probability': 0.5}
        b = {'age': 30, 'gender': 'male', 'gender_probability': 0.9}
        assert compare_age_gender(a, dict(a)) is None
        assert compare_age_gender(a, b) is None
        assert compare_age_gender({'age': 30}, {'age': 30}) is None


@pytest.mark.parametrize("score,tier", [
    (0.95, ConfidenceTier.VERY_HIGH),
    (0.8, ConfidenceTier.VERY_HIGH),
    (0.6, ConfidenceTier.HIGH),
    (0.45, ConfidenceTier.MEDIUM),
    (0.2, ConfidenceTier.LOW),
    (0.19, ConfidenceTier.VERY_LOW),
    (0.0, ConfidenceTier.VERY_LOW),
])
def test_confidence_tier(score, tier):
    assert confidence_tier(score) == tier


# =============================================================================
# Weights
# =============================================================================


def test_weighted_score_skips_missing_terms():
    acc = WeightedScore()
    acc.add(1.0, 0.3)
    acc.add(None, 0.4)
    acc.add(0.5, 0.2)
    assert acc.weight_sum == pytest.approx(0.5)
    assert acc.average() == pytest.approx((0.3 + 0.1) / 0.5)


def test_weighted_score_empty_is_zero():
    assert WeightedScore().average() == 0.0


def test_resolve_weights_defaults():
    assert resolve_weights(None) == {'features': 0.3, 'descriptor': 0.4, 'age_gender': 0.2}
    assert resolve_weights({'features': None, 'descriptor': 0.9}) == {
        'features': 0.3, 'descriptor': 0.9, 'age_gender': 0.2,
    }


def test_resolve_weights_accepts_camel_case_age_gender():
    assert resolve_weights({'ageGender': 0.7})['age_gender'] == 0.7
    assert resolve_weights({'age_gender': 0.1, 'ageGender': 0.7})['age_gender'] == 0.1


def test_resolve_weights_keeps_zero_and_clamps_negative():
    resolved = resolve_weights({'features': 0.0, 'descriptor': -1.0, 'age_gender': 0.5})
    assert resolved == {'features': 0.0, 'descriptor': 0.0, 'age_gender': 0.5}


# =============================================================================
# Scoring and ranking
# =============================================================================


def test_perfect_match_scores_one():
    result = score_candidate(_query(), _profile(1), resolve_weights(None))
    assert result['combined_score'] == pytest.approx(1.0)
    assert result['confidence_tier'] == ConfidenceTier.VERY_HIGH
    assert result['breakdown'] == {
        'feature_match': 1.0,
        'descriptor_match': 1.0,
        'age_gender_match': pytest.approx(1.0),
    }


def test_weighted_average_over_present_components():
    query = _query()
    profile = _profile(1, descriptor_vector=None, shape_classification=dict(SHAPES, eye_shape='round', nose_shape='wide'))
    result = score_candidate(query, profile, resolve_weights({'features': 0.3, 'age_gender': 0.2}))
    # features 0.5 at 0.3, age/gender 1.0 at 0.2, descriptor missing
    assert result['breakdown']['descriptor_match'] is None
    assert result['combined_score'] == pytest.approx((0.5 * 0.3 + 1.0 * 0.2) / 0.5)


def test_quality_dampens_score():
    result = score_candidate(_query(quality_score=0.5), _profile(1), resolve_weights(None))
    assert result['combined_score'] == pytest.approx(0.5)


def test_zero_quality_zeroes_every_score():
    candidates = [_profile(i, age_gender={'age': 20 + i, 'gender': 'male', 'gender_probability': 0.9}) for i in range(5)]
    for result in score_candidates(_query(quality_score=0.0), candidates):
        assert result['combined_score'] == 0.0


def test_all_components_missing_scores_zero():
    query = _query(shape_classification={}, descriptor_vector=[], age_gender=None)
    result = score_candidate(query, _profile(1), resolve_weights(None))
    assert result['breakdown'] == {'feature_match': None, 'descriptor_match': None, 'age_gender_match': None}
    assert result['combined_score'] == 0.0


def test_all_weights_zero_scores_zero():
    weights = {'features': 0.0, 'descriptor': 0.0, 'age_gender': 0.0}
    results = score_candidates(_query(), [_profile(1)], weights)
    assert results[0]['combined_score'] == 0.0


def test_fallback_query_vector_is_not_compared():
    query = _query(provenance=Provenance.FALLBACK)
    result = score_candidate(query, _profile(1), resolve_weights(None))
    assert result['breakdown']['descriptor_match'] is None
    assert result['breakdown']['feature_match'] == 1.0


def test_scores_within_unit_interval():
    rng = np.random.default_rng(7)
    candidates = [
        _profile(i, descriptor_vector=rng.uniform(-1, 1, 128).tolist(),
                 age_gender={'age': int(rng.integers(18, 90)), 'gender': 'female', 'gender_probability': 0.8})
        for i in range(10)
    ]
    query = _query(descriptor_vector=rng.uniform(-1, 1, 128).tolist(), quality_score=0.73)
    weights = {'features': 2.0, 'descriptor': 0.1, 'age_gender': 5.0}
    for result in score_candidates(query, candidates, weights):
        assert 0.0 <= result['combined_score'] <= 1.0


def test_ranking_descending():
    candidates = [
        _profile(1, age_gender={'age': 70, 'gender': 'female', 'gender_probability': 0.9}),
        _profile(2),
        _profile(3, age_gender={'age': 40, 'gender': 'male', 'gender_probability': 0.9}),
    ]
    ranked = score_candidates(_query(), candidates)
    assert [r['profile']['id'] for r in ranked] == [2, 3, 1]


@pytest.mark.parametrize("workers", [1, 4])
def test_ties_keep_input_order(workers):
    candidates = [_profile(i) for i in (5, 3, 9, 1)]
    ranked = score_candidates(_query(), candidates, workers=workers)
    assert [r['profile']['id'] for r in ranked] == [5, 3, 9, 1]


def test_profiles_are_not_mutated():
    profile = _profile(1)
    snapshot = dict(profile)
    result = score_candidates(_query(), [profile])[0]
    assert profile == snapshot
    assert result['profile'] == profile

    result['profile']['name'] = 'Changed'
    result['profile']['charges'].append('theft')
    assert profile == snapshot
    assert profile['charges'] == []
