"""Candidate profiles matched against uploaded sketches.

The sample set is static reference data. Descriptor vectors are drawn from
a fixed seed so rankings are reproducible between restarts.
"""

from typing import List, Optional, Tuple

import numpy as np

from .. import config
from ..models.types import CandidateProfile

PROFILE_VECTOR_SEED = 1729


def _vectors(count: int) -> List[List[float]]:
    rng = np.random.default_rng(PROFILE_VECTOR_SEED)
    return [rng.uniform(-1.0, 1.0, config.DESCRIPTOR_LENGTH).tolist() for _ in range(count)]


def _build_profiles() -> Tuple[CandidateProfile, ...]:
    vectors = _vectors(5)
    return (
        {
            'id': 1,
            'name': 'John Anderson',
            'age': 34,
            'location': 'New York, NY',
            'last_seen': '2024-01-15',
            'status': 'wanted',
            'case_number': 'NYC-2024-0156',
            'charges': ['Armed Robbery', 'Assault'],
            'description': 'Suspect in multiple armed robbery cases across Manhattan area.',
            'image_url': 'https://images.pexels.com/photos/2379004/pexels-photo-2379004.jpeg?auto=compress&cs=tinysrgb&w=300&h=400&fit=crop',
            'shape_classification': {
                'eye_shape': 'almond',
                'nose_shape': 'medium',
                'mouth_shape': 'thin',
                'face_shape': 'oval',
            },
            'age_gender': {'age': 34, 'gender': 'male', 'gender_probability': 0.95},
            'descriptor_vector': vectors[0],
        },
        {
            'id': 2,
            'name': 'Michael Rodriguez',
            'age': 28,
            'location': 'Brooklyn, NY',
            'last_seen': '2024-01-20',
            'status': 'person_of_interest',
            'case_number': 'BRK-2024-0089',
            'charges': ['Theft', 'Vandalism'],
            'description': 'Person of interest in recent vandalism incidents.',
            'image_url': 'https://images.pexels.com/photos/1222271/pexels-photo-1222271.jpeg?auto=compress&cs=tinysrgb&w=300&h=400&fit=crop',
            'shape_classification': {
                'eye_shape': 'round',
                'nose_shape': 'wide',
                'mouth_shape': 'full',
                'face_shape': 'square',
            },
            'age_gender': {'age': 28, 'gender': 'male', 'gender_probability': 0.92},
            'descriptor_vector': vectors[1],
        },
        {
            'id': 3,
            'name': 'David Thompson',
            'age': 42,
            'location': 'Queens, NY',
            'last_seen': '2024-01-10',
            'status': 'missing',
            'case_number': 'QNS-2024-0034',
            'charges': [],
            'description': 'Missing person case, last seen in Queens area.',
            'image_url': 'https://images.pexels.com/photos/1681010/pexels-photo-1681010.jpeg?auto=compress&cs=tinysrgb&w=300&h=400&fit=crop',
            'shape_classification': {
                'eye_shape': 'narrow',
                'nose_shape': 'narrow',
                'mouth_shape': 'medium',
                'face_shape': 'heart',
            },
            'age_gender': {'age': 42, 'gender': 'male', 'gender_probability': 0.88},
            'descriptor_vector': vectors[2],
        },
        {
            'id': 4,
            'name': 'Sarah Williams',
            'age': 29,
            'location': 'Manhattan, NY',
            'last_seen': '2024-01-18',
            'status': 'missing',
            'case_number': 'MAN-2024-0078',
            'charges': [],
            'description': 'Missing person, last seen near Central Park.',
            'image_url': 'https://images.pexels.com/photos/1239291/pexels-photo-1239291.jpeg?auto=compress&cs=tinysrgb&w=300&h=400&fit=crop',
            'shape_classification': {
                'eye_shape': 'almond',
                'nose_shape': 'narrow',
                'mouth_shape': 'full',
                'face_shape': 'oval',
            },
            'age_gender': {'age': 29, 'gender': 'female', 'gender_probability': 0.96},
            'descriptor_vector': vectors[3],
        },
        {
            'id': 5,
            'name': 'Robert Chen',
            'age': 35,
            'location': 'Bronx, NY',
            'last_seen': '2024-01-12',
            'status': 'person_of_interest',
            'case_number': 'BRX-2024-0045',
            'charges': ['Fraud', 'Identity Theft'],
            'description': 'Person of interest in financial fraud cases.',
            'image_url': 'https://images.pexels.com/photos/1043471/pexels-photo-1043471.jpeg?auto=compress&cs=tinysrgb&w=300&h=400&fit=crop',
            'shape_classification': {
                'eye_shape': 'narrow',
                'nose_shape': 'medium',
                'mouth_shape': 'thin',
                'face_shape': 'round',
            },
            'age_gender': {'age': 35, 'gender': 'male', 'gender_probability': 0.91},
            'descriptor_vector': vectors[4],
        },
    )


_PROFILES: Optional[Tuple[CandidateProfile, ...]] = None


def get_profiles() -> Tuple[CandidateProfile, ...]:
    """Return the candidate set (built once)."""
    global _PROFILES

    if _PROFILES is None:
        _PROFILES = _build_profiles()
    return _PROFILES
