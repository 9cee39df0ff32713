"""Human-readable insights about a sketch analysis and its matches."""

from typing import List, Optional, Sequence

from ..models.types import Descriptor, Insights, MatchResult, Provenance, SketchQuality


def assess_sketch_quality(analysis: Descriptor) -> SketchQuality:
    quality = analysis.get('quality_score')
    if quality is None:
        quality = 0.5

    if quality >= 0.8:
        return {
            'level': 'excellent',
            'description': 'High-quality sketch with clear facial features',
            'factors': ['Clear facial boundaries', 'Detailed features', 'Good contrast'],
        }
    if quality >= 0.6:
        return {
            'level': 'good',
            'description': 'Good quality sketch suitable for identification',
            'factors': ['Visible features', 'Adequate detail', 'Recognizable structure'],
        }
    if quality >= 0.4:
        return {
            'level': 'fair',
            'description': 'Fair quality sketch with some limitations',
            'factors': ['Some unclear features', 'Limited detail', 'Partial visibility'],
        }
    return {
        'level': 'poor',
        'description': 'Poor quality sketch may limit identification accuracy',
        'factors': ['Unclear features', 'Low detail', 'Poor contrast'],
    }


def recommend_matching_strategy(analysis: Descriptor) -> List[str]:
    strategies = []

    if (analysis.get('quality_score') or 0) > 0.7:
        strategies.append('Use high-precision feature matching')

    age_gender = analysis.get('age_gender')
    if age_gender and age_gender.get('gender_probability', 0) > 0.8:
        strategies.append('Filter by gender for better accuracy')

    dominant = analysis.get('dominant_expression')
    if dominant and dominant.get('confidence', 0) > 0.6:
        strategies.append('Consider expression-based filtering')

    return strategies or ['Use broad matching criteria']


def identify_confidence_factors(analysis: Descriptor, matches: Optional[Sequence[MatchResult]]) -> List[str]:
    factors = []

    if (analysis.get('quality_score') or 0) > 0.8:
        factors.append('High sketch quality increases match confidence')

    if matches and matches[0]['combined_score'] > 0.8:
        factors.append('Strong feature correlation with top match')

    # Heuristic tiers synthesize landmark values, which are not detections
    if analysis.get('landmark_metrics') and analysis.get('provenance') == Provenance.ADVANCED:
        factors.append('Facial landmarks successfully detected')

    return factors


def generate_recommendations(analysis: Descriptor, matches: Optional[Sequence[MatchResult]]) -> List[str]:
    recommendations = []

    if (analysis.get('quality_score') or 0) < 0.5:
        recommendations.append('Consider uploading a higher quality sketch for better results')

    if not matches:
        recommendations.append('Try adjusting feature confidence levels')
        recommendations.append('Consider expanding search criteria')
    elif len(matches) > 10:
        recommendations.append('Results show many potential matches - consider narrowing criteria')

    return recommendations


def generate_insights(analysis: Descriptor, matches: Optional[Sequence[MatchResult]] = None) -> Insights:
    """Summarize an analysis and its ranked matches for display."""
    return {
        'sketch_quality': assess_sketch_quality(analysis),
        'matching_strategy': recommend_matching_strategy(analysis),
        'confidence_factors': identify_confidence_factors(analysis, matches),
        'recommendations': generate_recommendations(analysis, matches),
    }
