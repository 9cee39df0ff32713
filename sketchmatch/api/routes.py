"""Sketch identification API routes.

This module provides the API endpoints for sketch identification,
handling sketch uploads, feature extraction, candidate ranking and
insight generation.
"""

import logging
import traceback
from fastapi import APIRouter, HTTPException, Query, status
from typing import Dict, List, Optional
from typing_extensions import TypedDict
from .. import config
from ..core.backend import backend_status, get_face_backend
from ..core.extractor import analyze_sketch
from ..core.insights import generate_insights
from ..core.scorer import score_candidates
from ..models.types import Descriptor, ErrorResponse, IdentifyRequest, MatchResult
from ..services.profiles import get_profiles
from ..services.session import SessionEntry, sessions
from ..utils.image import (
    ImageProcessingError,
    ImageValidationError,
    decode_base64_payload,
    split_data_url,
    validate_image_size,
    validate_image_type
)

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()

class IdentifyResponse(TypedDict):
    sessionId: str
    analysis: Descriptor

def _internal_error(e: Exception) -> HTTPException:
    error_details: ErrorResponse = {
        'error': str(e),
        'traceback': traceback.format_exc()
    }
    logger.error(f"Unexpected error: {str(e)}", extra={'error_details': error_details})
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_details
    )

def _rank(entry: SessionEntry) -> List[MatchResult]:
    weights = entry.weights or config.API_WEIGHTS
    matches = score_candidates(entry.analysis, get_profiles(), weights)
    return matches[:config.RESULT_LIMIT]

@router.post("/identify", response_model=IdentifyResponse)
def identify(request_data: IdentifyRequest) -> Dict:
    """Analyze an uploaded sketch and cache the result for the session.

    Args:
        request_data: Dictionary containing the sketch upload.
            - sketchImage: Base64 string or data URL of the sketch
            - contentType: MIME type, when not carried by a data URL
            - weights: Optional relative weights for scoring
            - sessionId: Existing session to overwrite

    Returns:
        Dictionary with the session id and the sketch analysis.

    Raises:
        HTTPException: If the upload is rejected or cannot be decoded
    """
    try:
        mime, _ = split_data_url(request_data['sketchImage'])
        content_type = request_data.get('contentType') or mime
        validate_image_type(content_type)

        logger.info("Decoding sketch image...")
        image_bytes = decode_base64_payload(request_data['sketchImage'])
        validate_image_size(len(image_bytes))

        logger.info(f"Analyzing sketch ({len(image_bytes)} bytes, {content_type})...")
        analysis = analyze_sketch(image_bytes)

        session_id = sessions.save(
            request_data.get('sessionId'),
            SessionEntry(analysis=analysis, weights=request_data.get('weights'))
        )
        logger.info(f"Sketch analysis ({analysis['provenance'].value}) stored for session {session_id}")

        return {'sessionId': session_id, 'analysis': analysis}

    except ImageValidationError as e:
        logger.warning(f"Validation error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ImageProcessingError as e:
        logger.warning(f"Image decoding error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        raise _internal_error(e)

@router.get("/results")
def results(session_id: Optional[str] = Query(None, alias="sessionId")) -> Dict:
    """Rank candidates against the session's sketch.

    Without an analyzed sketch the candidate profiles are returned unranked.
    """
    entry = sessions.get(session_id)
    if entry is None:
        return {
            'aiEnhanced': False,
            'matches': [],
            'profiles': list(get_profiles())[:config.RESULT_LIMIT]
        }

    try:
        matches = _rank(entry)
    except Exception as e:
        raise _internal_error(e)

    if matches:
        top = matches[0]
        logger.info(f"Top match: {top['profile']['name']} ({top['combined_score']:.2f})")
    return {'aiEnhanced': True, 'matches': matches}

@router.get("/insights")
def insights(session_id: Optional[str] = Query(None, alias="sessionId")) -> Dict:
    """Return the session's sketch analysis with generated insights."""
    entry = sessions.get(session_id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No sketch analysis for this session"
        )

    try:
        matches = _rank(entry)
        return {
            'analysis': entry.analysis,
            'insights': generate_insights(entry.analysis, matches)
        }
    except Exception as e:
        raise _internal_error(e)

@router.get("/health")
def health() -> Dict:
    return {'status': 'ok'}

@router.get("/ai-health")
def ai_health() -> Dict:
    """Load the face backend if needed and report its state."""
    get_face_backend()
    return backend_status()
