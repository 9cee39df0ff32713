"""Central configuration for sketch identification.

Settings are loaded from ``SKETCHMATCH_``-prefixed environment variables
(or a ``.env`` file) with defaults suitable for development. The
module-level names below are the values the rest of the package reads.
"""

from typing import Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Upload validation
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0)  # 10MB
    # List values are read as JSON, e.g. '["image/png"]'
    allowed_image_types: Tuple[str, ...] = ("image/jpeg", "image/jpg", "image/png", "image/webp")

    # Feature extraction
    # "face_recognition" or "none" (always use the heuristic tiers)
    face_backend: str = "face_recognition"
    # face_recognition detector model: "hog" (CPU) or "cnn"
    face_detection_model: str = "hog"
    # Seed for the heuristic tiers; unset means nondeterministic
    random_seed: Optional[int] = None

    # Match scoring
    weight_features: float = Field(default=0.3, ge=0)
    weight_descriptor: float = Field(default=0.4, ge=0)
    weight_age_gender: float = Field(default=0.2, ge=0)
    result_limit: int = Field(default=8, ge=1)
    # Threads used to score candidates; 1 scores sequentially
    scorer_workers: int = Field(default=1, ge=1)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3002, ge=1, le=65535)
    log_level: str = "info"

    model_config = SettingsConfigDict(
        env_prefix="SKETCHMATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

# =============================================================================
# UPLOAD VALIDATION
# =============================================================================

MAX_UPLOAD_BYTES = settings.max_upload_bytes

ALLOWED_IMAGE_TYPES = tuple(t.lower() for t in settings.allowed_image_types)

# =============================================================================
# FEATURE EXTRACTION
# =============================================================================

DESCRIPTOR_LENGTH = 128

FACE_BACKEND = settings.face_backend

FACE_DETECTION_MODEL = settings.face_detection_model

RANDOM_SEED = settings.random_seed

# Detection score assumed when a backend reports none (HOG has no score)
DEFAULT_DETECTION_SCORE = 1.0

# Face box area (pixels) at which the size part of the quality score saturates
QUALITY_FACE_AREA = 10000

# =============================================================================
# MATCH SCORING
# =============================================================================

# Relative weights used when a key is missing from the client configuration
DEFAULT_WEIGHTS = {
    "features": settings.weight_features,
    "descriptor": settings.weight_descriptor,
    "age_gender": settings.weight_age_gender,
}

# Weights the results endpoint applies when the client sent none
API_WEIGHTS = {
    "features": 0.4,
    "descriptor": 0.4,
    "age_gender": 0.2,
}

# Age difference (years) at which the age part of the score reaches zero
AGE_TOLERANCE_YEARS = 50

# Number of ranked matches returned by the results endpoint
RESULT_LIMIT = settings.result_limit

SCORER_WORKERS = settings.scorer_workers

# =============================================================================
# SERVER
# =============================================================================

HOST = settings.host
PORT = settings.port
LOG_LEVEL = settings.log_level
