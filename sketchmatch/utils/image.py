"""Image processing utilities.

This module provides utility functions for image processing operations,
including upload validation, base64 decoding and pixel statistics used
by the heuristic extraction tier.
"""

import cv2
import numpy as np
import base64
from typing import Optional, Tuple
from .. import config
from ..models.types import ValidationResult

class ImageProcessingError(Exception):
    """Base exception for image processing errors."""
    pass

class ImageDecodingError(ImageProcessingError):
    """Exception raised when image decoding fails."""
    pass

class ImageFormatError(ImageProcessingError):
    """Exception raised when image format is invalid."""
    pass

class ImageValidationError(ValueError):
    """Base exception for rejected uploads."""
    pass

class ImageTypeError(ImageValidationError):
    """Exception raised when the upload is not an accepted image type."""
    pass

class ImageSizeError(ImageValidationError):
    """Exception raised when the upload exceeds the size limit."""
    pass

TYPE_ERROR_MESSAGE = "Please upload a valid image file (JPEG, PNG, or WebP)"
SIZE_ERROR_MESSAGE = "File size must be less than 10MB"

def validate_image_type(content_type: Optional[str]) -> None:
    """Raise ImageTypeError unless the MIME type is JPEG, PNG or WebP."""
    if (content_type or "").lower() not in config.ALLOWED_IMAGE_TYPES:
        raise ImageTypeError(TYPE_ERROR_MESSAGE)

def validate_image_size(size: int) -> None:
    """Raise ImageSizeError if the upload is larger than the configured limit."""
    if size > config.MAX_UPLOAD_BYTES:
        raise ImageSizeError(SIZE_ERROR_MESSAGE)

def validate_image_upload(content_type: Optional[str], size: int) -> None:
    """Validate an uploaded image.

    The type check runs first; the first failing check wins.

    Args:
        content_type: MIME type reported for the upload.
        size: Upload size in bytes.

    Raises:
        ImageTypeError: If the MIME type is not JPEG, PNG or WebP.
        ImageSizeError: If the upload is larger than the configured limit.
    """
    validate_image_type(content_type)
    validate_image_size(size)

def check_image_upload(content_type: Optional[str], size: int) -> ValidationResult:
    """Non-raising variant of validate_image_upload."""
    try:
        validate_image_upload(content_type, size)
    except ImageValidationError as e:
        return {'valid': False, 'error': str(e)}
    return {'valid': True, 'error': None}

def split_data_url(base64_string: str) -> Tuple[Optional[str], str]:
    """Split a data URL into its MIME type and base64 payload.

    Args:
        base64_string: Base64 encoded image string, optionally with data URL prefix.
            Example formats:
            - "data:image/jpeg;base64,/9j/4AAQSkZ..."
            - "/9j/4AAQSkZ..." (without prefix)

    Returns:
        Tuple of (MIME type or None, base64 payload).
    """
    if ';base64,' in base64_string:
        header, payload = base64_string.split(';base64,', 1)
        mime = header[len('data:'):] if header.startswith('data:') else None
        return (mime or None), payload
    if ',' in base64_string:
        # Fallback: split by comma if the specific delimiter isn't found
        return None, base64_string.split(',', 1)[1]
    return None, base64_string

def decode_base64_payload(base64_string: str) -> bytes:
    """Decode a base64 string (optionally a data URL) to raw bytes.

    Raises:
        ImageDecodingError: If base64 decoding fails.
    """
    _, payload = split_data_url(base64_string)
    try:
        return base64.b64decode(payload, validate=True)
    except (ValueError, TypeError) as e:
        raise ImageDecodingError(f"Failed to decode base64 string: {str(e)}")

def decode_image_bytes(image_bytes: bytes) -> np.ndarray:
    """Decode encoded image bytes to an OpenCV image.

    Returns:
        Decoded image as numpy array in BGR format.

    Raises:
        ImageFormatError: If the data cannot be read as an image.
    """
    if not image_bytes:
        raise ImageFormatError("Empty image data")

    nparr = np.frombuffer(image_bytes, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageFormatError("Failed to decode image data")

    return image

def decode_base64_image(base64_string: str) -> np.ndarray:
    """Decode base64 string to OpenCV image.

    Raises:
        ImageDecodingError: If base64 decoding fails.
        ImageFormatError: If decoded data cannot be read as an image.
    """
    return decode_image_bytes(decode_base64_payload(base64_string))

def brightness_quality(image: np.ndarray) -> float:
    """Estimate image quality from brightness spread around mid-gray.

    Samples every 4th pixel, takes the average absolute deviation of the
    channel mean from 128 and normalizes it by 64, clamped to [0, 1].

    Args:
        image: Decoded image (grayscale or 3/4 channel).

    Returns:
        Quality score in [0, 1].
    """
    if image.ndim == 2:
        pixels = image.reshape(-1, 1)
    else:
        # Ignore alpha like a canvas RGBA buffer would
        pixels = image.reshape(-1, image.shape[2])[:, :3]

    sampled = pixels[::4].astype(np.float64)
    if sampled.size == 0:
        return 0.0

    brightness = sampled.mean(axis=1)
    avg_variance = float(np.abs(brightness - 128.0).mean())
    return min(avg_variance / 64.0, 1.0)
