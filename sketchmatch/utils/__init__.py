"""Utility functions for image processing"""
from .image import (
    decode_base64_image,
    decode_base64_payload,
    decode_image_bytes,
    split_data_url,
    validate_image_type,
    validate_image_size,
    validate_image_upload,
    check_image_upload,
    brightness_quality
)

__all__ = [
    'decode_base64_image',
    'decode_base64_payload',
    'decode_image_bytes',
    'split_data_url',
    'validate_image_type',
    'validate_image_size',
    'validate_image_upload',
    'check_image_upload',
    'brightness_quality'
]
