"""Utility functions for image handling and logging"""
from .image import (
    decode_base64_image,
    write_still,
    ImageProcessingError,
)
from .log import configure_logging

__all__ = [
    'decode_base64_image',
    'write_still',
    'ImageProcessingError',
    'configure_logging',
]
