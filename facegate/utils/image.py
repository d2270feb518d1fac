"""Image processing utilities.

This module provides utility functions for decoding uploaded images and
writing captured stills to disk so the detector can address them by path.
"""

import cv2
import numpy as np
import base64
import binascii
import uuid
from pathlib import Path
from typing import Union

class ImageProcessingError(Exception):
    """Base exception for image processing errors."""
    pass

class ImageDecodingError(ImageProcessingError):
    """Exception raised when image decoding fails."""
    pass

class ImageFormatError(ImageProcessingError):
    """Exception raised when image format is invalid."""
    pass

def decode_base64_image(base64_string: str) -> np.ndarray:
    """Decode base64 string to OpenCV image.

    Args:
        base64_string: Base64 encoded image string, optionally with data URL prefix.
            Example formats:
            - "data:image/jpeg;base64,/9j/4AAQSkZ..."
            - "/9j/4AAQSkZ..." (without prefix)

    Returns:
        Decoded image as numpy array in BGR format.

    Raises:
        ImageDecodingError: If base64 decoding fails.
        ImageFormatError: If decoded data cannot be read as an image.
    """
    if not base64_string:
        raise ImageDecodingError("Empty image payload")

    # Remove data URL prefix if present
    if ';base64,' in base64_string:
        base64_string = base64_string.split(';base64,', 1)[1]
    elif ',' in base64_string:
        base64_string = base64_string.split(',', 1)[1]

    try:
        image_bytes = base64.b64decode(base64_string, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodingError(f"Failed to decode base64 string: {str(e)}")

    nparr = np.frombuffer(image_bytes, np.uint8)
    if nparr.size == 0:
        raise ImageFormatError("Decoded image payload is empty")

    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageFormatError("Failed to decode image data")

    return image

def write_still(image: np.ndarray, directory: Union[str, Path], prefix: str = "capture") -> Path:
    """Write a BGR image as a JPEG still with a unique name.

    Args:
        image: Image in BGR format.
        directory: Target directory, created when missing.
        prefix: File name prefix.

    Returns:
        Path of the written file.

    Raises:
        ImageFormatError: If OpenCV cannot encode or write the image.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{prefix}_{uuid.uuid4().hex}.jpg"
    if not cv2.imwrite(str(path), image):
        raise ImageFormatError(f"Failed to write image to {path}")
    return path
