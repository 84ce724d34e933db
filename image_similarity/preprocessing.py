"""
Pixel preprocessing shared by the descriptor extractors.

Brings every supported buffer layout (1, 3 or 4 channels; bool, uint8,
uint16 or float samples) to the same uint8 RGB / grayscale planes so the
extractors never branch on input format.
"""

import cv2
import numpy as np

from .errors import InvalidBufferError
from .models import PixelBuffer


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image samples are uint8."""
    if image_np.dtype == np.uint8:
        return image_np
    if image_np.dtype == np.bool_:
        return image_np.astype(np.uint8) * 255
    if image_np.dtype == np.uint16:
        return (image_np >> 8).astype(np.uint8)
    if image_np.dtype.kind == "f":
        if not np.all(np.isfinite(image_np)):
            raise InvalidBufferError("Float pixel data contains NaN or infinite samples")
        if image_np.max() <= 1.0:
            image_np = image_np * 255.0
    return np.clip(image_np, 0, 255).astype(np.uint8)


def to_rgb(buffer: PixelBuffer) -> np.ndarray:
    """
    Return the buffer as an (H, W, 3) uint8 RGB array.

    Grayscale is replicated across the three channels and the alpha
    channel of RGBA input is dropped, so buffers of any supported channel
    count produce comparable colour planes.
    """
    image = normalize_image(buffer.as_image())
    if buffer.channels == 1:
        return np.repeat(image, 3, axis=2)
    return image[:, :, :3].copy()


def to_grayscale(rgb: np.ndarray) -> np.ndarray:
    """Convert an (H, W, 3) RGB array to a single-channel luminance plane."""
    return cv2.cvtColor(np.ascontiguousarray(rgb), cv2.COLOR_RGB2GRAY)
