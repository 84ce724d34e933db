"""
Image descriptor construction.

Turns a decoded PixelBuffer into an ImageDescriptor made of two signals:

    histogram  joint RGB histogram normalized by pixel count
    phash      DCT perceptual hash of the luminance plane

Building is a pure function of (buffer, config): no I/O, no globals, and
the same input always yields bit-identical output. Resolution only enters
through normalization (histogram) and resizing (hash), so rescaled copies
of an image produce near-identical descriptors.
"""

import logging

import numpy as np

from .config import DescriptorConfig
from .histograms import extract_color_histogram
from .models import ImageDescriptor, PixelBuffer
from .perceptual import compute_phash
from .preprocessing import to_grayscale, to_rgb

logger = logging.getLogger(__name__)


def build_descriptor(buffer: PixelBuffer, config: DescriptorConfig = None) -> ImageDescriptor:
    """
    Build the descriptor of one image.

    Args:
        buffer: Decoded image (1, 3 or 4 channels).
        config: Descriptor configuration. Defaults to DescriptorConfig().

    Returns:
        Immutable ImageDescriptor tagged with ``config``.

    Raises:
        InvalidBufferError: If the buffer's width, height, channel count or
            sample count are inconsistent.
    """
    config = config or DescriptorConfig()
    buffer.validate()

    rgb = to_rgb(buffer)
    histogram = extract_color_histogram(rgb, config.bins)
    phash, flat = compute_phash(to_grayscale(rgb), config.hash_size, config.dct_size)

    histogram.setflags(write=False)
    phash.setflags(write=False)

    logger.debug(
        f"Described {buffer.source or 'buffer'}: {buffer.width}x{buffer.height}x"
        f"{buffer.channels}, flat={flat}"
    )
    return ImageDescriptor(config=config, phash=phash, flat=bool(flat), histogram=histogram)


def describe_array(image_np: np.ndarray, config: DescriptorConfig = None,
                   source: str = None) -> ImageDescriptor:
    """Convenience wrapper for callers holding a bare (H, W[, C]) array."""
    return build_descriptor(PixelBuffer.from_array(image_np, source=source), config)
