"""
Joint colour histogram extraction and histogram intersection.

Each image is summarised by one 3D RGB histogram with ``bins`` bins per
axis, so a bin stands for a colour (an R, G, B combination) rather than
a level of a single channel. Counts are divided by the pixel count, so the
vector sums to 1 regardless of resolution and images of different sizes
remain directly comparable.

Histogram intersection (sum of element-wise minima) of two such vectors
lies in [0, 1]: 1 when the colour distributions coincide, 0 when they
share no colour bin at all. Two uniform images of different colours
therefore intersect to 0 even when they agree on one or two channels.
"""

import cv2
import numpy as np

N_CHANNELS = 3


def extract_color_histogram(rgb: np.ndarray, bins: int) -> np.ndarray:
    """
    Extract a pixel-count normalized joint RGB histogram.

    Args:
        rgb: (H, W, 3) uint8 RGB image.
        bins: Number of bins per colour axis over the [0, 256) sample range.

    Returns:
        Float64 vector of bins ** 3 values (R-major, then G, then B),
        summing to 1.
    """
    pixels = float(rgb.shape[0] * rgb.shape[1])
    hist = cv2.calcHist([rgb], [0, 1, 2], None,
                        [bins] * N_CHANNELS, [0, 256] * N_CHANNELS)
    return hist.flatten().astype(np.float64) / pixels


def histogram_intersection(hist_a: np.ndarray, hist_b: np.ndarray, bins: int) -> float:
    """
    Histogram intersection of two joint colour histograms.

    Symmetric by construction: np.minimum is element-wise and the sum
    runs in the same order for both argument orders.

    Returns:
        Similarity in [0, 1].

    Raises:
        ValueError: If the vectors don't have bins ** 3 entries.
    """
    expected = bins ** N_CHANNELS
    if hist_a.shape != (expected,) or hist_b.shape != (expected,):
        raise ValueError(
            f"Histogram dimension {hist_a.shape} / {hist_b.shape} doesn't match "
            f"expected dimension {expected}"
        )

    overlap = np.minimum(hist_a, hist_b).sum()
    return float(np.clip(overlap, 0.0, 1.0))
