"""
DCT-based perceptual hash.

The histogram sees colour but not layout: a picture and a shuffled copy
of its pixels have identical histograms. The perceptual hash fills that
gap with a coarse description of where light and dark sit in the frame.

Process:
    1. Resize the grayscale plane to hash_size x hash_size
    2. 2-D DCT in float64
    3. Keep the top-left dct_size x dct_size (low frequency) block
    4. Bit = coefficient >= mean of the block's AC coefficients

The DC coefficient only encodes overall brightness, which the histogram
already covers, so its bit is always 0. An image whose AC coefficients
are all (numerically) zero is flat: it has no structure to hash, and the
scorer treats two flat hashes as carrying no structural evidence.
"""

import cv2
import numpy as np

# AC magnitudes below this are floating point noise from a constant plane
FLAT_EPSILON = 1e-6


def compute_phash(gray: np.ndarray, hash_size: int, dct_size: int):
    """
    Compute the perceptual hash of a grayscale image.

    Args:
        gray: 2-D uint8 luminance plane of any size.
        hash_size: Side of the square the image is resized to (even).
        dct_size: Side of the low-frequency block turned into bits.

    Returns:
        Tuple of (bits, flat): a boolean vector of dct_size**2 bits in
        row-major block order, and whether the image has no structure.
    """
    resized = cv2.resize(gray, (hash_size, hash_size), interpolation=cv2.INTER_AREA)
    coefficients = cv2.dct(resized.astype(np.float64))
    block = coefficients[:dct_size, :dct_size].flatten()

    ac = block[1:]
    if np.max(np.abs(ac)) < FLAT_EPSILON:
        return np.zeros(block.size, dtype=bool), True

    bits = block >= ac.mean()
    bits[0] = False
    return bits, False


def hamming_similarity(bits_a: np.ndarray, bits_b: np.ndarray) -> float:
    """
    Fraction of matching bits between two hashes, in [0, 1].

    Raises:
        ValueError: If the hashes differ in length.
    """
    if bits_a.shape != bits_b.shape:
        raise ValueError(
            f"Hash length {bits_a.size} doesn't match hash length {bits_b.size}"
        )
    if bits_a.size == 0:
        return 0.0
    distance = np.count_nonzero(bits_a != bits_b)
    return 1.0 - distance / bits_a.size
