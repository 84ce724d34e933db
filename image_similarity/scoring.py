"""
Similarity scoring between image descriptors.

Combines two signals into a single score in [0, 1]:

    structure  1 - normalized Hamming distance of the perceptual hashes
    colour     joint RGB histogram intersection

    score = w * structure + (1 - w) * colour,   w = config.hash_weight

Both signals are symmetric, bounded in [0, 1] and increase as the images
get closer, so the weighted sum is too. Two special cases are pinned down:

    - identical descriptors score exactly 1.0
    - when both images are flat (no structure at all, e.g. two uniform
      fills) the hashes are meaningless and only colour is scored, so two
      uniform images of different colours score 0.0 rather than 0.5
"""

import logging
from typing import Dict, Iterable, List

from .errors import ConfigurationMismatchError
from .histograms import histogram_intersection
from .models import ImageDescriptor, SimilarityScore
from .perceptual import hamming_similarity

logger = logging.getLogger(__name__)


def similarity_components(desc_a: ImageDescriptor,
                          desc_b: ImageDescriptor) -> Dict[str, float]:
    """
    Return the per-signal similarities between two descriptors.

    Raises:
        ConfigurationMismatchError: If the descriptors were built with
            different configurations.
    """
    if desc_a.config != desc_b.config:
        raise ConfigurationMismatchError(
            f"Cannot compare descriptors built with {desc_a.config} and {desc_b.config}"
        )
    return {
        "structure": hamming_similarity(desc_a.phash, desc_b.phash),
        "colour": histogram_intersection(desc_a.histogram, desc_b.histogram,
                                         desc_a.config.bins),
    }


def score_descriptors(desc_a: ImageDescriptor, desc_b: ImageDescriptor) -> float:
    """
    Compute the similarity of two descriptors.

    Args:
        desc_a: Descriptor of the first image.
        desc_b: Descriptor of the second image, same config as desc_a.

    Returns:
        Score in [0, 1]; 1.0 for identical descriptors.

    Raises:
        ConfigurationMismatchError: If the configs differ.
    """
    components = similarity_components(desc_a, desc_b)
    if desc_a.identical(desc_b):
        return 1.0

    if desc_a.flat and desc_b.flat:
        logger.debug("Both images are flat, scoring on colour only")
        score = components["colour"]
    else:
        w = desc_a.config.hash_weight
        score = w * components["structure"] + (1.0 - w) * components["colour"]

    return float(min(1.0, max(0.0, score)))


def rank_scores(scores: Iterable[SimilarityScore]) -> List[SimilarityScore]:
    """
    Sort scores by similarity (highest first), then by the pair's paths.

    The path tiebreaker makes the order total, so unchanged inputs always
    produce the same report.
    """
    return sorted(scores, key=lambda s: s.rank_key)
