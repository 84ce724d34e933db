"""
Pair comparison: decode, describe and score two images.

PairComparator is the single place where images are decoded and turned
into descriptors. The batch orchestrator reuses ``describe`` for each
candidate and ``score`` for each pair, so there is exactly one code path
from file to score whatever the mode.
"""

import logging
from typing import Callable

from .config import DescriptorConfig
from .descriptor import build_descriptor
from .image_io import decode_image
from .models import ImageDescriptor, PixelBuffer, SimilarityScore
from .scoring import score_descriptors

logger = logging.getLogger(__name__)


class PairComparator:
    """
    Compare images under one descriptor configuration.

    Errors are never swallowed: DecodeError and InvalidBufferError from
    ``describe`` and ConfigurationMismatchError from ``score`` propagate to
    the caller, which decides whether they abort the run.
    """

    def __init__(self, config: DescriptorConfig = None,
                 decoder: Callable[[str], PixelBuffer] = decode_image):
        """
        Args:
            config: Descriptor configuration shared by every comparison.
            decoder: Callable turning a path into a PixelBuffer, raising
                DecodeError on failure.
        """
        self.config = config or DescriptorConfig()
        self.decoder = decoder

    def describe(self, source: str) -> ImageDescriptor:
        """Decode ``source`` and build its descriptor."""
        buffer = self.decoder(source)
        return build_descriptor(buffer, self.config)

    def score(self, desc_a: ImageDescriptor, desc_b: ImageDescriptor,
              source_a: str, source_b: str) -> SimilarityScore:
        """Score two already built descriptors."""
        return SimilarityScore(
            score=score_descriptors(desc_a, desc_b),
            source_a=source_a,
            source_b=source_b,
        )

    def compare(self, source_a: str, source_b: str) -> SimilarityScore:
        """Decode, describe and score two images."""
        result = self.score(self.describe(source_a), self.describe(source_b),
                            source_a, source_b)
        logger.info(f"{source_a} vs {source_b}: {result.score:.6f}")
        return result
