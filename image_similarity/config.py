"""
Descriptor and batch configuration.

Defaults are read from the environment once at import time so they can be
tuned without code changes. Everything downstream receives an explicit
DescriptorConfig value; nothing reads these globals at comparison time.

    IMGSIM_HASH_SIZE    side of the square resized image fed to the DCT (64)
    IMGSIM_DCT_SIZE     side of the low-frequency DCT block hashed (16)
    IMGSIM_HIST_BINS    histogram bins per colour axis (8, so 512 colour bins)
    IMGSIM_HASH_WEIGHT  weight of the structural (hash) signal (0.5)
    IMGSIM_WORKERS      worker threads for batch modes (cpu count, max 8)
"""

import os
from dataclasses import dataclass

DEFAULT_HASH_SIZE = int(os.environ.get("IMGSIM_HASH_SIZE", "64"))
DEFAULT_DCT_SIZE = int(os.environ.get("IMGSIM_DCT_SIZE", "16"))
DEFAULT_BINS = int(os.environ.get("IMGSIM_HIST_BINS", "8"))
DEFAULT_HASH_WEIGHT = float(os.environ.get("IMGSIM_HASH_WEIGHT", "0.5"))
DEFAULT_WORKERS = int(os.environ.get("IMGSIM_WORKERS", str(min(8, os.cpu_count() or 1))))

DEFAULT_EXTENSIONS = frozenset({"png", "jpg", "jpeg"})


@dataclass(frozen=True)
class DescriptorConfig:
    """
    Parameters that determine the shape and meaning of a descriptor.

    Two descriptors can only be scored against each other when they were
    built from equal configs.

    Attributes:
        hash_size: Images are resized to hash_size x hash_size before the DCT.
        dct_size: Side of the top-left DCT block turned into hash bits.
        bins: Joint histogram bins per colour axis (bins ** 3 in total).
        hash_weight: Share of the final score taken by the structural
            signal; the colour histogram gets the rest.
    """

    hash_size: int = DEFAULT_HASH_SIZE
    dct_size: int = DEFAULT_DCT_SIZE
    bins: int = DEFAULT_BINS
    hash_weight: float = DEFAULT_HASH_WEIGHT

    def __post_init__(self):
        # cv2.dct only handles even-sized arrays
        if self.hash_size <= 0 or self.hash_size % 2:
            raise ValueError(f"hash_size should be a positive even number instead of {self.hash_size}")
        if self.dct_size < 2:
            raise ValueError(f"dct_size should be at least 2 instead of {self.dct_size}")
        if self.dct_size > self.hash_size:
            raise ValueError(
                f"dct_size ({self.dct_size}) cannot exceed hash_size ({self.hash_size})"
            )
        if not 1 <= self.bins <= 64:
            raise ValueError(f"bins should be between 1 and 64 instead of {self.bins}")
        if not 0.0 <= self.hash_weight <= 1.0:
            raise ValueError(f"hash_weight should be within [0, 1] instead of {self.hash_weight}")

    @property
    def hash_bits(self) -> int:
        return self.dct_size * self.dct_size

    @property
    def histogram_dim(self) -> int:
        return self.bins ** 3


def parse_extensions(value: str = None) -> frozenset:
    """
    Turn a comma separated extension list into a set of lower-case suffixes.

    Leading dots and surrounding whitespace are ignored. An empty or
    missing value yields DEFAULT_EXTENSIONS.
    """
    if not value:
        return DEFAULT_EXTENSIONS
    exts = frozenset(
        part.strip().lstrip(".").lower()
        for part in value.split(",")
        if part.strip().lstrip(".")
    )
    return exts or DEFAULT_EXTENSIONS
