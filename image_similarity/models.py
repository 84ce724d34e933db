"""Data model shared by the descriptor builder, scorer and orchestrator."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import DescriptorConfig, DEFAULT_EXTENSIONS, DEFAULT_WORKERS
from .errors import InvalidBufferError

SUPPORTED_CHANNELS = (1, 3, 4)


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    A decoded image: row-major samples plus their dimensions.

    ``data`` may be shaped (height, width), (height, width, channels) or be
    a flat run of width * height * channels samples. Use ``from_array`` to
    wrap an array whose shape already carries the dimensions.
    """

    width: int
    height: int
    channels: int
    data: np.ndarray
    source: Optional[str] = None

    @classmethod
    def from_array(cls, array: np.ndarray, source: str = None) -> "PixelBuffer":
        if array is None or array.ndim not in (2, 3):
            shape = None if array is None else array.shape
            raise InvalidBufferError(f"Cannot infer image dimensions from array shape {shape}")
        height, width = array.shape[:2]
        channels = 1 if array.ndim == 2 else array.shape[2]
        return cls(width=width, height=height, channels=channels, data=array, source=source)

    def validate(self) -> None:
        """Raise InvalidBufferError unless every dimensional invariant holds."""
        label = f" ({self.source})" if self.source else ""
        if not isinstance(self.width, (int, np.integer)) or self.width <= 0:
            raise InvalidBufferError(f"Width should be a positive integer instead of {self.width}{label}")
        if not isinstance(self.height, (int, np.integer)) or self.height <= 0:
            raise InvalidBufferError(f"Height should be a positive integer instead of {self.height}{label}")
        if self.channels not in SUPPORTED_CHANNELS:
            raise InvalidBufferError(f"Image with {self.channels} channels is not supported yet{label}")
        if not isinstance(self.data, np.ndarray):
            raise InvalidBufferError(f"Pixel data should be a numpy array, got {type(self.data).__name__}{label}")
        if self.data.dtype.kind not in "uif" and self.data.dtype != np.bool_:
            raise InvalidBufferError(f"Unsupported sample type {self.data.dtype}{label}")
        expected = self.width * self.height * self.channels
        if self.data.size != expected:
            raise InvalidBufferError(
                f"Buffer holds {self.data.size} samples, expected "
                f"{self.width}x{self.height}x{self.channels}={expected}{label}"
            )

    def as_image(self) -> np.ndarray:
        """Return the samples shaped (height, width, channels)."""
        self.validate()
        return self.data.reshape(self.height, self.width, self.channels)


@dataclass(frozen=True, eq=False)
class ImageDescriptor:
    """
    Comparable summary of one image.

    Attributes:
        config: Configuration the descriptor was built with.
        phash: Boolean DCT hash, config.hash_bits long.
        flat: True when the image has no low-frequency structure at all
            (a single uniform colour); its hash is then all zeros.
        histogram: Joint RGB histogram (bins ** 3 colour bins) normalized
            by pixel count so it sums to 1.
    """

    config: DescriptorConfig
    phash: np.ndarray
    flat: bool
    histogram: np.ndarray

    def identical(self, other: "ImageDescriptor") -> bool:
        return (
            self.config == other.config
            and self.flat == other.flat
            and np.array_equal(self.phash, other.phash)
            and np.array_equal(self.histogram, other.histogram)
        )


@dataclass(frozen=True)
class SimilarityScore:
    """A score in [0, 1] and the two images it was computed for."""

    score: float
    source_a: str
    source_b: str

    @property
    def rank_key(self) -> Tuple[float, str, str]:
        return (-self.score, self.source_a, self.source_b)


@dataclass(frozen=True)
class SkippedEntry:
    """An image left out of a batch run and why."""

    source: str
    reason: str


@dataclass
class RankedReport:
    """
    Outcome of a batch run.

    ``entries`` are sorted by descending score with ties broken by the
    pair's paths; ``skipped`` is sorted by path. ``interrupted`` is set
    when the run was cancelled before every candidate was described.
    """

    entries: List[SimilarityScore] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)
    interrupted: bool = False
    candidates: int = 0


@dataclass(frozen=True)
class ComparisonRequest:
    """Everything one CLI invocation asked for. Read-only once built."""

    mode: str
    image_a: Optional[str] = None
    image_b: Optional[str] = None
    target: Optional[str] = None
    directory: Optional[str] = None
    extensions: frozenset = DEFAULT_EXTENSIONS
    config: DescriptorConfig = field(default_factory=DescriptorConfig)
    workers: int = DEFAULT_WORKERS
    recursive: bool = True
