"""
Error taxonomy for the similarity engine.

Per-image failures (DecodeError, InvalidBufferError) are recoverable in
batch modes: the orchestrator records them as skipped entries. The
remaining errors abort the comparison that raised them.
"""


class ImageSimilarityError(Exception):
    """Base class for every error raised by image_similarity."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return self.reason


class DecodeError(ImageSimilarityError):
    """The file is missing or cannot be parsed as an image."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{reason}: {path}")
        self.path = path


class InvalidBufferError(ImageSimilarityError):
    """A decoded pixel buffer violates its dimensional invariants."""


class ConfigurationMismatchError(ImageSimilarityError):
    """Descriptors built under different configurations were compared."""


class DirectoryError(ImageSimilarityError):
    """The directory to scan is missing, not a directory, or unreadable."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{reason}: {path}")
        self.path = path


# Failures that only invalidate a single image in a batch run.
RECOVERABLE_ERRORS = (DecodeError, InvalidBufferError)
