"""
File system adapters: image decoding and candidate discovery.

These are the only functions in the package that touch the disk. Both
translate low-level failures into the package's error taxonomy so callers
never see a bare ``None`` from OpenCV or an OSError from a directory scan.
"""

import os
import logging
from typing import Iterable, List

import cv2

from .config import DEFAULT_EXTENSIONS
from .errors import DecodeError, DirectoryError
from .models import PixelBuffer

logger = logging.getLogger(__name__)


def decode_image(path: str) -> PixelBuffer:
    """
    Decode an image file into an immutable PixelBuffer.

    Channel order is converted from OpenCV's BGR(A) to RGB(A). Bit depth is
    preserved (8-bit or 16-bit); the descriptor builder normalizes it.

    Raises:
        DecodeError: If the path doesn't exist or isn't a readable image.
    """
    if not os.path.isfile(path):
        raise DecodeError(path, "Image file does not exist")

    try:
        image = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise DecodeError(path, f"OpenCV error: {e}") from e

    if image is None or image.size == 0:
        raise DecodeError(path, "Not a valid image file")

    if image.ndim == 3 and image.shape[2] == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    elif image.ndim == 3 and image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)

    image.setflags(write=False)
    return PixelBuffer.from_array(image, source=path)


def has_allowed_extension(path: str, extensions: Iterable[str]) -> bool:
    """
    Case-insensitive check of a path's suffix against an allow-list.

    The suffix is whatever follows the last dot of the file name, so a
    dot-file such as ``.png`` counts as a png.
    """
    name = os.path.basename(path)
    if "." not in name:
        return False
    return name.rsplit(".", 1)[1].lower() in extensions


def list_candidates(directory: str,
                    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
                    recursive: bool = True) -> List[str]:
    """
    List image files under a directory whose suffix is in the allow-list.

    Args:
        directory: Root directory to scan.
        extensions: Allowed suffixes, lower case, without the dot.
        recursive: Descend into subdirectories.

    Returns:
        Paths (joined onto ``directory``) in lexicographic order.

    Raises:
        DirectoryError: If the directory is missing, not a directory or
            cannot be listed.
    """
    if not os.path.exists(directory):
        raise DirectoryError(directory, "Directory does not exist")
    if not os.path.isdir(directory):
        raise DirectoryError(directory, "Not a directory")
    try:
        os.listdir(directory)
    except OSError as e:
        raise DirectoryError(directory, f"Cannot read directory ({e.strerror})") from e

    extensions = frozenset(ext.lower() for ext in extensions)

    def _on_error(error: OSError):
        logger.warning(f"Skipping unreadable directory {error.filename}: {error.strerror}")

    candidates = []
    for root, dirnames, filenames in os.walk(directory, onerror=_on_error):
        dirnames.sort()
        for filename in filenames:
            path = os.path.join(root, filename)
            if has_allowed_extension(filename, extensions) and os.path.isfile(path):
                candidates.append(path)
        if not recursive:
            break

    candidates.sort()
    logger.info(f"Found {len(candidates)} candidate images in {directory}")
    return candidates
