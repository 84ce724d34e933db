"""Shared test fixtures for image similarity tests."""

import os

import numpy as np
import cv2
import pytest

from image_similarity.config import DescriptorConfig


@pytest.fixture
def config():
    """Canonical descriptor configuration, independent of the environment."""
    return DescriptorConfig(hash_size=64, dct_size=16, bins=8, hash_weight=0.5)


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [200, 30, 30]  # Red square
    return img


@pytest.fixture
def blue_circle_image():
    """Generate a 200x200 blue circle on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    cv2.circle(img, (100, 100), 60, (30, 30, 200), -1)
    return img


@pytest.fixture
def green_rectangle_image():
    """Generate a 200x200 green rectangle on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[30:170, 60:140] = [30, 180, 30]  # Tall green rectangle
    return img


@pytest.fixture
def textured_image():
    """Generate a 200x200 checkerboard, unrelated to the other fixtures."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 200
    for y in range(0, 200, 20):
        for x in range(0, 200, 20):
            if (x // 20 + y // 20) % 2 == 0:
                img[y:y+20, x:x+20] = [50, 50, 50]
    return img


@pytest.fixture
def noise_image():
    """Generate a 200x200 random noise image."""
    rng = np.random.RandomState(42)
    return rng.randint(0, 255, (200, 200, 3), dtype=np.uint8)


@pytest.fixture
def reference_image():
    """
    Generate a smooth 200x200 scene: colour gradients with a dark disc.

    Smooth content keeps both the histogram and the hash stable under
    rescaling, which the resolution and noise tests rely on.
    """
    ys, xs = np.mgrid[0:200, 0:200].astype(np.float64)
    img = np.zeros((200, 200, 3), dtype=np.float64)
    img[:, :, 0] = xs * 255 / 199
    img[:, :, 1] = ys * 255 / 199
    img[:, :, 2] = (xs + ys) * 255 / 398
    img = img.astype(np.uint8)
    cv2.circle(img, (120, 80), 45, (40, 40, 40), -1)
    return cv2.GaussianBlur(img, (7, 7), 0)


@pytest.fixture
def scene_image():
    """
    Generate a 200x200 scene of four coloured quadrants and a disc.

    Every sample sits in the middle of a colour bin (8 bins per axis) and
    edges are lightly blurred, so downscaling moves very little histogram mass.
    """
    img = np.zeros((200, 200, 3), dtype=np.uint8)
    img[:100, :100] = [48, 112, 176]
    img[:100, 100:] = [208, 80, 16]
    img[100:, :100] = [144, 16, 112]
    img[100:, 100:] = [16, 176, 240]
    cv2.circle(img, (100, 100), 40, (176, 208, 80), -1)
    return cv2.GaussianBlur(img, (5, 5), 0)


@pytest.fixture
def add_noise():
    """Return a helper adding seeded Gaussian noise of a given sigma to an image."""
    def _add_noise(image: np.ndarray, sigma: float, seed: int = 0) -> np.ndarray:
        rng = np.random.RandomState(seed)
        noisy = image.astype(np.float64) + rng.normal(0.0, sigma, image.shape)
        return np.clip(noisy, 0, 255).astype(np.uint8)
    return _add_noise


@pytest.fixture
def write_image(tmp_path):
    """Return a helper that writes an RGB array as an image file under tmp_path."""
    def _write(name: str, rgb: np.ndarray, directory=None) -> str:
        folder = directory or tmp_path
        os.makedirs(folder, exist_ok=True)
        path = os.path.join(str(folder), name)
        if rgb.ndim == 3:
            rgb = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
        assert cv2.imwrite(path, rgb)
        return path
    return _write


@pytest.fixture
def image_dir(tmp_path, write_image, red_square_image, blue_circle_image,
              green_rectangle_image, textured_image, reference_image):
    """A directory with five distinct valid PNG images."""
    folder = tmp_path / "images"
    write_image("a_red.png", red_square_image, folder)
    write_image("b_blue.png", blue_circle_image, folder)
    write_image("c_green.png", green_rectangle_image, folder)
    write_image("d_checker.png", textured_image, folder)
    write_image("e_reference.png", reference_image, folder)
    return folder
