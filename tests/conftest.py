"""
Shared fixtures: synthetic test images and an API client.

Images are generated, not loaded from disk: a smooth gradient background
with a handful of random shapes, which gives the DCT real low-frequency
structure to work with (pure noise would not survive JPEG re-encoding).
"""

import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from app.config import Settings
from app.main import create_app


def make_test_image(seed: int = 0, size: int = 256) -> Image.Image:
    rng = np.random.default_rng(seed)

    x = np.linspace(0, 1, size)
    angle = rng.uniform(0, np.pi)
    grad = np.outer(np.cos(angle) * x, np.ones(size)) + np.outer(np.ones(size), np.sin(angle) * x)
    grad = (grad - grad.min()) / (np.ptp(grad) or 1)
    base = np.stack([grad * 255, (1 - grad) * 200, np.full_like(grad, 90)], axis=-1).astype(np.uint8)

    img = Image.fromarray(base)
    draw = ImageDraw.Draw(img)
    for _ in range(6):
        x0, y0 = rng.integers(0, size * 3 // 4, size=2)
        w, h = rng.integers(size // 8, size // 3, size=2)
        color = tuple(int(c) for c in rng.integers(0, 256, size=3))
        if rng.random() < 0.5:
            draw.rectangle([x0, y0, x0 + w, y0 + h], fill=color)
        else:
            draw.ellipse([x0, y0, x0 + w, y0 + h], fill=color)
    return img


def encode(image: Image.Image, fmt: str = "PNG", **kwargs) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()


@pytest.fixture
def image():
    return make_test_image(seed=1)


@pytest.fixture
def png_bytes(image):
    return encode(image, "PNG")


@pytest.fixture
def other_png_bytes():
    return encode(make_test_image(seed=2), "PNG")


@pytest.fixture
def settings():
    return Settings(batch_workers=4, max_batch_files=5, max_batch_candidates=10)


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))
