"""
hashing/decoder.py

Turns arbitrary uploaded image bytes into the normalized luminance grid
consumed by the perceptual hasher.

The grid size and resampling filter below are part of the hash format:
every fingerprint this service has ever returned was computed from a
64x64 Lanczos-resampled grayscale grid. Changing either one changes
every hash, so they are constants, not parameters.
"""

import io
import logging

import numpy as np
from PIL import Image

from hashing.errors import DecodeError

logger = logging.getLogger("picture_compare.decoder")

# 16 retained DCT coefficients per axis × 4 = 64 (same ratio imagehash uses)
GRID_SIZE = 64
RESAMPLE_FILTER = Image.Resampling.LANCZOS

# Pillow format names, not MIME types
SUPPORTED_FORMATS = {"JPEG", "PNG", "WEBP", "BMP", "GIF", "TIFF"}


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


def load_image(data: bytes) -> Image.Image:
    """
    Open and structurally verify an image container.

    Pillow's verify() leaves the image unusable, so the bytes are opened
    twice: once to verify, once to actually decode.
    """
    if not data:
        raise DecodeError("Empty image data")

    try:
        probe = _open(data)
        fmt = probe.format
        probe.verify()
    except Exception as e:
        raise DecodeError(f"Could not decode image: {e}") from e

    if fmt not in SUPPORTED_FORMATS:
        raise DecodeError(
            f"Unsupported image format: {fmt}. Supported: {', '.join(sorted(SUPPORTED_FORMATS))}"
        )

    try:
        image = _open(data)
        image.load()
    except Exception as e:
        raise DecodeError(f"Could not decode image: {e}") from e

    return image


def normalize(image: Image.Image) -> np.ndarray:
    """Grayscale first, then resize to the fixed grid. Returns float64 luminance 0–255."""
    gray = image.convert("L").resize((GRID_SIZE, GRID_SIZE), RESAMPLE_FILTER)
    return np.asarray(gray, dtype=np.float64)


def decode(data: bytes) -> np.ndarray:
    """
    Decode image bytes into a GRID_SIZE × GRID_SIZE luminance grid.

    Raises DecodeError for empty, corrupt, truncated or unsupported input
    (including Pillow's decompression-bomb guard).
    """
    image = load_image(data)
    try:
        grid = normalize(image)
    except Exception as e:
        raise DecodeError(f"Could not decode image: {e}") from e
    finally:
        image.close()

    logger.debug(f"Decoded {image.format} {image.size[0]}x{image.size[1]} → {GRID_SIZE}x{GRID_SIZE} grid")
    return grid
