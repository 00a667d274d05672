"""
hashing/fingerprint.py

Perceptual hash (pHash) of a normalized luminance grid.

Fixed parameters (changing any of them changes the hash format):

  grid            64 x 64 luminance (see hashing/decoder.py)
  transform       2-D DCT-II, rows then columns
  retained block  top-left 16 x 16 coefficients, DC term included
  threshold       median of the 256 retained coefficients
  bit rule        1 if coefficient > median, else 0 (ties → 0)
  bit order       row-major raster scan, packed MSB-first
  rendering       64 lowercase hex characters (256 bits)

This is the same transform imagehash.phash(image, hash_size=16) applies,
so fingerprints are interchangeable with that library's output.

Two images with Hamming distance <= 10 are typically the same picture
after re-encoding or resizing.
"""

import numpy as np
import imagehash
import scipy.fftpack

from hashing.decoder import GRID_SIZE, decode

HASH_SIZE = 16
HASH_BITS = HASH_SIZE * HASH_SIZE
HASH_HEX_LENGTH = HASH_BITS // 4


def _dct2(grid: np.ndarray) -> np.ndarray:
    return scipy.fftpack.dct(scipy.fftpack.dct(grid, axis=0), axis=1)


def hash_bits(grid: np.ndarray) -> np.ndarray:
    """Boolean HASH_SIZE x HASH_SIZE matrix of hash bits for a luminance grid."""
    if grid.shape != (GRID_SIZE, GRID_SIZE):
        raise ValueError(f"Expected a {GRID_SIZE}x{GRID_SIZE} grid, got {grid.shape}")

    low = _dct2(np.asarray(grid, dtype=np.float64))[:HASH_SIZE, :HASH_SIZE]
    median = np.median(low)
    return low > median


def compute_hash(grid: np.ndarray) -> str:
    """Fingerprint of a normalized grid as a 64-char lowercase hex string."""
    return str(imagehash.ImageHash(hash_bits(grid)))


def hash_image_bytes(data: bytes) -> str:
    """Decode + hash in one step. Propagates DecodeError."""
    return compute_hash(decode(data))
