"""
hashing/

Perceptual hashing core: decode -> normalize -> DCT -> 256-bit fingerprint,
plus Hamming-distance comparison of fingerprints.
"""

from hashing.errors import HashingError, DecodeError, ValidationError, LengthMismatch
from hashing.decoder import decode
from hashing.fingerprint import compute_hash, hash_image_bytes
from hashing.comparator import (
    ComparisonResult, ComparisonOutcome, CandidateMatch,
    is_valid_hash, distance, compare, compare_batch,
)

__all__ = [
    "HashingError", "DecodeError", "ValidationError", "LengthMismatch",
    "decode", "compute_hash", "hash_image_bytes",
    "ComparisonResult", "ComparisonOutcome", "CandidateMatch",
    "is_valid_hash", "distance", "compare", "compare_batch",
]
