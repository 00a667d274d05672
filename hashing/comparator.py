"""
hashing/comparator.py

Bit-level comparison of fingerprints.

  distance  → Hamming distance (number of differing bits)
  similarity → 1 - distance / total_bits   (1.0 = identical, 0.0 = inverted)
  is_similar → distance <= threshold

Fingerprints are validated against the fixed 64-hex-char format before
any comparison. compare() reports bad input in its result instead of
raising; compare_batch() drops bad candidates silently and returns an
empty list for a bad target.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from hashing.errors import LengthMismatch, ValidationError
from hashing.fingerprint import HASH_HEX_LENGTH

HASH_PATTERN = re.compile(r"[0-9a-fA-F]{%d}" % HASH_HEX_LENGTH)
INVALID_HASH_MESSAGE = f"Invalid hash format. Expected {HASH_HEX_LENGTH}-character hex string."
HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


@dataclass(frozen=True)
class ComparisonResult:
    distance: int
    similarity: float
    is_similar: bool


@dataclass(frozen=True)
class ComparisonOutcome:
    """compare() result: either a ComparisonResult or an error message."""

    success: bool
    result: Optional[ComparisonResult] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class CandidateMatch:
    hash: str
    result: ComparisonResult


def is_valid_hash(value) -> bool:
    return isinstance(value, str) and HASH_PATTERN.fullmatch(value) is not None


def distance(hash_a: str, hash_b: str) -> int:
    """
    Hamming distance between two equal-length hex strings of any length.
    Raises LengthMismatch if they differ in length.
    """
    if len(hash_a) != len(hash_b):
        raise LengthMismatch(len(hash_a), len(hash_b))
    for h in (hash_a, hash_b):
        if HEX_DIGITS.fullmatch(h) is None:
            raise ValidationError(f"Not a hex string: {h!r}")
    if not hash_a:
        return 0
    return bin(int(hash_a, 16) ^ int(hash_b, 16)).count("1")


def _result(hash_a: str, hash_b: str, threshold: float) -> ComparisonResult:
    d = distance(hash_a, hash_b)
    total_bits = len(hash_a) * 4
    return ComparisonResult(
        distance=d,
        similarity=1 - d / total_bits,
        is_similar=d <= threshold,
    )


def compare(hash_a: str, hash_b: str, threshold: float = 10) -> ComparisonOutcome:
    if not is_valid_hash(hash_a) or not is_valid_hash(hash_b):
        return ComparisonOutcome(success=False, error=INVALID_HASH_MESSAGE)
    return ComparisonOutcome(success=True, result=_result(hash_a, hash_b, threshold))


def compare_batch(target: str, candidates: Sequence[str], threshold: float = 10) -> List[CandidateMatch]:
    """Compare target against every valid candidate, preserving input order."""
    if not is_valid_hash(target):
        return []

    return [
        CandidateMatch(hash=c, result=_result(target, c, threshold))
        for c in candidates
        if is_valid_hash(c)
    ]
