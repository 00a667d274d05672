"""
hashing/errors.py

Error taxonomy for the hashing core.

  DecodeError     → bytes could not be turned into a pixel grid.
                    Recovered per item; never fatal to a batch.
  ValidationError → malformed input (bad hash string, bad threshold, ...).
                    Rejected before any hashing/comparison runs.
  LengthMismatch  → two fingerprints of different bit-length were compared.
                    Treated as a validation failure at the comparison boundary.
"""


class HashingError(Exception):
    """Base class for every error raised by the hashing core."""


class DecodeError(HashingError):
    UNSUPPORTED_OR_CORRUPT = "unsupported_or_corrupt"

    def __init__(self, message: str, reason: str = UNSUPPORTED_OR_CORRUPT):
        super().__init__(message)
        self.reason = reason


class ValidationError(HashingError):
    pass


class LengthMismatch(ValidationError):
    def __init__(self, len_a: int, len_b: int):
        super().__init__(f"Hashes must have the same length (got {len_a} and {len_b})")
        self.len_a = len_a
        self.len_b = len_b
