"""
app/hash_service.py

Request orchestration between the HTTP layer and the hashing core.

  compute_hash        → decode + pHash one image
  compute_batch_hash  → same, per uploaded file, in a thread pool
  compare             → Hamming comparison of two fingerprints
  compare_batch       → one target vs. many candidates

Every operation returns a result model (app/schemas.py) instead of raising:
validation problems, decode failures and unexpected errors all come back
as success=False with an ErrorKind the HTTP layer maps to a status code.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple

from app.config import Settings
from app.schemas import (
    BatchHashItem, BatchHashResult, CandidateResult, CompareBatchRequest,
    CompareBatchResult, CompareRequest, CompareResult, ErrorKind, HashResult,
)
from hashing import comparator
from hashing.errors import DecodeError, ValidationError
from hashing.fingerprint import hash_image_bytes

logger = logging.getLogger("picture_compare.service")

INTERNAL_ERROR = "Internal error"


class HashService:
    """Stateless apart from the immutable Settings it was built with."""

    def __init__(self, settings: Settings):
        self.settings = settings

    # ── Hashing ───────────────────────────────────────────────────────────────

    def compute_hash(self, data: bytes) -> HashResult:
        try:
            return HashResult(success=True, hash=hash_image_bytes(data))
        except DecodeError as e:
            logger.warning(f"Decode failed ({e.reason}): {e}")
            return HashResult(success=False, error=str(e), error_kind=ErrorKind.decode)
        except Exception:
            logger.exception("Unexpected error while hashing image")
            return HashResult(success=False, error=INTERNAL_ERROR, error_kind=ErrorKind.internal)

    def _hash_item(self, item: Tuple[str, bytes]) -> BatchHashItem:
        filename, data = item
        result = self.compute_hash(data)
        return BatchHashItem(filename=filename, success=result.success, hash=result.hash, error=result.error)

    def compute_batch_hash(self, items: Sequence[Tuple[str, bytes]]) -> BatchHashResult:
        """
        Hash each (filename, bytes) item independently.

        A failing item is reported in place and never aborts the batch.
        Executor.map yields in submission order, so results line up with
        the input no matter which worker finishes first.
        """
        if not items:
            return BatchHashResult(success=False, error="No images uploaded", error_kind=ErrorKind.validation)
        if len(items) > self.settings.max_batch_files:
            return BatchHashResult(
                success=False,
                error=f"Too many files. Limit: {self.settings.max_batch_files}",
                error_kind=ErrorKind.validation,
            )

        workers = max(1, min(self.settings.batch_workers, len(items)))
        if workers == 1:
            results = [self._hash_item(it) for it in items]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="phash") as ex:
                results = list(ex.map(self._hash_item, items))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Batch hash: {succeeded}/{len(results)} succeeded")

        return BatchHashResult(
            success=True,
            results=results,
            total_files=len(results),
            successful_files=succeeded,
            failed_files=len(results) - succeeded,
        )

    # ── Comparison ────────────────────────────────────────────────────────────

    def _threshold(self, requested) -> float:
        return self.settings.default_threshold if requested is None else requested

    def compare(self, request: CompareRequest) -> CompareResult:
        try:
            outcome = comparator.compare(request.hash1, request.hash2, self._threshold(request.threshold))
        except ValidationError as e:
            return CompareResult(success=False, error=str(e), error_kind=ErrorKind.validation)
        except Exception:
            logger.exception("Unexpected error while comparing hashes")
            return CompareResult(success=False, error=INTERNAL_ERROR, error_kind=ErrorKind.internal)

        if not outcome.success:
            return CompareResult(success=False, error=outcome.error, error_kind=ErrorKind.validation)

        r = outcome.result
        return CompareResult(success=True, distance=r.distance, is_similar=r.is_similar, similarity=r.similarity)

    def compare_batch(self, request: CompareBatchRequest) -> CompareBatchResult:
        """
        Invalid candidates are dropped without a per-candidate error, and an
        invalid target yields an empty result list. The counts let callers
        notice either case.
        """
        candidates = request.candidate_hashes
        if len(candidates) > self.settings.max_batch_candidates:
            return CompareBatchResult(
                success=False,
                error=f"Too many candidate hashes. Limit: {self.settings.max_batch_candidates}",
                error_kind=ErrorKind.validation,
            )

        try:
            matches = comparator.compare_batch(request.target_hash, candidates, self._threshold(request.threshold))
        except ValidationError as e:
            return CompareBatchResult(success=False, error=str(e), error_kind=ErrorKind.validation)
        except Exception:
            logger.exception("Unexpected error while comparing candidate hashes")
            return CompareBatchResult(success=False, error=INTERNAL_ERROR, error_kind=ErrorKind.internal)

        results: List[CandidateResult] = [
            CandidateResult(
                hash=m.hash,
                distance=m.result.distance,
                is_similar=m.result.is_similar,
                similarity=m.result.similarity,
            )
            for m in matches
        ]
        return CompareBatchResult(
            success=True,
            results=results,
            total_candidates=len(candidates),
            valid_candidates=len(results),
        )
