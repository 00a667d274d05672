"""
app/schemas.py
Pydantic models for all API request/response contracts.

Request models are the validated form of each operation's input: nothing
reaches the hashing/comparison core until one of these has been built.
JSON field names are camelCase (hash1, targetHash, isSimilar, ...).
"""

import math
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr


class ErrorKind(str, Enum):
    validation = "validation"
    decode     = "decode"
    internal   = "internal"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _check_threshold(value):
    # ints are exact at any size; only floats can be NaN or inf
    if (isinstance(value, float) and not math.isfinite(value)) or value < 0:
        raise ValueError("Threshold must be a non-negative number")
    return value


# bool is rejected by the strict types; NaN and inf by the validator
Threshold = Annotated[Union[StrictInt, StrictFloat], AfterValidator(_check_threshold)]


# ── Requests ──────────────────────────────────────────────────────────────────

class CompareRequest(_CamelModel):
    hash1     : StrictStr
    hash2     : StrictStr
    threshold : Optional[Threshold] = None   # None → configured default


class CompareBatchRequest(_CamelModel):
    target_hash      : StrictStr       = Field(..., alias="targetHash")
    candidate_hashes : List[StrictStr] = Field(..., alias="candidateHashes", min_length=1)
    threshold        : Optional[Threshold] = None


# ── Results (service output, also the HTTP response bodies) ───────────────────

class _Result(_CamelModel):
    success    : bool
    error      : Optional[str] = None
    error_kind : Optional[ErrorKind] = Field(default=None, exclude=True)


class HashResult(_Result):
    hash : Optional[str] = None


class BatchHashItem(_CamelModel):
    filename : str
    success  : bool
    hash     : Optional[str] = None
    error    : Optional[str] = None


class BatchHashResult(_Result):
    results          : List[BatchHashItem] = []
    total_files      : int = Field(0, alias="totalFiles")
    successful_files : int = Field(0, alias="successfulFiles")
    failed_files     : int = Field(0, alias="failedFiles")


class CompareResult(_Result):
    distance   : Optional[int]   = None
    is_similar : Optional[bool]  = Field(None, alias="isSimilar")
    similarity : Optional[float] = None


class CandidateResult(_CamelModel):
    hash       : str
    distance   : int
    is_similar : bool  = Field(..., alias="isSimilar")
    similarity : float


class CompareBatchResult(_Result):
    results          : List[CandidateResult] = []
    total_candidates : int = Field(0, alias="totalCandidates")
    valid_candidates : int = Field(0, alias="validCandidates")


# ── Misc ──────────────────────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    success : bool = False
    error   : str


class HealthResponse(BaseModel):
    status         : str
    version        : str
    timestamp      : str
    uptime         : float
