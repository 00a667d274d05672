"""
app/image_routes.py

Picture Compare API routes, mounted under /api by app/main.py:

  POST /api/hash           → pHash of one uploaded image (field "image")
  POST /api/hash-batch     → pHash of several uploaded images (field "images")
  POST /api/compare        → compare two hashes
  POST /api/compare-batch  → compare one hash against many candidates
"""

import asyncio
from typing import List, Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from app.hash_service import HashService
from app.schemas import (
    BatchHashResult, CompareBatchRequest, CompareBatchResult, CompareRequest,
    CompareResult, ErrorKind, ErrorResponse, HashResult,
)

router = APIRouter()

STATUS_BY_KIND = {
    ErrorKind.validation: 400,
    ErrorKind.decode:     400,
    ErrorKind.internal:   500,
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    413: {"model": ErrorResponse},
}


def _service(request: Request) -> HashService:
    return request.app.state.hash_service


def _raise_failure(result) -> None:
    if not result.success:
        status = STATUS_BY_KIND.get(result.error_kind, 400)
        raise HTTPException(status_code=status, detail=result.error)


async def _read_upload(request: Request, file: UploadFile) -> bytes:
    """Read at most limit+1 bytes so oversized uploads are rejected before decode."""
    settings = request.app.state.settings
    limit = settings.file_size_limit_bytes
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Limit: {settings.file_size_limit_mb}MB",
        )
    return data


@router.post("/hash", response_model=HashResult, response_model_exclude_none=True, responses=ERROR_RESPONSES)
async def hash_image(
    request: Request,
    image: Optional[UploadFile] = File(default=None, description="Image file (JPEG, PNG, WebP, BMP, GIF, TIFF)"),
):
    """
    ## Compute the perceptual hash of one image

    Returns a 64-character hex pHash (256 bits).
    """
    if image is None:
        raise HTTPException(status_code=400, detail="Image not uploaded")

    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Unsupported media type: {content_type or 'unknown'}")

    data = await _read_upload(request, image)
    if not data:
        raise HTTPException(status_code=400, detail="Empty file received.")

    result = await asyncio.to_thread(_service(request).compute_hash, data)
    _raise_failure(result)
    return result


@router.post("/hash-batch", response_model=BatchHashResult, response_model_exclude_none=True, responses=ERROR_RESPONSES)
async def hash_images(
    request: Request,
    images: Optional[List[UploadFile]] = File(default=None, description="One or more image files"),
):
    """
    ## Compute perceptual hashes for several images

    Each file succeeds or fails on its own; a corrupt file is reported in
    its slot and does not abort the rest of the batch.
    """
    if not images:
        raise HTTPException(status_code=400, detail="Images not uploaded")

    settings = request.app.state.settings
    if len(images) > settings.max_batch_files:
        raise HTTPException(status_code=400, detail=f"Too many files. Limit: {settings.max_batch_files}")

    items = []
    for i, f in enumerate(images):
        items.append((f.filename or f"image_{i}", await _read_upload(request, f)))

    result = await asyncio.to_thread(_service(request).compute_batch_hash, items)
    _raise_failure(result)
    return result


@router.post("/compare", response_model=CompareResult, response_model_exclude_none=True, responses=ERROR_RESPONSES)
async def compare_hashes(request: Request, body: CompareRequest):
    """
    ## Compare two hashes

    `distance` is the number of differing bits, `similarity` is
    `1 - distance / 256`, and `isSimilar` is `distance <= threshold`
    (default threshold 10).
    """
    result = _service(request).compare(body)
    _raise_failure(result)
    return result


@router.post("/compare-batch", response_model=CompareBatchResult, response_model_exclude_none=True, responses=ERROR_RESPONSES)
async def compare_hash_batch(request: Request, body: CompareBatchRequest):
    """
    ## Compare one hash against many candidates

    Malformed candidates are skipped (compare `validCandidates` with
    `totalCandidates`). A malformed target returns an empty result list.
    """
    result = _service(request).compare_batch(body)
    _raise_failure(result)
    return result
