import time

import pytest

import app.hash_service as hash_service_module
from app.config import Settings
from app.hash_service import HashService
from app.schemas import CompareBatchRequest, CompareRequest, ErrorKind
from hashing.fingerprint import hash_image_bytes

from conftest import encode, make_test_image

ZERO = "0" * 64
ONES = "f" * 64


@pytest.fixture
def service(settings):
    return HashService(settings)


# ── compute_hash ──────────────────────────────────────────────────────────────

def test_compute_hash_success(service, png_bytes):
    result = service.compute_hash(png_bytes)
    assert result.success
    assert result.hash == hash_image_bytes(png_bytes)
    assert result.error is None


def test_compute_hash_decode_failure_is_a_result(service):
    result = service.compute_hash(b"\x00\x01garbage")
    assert result.success is False
    assert result.hash is None
    assert result.error
    assert result.error_kind == ErrorKind.decode


def test_compute_hash_unexpected_error_is_internal(service, png_bytes, monkeypatch):
    def boom(data):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(hash_service_module, "hash_image_bytes", boom)
    result = service.compute_hash(png_bytes)
    assert result.success is False
    assert result.error == "Internal error"
    assert result.error_kind == ErrorKind.internal


# ── compute_batch_hash ────────────────────────────────────────────────────────

def test_batch_with_corrupt_middle_item(service, png_bytes, other_png_bytes):
    items = [("a.png", png_bytes), ("broken.jpg", b"not an image at all"), ("c.png", other_png_bytes)]
    result = service.compute_batch_hash(items)

    assert result.success
    assert (result.total_files, result.successful_files, result.failed_files) == (3, 2, 1)
    assert [r.filename for r in result.results] == ["a.png", "broken.jpg", "c.png"]

    first, broken, third = result.results
    assert first.success and first.hash == hash_image_bytes(png_bytes)
    assert broken.success is False and broken.error and broken.hash is None
    assert third.success and third.hash == hash_image_bytes(other_png_bytes)


def test_batch_order_follows_input_not_completion(settings, monkeypatch):
    # later items finish first; output must still be in input order
    def slow_hash(data):
        time.sleep(0.05 * (5 - int(data)))
        return data.decode() * 64

    monkeypatch.setattr(hash_service_module, "hash_image_bytes", slow_hash)
    service = HashService(settings)
    items = [(f"{i}.png", str(i).encode()) for i in range(5)]
    result = service.compute_batch_hash(items)
    assert [r.filename for r in result.results] == [f"{i}.png" for i in range(5)]
    assert [r.hash for r in result.results] == [str(i) * 64 for i in range(5)]


def test_batch_single_worker(png_bytes):
    service = HashService(Settings(batch_workers=1))
    result = service.compute_batch_hash([("a.png", png_bytes), ("b.png", png_bytes)])
    assert result.successful_files == 2
    assert result.results[0].hash == result.results[1].hash


def test_batch_empty_rejected(service):
    result = service.compute_batch_hash([])
    assert result.success is False
    assert result.error_kind == ErrorKind.validation


def test_batch_oversized_rejected(service, png_bytes):
    result = service.compute_batch_hash([(f"{i}.png", png_bytes) for i in range(6)])
    assert result.success is False
    assert result.error_kind == ErrorKind.validation
    assert "5" in result.error


# ── compare ───────────────────────────────────────────────────────────────────

def test_compare_uses_configured_default_threshold():
    near = "0" * 63 + "f"   # 4 bits apart
    strict = HashService(Settings(default_threshold=3))
    loose = HashService(Settings(default_threshold=4))
    assert strict.compare(CompareRequest(hash1=ZERO, hash2=near)).is_similar is False
    assert loose.compare(CompareRequest(hash1=ZERO, hash2=near)).is_similar is True


def test_compare_explicit_threshold(service):
    result = service.compare(CompareRequest(hash1=ZERO, hash2="3" + "0" * 63, threshold=10))
    assert result.success
    assert result.distance == 2
    assert result.is_similar is True
    assert result.similarity == 0.9921875


def test_compare_invalid_format_is_validation_failure(service):
    result = service.compare(CompareRequest(hash1="not-a-hash", hash2=ZERO))
    assert result.success is False
    assert result.error_kind == ErrorKind.validation
    assert "64-character hex" in result.error


# ── compare_batch ─────────────────────────────────────────────────────────────

def test_compare_batch_counts(service):
    request = CompareBatchRequest(target_hash=ONES, candidate_hashes=[ZERO, "not-a-hash"], threshold=50)
    result = service.compare_batch(request)
    assert result.success
    assert result.total_candidates == 2
    assert result.valid_candidates == 1
    assert len(result.results) == 1
    assert result.results[0].hash == ZERO
    assert result.results[0].distance == 256


def test_compare_batch_invalid_target_reports_zero_valid(service):
    request = CompareBatchRequest(target_hash="nope", candidate_hashes=[ZERO, ONES])
    result = service.compare_batch(request)
    assert result.success
    assert result.results == []
    assert result.total_candidates == 2
    assert result.valid_candidates == 0


def test_compare_batch_too_many_candidates(service):
    request = CompareBatchRequest(target_hash=ZERO, candidate_hashes=[ZERO] * 11)
    result = service.compare_batch(request)
    assert result.success is False
    assert result.error_kind == ErrorKind.validation


def test_compare_batch_end_to_end_with_real_images(service):
    a = make_test_image(seed=5)
    target = hash_image_bytes(encode(a))
    near = hash_image_bytes(encode(a, "JPEG", quality=90))
    far = hash_image_bytes(encode(make_test_image(seed=6)))

    result = service.compare_batch(CompareBatchRequest(target_hash=target, candidate_hashes=[far, near]))
    assert [r.hash for r in result.results] == [far, near]
    assert result.results[1].distance < result.results[0].distance
