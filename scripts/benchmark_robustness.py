"""
scripts/benchmark_robustness.py

Measures how stable the pHash is under the degradations images pick up
when they are re-shared: JPEG re-compression, downscaling, mild
brightness changes. Each variant is hashed and compared against the
original; anything within the default threshold (10) would be reported
as a near-duplicate by /api/compare.

Usage:
    python scripts/benchmark_robustness.py path/to/image.jpg [threshold]
"""
import io
import sys
import time

from PIL import Image, ImageEnhance
from rich.console import Console
from rich.table import Table

from hashing.comparator import compare
from hashing.fingerprint import hash_image_bytes

console = Console()


def _encode(image: Image.Image, fmt: str = "PNG", **kwargs) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()


def build_variants(base: Image.Image):
    w, h = base.size
    for q in (90, 70, 50, 30, 10):
        yield f"JPEG q={q}", _encode(base, "JPEG", quality=q)
    for scale in (0.75, 0.5, 0.25):
        resized = base.resize((max(1, int(w * scale)), max(1, int(h * scale))), Image.Resampling.BILINEAR)
        yield f"resize x{scale}", _encode(resized)
    for factor in (0.8, 1.2):
        yield f"brightness x{factor}", _encode(ImageEnhance.Brightness(base).enhance(factor))
    yield "WebP q=80", _encode(base, "WEBP", quality=80)


def run_robustness_benchmark(image_path: str, threshold: float = 10):
    console.rule("[bold blue]pHash Robustness Benchmark[/bold blue]")
    console.print(f"Target: {image_path}\n")

    try:
        base = Image.open(image_path).convert("RGB")
    except Exception as e:
        console.print(f"[red]Error loading image: {e}[/red]")
        return 1

    baseline = hash_image_bytes(_encode(base))
    console.print(f"Baseline hash: [green]{baseline}[/green]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Variant", style="cyan", width=20)
    table.add_column("Distance", justify="right")
    table.add_column("Similarity", justify="right")
    table.add_column("Similar?", width=9)
    table.add_column("Latency (ms)", justify="right", style="dim")

    for name, data in build_variants(base):
        t0 = time.time()
        variant_hash = hash_image_bytes(data)
        latency = (time.time() - t0) * 1000

        r = compare(baseline, variant_hash, threshold).result
        verdict = "[green]yes[/green]" if r.is_similar else "[red]no[/red]"
        table.add_row(name, str(r.distance), f"{r.similarity:.4f}", verdict, f"{latency:.2f}")

    console.print(table)
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        console.print("Usage: python scripts/benchmark_robustness.py <image_path> [threshold]")
        sys.exit(1)
    sys.exit(run_robustness_benchmark(sys.argv[1], float(sys.argv[2]) if len(sys.argv) > 2 else 10))
