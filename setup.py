#!/usr/bin/env python3
"""
setup.py

Picture Compare: perceptual image hashing (pHash) + hash comparison HTTP API.

Usage:
    pip install -e .            # service
    pip install -e ".[test]"    # service + test tooling

Then:
    uvicorn app.main:app --port 3000      (or: picture-compare)
    python -m pytest
"""

from setuptools import find_packages, setup

# ── Core packages ─────────────────────────────────────────────────────────────
core = [
    "fastapi>=0.111.0",
    "uvicorn[standard]>=0.29.0",
    "python-multipart>=0.0.9",
    "Pillow>=10.3.0",
    "imagehash>=4.3.1",
    "numpy>=1.26.4",
    "scipy>=1.11",
    "pydantic>=2.7.1",
    "python-dotenv>=1.0.1",
    "rich>=13.7.1",
]

# ── Test tooling ──────────────────────────────────────────────────────────────
test = [
    "pytest>=8.0",
    "httpx>=0.27",
]

setup(
    name="picture-compare",
    version="1.0.0",
    description="Perceptual image hashing and hash comparison API",
    python_requires=">=3.9",
    packages=find_packages(include=["app", "app.*", "hashing", "hashing.*"]),
    install_requires=core,
    extras_require={"test": test},
    entry_points={"console_scripts": ["picture-compare=app.main:main"]},
)
