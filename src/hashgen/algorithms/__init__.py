"""Pluggable hashing algorithms."""

from __future__ import annotations

from .base import compute_digest, finalize_digest
from .registry import AlgorithmRegistry, builtin_descriptors, default_registry

__all__ = [
    "AlgorithmRegistry",
    "builtin_descriptors",
    "compute_digest",
    "default_registry",
    "finalize_digest",
]
