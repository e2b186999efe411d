"""Shared helpers for algorithm plugins: option checks and output formatting."""

from __future__ import annotations

import base64
import re
from typing import Optional

from ..errors import InvalidOptions
from ..models import OUTPUT_FORMATS, AlgorithmDescriptor, HashOptions
from ..salt import generate_salt

HASH64_ALPHABET = "./0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

_HEX_RE = re.compile(r"^(?:[0-9a-fA-F]{2})+$")


def is_plain_hex(value: str) -> bool:
    return bool(_HEX_RE.match(value))


def b64(data: bytes, *, padded: bool = True) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return encoded if padded else encoded.rstrip("=")


def check_common(algorithm_id: str, options: HashOptions) -> None:
    """Type and range checks that apply to every algorithm."""
    if options.output_format not in OUTPUT_FORMATS:
        raise InvalidOptions(
            algorithm_id,
            "output_format",
            f"expected one of {', '.join(OUTPUT_FORMATS)}, got {options.output_format!r}",
        )
    if options.salt is not None and not isinstance(options.salt, str):
        raise InvalidOptions(algorithm_id, "salt", "must be a string")
    for name in ("iterations", "cost_factor"):
        value = getattr(options, name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidOptions(algorithm_id, name, f"must be an integer, got {value!r}")
        if value < 1:
            raise InvalidOptions(algorithm_id, name, "must be a positive integer")


def check_range(algorithm_id: str, option: str, value: Optional[int], low: int, high: int) -> None:
    if value is not None and not low <= value <= high:
        raise InvalidOptions(algorithm_id, option, f"must be between {low} and {high}")


def check_salt_alphabet(algorithm_id: str, salt: Optional[str], alphabet: str, max_length: int) -> None:
    if salt is None:
        return
    if len(salt) > max_length:
        raise InvalidOptions(algorithm_id, "salt", f"must be at most {max_length} characters")
    invalid = sorted({char for char in salt if char not in alphabet})
    if invalid:
        raise InvalidOptions(algorithm_id, "salt", f"contains unsupported characters {''.join(invalid)!r}")


def salt_or_random(options: HashOptions, length: int) -> str:
    return options.salt if options.salt is not None else generate_salt(length)


def finalize_digest(digest: str, options: HashOptions) -> str:
    """Apply the output encoding and case requested by ``options``.

    Multi-field outputs containing ``$`` are left untouched.
    """
    if "$" in digest:
        return digest
    if options.output_format == "base64" and is_plain_hex(digest):
        digest = b64(bytes.fromhex(digest))
    if options.uppercase and options.output_format == "hex":
        digest = digest.upper()
    return digest


def compute_digest(descriptor: AlgorithmDescriptor, text: str, options: HashOptions) -> str:
    """Run a descriptor's compute function and post-process the result."""
    if not text:
        return ""
    return finalize_digest(descriptor.compute(text, options), options)
