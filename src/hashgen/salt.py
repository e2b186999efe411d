"""Salt generation."""

from __future__ import annotations

import random
import secrets

from .logger import configure_logging

_LOG = configure_logging()

SALT_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789./"


def _random_bytes(length: int) -> bytes:
    try:
        return secrets.token_bytes(length)
    except NotImplementedError:
        _LOG.warning(
            "No secure random source available; salt of length %s drawn from "
            "the non-cryptographic random module",
            length,
        )
        return bytes(random.getrandbits(8) for _ in range(length))


def generate_salt(length: int = 16) -> str:
    """Return ``length`` characters drawn uniformly from ``SALT_ALPHABET``."""
    if length < 0:
        raise ValueError("Salt length must not be negative")
    # 256 is a multiple of 64, so the modulo keeps the distribution uniform
    return "".join(SALT_ALPHABET[byte % len(SALT_ALPHABET)] for byte in _random_bytes(length))


def random_hex(nbytes: int) -> str:
    return _random_bytes(nbytes).hex()
