"""Key derivation functions: PBKDF2, bcrypt, Argon2id, scrypt and yescrypt."""

from __future__ import annotations

import hashlib
from typing import List

import bcrypt  # type: ignore[import]
from argon2.low_level import Type, hash_secret  # type: ignore[import]

from ..errors import InvalidOptions
from ..logger import configure_logging
from ..models import AlgorithmDescriptor, HashOptions
from .base import HASH64_ALPHABET, b64, check_range, salt_or_random

_LOG = configure_logging()

PBKDF2_DEFAULT_ITERATIONS = 10_000
PBKDF2_KEY_BYTES = 32

BCRYPT_DEFAULT_COST = 10
BCRYPT_SALT_LENGTH = 22
# The last salt character only carries two bits.
BCRYPT_SALT_TAIL = ".Oeu"
BCRYPT_MAX_SECRET_BYTES = 72

ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536
ARGON2_PARALLELISM = 4
ARGON2_HASH_LEN = 32
ARGON2_MIN_SALT_BYTES = 8

SCRYPT_DEFAULT_LN = 16
SCRYPT_MAX_LN = 20
SCRYPT_BLOCK_SIZE = 8
SCRYPT_PARALLELISM = 1
SCRYPT_KEY_BYTES = 32

YESCRYPT_ITERATION_FACTOR = 4

_approximation_logged = False


# ----------------------------------------------------------------------
# PBKDF2
# ----------------------------------------------------------------------
def pbkdf2_hash(text: str, options: HashOptions) -> str:
    iterations = options.iterations or PBKDF2_DEFAULT_ITERATIONS
    salt = (options.salt or "").encode("utf-8")
    key = hashlib.pbkdf2_hmac("sha512", text.encode("utf-8"), salt, iterations, dklen=PBKDF2_KEY_BYTES)
    if options.output_format == "standard":
        return f"$pbkdf2${iterations}${b64(salt)}${b64(key)}"
    return key.hex()


# ----------------------------------------------------------------------
# bcrypt
# ----------------------------------------------------------------------
def bcrypt_hash(text: str, options: HashOptions) -> str:
    cost = options.cost_factor or BCRYPT_DEFAULT_COST
    if options.salt is None:
        setting = bcrypt.gensalt(rounds=cost, prefix=b"2b")
    else:
        setting = f"$2b${cost:02d}${options.salt}".encode("ascii")
    secret = text.encode("utf-8")[:BCRYPT_MAX_SECRET_BYTES]
    return bcrypt.hashpw(secret, setting).decode("ascii")


def validate_bcrypt(options: HashOptions) -> None:
    check_range("bcrypt", "cost_factor", options.cost_factor, 4, 31)
    salt = options.salt
    if salt is None:
        return
    if len(salt) != BCRYPT_SALT_LENGTH or any(char not in HASH64_ALPHABET for char in salt):
        raise InvalidOptions(
            "bcrypt",
            "salt",
            f"must be exactly {BCRYPT_SALT_LENGTH} characters from [./A-Za-z0-9]",
        )
    if salt[-1] not in BCRYPT_SALT_TAIL:
        raise InvalidOptions("bcrypt", "salt", f"must end with one of '{BCRYPT_SALT_TAIL}'")


# ----------------------------------------------------------------------
# Argon2id
# ----------------------------------------------------------------------
def argon2_hash(text: str, options: HashOptions) -> str:
    salt = salt_or_random(options, 16).encode("utf-8")
    encoded = hash_secret(
        text.encode("utf-8"),
        salt,
        time_cost=options.iterations or ARGON2_TIME_COST,
        memory_cost=ARGON2_MEMORY_COST,
        parallelism=ARGON2_PARALLELISM,
        hash_len=ARGON2_HASH_LEN,
        type=Type.ID,
    )
    return encoded.decode("ascii")


def validate_argon2(options: HashOptions) -> None:
    if options.salt is not None and len(options.salt.encode("utf-8")) < ARGON2_MIN_SALT_BYTES:
        raise InvalidOptions("argon2", "salt", f"must be at least {ARGON2_MIN_SALT_BYTES} bytes")


# ----------------------------------------------------------------------
# scrypt
# ----------------------------------------------------------------------
def scrypt_hash(text: str, options: HashOptions) -> str:
    ln = options.cost_factor or SCRYPT_DEFAULT_LN
    salt = salt_or_random(options, 16).encode("utf-8")
    n = 1 << ln
    maxmem = 128 * SCRYPT_BLOCK_SIZE * (n + SCRYPT_PARALLELISM + 2) + (1 << 20)
    key = hashlib.scrypt(
        text.encode("utf-8"),
        salt=salt,
        n=n,
        r=SCRYPT_BLOCK_SIZE,
        p=SCRYPT_PARALLELISM,
        maxmem=maxmem,
        dklen=SCRYPT_KEY_BYTES,
    )
    params = f"ln={ln},r={SCRYPT_BLOCK_SIZE},p={SCRYPT_PARALLELISM}"
    return f"$scrypt${params}${b64(salt, padded=False)}${b64(key, padded=False)}"


def validate_scrypt(options: HashOptions) -> None:
    check_range("scrypt", "cost_factor", options.cost_factor, 1, SCRYPT_MAX_LN)
    if options.salt == "":
        raise InvalidOptions("scrypt", "salt", "must not be empty")


# ----------------------------------------------------------------------
# yescrypt (approximation)
# ----------------------------------------------------------------------
def yescrypt_hash(text: str, options: HashOptions) -> str:
    """Stretched PBKDF2-SHA512 rendered in yescrypt's ``$y$`` layout.

    Not the memory-hard yescrypt construction; output does not verify
    against libxcrypt.
    """
    global _approximation_logged
    if not _approximation_logged:
        _LOG.warning("yescrypt is approximated with PBKDF2-HMAC-SHA512; output is not libxcrypt compatible")
        _approximation_logged = True
    salt = salt_or_random(options, 16).encode("utf-8")
    iterations = (options.iterations or PBKDF2_DEFAULT_ITERATIONS) * YESCRYPT_ITERATION_FACTOR
    key = hashlib.pbkdf2_hmac("sha512", text.encode("utf-8"), salt, iterations, dklen=PBKDF2_KEY_BYTES)
    return f"$y$j9T${b64(salt, padded=False)}${b64(key, padded=False)}"


def validate_yescrypt(options: HashOptions) -> None:
    if options.salt == "":
        raise InvalidOptions("yescrypt", "salt", "must not be empty")


def descriptors() -> List[AlgorithmDescriptor]:
    return [
        AlgorithmDescriptor(
            id="pbkdf2",
            name="PBKDF2",
            category="modern",
            compute=pbkdf2_hash,
            supports_salt=True,
            default_iterations=PBKDF2_DEFAULT_ITERATIONS,
        ),
        AlgorithmDescriptor(
            id="bcrypt",
            name="bcrypt ($2b$)",
            category="password",
            compute=bcrypt_hash,
            validate=validate_bcrypt,
            supports_salt=True,
            default_cost_factor=BCRYPT_DEFAULT_COST,
        ),
        AlgorithmDescriptor(
            id="argon2",
            name="Argon2id",
            category="modern",
            compute=argon2_hash,
            validate=validate_argon2,
            supports_salt=True,
            default_iterations=ARGON2_TIME_COST,
        ),
        AlgorithmDescriptor(
            id="scrypt",
            name="scrypt",
            category="modern",
            compute=scrypt_hash,
            validate=validate_scrypt,
            supports_salt=True,
            default_cost_factor=SCRYPT_DEFAULT_LN,
        ),
        AlgorithmDescriptor(
            id="yescrypt",
            name="yescrypt (approximation)",
            category="modern",
            compute=yescrypt_hash,
            validate=validate_yescrypt,
            supports_salt=True,
            default_iterations=PBKDF2_DEFAULT_ITERATIONS,
            approximation=True,
        ),
    ]
