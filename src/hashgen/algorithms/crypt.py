"""Unix crypt(3) formats: ``$1$`` MD5-crypt and the ``$5$``/``$6$`` SHA-crypt pair."""

from __future__ import annotations

from typing import List

from passlib.hash import md5_crypt, sha256_crypt, sha512_crypt  # type: ignore[import]

from ..models import AlgorithmDescriptor, HashOptions
from .base import HASH64_ALPHABET, check_range, check_salt_alphabet, salt_or_random

SHA_CRYPT_DEFAULT_ROUNDS = 5000
SHA_CRYPT_MIN_ROUNDS = 1000
SHA_CRYPT_MAX_ROUNDS = 999_999_999


def md5_crypt_hash(text: str, options: HashOptions) -> str:
    salt = salt_or_random(options, 8)
    return md5_crypt.using(salt=salt).hash(text)


def validate_md5_crypt(options: HashOptions) -> None:
    check_salt_alphabet("md5-crypt", options.salt, HASH64_ALPHABET, 8)


def _sha_crypt(handler, text: str, options: HashOptions) -> str:
    salt = salt_or_random(options, 16)
    rounds = options.iterations or SHA_CRYPT_DEFAULT_ROUNDS
    digest = handler.using(salt=salt, rounds=rounds).hash(text)
    # passlib leaves out rounds=5000; an explicit request always shows it.
    if options.iterations is not None and "$rounds=" not in digest:
        ident = handler.ident
        digest = f"{ident}rounds={rounds}$" + digest[len(ident):]
    return digest


def sha256_crypt_hash(text: str, options: HashOptions) -> str:
    return _sha_crypt(sha256_crypt, text, options)


def sha512_crypt_hash(text: str, options: HashOptions) -> str:
    return _sha_crypt(sha512_crypt, text, options)


def _validate_sha_crypt(algorithm_id: str, options: HashOptions) -> None:
    check_salt_alphabet(algorithm_id, options.salt, HASH64_ALPHABET, 16)
    check_range(algorithm_id, "iterations", options.iterations, SHA_CRYPT_MIN_ROUNDS, SHA_CRYPT_MAX_ROUNDS)


def validate_sha256_crypt(options: HashOptions) -> None:
    _validate_sha_crypt("sha256-crypt", options)


def validate_sha512_crypt(options: HashOptions) -> None:
    _validate_sha_crypt("sha512-crypt", options)


def descriptors() -> List[AlgorithmDescriptor]:
    return [
        AlgorithmDescriptor(
            id="md5-crypt",
            name="MD5 Crypt ($1$)",
            category="password",
            compute=md5_crypt_hash,
            validate=validate_md5_crypt,
            supports_salt=True,
        ),
        AlgorithmDescriptor(
            id="sha256-crypt",
            name="SHA-256 Crypt ($5$)",
            category="password",
            compute=sha256_crypt_hash,
            validate=validate_sha256_crypt,
            supports_salt=True,
            default_iterations=SHA_CRYPT_DEFAULT_ROUNDS,
        ),
        AlgorithmDescriptor(
            id="sha512-crypt",
            name="SHA-512 Crypt ($6$)",
            category="password",
            compute=sha512_crypt_hash,
            validate=validate_sha512_crypt,
            supports_salt=True,
            default_iterations=SHA_CRYPT_DEFAULT_ROUNDS,
        ),
    ]
