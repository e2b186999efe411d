"""Unsalted digests: the SHA-2 family, MD5, MySQL double SHA-1 and NTLM."""

from __future__ import annotations

import hashlib
from functools import partial
from typing import List

from passlib.hash import nthash  # type: ignore[import]

from ..models import AlgorithmDescriptor, HashOptions

PLAIN_DIGESTS = {
    "md5": "MD5",
    "sha1": "SHA1",
    "sha224": "SHA224",
    "sha256": "SHA256",
    "sha384": "SHA384",
    "sha512": "SHA512",
}


def hexdigest(name: str, text: str, options: HashOptions) -> str:
    return hashlib.new(name, text.encode("utf-8")).hexdigest()


def mysql_sha1(text: str, options: HashOptions) -> str:
    inner = hashlib.sha1(text.encode("utf-8")).digest()
    return "*" + hashlib.sha1(inner).hexdigest().upper()


def nt_hash(text: str) -> bytes:
    """MD4 over the UTF-16LE encoding of ``text``."""
    return bytes.fromhex(nthash.hash(text))


def ntlm(text: str, options: HashOptions) -> str:
    return nt_hash(text).hex()


def descriptors() -> List[AlgorithmDescriptor]:
    found = [
        AlgorithmDescriptor(
            id=algorithm_id,
            name=name,
            category="basic",
            compute=partial(hexdigest, algorithm_id),
        )
        for algorithm_id, name in PLAIN_DIGESTS.items()
    ]
    found.append(AlgorithmDescriptor(id="ntlm", name="NTLM", category="special", compute=ntlm))
    found.append(
        AlgorithmDescriptor(id="mysql-sha1", name="MySQL SHA1", category="special", compute=mysql_sha1)
    )
    return found
