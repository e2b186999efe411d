from __future__ import annotations

import hashlib
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from hashgen.algorithms import default_registry
from hashgen.detector import UNKNOWN, HashFormatDetector, detect_hash_type
from hashgen.models import HashOptions

REGISTRY = default_registry()


@pytest.mark.parametrize(
    "value, family",
    [
        (hashlib.md5(b"x").hexdigest(), "MD5"),
        (hashlib.sha1(b"x").hexdigest(), "SHA1"),
        (hashlib.sha224(b"x").hexdigest(), "SHA224"),
        (hashlib.sha256(b"x").hexdigest(), "SHA256"),
        (hashlib.sha384(b"x").hexdigest(), "SHA384"),
        (hashlib.sha512(b"x").hexdigest(), "SHA512"),
        ("*2470C0C06DEE42FD1618BB99005ADCA2EC9D1E19", "MySQL-SHA1"),
        ("$1$saltsalt$qjXMvbEw8oaL.CzflDugX/", "MD5-Crypt"),
        ("$2b$10$N9qo8uLOickgx2ZMRZoMyeIjZAgcfl7p92ldGxad68LJZdL17lhWy", "bcrypt"),
        ("$2a$12$" + "a" * 53, "bcrypt"),
        ("$5$rounds=10000$abcdefgh$" + "b" * 43, "SHA-256-Crypt"),
        ("$6$abcdefgh$" + "c" * 86, "SHA-512-Crypt"),
        ("$pbkdf2$10000$TmFDbA==$c2VjcmV0a2V5", "PBKDF2"),
        ("$argon2i$v=19$m=4096,t=3,p=1$c2FsdHNhbHQ$aGFzaGhhc2g", "Argon2"),
        ("$scrypt$ln=16,r=8,p=1$c2FsdA$a2V5", "scrypt"),
        ("$y$j9T$c2FsdA$a2V5", "yescrypt"),
        ("a" * 32 + ":" + "0123456789abcdef", "NetNTLMv2"),
        ("b" * 32 + "*001122334455*aabbccddeeff", "WPA-PMKID"),
    ],
)
def test_detects_known_shapes(value: str, family: str) -> None:
    result = detect_hash_type(value)
    assert result.family == family
    assert result.confidence >= 90


@pytest.mark.parametrize("value", ["", "   ", None, "not a hash", "abc123", "$9$nothing"])
def test_unmatched_input_is_unknown(value) -> None:
    assert detect_hash_type(value) == UNKNOWN
    assert UNKNOWN.to_dict() == {"family": "Unknown", "confidence": 0, "algorithmId": None}


def test_detection_ignores_case_and_whitespace() -> None:
    digest = hashlib.sha256(b"x").hexdigest().upper()
    result = detect_hash_type(f"  {digest}\n")
    assert result.family == "SHA256"
    assert result.algorithm_id == "sha256"


def test_md5_wins_over_ntlm_without_hint() -> None:
    ntlm = REGISTRY.compute("ntlm", "password")
    detector = HashFormatDetector()
    assert detector.detect(ntlm).family == "MD5"
    assert [match.family for match in detector.candidates(ntlm)] == ["MD5", "NTLM"]


@pytest.mark.parametrize("hint", ["ntlm", "NTLM", " Ntlm "])
def test_hint_selects_same_shape_family(hint: str) -> None:
    ntlm = REGISTRY.compute("ntlm", "password")
    result = detect_hash_type(ntlm, hint=hint)
    assert result.family == "NTLM"
    assert result.confidence == 60


def test_hint_that_does_not_match_is_ignored() -> None:
    digest = hashlib.sha1(b"x").hexdigest()
    assert detect_hash_type(digest, hint="bcrypt").family == "SHA1"


@pytest.mark.parametrize(
    "algorithm_id, options",
    [
        ("md5-crypt", HashOptions()),
        ("sha256-crypt", HashOptions(iterations=6000)),
        ("sha512-crypt", HashOptions()),
        ("bcrypt", HashOptions(cost_factor=4)),
        ("pbkdf2", HashOptions(salt="NaCl", iterations=1000, output_format="standard")),
        ("pbkdf2", HashOptions(iterations=1000, output_format="standard")),
        ("argon2", HashOptions(iterations=1)),
        ("scrypt", HashOptions(cost_factor=4)),
        ("yescrypt", HashOptions(iterations=1)),
        ("mysql-sha1", HashOptions()),
        ("netntlmv2", HashOptions()),
        ("wpa-pmkid", HashOptions()),
        ("sha512", HashOptions()),
    ],
)
def test_generated_hashes_round_trip(algorithm_id: str, options: HashOptions) -> None:
    digest = REGISTRY.compute(algorithm_id, "round trip", options)
    result = detect_hash_type(digest)
    assert result.algorithm_id == algorithm_id
    assert result.confidence >= 90
